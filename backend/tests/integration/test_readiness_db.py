"""
Integration: readiness evaluation against SQLite through the repositories.
"""

from __future__ import annotations

import json
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

_backend = Path(__file__).resolve().parent.parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

import pytest
from sqlalchemy import text

from core.config import Settings
from models.integration_maturity import MATURITY_CONNECTED, MATURITY_OBSERVING
from models.telemetry_metric import TelemetryMetric
from ops.ops_events import RecordingObserver
from readiness.evaluator import evaluate_all_readiness, sql_readiness_evaluator
from repositories.integration_event_repo import IntegrationEventRepository
from repositories.maturity_repo import MaturityRepository
from repositories.readiness_repo import ReadinessRepository
from runner.readiness_runner import READINESS_RESULT_JSON, run_readiness_evaluation

T0 = datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)


async def _seed_events(session, service: str, count: int, span_days: int, event_type: str = "message_sent") -> None:
    repo = IntegrationEventRepository(session)
    for i in range(count):
        offset = timedelta(days=span_days) if i == count - 1 else timedelta(hours=i)
        await repo.add_event(service, event_type, T0 + offset)


@pytest.mark.asyncio
@pytest.mark.filterwarnings("error::sqlalchemy.exc.SAWarning")
async def test_events_are_listed_in_time_order(db) -> None:
    async with db.session() as session:
        repo = IntegrationEventRepository(session)
        await repo.add_event("slack", "late", T0 + timedelta(days=2))
        await repo.add_event("slack", "early", T0)
        await repo.add_event("zoom", "meeting_started", T0)
    async with db.session() as session:
        repo = IntegrationEventRepository(session)
        assert [e.event_type for e in await repo.list_events("slack")] == ["early", "late"]
        assert await repo.list_integration_keys() == ["slack", "zoom"]


@pytest.mark.asyncio
async def test_batch_persists_one_verdict_per_key_per_run(db) -> None:
    async with db.session() as session:
        await _seed_events(session, "slack", 12, 9)
        await _seed_events(session, "zoom", 3, 1, "meeting_started")
        await MaturityRepository(session).set_state("asana", MATURITY_CONNECTED, "connected by admin", updated_at=T0)

    for _ in range(2):
        async with db.session() as session:
            result = await evaluate_all_readiness(sql_readiness_evaluator(session, Settings()))
        assert result["evaluated"] == 3
        by_key = {r["integration_key"]: r for r in result["results"]}
        assert by_key["slack"]["eligible"] is True
        assert by_key["slack"]["reason"] == "Eligible: 12 events over 9 days with data types: messages"
        assert by_key["zoom"]["reason"] == (
            "Event count (3) below threshold (10); Time span (1 days) below threshold (7 days)"
        )
        assert by_key["asana"]["eligible"] is False

    async with db.session() as session:
        repo = ReadinessRepository(session)
        for key in ("slack", "zoom", "asana"):
            history = await repo.list_history(key)
            assert len(history) == 2
            assert history[0].reason == history[1].reason
        latest = await repo.get_latest("slack")
        assert latest is not None and latest.eligible is True


@pytest.mark.asyncio
async def test_telemetry_row_tags_integration(db) -> None:
    async with db.session() as session:
        await _seed_events(session, "teams", 10, 7, "file_uploaded")
        session.add(TelemetryMetric(source_app="MS-Teams Connector", metric_name="latency_ms", metric_value=12.0, recorded_at=T0))

    async with db.session() as session:
        verdicts = await sql_readiness_evaluator(session, Settings()).evaluate_all()
    assert len(verdicts) == 1
    assert verdicts[0].eligible is True
    assert verdicts[0].reason == "Eligible: 10 events over 7 days with data types: telemetry"


@pytest.mark.asyncio
async def test_thresholds_come_from_settings(db) -> None:
    async with db.session() as session:
        await _seed_events(session, "slack", 3, 2)
    settings = Settings(readiness_min_event_count=3, readiness_min_time_span_days=2)
    async with db.session() as session:
        verdicts = await sql_readiness_evaluator(session, settings).evaluate_all()
    assert verdicts[0].eligible is True


@pytest.mark.asyncio
async def test_runner_writes_report_and_dry_run_skips_persistence(db, tmp_path: Path) -> None:
    async with db.session() as session:
        await _seed_events(session, "slack", 12, 9)

    async with db.session() as session:
        summary = await run_readiness_evaluation(session, settings=Settings(), dry_run=True, reports_dir=tmp_path)
    assert summary["evaluated"] == 1
    assert summary["thresholds_used"] == {"min_event_count": 10, "min_time_span_days": 7, "min_data_types": 1}
    written = json.loads((tmp_path / READINESS_RESULT_JSON).read_text(encoding="utf-8"))
    assert written["results"][0]["integration_key"] == "slack"

    async with db.session() as session:
        assert await ReadinessRepository(session).list_history("slack") == []
        await run_readiness_evaluation(session, settings=Settings())
    async with db.session() as session:
        assert len(await ReadinessRepository(session).list_history("slack")) == 1


@pytest.mark.asyncio
async def test_evaluation_never_changes_maturity(db) -> None:
    async with db.session() as session:
        await _seed_events(session, "slack", 12, 9)
        await MaturityRepository(session).set_state("slack", MATURITY_CONNECTED, updated_at=T0)
    async with db.session() as session:
        await evaluate_all_readiness(sql_readiness_evaluator(session, Settings()))
    async with db.session() as session:
        row = await MaturityRepository(session).get_latest("slack")
        assert row.maturity_state == MATURITY_CONNECTED


@pytest.mark.asyncio
async def test_rejected_verdict_write_keeps_the_other_keys(db) -> None:
    async with db.session() as session:
        for key in ("aaa", "bad", "zzz"):
            await _seed_events(session, key, 12, 9)
        await session.execute(
            text(
                "CREATE TRIGGER reject_bad_verdict BEFORE INSERT ON integration_readiness "
                "WHEN NEW.integration_key = 'bad' "
                "BEGIN SELECT RAISE(ABORT, 'verdict rejected'); END"
            )
        )

    observer = RecordingObserver()
    async with db.session() as session:
        result = await evaluate_all_readiness(sql_readiness_evaluator(session, Settings(), observer=observer))
    assert result["evaluated"] == 3
    assert [r["eligible"] for r in result["results"]] == [True, True, True]
    errors = observer.of_type("readiness_error")
    assert [(e["integration_key"], e["stage"]) for e in errors] == [("bad", "persist")]

    async with db.session() as session:
        repo = ReadinessRepository(session)
        assert len(await repo.list_history("aaa")) == 1
        assert await repo.list_history("bad") == []
        assert len(await repo.list_history("zzz")) == 1


@pytest.mark.asyncio
async def test_concurrent_batch_uses_a_session_per_call(db) -> None:
    async with db.session() as session:
        for i, key in enumerate(("asana", "jira", "slack", "teams", "zoom")):
            await _seed_events(session, key, 10 + i, 7 + i)
        await _seed_events(session, "notion", 2, 1)

    settings = Settings(readiness_max_concurrency=4)
    async with db.session() as session:
        result = await evaluate_all_readiness(sql_readiness_evaluator(session, settings, session_factory=db.session))
    assert [r["integration_key"] for r in result["results"]] == ["asana", "jira", "notion", "slack", "teams", "zoom"]
    assert [r["eligible"] for r in result["results"]] == [True, True, False, True, True, True]

    async with db.session() as session:
        repo = ReadinessRepository(session)
        for key in ("asana", "jira", "notion", "slack", "teams", "zoom"):
            assert len(await repo.list_history(key)) == 1


@pytest.mark.asyncio
@pytest.mark.filterwarnings("error::sqlalchemy.exc.SAWarning")
async def test_connected_keys_follow_the_latest_maturity_row(db) -> None:
    async with db.session() as session:
        repo = MaturityRepository(session)
        await repo.set_state("slack", MATURITY_CONNECTED, updated_at=T0)
        await repo.set_state("slack", MATURITY_OBSERVING, updated_at=T0 + timedelta(days=1))
        await repo.set_state("zoom", MATURITY_CONNECTED, updated_at=T0)

    async with db.session() as session:
        repo = MaturityRepository(session)
        assert await repo.list_keys_in_state(MATURITY_CONNECTED) == ["zoom"]
        assert await repo.list_keys_in_state(MATURITY_OBSERVING) == ["slack"]
        verdicts = await sql_readiness_evaluator(session, Settings(), record=False).evaluate_all()
    assert [v.integration_key for v in verdicts] == ["zoom"]
