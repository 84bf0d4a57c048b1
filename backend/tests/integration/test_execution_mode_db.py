"""
Integration: tenant execution mode from the latest persisted fusion score.
"""

from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

_backend = Path(__file__).resolve().parent.parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

import pytest

from gating.execution_mode import derive_for_tenant, fetch_user_execution_mode
from gating.types import ExecutionMode
from ops.ops_events import RecordingObserver
from repositories.fusion_score_repo import FusionScoreRepository

T0 = datetime(2026, 5, 1, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_latest_computed_score_is_computed(db) -> None:
    async with db.session() as session:
        repo = FusionScoreRepository(session)
        await repo.add_score("tenant-a", 50.0, "baseline", calculated_at=T0)
        await repo.add_score("tenant-a", 71.0, "computed", calculated_at=T0 + timedelta(days=1))
    async with db.session() as session:
        assert await fetch_user_execution_mode(session, "tenant-a") == ExecutionMode.COMPUTED


@pytest.mark.asyncio
async def test_latest_baseline_score_is_baseline(db) -> None:
    async with db.session() as session:
        repo = FusionScoreRepository(session)
        await repo.add_score("tenant-a", 71.0, "computed", calculated_at=T0)
        await repo.add_score("tenant-a", 50.0, "baseline", calculated_at=T0 + timedelta(days=1))
    async with db.session() as session:
        assert await derive_for_tenant(session, "tenant-a") == ExecutionMode.BASELINE


@pytest.mark.asyncio
async def test_no_score_row_is_baseline(db) -> None:
    observer = RecordingObserver()
    async with db.session() as session:
        assert await fetch_user_execution_mode(session, "tenant-z", observer=observer) == ExecutionMode.BASELINE
    assert observer.of_type("execution_mode_derived")[0]["reason"] == "no fusion score found"


@pytest.mark.asyncio
@pytest.mark.parametrize("tenant_id", [None, "", "   "])
async def test_blank_tenant_is_baseline(db, tenant_id) -> None:
    async with db.session() as session:
        assert await fetch_user_execution_mode(session, tenant_id) == ExecutionMode.BASELINE


@pytest.mark.asyncio
async def test_missing_session_is_baseline() -> None:
    assert await fetch_user_execution_mode(None, "tenant-a") == ExecutionMode.BASELINE


@pytest.mark.asyncio
async def test_query_error_is_baseline() -> None:
    class _BrokenSession:
        async def execute(self, *args, **kwargs):
            raise ConnectionError("database unreachable")

    observer = RecordingObserver()
    mode = await fetch_user_execution_mode(_BrokenSession(), "tenant-a", observer=observer)
    assert mode == ExecutionMode.BASELINE
    assert "database unreachable" in observer.of_type("execution_mode_derived")[0]["reason"]
