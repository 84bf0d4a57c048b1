"""
Integration: admin maturity promotion (connected -> observing) outcome codes.
"""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

_backend = Path(__file__).resolve().parent.parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

import pytest

from gating.types import ReadinessVerdict
from models.integration_maturity import MATURITY_ACTIVE, MATURITY_CONNECTED, MATURITY_OBSERVING
from ops.ops_events import RecordingObserver
from readiness import promotion
from readiness.promotion import promote_integration
from repositories.maturity_repo import MaturityRepository
from repositories.readiness_repo import ReadinessRepository

EVALUATED = datetime(2026, 4, 1, 6, 0, tzinfo=timezone.utc)
PROMOTED_AT = datetime(2026, 4, 2, 12, 30, tzinfo=timezone.utc)
ELIGIBLE_REASON = "Eligible: 14 events over 9 days with data types: messages"


async def _verdict(session, key: str, eligible: bool, reason: str, at: datetime = EVALUATED) -> None:
    await ReadinessRepository(session).append(ReadinessVerdict(key, eligible, reason, at))


async def _promote(db, key: str, observer=None):
    async with db.session() as session:
        return await promote_integration(session, key, actor="ops@example.com", observer=observer, clock=lambda: PROMOTED_AT)


@pytest.mark.asyncio
async def test_promotes_connected_eligible_integration(db) -> None:
    async with db.session() as session:
        await _verdict(session, "slack", True, ELIGIBLE_REASON)
        await MaturityRepository(session).set_state("slack", MATURITY_CONNECTED, updated_at=EVALUATED)

    observer = RecordingObserver()
    result = await _promote(db, "slack", observer)
    assert result.success is True
    assert result.code == promotion.PROMOTED
    assert result.http_status == 200
    expected_reason = f"Manual promotion to observing at {PROMOTED_AT.isoformat()}. Readiness: {ELIGIBLE_REASON}"
    assert result.details["promotion_reason"] == expected_reason
    assert result.to_dict()["new_state"] == MATURITY_OBSERVING
    assert observer.of_type("maturity_promoted") == [
        {"integration_key": "slack", "status": "PROMOTED", "actor": "ops@example.com"}
    ]

    async with db.session() as session:
        row = await MaturityRepository(session).get_latest("slack")
        assert row.maturity_state == MATURITY_OBSERVING
        assert row.reason == expected_reason


@pytest.mark.asyncio
async def test_second_promotion_is_idempotent(db) -> None:
    async with db.session() as session:
        await _verdict(session, "slack", True, ELIGIBLE_REASON)
        await MaturityRepository(session).set_state("slack", MATURITY_CONNECTED, updated_at=EVALUATED)
    assert (await _promote(db, "slack")).code == promotion.PROMOTED
    again = await _promote(db, "slack")
    assert again.success is True
    assert again.code == promotion.ALREADY_OBSERVING


@pytest.mark.asyncio
async def test_blank_key_is_bad_request(db) -> None:
    result = await _promote(db, "   ")
    assert result.code == promotion.BAD_REQUEST
    assert result.http_status == 400


@pytest.mark.asyncio
async def test_requires_a_readiness_verdict(db) -> None:
    async with db.session() as session:
        await MaturityRepository(session).set_state("slack", MATURITY_CONNECTED, updated_at=EVALUATED)
    assert (await _promote(db, "slack")).code == promotion.NO_READINESS


@pytest.mark.asyncio
async def test_latest_verdict_must_be_eligible(db) -> None:
    async with db.session() as session:
        await _verdict(session, "slack", True, ELIGIBLE_REASON, EVALUATED)
        await _verdict(session, "slack", False, "Event count (4) below threshold (10)", PROMOTED_AT)
        await MaturityRepository(session).set_state("slack", MATURITY_CONNECTED, updated_at=EVALUATED)
    result = await _promote(db, "slack")
    assert result.code == promotion.NOT_ELIGIBLE
    assert result.details["readiness_reason"] == "Event count (4) below threshold (10)"


@pytest.mark.asyncio
async def test_requires_a_maturity_record(db) -> None:
    async with db.session() as session:
        await _verdict(session, "slack", True, ELIGIBLE_REASON)
    assert (await _promote(db, "slack")).code == promotion.NO_MATURITY


@pytest.mark.asyncio
async def test_only_connected_can_be_promoted(db) -> None:
    async with db.session() as session:
        await _verdict(session, "slack", True, ELIGIBLE_REASON)
        await MaturityRepository(session).set_state("slack", MATURITY_ACTIVE, updated_at=EVALUATED)
    result = await _promote(db, "slack")
    assert result.code == promotion.INVALID_STATE
    assert result.details["current_state"] == MATURITY_ACTIVE


@pytest.mark.asyncio
async def test_transition_is_compare_and_set(db) -> None:
    async with db.session() as session:
        await MaturityRepository(session).set_state("slack", MATURITY_OBSERVING, updated_at=EVALUATED)
    async with db.session() as session:
        moved = await MaturityRepository(session).transition(
            "slack", MATURITY_CONNECTED, MATURITY_OBSERVING, "race", PROMOTED_AT
        )
    assert moved == 0
