"""
Admin-only maturity promotion: connected -> observing, one integration at a time.

Consumes the latest readiness verdict; never evaluates readiness itself and is
never invoked automatically. Re-promoting an observing integration is a no-op success.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from models.integration_maturity import MATURITY_CONNECTED, MATURITY_OBSERVING
from ops.ops_events import GateObserver, log_maturity_promotion
from repositories.maturity_repo import MaturityRepository
from repositories.readiness_repo import ReadinessRepository

BAD_REQUEST = "BAD_REQUEST"
NO_READINESS = "NO_READINESS"
NOT_ELIGIBLE = "NOT_ELIGIBLE"
NO_MATURITY = "NO_MATURITY"
ALREADY_OBSERVING = "ALREADY_OBSERVING"
INVALID_STATE = "INVALID_STATE"
PROMOTION_CONFLICT = "PROMOTION_CONFLICT"
PROMOTED = "PROMOTED"

# Outcome code -> HTTP status used by the admin route
HTTP_STATUS: Dict[str, int] = {
    BAD_REQUEST: 400,
    NO_READINESS: 400,
    NOT_ELIGIBLE: 400,
    NO_MATURITY: 400,
    INVALID_STATE: 400,
    PROMOTION_CONFLICT: 409,
    ALREADY_OBSERVING: 200,
    PROMOTED: 200,
}


@dataclass
class PromotionResult:
    success: bool
    code: str
    message: str
    integration_key: str
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def http_status(self) -> int:
        return HTTP_STATUS.get(self.code, 500)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "code": self.code,
            "message": self.message,
            "integration_key": self.integration_key,
            **self.details,
        }


def promotion_reason(promoted_at: datetime, readiness_reason: Optional[str]) -> str:
    return f"Manual promotion to observing at {promoted_at.isoformat()}. Readiness: {readiness_reason or 'eligible'}"


async def promote_integration(
    session: AsyncSession,
    integration_key: str,
    *,
    actor: str = "admin",
    observer: Optional[GateObserver] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> PromotionResult:
    key = (integration_key or "").strip()
    if not key:
        return PromotionResult(False, BAD_REQUEST, "integration_key is required and must be a non-empty string", "")

    readiness = await ReadinessRepository(session).get_latest(key)
    if readiness is None:
        return PromotionResult(
            False,
            NO_READINESS,
            "No readiness evaluation found for this integration. Run readiness evaluation first.",
            key,
        )
    if not readiness.eligible:
        return PromotionResult(
            False,
            NOT_ELIGIBLE,
            "Latest readiness evaluation is not eligible for promotion.",
            key,
            {"readiness_reason": readiness.reason, "evaluated_at": readiness.evaluated_at.isoformat()},
        )

    maturity_repo = MaturityRepository(session)
    maturity = await maturity_repo.get_latest(key)
    if maturity is not None and maturity.maturity_state == MATURITY_OBSERVING:
        return PromotionResult(
            True,
            ALREADY_OBSERVING,
            "Integration is already in observing state. No changes made.",
            key,
            {"current_state": MATURITY_OBSERVING},
        )
    if maturity is None:
        return PromotionResult(
            False,
            NO_MATURITY,
            "No maturity record found for this integration. Integration must be in connected state first.",
            key,
        )
    if maturity.maturity_state != MATURITY_CONNECTED:
        return PromotionResult(
            False,
            INVALID_STATE,
            f"Cannot promote integration from '{maturity.maturity_state}' state. Must be in 'connected' state.",
            key,
            {"current_state": maturity.maturity_state},
        )

    now = (clock or (lambda: datetime.now(timezone.utc)))()
    reason = promotion_reason(now, readiness.reason)
    moved = await maturity_repo.transition(
        key, MATURITY_CONNECTED, MATURITY_OBSERVING, reason, now, row_id=maturity.id
    )
    if moved == 0:
        return PromotionResult(
            False,
            PROMOTION_CONFLICT,
            "Maturity record was no longer in connected state during promotion.",
            key,
        )

    log_maturity_promotion(observer, key, PROMOTED, actor)
    return PromotionResult(
        True,
        PROMOTED,
        "Integration successfully promoted from connected to observing.",
        key,
        {
            "previous_state": MATURITY_CONNECTED,
            "new_state": MATURITY_OBSERVING,
            "promotion_reason": reason,
            "promoted_at": now.isoformat(),
            "readiness": {
                "id": readiness.id,
                "reason": readiness.reason,
                "evaluated_at": readiness.evaluated_at.isoformat(),
            },
        },
    )
