"""
Global execution switch: may any generative call occur for this request.

FAIL-CLOSED. Guards are evaluated in order and the first failure returns
baseline. Missing, malformed, or unreadable input always resolves to baseline;
computed is returned only for a fully qualified status. The mode is derived per
request and never cached.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Tuple, Union

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from gating.types import ExecutionMode, ScoreOrigin, SystemStatus
from ops.ops_events import GateObserver, log_execution_mode

StatusInput = Union[SystemStatus, Mapping[str, Any], None]


def _coerce_status(status: Any) -> Optional[SystemStatus]:
    if status is None:
        return None
    if isinstance(status, SystemStatus):
        return status
    if isinstance(status, Mapping):
        try:
            return SystemStatus.model_validate(dict(status))
        except ValidationError:
            return None
    return None


def explain_execution_mode(status: StatusInput) -> Tuple[ExecutionMode, str]:
    """(mode, reason) for a status. Pure; reasons name the first failing guard."""
    resolved = _coerce_status(status)
    if resolved is None:
        return ExecutionMode.BASELINE, "system_status missing or invalid"
    if resolved.score_origin != ScoreOrigin.COMPUTED:
        return ExecutionMode.BASELINE, "score_origin is not computed"
    if resolved.has_efficiency_metrics is not True:
        return ExecutionMode.BASELINE, "has_efficiency_metrics is false"
    if not resolved.has_active_integration():
        return ExecutionMode.BASELINE, "no active integrations"
    return ExecutionMode.COMPUTED, "all conditions met"


def derive_execution_mode(status: StatusInput, *, observer: Optional[GateObserver] = None) -> ExecutionMode:
    mode, reason = explain_execution_mode(status)
    log_execution_mode(observer, mode.value, reason)
    return mode


def is_ai_allowed(mode: Union[ExecutionMode, str, None]) -> bool:
    return mode == ExecutionMode.COMPUTED


async def fetch_user_execution_mode(
    session: Optional[AsyncSession],
    tenant_id: Optional[str],
    *,
    observer: Optional[GateObserver] = None,
) -> ExecutionMode:
    """Database-backed variant: latest persisted score_origin for the tenant.

    Blank tenant id, missing session, query error, or no score row -> baseline.
    """
    if not tenant_id or not str(tenant_id).strip():
        log_execution_mode(observer, ExecutionMode.BASELINE.value, "no tenant id provided")
        return ExecutionMode.BASELINE
    if session is None:
        log_execution_mode(observer, ExecutionMode.BASELINE.value, "no session", tenant_id=tenant_id)
        return ExecutionMode.BASELINE

    from repositories.fusion_score_repo import FusionScoreRepository

    try:
        origin = await FusionScoreRepository(session).get_latest_score_origin(str(tenant_id))
    except Exception as e:  # noqa: BLE001
        log_execution_mode(
            observer, ExecutionMode.BASELINE.value, f"score lookup failed: {e!s}", tenant_id=tenant_id
        )
        return ExecutionMode.BASELINE

    if origin is None:
        log_execution_mode(observer, ExecutionMode.BASELINE.value, "no fusion score found", tenant_id=tenant_id)
        return ExecutionMode.BASELINE
    if origin != ScoreOrigin.COMPUTED.value:
        log_execution_mode(observer, ExecutionMode.BASELINE.value, "score_origin is not computed", tenant_id=tenant_id)
        return ExecutionMode.BASELINE

    log_execution_mode(observer, ExecutionMode.COMPUTED.value, "score_origin is computed", tenant_id=tenant_id)
    return ExecutionMode.COMPUTED


# Aliases matching the resolver's contract names
derive = derive_execution_mode
derive_for_tenant = fetch_user_execution_mode
