"""Gating endpoints: execution mode, authority contracts, violation checks, baseline payloads, phases."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from core.dependencies import get_db_session, require_admin
from gating.baseline import build_baseline_response
from gating.contracts import get_phase_authority_contract, get_phase_refusal_message, parse_phase
from gating.errors import PhaseDemotionError, UnknownPhaseError, UnknownSurfaceError
from gating.execution_mode import explain_execution_mode, fetch_user_execution_mode, is_ai_allowed
from gating.phases import classify_phase
from gating.ratchet import PhaseRatchetService
from gating.types import AIInsightPhase, PhaseCounters
from gating.validator import validate_response
from ops.ops_events import log_execution_mode

router = APIRouter(prefix="/gating", tags=["gating"])


class ViolationCheckRequest(BaseModel):
    text: str
    phase: str


class PhaseRequest(BaseModel):
    counters: PhaseCounters = Field(default_factory=PhaseCounters)
    tenant_id: Optional[str] = None


class DemotionRequest(BaseModel):
    to_phase: str
    actor: str
    reason: str


class CeilingLiftRequest(BaseModel):
    actor: str
    reason: str


@router.post("/execution-mode")
async def post_execution_mode(status: Any = Body(None)) -> dict:
    """Derive the mode for an arbitrary status payload. Anything malformed resolves to baseline."""
    mode, reason = explain_execution_mode(status)
    log_execution_mode(None, mode.value, reason)
    return {"execution_mode": mode.value, "reason": reason, "ai_allowed": is_ai_allowed(mode)}


@router.get("/execution-mode/{tenant_id}")
async def get_tenant_execution_mode(tenant_id: str, session: AsyncSession = Depends(get_db_session)) -> dict:
    mode = await fetch_user_execution_mode(session, tenant_id)
    return {"tenant_id": tenant_id, "execution_mode": mode.value, "ai_allowed": is_ai_allowed(mode)}


@router.get("/contracts/{phase}")
async def get_contract(phase: str) -> dict:
    try:
        contract = get_phase_authority_contract(phase)
    except UnknownPhaseError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return contract.to_dict()


@router.post("/violations")
async def post_violations(body: ViolationCheckRequest) -> dict:
    try:
        result = validate_response(body.text, body.phase)
    except UnknownPhaseError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return result.to_dict()


@router.get("/baseline/{surface}")
async def get_baseline(surface: str) -> dict:
    try:
        return build_baseline_response(surface)
    except UnknownSurfaceError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.post("/phase")
async def post_phase(body: PhaseRequest, session: AsyncSession = Depends(get_db_session)) -> dict:
    """Classify counters; with a tenant_id the recorded high-water mark is applied and updated."""
    if body.tenant_id:
        phase, metadata = await PhaseRatchetService(session).resolve(body.tenant_id, body.counters)
    else:
        phase, metadata = classify_phase(body.counters)
    return {
        "phase": phase.value,
        "metadata": metadata.to_dict(),
        "refusal_message": get_phase_refusal_message(phase, metadata) if phase == AIInsightPhase.LOCKED else None,
    }


@router.post("/phase/{tenant_id}/demote")
async def post_phase_demote(
    tenant_id: str,
    body: DemotionRequest,
    session: AsyncSession = Depends(get_db_session),
    _admin: str = Depends(require_admin),
) -> dict:
    """Audited demotion; the only way a tenant's phase moves down."""
    try:
        parse_phase(body.to_phase)
        override = await PhaseRatchetService(session).demote(
            tenant_id, body.to_phase, actor=body.actor, reason=body.reason
        )
    except UnknownPhaseError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except PhaseDemotionError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return {
        "tenant_id": tenant_id,
        "action": override.action,
        "from_phase": override.from_phase,
        "to_phase": override.to_phase,
        "actor": override.actor,
        "reason": override.reason,
        "created_at": override.created_at.isoformat(),
    }


@router.post("/phase/{tenant_id}/lift-ceiling")
async def post_phase_lift_ceiling(
    tenant_id: str,
    body: CeilingLiftRequest,
    session: AsyncSession = Depends(get_db_session),
    _admin: str = Depends(require_admin),
) -> dict:
    """Audited removal of the cap a demotion left; recomputation may climb again afterwards."""
    try:
        override = await PhaseRatchetService(session).lift_ceiling(tenant_id, actor=body.actor, reason=body.reason)
    except PhaseDemotionError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return {
        "tenant_id": tenant_id,
        "action": override.action,
        "lifted_ceiling": override.from_phase,
        "phase": override.to_phase,
        "actor": override.actor,
        "reason": override.reason,
        "created_at": override.created_at.isoformat(),
    }
