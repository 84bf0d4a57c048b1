"""Readiness endpoints: batch evaluation, verdict history, admin promotion."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings
from core.database import get_database_manager
from core.dependencies import get_app_settings, get_db_session, require_admin
from readiness.promotion import promote_integration
from repositories.readiness_repo import ReadinessRepository
from runner.readiness_runner import run_readiness_evaluation

router = APIRouter(prefix="/readiness", tags=["readiness"])


@router.post("/evaluate")
async def post_evaluate(
    dry_run: bool = Query(False),
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
) -> dict:
    """Evaluate every integration once; one appended verdict per key."""
    return await run_readiness_evaluation(
        session,
        settings=settings,
        dry_run=dry_run,
        session_factory=get_database_manager().session,
    )


@router.get("/{integration_key}/history")
async def get_history(
    integration_key: str,
    limit: int = Query(100, ge=1, le=500),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    rows = await ReadinessRepository(session).list_history(integration_key, limit=limit)
    return {
        "integration_key": integration_key,
        "rows": [
            {
                "id": r.id,
                "eligible": r.eligible,
                "reason": r.reason,
                "evaluated_at": r.evaluated_at.isoformat(),
            }
            for r in rows
        ],
    }


@router.post("/{integration_key}/promote")
async def post_promote(
    integration_key: str,
    session: AsyncSession = Depends(get_db_session),
    actor: str = Depends(require_admin),
) -> JSONResponse:
    result = await promote_integration(session, integration_key, actor=actor)
    return JSONResponse(status_code=result.http_status, content=result.to_dict())
