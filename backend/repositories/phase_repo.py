from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.phase_state import PhaseOverride, TenantPhaseState
from .base import BaseRepository

OVERRIDE_DEMOTE = "demote"
OVERRIDE_LIFT_CEILING = "lift_ceiling"


class PhaseStateRepository(BaseRepository[TenantPhaseState]):
    """Ratchet high-water marks, demotion ceilings, and the override audit trail."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_state(self, tenant_id: str) -> Optional[TenantPhaseState]:
        return await self.get_by_id(TenantPhaseState, tenant_id)

    async def get_phase(self, tenant_id: str) -> Optional[str]:
        row = await self.get_state(tenant_id)
        return row.phase if row is not None else None

    async def set_phase(self, tenant_id: str, phase: str, updated_at: datetime) -> TenantPhaseState:
        """Write the high-water mark; an existing ceiling is left untouched."""
        row = await self.get_state(tenant_id)
        if row is None:
            row = TenantPhaseState(tenant_id=tenant_id, phase=phase, updated_at=updated_at)
            await self.add(row)
        else:
            row.phase = phase
            row.updated_at = updated_at
            await self.session.flush()
        return row

    async def set_ceiling(self, tenant_id: str, ceiling: Optional[str], updated_at: datetime) -> TenantPhaseState:
        """Set (or clear, with None) the cap recomputation may not exceed."""
        row = await self.get_state(tenant_id)
        if row is None:
            raise LookupError(f"No phase state for tenant {tenant_id!r}")
        row.ceiling = ceiling
        row.updated_at = updated_at
        await self.session.flush()
        return row

    async def add_override(
        self,
        tenant_id: str,
        from_phase: str,
        to_phase: str,
        actor: str,
        reason: str,
        created_at: datetime,
        action: str = OVERRIDE_DEMOTE,
    ) -> PhaseOverride:
        row = PhaseOverride(
            tenant_id=tenant_id,
            action=action,
            from_phase=from_phase,
            to_phase=to_phase,
            actor=actor,
            reason=reason,
            created_at=created_at,
        )
        return await self.add(row)

    async def list_overrides(self, tenant_id: str) -> List[PhaseOverride]:
        stmt = (
            select(PhaseOverride)
            .where(PhaseOverride.tenant_id == tenant_id)
            .order_by(PhaseOverride.created_at, PhaseOverride.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
