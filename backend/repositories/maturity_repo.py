from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models.integration_maturity import MATURITY_CONNECTED, IntegrationMaturity
from .base import BaseRepository


class MaturityRepository(BaseRepository[IntegrationMaturity]):
    """Repository for IntegrationMaturity rows."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def list_keys_in_state(self, maturity_state: str = MATURITY_CONNECTED) -> List[str]:
        """Keys whose latest maturity row is in maturity_state; older rows are history."""
        ranked = select(
            IntegrationMaturity.integration_key,
            IntegrationMaturity.maturity_state,
            func.row_number()
            .over(
                partition_by=IntegrationMaturity.integration_key,
                order_by=(IntegrationMaturity.updated_at.desc(), IntegrationMaturity.id.desc()),
            )
            .label("row_rank"),
        ).subquery()
        stmt = select(ranked.c.integration_key).where(ranked.c.row_rank == 1, ranked.c.maturity_state == maturity_state)
        result = await self.session.execute(stmt)
        return sorted(k for k in result.scalars().all() if k)

    async def get_latest(self, integration_key: str) -> Optional[IntegrationMaturity]:
        """Most recently updated maturity row for the integration, or None."""
        stmt = (
            select(IntegrationMaturity)
            .where(IntegrationMaturity.integration_key == integration_key)
            .order_by(IntegrationMaturity.updated_at.desc(), IntegrationMaturity.id.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def set_state(
        self,
        integration_key: str,
        maturity_state: str,
        reason: Optional[str] = None,
        *,
        updated_at: Optional[datetime] = None,
    ) -> IntegrationMaturity:
        """Insert a maturity row (used by seeding and tests; promotion uses transition())."""
        row = IntegrationMaturity(
            integration_key=integration_key,
            maturity_state=maturity_state,
            reason=reason,
            updated_at=updated_at or datetime.now(timezone.utc),
        )
        await self.add(row)
        return row

    async def transition(
        self,
        integration_key: str,
        from_state: str,
        to_state: str,
        reason: str,
        updated_at: datetime,
        *,
        row_id: Optional[int] = None,
    ) -> int:
        """Compare-and-set state change. Returns number of rows moved (0 means a concurrent change won).

        row_id limits the change to that row (the one read as latest).
        """
        stmt = (
            update(IntegrationMaturity)
            .where(IntegrationMaturity.integration_key == integration_key)
            .where(IntegrationMaturity.maturity_state == from_state)
        )
        if row_id is not None:
            stmt = stmt.where(IntegrationMaturity.id == row_id)
        stmt = stmt.values(maturity_state=to_state, reason=reason, updated_at=updated_at)
        result = await self.session.execute(stmt)
        return int(result.rowcount or 0)
