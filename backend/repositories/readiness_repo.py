from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gating.types import ReadinessVerdict
from models.integration_readiness import IntegrationReadiness
from .base import BaseRepository


class ReadinessRepository(BaseRepository[IntegrationReadiness]):
    """Append-only store of readiness verdicts. Rows are never updated."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def append(self, verdict: ReadinessVerdict) -> IntegrationReadiness:
        row = IntegrationReadiness(
            integration_key=verdict.integration_key,
            eligible=verdict.eligible,
            reason=verdict.reason,
            evaluated_at=verdict.evaluated_at,
        )
        await self.add(row)
        return row

    async def get_latest(self, integration_key: str) -> Optional[IntegrationReadiness]:
        stmt = (
            select(IntegrationReadiness)
            .where(IntegrationReadiness.integration_key == integration_key)
            .order_by(IntegrationReadiness.evaluated_at.desc(), IntegrationReadiness.id.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_history(self, integration_key: str, limit: int = 100) -> List[IntegrationReadiness]:
        """Newest first."""
        stmt = (
            select(IntegrationReadiness)
            .where(IntegrationReadiness.integration_key == integration_key)
            .order_by(IntegrationReadiness.evaluated_at.desc(), IntegrationReadiness.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
