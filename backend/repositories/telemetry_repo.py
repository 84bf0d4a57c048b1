from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.telemetry_metric import TelemetryMetric
from .base import BaseRepository


class TelemetryRepository(BaseRepository[TelemetryMetric]):
    """Repository for the secondary telemetry signal store."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def has_signal(self, integration_key: str) -> bool:
        """True if any telemetry row's source_app fuzzily matches the key (case-insensitive)."""
        stmt = (
            select(TelemetryMetric.id)
            .where(TelemetryMetric.source_app.ilike(f"%{integration_key}%"))
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.first() is not None
