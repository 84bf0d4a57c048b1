from __future__ import annotations

from datetime import datetime
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.integration_event import IntegrationEvent
from gating.types import EventRecord
from .base import BaseRepository


class IntegrationEventRepository(BaseRepository[IntegrationEvent]):
    """Read side of the integration event log (the ingestion layer writes it)."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def list_events(self, integration_key: str) -> List[EventRecord]:
        """All events for the integration ordered by created_at ascending (no upper bound)."""
        stmt = (
            select(IntegrationEvent.event_type, IntegrationEvent.created_at)
            .where(IntegrationEvent.service_name == integration_key)
            .order_by(IntegrationEvent.created_at, IntegrationEvent.id)
        )
        result = await self.session.execute(stmt)
        return [EventRecord(event_type=row[0] or "", created_at=row[1]) for row in result.all()]

    async def list_integration_keys(self) -> List[str]:
        """Distinct non-empty service names observed in the event log."""
        stmt = select(IntegrationEvent.service_name).where(IntegrationEvent.service_name.isnot(None)).distinct()
        result = await self.session.execute(stmt)
        return sorted(k for k in result.scalars().all() if k)

    async def add_event(self, service_name: str, event_type: str, created_at: datetime) -> IntegrationEvent:
        event = IntegrationEvent(service_name=service_name, event_type=event_type, created_at=created_at)
        await self.add(event)
        return event
