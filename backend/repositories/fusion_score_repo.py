from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.fusion_score import FusionScore
from .base import BaseRepository


class FusionScoreRepository(BaseRepository[FusionScore]):
    """Repository for persisted fusion scores."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_latest_score_origin(self, user_id: str) -> Optional[str]:
        """score_origin of the most recent score for the user, or None if none exists."""
        stmt = (
            select(FusionScore.score_origin)
            .where(FusionScore.user_id == user_id)
            .order_by(FusionScore.calculated_at.desc(), FusionScore.id.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def add_score(
        self,
        user_id: str,
        score: float,
        score_origin: str,
        *,
        calculated_at: Optional[datetime] = None,
    ) -> FusionScore:
        row = FusionScore(
            user_id=user_id,
            score=score,
            score_origin=score_origin,
            calculated_at=calculated_at or datetime.now(timezone.utc),
        )
        await self.add(row)
        return row
