from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class FusionScore(Base):
    """Persisted Global Fusion Score; score_origin is the execution-mode input."""

    __tablename__ = "fusion_scores"
    __table_args__ = (Index("ix_fusion_scores_user_calculated", "user_id", "calculated_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False, default=50.0)
    score_origin: Mapped[str] = mapped_column(String(16), nullable=False, default="baseline")
    calculated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
