from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class IntegrationReadiness(Base):
    """Append-only readiness verdict; one row per integration per evaluation cycle."""

    __tablename__ = "integration_readiness"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    integration_key: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    eligible: Mapped[bool] = mapped_column(Boolean, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    evaluated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
