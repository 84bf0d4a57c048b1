from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

MATURITY_CONNECTED = "connected"
MATURITY_OBSERVING = "observing"
MATURITY_ACTIVE = "active"


class IntegrationMaturity(Base):
    """Lifecycle stage of an integration (connected -> observing -> active)."""

    __tablename__ = "integration_maturity"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    integration_key: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    maturity_state: Mapped[str] = mapped_column(String(32), nullable=False, default=MATURITY_CONNECTED)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
