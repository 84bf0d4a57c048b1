from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class TenantPhaseState(Base):
    """High-water mark of a tenant's authority phase.

    Recomputation only raises ``phase``, and never above ``ceiling``. An audited
    demotion sets both; only an audited lift clears the ceiling.
    """

    __tablename__ = "tenant_phase_state"

    tenant_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    phase: Mapped[str] = mapped_column(String(32), nullable=False)
    ceiling: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class PhaseOverride(Base):
    """Audit row for an explicit demotion or ceiling lift."""

    __tablename__ = "phase_overrides"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(16), nullable=False, default="demote")
    from_phase: Mapped[str] = mapped_column(String(32), nullable=False)
    to_phase: Mapped[str] = mapped_column(String(32), nullable=False)
    actor: Mapped[str] = mapped_column(String(100), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
