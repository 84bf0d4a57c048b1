"""Repository layer for DB access only (CRUD + simple queries).

Repositories are pure DB access - no business logic. All repositories accept
AsyncSession explicitly and use the DatabaseManager from core/database.py.
"""

from .base import BaseRepository
from .fusion_score_repo import FusionScoreRepository
from .integration_event_repo import IntegrationEventRepository
from .maturity_repo import MaturityRepository
from .phase_repo import PhaseStateRepository
from .readiness_repo import ReadinessRepository
from .telemetry_repo import TelemetryRepository

__all__ = [
    "BaseRepository",
    "FusionScoreRepository",
    "IntegrationEventRepository",
    "MaturityRepository",
    "PhaseStateRepository",
    "ReadinessRepository",
    "TelemetryRepository",
]
