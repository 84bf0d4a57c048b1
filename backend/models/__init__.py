"""Canonical SQLAlchemy models for the authority gate.

Importing this package registers every table on ``Base.metadata``.
"""

from .base import Base
from .fusion_score import FusionScore
from .integration_event import IntegrationEvent
from .integration_maturity import IntegrationMaturity
from .integration_readiness import IntegrationReadiness
from .phase_state import PhaseOverride, TenantPhaseState
from .telemetry_metric import TelemetryMetric

__all__ = [
    "Base",
    "FusionScore",
    "IntegrationEvent",
    "IntegrationMaturity",
    "IntegrationReadiness",
    "PhaseOverride",
    "TenantPhaseState",
    "TelemetryMetric",
]
