"""
Gating domain types: execution mode, authority phases, system status, readiness records.

Phases are a StrEnum with a total order (locked < descriptive < diagnostic <
prescriptive < predictive); comparisons between phases use that order, never
string order.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictBool

# -----------------------------------------------------------------------------
# Execution mode
# -----------------------------------------------------------------------------


class ExecutionMode(StrEnum):
    """Binary gate: may any generative call occur for this request."""

    BASELINE = "baseline"
    COMPUTED = "computed"


class ScoreOrigin(StrEnum):
    BASELINE = "baseline"
    COMPUTED = "computed"


class SystemHealth(StrEnum):
    OBSERVING = "observing"
    ACTIVE = "active"


class MetricsState(StrEnum):
    OBSERVING = "observing"
    ACTIVE = "active"


# -----------------------------------------------------------------------------
# Authority phases
# -----------------------------------------------------------------------------


class AIInsightPhase(StrEnum):
    """Graduated capability level constraining what generated content may claim."""

    LOCKED = "locked"
    DESCRIPTIVE = "descriptive"
    DIAGNOSTIC = "diagnostic"
    PRESCRIPTIVE = "prescriptive"
    PREDICTIVE = "predictive"

    @property
    def rank(self) -> int:
        return PHASE_ORDER.index(self)

    def next_phase(self) -> Optional["AIInsightPhase"]:
        idx = self.rank + 1
        return PHASE_ORDER[idx] if idx < len(PHASE_ORDER) else None

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, AIInsightPhase):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, AIInsightPhase):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, AIInsightPhase):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, AIInsightPhase):
            return NotImplemented
        return self.rank >= other.rank


PHASE_ORDER: Tuple[AIInsightPhase, ...] = (
    AIInsightPhase.LOCKED,
    AIInsightPhase.DESCRIPTIVE,
    AIInsightPhase.DIAGNOSTIC,
    AIInsightPhase.PRESCRIPTIVE,
    AIInsightPhase.PREDICTIVE,
)


class InferenceDepth(StrEnum):
    NONE = "none"
    OBSERVATION = "observation"
    CAUSALITY = "causality"
    SUGGESTION = "suggestion"
    PREDICTION = "prediction"


@dataclass(frozen=True)
class AuthorityContract:
    """Per-phase vocabulary contract. Fixed configuration; never mutated at runtime."""

    phase: AIInsightPhase
    allowed_verbs: Tuple[str, ...]
    forbidden_verbs: Tuple[str, ...]
    response_template: str
    max_inference_depth: InferenceDepth

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "allowed_verbs": list(self.allowed_verbs),
            "forbidden_verbs": list(self.forbidden_verbs),
            "response_template": self.response_template,
            "max_inference_depth": self.max_inference_depth.value,
        }


# -----------------------------------------------------------------------------
# System status (per tenant, read-only here)
# -----------------------------------------------------------------------------


class ConnectedIntegration(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str
    metrics_state: MetricsState


class SystemStatus(BaseModel):
    """Resolved tenant status. Strict on the fields that can open the gate."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    global_fusion_score: float = 50.0
    score_origin: ScoreOrigin
    system_health: SystemHealth = SystemHealth.OBSERVING
    has_efficiency_metrics: StrictBool
    connected_integrations: List[ConnectedIntegration] = Field(default_factory=list)
    ai_insight_phase: Optional[AIInsightPhase] = None

    def has_active_integration(self) -> bool:
        return any(i.metrics_state == MetricsState.ACTIVE for i in self.connected_integrations)


# -----------------------------------------------------------------------------
# Phase classification
# -----------------------------------------------------------------------------


class PhaseCounters(BaseModel):
    """Maturity counters consulted by the phase classifier.

    Optional *_per_day fields carry recent accumulation rates; when absent the
    lifetime average (count / days since first integration) is used for ETAs.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    metrics_count: int = Field(0, ge=0)
    active_integrations_count: int = Field(0, ge=0)
    days_since_first_integration: int = Field(0, ge=0)
    successful_poll_cycles: int = Field(0, ge=0)
    fusion_score_recalculations: int = Field(0, ge=0)
    variance_stability_percent: float = Field(0.0, ge=0.0, le=100.0)
    system_health_stable_days: int = Field(0, ge=0)
    metrics_per_day: Optional[float] = Field(None, ge=0.0)
    poll_cycles_per_day: Optional[float] = Field(None, ge=0.0)
    recalculations_per_day: Optional[float] = Field(None, ge=0.0)


@dataclass
class PhaseMetadata:
    """Explains the current phase and what is needed for the next. Derived, never persisted."""

    current_phase: AIInsightPhase
    phase_reason: str
    next_phase: Optional[AIInsightPhase]
    next_phase_requirements: List[str]
    days_until_unlock_estimate: Optional[int]
    metrics_count: int
    active_integrations_count: int
    days_since_first_integration: int
    successful_poll_cycles: int
    fusion_score_recalculations: int
    variance_stability_percent: float
    system_health_stable_days: int

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["current_phase"] = self.current_phase.value
        out["next_phase"] = self.next_phase.value if self.next_phase else None
        return out


# -----------------------------------------------------------------------------
# Readiness
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class EventRecord:
    """One row of the integration event log as seen by readiness evaluation."""

    event_type: str
    created_at: datetime


@dataclass(frozen=True)
class IntegrationMetricSample:
    integration_key: str
    event_count: int
    first_event_at: Optional[datetime]
    last_event_at: Optional[datetime]
    time_span_days: int
    data_types: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class ReadinessVerdict:
    integration_key: str
    eligible: bool
    reason: str
    evaluated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "integration_key": self.integration_key,
            "eligible": self.eligible,
            "reason": self.reason,
            "evaluated_at": self.evaluated_at.isoformat(),
        }
