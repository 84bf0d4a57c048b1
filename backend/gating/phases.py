"""
Maturity phase classifier: maps accumulated maturity counters to the highest
authority phase whose prerequisites (and those of every lower phase) are met.

Thresholds are fixed (do not auto-tune). The classifier is pure; the one-way
ratchet that prevents silent demotion lives in gating.ratchet.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from gating.types import PHASE_ORDER, AIInsightPhase, PhaseCounters, PhaseMetadata


@dataclass(frozen=True)
class PhaseThresholds:
    """Minimum counters required to enter a phase."""

    metrics_count: int = 0
    active_integrations_count: int = 0
    days_since_first_integration: int = 0
    successful_poll_cycles: int = 0
    fusion_score_recalculations: int = 0
    variance_stability_percent: float = 0.0
    system_health_stable_days: int = 0


PHASE_THRESHOLDS: Dict[AIInsightPhase, PhaseThresholds] = {
    AIInsightPhase.DESCRIPTIVE: PhaseThresholds(
        metrics_count=10,
        active_integrations_count=1,
        days_since_first_integration=1,
        successful_poll_cycles=3,
    ),
    AIInsightPhase.DIAGNOSTIC: PhaseThresholds(
        metrics_count=50,
        active_integrations_count=1,
        days_since_first_integration=7,
        successful_poll_cycles=20,
        fusion_score_recalculations=5,
        variance_stability_percent=50.0,
        system_health_stable_days=3,
    ),
    AIInsightPhase.PRESCRIPTIVE: PhaseThresholds(
        metrics_count=200,
        active_integrations_count=2,
        days_since_first_integration=14,
        successful_poll_cycles=60,
        fusion_score_recalculations=15,
        variance_stability_percent=70.0,
        system_health_stable_days=7,
    ),
    AIInsightPhase.PREDICTIVE: PhaseThresholds(
        metrics_count=500,
        active_integrations_count=2,
        days_since_first_integration=30,
        successful_poll_cycles=150,
        fusion_score_recalculations=30,
        variance_stability_percent=85.0,
        system_health_stable_days=14,
    ),
}

# (counter field, requirement label, how to project days) in report order.
# Projection kinds: "rate" uses an accumulation rate, "elapsed" advances one per
# day, "none" cannot be projected.
_REQUIREMENTS: Tuple[Tuple[str, str, str], ...] = (
    ("metrics_count", "metrics", "rate"),
    ("active_integrations_count", "active integration(s)", "none"),
    ("days_since_first_integration", "days of integration history", "elapsed"),
    ("successful_poll_cycles", "successful poll cycles", "rate"),
    ("fusion_score_recalculations", "fusion score recalculations", "rate"),
    ("variance_stability_percent", "variance stability", "none"),
    ("system_health_stable_days", "days of stable system health", "elapsed"),
)

_RATE_FIELDS = {
    "metrics_count": "metrics_per_day",
    "successful_poll_cycles": "poll_cycles_per_day",
    "fusion_score_recalculations": "recalculations_per_day",
}


@dataclass(frozen=True)
class _Gap:
    field: str
    label: str
    projection: str
    current: float
    required: float

    @property
    def delta(self) -> float:
        return self.required - self.current

    def describe(self) -> str:
        if self.field == "variance_stability_percent":
            return f"variance stability +{self.delta:.1f}% ({self.current:.1f}/{self.required:.0f}%)"
        return f"{int(self.delta)} more {self.label} ({int(self.current)}/{int(self.required)})"


def _coerce_counters(counters: Union[PhaseCounters, Mapping[str, Any]]) -> PhaseCounters:
    if isinstance(counters, PhaseCounters):
        return counters
    return PhaseCounters.model_validate(dict(counters))


def _gaps(counters: PhaseCounters, phase: AIInsightPhase) -> List[_Gap]:
    thresholds = PHASE_THRESHOLDS[phase]
    gaps = []
    for field_name, label, projection in _REQUIREMENTS:
        current = getattr(counters, field_name)
        required = getattr(thresholds, field_name)
        if current < required:
            gaps.append(_Gap(field_name, label, projection, current, required))
    return gaps


def _daily_rate(counters: PhaseCounters, field_name: str) -> float:
    explicit = getattr(counters, _RATE_FIELDS[field_name])
    if explicit is not None:
        return explicit
    if counters.days_since_first_integration <= 0:
        return 0.0
    return getattr(counters, field_name) / counters.days_since_first_integration


def estimate_days_until(counters: PhaseCounters, gaps: List[_Gap]) -> Optional[int]:
    """Linear projection: slowest unmet requirement wins. None when any gap cannot be projected."""
    if not gaps:
        return None
    worst = 0
    for gap in gaps:
        if gap.projection == "elapsed":
            days = math.ceil(gap.delta)
        elif gap.projection == "rate":
            rate = _daily_rate(counters, gap.field)
            if rate <= 0:
                return None
            days = math.ceil(gap.delta / rate)
        else:
            return None
        worst = max(worst, days)
    return worst


def _phase_reason(phase: AIInsightPhase, counters: PhaseCounters) -> str:
    if phase == AIInsightPhase.LOCKED:
        return "Insufficient data for AI insights"
    return (
        f"{phase.value.capitalize()} insights unlocked with {counters.metrics_count} metrics "
        f"from {counters.active_integrations_count} active integration(s) "
        f"over {counters.days_since_first_integration} days"
    )


def _build_metadata(phase: AIInsightPhase, reason: str, c: PhaseCounters) -> PhaseMetadata:
    next_phase = phase.next_phase()
    next_gaps = _gaps(c, next_phase) if next_phase is not None else []
    return PhaseMetadata(
        current_phase=phase,
        phase_reason=reason,
        next_phase=next_phase,
        next_phase_requirements=[g.describe() for g in next_gaps],
        days_until_unlock_estimate=estimate_days_until(c, next_gaps),
        metrics_count=c.metrics_count,
        active_integrations_count=c.active_integrations_count,
        days_since_first_integration=c.days_since_first_integration,
        successful_poll_cycles=c.successful_poll_cycles,
        fusion_score_recalculations=c.fusion_score_recalculations,
        variance_stability_percent=c.variance_stability_percent,
        system_health_stable_days=c.system_health_stable_days,
    )


def classify_phase(
    counters: Union[PhaseCounters, Mapping[str, Any]],
) -> Tuple[AIInsightPhase, PhaseMetadata]:
    """Highest phase whose prerequisites are all met, with metadata explaining the next step."""
    c = _coerce_counters(counters)
    current = AIInsightPhase.LOCKED
    for phase in PHASE_ORDER[1:]:
        if _gaps(c, phase):
            break
        current = phase
    return current, _build_metadata(current, _phase_reason(current, c), c)


def metadata_for_phase(
    phase: AIInsightPhase,
    counters: Union[PhaseCounters, Mapping[str, Any]],
    *,
    reason: Optional[str] = None,
) -> PhaseMetadata:
    """Metadata for a phase other than what the counters alone give (ratchet hold or demotion cap)."""
    c = _coerce_counters(counters)
    computed, computed_meta = classify_phase(c)
    if computed == phase:
        return computed_meta
    return _build_metadata(phase, reason or f"{phase.value.capitalize()} insights retained from an earlier evaluation", c)


classify = classify_phase
