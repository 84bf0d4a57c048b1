"""
Structured ops events for gating decisions and readiness runs.
Log-level + structured event dict; deterministic keys (no random ids).

Decision code never logs directly: it reports to a GateObserver, which callers
may replace (tests use RecordingObserver). The default observer writes to the
``ops_events`` logger.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

OPS_LOGGER_NAME = "ops_events"


def _logger() -> logging.Logger:
    return logging.getLogger(OPS_LOGGER_NAME)


class GateObserver:
    """Receives structured decision events. Default implementation logs them."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger

    def event(self, event_type: str, *, level: int = logging.INFO, **kwargs: Any) -> None:
        """Emit a structured ops event (sorted keys)."""
        msg = f"ops_event={event_type} " + " ".join(f"{k}={v!r}" for k, v in sorted(kwargs.items()))
        logger = self._logger or _logger()
        logger.log(level, msg.rstrip(), extra={"ops_event_type": event_type, "ops_event": {**kwargs}})


class RecordingObserver(GateObserver):
    """Keeps events in memory (tests, dry runs). Does not log."""

    def __init__(self) -> None:
        super().__init__()
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def event(self, event_type: str, *, level: int = logging.INFO, **kwargs: Any) -> None:
        self.events.append((event_type, dict(kwargs)))

    def of_type(self, event_type: str) -> List[Dict[str, Any]]:
        return [payload for etype, payload in self.events if etype == event_type]


_default_observer = GateObserver()


def default_observer() -> GateObserver:
    return _default_observer


def log_execution_mode(observer: Optional[GateObserver], mode: str, reason: str, **context: Any) -> None:
    (observer or _default_observer).event("execution_mode_derived", mode=mode, reason=reason, **context)


def log_baseline_served(observer: Optional[GateObserver], surface: str) -> None:
    (observer or _default_observer).event("baseline_served", surface=surface)


def log_readiness_evaluated(
    observer: Optional[GateObserver],
    integration_key: str,
    eligible: bool,
    reason: str,
) -> None:
    (observer or _default_observer).event(
        "readiness_evaluated", integration_key=integration_key, eligible=eligible, reason=reason
    )


def log_readiness_error(observer: Optional[GateObserver], integration_key: str, stage: str, error: str) -> None:
    (observer or _default_observer).event(
        "readiness_error", level=logging.WARNING, integration_key=integration_key, stage=stage, error=error
    )


def log_readiness_batch(
    observer: Optional[GateObserver],
    evaluated: int,
    eligible: int,
    errors: int,
    duration_seconds: float,
) -> None:
    (observer or _default_observer).event(
        "readiness_batch_end",
        evaluated=evaluated,
        eligible=eligible,
        errors=errors,
        duration_seconds=round(duration_seconds, 4),
    )


def log_phase_violation(observer: Optional[GateObserver], phase: str, violations: List[str]) -> None:
    (observer or _default_observer).event(
        "phase_violation", level=logging.WARNING, phase=phase, violations=list(violations)
    )


def log_phase_ratchet_hold(observer: Optional[GateObserver], tenant_id: str, computed: str, held: str) -> None:
    """Computed phase fell below the recorded high-water mark; the mark is kept."""
    (observer or _default_observer).event("phase_ratchet_hold", tenant_id=tenant_id, computed=computed, held=held)


def log_phase_demoted(
    observer: Optional[GateObserver],
    tenant_id: str,
    from_phase: str,
    to_phase: str,
    actor: str,
) -> None:
    (observer or _default_observer).event(
        "phase_demoted", level=logging.WARNING, tenant_id=tenant_id, from_phase=from_phase, to_phase=to_phase, actor=actor
    )


def log_phase_capped(observer: Optional[GateObserver], tenant_id: str, computed: str, ceiling: str) -> None:
    """Computed phase is above the ceiling left by a demotion; the ceiling wins."""
    (observer or _default_observer).event("phase_capped", tenant_id=tenant_id, computed=computed, ceiling=ceiling)


def log_phase_ceiling_lifted(observer: Optional[GateObserver], tenant_id: str, ceiling: str, actor: str) -> None:
    (observer or _default_observer).event(
        "phase_ceiling_lifted", level=logging.WARNING, tenant_id=tenant_id, ceiling=ceiling, actor=actor
    )


def log_maturity_promotion(observer: Optional[GateObserver], integration_key: str, status: str, actor: str) -> None:
    (observer or _default_observer).event("maturity_promoted", integration_key=integration_key, status=status, actor=actor)
