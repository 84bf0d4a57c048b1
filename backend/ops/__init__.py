"""Operational observability: structured ops events for gating and readiness."""

from .ops_events import (
    GateObserver,
    RecordingObserver,
    default_observer,
)

__all__ = [
    "GateObserver",
    "RecordingObserver",
    "default_observer",
]
