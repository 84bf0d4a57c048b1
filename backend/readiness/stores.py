"""
Store interfaces consumed by readiness evaluation, plus deterministic in-memory
implementations for tests and dry runs. The SQLAlchemy repositories in
``repositories`` satisfy the same protocols.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Set, Tuple

from gating.types import EventRecord, ReadinessVerdict


class EventStore(Protocol):
    async def list_events(self, integration_key: str) -> Sequence[EventRecord]:
        """All events for the integration ordered by created_at ascending."""
        ...

    async def list_integration_keys(self) -> List[str]:
        """Distinct integration keys observed in the event log."""
        ...


class TelemetryStore(Protocol):
    async def has_signal(self, integration_key: str) -> bool:
        """True if any telemetry row fuzzily matches the integration key."""
        ...


class MaturityStore(Protocol):
    async def list_keys_in_state(self, maturity_state: str) -> List[str]:
        ...


class VerdictSink(Protocol):
    async def append(self, verdict: ReadinessVerdict) -> object:
        ...


class InMemoryEventStore:
    """Events keyed by integration. Keys listed in ``failing`` raise on lookup."""

    def __init__(
        self,
        events: Optional[Dict[str, Iterable[EventRecord]]] = None,
        *,
        failing: Iterable[str] = (),
    ) -> None:
        self._events: Dict[str, List[EventRecord]] = {
            key: sorted(records, key=lambda r: r.created_at) for key, records in (events or {}).items()
        }
        self._failing: Set[str] = set(failing)

    async def list_events(self, integration_key: str) -> Sequence[EventRecord]:
        if integration_key in self._failing:
            raise RuntimeError(f"event query failed for {integration_key}")
        return list(self._events.get(integration_key, []))

    async def list_integration_keys(self) -> List[str]:
        return sorted(k for k, v in self._events.items() if v)


class InMemoryTelemetryStore:
    def __init__(self, source_apps: Iterable[str] = ()) -> None:
        self._source_apps = [s.lower() for s in source_apps]

    async def has_signal(self, integration_key: str) -> bool:
        needle = integration_key.lower()
        return any(needle in app for app in self._source_apps)


class InMemoryMaturityStore:
    def __init__(self, states: Optional[Dict[str, str]] = None) -> None:
        self._states = dict(states or {})

    async def list_keys_in_state(self, maturity_state: str) -> List[str]:
        return sorted(k for k, s in self._states.items() if s == maturity_state)


class InMemoryVerdictSink:
    """Append-only list of verdicts."""

    def __init__(self) -> None:
        self.rows: List[ReadinessVerdict] = []

    async def append(self, verdict: ReadinessVerdict) -> ReadinessVerdict:
        self.rows.append(verdict)
        return verdict

    def by_key(self) -> Dict[str, List[ReadinessVerdict]]:
        out: Dict[str, List[ReadinessVerdict]] = {}
        for row in self.rows:
            out.setdefault(row.integration_key, []).append(row)
        return out

    def eligible_reason_pairs(self, integration_key: str) -> List[Tuple[bool, str]]:
        return [(v.eligible, v.reason) for v in self.rows if v.integration_key == integration_key]
