"""
Integration readiness evaluator: decides per integration whether enough data
has accumulated to be eligible for the observing maturity state.

Evaluation only. Promotion is a separate, explicit step (readiness.promotion);
nothing here changes maturity state. Verdicts are appended, never updated.
One integration failing never suppresses the verdicts of the others.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, AsyncContextManager, Callable, Dict, FrozenSet, List, Optional, Sequence

from core.config import Settings
from gating.types import EventRecord, IntegrationMetricSample, ReadinessVerdict
from models.integration_maturity import MATURITY_CONNECTED
from ops.ops_events import (
    GateObserver,
    log_readiness_batch,
    log_readiness_error,
    log_readiness_evaluated,
)
from readiness.stores import EventStore, MaturityStore, TelemetryStore, VerdictSink

# Fixed defaults; each is independently overridable via Settings
MIN_EVENT_COUNT = 10
MIN_TIME_SPAN_DAYS = 7
MIN_DATA_TYPES = 1

DATA_TYPE_MESSAGES = "messages"
DATA_TYPE_MEETINGS = "meetings"
DATA_TYPE_ACTIVITY = "activity"
DATA_TYPE_TELEMETRY = "telemetry"

# Substring -> data type. Case-insensitive; one event may add several types.
EVENT_TYPE_MARKERS: Dict[str, tuple[str, ...]] = {
    DATA_TYPE_MESSAGES: ("message", "chat"),
    DATA_TYPE_MEETINGS: ("meeting", "call"),
    DATA_TYPE_ACTIVITY: ("activity", "reaction", "channel"),
}

_SECONDS_PER_DAY = 86400


@dataclass(frozen=True)
class ReadinessThresholds:
    min_event_count: int = MIN_EVENT_COUNT
    min_time_span_days: int = MIN_TIME_SPAN_DAYS
    min_data_types: int = MIN_DATA_TYPES

    @classmethod
    def from_settings(cls, settings: Settings) -> "ReadinessThresholds":
        return cls(
            min_event_count=settings.readiness_min_event_count,
            min_time_span_days=settings.readiness_min_time_span_days,
            min_data_types=settings.readiness_min_data_types,
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "min_event_count": self.min_event_count,
            "min_time_span_days": self.min_time_span_days,
            "min_data_types": self.min_data_types,
        }


def classify_event_type(event_type: Optional[str]) -> FrozenSet[str]:
    lowered = (event_type or "").lower()
    return frozenset(
        data_type
        for data_type, markers in EVENT_TYPE_MARKERS.items()
        if any(marker in lowered for marker in markers)
    )


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def compute_metric_sample(
    integration_key: str,
    events: Sequence[EventRecord],
    *,
    has_telemetry: bool = False,
) -> IntegrationMetricSample:
    """Aggregate an integration's event history. Events must be ordered by created_at."""
    timestamps = [_as_utc(e.created_at) for e in events if e.created_at is not None]
    first_at = timestamps[0] if timestamps else None
    last_at = timestamps[-1] if timestamps else None

    time_span_days = 0
    if len(timestamps) >= 2 and first_at is not None and last_at is not None:
        seconds = (last_at - first_at).total_seconds()
        time_span_days = max(0, int(seconds // _SECONDS_PER_DAY))

    data_types = set()
    for event in events:
        data_types |= classify_event_type(event.event_type)
    if has_telemetry:
        data_types.add(DATA_TYPE_TELEMETRY)

    return IntegrationMetricSample(
        integration_key=integration_key,
        event_count=len(events),
        first_event_at=first_at,
        last_event_at=last_at,
        time_span_days=time_span_days,
        data_types=frozenset(data_types),
    )


def determine_readiness(
    sample: IntegrationMetricSample,
    thresholds: ReadinessThresholds,
    evaluated_at: datetime,
) -> ReadinessVerdict:
    """Compare a sample against every threshold; the reason lists all failing criteria."""
    failures: List[str] = []
    if sample.event_count < thresholds.min_event_count:
        failures.append(f"Event count ({sample.event_count}) below threshold ({thresholds.min_event_count})")
    if sample.time_span_days < thresholds.min_time_span_days:
        failures.append(
            f"Time span ({sample.time_span_days} days) below threshold ({thresholds.min_time_span_days} days)"
        )
    if len(sample.data_types) < thresholds.min_data_types:
        failures.append(f"Data types ({len(sample.data_types)}) below threshold ({thresholds.min_data_types})")

    if failures:
        reason = "; ".join(failures)
    else:
        reason = (
            f"Eligible: {sample.event_count} events over {sample.time_span_days} days "
            f"with data types: {', '.join(sorted(sample.data_types))}"
        )
    return ReadinessVerdict(
        integration_key=sample.integration_key,
        eligible=not failures,
        reason=reason,
        evaluated_at=evaluated_at,
    )


def error_verdict(integration_key: str, error: BaseException, evaluated_at: datetime) -> ReadinessVerdict:
    return ReadinessVerdict(
        integration_key=integration_key,
        eligible=False,
        reason=f"Evaluation error: {error!s}",
        evaluated_at=evaluated_at,
    )


class ReadinessEvaluator:
    """Evaluates integrations against readiness thresholds and appends verdicts to a sink."""

    def __init__(
        self,
        events: EventStore,
        *,
        telemetry: Optional[TelemetryStore] = None,
        maturity: Optional[MaturityStore] = None,
        sink: Optional[VerdictSink] = None,
        thresholds: Optional[ReadinessThresholds] = None,
        observer: Optional[GateObserver] = None,
        clock: Optional[Callable[[], datetime]] = None,
        max_concurrency: int = 1,
        key_scope: Optional[Callable[[], AsyncContextManager[Any]]] = None,
    ) -> None:
        """key_scope wraps each key's evaluation and each verdict write (e.g. a savepoint)."""
        self._events = events
        self._telemetry = telemetry
        self._maturity = maturity
        self._sink = sink
        self.thresholds = thresholds or ReadinessThresholds()
        self._observer = observer
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._max_concurrency = max(1, max_concurrency)
        self._key_scope = key_scope

    def _scope(self) -> AsyncContextManager[Any]:
        if self._key_scope is None:
            return contextlib.nullcontext()
        return self._key_scope()

    async def _has_telemetry(self, integration_key: str) -> bool:
        if self._telemetry is None:
            return False
        try:
            return bool(await self._telemetry.has_signal(integration_key))
        except Exception as e:  # noqa: BLE001
            # Telemetry is an optional secondary signal
            log_readiness_error(self._observer, integration_key, "telemetry", str(e))
            return False

    async def sample(self, integration_key: str) -> IntegrationMetricSample:
        events = await self._events.list_events(integration_key)
        has_telemetry = await self._has_telemetry(integration_key)
        return compute_metric_sample(integration_key, events, has_telemetry=has_telemetry)

    async def evaluate(self, integration_key: str) -> ReadinessVerdict:
        """Verdict for one integration. Raises on store errors; evaluate_all() isolates them."""
        sample = await self.sample(integration_key)
        verdict = determine_readiness(sample, self.thresholds, self._clock())
        log_readiness_evaluated(self._observer, integration_key, verdict.eligible, verdict.reason)
        return verdict

    async def _evaluate_isolated(self, integration_key: str) -> ReadinessVerdict:
        try:
            async with self._scope():
                return await self.evaluate(integration_key)
        except Exception as e:  # noqa: BLE001
            log_readiness_error(self._observer, integration_key, "evaluate", str(e))
            return error_verdict(integration_key, e, self._clock())

    async def integration_keys(self) -> List[str]:
        """Union of connected-maturity keys and event-log keys, deduplicated, stable order."""
        keys: List[str] = []
        if self._maturity is not None:
            try:
                async with self._scope():
                    keys.extend(await self._maturity.list_keys_in_state(MATURITY_CONNECTED))
            except Exception as e:  # noqa: BLE001
                log_readiness_error(self._observer, "*", "maturity_lookup", str(e))
        keys.extend(await self._events.list_integration_keys())
        seen = set()
        ordered = []
        for key in keys:
            if key and key not in seen:
                seen.add(key)
                ordered.append(key)
        return ordered

    async def _record(self, verdict: ReadinessVerdict) -> None:
        if self._sink is None:
            return
        try:
            async with self._scope():
                await self._sink.append(verdict)
        except Exception as e:  # noqa: BLE001
            log_readiness_error(self._observer, verdict.integration_key, "persist", str(e))

    async def evaluate_all(self, integration_keys: Optional[Sequence[str]] = None) -> List[ReadinessVerdict]:
        """Evaluate every known integration; exactly one verdict per key, in key order."""
        started = time.perf_counter()
        keys = list(integration_keys) if integration_keys is not None else await self.integration_keys()

        if self._max_concurrency == 1:
            verdicts = [await self._evaluate_isolated(key) for key in keys]
        else:
            semaphore = asyncio.Semaphore(self._max_concurrency)

            async def _bounded(key: str) -> ReadinessVerdict:
                async with semaphore:
                    return await self._evaluate_isolated(key)

            verdicts = list(await asyncio.gather(*(_bounded(k) for k in keys)))

        for verdict in verdicts:
            await self._record(verdict)

        log_readiness_batch(
            self._observer,
            evaluated=len(verdicts),
            eligible=sum(1 for v in verdicts if v.eligible),
            errors=sum(1 for v in verdicts if v.reason.startswith("Evaluation error:")),
            duration_seconds=time.perf_counter() - started,
        )
        return verdicts


SessionFactory = Callable[[], AsyncContextManager[Any]]


class SessionPerCallStore:
    """Event, telemetry, maturity and verdict store opening its own session per call.

    Each append commits on its own, so concurrent keys never share a transaction.
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    async def list_events(self, integration_key: str) -> Sequence[EventRecord]:
        from repositories.integration_event_repo import IntegrationEventRepository

        async with self._session_factory() as session:
            return await IntegrationEventRepository(session).list_events(integration_key)

    async def list_integration_keys(self) -> List[str]:
        from repositories.integration_event_repo import IntegrationEventRepository

        async with self._session_factory() as session:
            return await IntegrationEventRepository(session).list_integration_keys()

    async def has_signal(self, integration_key: str) -> bool:
        from repositories.telemetry_repo import TelemetryRepository

        async with self._session_factory() as session:
            return await TelemetryRepository(session).has_signal(integration_key)

    async def list_keys_in_state(self, maturity_state: str) -> List[str]:
        from repositories.maturity_repo import MaturityRepository

        async with self._session_factory() as session:
            return await MaturityRepository(session).list_keys_in_state(maturity_state)

    async def append(self, verdict: ReadinessVerdict) -> None:
        from repositories.readiness_repo import ReadinessRepository

        async with self._session_factory() as session:
            await ReadinessRepository(session).append(verdict)


def sql_readiness_evaluator(
    session: Any,
    settings: Settings,
    *,
    observer: Optional[GateObserver] = None,
    record: bool = True,
    session_factory: Optional[SessionFactory] = None,
) -> ReadinessEvaluator:
    """Evaluator wired to the SQLAlchemy repositories.

    With a session_factory and readiness_max_concurrency > 1, keys run concurrently
    and every store call gets its own session. Otherwise keys run one at a time on
    ``session``, each inside its own savepoint so one failed key rolls back alone.
    """
    thresholds = ReadinessThresholds.from_settings(settings)
    if session_factory is not None and settings.readiness_max_concurrency > 1:
        store = SessionPerCallStore(session_factory)
        return ReadinessEvaluator(
            store,
            telemetry=store,
            maturity=store,
            sink=store if record else None,
            thresholds=thresholds,
            observer=observer,
            max_concurrency=settings.readiness_max_concurrency,
        )

    from repositories.integration_event_repo import IntegrationEventRepository
    from repositories.maturity_repo import MaturityRepository
    from repositories.readiness_repo import ReadinessRepository
    from repositories.telemetry_repo import TelemetryRepository

    return ReadinessEvaluator(
        IntegrationEventRepository(session),
        telemetry=TelemetryRepository(session),
        maturity=MaturityRepository(session),
        sink=ReadinessRepository(session) if record else None,
        thresholds=thresholds,
        observer=observer,
        # AsyncSession is not safe for concurrent use
        max_concurrency=1,
        key_scope=session.begin_nested,
    )


async def evaluate_all_readiness(evaluator: ReadinessEvaluator) -> Dict[str, Any]:
    """Batch job entry point: {"evaluated": n, "results": [verdict dicts]}. Idempotent to re-run."""
    verdicts = await evaluator.evaluate_all()
    return {"evaluated": len(verdicts), "results": [v.to_dict() for v in verdicts]}
