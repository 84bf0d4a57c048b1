"""
One-way phase ratchet: a tenant's authority phase only moves up through
recomputation. Transient metric dips hold the recorded high-water mark.

demote() is the only downward path. It writes an audit row and leaves a
ceiling that recomputation cannot climb past, so the demotion survives the
next request. lift_ceiling() removes it, again with an audit row.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Tuple, Union

from sqlalchemy.ext.asyncio import AsyncSession

from gating.contracts import parse_phase
from gating.errors import PhaseDemotionError, UnknownPhaseError
from gating.phases import classify_phase, metadata_for_phase
from gating.types import AIInsightPhase, PhaseCounters, PhaseMetadata
from models.phase_state import PhaseOverride
from ops.ops_events import (
    GateObserver,
    log_phase_capped,
    log_phase_ceiling_lifted,
    log_phase_demoted,
    log_phase_ratchet_hold,
)
from repositories.phase_repo import OVERRIDE_LIFT_CEILING, PhaseStateRepository


def apply_ratchet(
    computed: AIInsightPhase,
    floor: Optional[AIInsightPhase],
    ceiling: Optional[AIInsightPhase] = None,
) -> AIInsightPhase:
    """Effective phase: computed, capped at the ceiling, never below the recorded floor."""
    allowed = computed if ceiling is None else min(computed, ceiling)
    if floor is None:
        return allowed
    return max(allowed, floor)


def _recorded_phase(raw: Optional[str]) -> Optional[AIInsightPhase]:
    # Unreadable stored value counts as absent
    if raw is None:
        return None
    try:
        return parse_phase(raw)
    except UnknownPhaseError:
        return None


def _require_actor_and_reason(actor: str, reason: str) -> None:
    if not actor or not actor.strip() or not reason or not reason.strip():
        raise PhaseDemotionError("Phase overrides require a non-empty actor and reason")


class PhaseRatchetService:
    """DB-backed ratchet around the pure classifier. Commit is left to the session owner."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        observer: Optional[GateObserver] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._repo = PhaseStateRepository(session)
        self._observer = observer
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def current_phase(self, tenant_id: str) -> AIInsightPhase:
        return _recorded_phase(await self._repo.get_phase(tenant_id)) or AIInsightPhase.LOCKED

    async def current_ceiling(self, tenant_id: str) -> Optional[AIInsightPhase]:
        state = await self._repo.get_state(tenant_id)
        return _recorded_phase(state.ceiling) if state is not None else None

    async def resolve(
        self,
        tenant_id: str,
        counters: Union[PhaseCounters, Mapping[str, Any]],
    ) -> Tuple[AIInsightPhase, PhaseMetadata]:
        computed, metadata = classify_phase(counters)
        state = await self._repo.get_state(tenant_id)
        recorded = _recorded_phase(state.phase) if state is not None else None
        ceiling = _recorded_phase(state.ceiling) if state is not None else None
        effective = apply_ratchet(computed, recorded, ceiling)

        if recorded is None or effective > recorded:
            await self._repo.set_phase(tenant_id, effective.value, self._clock())
        if effective == computed:
            return effective, metadata

        if ceiling is not None and computed > ceiling:
            log_phase_capped(self._observer, tenant_id, computed.value, ceiling.value)
            reason = f"{effective.value.capitalize()} insights capped by an administrative demotion"
        else:
            log_phase_ratchet_hold(self._observer, tenant_id, computed.value, effective.value)
            reason = None
        return effective, metadata_for_phase(effective, counters, reason=reason)

    async def demote(
        self,
        tenant_id: str,
        to_phase: Union[str, AIInsightPhase],
        *,
        actor: str,
        reason: str,
    ) -> PhaseOverride:
        """Explicit, audited demotion. Raises PhaseDemotionError unless it strictly lowers the phase."""
        _require_actor_and_reason(actor, reason)
        target = parse_phase(to_phase)
        current = await self.current_phase(tenant_id)
        if target >= current:
            raise PhaseDemotionError(
                f"Cannot demote tenant {tenant_id!r} from {current.value} to {target.value}"
            )
        now = self._clock()
        await self._repo.set_phase(tenant_id, target.value, now)
        await self._repo.set_ceiling(tenant_id, target.value, now)
        override = await self._repo.add_override(
            tenant_id=tenant_id,
            from_phase=current.value,
            to_phase=target.value,
            actor=actor.strip(),
            reason=reason.strip(),
            created_at=now,
        )
        log_phase_demoted(self._observer, tenant_id, current.value, target.value, actor.strip())
        return override

    async def lift_ceiling(self, tenant_id: str, *, actor: str, reason: str) -> PhaseOverride:
        """Audited removal of a demotion ceiling. The phase itself is unchanged until the next resolve."""
        _require_actor_and_reason(actor, reason)
        ceiling = await self.current_ceiling(tenant_id)
        if ceiling is None:
            raise PhaseDemotionError(f"Tenant {tenant_id!r} has no demotion ceiling to lift")
        now = self._clock()
        current = await self.current_phase(tenant_id)
        await self._repo.set_ceiling(tenant_id, None, now)
        override = await self._repo.add_override(
            tenant_id=tenant_id,
            from_phase=ceiling.value,
            to_phase=current.value,
            actor=actor.strip(),
            reason=reason.strip(),
            created_at=now,
            action=OVERRIDE_LIFT_CEILING,
        )
        log_phase_ceiling_lifted(self._observer, tenant_id, ceiling.value, actor.strip())
        return override
