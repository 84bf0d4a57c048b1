"""
Gated generation: the request-time control flow every AI-capable feature goes through.

1. Execution mode. Baseline -> fixed baseline payload, no generator call.
2. Authority phase (ratcheted when a tenant id and ratchet service are given).
   Locked -> phase refusal message, no generator call.
3. Generator is called with the phase contract and constraint block.
4. Output is validated; violations trigger a regeneration (up to max_attempts)
   and finally the surface baseline payload.

Generator errors propagate to the caller; they never turn into a computed result.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

from gating.baseline import Surface, build_baseline_response, parse_surface
from gating.contracts import get_phase_authority_contract, get_phase_refusal_message
from gating.execution_mode import StatusInput, derive_execution_mode
from gating.phases import classify_phase
from gating.ratchet import PhaseRatchetService
from gating.types import AIInsightPhase, AuthorityContract, ExecutionMode, PhaseCounters, PhaseMetadata
from gating.validator import build_generation_constraints, validate_response
from ops.ops_events import GateObserver, log_baseline_served

OUTCOME_BASELINE = "baseline"
OUTCOME_LOCKED = "locked"
OUTCOME_GENERATED = "generated"
OUTCOME_REJECTED = "rejected"


@dataclass(frozen=True)
class GenerationRequest:
    surface: Surface
    phase: AIInsightPhase
    contract: AuthorityContract
    constraints: str
    attempt: int


Generator = Callable[[GenerationRequest], Union[str, Awaitable[str]]]


@dataclass
class GatedResult:
    outcome: str
    execution_mode: ExecutionMode
    phase: Optional[AIInsightPhase] = None
    phase_metadata: Optional[PhaseMetadata] = None
    text: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)
    violations: List[str] = field(default_factory=list)
    attempts: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcome": self.outcome,
            "execution_mode": self.execution_mode.value,
            "phase": self.phase.value if self.phase else None,
            "phase_metadata": self.phase_metadata.to_dict() if self.phase_metadata else None,
            "text": self.text,
            "payload": self.payload,
            "violations": list(self.violations),
            "attempts": self.attempts,
        }


async def run_gated_generation(
    surface: Union[str, Surface],
    status: StatusInput,
    counters: Union[PhaseCounters, Mapping[str, Any]],
    generate: Generator,
    *,
    tenant_id: Optional[str] = None,
    ratchet: Optional[PhaseRatchetService] = None,
    max_attempts: int = 2,
    observer: Optional[GateObserver] = None,
) -> GatedResult:
    surface = parse_surface(surface)
    mode = derive_execution_mode(status, observer=observer)
    if mode != ExecutionMode.COMPUTED:
        log_baseline_served(observer, surface.value)
        return GatedResult(outcome=OUTCOME_BASELINE, execution_mode=mode, payload=build_baseline_response(surface))

    if ratchet is not None and tenant_id:
        phase, metadata = await ratchet.resolve(tenant_id, counters)
    else:
        phase, metadata = classify_phase(counters)

    if phase == AIInsightPhase.LOCKED:
        return GatedResult(
            outcome=OUTCOME_LOCKED,
            execution_mode=mode,
            phase=phase,
            phase_metadata=metadata,
            text=get_phase_refusal_message(phase, metadata),
        )

    contract = get_phase_authority_contract(phase)
    constraints = build_generation_constraints(phase)
    violations: List[str] = []
    attempts = 0
    for attempt in range(1, max(1, max_attempts) + 1):
        attempts = attempt
        request = GenerationRequest(surface, phase, contract, constraints, attempt)
        text = generate(request)
        if inspect.isawaitable(text):
            text = await text
        result = validate_response(text, phase, observer=observer)
        if result.accepted:
            return GatedResult(
                outcome=OUTCOME_GENERATED,
                execution_mode=mode,
                phase=phase,
                phase_metadata=metadata,
                text=text,
                attempts=attempts,
            )
        violations = result.violations

    log_baseline_served(observer, surface.value)
    return GatedResult(
        outcome=OUTCOME_REJECTED,
        execution_mode=mode,
        phase=phase,
        phase_metadata=metadata,
        payload=build_baseline_response(surface),
        violations=violations,
        attempts=attempts,
    )
