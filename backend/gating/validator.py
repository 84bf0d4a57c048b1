"""
Post-generation response validator: detects forbidden vocabulary for the active phase.

Matching is case-insensitive substring containment ("will" also matches
"willing"). The validator only detects; callers decide whether to discard,
regenerate or fall back to baseline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from gating.contracts import get_phase_authority_contract
from gating.types import AIInsightPhase
from ops.ops_events import GateObserver, log_phase_violation


@dataclass(frozen=True)
class ValidationResult:
    phase: AIInsightPhase
    violations: List[str] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return not self.violations

    def to_dict(self) -> Dict[str, Any]:
        return {"phase": self.phase.value, "violations": list(self.violations), "accepted": self.accepted}


def check_phase_violations(text: str, phase: Union[str, AIInsightPhase]) -> List[str]:
    """Every forbidden term found in text, in contract order (not just the first)."""
    contract = get_phase_authority_contract(phase)
    lowered = (text or "").lower()
    return [verb for verb in contract.forbidden_verbs if verb.lower() in lowered]


def validate_response(
    text: str,
    phase: Union[str, AIInsightPhase],
    *,
    observer: Optional[GateObserver] = None,
) -> ValidationResult:
    contract = get_phase_authority_contract(phase)
    violations = check_phase_violations(text, contract.phase)
    if violations:
        log_phase_violation(observer, contract.phase.value, violations)
    return ValidationResult(phase=contract.phase, violations=violations)


def build_generation_constraints(phase: Union[str, AIInsightPhase]) -> str:
    """Instruction block restricting a generation request to the phase's vocabulary."""
    contract = get_phase_authority_contract(phase)
    allowed = ", ".join(contract.allowed_verbs) if contract.allowed_verbs else "(none)"
    forbidden = ", ".join(contract.forbidden_verbs)
    return (
        f"Authority phase: {contract.phase.value}.\n"
        f"Maximum inference depth: {contract.max_inference_depth.value}.\n"
        f"You may: {allowed}.\n"
        f"Never use these words or make these claims: {forbidden}.\n"
        f"Response shape: {contract.response_template}"
    )
