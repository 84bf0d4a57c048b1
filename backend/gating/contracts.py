"""
AI insight phase authority contracts: allowed and forbidden vocabulary per phase.

The table is fixed configuration. Allowed sets grow along the phase ladder but
forbidden sets do not shrink monotonically ("predict"/"forecast" stay forbidden
through prescriptive and become allowed only at predictive); keep the lists
exactly as written.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional, Union

from gating.errors import UnknownPhaseError
from gating.types import AIInsightPhase, AuthorityContract, InferenceDepth, PhaseMetadata

DEFAULT_REFUSAL_REASON = "Insufficient data for AI insights"

_CONTRACTS = {
    AIInsightPhase.LOCKED: AuthorityContract(
        phase=AIInsightPhase.LOCKED,
        allowed_verbs=(),
        forbidden_verbs=("observe", "describe", "explain", "suggest", "predict", "recommend", "analyze"),
        response_template="AI Insights are not yet available. {reason}. {next_phase_info}",
        max_inference_depth=InferenceDepth.NONE,
    ),
    AIInsightPhase.DESCRIPTIVE: AuthorityContract(
        phase=AIInsightPhase.DESCRIPTIVE,
        allowed_verbs=("observe", "describe", "list", "show", "report", "summarize"),
        forbidden_verbs=("explain why", "because", "caused by", "suggest", "recommend", "predict", "will", "should"),
        response_template=(
            "Based on current observations: {observation}. "
            "Note: Causal analysis will be available after more data is collected."
        ),
        max_inference_depth=InferenceDepth.OBSERVATION,
    ),
    AIInsightPhase.DIAGNOSTIC: AuthorityContract(
        phase=AIInsightPhase.DIAGNOSTIC,
        allowed_verbs=("observe", "describe", "explain", "analyze", "because", "caused by", "correlates with"),
        forbidden_verbs=("suggest", "recommend", "should", "predict", "will", "forecast"),
        response_template=(
            "{observation}. This is {explanation}. "
            "Note: Recommendations will be available after more data stability."
        ),
        max_inference_depth=InferenceDepth.CAUSALITY,
    ),
    AIInsightPhase.PRESCRIPTIVE: AuthorityContract(
        phase=AIInsightPhase.PRESCRIPTIVE,
        allowed_verbs=("observe", "describe", "explain", "suggest", "consider", "option", "alternative"),
        forbidden_verbs=("must", "should", "will", "predict", "forecast", "guarantee"),
        response_template=(
            "{observation}. {explanation}. You might consider: {suggestions}. "
            "Note: These are options, not directives."
        ),
        max_inference_depth=InferenceDepth.SUGGESTION,
    ),
    AIInsightPhase.PREDICTIVE: AuthorityContract(
        phase=AIInsightPhase.PREDICTIVE,
        allowed_verbs=("observe", "describe", "explain", "suggest", "predict", "forecast", "trend", "expect"),
        forbidden_verbs=("guarantee", "certain", "definitely", "must"),
        response_template="{observation}. {explanation}. {suggestions}. Based on patterns, {prediction}.",
        max_inference_depth=InferenceDepth.PREDICTION,
    ),
}

PHASE_AUTHORITY_CONTRACTS: Mapping[AIInsightPhase, AuthorityContract] = MappingProxyType(_CONTRACTS)


def parse_phase(value: Union[str, AIInsightPhase]) -> AIInsightPhase:
    """Coerce a phase name (case-insensitive) to AIInsightPhase; raise UnknownPhaseError otherwise."""
    if isinstance(value, AIInsightPhase):
        return value
    try:
        return AIInsightPhase(str(value).strip().lower())
    except ValueError:
        raise UnknownPhaseError(f"Unknown authority phase: {value!r}") from None


def get_phase_authority_contract(phase: Union[str, AIInsightPhase]) -> AuthorityContract:
    return PHASE_AUTHORITY_CONTRACTS[parse_phase(phase)]


def get_phase_refusal_message(
    phase: Union[str, AIInsightPhase],
    phase_metadata: Optional[PhaseMetadata] = None,
) -> str:
    """Fill the phase template's {reason} and {next_phase_info} placeholders.

    Other placeholders are left as-is; the refusal is meant for the locked
    template, which has no others.
    """
    contract = get_phase_authority_contract(phase)
    reason = DEFAULT_REFUSAL_REASON
    next_phase_info = ""
    if phase_metadata is not None:
        reason = phase_metadata.phase_reason
        if phase_metadata.next_phase and phase_metadata.next_phase_requirements:
            next_phase_info = (
                f"To unlock {phase_metadata.next_phase.value} insights: "
                f"{', '.join(phase_metadata.next_phase_requirements)}."
            )
            if phase_metadata.days_until_unlock_estimate:
                next_phase_info += f" Estimated: {phase_metadata.days_until_unlock_estimate} days."
    return contract.response_template.replace("{reason}", reason).replace("{next_phase_info}", next_phase_info)
