"""Gating: fail-closed execution mode, authority phases, contracts, validation and baseline payloads."""

from gating.baseline import (
    BASELINE_RESPONSE_TEXT,
    BASELINE_SCENARIOS_MESSAGE,
    Surface,
    build_baseline_response,
    get_baseline_admin_response,
    get_baseline_anomaly_response,
    get_baseline_chat_response,
    get_baseline_decision_response,
    get_baseline_generic_response,
    get_baseline_governance_response,
    get_baseline_insights_response,
    get_baseline_optimization_response,
    get_baseline_prediction_response,
    get_baseline_scenario_response,
    get_baseline_support_response,
)
from gating.contracts import (
    PHASE_AUTHORITY_CONTRACTS,
    get_phase_authority_contract,
    get_phase_refusal_message,
)
from gating.execution_mode import derive_execution_mode, fetch_user_execution_mode, is_ai_allowed
from gating.phases import classify_phase
from gating.types import AIInsightPhase, ExecutionMode, PhaseCounters, SystemStatus
from gating.validator import check_phase_violations, validate_response

__all__ = [
    "AIInsightPhase",
    "BASELINE_RESPONSE_TEXT",
    "BASELINE_SCENARIOS_MESSAGE",
    "ExecutionMode",
    "PHASE_AUTHORITY_CONTRACTS",
    "PhaseCounters",
    "Surface",
    "SystemStatus",
    "build_baseline_response",
    "check_phase_violations",
    "classify_phase",
    "derive_execution_mode",
    "fetch_user_execution_mode",
    "get_baseline_admin_response",
    "get_baseline_anomaly_response",
    "get_baseline_chat_response",
    "get_baseline_decision_response",
    "get_baseline_generic_response",
    "get_baseline_governance_response",
    "get_baseline_insights_response",
    "get_baseline_optimization_response",
    "get_baseline_prediction_response",
    "get_baseline_scenario_response",
    "get_baseline_support_response",
    "get_phase_authority_contract",
    "get_phase_refusal_message",
    "is_ai_allowed",
    "validate_response",
]
