"""
Authority contracts and the post-generation response validator.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

_backend = Path(__file__).resolve().parent.parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

import pytest

from gating.contracts import (
    PHASE_AUTHORITY_CONTRACTS,
    get_phase_authority_contract,
    get_phase_refusal_message,
)
from gating.errors import UnknownPhaseError
from gating.phases import classify_phase
from gating.types import AIInsightPhase, InferenceDepth
from gating.validator import build_generation_constraints, check_phase_violations, validate_response
from ops.ops_events import OPS_LOGGER_NAME, RecordingObserver


def test_every_phase_has_a_contract() -> None:
    assert set(PHASE_AUTHORITY_CONTRACTS) == set(AIInsightPhase)


def test_contract_vocabulary_is_verbatim() -> None:
    locked = get_phase_authority_contract("locked")
    assert locked.allowed_verbs == ()
    assert locked.forbidden_verbs == ("observe", "describe", "explain", "suggest", "predict", "recommend", "analyze")
    assert locked.max_inference_depth == InferenceDepth.NONE

    descriptive = get_phase_authority_contract(AIInsightPhase.DESCRIPTIVE)
    assert descriptive.forbidden_verbs == (
        "explain why", "because", "caused by", "suggest", "recommend", "predict", "will", "should",
    )
    diagnostic = get_phase_authority_contract(AIInsightPhase.DIAGNOSTIC)
    assert diagnostic.allowed_verbs == (
        "observe", "describe", "explain", "analyze", "because", "caused by", "correlates with",
    )
    assert diagnostic.forbidden_verbs == ("suggest", "recommend", "should", "predict", "will", "forecast")
    prescriptive = get_phase_authority_contract(AIInsightPhase.PRESCRIPTIVE)
    assert prescriptive.forbidden_verbs == ("must", "should", "will", "predict", "forecast", "guarantee")
    predictive = get_phase_authority_contract(AIInsightPhase.PREDICTIVE)
    assert predictive.forbidden_verbs == ("guarantee", "certain", "definitely", "must")
    assert predictive.max_inference_depth == InferenceDepth.PREDICTION


def test_forecasting_stays_forbidden_until_predictive() -> None:
    for phase in (AIInsightPhase.DIAGNOSTIC, AIInsightPhase.PRESCRIPTIVE):
        forbidden = get_phase_authority_contract(phase).forbidden_verbs
        assert "predict" in forbidden and "forecast" in forbidden
    predictive = get_phase_authority_contract(AIInsightPhase.PREDICTIVE)
    assert "predict" in predictive.allowed_verbs and "forecast" in predictive.allowed_verbs
    assert "predict" not in predictive.forbidden_verbs


def test_contracts_are_read_only() -> None:
    with pytest.raises(TypeError):
        PHASE_AUTHORITY_CONTRACTS[AIInsightPhase.LOCKED] = PHASE_AUTHORITY_CONTRACTS[AIInsightPhase.PREDICTIVE]  # type: ignore[index]


def test_unknown_phase_raises() -> None:
    with pytest.raises(UnknownPhaseError):
        get_phase_authority_contract("omniscient")


def test_violations_are_complete_and_in_contract_order() -> None:
    text = "Revenue will rise next quarter; you should forecast more headcount."
    assert check_phase_violations(text, "diagnostic") == ["should", "will", "forecast"]


def test_violation_match_is_case_insensitive_substring() -> None:
    assert check_phase_violations("Teams is WILLING to help", AIInsightPhase.DESCRIPTIVE) == ["will"]
    assert check_phase_violations("Traffic dipped because of the outage", "descriptive") == ["because"]


def test_clean_text_has_no_violations() -> None:
    assert check_phase_violations("Message volume rose 12% this week.", "descriptive") == []
    assert check_phase_violations("", "locked") == []


def test_validate_response_reports_and_observes() -> None:
    observer = RecordingObserver()
    result = validate_response("We predict growth and you should hire.", "prescriptive", observer=observer)
    assert result.accepted is False
    assert result.violations == ["should", "predict"]
    assert result.to_dict() == {"phase": "prescriptive", "violations": ["should", "predict"], "accepted": False}
    assert observer.of_type("phase_violation")[0]["violations"] == ["should", "predict"]

    clean = validate_response("Usage trends upward; expect a busy week.", "predictive", observer=observer)
    assert clean.accepted is True
    assert len(observer.of_type("phase_violation")) == 1


def test_violation_is_logged_to_ops_logger(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger=OPS_LOGGER_NAME)
    validate_response("It will rain", "descriptive")
    assert "phase_violation" in caplog.text
    assert "descriptive" in caplog.text


def test_locked_refusal_without_metadata() -> None:
    assert get_phase_refusal_message("locked") == (
        "AI Insights are not yet available. Insufficient data for AI insights. "
    )


def test_locked_refusal_with_requirements() -> None:
    _, metadata = classify_phase({"metrics_count": 4, "active_integrations_count": 1, "days_since_first_integration": 2})
    message = get_phase_refusal_message(AIInsightPhase.LOCKED, metadata)
    assert message.startswith("AI Insights are not yet available. Insufficient data for AI insights. ")
    assert "To unlock descriptive insights: 6 more metrics (4/10), 3 more successful poll cycles (0/3)." in message


def test_generation_constraints_name_the_phase_vocabulary() -> None:
    block = build_generation_constraints("diagnostic")
    assert "Authority phase: diagnostic." in block
    assert "Maximum inference depth: causality." in block
    assert "suggest, recommend, should, predict, will, forecast" in block
    assert "You may: (none)." in build_generation_constraints("locked")
