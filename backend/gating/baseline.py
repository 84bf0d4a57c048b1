"""
Baseline responses: fixed, zero-cost, non-generated payloads served when the
execution mode is baseline.

One generic builder (build_baseline_response) keyed by Surface; the per-surface
functions are thin named wrappers kept for callers. Every call returns a fresh
copy, so callers may mutate what they get without affecting later calls.
BASELINE_RESPONSE_TEXT is byte-exact: no tenant, locale or time variation.
"""

from __future__ import annotations

import copy
from enum import StrEnum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Union

from gating.errors import UnknownSurfaceError

BASELINE_RESPONSE_TEXT = (
    "You have the following integrations connected: Slack, Microsoft Teams.\n"
    "Core314 is currently observing these integrations.\n"
    "Efficiency metrics are not yet available.\n"
    "Your Global Fusion Score is 50.\n"
    "Core314 will begin scoring automatically as activity data is collected."
)

BASELINE_SCENARIOS_MESSAGE = (
    "Scenario generation is not available while Core314 is observing your integrations. "
    "Scenarios will become available once efficiency metrics are collected."
)

_OBSERVATION_MODE = "while Core314 is in observation mode"


class Surface(StrEnum):
    """AI-capable feature surfaces that have a baseline payload."""

    CHAT = "chat"
    SCENARIOS = "scenarios"
    INSIGHTS = "insights"
    GENERIC = "generic"
    ADMIN = "admin"
    OPTIMIZATION = "optimization"
    PREDICTION = "prediction"
    GOVERNANCE = "governance"
    SUPPORT = "support"
    ANOMALY = "anomaly"
    DECISION = "decision"


def _zero_usage() -> Dict[str, int]:
    return {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}


_SHAPES: Mapping[Surface, Mapping[str, Any]] = MappingProxyType({
    Surface.CHAT: {
        "success": True,
        "reply": BASELINE_RESPONSE_TEXT,
        "usage": _zero_usage(),
    },
    Surface.SCENARIOS: {
        "success": True,
        "scenarios": [],
        "message": BASELINE_SCENARIOS_MESSAGE,
    },
    Surface.INSIGHTS: {
        "success": True,
        "summary": (
            "Core314 is currently observing your integrations. "
            "Insights will become available once efficiency metrics are collected."
        ),
        "recommendations": [],
        "message": "Insights are not available while Core314 is observing your integrations.",
    },
    Surface.GENERIC: {
        "text": BASELINE_RESPONSE_TEXT,
        "usage": _zero_usage(),
    },
    Surface.ADMIN: {
        "success": True,
        "message": (
            f"This feature is not available {_OBSERVATION_MODE}. "
            "AI-powered analysis will become available once efficiency metrics are collected."
        ),
        "baseline_mode": True,
    },
    Surface.OPTIMIZATION: {
        "success": True,
        "optimization_needed": False,
        "message": (
            f"Optimization analysis is not available {_OBSERVATION_MODE}. "
            "AI-powered optimization will become available once efficiency metrics are collected."
        ),
        "baseline_mode": True,
    },
    Surface.PREDICTION: {
        "success": True,
        "message": (
            f"Predictive insights are not available {_OBSERVATION_MODE}. "
            "AI-powered predictions will become available once efficiency metrics are collected."
        ),
        "baseline_mode": True,
    },
    Surface.GOVERNANCE: {
        "success": True,
        "governance_action": "pending",
        "message": (
            f"Governance evaluation is not available {_OBSERVATION_MODE}. "
            "AI-powered governance will become available once efficiency metrics are collected."
        ),
        "baseline_mode": True,
    },
    Surface.SUPPORT: {
        "success": True,
        "response": (
            "Core314 is currently in observation mode. "
            "AI-powered support will become available once efficiency metrics are collected. "
            "For immediate assistance, please contact support@core314.com."
        ),
        "baseline_mode": True,
    },
    Surface.ANOMALY: {
        "success": True,
        "anomalies_detected": 0,
        "anomaly_ids": [],
        "critical_anomalies": 0,
        "high_anomalies": 0,
        "gpt4o_analyses_performed": 0,
        "baseline_mode": True,
        "message": f"AI-powered anomaly analysis is not available {_OBSERVATION_MODE}.",
    },
    Surface.DECISION: {
        "success": True,
        "recommended_action": "pending",
        "confidence_score": 0,
        "risk_level": "unknown",
        "reasoning": (
            f"AI-powered decision analysis is not available {_OBSERVATION_MODE}. "
            "Decisions will be evaluated once efficiency metrics are collected."
        ),
        "baseline_mode": True,
    },
})


def parse_surface(value: Union[str, Surface]) -> Surface:
    if isinstance(value, Surface):
        return value
    try:
        return Surface(str(value).strip().lower())
    except ValueError:
        raise UnknownSurfaceError(f"No baseline response for surface {value!r}") from None


def build_baseline_response(surface: Union[str, Surface]) -> Dict[str, Any]:
    """Fresh copy of the fixed payload for the surface."""
    return copy.deepcopy(dict(_SHAPES[parse_surface(surface)]))


def get_baseline_chat_response() -> Dict[str, Any]:
    return build_baseline_response(Surface.CHAT)


def get_baseline_scenario_response() -> Dict[str, Any]:
    return build_baseline_response(Surface.SCENARIOS)


def get_baseline_insights_response() -> Dict[str, Any]:
    return build_baseline_response(Surface.INSIGHTS)


def get_baseline_generic_response() -> Dict[str, Any]:
    return build_baseline_response(Surface.GENERIC)


def get_baseline_admin_response() -> Dict[str, Any]:
    return build_baseline_response(Surface.ADMIN)


def get_baseline_optimization_response() -> Dict[str, Any]:
    return build_baseline_response(Surface.OPTIMIZATION)


def get_baseline_prediction_response() -> Dict[str, Any]:
    return build_baseline_response(Surface.PREDICTION)


def get_baseline_governance_response() -> Dict[str, Any]:
    return build_baseline_response(Surface.GOVERNANCE)


def get_baseline_support_response() -> Dict[str, Any]:
    return build_baseline_response(Surface.SUPPORT)


def get_baseline_anomaly_response() -> Dict[str, Any]:
    return build_baseline_response(Surface.ANOMALY)


def get_baseline_decision_response() -> Dict[str, Any]:
    return build_baseline_response(Surface.DECISION)
