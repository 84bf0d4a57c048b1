"""Integration readiness: evaluation verdicts and the admin-only maturity promotion step."""

from readiness.evaluator import (
    ReadinessEvaluator,
    ReadinessThresholds,
    SessionPerCallStore,
    classify_event_type,
    compute_metric_sample,
    determine_readiness,
    evaluate_all_readiness,
    sql_readiness_evaluator,
)
from readiness.promotion import PromotionResult, promote_integration

__all__ = [
    "PromotionResult",
    "ReadinessEvaluator",
    "ReadinessThresholds",
    "SessionPerCallStore",
    "classify_event_type",
    "compute_metric_sample",
    "determine_readiness",
    "evaluate_all_readiness",
    "promote_integration",
    "sql_readiness_evaluator",
]
