"""
Readiness evaluation run mode: evaluate every known integration once, append one
verdict per integration, optionally write readiness_result.json.
Evaluation only; never promotes. Safe to re-run (each run appends a fresh verdict per key).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings, get_settings
from ops.ops_events import GateObserver
from readiness.evaluator import (
    ReadinessThresholds,
    SessionFactory,
    evaluate_all_readiness,
    sql_readiness_evaluator,
)

MODE_READINESS_EVAL = "readiness-eval"

READINESS_RESULT_JSON = "readiness_result.json"


async def run_readiness_evaluation(
    session: AsyncSession,
    *,
    settings: Optional[Settings] = None,
    dry_run: bool = False,
    reports_dir: Optional[str | Path] = None,
    observer: Optional[GateObserver] = None,
    session_factory: Optional[SessionFactory] = None,
) -> Dict[str, Any]:
    """
    Run one evaluation cycle. dry_run skips verdict persistence.
    session_factory enables per-key sessions when readiness_max_concurrency > 1.
    Returns {"evaluated", "results"} plus "thresholds_used" and, when written, "json_path".
    """
    settings = settings or get_settings()
    evaluator = sql_readiness_evaluator(
        session,
        settings,
        observer=observer,
        record=not dry_run,
        session_factory=session_factory,
    )
    summary = await evaluate_all_readiness(evaluator)
    summary["thresholds_used"] = ReadinessThresholds.from_settings(settings).to_dict()
    summary["dry_run"] = dry_run

    if reports_dir is not None:
        reports_path = Path(reports_dir)
        reports_path.mkdir(parents=True, exist_ok=True)
        json_path = reports_path / READINESS_RESULT_JSON
        json_path.write_text(json.dumps(summary, indent=2, default=str), encoding="utf-8")
        summary["json_path"] = str(json_path)
    return summary
