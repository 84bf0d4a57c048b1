"""
Tests for ops events: structured events are emitted (logger spy / captured logs).
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

_backend = Path(__file__).resolve().parent.parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

import pytest

from ops.ops_events import (
    OPS_LOGGER_NAME,
    GateObserver,
    RecordingObserver,
    default_observer,
    log_baseline_served,
    log_execution_mode,
    log_maturity_promotion,
    log_phase_demoted,
    log_readiness_batch,
    log_readiness_error,
    log_readiness_evaluated,
)


def test_ops_logger_name() -> None:
    """Ops events use a dedicated logger name."""
    assert OPS_LOGGER_NAME == "ops_events"


def test_execution_mode_event_emits(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger=OPS_LOGGER_NAME)
    log_execution_mode(None, "baseline", "no active integrations", tenant_id="t-1")
    assert "ops_event=execution_mode_derived" in caplog.text
    assert "mode='baseline'" in caplog.text
    assert "tenant_id='t-1'" in caplog.text


def test_event_keys_are_sorted(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger=OPS_LOGGER_NAME)
    default_observer().event("sample", zeta=1, alpha=2)
    assert "ops_event=sample alpha=2 zeta=1" in caplog.text


def test_event_record_carries_structured_extra(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger=OPS_LOGGER_NAME)
    log_baseline_served(None, "chat")
    record = caplog.records[-1]
    assert record.ops_event_type == "baseline_served"
    assert record.ops_event == {"surface": "chat"}


def test_readiness_events_emit(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger=OPS_LOGGER_NAME)
    log_readiness_evaluated(None, "slack", True, "Eligible: 10 events over 7 days with data types: messages")
    log_readiness_batch(None, evaluated=3, eligible=1, errors=1, duration_seconds=0.123456)
    assert "readiness_evaluated" in caplog.text
    assert "readiness_batch_end" in caplog.text
    assert "duration_seconds=0.1235" in caplog.text


def test_warning_level_events(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger=OPS_LOGGER_NAME)
    log_readiness_error(None, "teams", "evaluate", "boom")
    log_phase_demoted(None, "t-1", "predictive", "diagnostic", "ops@example.com")
    levels = {r.ops_event_type: r.levelno for r in caplog.records}
    assert levels["readiness_error"] == logging.WARNING
    assert levels["phase_demoted"] == logging.WARNING


def test_custom_logger_observer(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="gate.custom")
    log_maturity_promotion(GateObserver(logging.getLogger("gate.custom")), "slack", "PROMOTED", "admin")
    assert caplog.records[-1].name == "gate.custom"
    assert "maturity_promoted" in caplog.text


def test_recording_observer_does_not_log(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger=OPS_LOGGER_NAME)
    observer = RecordingObserver()
    log_baseline_served(observer, "support")
    assert observer.events == [("baseline_served", {"surface": "support"})]
    assert "baseline_served" not in caplog.text
