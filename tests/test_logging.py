"""
Tests for tracking_kernel.logging_config -- JSON formatter and LogContext.
"""

import json
import logging
import sys
from datetime import UTC, date, datetime
from uuid import uuid4

from tracking_kernel.domain.period import PeriodType
from tracking_kernel.exceptions import InvalidPeriodKeyError
from tracking_kernel.logging_config import LogContext, StructuredFormatter, get_logger


def _format(record: logging.LogRecord) -> dict:
    return json.loads(StructuredFormatter().format(record))


def _record(msg: str = "event_name", **extra) -> logging.LogRecord:
    record = logging.LogRecord("tracking_kernel.test", logging.INFO, __file__, 1, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_envelope_fields():
    payload = _format(_record())
    assert payload["level"] == "INFO"
    assert payload["logger"] == "tracking_kernel.test"
    assert payload["message"] == "event_name"
    assert "ts" in payload


def test_extra_fields_are_serialized():
    client_id = uuid4()
    payload = _format(_record(client_id=client_id, codes=frozenset({"A"})))
    assert payload["client_id"] == str(client_id)
    assert payload["codes"] == ["A"]


def test_datetimes_enums_and_unknown_objects_are_serialized():
    class Opaque:
        def __str__(self) -> str:
            return "opaque"

    payload = _format(
        _record(
            when=datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC),
            on=date(2024, 1, 31),
            period_type=PeriodType.QUARTERLY,
            ids=frozenset({"A"}),
            thing=Opaque(),
        )
    )
    assert payload["when"] == "2024-01-02T03:04:05+00:00"
    assert payload["on"] == "2024-01-31"
    assert payload["period_type"] == "quarterly"
    assert payload["ids"] == ["A"]
    assert payload["thing"] == "opaque"


def test_context_fields_merged():
    with LogContext.bind(actor_id=uuid4(), correlation_id="req-1"):
        payload = _format(_record())
    assert payload["correlation_id"] == "req-1"
    assert "actor_id" in payload
    assert "correlation_id" not in _format(_record())


def test_bind_restores_previous_values():
    LogContext.set(org_id="outer")
    with LogContext.bind(org_id="inner"):
        assert LogContext.get_all()["org_id"] == "inner"
    assert LogContext.get_all()["org_id"] == "outer"


def test_exception_fields():
    try:
        raise InvalidPeriodKeyError("month 13", period_type="monthly", period_month=13)
    except InvalidPeriodKeyError:
        record = logging.LogRecord(
            "tracking_kernel.test", logging.ERROR, __file__, 1, "failed", (), sys.exc_info(),
        )
    payload = _format(record)
    assert payload["exc_type"] == "InvalidPeriodKeyError"
    assert payload["exc_code"] == "INVALID_PERIOD_KEY"
    assert payload["exc_reason"] == "month 13"
    assert payload["exc_period_month"] == 13
    assert "traceback" in payload


def test_get_logger_namespace():
    assert get_logger("services.x").name == "tracking_kernel.services.x"
