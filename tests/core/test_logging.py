"""Tests for log configuration and the two formatters.

If the log pipeline expects JSON and plain text ships instead, every
"source unavailable" warning arrives but cannot be filtered by
course_id or source.  These tests catch that before production.
"""

from __future__ import annotations

import json
import logging
import sys

from app.core.logging import _ContainerFormatter, _JsonFormatter, setup_logging


def _record(level: int = logging.INFO, msg: str = "hello", *args: object) -> logging.LogRecord:
    return logging.LogRecord(
        name="app.services.catalog_service",
        level=level,
        pathname="catalog_service.py",
        lineno=42,
        msg=msg,
        args=args,
        exc_info=None,
    )


# ---- setup_logging ----


def test_setup_logging_sets_root_level() -> None:
    setup_logging("debug")
    assert logging.getLogger().level == logging.DEBUG

    setup_logging("warning")
    assert logging.getLogger().level == logging.WARNING


def test_setup_logging_defaults_to_info_for_unknown_level() -> None:
    setup_logging("nonexistent")
    assert logging.getLogger().level == logging.INFO


def test_setup_logging_quiets_http_client_and_sql_at_debug() -> None:
    setup_logging("debug")
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


def test_setup_logging_switches_to_json() -> None:
    setup_logging("info", json_format=True)
    (handler,) = logging.getLogger().handlers
    assert isinstance(handler.formatter, _JsonFormatter)
    setup_logging("info")


# ---- container formatter ----


def test_formatter_excludes_location_for_info() -> None:
    output = _ContainerFormatter().format(_record())
    assert "hello" in output
    assert "[catalog_service.py:" not in output


def test_formatter_includes_location_for_warning() -> None:
    output = _ContainerFormatter().format(_record(logging.WARNING, "degraded"))
    assert "degraded" in output
    assert "[catalog_service.py:42]" in output


# ---- JSON formatter ----


def test_json_formatter_produces_valid_json() -> None:
    parsed = json.loads(_JsonFormatter().format(_record(logging.INFO, "Course %s created", "abc")))
    assert parsed["level"] == "INFO"
    assert parsed["logger"] == "app.services.catalog_service"
    assert parsed["message"] == "Course abc created"
    assert "timestamp" in parsed


def test_json_formatter_lifts_domain_context_fields() -> None:
    record = _record(logging.WARNING, "Source courses unavailable")
    record.request_id = "abc-123"  # type: ignore[attr-defined]
    record.course_id = "65f0c0ffee00000000000001"  # type: ignore[attr-defined]
    record.actor_id = "teacher-1"  # type: ignore[attr-defined]
    record.source = "courses"  # type: ignore[attr-defined]

    parsed = json.loads(_JsonFormatter().format(record))
    assert parsed["request_id"] == "abc-123"
    assert parsed["course_id"] == "65f0c0ffee00000000000001"
    assert parsed["actor_id"] == "teacher-1"
    assert parsed["source"] == "courses"
    assert "role" not in parsed


def test_json_formatter_includes_exception_info() -> None:
    try:
        raise ValueError("test error")
    except ValueError:
        record = _record(logging.ERROR, "Something failed")
        record.exc_info = sys.exc_info()
        output = _JsonFormatter().format(record)

    parsed = json.loads(output)
    assert "ValueError: test error" in parsed["exception"]
