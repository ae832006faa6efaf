from __future__ import annotations

import json
import logging

from vendorstore.utils.logging import JsonFormatter, _json_formatter, configure_logging

EXPECTED_VENDOR_ID = 10
EXPECTED_VERSION = 3


def _record() -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="hello",
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.vendor_id = EXPECTED_VENDOR_ID
    record.operation = "update"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["vendor_id"] == EXPECTED_VENDOR_ID
    assert payload["operation"] == "update"
    assert "lineno" not in payload


def test_json_formatter_supports_legacy_nested_extra_field() -> None:
    record = _record()
    record.extra = {"version": EXPECTED_VERSION}

    payload = json.loads(_json_formatter(record))

    assert payload["version"] == EXPECTED_VERSION


def test_configure_logging_installs_json_formatter() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging(level="DEBUG", json_logs=True)
        assert root.level == logging.DEBUG
        assert any(isinstance(h.formatter, JsonFormatter) for h in root.handlers)
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)


def test_configure_logging_without_force_keeps_existing_handlers() -> None:
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    sentinel = logging.NullHandler()
    root.handlers = [sentinel]
    try:
        configure_logging(level="INFO", force=False)
        assert root.handlers == [sentinel]
    finally:
        root.handlers = saved_handlers


def test_json_formatter_includes_utc_timestamp() -> None:
    record = _record()
    record.created = 0.0

    payload = json.loads(_json_formatter(record))

    assert payload["ts"] == "1970-01-01T00:00:00+00:00"


def test_configure_logging_quiets_pool_logger() -> None:
    root = logging.getLogger()
    pool_logger = logging.getLogger("psycopg.pool")
    saved_handlers, saved_level, saved_pool_level = root.handlers[:], root.level, pool_logger.level
    try:
        configure_logging(level="debug")
        assert root.level == logging.DEBUG
        assert pool_logger.level == logging.WARNING
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)
        pool_logger.setLevel(saved_pool_level)
