from __future__ import annotations

import json
import logging

from adaptive_record.utils.logging import JsonFormatter, _json_formatter, configure_logging

EXPECTED_RECORD_ID = 10
EXPECTED_SAVED = 3


def _record(msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.record_id = EXPECTED_RECORD_ID
    record.record_type = "Person"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["record_id"] == EXPECTED_RECORD_ID
    assert payload["record_type"] == "Person"
    assert "lineno" not in payload


def test_json_formatter_supports_legacy_nested_extra_field() -> None:
    record = _record()
    record.extra = {"saved": EXPECTED_SAVED}

    payload = json.loads(_json_formatter(record))

    assert payload["saved"] == EXPECTED_SAVED


def test_json_formatter_renders_unserializable_values_as_text() -> None:
    record = _record()
    record.table = object()

    payload = json.loads(JsonFormatter().format(record))

    assert payload["table"].startswith("<object object")


def test_configure_logging_without_force_keeps_existing_handlers() -> None:
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    sentinel = logging.NullHandler()
    root.handlers = [sentinel]
    try:
        configure_logging(level="DEBUG", json_logs=True, force=False)
        assert root.handlers == [sentinel]
    finally:
        root.handlers = saved_handlers


def test_configure_logging_installs_json_handler() -> None:
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    try:
        configure_logging(level="WARNING", json_logs=True)
        assert root.level == logging.WARNING
        assert any(isinstance(h.formatter, JsonFormatter) for h in root.handlers)
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)
