"""Unit tests for the logging utility."""

from __future__ import annotations

import json
import logging

from authcore.core.logger import JSONFormatter, RequestIdFilter, configure_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("authcore.test", logging.WARNING, __file__, 1, "hello %s", ("x",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_configure_logging_sets_level() -> None:
    """``configure_logging`` should set the root logger level."""

    root = logging.getLogger()
    previous_level, previous_handlers = root.level, list(root.handlers)
    try:
        configure_logging("DEBUG")
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
    finally:
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)


def test_json_formatter_copies_known_extras() -> None:
    payload = json.loads(JSONFormatter().format(_record(reason="expired", user_id="u1", secret="s")))

    assert payload["message"] == "hello x"
    assert payload["level"] == "WARNING"
    assert payload["reason"] == "expired"
    assert payload["user_id"] == "u1"
    assert "secret" not in payload


def test_request_id_filter_outside_request() -> None:
    record = _record()
    assert RequestIdFilter().filter(record) is True
    assert record.request_id is None


def test_request_id_is_echoed(app) -> None:
    with app.test_request_context("/", headers={"X-Request-ID": "abc-123"}):
        record = _record()
        RequestIdFilter().filter(record)
        assert record.request_id == "abc-123"
