"""Tests for the JSON log formatter and the shared logger."""

import json
import logging
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from tehcore.logger import TehLogger, _JsonFormatter


def _record(msg: str = "Polling started", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="tehbot", level=logging.INFO, pathname=__file__, lineno=1,
        msg=msg, args=(), exc_info=None, func="poll",
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def test_standard_fields(self) -> None:
        entry = json.loads(_JsonFormatter().format(_record()))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "tehbot"
        assert entry["message"] == "Polling started"
        assert entry["func_name"] == "poll"
        assert "timestamp" in entry

    def test_extra_fields_merged(self) -> None:
        entry = json.loads(_JsonFormatter().format(_record(update_id=42, api_method="getUpdates")))
        assert entry["update_id"] == 42
        assert entry["api_method"] == "getUpdates"
        assert "args" not in entry

    def test_exception_included(self) -> None:
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record()
            record.exc_info = sys.exc_info()
        entry = json.loads(_JsonFormatter().format(record))
        assert "RuntimeError: boom" in entry["exc_info"]

    def test_unserialisable_extra_uses_str(self) -> None:
        entry = json.loads(_JsonFormatter().format(_record(error=ValueError("bad"))))
        assert entry["error"] == "bad"


class TestTehLogger:
    def test_singleton(self) -> None:
        assert TehLogger.get_logger() is TehLogger.get_logger()
        assert TehLogger.get_logger().name == "tehbot"
