"""Tests for structured logging."""

import json
import logging

from storybook.api.logging import BookLogger, JSONFormatter


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("book_generation", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "book_generation"
        assert data["message"] == "hello world"
        assert data["timestamp"].endswith("Z")

    def test_structured_extras(self):
        data = json.loads(JSONFormatter().format(make_record(task_id="t1", stage="saving", duration=1.5)))

        assert data["task_id"] == "t1"
        assert data["stage"] == "saving"
        assert data["duration"] == 1.5

    def test_unknown_extras_are_dropped(self):
        data = json.loads(JSONFormatter().format(make_record(secret="x")))
        assert "secret" not in data

    def test_non_ascii_is_kept(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "Hikaye yazılıyor", (), None)
        assert "yazılıyor" in JSONFormatter().format(record)


class TestBookLogger:
    def test_failure_records_error_type(self, caplog):
        with caplog.at_level(logging.ERROR, logger="book_generation"):
            try:
                raise ValueError("boom")
            except ValueError as e:
                BookLogger().generation_failed("t1", e, stage="generating_story")

        record = caplog.records[-1]
        assert record.task_id == "t1"
        assert record.error_type == "ValueError"
        assert record.stage == "generating_story"
