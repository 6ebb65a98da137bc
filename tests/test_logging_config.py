"""Tests for structured JSON logging."""

import json
import logging
import sys

from src.api.logging_config import JSONFormatter, setup_logging


def make_record(**extra):
    record = logging.LogRecord(
        name="src.recommender.engine",
        level=logging.INFO,
        pathname=__file__,
        lineno=42,
        msg="Recommendations generated for %s",
        args=("u1",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_emits_single_line_json():
    output = JSONFormatter().format(make_record())

    assert "\n" not in output
    data = json.loads(output)
    assert data["level"] == "INFO"
    assert data["logger"] == "src.recommender.engine"
    assert data["message"] == "Recommendations generated for u1"
    assert data["line"] == 42
    assert "timestamp" in data


def test_formatter_merges_extra_fields():
    record = make_record(user_id="u1", strategy="collaborative", num_recommendations=2)

    data = json.loads(JSONFormatter().format(record))

    assert data["user_id"] == "u1"
    assert data["strategy"] == "collaborative"
    assert data["num_recommendations"] == 2
    assert "args" not in data
    assert "msg" not in data


def test_formatter_includes_exception():
    try:
        raise ValueError("boom")
    except ValueError:
        record = make_record()
        record.exc_info = sys.exc_info()

    data = json.loads(JSONFormatter().format(record))

    assert "ValueError: boom" in data["exception"]


def test_formatter_stringifies_unserializable_values():
    data = json.loads(JSONFormatter().format(make_record(ids={"p1"})))

    assert data["ids"] == "{'p1'}"


def test_setup_logging_installs_json_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging("debug")

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

        setup_logging("not-a-level")
        assert root.level == logging.INFO
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
