"""Unit tests for log formatting and learner redaction."""

import json
import logging

from learnpath.logging_config import (
    JsonFormatter,
    LearnerRedactionFilter,
    RequestIdFilter,
    request_id_var,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("learnpath.test", logging.INFO, __file__, 1, "Attempt recorded", (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_learner_fields_are_dropped():
    record = _record(user_id="abc", learner_id="def", track_slug="python-basics")
    assert LearnerRedactionFilter().filter(record) is True
    assert not hasattr(record, "user_id")
    assert not hasattr(record, "learner_id")
    assert record.track_slug == "python-basics"


def test_json_line_carries_request_id_and_extras():
    token = request_id_var.set("req-123")
    try:
        record = _record(advanced=True, attempt_type="quiz")
        RequestIdFilter().filter(record)
        line = json.loads(JsonFormatter().format(record))
    finally:
        request_id_var.reset(token)

    assert line["message"] == "Attempt recorded"
    assert line["level"] == "INFO"
    assert line["request_id"] == "req-123"
    assert line["advanced"] is True
    assert line["attempt_type"] == "quiz"


def test_request_id_placeholder_outside_request():
    record = _record()
    RequestIdFilter().filter(record)
    assert record.request_id == "-"
    assert "request_id" not in json.loads(JsonFormatter().format(record))
