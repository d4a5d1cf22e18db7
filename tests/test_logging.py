import json
import logging

from schoolms.logging import get_logger
from schoolms.logging.filters import SensitiveDataFilter
from schoolms.logging.formatters import JSONFormatter


def make_record(msg, *args, **extra):
    record = logging.LogRecord("schoolms.cache.manager", logging.INFO, __file__, 10, msg, args, None)
    record.__dict__.update(extra)
    return record


def test_json_formatter_copies_extra_fields():
    record = make_record("Cache miss: %s", "student_5", cache_key="student_5", entity_type="student")

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "Cache miss: student_5"
    assert payload["level"] == "INFO"
    assert payload["cache_key"] == "student_5"
    assert payload["entity_type"] == "student"


def test_json_formatter_redacts_sensitive_extras():
    record = make_record("login", auth_token="abc")

    payload = json.loads(JSONFormatter().format(record))

    assert payload["auth_token"] == "***REDACTED***"


def test_sensitive_filter_masks_values():
    record = make_record("Cached user {'email': 'a@b.c', 'password': 'hunter2'}")

    assert SensitiveDataFilter().filter(record) is True
    assert "hunter2" not in record.getMessage()
    assert "'password': '***REDACTED***'" in record.getMessage()
    assert "a@b.c" in record.getMessage()


def test_get_logger_is_configured_once():
    logger = get_logger("schoolms.tests.logging")

    assert get_logger("schoolms.tests.logging") is logger
    assert len(logger.handlers) == 1
    assert logger.propagate is False
