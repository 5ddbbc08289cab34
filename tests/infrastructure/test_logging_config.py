"""Tests for structured logging setup."""

import json
import logging
import sys

from cvd_risk.infrastructure.logging_config import StructuredFormatter, setup_logging


def make_record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("cvd_risk.test", logging.WARNING, __file__, 10, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    """Test StructuredFormatter."""

    def test_json_fields(self):
        payload = json.loads(StructuredFormatter().format(make_record("Missing required data")))

        assert payload["level"] == "WARNING"
        assert payload["logger"] == "cvd_risk.test"
        assert payload["message"] == "Missing required data"
        assert payload["line"] == 10
        assert payload["timestamp"].endswith("Z")

    def test_extra_fields_included(self):
        record = make_record("Missing", patient_id="p1", missing=["hdl_cholesterol"])
        payload = json.loads(StructuredFormatter().format(record))

        assert payload["patient_id"] == "p1"
        assert payload["missing"] == ["hdl_cholesterol"]

    def test_exception_included(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord("cvd_risk.test", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())
        payload = json.loads(StructuredFormatter().format(record))

        assert "ValueError: boom" in payload["exception"]


class TestSetupLogging:
    """Test setup_logging."""

    def test_human_readable(self, restore_root_logger):
        setup_logging(use_json=False, log_level="debug")

        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        assert not isinstance(restore_root_logger.handlers[0].formatter, StructuredFormatter)

    def test_json(self, restore_root_logger):
        setup_logging(use_json=True, log_level="WARNING")

        assert restore_root_logger.level == logging.WARNING
        assert isinstance(restore_root_logger.handlers[0].formatter, StructuredFormatter)

    def test_unknown_level_falls_back_to_info(self, restore_root_logger):
        setup_logging(log_level="verbose")
        assert restore_root_logger.level == logging.INFO
