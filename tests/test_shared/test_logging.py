"""Tests for structured JSON logging."""
from __future__ import annotations

import json
import logging

from src.shared.logging import JSONFormatter, setup_logging, trace_id_var


class TestJSONFormatter:
    def test_format_contains_fields(self):
        formatter = JSONFormatter(service_name="erd-validator")
        record = logging.LogRecord(
            "src.erd_validator", logging.INFO, __file__, 1, "hello %s", ("world",), None
        )
        token = trace_id_var.set("trace-1")
        try:
            entry = json.loads(formatter.format(record))
        finally:
            trace_id_var.reset(token)
        assert entry["message"] == "hello world"
        assert entry["level"] == "INFO"
        assert entry["service_name"] == "erd-validator"
        assert entry["trace_id"] == "trace-1"
        assert entry["logger"] == "src.erd_validator"


class TestSetupLogging:
    def test_configures_service_and_package_loggers(self):
        logger = setup_logging("erd-validator-test", "debug")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        package_logger = logging.getLogger("src")
        assert package_logger.level == logging.DEBUG
        assert package_logger.handlers == logger.handlers

    def test_unknown_level_falls_back_to_info(self):
        logger = setup_logging("erd-validator-test", "chatty")
        assert logger.level == logging.INFO
