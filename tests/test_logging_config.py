"""
Tests for structured logging helpers
"""
import json
import logging

import pytest

from reportsdesk.logging_config import (
    ContextualFormatter,
    JSONFormatter,
    ReportsDeskLogger,
    get_logger,
    set_request_id,
    setup_logging,
)


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def captured():
    """Attach a capturing handler to a throwaway child logger"""
    logger = get_logger("tests.capture")
    handler = ListHandler()
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    yield logger, handler.records
    logger.removeHandler(handler)


@pytest.fixture
def restore_root_logger():
    logger = get_logger()
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


class TestGetLogger:

    def test_returns_custom_logger_under_package_namespace(self):
        logger = get_logger("api.client")

        assert isinstance(logger, ReportsDeskLogger)
        assert logger.name == "reportsdesk.api.client"

    def test_global_logger_class_is_untouched(self):
        get_logger("other")

        assert logging.getLoggerClass() is not ReportsDeskLogger


class TestStructuredEvents:

    def test_request_level_by_status(self, captured):
        logger, records = captured

        logger.log_request("GET", "/reports", 200, 12.5)
        logger.log_request("GET", "/reports", 503, 40.0)
        logger.log_request("GET", "/reports", 0, 1.0, error="ConnectError")

        assert [r.levelno for r in records] == [logging.DEBUG, logging.WARNING, logging.WARNING]
        assert records[0].http_status == 200
        assert records[2].error == "ConnectError"
        assert "GET /reports - 200" in records[0].getMessage()

    def test_auth_event(self, captured):
        logger, records = captured

        logger.log_auth_event("refresh", True)
        logger.log_auth_event("refresh", False, reason="status 401")

        assert records[0].levelno == logging.INFO
        assert records[1].levelno == logging.WARNING
        assert records[1].getMessage() == "Auth refresh: failed - status 401"
        assert records[1].failure_reason == "status 401"


class TestFormatters:

    def _record(self, **extra):
        record = logging.LogRecord("reportsdesk.test", logging.INFO, __file__, 10,
                                   "تم الحفظ", None, None)
        record.__dict__.update(extra)
        return record

    def test_json_formatter_includes_extras_and_request_id(self):
        set_request_id("abc12345")
        try:
            output = json.loads(JSONFormatter().format(self._record(http_status=201)))
        finally:
            set_request_id("")

        assert output["message"] == "تم الحفظ"
        assert output["http_status"] == 201
        assert output["request_id"] == "abc12345"
        assert output["level"] == "INFO"

    def test_contextual_formatter_placeholder(self):
        formatter = ContextualFormatter("[%(request_id)s] %(message)s")
        set_request_id("")

        assert formatter.format(self._record()) == "[-] تم الحفظ"


class TestSetupLogging:

    def test_file_handler_and_level(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "logs" / "client.log"

        logger = setup_logging(level="debug", log_format="json", log_file=str(log_file))

        assert logger.level == logging.DEBUG
        assert logger.propagate is False
        assert len(logger.handlers) == 2
        assert log_file.exists()

    def test_unknown_level_falls_back_to_info(self, restore_root_logger):
        logger = setup_logging(level="chatty")

        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1
