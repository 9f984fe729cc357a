"""
Unit Tests for logging context and formatters
"""
import json
import sys
import logging

from safedrive.core.logging_config import (
    ContextualFormatter,
    JSONFormatter,
    SafeDriveLogger,
    generate_request_id,
    get_request_id,
    log_context,
    logger,
    request_context,
    set_user_id,
)


def make_record(msg="hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord("safedrive", logging.INFO, __file__, 10, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestRequestContext:

    def test_ids_are_scoped_to_the_block(self):
        before = log_context()

        with request_context("req00001", driver_id="drv-1"):
            set_user_id("user-1")
            assert log_context() == {"request_id": "req00001", "user_id": "user-1", "driver_id": "drv-1"}

        assert log_context() == before

    def test_context_is_reset_after_errors(self):
        before = get_request_id()
        try:
            with request_context("req00002"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        assert get_request_id() == before

    def test_generated_ids_are_short_hex(self):
        request_id = generate_request_id()

        assert len(request_id) == 8
        int(request_id, 16)


class TestFormatters:

    def test_json_formatter_includes_context_and_extras(self):
        with request_context("req00003"):
            line = JSONFormatter().format(make_record(event_type="alert", alert_severity="CRITICAL"))

        entry = json.loads(line)
        assert entry["message"] == "hello"
        assert entry["request_id"] == "req00003"
        assert entry["event_type"] == "alert"
        assert entry["alert_severity"] == "CRITICAL"
        assert "driver_id" not in entry

    def test_json_formatter_serialises_exceptions(self):
        try:
            raise ValueError("bad input")
        except ValueError:
            record = logging.LogRecord("safedrive", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())

        entry = json.loads(JSONFormatter().format(record))
        assert entry["exception"]["type"] == "ValueError"
        assert "bad input" in entry["exception"]["traceback"]

    def test_contextual_formatter_fills_missing_ids(self):
        formatter = ContextualFormatter("[%(request_id)s] [%(driver_id)s] %(message)s")

        assert formatter.format(make_record()) == "[-] [-] hello"

        with request_context("req00004", driver_id="drv-9"):
            assert formatter.format(make_record()) == "[req00004] [drv-9] hello"


class TestSafeDriveLogger:

    def test_module_logger_has_helpers(self):
        assert isinstance(logger, SafeDriveLogger)
        assert logger.name == "safedrive"

    def test_critical_alerts_log_as_warning(self, caplog):
        with caplog.at_level(logging.INFO, logger="safedrive"):
            logger.log_alert_event("HEALTH", "CRITICAL", "Critical Health Alert: Heart Rate", driver_name="Asha")
            logger.log_alert_event("SYSTEM", "INFO", "Nightly sync finished")

        levels = [record.levelno for record in caplog.records]
        assert levels == [logging.WARNING, logging.INFO]
        assert caplog.records[0].alert_type == "HEALTH"
        assert "(Asha)" in caplog.records[0].getMessage()
