"""Tests for logging configuration and formatters."""

import json
import logging
import sys

import pytest

from listing_alerts.domain.models import OutdoorSpace
from listing_alerts.logging import ComponentLoggerAdapter, get_logger
from listing_alerts.logging.config import (
    SERVICE_NAME,
    ContextualFilter,
    JSONFormatter,
    KeyValueFormatter,
    configure_logging,
)
from listing_alerts.logging.context import log_context


@pytest.fixture
def logger():
    """Create a test logger without handlers."""
    test_logger = logging.getLogger("listing_alerts.tests")
    test_logger.setLevel(logging.DEBUG)
    test_logger.handlers.clear()
    yield test_logger
    test_logger.handlers.clear()


def make_record(logger, message="Test message", extra=None, level=logging.INFO):
    return logger.makeRecord("test", level, "test.py", 1, message, (), None, extra=extra)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestJSONFormatter:
    def test_mandatory_fields(self, logger):
        log_obj = json.loads(JSONFormatter().format(make_record(logger)))

        assert log_obj["level"] == "INFO"
        assert log_obj["message"] == "Test message"
        assert log_obj["logger"] == "test"
        assert log_obj["timestamp"].endswith("Z")

    def test_extra_fields(self, logger):
        record = make_record(
            logger,
            extra={"event": "matching.profile.qualified", "score": 100, "qualifies": True},
        )
        log_obj = json.loads(JSONFormatter().format(record))

        assert log_obj["event"] == "matching.profile.qualified"
        assert log_obj["score"] == 100
        assert log_obj["qualifies"] is True

    def test_enum_values_are_serialized(self, logger):
        record = make_record(logger, extra={"outdoor_space": OutdoorSpace.GARDEN})
        log_obj = json.loads(JSONFormatter().format(record))

        assert log_obj["outdoor_space"] == "GARDEN"

    def test_unknown_objects_fall_back_to_str(self, logger):
        class Opaque:
            def __str__(self):
                return "opaque"

        record = make_record(logger, extra={"thing": Opaque()})
        log_obj = json.loads(JSONFormatter().format(record))

        assert log_obj["thing"] == "opaque"

    def test_exception_info(self, logger):
        try:
            raise RuntimeError("delivery failed")
        except RuntimeError:
            record = logger.makeRecord(
                "test", logging.ERROR, "test.py", 1, "Failed", (), sys.exc_info()
            )

        log_obj = json.loads(JSONFormatter().format(record))
        assert "RuntimeError: delivery failed" in log_obj["exc_info"]


class TestKeyValueFormatter:
    def test_appends_sorted_extras(self, logger):
        formatter = KeyValueFormatter("%(levelname)s %(message)s")
        record = make_record(logger, extra={"score": 95, "event": "matching.profile.qualified"})

        assert formatter.format(record) == "INFO Test message event=matching.profile.qualified score=95"

    def test_quotes_values_with_spaces(self, logger):
        formatter = KeyValueFormatter("%(message)s")
        record = make_record(logger, extra={"city": "Den Haag"})

        assert formatter.format(record) == 'Test message city="Den Haag"'

    def test_formats_none_and_booleans(self, logger):
        formatter = KeyValueFormatter("%(message)s")
        record = make_record(logger, extra={"dry_run": False, "listing_id": None})

        assert formatter.format(record) == "Test message dry_run=false listing_id=null"

    def test_skips_service_and_environment(self, logger):
        formatter = KeyValueFormatter("%(message)s")
        record = make_record(logger)
        ContextualFilter(environment="test").filter(record)

        assert formatter.format(record) == "Test message"


class TestContextualFilter:
    def test_adds_static_fields(self, logger):
        record = make_record(logger)
        ContextualFilter(service="svc", environment="staging").filter(record)

        assert record.service == "svc"
        assert record.environment == "staging"

    def test_default_service_name(self, logger):
        record = make_record(logger)
        ContextualFilter().filter(record)

        assert record.service == SERVICE_NAME

    def test_adds_context_fields(self, logger):
        with log_context(event_id="evt-1", listing_id="rw-1001"):
            record = make_record(logger)
            ContextualFilter().filter(record)

        assert record.event_id == "evt-1"
        assert record.listing_id == "rw-1001"

    def test_explicit_extra_wins_over_context(self, logger):
        with log_context(profile_id="context"):
            record = make_record(logger, extra={"profile_id": "explicit"})
            ContextualFilter().filter(record)

        assert record.profile_id == "explicit"

    def test_full_pipeline_json(self, logger):
        with log_context(event_id="evt-1"):
            record = make_record(logger, extra={"event": "pipeline.event.completed"})
            ContextualFilter(environment="test").filter(record)
            log_obj = json.loads(JSONFormatter().format(record))

        assert log_obj["event_id"] == "evt-1"
        assert log_obj["event"] == "pipeline.event.completed"
        assert log_obj["service"] == SERVICE_NAME
        assert log_obj["environment"] == "test"


class TestConfigureLogging:
    def test_json_format(self, restore_root_logger):
        configure_logging(level="DEBUG", format_type="json", environment="test")

        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_key_value_format(self, restore_root_logger):
        configure_logging(level="warning", format_type="key-value")

        root = restore_root_logger
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, KeyValueFormatter)

    def test_invalid_level(self, restore_root_logger):
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging(level="LOUD")

    def test_invalid_format(self, restore_root_logger):
        with pytest.raises(ValueError, match="Invalid log format"):
            configure_logging(format_type="xml")


class TestGetLogger:
    def test_plain_logger_without_component(self):
        assert isinstance(get_logger("listing_alerts.tests.plain"), logging.Logger)

    def test_component_is_injected(self, caplog):
        adapter = get_logger("listing_alerts.tests.adapter", component="matching")
        assert isinstance(adapter, ComponentLoggerAdapter)

        with caplog.at_level(logging.INFO, logger="listing_alerts.tests.adapter"):
            adapter.info("hello", extra={"event": "test.event"})

        record = caplog.records[-1]
        assert record.component == "matching"
        assert record.event == "test.event"

    def test_per_call_component_wins(self, caplog):
        adapter = get_logger("listing_alerts.tests.override", component="matching")

        with caplog.at_level(logging.INFO, logger="listing_alerts.tests.override"):
            adapter.info("hello", extra={"component": "pipeline"})

        assert caplog.records[-1].component == "pipeline"
