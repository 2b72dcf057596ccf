"""
Unit tests for structlog configuration.
"""

import json
import logging

import pytest
import structlog

from upstream_retry.logging_config import (
    AppContext,
    configure_logging,
    redact_api_keys,
    setup_logging,
)


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


def test_app_context_stamps_name_and_environment():
    event = AppContext("upstream-retry", "staging")(None, "info", {"event": "x"})

    assert event["app"] == "upstream-retry"
    assert event["environment"] == "staging"


def test_redact_api_keys_masks_credential_fields():
    event = redact_api_keys(
        None, "info", {"event": "x", "api_key": "sk-7fd8d437a64b4bf8b011fb17945a109d"}
    )

    assert event["api_key"] == "sk-...109d"


@pytest.mark.parametrize("environment", ["development", "production"])
def test_configure_logging_installs_single_handler(restore_logging, environment):
    configure_logging("DEBUG", environment)
    configure_logging("WARNING", environment)

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert root.level == logging.WARNING
    assert logging.getLogger("httpx").level == logging.WARNING


def test_unknown_level_falls_back_to_info(restore_logging):
    configure_logging("VERBOSE")

    assert logging.getLogger().level == logging.INFO


def test_production_renders_json_with_app_name(restore_logging, capsys):
    configure_logging("INFO", "production", app_name="retry-test")
    capsys.readouterr()

    structlog.get_logger("test").warning(
        "Rotating account for status 503", api_key="sk-0c4e9b1f2a7d4e6f8b3a5c7d9e1f2a4b"
    )

    line = capsys.readouterr().out.strip().splitlines()[-1]
    event = json.loads(line)
    assert event["event"] == "Rotating account for status 503"
    assert event["app"] == "retry-test"
    assert event["api_key"] == "sk-...2a4b"


def test_setup_logging_reads_settings(restore_logging, test_settings):
    test_settings.LOG_LEVEL = "ERROR"

    setup_logging(test_settings)

    assert logging.getLogger().level == logging.ERROR
