"""Tests for structlog configuration."""

import json
import os

import pytest

from rolesync.logging_config import add_app_context, configure_logging, get_logger


@pytest.fixture
def json_logging():
    configure_logging(json_logs=True, log_level="INFO")
    yield
    configure_logging(
        json_logs=os.environ["ROLESYNC_JSON_LOGS"].lower() == "true",
        log_level=os.environ["ROLESYNC_LOG_LEVEL"],
    )


class TestProcessors:
    def test_add_app_context(self):
        assert add_app_context(None, "info", {"event": "x"})["app"] == "rolesync"


class TestConfigureLogging:
    def test_json_lines_on_stderr(self, capsys, json_logging):
        get_logger("rolesync.tests").info("Role granted", role="admin")
        captured = capsys.readouterr()
        assert captured.out == ""
        entry = json.loads(captured.err.strip().splitlines()[-1])
        assert entry["event"] == "Role granted"
        assert entry["role"] == "admin"
        assert entry["level"] == "info"
        assert entry["app"] == "rolesync"
        assert entry["timestamp"].endswith("Z")
