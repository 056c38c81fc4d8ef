"""
Top-level test configuration for rolesync.
"""

import os

import pytest

# Ensure test-friendly defaults
os.environ.setdefault("ROLESYNC_JSON_LOGS", "false")
os.environ.setdefault("ROLESYNC_LOG_LEVEL", "DEBUG")


@pytest.fixture(scope="session", autouse=True)
def _configure_logging():
    """Route structlog through stdlib logging so stdout stays clean for CLI output."""
    from rolesync.logging_config import configure_logging

    configure_logging(
        json_logs=os.environ["ROLESYNC_JSON_LOGS"].lower() == "true",
        log_level=os.environ["ROLESYNC_LOG_LEVEL"],
    )
