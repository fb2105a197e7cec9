"""Fixtures for sanitized logging unit tests."""

from __future__ import annotations

import io
import sys

import pytest

from sanitized_logging.config import RedactionPolicy, load_settings
from sanitized_logging.logger import LoggerManager
from sanitized_logging.scrubber import SecretScrubber
from sanitized_logging.walker import Sanitizer

from tests.utils.logging import RecordingStream, reset_logging_state


def pytest_collection_modifyitems(config, items):  # pragma: no cover - Pytest hook
    """Tag every test in this directory with the `logging` marker."""

    for item in items:
        item.add_marker(pytest.mark.logging)


@pytest.fixture(autouse=True)
def _reset_logging_state():
    """Reset logging globals (manager, settings, secrets, metrics) around each test."""

    reset_logging_state()
    yield
    reset_logging_state()


@pytest.fixture
def policy():
    """Default redaction policy plus one extra secret field used in examples."""

    return RedactionPolicy.build(secret_fields=("secret_field",))


@pytest.fixture
def scrubber():
    return SecretScrubber()


@pytest.fixture
def sanitizer(policy, scrubber):
    return Sanitizer(policy, scrubber)


@pytest.fixture
def recording_stream():
    return RecordingStream()


@pytest.fixture
def stdout_buffer(monkeypatch):
    """Replace stdout so the manager's stdout stream can be inspected."""

    buffer = io.StringIO()
    monkeypatch.setattr(sys, "stdout", buffer)
    return buffer


@pytest.fixture
def logging_settings(tmp_path):
    """Provide deterministic logging settings with a log file under tmp_path."""

    return load_settings(
        {
            "LOG_NAME": "logging-unit-tests",
            "LOG_LEVEL": "debug",
            "LOG_FORMAT": "json",
            "LOG_FILE": str(tmp_path / "app.log"),
            "LOG_FILE_LEVEL": "trace",
            "LOG_REDACT_SECRET_FIELDS": "api_secret",
            "LOG_SCRUB_SECRETS": "s3cr3t-value",
        }
    )


@pytest.fixture
def logger_manager(monkeypatch, logging_settings, stdout_buffer):
    """Test-scoped logger manager configured with deterministic settings."""

    import sanitized_logging.config as config_module
    import sanitized_logging.logger as logger_module

    manager = LoggerManager()

    monkeypatch.setattr(logger_module, "_MANAGER", manager)
    monkeypatch.setattr(config_module, "_SETTINGS", logging_settings, raising=False)

    manager.configure(logging_settings)

    yield manager

    manager.reset()
