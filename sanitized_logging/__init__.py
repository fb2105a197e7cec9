"""Public API for the sanitized logging library."""

from __future__ import annotations

from .config import (
    LoggingSettings,
    RedactionPolicy,
    configure_settings,
    get_settings,
    load_settings,
)
from .exceptions import ConfigurationError, SanitizedLoggingError
from .logger import (
    add_stream,
    clear_context,
    configure_manager,
    get_context,
    get_errors,
    get_logger,
    logger_context,
    pop_context,
    push_context,
    reset_loggers,
)
from .metrics import get_metrics
from .scrubber import add_secret_for_sanitizing, clear_sanitized_secrets
from .sinks import ErrorStream, SanitizingStream, SinkConfig, with_sanitizer
from .walker import Sanitizer, sanitize_value

__all__ = [
    "ConfigurationError",
    "ErrorStream",
    "LoggingSettings",
    "RedactionPolicy",
    "SanitizedLoggingError",
    "SanitizingStream",
    "Sanitizer",
    "SinkConfig",
    "add_secret_for_sanitizing",
    "add_stream",
    "clear_context",
    "clear_sanitized_secrets",
    "configure",
    "get_context",
    "get_errors",
    "get_logger",
    "get_metrics",
    "get_settings",
    "load_settings",
    "logger_context",
    "pop_context",
    "push_context",
    "reset_loggers",
    "sanitize_value",
    "with_sanitizer",
]


def configure(settings: LoggingSettings | None = None, **overrides) -> LoggingSettings:
    """Resolve settings and rebuild every log stream from them."""

    resolved = configure_settings(settings, **overrides)
    configure_manager(resolved)

    return resolved
