"""Structured logging facade writing through sanitizing streams."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar, Token
from threading import RLock
from typing import Any, Dict, List, Mapping, Tuple

from .config import LoggingSettings, get_settings
from .metrics import reset_metrics
from .schema import build_log_record, resolve_level
from .scrubber import SecretScrubber, get_scrubber
from .sinks.errors import ErrorStream
from .sinks.sanitizing import RAW, SanitizingStream, SinkConfig, with_sanitizer
from .sinks.streams import AppendFileStream
from .walker import Sanitizer


LOGGER = logging.getLogger("sanitized_logging.logger")

_CONTEXT: ContextVar[Mapping[str, Any]] = ContextVar(
    "sanitized_logging_context", default={}
)


class StructuredLogger:
    """Structured logger bound to a name."""

    def __init__(self, name: str, manager: "LoggerManager") -> None:
        self._name = name # The name of the logger
        self._manager = manager # The manager owning the streams

    @property
    def name(self) -> str:
        return self._name

    def trace(self, msg: str, /, **fields: Any) -> None:
        self._log("trace", msg, fields)

    def debug(self, msg: str, /, **fields: Any) -> None:
        self._log("debug", msg, fields)

    def info(self, msg: str, /, **fields: Any) -> None:
        self._log("info", msg, fields)

    def warn(self, msg: str, /, **fields: Any) -> None:
        self._log("warn", msg, fields)

    warning = warn

    def error(self, msg: str, /, **fields: Any) -> None:
        self._log("error", msg, fields)

    def fatal(self, msg: str, /, **fields: Any) -> None:
        self._log("fatal", msg, fields)

    def _log(self, level: str, msg: str, fields: Mapping[str, Any], /) -> None:
        """Build a record and hand it to every stream accepting ``level``."""

        manager = self._manager
        numeric_level = resolve_level(level)

        context = dict(manager.base_context)
        context.update(_CONTEXT.get())
        context["logger"] = self._name

        record = build_log_record(
            name=manager.settings.name,
            level=numeric_level,
            msg=msg,
            context=context,
            fields=fields,
        )

        manager.emit(numeric_level, record)


class LoggerManager:
    """Owns the configured streams and the loggers writing to them."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._loggers: Dict[str, StructuredLogger] = {}
        self._settings: LoggingSettings | None = None
        self._streams: List[Tuple[int, SinkConfig]] = [] # (threshold, raw config)
        self._error_stream: ErrorStream | None = None
        self._sanitizer: Sanitizer | None = None
        self._base_context: Dict[str, Any] = {}
        self._registered_secrets: Tuple[str, ...] = () # Secrets this manager added to the scrubber

    def configure(self, settings: LoggingSettings) -> None:
        """Rebuild every stream from ``settings``."""

        with self._lock:
            self._close_files()

            self._settings = settings
            self._loggers.clear()

            scrubber = self._register_secrets(settings.scrub_secrets)

            self._sanitizer = Sanitizer(settings.redaction, scrubber)
            self._error_stream = ErrorStream()
            self._streams = []

            self.add_stream(
                SinkConfig(
                    name="stdout",
                    type=settings.log_format,
                    stream=sys.stdout,
                    level=settings.level,
                )
            )

            if settings.log_file:
                self.add_stream(
                    SinkConfig(
                        name="logfile",
                        type=settings.log_file_format,
                        path=settings.log_file,
                        level=settings.log_file_level,
                    )
                )

            # Captured errors are kept as emitted, without sanitization.
            self.add_stream(
                SinkConfig(name="error", type=RAW, stream=self._error_stream, level="error"),
                sanitize=False,
            )

            self._base_context = {}

            reset_metrics()

            LOGGER.debug(
                "Configured %d log streams for %s", len(self._streams), settings.name
            )

    def add_stream(self, config: SinkConfig, *, sanitize: bool = True) -> SinkConfig:
        """Register one more destination stream and return its raw config."""

        with self._lock:
            threshold = resolve_level(config.level)
            if sanitize:
                config = with_sanitizer(config, sanitizer=self.sanitizer)
            self._streams.append((threshold, config))
            return config

    def emit(self, level: int, record: Mapping[str, Any]) -> None:
        """Write ``record`` to every stream whose threshold ``level`` meets."""

        with self._lock:
            streams = list(self._streams) if self._settings is not None else None

        if streams is None:
            self.configure(get_settings())
            with self._lock:
                streams = list(self._streams)

        for threshold, config in streams:
            if level >= threshold:
                config.stream.write(record)

    @property
    def settings(self) -> LoggingSettings:
        settings = self._settings

        if settings is None:
            settings = get_settings()
            self.configure(settings)

        return settings

    @property
    def sanitizer(self) -> Sanitizer:
        sanitizer = self._sanitizer

        if sanitizer is None:
            self.configure(get_settings())
            sanitizer = self._sanitizer

        assert sanitizer is not None

        return sanitizer

    @property
    def error_stream(self) -> ErrorStream:
        error_stream = self._error_stream

        if error_stream is None:
            self.configure(get_settings())
            error_stream = self._error_stream

        assert error_stream is not None

        return error_stream

    @property
    def base_context(self) -> Mapping[str, Any]:
        return dict(self._base_context)

    def set_base_context(self, **context: Any) -> None:
        """Replace the fields merged into every record."""

        with self._lock:
            self._base_context = dict(context)

    def get_logger(self, name: str) -> StructuredLogger:
        with self._lock:
            logger = self._loggers.get(name)

            if logger is None:
                logger = StructuredLogger(name, self)
                self._loggers[name] = logger

            return logger

    def reset(self) -> None:
        with self._lock:
            self._close_files()
            self._forget_secrets()
            self._loggers.clear()
            self._streams = []
            self._settings = None
            self._sanitizer = None
            self._error_stream = None
            self._base_context = {}

    # --------------------- internal helpers ---------------------
    def _register_secrets(self, secrets: Tuple[str, ...]) -> SecretScrubber:
        """Swap the previous configuration's secrets for ``secrets``.

        Secrets registered elsewhere before this manager saw them are left alone.
        """

        self._forget_secrets()

        scrubber = get_scrubber()
        added = []
        for secret in secrets:
            if secret and secret not in scrubber:
                scrubber.add_secret(secret)
                added.append(secret)

        self._registered_secrets = tuple(added)
        return scrubber

    def _forget_secrets(self) -> None:
        scrubber = get_scrubber()
        for secret in self._registered_secrets:
            scrubber.discard_secret(secret)
        self._registered_secrets = ()

    def _close_files(self) -> None:
        """Close the log files this manager opened from paths."""

        for _threshold, config in self._streams:
            stream = config.stream
            if isinstance(stream, SanitizingStream) and isinstance(
                stream.stream, AppendFileStream
            ):
                stream.stream.close()


_MANAGER = LoggerManager()


def configure_manager(settings: LoggingSettings) -> None:
    _MANAGER.configure(settings)


def get_logger(name: str) -> StructuredLogger:
    """Get a logger with a given name."""

    return _MANAGER.get_logger(name)


def add_stream(config: SinkConfig, *, sanitize: bool = True) -> SinkConfig:
    return _MANAGER.add_stream(config, sanitize=sanitize)


def get_errors() -> List[Dict[str, Any]]:
    """Return the error-level records captured since the last configure."""

    return _MANAGER.error_stream.get_errors()


def reset_loggers() -> None:
    _MANAGER.reset()


@contextmanager
def logger_context(**context: Any):
    """Context manager for temporary record metadata."""

    token = push_context(**context)
    try:
        yield
    finally:
        pop_context(token)


def push_context(**context: Any) -> Token:
    current = dict(_CONTEXT.get())
    current.update(context)
    return _CONTEXT.set(current)


def pop_context(token: Token) -> None:
    _CONTEXT.reset(token)


def get_context() -> Mapping[str, Any]:
    return dict(_CONTEXT.get())


def clear_context() -> None:
    _CONTEXT.set({})
