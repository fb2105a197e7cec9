"""Utilities for coordinating sanitized_logging tests."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, Tuple

from sanitized_logging.config import reset_settings
from sanitized_logging.logger import clear_context, reset_loggers
from sanitized_logging.metrics import get_metrics, reset_metrics
from sanitized_logging.scrubber import clear_sanitized_secrets


class RecordingStream:
    """Writable stream double keeping every ``write`` call."""

    def __init__(self, *, writable: bool = True) -> None:
        self.writable = writable
        self.calls: List[Tuple[Any, Optional[str], Any]] = []

    @property
    def payloads(self) -> List[Any]:
        return [data for data, _encoding, _callback in self.calls]

    def write(self, data: Any, encoding: str | None = None, callback=None) -> bool:
        self.calls.append((data, encoding, callback))
        if callback is not None:
            callback(None)
        return True


def reset_logging_state() -> None:
    """Reset every piece of process-wide logging state between tests."""

    reset_loggers()
    reset_settings()
    reset_metrics()
    clear_sanitized_secrets()
    clear_context()


@contextmanager
def capture_logging_metrics(reset_on_exit: bool = True) -> Iterator[Callable[[], dict[str, Any]]]:
    """Track sink metrics and expose a callable returning the latest snapshot."""

    def snapshot() -> dict[str, Any]:
        return get_metrics().as_dict()

    try:
        yield snapshot
    finally:
        if reset_on_exit:
            reset_metrics()
