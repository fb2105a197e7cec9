"""In-process metrics for the sanitizing sinks."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict


@dataclass
class SinkMetrics:
    """Counters updated by the sinks."""

    records_written: dict[str, int] | None = None # Records forwarded, by stream type
    bytes_written: int = 0 # Encoded bytes appended to log files
    errors_captured: int = 0 # Records stored by error capture sinks

    def as_dict(self) -> dict[str, object]:
        return {
            "records_written": dict(self.records_written or {}),
            "bytes_written": self.bytes_written,
            "errors_captured": self.errors_captured,
        }


_LOCK = threading.RLock()
_METRICS = SinkMetrics(records_written={})


def record_write(stream_type: str) -> None:
    """Record one record forwarded by a sanitizing stream."""

    with _LOCK:
        written: Dict[str, int] = _METRICS.records_written or {}
        written[stream_type] = written.get(stream_type, 0) + 1
        _METRICS.records_written = written


def record_bytes(count: int) -> None:
    if count <= 0:
        return

    with _LOCK:
        _METRICS.bytes_written += count


def record_error_captured() -> None:
    with _LOCK:
        _METRICS.errors_captured += 1


def reset_metrics() -> None:
    """Reset the metrics."""

    with _LOCK:
        _METRICS.records_written = {}
        _METRICS.bytes_written = 0
        _METRICS.errors_captured = 0


def get_metrics() -> SinkMetrics:
    """Return a snapshot of the metrics."""

    with _LOCK:
        return SinkMetrics(
            records_written=dict(_METRICS.records_written or {}),
            bytes_written=_METRICS.bytes_written,
            errors_captured=_METRICS.errors_captured,
        )
