"""In-memory sink capturing error-level records for later inspection."""

from __future__ import annotations

import threading
from typing import Any, Dict, List, Mapping

from ..metrics import record_error_captured
from .streams import Callback


# Transport metadata that carries no diagnostic value once captured.
EXCLUDED_FIELDS: tuple[str, ...] = ("pid", "time", "v", "hostname")


class ErrorStream:
    """Store a copy of every record written, minus :data:`EXCLUDED_FIELDS`."""

    readable = False
    writable = True

    def __init__(self) -> None:
        self._errors: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def write(
        self,
        record: Mapping[str, Any],
        encoding: str | None = None,
        callback: Callback | None = None,
    ) -> bool:
        err = dict(record)
        for prop in EXCLUDED_FIELDS:
            err.pop(prop, None)

        with self._lock:
            self._errors.append(err)

        record_error_captured()

        if callback is not None:
            callback(None)

        return True

    def get_errors(self) -> List[Dict[str, Any]]:
        """Return a snapshot of the captured records, oldest first."""

        with self._lock:
            return list(self._errors)
