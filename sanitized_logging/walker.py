"""Deep sanitization of structured log values.

The walker copies an arbitrary value graph, replacing the values of
policy-listed keys with fixed tokens, eliding binary blobs and scrubbing
strings. Containers are memoized by identity for the duration of one walk,
registered *before* their children are visited, so a structure that
contains itself maps to a result that contains itself, and two keys sharing
one object keep sharing one sanitized object.
"""

from __future__ import annotations

import datetime as _dt
import enum
from collections.abc import Mapping
from typing import Any, Dict, Tuple

from .config import RedactionPolicy, get_settings
from .scrubber import Scrub, get_scrubber


SECRET_MASK = "***********"
CONTENT_PLACEHOLDER = "[content]"
TEMPLATE_PLACEHOLDER = "[Template]"

# id(original) -> (original, result); the original is held so its id stays unique
Seen = Dict[int, Tuple[Any, Any]]


class ValueKind(enum.Enum):
    """The closed set of value shapes the walker distinguishes."""

    SEQUENCE = "sequence"
    BLOB = "blob"
    TIMESTAMP = "timestamp"
    MAPPING = "mapping"
    TEXT = "text"
    OTHER = "other"


def classify(value: Any) -> ValueKind:
    """Return the :class:`ValueKind` of ``value``.

    ``str`` and ``bytes`` are checked explicitly since both are sequences
    as far as :mod:`collections.abc` is concerned.
    """

    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ValueKind.BLOB
    if isinstance(value, _dt.date):
        return ValueKind.TIMESTAMP
    if isinstance(value, Mapping):
        return ValueKind.MAPPING
    if isinstance(value, str):
        return ValueKind.TEXT
    return ValueKind.OTHER


class Sanitizer:
    """Apply a :class:`RedactionPolicy` and a string scrubber to log values."""

    def __init__(self, policy: RedactionPolicy, scrubber: Scrub) -> None:
        self._policy = policy
        self._scrub = scrubber

    @property
    def policy(self) -> RedactionPolicy:
        return self._policy

    def sanitize(self, value: Any, seen: Seen | None = None) -> Any:
        """Return a sanitized copy of ``value``.

        ``seen`` maps ``id()`` of already visited containers to their
        results. Pass ``None`` (the default) to start a fresh walk.
        """

        if seen is None:
            seen = {}

        kind = classify(value)

        if kind is ValueKind.SEQUENCE:
            return self._sanitize_sequence(value, seen)
        if kind is ValueKind.BLOB:
            return CONTENT_PLACEHOLDER
        if kind is ValueKind.TIMESTAMP:
            return value
        if kind is ValueKind.MAPPING:
            return self._sanitize_mapping(value, seen)
        if kind is ValueKind.TEXT:
            return self._scrub(value)
        return value

    __call__ = sanitize

    # --------------------- internal helpers ---------------------
    def _visit(self, value: Any, seen: Seen) -> Any:
        key = id(value)
        if key in seen:
            return seen[key][1]
        return self.sanitize(value, seen)

    def _sanitize_sequence(self, value: Any, seen: Seen) -> list:
        result: list = [None] * len(value)
        seen[id(value)] = (value, result)

        for index, item in enumerate(value):
            result[index] = self._visit(item, seen)

        return result

    def _sanitize_mapping(self, value: Mapping, seen: Seen) -> dict:
        result: dict = {}
        seen[id(value)] = (value, result)

        policy = self._policy
        for key, item in value.items():
            if key in policy.secret_fields:
                result[key] = SECRET_MASK
            elif key in policy.content_fields:
                result[key] = CONTENT_PLACEHOLDER
            elif key in policy.template_fields:
                result[key] = TEMPLATE_PLACEHOLDER
            else:
                result[key] = self._visit(item, seen)

        return result


def default_sanitizer() -> Sanitizer:
    """Build a sanitizer from the process-wide settings and scrubber."""

    return Sanitizer(get_settings().redaction, get_scrubber())


def sanitize_value(
    value: Any,
    seen: Seen | None = None,
    *,
    policy: RedactionPolicy | None = None,
    scrubber: Scrub | None = None,
) -> Any:
    """Sanitize ``value`` with the given (or process-wide) policy and scrubber."""

    sanitizer = Sanitizer(
        policy if policy is not None else get_settings().redaction,
        scrubber if scrubber is not None else get_scrubber(),
    )
    return sanitizer.sanitize(value, seen)


__all__ = [
    "CONTENT_PLACEHOLDER",
    "SECRET_MASK",
    "TEMPLATE_PLACEHOLDER",
    "Sanitizer",
    "ValueKind",
    "classify",
    "default_sanitizer",
    "sanitize_value",
]
