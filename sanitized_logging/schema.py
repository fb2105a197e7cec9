"""Structured log record schema and NDJSON framing."""

from __future__ import annotations

import datetime as _dt
import json
import os
import socket
import traceback
from typing import Any, Dict, Mapping

from .exceptions import ConfigurationError
from .walker import ValueKind, classify

SCHEMA_VERSION = 0

LEVELS: Dict[str, int] = {
    "trace": 10,
    "debug": 20,
    "info": 30,
    "warn": 40,
    "warning": 40,
    "error": 50,
    "critical": 60,
    "fatal": 60,
}

CIRCULAR = "[Circular]"

_HOSTNAME = socket.gethostname()


def resolve_level(level: str | int) -> int:
    """Map a level name (or number) to its numeric value."""

    if isinstance(level, int):
        return level

    try:
        return LEVELS[level.strip().lower()]
    except KeyError:
        raise ConfigurationError(f"Unknown log level: {level!r}") from None


def _utc_now() -> _dt.datetime:
    return _dt.datetime.now(tz=_dt.timezone.utc)


def serialize_error(exc: BaseException) -> Dict[str, Any]:
    """Render an exception as a plain mapping suitable for a record."""

    return {
        "type": type(exc).__name__,
        "message": str(exc),
        "stack": "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        ),
    }


def build_log_record(
    *,
    name: str,
    level: int,
    msg: str,
    context: Mapping[str, Any] | None = None,
    fields: Mapping[str, Any] | None = None,
) -> Dict[str, Any]:
    """Build a record carrying the transport metadata every sink expects.

    ``fields`` is taken as one mapping so user keys such as ``name`` or
    ``level`` never clash with the parameters of this function.
    """

    record: Dict[str, Any] = {
        "name": name,
        "hostname": _HOSTNAME,
        "pid": os.getpid(),
        "level": level,
    }

    if context:
        record.update(context)

    fields = dict(fields or {})
    err = fields.pop("err", None)
    if isinstance(err, BaseException):
        record["err"] = serialize_error(err)
    elif err is not None:
        record["err"] = err

    record.update(fields)
    record["msg"] = msg
    record["time"] = _utc_now()
    record["v"] = SCHEMA_VERSION

    return record


def safe_cycles(value: Any, _ancestors: set[int] | None = None) -> Any:
    """Return a tree copy of ``value`` where back-references read ``[Circular]``.

    Only containers on the current path count as cycles. A container shared
    by two siblings is copied into both.
    """

    kind = classify(value)
    if kind is not ValueKind.SEQUENCE and kind is not ValueKind.MAPPING:
        return value

    ancestors = _ancestors if _ancestors is not None else set()
    key = id(value)
    if key in ancestors:
        return CIRCULAR

    ancestors.add(key)
    try:
        if kind is ValueKind.SEQUENCE:
            return [safe_cycles(item, ancestors) for item in value]
        return {k: safe_cycles(v, ancestors) for k, v in value.items()}
    finally:
        ancestors.discard(key)


def _json_default(value: Any) -> Any:
    if isinstance(value, _dt.datetime):
        return (
            value.isoformat(timespec="milliseconds").replace("+00:00", "Z")
        )
    if isinstance(value, _dt.date):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json_line(value: Any) -> str:
    """Serialize ``value`` as one JSON document ending in exactly one newline."""

    text = json.dumps(
        safe_cycles(value),
        default=_json_default,
        ensure_ascii=False,
        separators=(",", ":"),
    )
    if text.endswith("\n"):
        text = text[:-1]
    return text + "\n"


__all__ = [
    "CIRCULAR",
    "LEVELS",
    "SCHEMA_VERSION",
    "build_log_record",
    "resolve_level",
    "safe_cycles",
    "serialize_error",
    "to_json_line",
]
