"""Stream wrapper that sanitizes every record before it reaches the sink."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Union

from ..exceptions import ConfigurationError
from ..metrics import record_write
from ..schema import to_json_line
from ..walker import Sanitizer, default_sanitizer
from .streams import (
    AppendFileStream,
    Callback,
    WritableStream,
    as_writable_stream,
    is_writable,
)


LOGGER = logging.getLogger("sanitized_logging.sinks")

RAW = "raw"
JSON = "json"
ROTATING_FILE = "rotating-file"


@dataclass(frozen=True)
class SinkConfig:
    """Shape of one destination stream.

    ``type == "raw"`` hands the sanitized record to the stream as a mapping,
    any other type writes newline-terminated JSON text.
    """

    type: str = JSON
    stream: Any = None
    path: str | os.PathLike[str] | None = None
    level: str = "debug"
    name: str | None = None

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "SinkConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(mapping) - known
        if unknown:
            raise ConfigurationError(f"Unknown stream options: {sorted(unknown)}")
        return cls(**dict(mapping))


@dataclass(frozen=True)
class StreamTarget:
    stream: WritableStream


@dataclass(frozen=True)
class PathTarget:
    path: str


Target = Union[StreamTarget, PathTarget]


def resolve_target(config: SinkConfig) -> Target:
    """Decide once whether ``config`` writes to a live stream or a path."""

    if is_writable(config.stream):
        return StreamTarget(as_writable_stream(config.stream))

    if config.path:
        return PathTarget(os.fspath(config.path))

    raise ConfigurationError("Missing 'stream' or 'path' for log stream")


class SanitizingStream:
    """Sanitize, optionally serialize, then forward each record."""

    writable = True

    def __init__(
        self, stream: WritableStream, *, raw: bool, sanitizer: Sanitizer
    ) -> None:
        self._stream = stream # The underlying sink
        self._raw = raw # Forward mappings instead of JSON text
        self._sanitizer = sanitizer

    @property
    def stream(self) -> WritableStream:
        return self._stream

    @property
    def raw(self) -> bool:
        return self._raw

    def write(
        self,
        record: Any,
        encoding: str | None = None,
        callback: Callback | None = None,
    ) -> bool:
        """Sanitize ``record`` and write it to the underlying stream."""

        sanitized = self._sanitizer.sanitize(record)
        payload = sanitized if self._raw else to_json_line(sanitized)

        result = self._stream.write(payload, encoding, callback)
        record_write(RAW if self._raw else JSON)

        return result


def with_sanitizer(
    config: SinkConfig | Mapping[str, Any], *, sanitizer: Sanitizer | None = None
) -> SinkConfig:
    """Return a raw stream config whose stream sanitizes before writing.

    A path-only config is opened in append mode first. The opened file is
    left open for the life of the process.
    """

    # Checked before key validation: rotating-file configs carry period/count.
    stream_type = config.get("type") if isinstance(config, Mapping) else config.type
    if stream_type == ROTATING_FILE:
        raise ConfigurationError("Rotating files aren't supported")

    if not isinstance(config, SinkConfig):
        config = SinkConfig.from_mapping(config)

    target = resolve_target(config)

    if isinstance(target, PathTarget):
        LOGGER.debug("Opening append-mode log file %s", target.path)
        file_stream = AppendFileStream(target.path)
        return with_sanitizer(replace(config, stream=file_stream), sanitizer=sanitizer)

    wrapped = SanitizingStream(
        target.stream,
        raw=config.type == RAW,
        sanitizer=sanitizer or default_sanitizer(),
    )

    return replace(config, type=RAW, stream=wrapped)


__all__ = [
    "JSON",
    "RAW",
    "ROTATING_FILE",
    "PathTarget",
    "SanitizingStream",
    "SinkConfig",
    "StreamTarget",
    "resolve_target",
    "with_sanitizer",
]
