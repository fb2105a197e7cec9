"""Writable stream capability and adapters for standard ``io`` objects."""

from __future__ import annotations

import io
import os
import threading
from typing import Any, Callable, Optional, Protocol

from ..metrics import record_bytes


Callback = Callable[[Optional[BaseException]], None]


class WritableStream(Protocol):
    """A sink accepting one record (or one chunk of text) per ``write``."""

    writable: bool

    def write(
        self, data: Any, encoding: str | None = None, callback: Callback | None = None
    ) -> bool:  # pragma: no cover - protocol
        ...


def is_writable(stream: Any) -> bool:
    """Return True when ``stream`` can currently accept writes.

    Honors both a plain ``writable`` flag and the ``io`` style
    ``writable()`` method (a closed ``io`` stream is not writable).
    """

    if stream is None:
        return False

    flag = getattr(stream, "writable", False)
    if callable(flag):
        if getattr(stream, "closed", False):
            return False
        return bool(flag())

    return bool(flag)


def as_writable_stream(stream: Any) -> WritableStream:
    """Adapt ``io`` objects to the ``write(data, encoding, callback)`` contract."""

    if callable(getattr(stream, "writable", None)):
        return IOStream(stream)
    return stream


class IOStream:
    """Expose a standard ``io`` stream through the writable stream contract.

    Errors raised by the wrapped stream go to ``callback`` when one is
    given and are raised otherwise.
    """

    def __init__(self, stream: Any) -> None:
        self._stream = stream # The wrapped io object
        self._binary = isinstance(stream, (io.RawIOBase, io.BufferedIOBase))
        self._lock = threading.Lock() # Serializes write + flush

    @property
    def writable(self) -> bool:
        return is_writable(self._stream)

    @property
    def raw_stream(self) -> Any:
        return self._stream

    def write(
        self, data: Any, encoding: str | None = None, callback: Callback | None = None
    ) -> bool:
        payload = data
        if self._binary and isinstance(data, str):
            payload = data.encode(encoding or "utf-8")

        try:
            with self._lock:
                self._stream.write(payload)
                flush = getattr(self._stream, "flush", None)
                if flush is not None:
                    flush()
        except (OSError, ValueError) as exc:
            if callback is None:
                raise
            callback(exc)
            return False

        if isinstance(payload, (bytes, bytearray)):
            record_bytes(len(payload))

        if callback is not None:
            callback(None)

        return True

    def close(self) -> None:
        self._stream.close()


class AppendFileStream(IOStream):
    """Append-mode byte sink opened on a filesystem path.

    Text handed to :meth:`write` is encoded as UTF-8 unless another
    encoding is given.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = os.fspath(path)
        super().__init__(open(self.path, "ab"))


__all__ = [
    "AppendFileStream",
    "Callback",
    "IOStream",
    "WritableStream",
    "as_writable_stream",
    "is_writable",
]
