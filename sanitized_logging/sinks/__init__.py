"""Sink implementations."""

from .errors import ErrorStream
from .sanitizing import SanitizingStream, SinkConfig, with_sanitizer
from .streams import AppendFileStream, IOStream

__all__ = [
    "AppendFileStream",
    "ErrorStream",
    "IOStream",
    "SanitizingStream",
    "SinkConfig",
    "with_sanitizer",
]
