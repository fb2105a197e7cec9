"""General-purpose string scrubbing applied to every string in a record."""

from __future__ import annotations

import base64
import re
from threading import RLock
from typing import Callable, Iterable


REDACTED = "**redacted**"

Scrub = Callable[[str], str]

GITHUB_TOKEN_PATTERN = re.compile(r"\b(?:ghp|gho|ghu|ghs|ghr)_[A-Za-z0-9]{36,}\b")
URL_CREDENTIALS_PATTERN = re.compile(
    r"(?P<scheme>[a-zA-Z][a-zA-Z0-9+.-]*://)[^\s/:@]+:[^\s/@]+@"
)


def _base64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


class SecretScrubber:
    """Replace registered secrets and well-known credential shapes in text."""

    def __init__(self, secrets: Iterable[str] = ()) -> None:
        self._lock = RLock()
        self._secrets: set[str] = set()
        for secret in secrets:
            self.add_secret(secret)

    def add_secret(self, secret: str) -> None:
        """Register a literal secret (and its base64 form) for scrubbing."""

        if not secret:
            return

        with self._lock:
            self._secrets.add(secret)
            self._secrets.add(_base64(secret))

    def discard_secret(self, secret: str) -> None:
        """Stop scrubbing ``secret`` and its base64 form."""

        with self._lock:
            self._secrets.discard(secret)
            self._secrets.discard(_base64(secret))

    def __contains__(self, secret: object) -> bool:
        with self._lock:
            return secret in self._secrets

    def clear_secrets(self) -> None:
        with self._lock:
            self._secrets.clear()

    def scrub(self, text: str) -> str:
        """Return ``text`` with every sensitive substring replaced."""

        with self._lock:
            # Longest first so a secret containing another is replaced whole.
            secrets = sorted(self._secrets, key=len, reverse=True)

        for secret in secrets:
            if secret in text:
                text = text.replace(secret, REDACTED)

        text = GITHUB_TOKEN_PATTERN.sub(REDACTED, text)
        text = URL_CREDENTIALS_PATTERN.sub(rf"\g<scheme>{REDACTED}@", text)

        return text

    __call__ = scrub


_DEFAULT_SCRUBBER = SecretScrubber()


def get_scrubber() -> SecretScrubber:
    """Return the process-wide scrubber."""

    return _DEFAULT_SCRUBBER


def add_secret_for_sanitizing(secret: str) -> None:
    _DEFAULT_SCRUBBER.add_secret(secret)


def clear_sanitized_secrets() -> None:
    _DEFAULT_SCRUBBER.clear_secrets()


def scrub(text: str) -> str:
    """Scrub ``text`` with the process-wide scrubber."""

    return _DEFAULT_SCRUBBER.scrub(text)


__all__ = [
    "REDACTED",
    "Scrub",
    "SecretScrubber",
    "add_secret_for_sanitizing",
    "clear_sanitized_secrets",
    "get_scrubber",
    "scrub",
]
