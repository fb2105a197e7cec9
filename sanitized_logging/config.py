"""Configuration utilities for the sanitized logging library.

Default field names come in two spellings: snake_case for Python callers
and the camelCase keys (``npmToken``, ``prBody``) that records decoded from
JSON payloads and upstream tools carry.
"""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping

from .exceptions import ConfigurationError


DEFAULT_SECRET_FIELDS: tuple[str, ...] = (
    "authorization",
    "token",
    "password",
    "secrets",
    "private_key",
    "privateKey",
    "git_private_key",
    "gitPrivateKey",
    "npm_token",
    "npmToken",
    "npmrc",
    "yarnrc",
    "fork_token",
    "forkToken",
    "github_app_key",
    "githubAppKey",
    "https_certificate",
    "httpsCertificate",
    "https_private_key",
    "httpsPrivateKey",
    "https_certificate_authority",
    "httpsCertificateAuthority",
)

DEFAULT_CONTENT_FIELDS: tuple[str, ...] = (
    "content",
    "contents",
    "package_lock_parsed",
    "packageLockParsed",
    "yarn_lock_parsed",
    "yarnLockParsed",
)

DEFAULT_TEMPLATE_FIELDS: tuple[str, ...] = ("pr_body", "prBody")


def _comma_tuple(value: str | None, *, default: tuple[str, ...]) -> tuple[str, ...]:
    """Convert a comma-separated string to a tuple."""

    if not value:
        return default

    return tuple(filter(None, (part.strip() for part in value.split(","))))


@dataclass(frozen=True)
class RedactionPolicy:
    """Field names whose values are replaced before a record is written.

    Matching is exact and case-sensitive. The three sets must not overlap.
    """

    secret_fields: frozenset[str]
    content_fields: frozenset[str]
    template_fields: frozenset[str]

    def __post_init__(self) -> None:
        overlap = (
            (self.secret_fields & self.content_fields)
            | (self.secret_fields & self.template_fields)
            | (self.content_fields & self.template_fields)
        )
        if overlap:
            raise ConfigurationError(
                f"Redaction field sets must be disjoint, overlapping: {sorted(overlap)}"
            )

    @classmethod
    def build(
        cls,
        *,
        secret_fields: Iterable[str] = (),
        content_fields: Iterable[str] = (),
        template_fields: Iterable[str] = (),
    ) -> "RedactionPolicy":
        """Return the default policy extended with the given field names."""

        return cls(
            secret_fields=frozenset(DEFAULT_SECRET_FIELDS).union(secret_fields),
            content_fields=frozenset(DEFAULT_CONTENT_FIELDS).union(content_fields),
            template_fields=frozenset(DEFAULT_TEMPLATE_FIELDS).union(template_fields),
        )


@dataclass(frozen=True)
class LoggingSettings:
    """Immutable runtime configuration."""

    name: str # The name stamped on every record
    level: str # The minimum level written to stdout
    log_format: str # The stdout stream type, "json" or "raw"
    log_file: str | None # Optional append-mode log file
    log_file_level: str # The minimum level written to the log file
    log_file_format: str # The log file stream type
    scrub_secrets: tuple[str, ...] # Literal secrets registered with the scrubber
    redaction: RedactionPolicy

    def with_overrides(self, **kwargs: Any) -> "LoggingSettings":
        return replace(self, **kwargs)


_SETTINGS_LOCK = threading.RLock()
_SETTINGS: LoggingSettings | None = None


def load_settings(env: Mapping[str, str] | None = None) -> LoggingSettings:
    """Load settings from environment variables or a provided mapping."""

    source = env if env is not None else os.environ

    redaction = RedactionPolicy.build(
        secret_fields=_comma_tuple(source.get("LOG_REDACT_SECRET_FIELDS"), default=()),
        content_fields=_comma_tuple(source.get("LOG_REDACT_CONTENT_FIELDS"), default=()),
        template_fields=_comma_tuple(
            source.get("LOG_REDACT_TEMPLATE_FIELDS"), default=()
        ),
    )

    return LoggingSettings(
        name=source.get("LOG_NAME", "app"),
        level=source.get("LOG_LEVEL", "INFO").lower(),
        log_format=source.get("LOG_FORMAT", "json").lower(),
        log_file=source.get("LOG_FILE") or None,
        log_file_level=source.get("LOG_FILE_LEVEL", "DEBUG").lower(),
        log_file_format=source.get("LOG_FILE_FORMAT", "json").lower(),
        scrub_secrets=_comma_tuple(source.get("LOG_SCRUB_SECRETS"), default=()),
        redaction=redaction,
    )


def configure_settings(
    settings: LoggingSettings | None = None, **overrides: Any
) -> LoggingSettings:
    with _SETTINGS_LOCK:
        resolved = settings or load_settings()
        if overrides:
            resolved = resolved.with_overrides(**overrides)
        global _SETTINGS
        _SETTINGS = resolved
        return _SETTINGS


def get_settings() -> LoggingSettings:
    with _SETTINGS_LOCK:
        if _SETTINGS is None:
            return configure_settings()
        return _SETTINGS


def reset_settings() -> None:
    """Forget the resolved settings so the next lookup reloads them."""

    global _SETTINGS
    with _SETTINGS_LOCK:
        _SETTINGS = None
