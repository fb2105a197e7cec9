"""Exception types raised by the sanitized logging library."""


class SanitizedLoggingError(Exception):
    pass


class ConfigurationError(SanitizedLoggingError):
    """Raised at setup time when a sink or policy cannot be built."""
