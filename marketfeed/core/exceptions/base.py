"""marketfeed core exception classes."""

from typing import Any


class MarketFeedError(Exception):
    """Base class for all marketfeed errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "GENERAL_ERROR",
        details: dict[str, Any] | None = None,
    ):
        """Initialise the error.

        Args:
            message: human readable message
            error_code: stable machine readable code
            details: extra context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ConfigurationError(MarketFeedError):
    """Invalid configuration value."""

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        super_details = details or {}
        if field:
            super_details["field"] = field
        super().__init__(message, "CONFIGURATION_ERROR", super_details)
        self.field = field


class SourceError(MarketFeedError):
    """A single attempt against a data source failed."""

    def __init__(
        self,
        message: str,
        provider_name: str,
        error_code: str = "SOURCE_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, error_code, details)
        self.provider_name = provider_name


class SourceTimeout(SourceError):
    """The attempt exceeded its hard timeout."""

    def __init__(self, message: str, provider_name: str, timeout: float | None = None, details: dict[str, Any] | None = None):
        super_details = details or {}
        if timeout is not None:
            super_details["timeout"] = timeout
        super().__init__(message, provider_name, "SOURCE_TIMEOUT", super_details)
        self.timeout = timeout


class SourceBadResponse(SourceError):
    """Non-2xx status, transport failure or unparsable payload."""

    def __init__(
        self,
        message: str,
        provider_name: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if status_code is not None:
            super_details["status_code"] = status_code
        super().__init__(message, provider_name, "SOURCE_BAD_RESPONSE", super_details)
        self.status_code = status_code


class SourceMissingField(SourceError):
    """An optional payload field is absent; parsers degrade instead of failing."""

    def __init__(self, field: str, provider_name: str, details: dict[str, Any] | None = None):
        super_details = details or {}
        super_details["field"] = field
        super().__init__(f"Field '{field}' missing from {provider_name} payload", provider_name, "SOURCE_MISSING_FIELD", super_details)
        self.field = field


class AllSourcesExhausted(MarketFeedError):
    """Every eligible source spent its attempts without a usable result."""

    def __init__(
        self,
        message: str,
        attempts: list[Any] | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if attempts:
            super_details["attempts"] = [str(attempt) for attempt in attempts]
        super().__init__(message, "ALL_SOURCES_EXHAUSTED", super_details)
        self.attempts = list(attempts or [])
