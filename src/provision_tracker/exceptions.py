"""
Custom exceptions for the provision tracker.

Errors raised by the store client while a tracker operation runs are not
wrapped here; they reach the caller as the original ``redis`` exception.
"""

from typing import Any


class ProvisionTrackerError(Exception):
    """Base exception for provision tracker errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code or "PROVISION_TRACKER_ERROR"
        self.context = context or {}


class ConfigurationError(ProvisionTrackerError):
    """Exception for configuration related errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message, "CONFIGURATION_ERROR", context)


class TrackerConnectionError(ProvisionTrackerError):
    """Exception raised when the key-value store cannot be reached at startup."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, "TRACKER_CONNECTION_ERROR", context)
        self.url = url


class TrackerValueError(ProvisionTrackerError):
    """Exception for stored values that cannot be read as a boolean."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        value: Any = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, "TRACKER_VALUE_ERROR", context)
        self.key = key
        self.value = value
