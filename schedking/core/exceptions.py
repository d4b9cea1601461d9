"""Custom exception classes for the scheduler client."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional


class SchedulerError(Exception):
    """Base exception for the scheduler client."""

    def __init__(
        self, message: str, recoverable: bool = True, details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize scheduler error.

        Args:
            message: Error message
            recoverable: Whether the caller may reasonably try the step again
            details: Additional error details
        """
        self.message = message
        self.recoverable = recoverable
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "recoverable": self.recoverable,
            "details": self.details,
            "timestamp": self.timestamp,
        }


class InvalidValue(SchedulerError):
    """A value handed to a normalization step or form field is not acceptable."""

    def __init__(self, value_name: str, value: Any, details: str = ""):
        """
        Initialize invalid value error.

        Args:
            value_name: Name of the invalid value (e.g. ``phone``)
            value: The given value
            details: Details about why the value was rejected
        """
        self.value_name = value_name
        self.value = value
        message = f"'{value}' is an invalid {value_name}"
        if details:
            message += f", {details}"
        super().__init__(
            message,
            recoverable=False,
            details={"value_name": value_name, "details": details},
        )


class SessionError(SchedulerError):
    """Session tokens missing, or a step was attempted before its prerequisite."""

    def __init__(
        self,
        message: str = "Session error occurred",
        recoverable: bool = True,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, recoverable, details)


class NoResults(SchedulerError):
    """The slot search returned no result pages."""

    def __init__(self, message: str = "No results for the filter from the portal"):
        super().__init__(message, recoverable=True)


class StateError(SchedulerError):
    """Appointment lifecycle violation or data read before identity resolution."""

    def __init__(
        self,
        message: str = "Invalid state for this operation",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, recoverable=False, details=details)


class UpstreamError(SchedulerError):
    """The portal explicitly reported that a mutation failed."""

    def __init__(self, portal_error: Any, message: Optional[str] = None):
        """
        Initialize upstream error.

        Args:
            portal_error: Error description reported by the portal
            message: Optional override for the error message
        """
        self.portal_error = portal_error
        if message is None:
            message = f"Portal reported a failure: {portal_error}"
        super().__init__(message, recoverable=False, details={"portal_error": portal_error})


class PortalResponseError(SchedulerError):
    """The portal answered with an unexpected status or an undecodable body."""

    def __init__(
        self, message: str = "Unexpected response from portal", status: Optional[int] = None
    ):
        self.status = status
        details = {"status": status} if status is not None else {}
        super().__init__(message, recoverable=True, details=details)


class ConfigurationError(SchedulerError):
    """Configuration error occurred."""

    def __init__(
        self,
        message: str = "Configuration error",
        recoverable: bool = False,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, recoverable, details)
