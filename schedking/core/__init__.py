"""Core modules: errors, settings, logging and enums."""

from .enums import AppointmentState, FilterField, PortalRequest
from .exceptions import (
    ConfigurationError,
    InvalidValue,
    NoResults,
    PortalResponseError,
    SchedulerError,
    SessionError,
    StateError,
    UpstreamError,
)

__all__ = [
    "AppointmentState",
    "FilterField",
    "PortalRequest",
    "SchedulerError",
    "InvalidValue",
    "SessionError",
    "NoResults",
    "StateError",
    "UpstreamError",
    "PortalResponseError",
    "ConfigurationError",
]
