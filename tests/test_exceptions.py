"""Tests for custom exceptions."""

import pytest

from schedking.core.exceptions import (
    ConfigurationError,
    InvalidValue,
    NoResults,
    PortalResponseError,
    SchedulerError,
    SessionError,
    StateError,
    UpstreamError,
)


def test_scheduler_error():
    """Test SchedulerError base exception."""
    error = SchedulerError("Test error")
    assert error.message == "Test error"
    assert error.recoverable is True
    assert str(error) == "Test error"


def test_scheduler_error_to_dict():
    """Test error serialization."""
    data = SchedulerError("Fatal", recoverable=False, details={"step": "lookup"}).to_dict()

    assert data["error"] == "SchedulerError"
    assert data["message"] == "Fatal"
    assert data["recoverable"] is False
    assert data["details"] == {"step": "lookup"}
    assert "timestamp" in data


def test_invalid_value_message():
    """Test InvalidValue message format."""
    error = InvalidValue("phone", "123", "must be properly formatted or 10 characters")
    assert str(error) == "'123' is an invalid phone, must be properly formatted or 10 characters"
    assert error.value_name == "phone"
    assert error.value == "123"


def test_invalid_value_without_details():
    """Test InvalidValue without details."""
    error = InvalidValue("filter field", "room_filter")
    assert str(error) == "'room_filter' is an invalid filter field"


def test_upstream_error_carries_portal_error():
    """Test UpstreamError keeps the portal's description."""
    error = UpstreamError("slot taken")
    assert "slot taken" in str(error)
    assert error.details == {"portal_error": "slot taken"}
    assert error.recoverable is False


def test_portal_response_error_status():
    """Test PortalResponseError keeps the HTTP status."""
    error = PortalResponseError("Lookup failed", status=500)
    assert error.status == 500
    assert error.details == {"status": 500}


@pytest.mark.parametrize(
    "error_class",
    [InvalidValue, SessionError, NoResults, StateError, UpstreamError, ConfigurationError],
)
def test_hierarchy(error_class):
    """All errors share the base class."""
    assert issubclass(error_class, SchedulerError)


def test_default_messages():
    """Test default messages."""
    assert NoResults().message == "No results for the filter from the portal"
    assert SessionError().message == "Session error occurred"
    assert StateError().recoverable is False
