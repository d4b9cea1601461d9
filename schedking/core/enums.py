"""Centralized enum definitions for the scheduler client."""

from enum import Enum


class AppointmentState(str, Enum):
    """Lifecycle state of an appointment handle."""

    AVAILABLE = "available"
    BOOKED = "booked"


class FilterField(str, Enum):
    """Filter fields recognized by the portal's slot search form."""

    DATE = "date_filter"
    APPOINTMENT_TYPE = "appointment_type_filter"
    TRAINER = "trainer_filter"

    @classmethod
    def values(cls) -> list:
        """Return list of all enum values."""
        return [e.value for e in cls]


class PortalRequest(str, Enum):
    """Values of the portal's ``request`` query parameter."""

    GET_LIST = "get_list"
    MAKE_REQUEST = "make_request"
    CANCEL_APPOINTMENT = "cancel_appt"
