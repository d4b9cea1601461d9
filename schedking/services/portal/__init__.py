"""Portal client - session-scoped booking protocol for the scheduling portal."""

from .appointment import Appointment
from .booking import AppointmentBooking
from .client import Scheduler
from .form import FilterForm, FormField
from .identity import IdentityResolver
from .models import (
    UNKNOWN_ID,
    IdentityResult,
    OptionCatalog,
    OptionEntry,
    PortalSession,
    TimeResponse,
    TimeSlot,
    UserIdentity,
)
from .parser import PortalPage
from .search import AppointmentSearch
from .session import SessionManager

__all__ = [
    "Scheduler",
    "SessionManager",
    "IdentityResolver",
    "FilterForm",
    "FormField",
    "AppointmentSearch",
    "AppointmentBooking",
    "Appointment",
    "PortalPage",
    "PortalSession",
    "OptionEntry",
    "OptionCatalog",
    "IdentityResult",
    "UserIdentity",
    "TimeResponse",
    "TimeSlot",
    "UNKNOWN_ID",
]
