"""Portal models - TypedDict, dataclass and pydantic definitions."""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, List, Optional, Tuple, TypedDict

from pydantic import BaseModel, Field, field_validator

from ...core.exceptions import SessionError, StateError

if TYPE_CHECKING:
    from .appointment import Appointment

# Placeholder option value ("choose one") rendered at the top of every filter list
PLACEHOLDER_OPTION_ID = "-1"

# Type/trainer id used for booked appointments whose displayed name could not be resolved
UNKNOWN_ID = "unknown"


@dataclass(frozen=True)
class OptionEntry:
    """One choice of a portal filter list."""

    id: str
    label: str


OptionSet = Tuple[OptionEntry, ...]


@dataclass(frozen=True)
class OptionCatalog:
    """The three option lists rendered by the lookup page, replaced as a unit."""

    date_options: OptionSet = ()
    appointment_type_options: OptionSet = ()
    trainer_options: OptionSet = ()


class TimeSlot(TypedDict):
    """Type definition for one open time returned by the slot search."""

    time_24: str
    time_12: str
    details: str


class TimeResponse(TypedDict, total=False):
    """Type definition for one result page of the slot search."""

    appointment_type_id: str
    duration: str
    description: str
    appointment_name: str
    trainer_name: str
    date: str
    datetime: str
    date_formatted: str
    times: List[TimeSlot]
    availability_id: Optional[str]
    appointment_id: str
    hasCredit: str
    firstItem: bool
    trainer_id: str
    displayID: int


class BookingResponse(TypedDict, total=False):
    """Type definition for the booking mutation response."""

    success: int
    error: str


@dataclass
class BookedEntry:
    """Raw fields of one booked-appointment block as rendered by the portal."""

    appointment_id: str
    date_text: str = ""
    time_text: str = ""
    appointment_type_name: str = ""
    trainer_name: str = ""


class UserIdentity(BaseModel):
    """Identity submitted to the portal's user lookup form."""

    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    birthdate: date
    email: str
    phone: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Validate email format."""
        if "@" not in v:
            raise ValueError("Invalid email format")
        return v.strip()

    @field_validator("birthdate", mode="before")
    @classmethod
    def coerce_birthdate(cls, v):
        """Accept datetimes by keeping their UTC calendar date."""
        if isinstance(v, datetime):
            if v.tzinfo is not None:
                v = v.astimezone(timezone.utc)
            return v.date()
        return v


@dataclass
class IdentityResult:
    """Everything recovered from one identity lookup."""

    user_id: str
    booked_appointments: List["Appointment"]
    catalog: OptionCatalog


@dataclass
class PortalSession:
    """
    One ephemeral portal session.

    ``session_token`` and ``login_token`` are set once by bootstrap. ``user_id``,
    ``catalog`` and ``booked_appointments`` are filled by identity resolution and
    replaced together on every refresh.
    """

    location_id: str
    session_token: str
    login_token: str
    user_id: Optional[str] = None
    catalog: Optional[OptionCatalog] = None
    booked_appointments: Optional[List["Appointment"]] = field(default=None, repr=False)

    def require_session_token(self) -> str:
        """
        Get the session token.

        Raises:
            SessionError: If the session was never bootstrapped
        """
        if not self.session_token:
            raise SessionError("You must create a session before using it")
        return self.session_token

    def require_user_id(self) -> str:
        """
        Get the resolved user id.

        Raises:
            StateError: If the identity has not been resolved yet
        """
        if not self.user_id:
            raise StateError("User identity has not been resolved for this session")
        return self.user_id

    def require_catalog(self) -> OptionCatalog:
        """
        Get the option catalog.

        Raises:
            StateError: If the identity has not been resolved yet
        """
        if self.catalog is None:
            raise StateError("Filter options are not available before identity resolution")
        return self.catalog

    def apply_identity(self, result: IdentityResult) -> None:
        """Replace user id, catalog and booked appointments with a fresh lookup."""
        self.user_id = result.user_id
        self.catalog = result.catalog
        self.booked_appointments = list(result.booked_appointments)
