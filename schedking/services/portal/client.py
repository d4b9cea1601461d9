"""Scheduler - main client wiring the portal components to one HTTP session."""

from typing import List, Mapping, Optional

import aiohttp
from loguru import logger

from ...core.exceptions import InvalidValue, SessionError, StateError
from ...core.settings import get_settings
from .appointment import Appointment
from .booking import AppointmentBooking
from .form import FilterForm
from .identity import IdentityResolver
from .models import IdentityResult, PortalSession, UserIdentity
from .search import AppointmentSearch
from .session import SessionManager


class Scheduler:
    """
    Client for one location of the scheduling portal.

    Holds at most one portal session at a time; use one instance per workflow.
    """

    def __init__(
        self,
        location_id: str,
        scheduler_url: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        """
        Initialize scheduler client.

        Args:
            location_id: Portal location identifier (domid)
            scheduler_url: Scheduler page URL (default: SCHEDULER_URL setting)
            timeout: Request timeout in seconds (default: REQUEST_TIMEOUT setting)
        """
        if scheduler_url is None or timeout is None:
            settings = get_settings()
            scheduler_url = scheduler_url or settings.scheduler_url
            timeout = timeout or settings.request_timeout

        self.location_id = location_id
        self.scheduler_url = scheduler_url
        self.timeout = timeout

        self._http_session: Optional[aiohttp.ClientSession] = None
        self._portal_session: Optional[PortalSession] = None
        self._form: Optional[FilterForm] = None

        self._booking = AppointmentBooking(scheduler_url, lambda: self._http)
        self._sessions = SessionManager(scheduler_url, lambda: self._http)
        self._identity = IdentityResolver(scheduler_url, lambda: self._http, self._booking)
        self._search = AppointmentSearch(scheduler_url, lambda: self._http, self._booking)

        logger.info(f"Scheduler initialized for location {location_id}")

    async def __aenter__(self):
        """Async context manager entry."""
        await self._init_http_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def _init_http_session(self) -> None:
        """Initialize HTTP session."""
        if self._http_session is None:
            headers = {
                "User-Agent": (
                    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
                    "AppleWebKit/537.36 (KHTML, like Gecko) "
                    "Chrome/135.0.0.0 Safari/537.36"
                ),
                "Accept": "text/html,application/json;q=0.9,*/*;q=0.8",
            }
            timeout = aiohttp.ClientTimeout(total=self.timeout, connect=10)
            self._http_session = aiohttp.ClientSession(headers=headers, timeout=timeout)
            logger.debug("HTTP session initialized")

    async def close(self) -> None:
        """Close HTTP session."""
        if self._http_session:
            await self._http_session.close()
            self._http_session = None

    @property
    def _http(self) -> aiohttp.ClientSession:
        """Get HTTP session, raising error if not initialized."""
        if self._http_session is None:
            raise RuntimeError("HTTP session not initialized. Use 'async with Scheduler(...)'.")
        return self._http_session

    @property
    def session(self) -> PortalSession:
        """
        Get the current portal session.

        Raises:
            SessionError: If create_session() has not been called
        """
        if self._portal_session is None:
            raise SessionError("You must create a session before accessing the session")
        return self._portal_session

    @property
    def user_id(self) -> str:
        """Resolved user id."""
        return self.session.require_user_id()

    async def create_session(self) -> PortalSession:
        """
        Create a new portal session.

        Any previously resolved identity, form and booked appointments are dropped.

        Returns:
            The new session
        """
        await self._init_http_session()
        self._portal_session = await self._sessions.bootstrap(self.location_id)
        self._form = None
        return self._portal_session

    async def refresh_user_data(self, identity: UserIdentity) -> IdentityResult:
        """
        Look the user up again and rebuild the form.

        Args:
            identity: User lookup data
        """
        result = await self._identity.resolve(self.session, identity)
        self._form = FilterForm(self.session, self._search)
        return result

    async def get_form(
        self, identity: Optional[UserIdentity] = None, refresh: bool = False
    ) -> FilterForm:
        """
        Return the filter form, looking the user up first if needed.

        Args:
            identity: User lookup data, required when a lookup is needed
            refresh: Force a new lookup

        Raises:
            InvalidValue: If a lookup is needed but no identity was given
        """
        if not refresh and self._form is not None:
            return self._form
        if identity is None:
            raise InvalidValue("identity", None, "can not be null if trying to refresh")
        await self.refresh_user_data(identity)
        if self._form is None:
            raise StateError("Form should not be empty after a refresh")
        return self._form

    async def get_booked_appointments(
        self, identity: Optional[UserIdentity] = None, refresh: bool = False
    ) -> List[Appointment]:
        """
        Return the user's booked appointments, looking the user up first if needed.

        Args:
            identity: User lookup data, required when a lookup is needed
            refresh: Force a new lookup

        Raises:
            InvalidValue: If a lookup is needed but no identity was given
        """
        booked = self.session.booked_appointments
        if not refresh and booked is not None:
            return booked
        if identity is None:
            raise InvalidValue("identity", None, "can not be null if trying to refresh")
        result = await self.refresh_user_data(identity)
        return result.booked_appointments

    async def search(self, selection: Mapping[str, str]) -> List[Appointment]:
        """
        Apply a filter selection and return the open times.

        Raises:
            StateError: If the form has not been loaded
            InvalidValue: If the selection names an unknown field
            NoResults: If the portal returned no result page
        """
        form = self._require_form()
        form.update(selection)
        return await form.get_appointment_times()

    def get_trainer_id_from_name(self, trainer_name: str) -> str:
        """
        Get a trainer id from their name.

        Raises:
            InvalidValue: If the name matches no trainer or several trainers
        """
        return self._require_form().trainer_id_from_name(trainer_name).unwrap()

    def get_appointment_type_from_name(self, appointment_type: str) -> str:
        """
        Get an appointment type id from its name.

        Raises:
            InvalidValue: If the name matches no type or several types
        """
        return self._require_form().appointment_type_id_from_name(appointment_type).unwrap()

    def get_trainer_name(self, trainer_id: str) -> str:
        """Get the trainer name from their id."""
        return self._require_form().trainer_name(trainer_id).unwrap()

    def get_appointment_type_name(self, type_id: str) -> str:
        """Get the appointment type name from its id."""
        return self._require_form().appointment_type_name(type_id).unwrap()

    def _require_form(self) -> FilterForm:
        if self._form is None:
            raise StateError("Must get the form first")
        return self._form
