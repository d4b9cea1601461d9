"""Slot search - turns a filter selection into open appointment handles."""

from datetime import datetime, timezone
from typing import Callable, List, Mapping, Optional

import aiohttp
from loguru import logger

from ...core.enums import FilterField, PortalRequest
from ...core.exceptions import InvalidValue, NoResults, PortalResponseError
from .appointment import Appointment
from .base import PortalEndpoint
from .booking import AppointmentBooking
from .models import PortalSession, TimeResponse, TimeSlot
from .parser import parse_portal_date, parse_portal_time


class AppointmentSearch(PortalEndpoint):
    """Queries open times for the current filter selection."""

    def __init__(
        self,
        scheduler_url: str,
        http_session_getter: Callable[[], aiohttp.ClientSession],
        booking: AppointmentBooking,
    ):
        """
        Initialize slot search.

        Args:
            scheduler_url: Scheduler page URL
            http_session_getter: Callable that returns the HTTP session
            booking: Mutation endpoint handed to the slot handles
        """
        super().__init__(scheduler_url, http_session_getter)
        self._booking = booking
        self.last_page: Optional[TimeResponse] = None

    async def query_times(
        self, session: PortalSession, selection: Mapping[str, str]
    ) -> List[Appointment]:
        """
        Get the open times for a filter selection.

        Args:
            session: Portal session with a resolved catalog
            selection: Filter field name -> value

        Returns:
            One available appointment per open time

        Raises:
            SessionError: If the session was never bootstrapped
            StateError: If the identity has not been resolved
            InvalidValue: If the selection names an unknown field or its date is unusable
            NoResults: If the portal returned no result page
            PortalResponseError: If the response is not a JSON list
        """
        unknown = [key for key in selection if key not in FilterField.values()]
        if unknown:
            raise InvalidValue("filter field", unknown[0], "is not a valid field")
        session.require_catalog()

        params = {
            **{key: str(value) for key, value in selection.items()},
            "domid": session.location_id,
            "request": PortalRequest.GET_LIST.value,
            "sessid": session.require_session_token(),
            "appt_sel": "",
            "external_cal": "false",
        }

        async with self._session.get(self.scheduler_url, params=params) as response:
            data = await self._read_json(response, "Slot search")

        page = self._select_page(data)
        self.last_page = page

        date_value = self._slot_date(selection, page)
        appointments = [
            self._appointment_from_slot(session, selection, page, date_value, slot)
            for slot in page.get("times") or []
        ]
        logger.info(f"Found {len(appointments)} open times for {dict(selection)}")
        return appointments

    @staticmethod
    def _select_page(data) -> TimeResponse:
        if not isinstance(data, list):
            logger.error(f"Slot search returned {type(data).__name__}, expected a list")
            raise PortalResponseError("Slot search did not return a list of result pages")
        if len(data) == 0:
            raise NoResults("No results for the filter from the portal")
        if len(data) > 1:
            logger.warning(f"Slot search returned {len(data)} result pages, using the first")
        page = data[0]
        if not isinstance(page, dict):
            raise PortalResponseError("Slot search result page is not an object")
        return page  # type: ignore[return-value]

    def _appointment_from_slot(
        self,
        session: PortalSession,
        selection: Mapping[str, str],
        page: TimeResponse,
        date_value: str,
        slot: TimeSlot,
    ) -> Appointment:
        when = _slot_datetime(date_value, slot.get("time_24", ""))

        details = slot.get("details") or ""
        slot_token = details.split("|")[0].strip() or None

        return Appointment.from_slot(
            self._booking,
            session,
            when,
            appointment_type_id=(
                selection.get(FilterField.APPOINTMENT_TYPE.value)
                or page.get("appointment_type_id")
                or ""
            ),
            trainer_id=selection.get(FilterField.TRAINER.value) or page.get("trainer_id") or "",
            appointment_id=slot_token,
            availability_id=page.get("availability_id") or None,
        )

    @staticmethod
    def _slot_date(selection: Mapping[str, str], page: TimeResponse) -> str:
        """Pick the selected date, or the page's own date when the selection is not a date."""
        selected = selection.get(FilterField.DATE.value) or ""
        page_date = page.get("date") or ""
        if not selected:
            return page_date
        if parse_portal_date(selected) is None and page_date:
            logger.warning(f"Date filter {selected!r} is not a date, using page date {page_date}")
            return page_date
        return selected


def _slot_datetime(date_value: str, time_24: str) -> datetime:
    day = parse_portal_date(date_value)
    if day is None:
        raise InvalidValue("date", date_value, "cannot be combined with a slot time")
    clock = parse_portal_time(time_24)
    if clock is None:
        raise InvalidValue("time", time_24, "expected a 24 hour HH:MM value")
    hour, minute = clock
    return day.replace(hour=hour, minute=minute, tzinfo=timezone.utc)
