"""Identity lookup - resolves the user, the filter options and the booked appointments."""

from typing import Callable, Dict, Union

import aiohttp
from loguru import logger

from ...core.exceptions import SessionError
from ...utils.masking import mask_email, mask_phone
from ...utils.translation import id_from_label
from ...utils.validators import format_phone, split_birthdate
from .appointment import Appointment
from .base import PortalEndpoint
from .booking import AppointmentBooking
from .models import (
    UNKNOWN_ID,
    BookedEntry,
    IdentityResult,
    OptionCatalog,
    OptionSet,
    PortalSession,
    UserIdentity,
)
from .parser import USER_ID_FIELD, PortalPage, combine_date_time

SUBMIT_LABEL = "Find Me!"


class IdentityResolver(PortalEndpoint):
    """Submits the user lookup form and parses the page it returns."""

    def __init__(
        self,
        scheduler_url: str,
        http_session_getter: Callable[[], aiohttp.ClientSession],
        booking: AppointmentBooking,
    ):
        """
        Initialize identity resolver.

        Args:
            scheduler_url: Scheduler page URL
            http_session_getter: Callable that returns the HTTP session
            booking: Mutation endpoint handed to the booked appointment handles
        """
        super().__init__(scheduler_url, http_session_getter)
        self._booking = booking

    def build_lookup_form(
        self, session: PortalSession, identity: UserIdentity
    ) -> Dict[str, Union[str, int]]:
        """
        Build the lookup form payload.

        Raises:
            SessionError: If the session was never bootstrapped
            InvalidValue: If the phone number cannot be normalized
        """
        dob_month, dob_day, dob_year, dob = split_birthdate(identity.birthdate)
        return {
            "PHPSESSID": session.require_session_token(),
            "login_pagerandval": session.login_token,
            "login_donesubmit": "T",
            "location": session.location_id,
            "first_name": identity.first_name,
            "last_name": identity.last_name,
            "dob": dob,
            "dob_month": dob_month,
            "dob_day": dob_day,
            "dob_year": dob_year,
            "email": identity.email,
            "phone": format_phone(identity.phone),
            "submitbtn_login": SUBMIT_LABEL,
        }

    async def resolve(self, session: PortalSession, identity: UserIdentity) -> IdentityResult:
        """
        Look the user up and refresh the session's identity data.

        On success the session's user id, option catalog and booked
        appointments are all replaced. On failure the session is left as it was.

        Args:
            session: Bootstrapped portal session
            identity: User identity to look up

        Returns:
            IdentityResult with user id, booked appointments and catalog

        Raises:
            SessionError: If the session was never bootstrapped or the lookup found no user
            InvalidValue: If the phone number cannot be normalized
            PortalResponseError: If the lookup page could not be loaded
        """
        form = self.build_lookup_form(session, identity)
        logger.info(
            f"Looking up {mask_email(identity.email)} / {mask_phone(str(form['phone']))} "
            f"at location {session.location_id}"
        )

        async with self._session.post(
            self.scheduler_url, params={"domid": session.location_id}, data=form
        ) as response:
            html = await self._read_text(response, "Identity lookup")

        result = self.parse_lookup_page(session, html)
        session.apply_identity(result)
        logger.info(
            f"Resolved user {result.user_id}: {len(result.booked_appointments)} booked, "
            f"{len(result.catalog.date_options)} dates, "
            f"{len(result.catalog.appointment_type_options)} types, "
            f"{len(result.catalog.trainer_options)} trainers"
        )
        return result

    def parse_lookup_page(self, session: PortalSession, html: str) -> IdentityResult:
        """
        Parse the page returned by the lookup form.

        Raises:
            SessionError: If the page carries no user id
        """
        page = PortalPage(html)
        user_id = page.field_value(USER_ID_FIELD)
        if not user_id:
            raise SessionError("Identity lookup did not return a user id")

        catalog = page.catalog()
        booked = [
            self._booked_appointment(session, catalog, entry) for entry in page.booked_entries()
        ]
        return IdentityResult(user_id=user_id, booked_appointments=booked, catalog=catalog)

    def _booked_appointment(
        self, session: PortalSession, catalog: OptionCatalog, entry: BookedEntry
    ) -> Appointment:
        when = combine_date_time(entry.date_text, entry.time_text)
        if when is None:
            logger.warning(
                f"Could not parse time of booked appointment {entry.appointment_id}: "
                f"'{entry.date_text}' '{entry.time_text}'"
            )
        return Appointment.from_booking(
            self._booking,
            session,
            when,
            appointment_type_id=_resolve_label(
                catalog.appointment_type_options, entry.appointment_type_name, "appointment type"
            ),
            trainer_id=_resolve_label(catalog.trainer_options, entry.trainer_name, "trainer"),
            appointment_id=entry.appointment_id,
        )


def _resolve_label(options: OptionSet, label: str, kind: str) -> str:
    match = id_from_label(options, label) if label else None
    if match is not None and match.is_found():
        return match.unwrap()
    logger.warning(f"Could not resolve {kind} '{label}' of a booked appointment: {match!r}")
    return UNKNOWN_ID
