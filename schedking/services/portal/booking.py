"""Booking and cancellation mutations."""

from datetime import datetime
from typing import Any

from loguru import logger

from ...core.enums import PortalRequest
from ...core.exceptions import UpstreamError
from ...utils.validators import format_portal_datetime
from .base import PortalEndpoint
from .models import BookingResponse, PortalSession


class AppointmentBooking(PortalEndpoint):
    """Submits booking and cancellation requests for a session."""

    async def make_request(
        self,
        session: PortalSession,
        when: datetime,
        appointment_type_id: str,
        trainer_id: str,
        availability_id: str = "",
    ) -> BookingResponse:
        """
        Book an open slot.

        Args:
            session: Bootstrapped portal session
            when: Slot start time
            appointment_type_id: Appointment type id
            trainer_id: Trainer (staff) id, sent as the portal's ``appointment_id``
            availability_id: Slot specific availability id, if known

        Returns:
            The portal's response

        Raises:
            SessionError: If the session has no token
            UpstreamError: If the portal reports the booking failed
            PortalResponseError: If the response is not JSON
        """
        payload = {
            "request": PortalRequest.MAKE_REQUEST.value,
            "domid": session.location_id,
            "sessid": session.require_session_token(),
            "datetime": format_portal_datetime(when),
            "availability_id": availability_id or "",
            "appointment_id": trainer_id,
            "appointment_type_id": appointment_type_id,
        }

        logger.info(f"Booking appointment at {payload['datetime']}")

        async with self._session.post(self.scheduler_url, data=payload) as response:
            data = await self._read_json(response, "Booking")

        if not isinstance(data, dict):
            logger.error(f"Booking returned an unexpected payload: {data!r}")
            raise UpstreamError(data, message="Portal returned an unexpected booking response")

        if not _is_truthy(data.get("success")):
            error = data.get("error") or "unknown booking error"
            logger.error(f"Booking failed: {error}")
            raise UpstreamError(error)

        logger.info(f"Appointment booked: {payload['datetime']}")
        return data  # type: ignore[return-value]

    async def cancel_appointment(self, session: PortalSession, appointment_id: str) -> Any:
        """
        Cancel a booked appointment.

        The portal's response is logged but not checked for a success flag.

        Args:
            session: Portal session with a resolved user id
            appointment_id: Id of the booking to cancel

        Returns:
            The portal's raw response body

        Raises:
            SessionError: If the session has no token
            StateError: If the user id has not been resolved
            PortalResponseError: If the portal did not answer with 200
        """
        payload = {
            "request": PortalRequest.CANCEL_APPOINTMENT.value,
            "domid": session.location_id,
            "sessid": session.require_session_token(),
            "uid": session.require_user_id(),
            "apptid": appointment_id,
        }

        logger.info(f"Cancelling appointment {appointment_id}")

        async with self._session.post(self.scheduler_url, data=payload) as response:
            body = await self._read_text(response, "Cancellation")

        # TODO: check a success flag once the cancel_appt response shape is confirmed
        logger.info(f"Cancellation response for {appointment_id}: {body[:200]}")
        return body


def _is_truthy(flag: Any) -> bool:
    if isinstance(flag, str):
        return flag.strip().lower() in ("1", "true", "yes")
    return bool(flag)
