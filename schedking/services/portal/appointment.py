"""Appointment handle - one open slot or booked record and its book/cancel lifecycle."""

import asyncio
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from loguru import logger

from ...core.enums import AppointmentState
from ...core.exceptions import StateError
from ...utils.translation import label_from_id
from .models import UNKNOWN_ID, PortalSession

if TYPE_CHECKING:
    from .booking import AppointmentBooking


class Appointment:
    """
    A future appointment, either an open slot (``AVAILABLE``) or a booking (``BOOKED``).

    The handle keeps a non-owning reference to the session it came from; that
    session supplies the tokens for mutations and the catalog for name lookups.
    ``book`` and ``cancel`` are serialized per handle.
    """

    def __init__(
        self,
        booking: "AppointmentBooking",
        session: PortalSession,
        when: Optional[datetime],
        appointment_type_id: str,
        trainer_id: str,
        state: AppointmentState = AppointmentState.AVAILABLE,
        appointment_id: Optional[str] = None,
        availability_id: Optional[str] = None,
    ):
        """
        Initialize an appointment handle.

        Args:
            booking: Mutation endpoint used by book/cancel
            session: Session the appointment belongs to
            when: Start time (UTC), None if the portal's text could not be parsed
            appointment_type_id: Appointment type id, usually a location in the building
            trainer_id: Trainer (staff member) id
            state: Initial lifecycle state
            appointment_id: Persistent booking id, or the slot's detail token
            availability_id: Slot specific availability id
        """
        self._booking = booking
        self._session = session
        self.datetime = when
        self.appointment_type_id = appointment_type_id
        self.trainer_id = trainer_id
        self.state = state
        self.appointment_id = appointment_id
        self.availability_id = availability_id
        self._lock = asyncio.Lock()

    @classmethod
    def from_slot(
        cls,
        booking: "AppointmentBooking",
        session: PortalSession,
        when: datetime,
        appointment_type_id: str,
        trainer_id: str,
        appointment_id: Optional[str] = None,
        availability_id: Optional[str] = None,
    ) -> "Appointment":
        """Create an open slot returned by a search."""
        return cls(
            booking,
            session,
            when,
            appointment_type_id,
            trainer_id,
            state=AppointmentState.AVAILABLE,
            appointment_id=appointment_id,
            availability_id=availability_id,
        )

    @classmethod
    def from_booking(
        cls,
        booking: "AppointmentBooking",
        session: PortalSession,
        when: Optional[datetime],
        appointment_type_id: str,
        trainer_id: str,
        appointment_id: str,
    ) -> "Appointment":
        """Create a record for an appointment already booked on the portal."""
        return cls(
            booking,
            session,
            when,
            appointment_type_id,
            trainer_id,
            state=AppointmentState.BOOKED,
            appointment_id=appointment_id,
        )

    @property
    def is_booked(self) -> bool:
        """Check if the appointment is booked."""
        return self.state is AppointmentState.BOOKED

    @property
    def trainer_name(self) -> Optional[str]:
        """Trainer label from the session catalog, None if unknown."""
        if self.trainer_id == UNKNOWN_ID or self._session.catalog is None:
            return None
        return label_from_id(self._session.catalog.trainer_options, self.trainer_id).unwrap_or(
            None
        )

    @property
    def appointment_type_name(self) -> Optional[str]:
        """Appointment type label from the session catalog, None if unknown."""
        if self.appointment_type_id == UNKNOWN_ID or self._session.catalog is None:
            return None
        return label_from_id(
            self._session.catalog.appointment_type_options, self.appointment_type_id
        ).unwrap_or(None)

    async def book(self) -> None:
        """
        Book this appointment.

        Raises:
            StateError: If the appointment is already booked
            UpstreamError: If the portal rejects the booking (state is unchanged)
        """
        async with self._lock:
            if self.is_booked:
                raise StateError("Appointment is already booked", details=self._details())
            if self.datetime is None:
                raise StateError("Appointment has no start time", details=self._details())

            await self._booking.make_request(
                self._session,
                self.datetime,
                self.appointment_type_id,
                self.trainer_id,
                availability_id=self.availability_id or "",
            )
            self.state = AppointmentState.BOOKED
            logger.info(f"Booked {self!r}")

    async def cancel(self) -> None:
        """
        Cancel this appointment.

        Raises:
            StateError: If the appointment is not booked or its id is unknown
        """
        async with self._lock:
            if not self.is_booked:
                raise StateError("Appointment is not booked", details=self._details())
            if not self.appointment_id:
                raise StateError(
                    "Cannot cancel an appointment without a known appointment id",
                    details=self._details(),
                )

            await self._booking.cancel_appointment(self._session, self.appointment_id)
            self.state = AppointmentState.AVAILABLE
            logger.info(f"Cancelled {self!r}")

    def _details(self) -> dict:
        return {
            "appointment_id": self.appointment_id,
            "state": self.state.value,
            "datetime": self.datetime.isoformat() if self.datetime else None,
        }

    def __repr__(self) -> str:
        """String representation."""
        when = self.datetime.isoformat() if self.datetime else "unknown time"
        return (
            f"Appointment({when}, type={self.appointment_type_id}, "
            f"trainer={self.trainer_id}, state={self.state.value}, id={self.appointment_id})"
        )
