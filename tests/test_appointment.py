"""Tests for the appointment book/cancel lifecycle."""

from datetime import datetime, timezone

import pytest

from schedking.core.enums import AppointmentState
from schedking.core.exceptions import StateError, UpstreamError
from schedking.services.portal import UNKNOWN_ID, Appointment

SLOT_TIME = datetime(2021, 3, 5, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def slot(booking, resolved_session) -> Appointment:
    """Open slot from a search."""
    return Appointment.from_slot(booking, resolved_session, SLOT_TIME, "10", "7")


@pytest.fixture
def booked(booking, resolved_session) -> Appointment:
    """Appointment already booked on the portal."""
    return Appointment.from_booking(booking, resolved_session, SLOT_TIME, "10", "7", "555")


class TestBook:
    """Test Appointment.book."""

    def test_slot_starts_available(self, slot):
        """Search results start available."""
        assert slot.state is AppointmentState.AVAILABLE
        assert not slot.is_booked

    @pytest.mark.asyncio
    async def test_book_once(self, http, slot, response_factory):
        """Booking succeeds once and a second attempt is a state error."""
        http.post.return_value = response_factory(json_data={"success": 1})

        await slot.book()

        assert slot.is_booked
        with pytest.raises(StateError):
            await slot.book()
        assert http.post.call_count == 1

    @pytest.mark.asyncio
    async def test_booking_payload(self, http, slot, response_factory):
        """The mutation carries tokens, formatted time and ids."""
        http.post.return_value = response_factory(json_data={"success": 1})

        await slot.book()

        args, kwargs = http.post.call_args
        assert kwargs["data"] == {
            "request": "make_request",
            "domid": "123",
            "sessid": "S1",
            "datetime": "2021-3-5 9:30:00",
            "availability_id": "",
            "appointment_id": "7",
            "appointment_type_id": "10",
        }

    @pytest.mark.asyncio
    async def test_booking_sends_known_availability_id(
        self, http, booking, resolved_session, response_factory
    ):
        """A slot specific availability id is forwarded."""
        slot = Appointment.from_slot(
            booking, resolved_session, SLOT_TIME, "10", "7", availability_id="AV9"
        )
        http.post.return_value = response_factory(json_data={"success": "1"})

        await slot.book()

        assert http.post.call_args.kwargs["data"]["availability_id"] == "AV9"

    @pytest.mark.asyncio
    async def test_rejected_booking(self, http, slot, response_factory):
        """A portal rejection raises UpstreamError and keeps the slot available."""
        http.post.return_value = response_factory(json_data={"success": 0, "error": "slot taken"})

        with pytest.raises(UpstreamError) as exc_info:
            await slot.book()

        assert "slot taken" in str(exc_info.value)
        assert exc_info.value.portal_error == "slot taken"
        assert slot.state is AppointmentState.AVAILABLE

    @pytest.mark.asyncio
    async def test_unexpected_booking_payload(self, http, slot, response_factory):
        """A non-object response is treated as a failure."""
        http.post.return_value = response_factory(json_data=["?"])

        with pytest.raises(UpstreamError):
            await slot.book()
        assert not slot.is_booked

    @pytest.mark.asyncio
    async def test_booked_record_cannot_be_booked(self, http, booked):
        """Booking a booked record is a state error."""
        with pytest.raises(StateError):
            await booked.book()
        http.post.assert_not_called()


class TestCancel:
    """Test Appointment.cancel."""

    def test_booked_starts_booked(self, booked):
        """Resolved records start booked."""
        assert booked.state is AppointmentState.BOOKED

    @pytest.mark.asyncio
    async def test_cancel_once(self, http, booked, response_factory):
        """Cancelling succeeds once and a second attempt is a state error."""
        http.post.return_value = response_factory(text="ok")

        await booked.cancel()

        assert booked.state is AppointmentState.AVAILABLE
        assert http.post.call_args.kwargs["data"] == {
            "request": "cancel_appt",
            "domid": "123",
            "sessid": "S1",
            "uid": "U42",
            "apptid": "555",
        }
        with pytest.raises(StateError):
            await booked.cancel()

    @pytest.mark.asyncio
    async def test_cancel_response_not_checked(self, http, booked, response_factory):
        """Any 200 response body counts as a successful cancellation."""
        http.post.return_value = response_factory(text='{"success": 0}')

        await booked.cancel()

        assert not booked.is_booked

    @pytest.mark.asyncio
    async def test_cancel_without_id(self, http, booking, resolved_session):
        """A booking without a known id cannot be cancelled."""
        appointment = Appointment(
            booking,
            resolved_session,
            SLOT_TIME,
            "10",
            "7",
            state=AppointmentState.BOOKED,
        )

        with pytest.raises(StateError, match="appointment id"):
            await appointment.cancel()
        http.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_cancel_available_slot(self, http, slot):
        """An available slot cannot be cancelled."""
        with pytest.raises(StateError):
            await slot.cancel()
        http.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_book_then_cancel_with_slot_token(
        self, http, booking, resolved_session, response_factory
    ):
        """A slot booked through its detail token can be cancelled by it."""
        slot = Appointment.from_slot(
            booking, resolved_session, SLOT_TIME, "10", "7", appointment_id="A1"
        )
        http.post.return_value = response_factory(json_data={"success": 1})
        await slot.book()

        http.post.return_value = response_factory(text="ok")
        await slot.cancel()

        assert http.post.call_args.kwargs["data"]["apptid"] == "A1"
        assert not slot.is_booked


class TestNames:
    """Test catalog backed name lookups."""

    def test_names(self, slot):
        """Names come from the session catalog."""
        assert slot.trainer_name == "Jane Smith"
        assert slot.appointment_type_name == "Weight Room"

    def test_unknown_names(self, booking, resolved_session):
        """Sentinel ids have no name."""
        appointment = Appointment.from_booking(
            booking, resolved_session, None, UNKNOWN_ID, UNKNOWN_ID, "9"
        )

        assert appointment.trainer_name is None
        assert appointment.appointment_type_name is None
        assert "unknown time" in repr(appointment)
