"""Pytest configuration and common fixtures."""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Try to load test-specific environment file if it exists
test_env_file = Path(__file__).parent / ".env.test"
if test_env_file.exists():
    load_dotenv(test_env_file)

TEST_SCHEDULER_URL = os.getenv("TEST_SCHEDULER_URL", "https://portal.test/scheduler.php")

# Set before any schedking import so pydantic-settings can build the settings
os.environ.setdefault("SCHEDULER_URL", TEST_SCHEDULER_URL)
os.environ.setdefault("ENV", "testing")

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from datetime import date
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from loguru import logger

from schedking.core.settings import reset_settings
from schedking.services.portal import (
    AppointmentBooking,
    AppointmentSearch,
    IdentityResolver,
    OptionCatalog,
    OptionEntry,
    PortalSession,
    SessionManager,
    UserIdentity,
)

LANDING_HTML = """
<html><body>
  <form id="login">
    <input type="hidden" id="sessid" name="sessid" value="S1">
    <input type="hidden" id="login_pagerandval" name="login_pagerandval" value="L1">
  </form>
</body></html>
"""

LOOKUP_HTML = """
<html><body>
  <input type="hidden" id="uid" value="U42">
  <select id="date-filter">
    <option value="-1">Choose a date</option>
    <option value="2021-03-05">  Friday, March 5  </option>
    <option value="2021-03-06">Saturday, March 6</option>
  </select>
  <select id="appointment-type-filter">
    <option value="-1">Choose one</option>
    <option value="10">Weight Room</option>
    <option value="11">Pool Lane</option>
    <option value="12">Pool Deck</option>
  </select>
  <select id="trainer-filter">
    <option value="-1">Choose one</option>
    <option value="7">Jane Smith</option>
    <option value="8">John Doe</option>
  </select>
  <div class="bookedContainer">
    <div class="bookedAppt bookedAppt-555">
      <span class="bookedDate">Friday, March 5, 2021</span>
      <span class="bookedTime">9:00 AM - 10:00 AM</span>
      <span class="bookedType">Weight Room</span>
      <span class="bookedTrainer">Jane Smith</span>
    </div>
    <div class="bookedAppt bookedAppt-556">
      <span class="bookedDate">03/06/2021</span>
      <span class="bookedTime">14:30 - 15:30</span>
      <span class="bookedType">Pool</span>
      <span class="bookedTrainer">Nobody Here</span>
    </div>
  </div>
</body></html>
"""

_NO_JSON = object()


def make_response(status: int = 200, text: str = "", json_data: Any = _NO_JSON) -> AsyncMock:
    """Build a mock aiohttp response usable with ``async with``."""
    response = AsyncMock()
    response.status = status
    response.text = AsyncMock(return_value=text)
    if json_data is _NO_JSON:
        response.json = AsyncMock(side_effect=ValueError("not json"))
    else:
        response.json = AsyncMock(return_value=json_data)
    response.__aenter__ = AsyncMock(return_value=response)
    response.__aexit__ = AsyncMock(return_value=None)
    return response


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Automatically set up test environment for all tests."""
    monkeypatch.setenv("SCHEDULER_URL", TEST_SCHEDULER_URL)
    monkeypatch.setenv("ENV", "testing")

    # Reset settings singleton so each test gets fresh settings
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def loguru_records():
    """Capture loguru records emitted during a test."""
    records: List[Dict[str, Any]] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


@pytest.fixture
def http():
    """Mock aiohttp ClientSession; set ``http.get`` / ``http.post`` return values per test."""
    session = MagicMock()
    session.get = MagicMock()
    session.post = MagicMock()
    return session


@pytest.fixture
def booking(http) -> AppointmentBooking:
    """Booking endpoint bound to the mock HTTP session."""
    return AppointmentBooking(TEST_SCHEDULER_URL, lambda: http)


@pytest.fixture
def session_manager(http) -> SessionManager:
    """Session bootstrap bound to the mock HTTP session."""
    return SessionManager(TEST_SCHEDULER_URL, lambda: http)


@pytest.fixture
def resolver(http, booking) -> IdentityResolver:
    """Identity resolver bound to the mock HTTP session."""
    return IdentityResolver(TEST_SCHEDULER_URL, lambda: http, booking)


@pytest.fixture
def search(http, booking) -> AppointmentSearch:
    """Slot search bound to the mock HTTP session."""
    return AppointmentSearch(TEST_SCHEDULER_URL, lambda: http, booking)


@pytest.fixture
def catalog() -> OptionCatalog:
    """Catalog matching LOOKUP_HTML."""
    return OptionCatalog(
        date_options=(
            OptionEntry("2021-03-05", "Friday, March 5"),
            OptionEntry("2021-03-06", "Saturday, March 6"),
        ),
        appointment_type_options=(
            OptionEntry("10", "Weight Room"),
            OptionEntry("11", "Pool Lane"),
            OptionEntry("12", "Pool Deck"),
        ),
        trainer_options=(OptionEntry("7", "Jane Smith"), OptionEntry("8", "John Doe")),
    )


@pytest.fixture
def portal_session() -> PortalSession:
    """Bootstrapped session without a resolved identity."""
    return PortalSession(location_id="123", session_token="S1", login_token="L1")


@pytest.fixture
def resolved_session(portal_session, catalog) -> PortalSession:
    """Session with user id and catalog set."""
    portal_session.user_id = "U42"
    portal_session.catalog = catalog
    portal_session.booked_appointments = []
    return portal_session


@pytest.fixture
def identity() -> UserIdentity:
    """Complete lookup identity."""
    return UserIdentity(
        first_name="Ada",
        last_name="Lovelace",
        birthdate=date(1990, 7, 4),
        email="ada@example.com",
        phone="5551234567",
    )


def slot_page(
    times: Optional[List[Dict[str, str]]] = None, **overrides: Any
) -> Dict[str, Any]:
    """Build one slot search result page."""
    page: Dict[str, Any] = {
        "appointment_type_id": "10",
        "duration": "60",
        "description": "",
        "appointment_name": "Weight Room",
        "trainer_name": "Jane Smith",
        "date": "2021-03-05",
        "datetime": "2021-03-05 00:00:00",
        "date_formatted": "Friday, March 5",
        "times": times if times is not None else [],
        "availability_id": None,
        "appointment_id": "",
        "hasCredit": "1",
        "firstItem": True,
        "trainer_id": "7",
        "displayID": 1,
    }
    page.update(overrides)
    return page


@pytest.fixture
def response_factory():
    """Factory for mock aiohttp responses."""
    return make_response


@pytest.fixture
def page_factory():
    """Factory for slot search result pages."""
    return slot_page


@pytest.fixture
def landing_html() -> str:
    """Landing page carrying the session tokens S1 / L1."""
    return LANDING_HTML


@pytest.fixture
def lookup_html() -> str:
    """Lookup result page for user U42."""
    return LOOKUP_HTML
