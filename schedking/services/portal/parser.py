"""Markup adapter - every read of rendered portal HTML goes through here."""

from datetime import datetime, timezone
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup, Tag
from loguru import logger

from ...core.exceptions import SessionError
from .models import PLACEHOLDER_OPTION_ID, BookedEntry, OptionCatalog, OptionEntry, OptionSet

# Field identifiers rendered by the portal
SESSION_ID_FIELD = "sessid"
LOGIN_TOKEN_FIELD = "login_pagerandval"
USER_ID_FIELD = "uid"

# Filter lists are rendered as <select id="<name>-filter">
DATE_FILTER = "date"
APPOINTMENT_TYPE_FILTER = "appointment-type"
TRAINER_FILTER = "trainer"

# Booked appointment blocks: <div class="bookedContainer"><div class="bookedAppt-<id>">...
BOOKED_CONTAINER_CLASS = "bookedContainer"
BOOKED_APPOINTMENT_PREFIX = "bookedAppt-"
BOOKED_DATE_CLASS = "bookedDate"
BOOKED_TIME_CLASS = "bookedTime"
BOOKED_TYPE_CLASS = "bookedType"
BOOKED_TRAINER_CLASS = "bookedTrainer"

DATE_FORMATS = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%A, %B %d, %Y",
    "%a, %b %d, %Y",
    "%B %d, %Y",
    "%b %d, %Y",
)
TIME_FORMATS = ("%H:%M", "%H:%M:%S", "%I:%M %p", "%I:%M%p", "%I %p")


class PortalPage:
    """Read-only view over one rendered portal page."""

    def __init__(self, html: str):
        self._soup = BeautifulSoup(html, "html.parser")

    def field_value(self, field_id: str) -> Optional[str]:
        """
        Read the ``value`` attribute of the element with the given id.

        Args:
            field_id: Element id

        Returns:
            Attribute value, or None if the element or attribute is missing
        """
        element = self._soup.find(id=field_id)
        if element is None:
            return None
        value = element.get("value")
        if isinstance(value, list):
            value = " ".join(value)
        return value

    def options(self, filter_name: str) -> OptionSet:
        """
        Read the options of the ``<filter_name>-filter`` list.

        The "-1" placeholder is skipped and labels are trimmed.

        Args:
            filter_name: Filter name without the ``-filter`` suffix

        Returns:
            Options in rendering order
        """
        select = self._soup.find(id=f"{filter_name}-filter")
        if select is None:
            logger.warning(f"Filter list '{filter_name}-filter' not found in page")
            return ()

        entries: List[OptionEntry] = []
        seen = set()
        for option in select.find_all("option", recursive=False):
            value = option.get("value")
            if value is None or value == PLACEHOLDER_OPTION_ID:
                continue
            if value in seen:
                logger.warning(f"Duplicate option id '{value}' in '{filter_name}-filter' ignored")
                continue
            seen.add(value)
            entries.append(OptionEntry(id=value, label=option.get_text().strip()))
        return tuple(entries)

    def catalog(self) -> OptionCatalog:
        """Read all three filter lists."""
        return OptionCatalog(
            date_options=self.options(DATE_FILTER),
            appointment_type_options=self.options(APPOINTMENT_TYPE_FILTER),
            trainer_options=self.options(TRAINER_FILTER),
        )

    def booked_entries(self) -> List[BookedEntry]:
        """
        Read every booked appointment block.

        Returns:
            One entry per block carrying an appointment id class
        """
        entries: List[BookedEntry] = []
        for container in self._soup.find_all(class_=BOOKED_CONTAINER_CLASS):
            for block in container.find_all("div", recursive=False):
                appointment_id = _appointment_id_from_classes(block.get("class") or [])
                if appointment_id is None:
                    logger.debug("Booked block without appointment id class skipped")
                    continue
                entries.append(
                    BookedEntry(
                        appointment_id=appointment_id,
                        date_text=_class_text(block, BOOKED_DATE_CLASS),
                        time_text=_class_text(block, BOOKED_TIME_CLASS),
                        appointment_type_name=_class_text(block, BOOKED_TYPE_CLASS),
                        trainer_name=_class_text(block, BOOKED_TRAINER_CLASS),
                    )
                )
        return entries


def _appointment_id_from_classes(classes: List[str]) -> Optional[str]:
    for css_class in classes:
        if css_class.startswith(BOOKED_APPOINTMENT_PREFIX):
            appointment_id = css_class[len(BOOKED_APPOINTMENT_PREFIX):]
            if appointment_id:
                return appointment_id
    return None


def _class_text(block: Tag, css_class: str) -> str:
    element = block.find(class_=css_class)
    if element is None:
        return ""
    return " ".join(element.get_text(" ").split())


def parse_session_tokens(html: str) -> Tuple[str, str]:
    """
    Extract the session id and login token from the landing page.

    Args:
        html: Landing page markup

    Returns:
        Tuple of (session token, login token)

    Raises:
        SessionError: If either token is missing
    """
    page = PortalPage(html)
    session_token = page.field_value(SESSION_ID_FIELD)
    login_token = page.field_value(LOGIN_TOKEN_FIELD)
    missing = [
        name
        for name, value in ((SESSION_ID_FIELD, session_token), (LOGIN_TOKEN_FIELD, login_token))
        if not value
    ]
    if missing:
        raise SessionError(
            f"Landing page is missing session fields: {', '.join(missing)}",
            details={"missing": missing},
        )
    return session_token, login_token  # type: ignore[return-value]


def parse_portal_date(text: str) -> Optional[datetime]:
    """Parse a date as the portal renders it, or None if no known format matches."""
    text = " ".join(text.split())
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def parse_portal_time(text: str) -> Optional[Tuple[int, int]]:
    """Parse a 12 or 24 hour clock time into (hour, minute)."""
    text = " ".join(text.split()).upper()
    for fmt in TIME_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return parsed.hour, parsed.minute
    return None


def combine_date_time(date_text: str, time_text: str) -> Optional[datetime]:
    """
    Combine a rendered date and the start of a time (or time range) into a UTC datetime.

    Example: ("2021-03-05", "9:00 AM - 10:00 AM") -> 2021-03-05 09:00 UTC

    Returns:
        Aware datetime, or None if either part cannot be parsed
    """
    day = parse_portal_date(date_text)
    if day is None:
        return None
    start = time_text.replace("\u2013", "-").split("-")[0].strip()
    clock = parse_portal_time(start)
    if clock is None:
        return None
    hour, minute = clock
    return day.replace(hour=hour, minute=minute, tzinfo=timezone.utc)
