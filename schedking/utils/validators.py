"""Normalization of values sent to the portal."""

from datetime import date, datetime, timezone
from typing import Tuple, Union

from ..core.exceptions import InvalidValue

FORMATTED_PHONE_LENGTH = 14
RAW_PHONE_LENGTH = 10


def format_phone(phone: str) -> str:
    """
    Convert a phone number into the ``(xxx) xxx-xxxx`` form the portal expects.

    Args:
        phone: Already formatted 14 character value or 10 bare digits

    Returns:
        Formatted phone number

    Raises:
        InvalidValue: If the value has any other length
    """
    if len(phone) == FORMATTED_PHONE_LENGTH:
        return phone
    if len(phone) != RAW_PHONE_LENGTH:
        raise InvalidValue("phone", phone, "must be properly formatted or 10 characters")
    return f"({phone[0:3]}) {phone[3:6]}-{phone[6:10]}"


def _as_utc(value: Union[date, datetime]) -> Union[date, datetime]:
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc)
    return value


def split_birthdate(birthdate: Union[date, datetime]) -> Tuple[int, int, int, str]:
    """
    Decompose a birthdate into the fields of the lookup form.

    Args:
        birthdate: Date of birth (aware datetimes are converted to UTC)

    Returns:
        Tuple of (month, day, year, "YYYY-M-D")
    """
    value = _as_utc(birthdate)
    return value.month, value.day, value.year, f"{value.year}-{value.month}-{value.day}"


def format_portal_datetime(value: datetime) -> str:
    """
    Format a slot time the way the booking endpoint expects it.

    Example: 2021-03-05 09:30 UTC -> "2021-3-5 9:30:00"

    Args:
        value: Slot datetime (naive values are taken as UTC)

    Returns:
        Formatted datetime string
    """
    value = _as_utc(value)  # type: ignore[assignment]
    return f"{value.year}-{value.month}-{value.day} {value.hour}:{value.minute:02d}:00"
