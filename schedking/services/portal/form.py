"""Filter form - the recognized search fields and the current selection."""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from loguru import logger

from ...core.enums import FilterField
from ...core.exceptions import InvalidValue
from ...utils.translation import LabelMatch, id_from_label, label_from_id
from .appointment import Appointment
from .models import OptionCatalog, OptionSet, PortalSession
from .search import AppointmentSearch


@dataclass(frozen=True)
class FormField:
    """One filter field bound to its option list."""

    name: str
    label: str
    options: OptionSet


def build_fields(catalog: OptionCatalog) -> List[FormField]:
    """Bind the three filter fields to the catalog's option lists."""
    return [
        FormField(FilterField.DATE.value, "Date", catalog.date_options),
        FormField(
            FilterField.APPOINTMENT_TYPE.value,
            "Appointment Type",
            catalog.appointment_type_options,
        ),
        FormField(FilterField.TRAINER.value, "Staff", catalog.trainer_options),
    ]


class FilterForm:
    """Slot search form bound to one session's option catalog."""

    def __init__(self, session: PortalSession, search: AppointmentSearch):
        """
        Initialize the form.

        Args:
            session: Session with a resolved catalog
            search: Slot search used by get_appointment_times

        Raises:
            StateError: If the session's identity has not been resolved
        """
        self._session = session
        self._search = search
        self.catalog = session.require_catalog()
        self.fields = build_fields(self.catalog)
        self._data: Dict[str, str] = {}

    @property
    def selection(self) -> Dict[str, str]:
        """Copy of the current selection."""
        return dict(self._data)

    def get_field(self, name: str) -> Optional[FormField]:
        """
        Returns a field from its name.

        Args:
            name: Field name

        Returns:
            The field, or None if not found
        """
        for form_field in self.fields:
            if form_field.name == name:
                return form_field
        return None

    def update(self, selection: Mapping[str, Any]) -> Dict[str, str]:
        """
        Replace the selection.

        Each value that matches exactly one option label is replaced by that
        option's id; anything else is kept as given (it may already be an id).

        Args:
            selection: Field name -> label or raw value

        Returns:
            The normalized selection

        Raises:
            InvalidValue: If a key is not a recognized field; the selection is unchanged
        """
        resolved: Dict[str, str] = {}
        for key in selection:
            if self.get_field(key) is None:
                raise InvalidValue("filter field", key, "is not a valid field")

        for key, value in selection.items():
            form_field = self.get_field(key)
            raw = str(value)
            match = id_from_label(form_field.options, raw)  # type: ignore[union-attr]
            resolved[key] = match.unwrap_or(raw)
            if not match.is_found():
                logger.debug(f"Keeping raw value '{raw}' for {key}: {match!r}")

        self._data = resolved
        return self.selection

    async def get_appointment_times(self) -> List[Appointment]:
        """
        Get the open times for the current selection.

        Raises:
            NoResults: If the portal returned no result page
        """
        return await self._search.query_times(self._session, self._data)

    def trainer_id_from_name(self, trainer_name: str) -> LabelMatch:
        """Get a trainer id from their name."""
        return id_from_label(self.catalog.trainer_options, trainer_name)

    def appointment_type_id_from_name(self, appointment_type: str) -> LabelMatch:
        """Get an appointment type id from its name."""
        return id_from_label(self.catalog.appointment_type_options, appointment_type)

    def trainer_name(self, trainer_id: str) -> LabelMatch:
        """Get the trainer name from their id."""
        return label_from_id(self.catalog.trainer_options, trainer_id)

    def appointment_type_name(self, type_id: str) -> LabelMatch:
        """Get the appointment type name from its id."""
        return label_from_id(self.catalog.appointment_type_options, type_id)

    def date_label(self, date_id: str) -> LabelMatch:
        """Get the displayed date from its option id."""
        return label_from_id(self.catalog.date_options, date_id)
