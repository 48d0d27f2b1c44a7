"""Assemble typed Appointments from SharePoint calendar list items."""

import logging
from collections.abc import Iterable

from pydantic import ValidationError

from . import sp_fields
from .sp_exceptions import AppointmentFieldError
from .sp_models import Appointment
from .sp_rule_builder import build_recurrence

logger = logging.getLogger(__name__)


class SPAppointmentParser:
    """Maps an untyped calendar item field set into an Appointment."""

    def parse(self, fields: sp_fields.FieldSet) -> Appointment:
        """Parse one calendar item.

        Args:
            fields: Field name -> value mapping as read from the list

        Returns:
            Appointment with its recurrence resolved

        Raises:
            AppointmentFieldError: If a required field is missing or invalid
            RecurrenceParseError: If the recurrence descriptor is malformed
        """
        item_id = sp_fields.item_id(fields)
        recurrence = build_recurrence(fields)
        try:
            appointment = Appointment(
                id=item_id,
                start=sp_fields.event_date(fields),
                end=sp_fields.end_date(fields),
                duration=sp_fields.duration(fields),
                recurrence=recurrence,
                is_all_day=sp_fields.all_day_event(fields),
            )
        except ValidationError as e:
            error = e.errors()[0]
            field = str(error["loc"][0]) if error.get("loc") else "Appointment"
            raise AppointmentFieldError(field, error.get("msg", str(e))) from e

        logger.debug("Parsed appointment %d: %s", item_id, recurrence.kind)
        return appointment

    def parse_many(self, rows: Iterable[sp_fields.FieldSet]) -> list[Appointment]:
        return [self.parse(row) for row in rows]


_parser = SPAppointmentParser()


def parse_appointment(fields: sp_fields.FieldSet) -> Appointment:
    return _parser.parse(fields)


def parse_appointments(rows: Iterable[sp_fields.FieldSet]) -> list[Appointment]:
    return _parser.parse_many(rows)
