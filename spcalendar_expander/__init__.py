"""spcalendar_expander - SharePoint calendar recurrence parsing and instance expansion.

Turns a calendar list item's RecurrenceData descriptor and scalar fields into a
typed recurrence rule, and expands rules into concrete occurrence instances
reconciled against deleted and modified occurrence records.
"""

__version__ = "0.1.0"

from .config_loader import Config, load_config
from .sp_appointment_parser import SPAppointmentParser, parse_appointment, parse_appointments
from .sp_exceptions import (
    AppointmentFieldError,
    RecurrenceExpanderError,
    RecurrenceExpansionError,
    RecurrenceParseError,
)
from .sp_expander import ExpansionConfig, RecurrenceExpander, build_rrule, expand, expand_calendar
from .sp_logging import configure_logging
from .sp_models import Appointment, RecurrenceInstance
from .sp_rule_builder import build_recurrence

__all__ = [
    "Appointment",
    "AppointmentFieldError",
    "Config",
    "ExpansionConfig",
    "RecurrenceExpander",
    "RecurrenceExpanderError",
    "RecurrenceExpansionError",
    "RecurrenceInstance",
    "RecurrenceParseError",
    "SPAppointmentParser",
    "build_recurrence",
    "build_rrule",
    "configure_logging",
    "expand",
    "expand_calendar",
    "load_config",
    "parse_appointment",
    "parse_appointments",
]
