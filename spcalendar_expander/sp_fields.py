"""Typed accessors over a SharePoint calendar list item's field set.

Values are expected to be already-typed scalars, except ``Duration`` and
``fAllDayEvent`` which some list views return as text.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from .sp_exceptions import AppointmentFieldError
from .sp_grammar import normalize_descriptor

FieldSet = Mapping[str, Any]

# EventType codes
EVENT_TYPE_DELETED = 3
EVENT_TYPE_MODIFIED = 4


def _get(fields: FieldSet, name: str) -> Any:
    try:
        return fields[name]
    except KeyError:
        raise AppointmentFieldError(name, "missing") from None


def _as_bool(fields: FieldSet, name: str) -> bool:
    value = _get(fields, name)
    if not isinstance(value, bool):
        raise AppointmentFieldError(name, f"expected bool, got {value!r}")
    return value


def _as_int(fields: FieldSet, name: str) -> int:
    value = _get(fields, name)
    if isinstance(value, bool) or not isinstance(value, int):
        raise AppointmentFieldError(name, f"expected int, got {value!r}")
    return value


def _as_datetime(fields: FieldSet, name: str) -> datetime:
    value = _get(fields, name)
    if not isinstance(value, datetime):
        raise AppointmentFieldError(name, f"expected datetime, got {value!r}")
    return value


def has_recurrence(fields: FieldSet) -> bool:
    return _as_bool(fields, "fRecurrence")


def event_type(fields: FieldSet) -> int:
    return _as_int(fields, "EventType")


def master_series_item_id(fields: FieldSet) -> int:
    return _as_int(fields, "MasterSeriesItemID")


def recurrence_id(fields: FieldSet) -> datetime:
    return _as_datetime(fields, "RecurrenceID")


def end_date(fields: FieldSet) -> datetime:
    return _as_datetime(fields, "EndDate")


def item_id(fields: FieldSet) -> int:
    return _as_int(fields, "ID")


def event_date(fields: FieldSet) -> datetime:
    return _as_datetime(fields, "EventDate")


def duration(fields: FieldSet) -> int:
    """Duration in seconds, accepting integer text."""
    value = _get(fields, "Duration")
    try:
        return int(str(value).strip())
    except ValueError:
        raise AppointmentFieldError("Duration", f"expected integer text, got {value!r}") from None


def all_day_event(fields: FieldSet) -> bool:
    """All-day flag, accepting ``True``/``False`` text in any case."""
    value = _get(fields, "fAllDayEvent")
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text not in ("true", "false"):
        raise AppointmentFieldError("fAllDayEvent", f"expected boolean text, got {value!r}")
    return text == "true"


def recurrence_data(fields: FieldSet) -> str:
    """Descriptor text with attribute quoting normalized."""
    value = _get(fields, "RecurrenceData")
    if value is None:
        return ""
    return normalize_descriptor(str(value))
