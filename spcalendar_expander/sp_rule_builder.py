"""Build a typed Recurrence from a calendar item's field set."""

import logging
from datetime import time

from . import sp_fields
from .sp_exceptions import RecurrenceParseError
from .sp_grammar import AnyEnd, AnyPattern, match_end_condition, match_pattern
from .sp_models import (
    DailyRecurrence,
    DeletedInstance,
    EveryNthDay,
    EveryNthDayOfEveryMthMonth,
    EveryNthDayOfMonth,
    EveryNthWeekOnDays,
    EveryQualifierOfKindOfDayEveryMthMonth,
    EveryQualifierOfKindOfDayOfMonth,
    EveryWeekday,
    ExplicitEndDate,
    ModifiedInstance,
    MonthlyRecurrence,
    NoRecurrence,
    Recurrence,
    UnknownRecurrence,
    WeeklyRecurrence,
    YearlyRecurrence,
)

logger = logging.getLogger(__name__)

_RECURRENCE_BY_PATTERN = {
    EveryNthDay: DailyRecurrence,
    EveryWeekday: DailyRecurrence,
    EveryNthWeekOnDays: WeeklyRecurrence,
    EveryNthDayOfEveryMthMonth: MonthlyRecurrence,
    EveryQualifierOfKindOfDayEveryMthMonth: MonthlyRecurrence,
    EveryNthDayOfMonth: YearlyRecurrence,
    EveryQualifierOfKindOfDayOfMonth: YearlyRecurrence,
}


def correct_explicit_end(end: AnyEnd, fields: sp_fields.FieldSet) -> AnyEnd:
    """Apply the midnight correction to an explicit window end.

    The window end equals the end of the last occurrence, except when that end
    falls at midnight: then the descriptor's boundary is 24 hours ahead and the
    item's own EndDate holds the true value.
    """
    if isinstance(end, ExplicitEndDate) and end.end_date.time() == time(0, 0):
        return ExplicitEndDate(end_date=sp_fields.end_date(fields))
    return end


def combine(pattern: AnyPattern, end: AnyEnd) -> Recurrence:
    """Wrap a matched pattern and end condition in its recurrence variant."""
    recurrence_cls = _RECURRENCE_BY_PATTERN[type(pattern)]
    return recurrence_cls(pattern=pattern, end=end)


def build_recurrence(fields: sp_fields.FieldSet) -> Recurrence:
    """Decide the recurrence of one calendar item.

    Order: no recurrence flag, deleted exception, modified exception, then the
    descriptor grammar. An unrecognized descriptor yields UnknownRecurrence.

    Raises:
        RecurrenceParseError: A recognized descriptor carries a malformed token
            or no end condition
        AppointmentFieldError: A required field is missing or mistyped
    """
    if not sp_fields.has_recurrence(fields):
        return NoRecurrence()

    kind = sp_fields.event_type(fields)
    if kind == sp_fields.EVENT_TYPE_DELETED:
        return DeletedInstance(
            series_id=sp_fields.master_series_item_id(fields),
            occurrence_date=sp_fields.recurrence_id(fields),
        )
    if kind == sp_fields.EVENT_TYPE_MODIFIED:
        return ModifiedInstance(
            series_id=sp_fields.master_series_item_id(fields),
            occurrence_date=sp_fields.recurrence_id(fields),
        )

    descriptor = sp_fields.recurrence_data(fields)
    pattern = match_pattern(descriptor)
    if pattern is None:
        logger.debug("Unrecognized recurrence descriptor: %r", descriptor)
        return UnknownRecurrence()

    end = match_end_condition(descriptor)
    if end is None:
        raise RecurrenceParseError(descriptor, "end", "no end condition present")

    return combine(pattern, correct_explicit_end(end, fields))
