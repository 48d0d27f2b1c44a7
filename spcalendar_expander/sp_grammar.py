"""Recurrence descriptor matchers for SharePoint RecurrenceData.

Each matcher is a pure function ``str -> Optional[pattern]`` that recognizes
one descriptor shape. A matcher returns None when the outer shape is absent
and raises RecurrenceParseError when the shape is present but a token inside
it is malformed. Descriptors are expected to be normalized first (see
normalize_descriptor).
"""

import logging
import re
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional, TypeVar, Union

from dateutil.parser import isoparse
from pydantic import BaseModel, ValidationError

from .sp_exceptions import RecurrenceParseError
from .sp_models import (
    EveryNthDay,
    EveryNthDayOfEveryMthMonth,
    EveryNthDayOfMonth,
    EveryNthWeekOnDays,
    EveryQualifierOfKindOfDayEveryMthMonth,
    EveryQualifierOfKindOfDayOfMonth,
    EveryWeekday,
    ExplicitEndDate,
    ImplicitEnd,
    InstanceCount,
    KindOfDay,
    KindOfDayQualifier,
    Weekday,
)

logger = logging.getLogger(__name__)

_E = TypeVar("_E", bound=Enum)
_M = TypeVar("_M", bound=BaseModel)

AnyPattern = Union[
    EveryNthDay,
    EveryWeekday,
    EveryNthWeekOnDays,
    EveryNthDayOfEveryMthMonth,
    EveryQualifierOfKindOfDayEveryMthMonth,
    EveryNthDayOfMonth,
    EveryQualifierOfKindOfDayOfMonth,
]
AnyEnd = Union[ImplicitEnd, InstanceCount, ExplicitEndDate]

# Outer shapes are matched literally; attribute values are captured loosely so
# that a corrupt value inside a recognized tag is reported instead of skipped.
_DAILY_EVERY_NTH_DAY = re.compile(r'<daily dayFrequency="(?P<day_frequency>[^"]*)" />')
_DAILY_EVERY_WEEKDAY = re.compile(r'<daily weekday="TRUE" />')
_WEEKLY_ON_DAYS = re.compile(
    r"<repeat><weekly "
    + "".join(rf'(?P<{code}>{code}="TRUE")?\s?' for code in ("su", "mo", "tu", "we", "th", "fr", "sa"))
    + r'weekFrequency="(?P<week_frequency>[^"]*)" /></repeat>'
)
_MONTHLY_BY_DAY = re.compile(
    r'<repeat><monthly monthFrequency="(?P<month_frequency>[^"]*)" day="(?P<day>[^"]*)" /></repeat>'
)
_MONTHLY_BY_QUALIFIER = re.compile(
    r'<repeat><monthlyByDay (?P<kind_of_day>\w+)="TRUE" '
    r'weekdayOfMonth="(?P<qualifier>[^"]*)" '
    r'monthFrequency="(?P<month_frequency>[^"]*)" /></repeat>'
)
_YEARLY_BY_DAY = re.compile(
    r'<repeat><yearly yearFrequency="1" month="(?P<month>[^"]*)" day="(?P<day>[^"]*)" /></repeat>'
)
_YEARLY_BY_QUALIFIER = re.compile(
    r'<repeat><yearlyByDay yearFrequency="1" (?P<kind_of_day>\w+)="TRUE" '
    r'weekdayOfMonth="(?P<qualifier>[^"]*)" month="(?P<month>[^"]*)" /></repeat>'
)

_IMPLICIT_END = re.compile(r"<repeatForever>FALSE</repeatForever>")
_INSTANCE_COUNT = re.compile(r"<repeatInstances>(?P<repeat_instances>.*?)</repeatInstances>")
_WINDOW_END = re.compile(r"<windowEnd>(?P<window_end>.*?)</windowEnd>")
_FIRST_DAY_OF_WEEK = re.compile(r"<firstDayOfWeek>(?P<first_day_of_week>.*?)</firstDayOfWeek>")


def normalize_descriptor(text: str) -> str:
    """Normalize attribute quoting.

    SharePoint writes RecurrenceData with double quotes; Outlook, when creating
    items on a connected SharePoint calendar, writes the same grammar with
    single quotes.
    """
    return text.replace("'", '"')


# Token helpers


def _group_as_int(match: "re.Match[str]", group: str, descriptor: str) -> int:
    raw = match.group(group)
    try:
        return int(raw)
    except ValueError as exc:
        raise RecurrenceParseError(descriptor, group, f"{raw!r} is not an integer") from exc


def _group_as_datetime(match: "re.Match[str]", group: str, descriptor: str) -> datetime:
    raw = match.group(group).strip()
    try:
        parsed = isoparse(raw)
    except ValueError as exc:
        raise RecurrenceParseError(descriptor, group, f"{raw!r} is not a timestamp") from exc
    # All timestamps share one reference timezone
    return parsed.replace(tzinfo=None)


def _group_as_enum(match: "re.Match[str]", group: str, enum_cls: "type[_E]", descriptor: str) -> _E:
    raw = match.group(group)
    try:
        return enum_cls(raw)
    except ValueError as exc:
        raise RecurrenceParseError(
            descriptor, group, f"{raw!r} is not a valid {enum_cls.__name__}"
        ) from exc


def _build(model_cls: "type[_M]", descriptor: str, **values: Any) -> _M:
    try:
        return model_cls(**values)
    except ValidationError as exc:
        error = exc.errors()[0]
        field = str(error["loc"][0]) if error.get("loc") else model_cls.__name__
        raise RecurrenceParseError(descriptor, field, error.get("msg")) from exc


# Pattern matchers


def match_daily_every_nth_day(text: str) -> Optional[EveryNthDay]:
    m = _DAILY_EVERY_NTH_DAY.search(text)
    if not m:
        return None
    return _build(EveryNthDay, text, day_frequency=_group_as_int(m, "day_frequency", text))


def match_daily_every_weekday(text: str) -> Optional[EveryWeekday]:
    if not _DAILY_EVERY_WEEKDAY.search(text):
        return None
    return EveryWeekday()


def match_first_day_of_week(text: str) -> Weekday:
    """Return the descriptor's first day of week, Sunday when absent."""
    m = _FIRST_DAY_OF_WEEK.search(text)
    if not m:
        return Weekday.SUNDAY
    return _group_as_enum(m, "first_day_of_week", Weekday, text)


def match_weekly_on_days(text: str) -> Optional[EveryNthWeekOnDays]:
    """Match ``<weekly>`` with optional per-day flags and a required weekFrequency."""
    m = _WEEKLY_ON_DAYS.search(text)
    if not m:
        return None
    days = frozenset(day for day in Weekday if m.group(day.value))
    return _build(
        EveryNthWeekOnDays,
        text,
        week_frequency=_group_as_int(m, "week_frequency", text),
        days=days,
        first_day_of_week=match_first_day_of_week(text),
    )


def match_monthly_by_day(text: str) -> Optional[EveryNthDayOfEveryMthMonth]:
    m = _MONTHLY_BY_DAY.search(text)
    if not m:
        return None
    return _build(
        EveryNthDayOfEveryMthMonth,
        text,
        day=_group_as_int(m, "day", text),
        month_frequency=_group_as_int(m, "month_frequency", text),
    )


def match_monthly_by_qualifier(text: str) -> Optional[EveryQualifierOfKindOfDayEveryMthMonth]:
    m = _MONTHLY_BY_QUALIFIER.search(text)
    if not m:
        return None
    return _build(
        EveryQualifierOfKindOfDayEveryMthMonth,
        text,
        qualifier=_group_as_enum(m, "qualifier", KindOfDayQualifier, text),
        kind_of_day=_group_as_enum(m, "kind_of_day", KindOfDay, text),
        month_frequency=_group_as_int(m, "month_frequency", text),
    )


def match_yearly_by_day(text: str) -> Optional[EveryNthDayOfMonth]:
    m = _YEARLY_BY_DAY.search(text)
    if not m:
        return None
    return _build(
        EveryNthDayOfMonth,
        text,
        day=_group_as_int(m, "day", text),
        month=_group_as_int(m, "month", text),
    )


def match_yearly_by_qualifier(text: str) -> Optional[EveryQualifierOfKindOfDayOfMonth]:
    m = _YEARLY_BY_QUALIFIER.search(text)
    if not m:
        return None
    return _build(
        EveryQualifierOfKindOfDayOfMonth,
        text,
        qualifier=_group_as_enum(m, "qualifier", KindOfDayQualifier, text),
        kind_of_day=_group_as_enum(m, "kind_of_day", KindOfDay, text),
        month=_group_as_int(m, "month", text),
    )


PATTERN_MATCHERS: "tuple[Callable[[str], Optional[AnyPattern]], ...]" = (
    match_daily_every_nth_day,
    match_daily_every_weekday,
    match_weekly_on_days,
    match_monthly_by_day,
    match_monthly_by_qualifier,
    match_yearly_by_day,
    match_yearly_by_qualifier,
)


def match_pattern(text: str) -> Optional[AnyPattern]:
    """Return the first pattern recognized in priority order, or None."""
    for matcher in PATTERN_MATCHERS:
        pattern = matcher(text)
        if pattern is not None:
            logger.debug("Descriptor matched by %s: %r", matcher.__name__, pattern)
            return pattern
    return None


# End condition matchers


def match_implicit_end(text: str) -> Optional[ImplicitEnd]:
    if not _IMPLICIT_END.search(text):
        return None
    return ImplicitEnd()


def match_instance_count(text: str) -> Optional[InstanceCount]:
    m = _INSTANCE_COUNT.search(text)
    if not m:
        return None
    return _build(InstanceCount, text, count=_group_as_int(m, "repeat_instances", text))


def match_explicit_end(text: str) -> Optional[ExplicitEndDate]:
    """Match ``<windowEnd>``; the value is the raw boundary, before midnight correction."""
    m = _WINDOW_END.search(text)
    if not m:
        return None
    return ExplicitEndDate(end_date=_group_as_datetime(m, "window_end", text))


END_MATCHERS: "tuple[Callable[[str], Optional[AnyEnd]], ...]" = (
    match_implicit_end,
    match_instance_count,
    match_explicit_end,
)


def match_end_condition(text: str) -> Optional[AnyEnd]:
    for matcher in END_MATCHERS:
        end = matcher(text)
        if end is not None:
            return end
    return None
