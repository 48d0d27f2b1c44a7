"""Instance expansion for SharePoint recurrences.

Typed recurrence rules are mapped onto dateutil rrules, which generate the
candidate occurrence starts lazily; the candidates are then reconciled against
the series' exception records.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional

from dateutil.rrule import DAILY, FR, MO, MONTHLY, SA, SU, TH, TU, WE, WEEKLY, YEARLY, rrule

from .config_loader import DEFAULT_IMPLICIT_INSTANCE_CAP
from .sp_exception_merger import ExceptionMerger
from .sp_exceptions import RecurrenceExpansionError
from .sp_models import (
    Appointment,
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
    RecurrenceInstance,
    is_exception,
    is_pattern,
)

logger = logging.getLogger(__name__)

# Indexed by Weekday.iso_index
_DATEUTIL_WEEKDAYS = (MO, TU, WE, TH, FR, SA, SU)
_WORKDAYS = (MO, TU, WE, TH, FR)
_WEEKEND_DAYS = (SA, SU)


@dataclass
class ExpansionConfig:
    """Configuration for instance expansion."""

    implicit_instance_cap: int = DEFAULT_IMPLICIT_INSTANCE_CAP

    @classmethod
    def from_settings(cls, settings: Any) -> "ExpansionConfig":
        """Extract expansion configuration from a settings object.

        Args:
            settings: Configuration object (e.g. config_loader.Config), or None

        Returns:
            ExpansionConfig with values from settings or defaults
        """
        return cls(
            implicit_instance_cap=getattr(
                settings, "implicit_instance_cap", DEFAULT_IMPLICIT_INSTANCE_CAP
            ),
        )


def start_offset(start: datetime) -> timedelta:
    """Sub-second part of start, which dateutil rrules do not carry."""
    return timedelta(microseconds=start.microsecond)


def _kind_of_day_kwargs(qualifier: KindOfDayQualifier, kind_of_day: KindOfDay) -> dict[str, Any]:
    """rrule arguments selecting the qualified kind of day within a month."""
    position = qualifier.position
    if kind_of_day is KindOfDay.DAY:
        return {"bymonthday": position}
    if kind_of_day is KindOfDay.WEEKDAY:
        return {"byweekday": _WORKDAYS, "bysetpos": position}
    if kind_of_day is KindOfDay.WEEKEND_DAY:
        return {"byweekday": _WEEKEND_DAYS, "bysetpos": position}
    weekday = kind_of_day.weekday
    return {"byweekday": _DATEUTIL_WEEKDAYS[weekday.iso_index](position)}


def _end_kwargs(
    end: Any, dtstart: datetime, implicit_instance_cap: int, offset: timedelta = timedelta(0)
) -> dict[str, Any]:
    if isinstance(end, ImplicitEnd):
        return {"count": implicit_instance_cap}
    if isinstance(end, InstanceCount):
        return {"count": end.count}
    if isinstance(end, ExplicitEndDate):
        until = end.end_date
        if dtstart.tzinfo is not None and until.tzinfo is None:
            until = until.replace(tzinfo=dtstart.tzinfo)
        return {"until": until - offset}
    raise RecurrenceExpansionError(f"Unsupported end condition: {end!r}")


def build_rrule(
    appointment: Appointment, implicit_instance_cap: int = DEFAULT_IMPLICIT_INSTANCE_CAP
) -> rrule:
    """Map an appointment's pattern rule onto a dateutil rrule starting at appointment.start.

    rrule drops sub-second precision from dtstart, so the rule is anchored on
    the whole second and its until bound is moved back by the same fraction.
    Occurrences must be shifted forward by start_offset(appointment.start).

    Raises:
        RecurrenceExpansionError: If the appointment has no pattern rule
    """
    recurrence = appointment.recurrence
    if not is_pattern(recurrence):
        raise RecurrenceExpansionError(
            f"Appointment {appointment.id} has no recurrence pattern ({recurrence.kind})"
        )

    pattern = recurrence.pattern
    offset = start_offset(appointment.start)
    kwargs: dict[str, Any] = {"dtstart": appointment.start - offset}

    if isinstance(pattern, EveryNthDay):
        freq = DAILY
        kwargs["interval"] = pattern.day_frequency
    elif isinstance(pattern, EveryWeekday):
        freq = DAILY
        kwargs["byweekday"] = _WORKDAYS
    elif isinstance(pattern, EveryNthWeekOnDays):
        freq = WEEKLY
        kwargs["interval"] = pattern.week_frequency
        kwargs["byweekday"] = tuple(
            _DATEUTIL_WEEKDAYS[day.iso_index]
            for day in sorted(pattern.days, key=lambda d: d.iso_index)
        )
        kwargs["wkst"] = _DATEUTIL_WEEKDAYS[pattern.first_day_of_week.iso_index]
    elif isinstance(pattern, EveryNthDayOfEveryMthMonth):
        freq = MONTHLY
        kwargs["interval"] = pattern.month_frequency
        kwargs["bymonthday"] = pattern.day
    elif isinstance(pattern, EveryQualifierOfKindOfDayEveryMthMonth):
        freq = MONTHLY
        kwargs["interval"] = pattern.month_frequency
        kwargs.update(_kind_of_day_kwargs(pattern.qualifier, pattern.kind_of_day))
    elif isinstance(pattern, EveryNthDayOfMonth):
        freq = YEARLY
        kwargs["bymonth"] = pattern.month
        kwargs["bymonthday"] = pattern.day
    elif isinstance(pattern, EveryQualifierOfKindOfDayOfMonth):
        freq = YEARLY
        kwargs["bymonth"] = pattern.month
        kwargs.update(_kind_of_day_kwargs(pattern.qualifier, pattern.kind_of_day))
    else:
        raise RecurrenceExpansionError(f"Unsupported recurrence pattern: {pattern!r}")

    kwargs.update(_end_kwargs(recurrence.end, appointment.start, implicit_instance_cap, offset))

    try:
        return rrule(freq, **kwargs)
    except (ValueError, TypeError) as e:
        raise RecurrenceExpansionError(
            f"Failed to build rrule for appointment {appointment.id}: {e}"
        ) from e


class RecurrenceExpander:
    """Expands appointments into concrete, ordered recurrence instances."""

    def __init__(self, settings: Any = None):
        """Initialize expander with configuration settings.

        Args:
            settings: Configuration object with expansion settings, or None for defaults
        """
        self.config = ExpansionConfig.from_settings(settings)
        self.merger = ExceptionMerger()

        logger.debug(
            "RecurrenceExpander initialized: implicit_instance_cap=%d",
            self.config.implicit_instance_cap,
        )

    def iter_occurrences(self, base: Appointment) -> Iterator[datetime]:
        """Yield the series' candidate start dates in ascending order.

        The sequence is lazy and bounded by the rule's end condition.
        """
        rule = build_rrule(base, self.config.implicit_instance_cap)
        offset = start_offset(base.start)
        try:
            for occurrence in rule:
                yield occurrence + offset
        except (ValueError, OverflowError) as e:
            raise RecurrenceExpansionError(
                f"Occurrence generation failed for appointment {base.id}: {e}"
            ) from e

    def expand(
        self, base: Appointment, exceptions: Iterable[Appointment] = ()
    ) -> list[RecurrenceInstance]:
        """Expand one appointment into its final instances.

        Args:
            base: Appointment to expand
            exceptions: Exception appointments; those whose series_id is not
                base.id, or whose original date matches no occurrence, are ignored

        Returns:
            Instances ordered by start. Appointments without a pattern rule
            (no recurrence, unknown recurrence) yield exactly one instance.
        """
        if not is_pattern(base.recurrence):
            return [RecurrenceInstance(id=base.id, start=base.start, end=base.end)]

        duration = timedelta(seconds=base.duration)
        candidates = [
            RecurrenceInstance(id=base.id, start=occurrence, end=occurrence + duration)
            for occurrence in self.iter_occurrences(base)
        ]
        logger.debug(
            "Appointment %d: generated %d candidate occurrence(s)", base.id, len(candidates)
        )
        return self.merger.merge(base, candidates, exceptions)

    def expand_calendar(self, appointments: Iterable[Appointment]) -> list[RecurrenceInstance]:
        """Expand every series in a calendar, joining exceptions to their series.

        Exception appointments are not emitted on their own: a modified
        occurrence appears through its series, and exceptions referencing a
        series that is not present are dropped.

        Returns:
            Instances grouped by series in input order, each group ordered by start
        """
        bases: list[Appointment] = []
        exceptions_by_series: dict[int, list[Appointment]] = defaultdict(list)

        for appointment in appointments:
            marker = appointment.recurrence
            if is_exception(marker):
                exceptions_by_series[marker.series_id].append(appointment)
            else:
                bases.append(appointment)

        known_ids = {base.id for base in bases}
        stale = [series_id for series_id in exceptions_by_series if series_id not in known_ids]
        if stale:
            logger.debug("Dropping exceptions for unknown series: %s", sorted(stale))

        instances: list[RecurrenceInstance] = []
        for base in bases:
            instances.extend(self.expand(base, exceptions_by_series.get(base.id, ())))

        logger.debug(
            "Expanded %d series into %d instance(s)", len(bases), len(instances)
        )
        return instances


def expand(
    base: Appointment,
    exceptions: Iterable[Appointment] = (),
    settings: Optional[Any] = None,
) -> list[RecurrenceInstance]:
    """Expand one appointment; see RecurrenceExpander.expand."""
    return RecurrenceExpander(settings).expand(base, exceptions)


def expand_calendar(
    appointments: Iterable[Appointment], settings: Optional[Any] = None
) -> list[RecurrenceInstance]:
    """Expand a whole calendar; see RecurrenceExpander.expand_calendar."""
    return RecurrenceExpander(settings).expand_calendar(appointments)
