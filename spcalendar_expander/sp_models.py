"""Data models for SharePoint calendar recurrence - typed rules and appointments."""

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _FrozenModel(BaseModel):
    """Immutable, hashable base for every record in this package."""

    model_config = ConfigDict(frozen=True)


class Weekday(str, Enum):
    """Two-letter weekday codes as written in recurrence descriptors."""

    SUNDAY = "su"
    MONDAY = "mo"
    TUESDAY = "tu"
    WEDNESDAY = "we"
    THURSDAY = "th"
    FRIDAY = "fr"
    SATURDAY = "sa"

    @property
    def iso_index(self) -> int:
        """Monday=0 .. Sunday=6, matching datetime.weekday() and dateutil."""
        return _ISO_INDEX[self]


_ISO_INDEX = {
    Weekday.MONDAY: 0,
    Weekday.TUESDAY: 1,
    Weekday.WEDNESDAY: 2,
    Weekday.THURSDAY: 3,
    Weekday.FRIDAY: 4,
    Weekday.SATURDAY: 5,
    Weekday.SUNDAY: 6,
}


class KindOfDayQualifier(str, Enum):
    """Ordinal selecting one matching day within a month."""

    FIRST = "first"
    SECOND = "second"
    THIRD = "third"
    FOURTH = "fourth"
    LAST = "last"

    @property
    def position(self) -> int:
        """1-based position within the month, -1 for last."""
        return _POSITIONS[self]


_POSITIONS = {
    KindOfDayQualifier.FIRST: 1,
    KindOfDayQualifier.SECOND: 2,
    KindOfDayQualifier.THIRD: 3,
    KindOfDayQualifier.FOURTH: 4,
    KindOfDayQualifier.LAST: -1,
}


class KindOfDay(str, Enum):
    """Which days of a month a qualifier counts over."""

    DAY = "day"
    WEEKDAY = "weekday"
    WEEKEND_DAY = "weekend_day"
    SUNDAY = "su"
    MONDAY = "mo"
    TUESDAY = "tu"
    WEDNESDAY = "we"
    THURSDAY = "th"
    FRIDAY = "fr"
    SATURDAY = "sa"

    @property
    def weekday(self) -> Optional[Weekday]:
        """The specific weekday for weekday-name kinds, else None."""
        try:
            return Weekday(self.value)
        except ValueError:
            return None


# End conditions


class ImplicitEnd(_FrozenModel):
    """No explicit terminator; expansion applies the implicit instance cap."""

    kind: Literal["implicit"] = "implicit"


class InstanceCount(_FrozenModel):
    kind: Literal["count"] = "count"
    count: int = Field(..., ge=1, description="Number of occurrences")


class ExplicitEndDate(_FrozenModel):
    kind: Literal["end_date"] = "end_date"
    end_date: datetime = Field(..., description="Inclusive upper bound for occurrence starts")


EndCondition = Annotated[
    Union[ImplicitEnd, InstanceCount, ExplicitEndDate], Field(discriminator="kind")
]


# Patterns


class EveryNthDay(_FrozenModel):
    kind: Literal["every_nth_day"] = "every_nth_day"
    day_frequency: int = Field(..., ge=1)


class EveryWeekday(_FrozenModel):
    kind: Literal["every_weekday"] = "every_weekday"


DailyPattern = Annotated[Union[EveryNthDay, EveryWeekday], Field(discriminator="kind")]


class EveryNthWeekOnDays(_FrozenModel):
    """Every Nth week on a non-empty set of weekdays.

    Week blocks start on ``first_day_of_week``; SharePoint defaults to Sunday.
    """

    kind: Literal["every_nth_week_on_days"] = "every_nth_week_on_days"
    week_frequency: int = Field(..., ge=1)
    days: frozenset[Weekday] = Field(..., min_length=1)
    first_day_of_week: Weekday = Weekday.SUNDAY


WeeklyPattern = EveryNthWeekOnDays


class EveryNthDayOfEveryMthMonth(_FrozenModel):
    kind: Literal["nth_day_every_mth_month"] = "nth_day_every_mth_month"
    day: int = Field(..., ge=1, le=31)
    month_frequency: int = Field(..., ge=1)


class EveryQualifierOfKindOfDayEveryMthMonth(_FrozenModel):
    kind: Literal["qualifier_every_mth_month"] = "qualifier_every_mth_month"
    qualifier: KindOfDayQualifier
    kind_of_day: KindOfDay
    month_frequency: int = Field(..., ge=1)


MonthlyPattern = Annotated[
    Union[EveryNthDayOfEveryMthMonth, EveryQualifierOfKindOfDayEveryMthMonth],
    Field(discriminator="kind"),
]


class EveryNthDayOfMonth(_FrozenModel):
    kind: Literal["nth_day_of_month"] = "nth_day_of_month"
    day: int = Field(..., ge=1, le=31)
    month: int = Field(..., ge=1, le=12)


class EveryQualifierOfKindOfDayOfMonth(_FrozenModel):
    kind: Literal["qualifier_of_month"] = "qualifier_of_month"
    qualifier: KindOfDayQualifier
    kind_of_day: KindOfDay
    month: int = Field(..., ge=1, le=12)


YearlyPattern = Annotated[
    Union[EveryNthDayOfMonth, EveryQualifierOfKindOfDayOfMonth], Field(discriminator="kind")
]


# Recurrence variants


class NoRecurrence(_FrozenModel):
    kind: Literal["none"] = "none"


class UnknownRecurrence(_FrozenModel):
    """Descriptor present but not recognized; expands to a single instance."""

    kind: Literal["unknown"] = "unknown"


class DeletedInstance(_FrozenModel):
    """Suppresses the series occurrence that originally started at occurrence_date."""

    kind: Literal["deleted"] = "deleted"
    series_id: int
    occurrence_date: datetime


class ModifiedInstance(_FrozenModel):
    """Replaces the series occurrence that originally started at occurrence_date."""

    kind: Literal["modified"] = "modified"
    series_id: int
    occurrence_date: datetime


class DailyRecurrence(_FrozenModel):
    kind: Literal["daily"] = "daily"
    pattern: DailyPattern
    end: EndCondition


class WeeklyRecurrence(_FrozenModel):
    kind: Literal["weekly"] = "weekly"
    pattern: WeeklyPattern
    end: EndCondition


class MonthlyRecurrence(_FrozenModel):
    kind: Literal["monthly"] = "monthly"
    pattern: MonthlyPattern
    end: EndCondition


class YearlyRecurrence(_FrozenModel):
    kind: Literal["yearly"] = "yearly"
    pattern: YearlyPattern
    end: EndCondition


Recurrence = Annotated[
    Union[
        NoRecurrence,
        UnknownRecurrence,
        DeletedInstance,
        ModifiedInstance,
        DailyRecurrence,
        WeeklyRecurrence,
        MonthlyRecurrence,
        YearlyRecurrence,
    ],
    Field(discriminator="kind"),
]

ExceptionMarker = Union[DeletedInstance, ModifiedInstance]
PatternRecurrence = Union[DailyRecurrence, WeeklyRecurrence, MonthlyRecurrence, YearlyRecurrence]


def is_exception(recurrence: object) -> bool:
    """Check if recurrence marks a deleted or modified occurrence."""
    return isinstance(recurrence, get_args(ExceptionMarker))


def is_pattern(recurrence: object) -> bool:
    """Check if recurrence is a fully typed repeating rule."""
    return isinstance(recurrence, get_args(PatternRecurrence))


class Appointment(_FrozenModel):
    """One calendar item as stored in the source list."""

    id: int = Field(..., description="Item ID, shared by a series and its exceptions")
    start: datetime = Field(..., description="Start of the first occurrence")
    end: datetime = Field(..., description="End of the first occurrence")
    duration: int = Field(..., ge=0, description="Occurrence length in seconds")
    recurrence: Recurrence = Field(default_factory=NoRecurrence)
    is_all_day: bool = Field(default=False, description="All-day event flag")

    @field_validator("duration", mode="before")
    @classmethod
    def _coerce_duration(cls, value: object) -> object:
        # Duration arrives as text from the source list
        if isinstance(value, str):
            return int(value.strip())
        return value


class RecurrenceInstance(_FrozenModel):
    """A concrete occurrence emitted by expansion; never persisted."""

    id: int
    start: datetime
    end: datetime
