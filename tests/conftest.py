"""Shared fixtures for spcalendar_expander tests."""

from collections.abc import Generator
from datetime import datetime
from typing import Any, Callable

import pytest

from spcalendar_expander.sp_models import Appointment, NoRecurrence


def pytest_configure(config: Any) -> None:
    """Register test markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests")
    config.addinivalue_line("markers", "smoke: Basic smoke tests")


DAILY_EVERY_THIRD_DAY = (
    "<recurrence><rule><firstDayOfWeek>su</firstDayOfWeek>"
    '<repeat><daily dayFrequency="3" /></repeat>'
    "<repeatForever>FALSE</repeatForever></rule></recurrence>"
)


@pytest.fixture
def master_fields() -> Callable[..., dict[str, Any]]:
    """Build the field set of a recurring series master.

    Defaults describe a one-hour series starting 2024-01-01 09:00 that repeats
    every third day with no explicit end. Keyword arguments override fields.
    """

    def _build(**overrides: Any) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "ID": 7,
            "fRecurrence": True,
            "EventType": 1,
            "MasterSeriesItemID": 0,
            "RecurrenceID": datetime(2024, 1, 1, 9, 0),
            "EventDate": datetime(2024, 1, 1, 9, 0),
            "EndDate": datetime(2024, 12, 31, 10, 0),
            "Duration": "3600",
            "fAllDayEvent": "False",
            "RecurrenceData": DAILY_EVERY_THIRD_DAY,
        }
        fields.update(overrides)
        return fields

    return _build


@pytest.fixture
def make_appointment() -> Callable[..., Appointment]:
    """Build an Appointment with a one-hour default duration."""

    def _build(
        recurrence: Any = None,
        id: int = 1,
        start: datetime = datetime(2024, 1, 1, 9, 0),
        end: datetime = datetime(2024, 1, 1, 10, 0),
        duration: int = 3600,
    ) -> Appointment:
        return Appointment(
            id=id,
            start=start,
            end=end,
            duration=duration,
            recurrence=recurrence if recurrence is not None else NoRecurrence(),
        )

    return _build


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: Any) -> Generator[None, Any, None]:
    """Ensure logging environment overrides do not leak into tests."""
    monkeypatch.delenv("SPCALENDAR_DEBUG", raising=False)
    monkeypatch.delenv("SPCALENDAR_LOG_LEVEL", raising=False)
    yield
