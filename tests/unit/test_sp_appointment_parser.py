"""Unit tests for spcalendar_expander.sp_appointment_parser."""

from datetime import datetime

import pytest

from spcalendar_expander.sp_appointment_parser import (
    SPAppointmentParser,
    parse_appointment,
    parse_appointments,
)
from spcalendar_expander.sp_exceptions import AppointmentFieldError
from spcalendar_expander.sp_models import (
    Appointment,
    DailyRecurrence,
    DeletedInstance,
    NoRecurrence,
)

pytestmark = pytest.mark.unit


class TestSPAppointmentParser:
    def setup_method(self):
        self.parser = SPAppointmentParser()

    def test_single_appointment(self, master_fields):
        fields = master_fields(
            fRecurrence=False,
            EventDate=datetime(2024, 5, 1, 14, 0),
            EndDate=datetime(2024, 5, 1, 15, 30),
            Duration="5400",
        )
        assert self.parser.parse(fields) == Appointment(
            id=7,
            start=datetime(2024, 5, 1, 14, 0),
            end=datetime(2024, 5, 1, 15, 30),
            duration=5400,
            recurrence=NoRecurrence(),
            is_all_day=False,
        )

    def test_series_master(self, master_fields):
        appointment = self.parser.parse(master_fields())
        assert appointment.id == 7
        assert appointment.duration == 3600
        assert isinstance(appointment.recurrence, DailyRecurrence)

    def test_exception_keeps_its_own_id(self, master_fields):
        fields = master_fields(ID=99, EventType=3, MasterSeriesItemID=7)
        appointment = self.parser.parse(fields)
        assert appointment.id == 99
        assert isinstance(appointment.recurrence, DeletedInstance)
        assert appointment.recurrence.series_id == 7

    @pytest.mark.parametrize("raw,expected", [("True", True), ("false", False), (" TRUE ", True), (False, False)])
    def test_all_day_flag_accepts_text(self, master_fields, raw, expected):
        assert self.parser.parse(master_fields(fAllDayEvent=raw)).is_all_day is expected

    def test_integer_duration_accepted(self, master_fields):
        assert self.parser.parse(master_fields(Duration=1800)).duration == 1800

    def test_invalid_all_day_flag(self, master_fields):
        with pytest.raises(AppointmentFieldError) as exc_info:
            self.parser.parse(master_fields(fAllDayEvent="maybe"))
        assert exc_info.value.field == "fAllDayEvent"

    def test_non_numeric_duration(self, master_fields):
        with pytest.raises(AppointmentFieldError) as exc_info:
            self.parser.parse(master_fields(Duration="1h"))
        assert exc_info.value.field == "Duration"

    def test_negative_duration_rejected(self, master_fields):
        with pytest.raises(AppointmentFieldError) as exc_info:
            self.parser.parse(master_fields(Duration="-60"))
        assert exc_info.value.field == "duration"

    def test_mistyped_id(self, master_fields):
        with pytest.raises(AppointmentFieldError) as exc_info:
            self.parser.parse(master_fields(ID="7"))
        assert exc_info.value.field == "ID"

    def test_missing_event_date(self, master_fields):
        fields = master_fields()
        del fields["EventDate"]
        with pytest.raises(AppointmentFieldError) as exc_info:
            self.parser.parse(fields)
        assert exc_info.value.field == "EventDate"


def test_module_level_helpers(master_fields):
    rows = [master_fields(ID=1, fRecurrence=False), master_fields(ID=2)]
    parsed = parse_appointments(rows)
    assert [a.id for a in parsed] == [1, 2]
    assert parse_appointment(rows[0]) == parsed[0]
