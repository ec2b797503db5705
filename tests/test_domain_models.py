"""
Tests for domain models and the time slot catalog.
"""

import pendulum
import pytest

from makeupbooker.domain.catalog import (
    TIME_SLOTS,
    applicable_period,
    is_bookable,
    slots_for_date,
    time_label,
)
from makeupbooker.domain.models import BookedSlot, Period, StudentBooking, parse_date


class TestParseDate:
    """Tests for ISO date parsing."""

    def test_parse_valid_date(self):
        """An ISO date parses into a pendulum date."""
        date = parse_date("2024-03-04")

        assert date == pendulum.date(2024, 3, 4)
        assert date.day_of_week == pendulum.MONDAY

    def test_parse_invalid_date_raises_error(self):
        """An invalid date raises ValueError."""
        with pytest.raises(ValueError, match="Invalid date"):
            parse_date("2024-13-40")

    @pytest.mark.parametrize("value", ["not-a-date", "", "2024-02-30"])
    def test_unparsable_text_raises_value_error(self, value):
        """Text that is not a calendar date raises ValueError with the cause attached."""
        with pytest.raises(ValueError, match="expected YYYY-MM-DD") as exc_info:
            parse_date(value)

        assert isinstance(exc_info.value.__cause__, ValueError)


class TestCatalog:
    """Tests for the static time slot catalog."""

    def test_catalog_is_ordered_am_then_pm(self):
        """Catalog lists AM slots before PM slots."""
        periods = [slot.period for slot in TIME_SLOTS]

        assert periods == sorted(periods, key=lambda p: p != Period.AM)
        assert TIME_SLOTS[0].id == "10:00"
        assert TIME_SLOTS[-1].id == "20:30"

    def test_noon_is_a_saturday_slot(self):
        """Saturday offers 10:00 to 12:00."""
        saturday_ids = [slot.id for slot in slots_for_date(parse_date("2024-03-09"))]

        assert saturday_ids == ["10:00", "10:30", "11:00", "11:30", "12:00"]

    def test_applicable_period(self):
        """Weekdays get PM, Saturday AM, Sunday nothing."""
        assert applicable_period(pendulum.MONDAY) == Period.PM
        assert applicable_period(pendulum.FRIDAY) == Period.PM
        assert applicable_period(pendulum.SATURDAY) == Period.AM
        assert applicable_period(pendulum.SUNDAY) is None

    def test_sunday_has_no_slots(self):
        """Sunday offers no slots."""
        assert slots_for_date(parse_date("2024-03-03")) == []

    def test_weekday_has_fifteen_pm_slots(self):
        """Weekdays offer fifteen PM slots."""
        weekday_slots = slots_for_date(parse_date("2024-03-05"))

        assert len(weekday_slots) == 15
        assert all(slot.period == Period.PM for slot in weekday_slots)

    def test_is_bookable(self):
        """Only offered (date, time, computer) triples are bookable."""
        monday = parse_date("2024-03-04")

        assert is_bookable(monday, "14:00", "A")
        assert not is_bookable(monday, "10:00", "A")  # AM row on a weekday
        assert not is_bookable(monday, "14:00", "D")  # unknown computer
        assert not is_bookable(monday, "09:15", "A")  # unknown time
        assert not is_bookable(parse_date("2024-03-03"), "14:00", "A")

    def test_time_label_falls_back_to_id(self):
        """Unknown time ids are labelled by themselves."""
        assert time_label("13:30") == "13:30"
        assert time_label("late") == "late"


class TestStudentBooking:
    """Tests for StudentBooking slot removal."""

    def test_without_slot_keeps_other_slots(self):
        """Removing a slot keeps the others and the id."""
        monday = parse_date("2024-03-04")
        first = BookedSlot(date=monday, time_slot_id="14:00", resource_id="A")
        second = BookedSlot(date=monday, time_slot_id="14:30", resource_id="B")
        booking = StudentBooking(name="Amy", student_class="1A", slots=(first, second))

        remaining = booking.without_slot(monday, "14:00", "A")

        assert remaining.slots == (second,)
        assert remaining.id == booking.id
        assert booking.slots == (first, second)

    def test_removing_last_slot_leaves_empty_booking(self):
        """Removing the last slot leaves an empty booking."""
        monday = parse_date("2024-03-04")
        slot = BookedSlot(date=monday, time_slot_id="14:00", resource_id="A")
        booking = StudentBooking(name="Amy", student_class="1A", slots=(slot,))

        assert booking.without_slot(monday, "14:00", "A").is_empty()

    def test_same_time_ignores_resource(self):
        """Slots at the same time match regardless of computer."""
        monday = parse_date("2024-03-04")
        a = BookedSlot(date=monday, time_slot_id="14:00", resource_id="A")
        b = BookedSlot(date=monday, time_slot_id="14:00", resource_id="B")

        assert a.same_time(b)
        assert a != b
