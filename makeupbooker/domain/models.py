"""
Domain models for time slots, booked slots and student bookings.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Literal, Tuple

import pendulum
from pendulum import Date, DateTime


class Period(str, Enum):
    """Part of the day a time slot belongs to."""
    AM = "AM"
    PM = "PM"


ResourceId = Literal["A", "B", "C"]

# Three interchangeable computers per time slot
RESOURCES: Tuple[ResourceId, ...] = ("A", "B", "C")

WEEKDAY_LABELS = {
    pendulum.MONDAY: "Mon",
    pendulum.TUESDAY: "Tue",
    pendulum.WEDNESDAY: "Wed",
    pendulum.THURSDAY: "Thu",
    pendulum.FRIDAY: "Fri",
    pendulum.SATURDAY: "Sat",
    pendulum.SUNDAY: "Sun",
}


def parse_date(value: str) -> Date:
    """
    Parse an ISO ``YYYY-MM-DD`` string into a calendar date.

    Raises:
        ValueError: If the value is not a valid date
    """
    try:
        return pendulum.from_format(value.strip(), "YYYY-MM-DD").date()
    except ValueError as exc:
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD") from exc


def weekday_label(date: Date) -> str:
    """Short English weekday name for a date."""
    return WEEKDAY_LABELS[date.day_of_week]


@dataclass(frozen=True)
class TimeSlotTemplate:
    """
    A wall-clock slot of the static catalog.
    """
    id: str
    label: str
    period: Period


@dataclass(frozen=True)
class BookedSlot:
    """
    One atomic reservation unit: a computer at a time on a date.

    Invariant: at most one BookedSlot with the same
    (date, time_slot_id, resource_id) exists across the whole store.
    """
    date: Date
    time_slot_id: str
    resource_id: ResourceId

    def same_time(self, other: "BookedSlot") -> bool:
        """Check if both slots share date and time, regardless of resource."""
        return self.date == other.date and self.time_slot_id == other.time_slot_id

    def matches(self, date: Date, time_slot_id: str, resource_id: str) -> bool:
        return (
            self.date == date
            and self.time_slot_id == time_slot_id
            and self.resource_id == resource_id
        )

    def sort_key(self) -> Tuple[str, str, str]:
        return (self.date.to_date_string(), self.time_slot_id, self.resource_id)

    def __str__(self) -> str:
        return f"{self.date.to_date_string()} {self.time_slot_id} (computer {self.resource_id})"


@dataclass(frozen=True)
class StudentBooking:
    """
    One submission: a student and the slots they claimed.

    The record owns its slots exclusively; it only changes by losing
    slots and disappears once it has none left.
    """
    name: str
    student_class: str
    slots: Tuple[BookedSlot, ...]
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: DateTime = field(default_factory=pendulum.now)

    def holds(self, date: Date, time_slot_id: str, resource_id: str) -> bool:
        """Check if this booking contains the exact slot."""
        return any(slot.matches(date, time_slot_id, resource_id) for slot in self.slots)

    def without_slot(self, date: Date, time_slot_id: str, resource_id: str) -> "StudentBooking":
        """Return a copy of this booking with the exact slot removed."""
        remaining = tuple(
            slot for slot in self.slots
            if not slot.matches(date, time_slot_id, resource_id)
        )
        return replace(self, slots=remaining)

    def is_empty(self) -> bool:
        return not self.slots
