"""
Static time slot catalog and the day-of-week booking policy.

Saturday mornings run 10:00 - 12:00, Monday to Friday afternoons
13:30 - 20:30. Sundays are closed.
"""

from typing import List, Optional, Tuple

import pendulum
from pendulum import Date

from .models import Period, TimeSlotTemplate, RESOURCES


def _templates(labels: List[str], period: Period) -> List[TimeSlotTemplate]:
    return [TimeSlotTemplate(id=label, label=label, period=period) for label in labels]


# The 12:00 row is kept as a bookable Saturday slot
TIME_SLOTS: Tuple[TimeSlotTemplate, ...] = tuple(
    _templates(["10:00", "10:30", "11:00", "11:30", "12:00"], Period.AM)
    + _templates(
        [
            "13:30", "14:00", "14:30", "15:00", "15:30", "16:00", "16:30",
            "17:00", "17:30", "18:00", "18:30", "19:00", "19:30", "20:00",
            "20:30",
        ],
        Period.PM,
    )
)


def applicable_period(day_of_week: int) -> Optional[Period]:
    """
    Return which period is bookable on a weekday (0=Monday, 6=Sunday).

    Saturday gets AM slots, Monday to Friday PM slots, Sunday nothing.
    """
    if day_of_week == pendulum.SUNDAY:
        return None
    if day_of_week == pendulum.SATURDAY:
        return Period.AM
    return Period.PM


def slots_for_period(period: Optional[Period]) -> List[TimeSlotTemplate]:
    """All catalog entries of a period, in catalog order."""
    if period is None:
        return []
    return [slot for slot in TIME_SLOTS if slot.period == period]


def slots_for_date(date: Date) -> List[TimeSlotTemplate]:
    """Time slots offered on a given date."""
    return slots_for_period(applicable_period(date.day_of_week))


def find_time_slot(time_slot_id: str) -> Optional[TimeSlotTemplate]:
    for slot in TIME_SLOTS:
        if slot.id == time_slot_id:
            return slot
    return None


def time_label(time_slot_id: str) -> str:
    """Display label for a time slot id, or the id itself when unknown."""
    slot = find_time_slot(time_slot_id)
    return slot.label if slot else time_slot_id


def is_bookable(date: Date, time_slot_id: str, resource_id: str) -> bool:
    """Check if the (date, time, resource) triple is offered at all."""
    if resource_id not in RESOURCES:
        return False
    slot = find_time_slot(time_slot_id)
    if slot is None:
        return False
    return slot.period == applicable_period(date.day_of_week)
