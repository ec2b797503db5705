"""
Slot identity and the occupancy index derived from committed bookings.

The index is never stored: callers rebuild it from the current store
contents, so it cannot go stale after a mutation.
"""

from typing import FrozenSet, Iterable, List

from pendulum import Date

from .models import RESOURCES, BookedSlot, ResourceId, StudentBooking

SlotKey = str


def slot_key(date: Date, time_slot_id: str, resource_id: str) -> SlotKey:
    """Canonical key for a (date, time, resource) triple."""
    return f"{date.to_date_string()}|{time_slot_id}|{resource_id}"


def key_of(slot: BookedSlot) -> SlotKey:
    return slot_key(slot.date, slot.time_slot_id, slot.resource_id)


def compute_occupied(bookings: Iterable[StudentBooking]) -> FrozenSet[SlotKey]:
    """Collect the keys of every slot held by any booking."""
    return frozenset(
        key_of(slot)
        for booking in bookings
        for slot in booking.slots
    )


def is_occupied(key: SlotKey, occupied: FrozenSet[SlotKey]) -> bool:
    return key in occupied


def free_resources(
    date: Date,
    time_slot_id: str,
    occupied: FrozenSet[SlotKey],
) -> List[ResourceId]:
    """Resources still free for a time slot on a date."""
    return [
        resource for resource in RESOURCES
        if slot_key(date, time_slot_id, resource) not in occupied
    ]
