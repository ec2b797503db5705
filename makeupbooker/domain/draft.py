"""
Draft selection rules and commit validation.

The builder never holds state: every call takes the current draft and
returns a new one, so the caller decides when a draft is replaced or
cleared.
"""

import logging
import uuid
from typing import FrozenSet, Tuple

import pendulum
from pendulum import Date

from .availability import SlotKey, slot_key
from .catalog import is_bookable
from .exceptions import EmptySelection, MissingIdentity
from .models import BookedSlot, StudentBooking

logger = logging.getLogger(__name__)

Draft = Tuple[BookedSlot, ...]


class DraftBuilder:
    """
    Applies the one-computer-per-time-slot rule to a student's selections.

    Toggle rules:
    1. Occupied or non-bookable slots are ignored (draft unchanged)
    2. Selecting an already selected slot deselects it
    3. Selecting another computer for a selected time replaces the old one
    """

    def __init__(self, timezone: str = "Asia/Taipei"):
        self.timezone = timezone

    def toggle(
        self,
        date: Date,
        time_slot_id: str,
        resource_id: str,
        draft: Draft,
        occupied: FrozenSet[SlotKey],
    ) -> Draft:
        """
        Select or deselect a slot.

        Args:
            date: Date of the slot
            time_slot_id: Catalog time slot id (e.g. "14:00")
            resource_id: Computer id
            draft: Current draft selection
            occupied: Occupancy index of committed bookings

        Returns:
            The new draft (the same tuple when the toggle is rejected)
        """
        if slot_key(date, time_slot_id, resource_id) in occupied:
            logger.debug(
                "Ignoring selection of occupied slot %s %s %s",
                date, time_slot_id, resource_id,
            )
            return draft

        if not is_bookable(date, time_slot_id, resource_id):
            logger.debug(
                "Ignoring selection of unavailable slot %s %s %s",
                date, time_slot_id, resource_id,
            )
            return draft

        if any(slot.matches(date, time_slot_id, resource_id) for slot in draft):
            return tuple(
                slot for slot in draft
                if not slot.matches(date, time_slot_id, resource_id)
            )

        selected = BookedSlot(date=date, time_slot_id=time_slot_id, resource_id=resource_id)
        kept = tuple(slot for slot in draft if not slot.same_time(selected))
        return kept + (selected,)

    def build_booking(self, name: str, student_class: str, draft: Draft) -> StudentBooking:
        """
        Validate a draft and turn it into a new StudentBooking.

        Raises:
            EmptySelection: If no slot is selected
            MissingIdentity: If name or class is blank
        """
        if not draft:
            raise EmptySelection()

        name = (name or "").strip()
        student_class = (student_class or "").strip()
        if not name or not student_class:
            raise MissingIdentity()

        return StudentBooking(
            id=uuid.uuid4(),
            name=name,
            student_class=student_class,
            slots=tuple(draft),
            created_at=pendulum.now(self.timezone),
        )
