"""
Application service exposing the booking and schedule operations.

The service owns the current draft and coordinates the booking store,
the draft rules and the schedule projection. Presentation code only
talks to this class.
"""

from __future__ import annotations

import logging
from typing import FrozenSet, List, Optional

from pendulum import Date

from ..adapters.admin_auth import AdminPassword
from ..adapters.booking_store import BookingStore
from ..adapters.message_generator import ConfirmationMessenger, TemplateMessenger
from ..domain.availability import SlotKey, compute_occupied, free_resources
from ..domain.catalog import slots_for_date
from ..domain.draft import Draft, DraftBuilder
from ..domain.exceptions import AuthenticationError
from ..domain.models import ResourceId, StudentBooking
from ..domain.schedule import DayColumn, ScheduleProjector, WeekGrid

logger = logging.getLogger(__name__)


class BookingService:
    """
    Orchestrates draft selection, commit, deletion and schedule views.

    Dependencies are injected so tests can use in-memory storage and the
    offline template messenger.
    """

    def __init__(
        self,
        store: BookingStore,
        draft_builder: Optional[DraftBuilder] = None,
        projector: Optional[ScheduleProjector] = None,
        messenger: Optional[ConfirmationMessenger] = None,
        admin_password: Optional[AdminPassword] = None,
    ) -> None:
        self._store = store
        self._draft_builder = draft_builder or DraftBuilder()
        self._projector = projector or ScheduleProjector()
        self._messenger = messenger or TemplateMessenger()
        self._admin_password = admin_password
        self._draft: Draft = ()

    @property
    def draft(self) -> Draft:
        return self._draft

    @property
    def bookings(self):
        return self._store.bookings

    def clear_draft(self) -> None:
        self._draft = ()

    def list_occupied(self) -> FrozenSet[SlotKey]:
        """Keys of every committed slot, rebuilt from the current store."""
        return compute_occupied(self._store.bookings)

    def day_availability(self, date: Date) -> List[tuple]:
        """
        Free computers for each time slot offered on a date.

        Returns:
            List of (TimeSlotTemplate, [free resource ids]) pairs; empty on Sundays
        """
        occupied = self.list_occupied()
        return [
            (time_slot, free_resources(date, time_slot.id, occupied))
            for time_slot in slots_for_date(date)
        ]

    def toggle_draft_slot(self, date: Date, time_slot_id: str, resource_id: ResourceId) -> Draft:
        self._draft = self._draft_builder.toggle(
            date=date,
            time_slot_id=time_slot_id,
            resource_id=resource_id,
            draft=self._draft,
            occupied=self.list_occupied(),
        )
        return self._draft

    def commit_draft(self, name: str, student_class: str) -> StudentBooking:
        """
        Turn the current draft into a committed booking and clear the draft.

        Raises:
            EmptySelection: If the draft is empty
            MissingIdentity: If name or class is blank
        """
        booking = self._draft_builder.build_booking(name, student_class, self._draft)
        self._store.append(booking)
        self.clear_draft()
        return booking

    def delete_slot(
        self,
        date: Date,
        time_slot_id: str,
        resource_id: ResourceId,
        password: Optional[str] = None,
    ) -> StudentBooking:
        """
        Remove a committed slot. The caller must have confirmed with the operator.

        Raises:
            AuthenticationError: If an admin password is set and does not match
            SlotNotFound: If no booking holds the slot
        """
        if self._admin_password is not None and self._admin_password.is_set:
            if password is None:
                raise AuthenticationError("Admin password required")
            self._admin_password.require(password)

        return self._store.remove_slot(date, time_slot_id, resource_id)

    def get_week_schedule(self, anchor: Date) -> WeekGrid:
        return self._projector.project_week(anchor, self._store.bookings)

    def get_day_schedule(self, date: Date) -> DayColumn:
        return self._projector.project_day(date, self._store.bookings)

    async def confirmation_messages(self, booking: StudentBooking) -> List[str]:
        """One advisory confirmation message per booked slot, in date order."""
        slots = sorted(booking.slots, key=lambda slot: slot.sort_key())
        return [await self._messenger.generate(slot) for slot in slots]

    def has_admin_password(self) -> bool:
        return self._admin_password is not None and self._admin_password.is_set

    def set_admin_password(self, password: str) -> None:
        if self._admin_password is None:
            raise RuntimeError("No admin password storage configured")
        self._admin_password.set(password)

    def verify_admin_password(self, password: str) -> bool:
        if self._admin_password is None:
            return True
        return self._admin_password.verify(password)
