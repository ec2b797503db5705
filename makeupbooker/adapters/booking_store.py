"""
Authoritative collection of committed bookings, persisted to local storage.
"""

from __future__ import annotations

import logging
import uuid
from typing import List, Optional, Tuple

import pendulum
from pendulum import Date
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from ..domain.exceptions import PersistedStateCorrupt, SlotNotFound
from ..domain.models import BookedSlot, ResourceId, StudentBooking, parse_date
from .storage import StorageProtocol

logger = logging.getLogger(__name__)


BOOKINGS_STORAGE_KEY = "makeup_bookings"


class StoredSlot(BaseModel):
    """Persisted form of a BookedSlot."""
    model_config = ConfigDict(populate_by_name=True)

    date: str
    time_id: str = Field(alias="timeId")
    computer_id: ResourceId = Field(alias="computerId")

    @field_validator("date")
    @classmethod
    def validate_date(cls, value: str) -> str:
        """Ensure the date is an ISO calendar date."""
        parse_date(value)
        return value


class StoredBooking(BaseModel):
    """Persisted form of a StudentBooking; the timestamp is in epoch milliseconds."""
    model_config = ConfigDict(populate_by_name=True)

    id: uuid.UUID
    name: str
    student_class: str = Field(alias="studentClass")
    bookings: List[StoredSlot] = Field(min_length=1)
    timestamp: int

    @classmethod
    def from_domain(cls, booking: StudentBooking) -> "StoredBooking":
        return cls(
            id=booking.id,
            name=booking.name,
            student_class=booking.student_class,
            bookings=[
                StoredSlot(
                    date=slot.date.to_date_string(),
                    time_id=slot.time_slot_id,
                    computer_id=slot.resource_id,
                )
                for slot in booking.slots
            ],
            timestamp=int(booking.created_at.timestamp() * 1000),
        )

    def to_domain(self, timezone: str) -> StudentBooking:
        return StudentBooking(
            id=self.id,
            name=self.name,
            student_class=self.student_class,
            slots=tuple(
                BookedSlot(
                    date=parse_date(slot.date),
                    time_slot_id=slot.time_id,
                    resource_id=slot.computer_id,
                )
                for slot in self.bookings
            ),
            created_at=pendulum.from_timestamp(self.timestamp / 1000, tz=timezone),
        )


_BOOKINGS_ADAPTER = TypeAdapter(List[StoredBooking])


def encode_bookings(bookings: List[StudentBooking]) -> str:
    """Serialize bookings to the JSON payload kept in storage."""
    stored = [StoredBooking.from_domain(booking) for booking in bookings]
    return _BOOKINGS_ADAPTER.dump_json(stored, by_alias=True).decode("utf-8")


def decode_bookings(payload: str, timezone: str = "Asia/Taipei") -> List[StudentBooking]:
    """
    Parse a stored JSON payload back into bookings.

    Raises:
        PersistedStateCorrupt: If the payload is not valid JSON or does
            not match the booking schema, including records without
            slots and timestamps outside the supported date range
    """
    try:
        stored = _BOOKINGS_ADAPTER.validate_json(payload)
    except ValidationError as exc:
        raise PersistedStateCorrupt(
            f"Stored bookings are unreadable ({exc.error_count()} error(s))"
        ) from exc
    try:
        return [item.to_domain(timezone) for item in stored]
    except (ValueError, OverflowError, OSError) as exc:
        raise PersistedStateCorrupt(f"Stored booking timestamp is out of range: {exc}") from exc


class BookingStore:
    """
    In-memory list of StudentBooking records with explicit load/save hooks.

    The store does not check slot uniqueness on append: double booking is
    prevented when the draft is built. Every mutation is written back to
    storage immediately.
    """

    def __init__(
        self,
        storage: StorageProtocol,
        timezone: str = "Asia/Taipei",
        storage_key: str = BOOKINGS_STORAGE_KEY,
    ):
        self._storage = storage
        self._timezone = timezone
        self._storage_key = storage_key
        self._bookings: List[StudentBooking] = []

    @property
    def bookings(self) -> Tuple[StudentBooking, ...]:
        """Snapshot of all bookings in insertion order."""
        return tuple(self._bookings)

    def __len__(self) -> int:
        return len(self._bookings)

    def load(self) -> None:
        """
        Rehydrate the store from storage.

        A missing payload yields an empty store; an unreadable one is
        logged and also yields an empty store.
        """
        payload = self._storage.get_item(self._storage_key)
        if not payload:
            self._bookings = []
            return

        try:
            self._bookings = decode_bookings(payload, self._timezone)
        except PersistedStateCorrupt as exc:
            logger.warning("Resetting booking store, persisted state is corrupt: %s", exc)
            self._bookings = []
            return

        logger.debug("Loaded %d booking(s) from storage", len(self._bookings))

    def save(self) -> None:
        """Write the full contents to storage. Failures are logged, not raised."""
        try:
            self._storage.set_item(self._storage_key, encode_bookings(self._bookings))
        except OSError as exc:
            logger.warning("Could not persist bookings: %s", exc)

    def append(self, booking: StudentBooking) -> None:
        self._bookings.append(booking)
        logger.info(
            "Booked %d slot(s) for %s (%s)",
            len(booking.slots), booking.name, booking.student_class,
        )
        self.save()

    def find_slot_owner(
        self,
        date: Date,
        time_slot_id: str,
        resource_id: str,
    ) -> Optional[StudentBooking]:
        """Return the booking holding the exact slot, if any."""
        for booking in self._bookings:
            if booking.holds(date, time_slot_id, resource_id):
                return booking
        return None

    def remove_slot(self, date: Date, time_slot_id: str, resource_id: str) -> StudentBooking:
        """
        Remove one slot from whichever booking holds it.

        The owning booking is dropped entirely once its last slot is gone.

        Returns:
            The owning booking as it was before the removal

        Raises:
            SlotNotFound: If no booking holds the slot
        """
        for index, booking in enumerate(self._bookings):
            if not booking.holds(date, time_slot_id, resource_id):
                continue

            remaining = booking.without_slot(date, time_slot_id, resource_id)
            if remaining.is_empty():
                del self._bookings[index]
                logger.info("Removed last slot of %s, booking deleted", booking.name)
            else:
                self._bookings[index] = remaining
                logger.info("Removed slot %s %s %s from %s", date, time_slot_id, resource_id, booking.name)

            self.save()
            return booking

        raise SlotNotFound(
            f"No booking holds {date.to_date_string()} {time_slot_id} (computer {resource_id})"
        )
