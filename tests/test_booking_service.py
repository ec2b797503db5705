"""
Tests for the BookingService orchestration layer.
"""

import asyncio

import pytest

from makeupbooker.adapters.admin_auth import AdminPassword, check_password, hash_password
from makeupbooker.adapters.booking_store import BOOKINGS_STORAGE_KEY, BookingStore
from makeupbooker.adapters.storage import InMemoryStorage
from makeupbooker.domain.availability import slot_key
from makeupbooker.domain.exceptions import (
    AuthenticationError,
    EmptySelection,
    MissingIdentity,
    SlotNotFound,
)
from makeupbooker.domain.models import BookedSlot, parse_date
from makeupbooker.services.booking_service import BookingService

MONDAY = parse_date("2024-03-04")


def _build_service(storage=None) -> BookingService:
    storage = storage or InMemoryStorage()
    store = BookingStore(storage)
    store.load()
    return BookingService(store=store, admin_password=AdminPassword(storage))


def test_commit_occupies_slot_and_blocks_second_toggle():
    """A committed slot is indexed and cannot be selected again."""
    """A committed slot appears in the index and cannot be selected again."""
    service = _build_service()
    service.toggle_draft_slot(MONDAY, "14:00", "A")

    booking = service.commit_draft("Amy", "1A")

    assert booking.slots == (BookedSlot(date=MONDAY, time_slot_id="14:00", resource_id="A"),)
    assert slot_key(MONDAY, "14:00", "A") in service.list_occupied()
    assert service.draft == ()

    assert service.toggle_draft_slot(MONDAY, "14:00", "A") == ()


def test_delete_removes_record_and_frees_slot():
    """Deleting the only slot removes the record and frees the slot."""
    service = _build_service()
    service.toggle_draft_slot(MONDAY, "14:00", "A")
    service.commit_draft("Amy", "1A")

    owner = service.delete_slot(MONDAY, "14:00", "A")

    assert owner.name == "Amy"
    assert service.bookings == ()
    assert slot_key(MONDAY, "14:00", "A") not in service.list_occupied()
    assert service.toggle_draft_slot(MONDAY, "14:00", "A") != ()


def test_delete_missing_slot_raises():
    """Deleting a slot nobody holds raises SlotNotFound."""
    with pytest.raises(SlotNotFound):
        _build_service().delete_slot(MONDAY, "14:00", "A")


def test_commit_errors_keep_draft():
    """Failed commits leave the draft and the store untouched."""
    service = _build_service()

    with pytest.raises(EmptySelection):
        service.commit_draft("Amy", "1A")

    service.toggle_draft_slot(MONDAY, "14:00", "A")
    with pytest.raises(MissingIdentity):
        service.commit_draft("Amy", " ")

    assert len(service.draft) == 1
    assert service.bookings == ()


def test_no_slot_is_committed_twice():
    """Uniqueness holds across students committing in turn."""
    """Uniqueness holds across students committing in turn."""
    service = _build_service()
    for name, resource in [("Amy", "A"), ("Ben", "A"), ("Ben", "B"), ("Cat", "B"), ("Cat", "C")]:
        service.toggle_draft_slot(MONDAY, "14:00", resource)
        if service.draft:
            service.commit_draft(name, "1A")

    keys = [
        slot_key(slot.date, slot.time_slot_id, slot.resource_id)
        for booking in service.bookings
        for slot in booking.slots
    ]
    assert len(keys) == len(set(keys)) == 3


def test_week_schedule_reflects_bookings():
    """The week grid shows committed bookings."""
    service = _build_service()
    service.toggle_draft_slot(MONDAY, "14:00", "B")
    service.commit_draft("Amy", "1A")

    grid = service.get_week_schedule(parse_date("2024-03-09"))

    cell = grid.cell(MONDAY, "14:00")
    assert cell.resources[1].occupant_name == "Amy"
    assert grid.booked_count() == 1


def test_day_availability():
    """Free computers are listed per time slot of a day."""
    service = _build_service()
    service.toggle_draft_slot(MONDAY, "14:00", "B")
    service.commit_draft("Amy", "1A")

    availability = dict((slot.id, free) for slot, free in service.day_availability(MONDAY))

    assert availability["14:00"] == ["A", "C"]
    assert availability["13:30"] == ["A", "B", "C"]
    assert service.day_availability(parse_date("2024-03-03")) == []


def test_corrupt_storage_starts_empty():
    """Corrupt stored bookings give an empty service."""
    service = _build_service(InMemoryStorage({BOOKINGS_STORAGE_KEY: "{broken"}))

    assert service.bookings == ()
    assert service.list_occupied() == frozenset()


def test_confirmation_messages_are_sorted_by_date():
    """Confirmation messages follow date order."""
    service = _build_service()
    service.toggle_draft_slot(parse_date("2024-03-09"), "10:00", "C")
    service.toggle_draft_slot(MONDAY, "14:00", "A")
    booking = service.commit_draft("Amy", "1A")

    messages = asyncio.run(service.confirmation_messages(booking))

    assert messages == [
        "Your slot is on 3/4(Mon) 14:00 (computer A).",
        "Your slot is on 3/9(Sat) 10:00 (computer C).",
    ]


class TestAdminPassword:
    """Tests for the admin password gate on deletion."""

    def setup_method(self):
        self.service = _build_service()
        self.service.toggle_draft_slot(MONDAY, "14:00", "A")
        self.service.commit_draft("Amy", "1A")

    def test_delete_without_password_configured(self):
        """Without an admin password deletion needs no password."""
        assert not self.service.has_admin_password()
        self.service.delete_slot(MONDAY, "14:00", "A")

    def test_wrong_password_is_rejected(self):
        """A wrong or missing password blocks deletion."""
        self.service.set_admin_password("s3cret")

        with pytest.raises(AuthenticationError):
            self.service.delete_slot(MONDAY, "14:00", "A", password="nope")
        with pytest.raises(AuthenticationError):
            self.service.delete_slot(MONDAY, "14:00", "A")

        assert len(self.service.bookings) == 1

    def test_correct_password_deletes(self):
        """The right password allows deletion."""
        self.service.set_admin_password("s3cret")

        self.service.delete_slot(MONDAY, "14:00", "A", password="s3cret")

        assert self.service.bookings == ()

    def test_password_is_not_stored_in_cleartext(self):
        """Only a hash of the password is stored."""
        storage = InMemoryStorage()
        AdminPassword(storage).set("s3cret")

        stored = storage.get_item("admin_password")
        assert "s3cret" not in stored
        assert check_password("s3cret", stored)
        assert not check_password("other", stored)

    def test_hashes_are_salted(self):
        """Hashing the same password twice gives different records."""
        assert hash_password("s3cret") != hash_password("s3cret")

    def test_malformed_record_never_matches(self):
        """A malformed stored record matches no password."""
        assert not check_password("s3cret", "garbage")
