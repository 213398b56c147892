from __future__ import annotations

from datetime import date, datetime

import pytest

from backend.domain.errors import ConflictError, NotFoundError, ValidationError
from backend.domain.models import BookingDraft, BookingFilter
from backend.repository.booking_repository import InMemoryBookingRepository
from backend.repository.room_catalog import DEFAULT_TIME_SLOTS, RoomCatalog
from backend.services.availability_service import is_available, slots_for_day
from backend.services.booking_service import BookingService


MONDAY = datetime(2026, 11, 2, 10, 0)


def _draft(**overrides) -> BookingDraft:
    """Return a valid baseline BookingDraft, optionally overriding fields."""
    defaults = {
        "room_id": "library",
        "date": MONDAY,
        "time_slot_id": "2",
        "requester_name": "Ada Lovelace",
        "requester_email": "ada@example.com",
        "purpose": "Planning session",
        "attendees": 10,
    }
    defaults.update(overrides)
    return BookingDraft(**defaults)


@pytest.fixture()
def service() -> BookingService:
    return BookingService(
        repository=InMemoryBookingRepository(),
        catalog=RoomCatalog.with_sample_rooms(),
    )


# --- create ---

def test_create_booking_starts_pending(service: BookingService) -> None:
    booking = service.create_booking(_draft())

    assert booking.status == "pending"
    assert booking.time_slot.slot_id == "2"
    assert booking.time_slot.available is False
    assert service.repository.count_bookings() == 1


def test_pending_bookings_do_not_block_the_slot(service: BookingService) -> None:
    service.create_booking(_draft())
    second = service.create_booking(_draft(requester_name="Grace Hopper"))

    assert second.status == "pending"
    assert is_available("library", MONDAY, "2", service.fetch())


def test_approved_booking_blocks_the_same_triple(service: BookingService) -> None:
    service.create_booking(_draft(), auto_approve=True)

    with pytest.raises(ConflictError):
        service.create_booking(_draft(date=datetime(2026, 11, 2, 18, 30)))


def test_approved_booking_leaves_other_slots_and_days_free(service: BookingService) -> None:
    service.create_booking(_draft(), auto_approve=True)

    service.create_booking(_draft(time_slot_id="3"))
    service.create_booking(_draft(date=datetime(2026, 11, 3, 10, 0)))
    service.create_booking(_draft(room_id="auditorium"))
    assert service.repository.count_bookings() == 4


def test_over_capacity_request_is_accepted(service: BookingService) -> None:
    booking = service.create_booking(_draft(attendees=80))
    assert booking.attendees == 80


@pytest.mark.parametrize(
    "overrides",
    [
        {"room_id": ""},
        {"room_id": "observatory"},
        {"time_slot_id": "99"},
        {"date": None},
        {"requester_name": "  "},
        {"requester_email": "not-an-email"},
        {"purpose": None},
        {"attendees": 0},
    ],
)
def test_invalid_drafts_raise_validation_error(service: BookingService, overrides) -> None:
    with pytest.raises(ValidationError):
        service.create_booking(_draft(**overrides))
    assert service.repository.count_bookings() == 0


# --- status transitions ---

def test_approve_rejects_second_holder_of_a_slot(service: BookingService) -> None:
    first = service.create_booking(_draft())
    second = service.create_booking(_draft(requester_name="Grace Hopper"))

    assert service.approve(first.booking_id).status == "approved"
    with pytest.raises(ConflictError):
        service.approve(second.booking_id)
    assert service.get_booking(second.booking_id).status == "pending"


def test_approve_is_idempotent(service: BookingService) -> None:
    booking = service.create_booking(_draft())
    service.approve(booking.booking_id)
    assert service.approve(booking.booking_id).status == "approved"


def test_cancel_frees_the_slot(service: BookingService) -> None:
    booking = service.create_booking(_draft(), auto_approve=True)
    assert not is_available("library", MONDAY, "2", service.fetch())

    service.cancel(booking.booking_id)

    assert is_available("library", MONDAY, "2", service.fetch())
    service.create_booking(_draft(), auto_approve=True)


def test_reject_updates_timestamp(service: BookingService) -> None:
    booking = service.create_booking(_draft())
    rejected = service.reject(booking.booking_id)

    assert rejected.status == "rejected"
    assert rejected.updated_at >= booking.updated_at
    assert rejected.created_at == booking.created_at


def test_unknown_booking_raises_not_found(service: BookingService) -> None:
    with pytest.raises(NotFoundError):
        service.get_booking("missing")
    with pytest.raises(NotFoundError):
        service.approve("missing")
    with pytest.raises(NotFoundError):
        service.delete("missing")


def test_delete_removes_booking(service: BookingService) -> None:
    booking = service.create_booking(_draft())
    service.delete(booking.booking_id)
    assert service.fetch() == []


# --- fetch ---

def test_fetch_applies_filters(service: BookingService) -> None:
    library = service.create_booking(_draft())
    auditorium = service.create_booking(_draft(room_id="auditorium"), auto_approve=True)
    later = service.create_booking(_draft(date=datetime(2026, 11, 20, 9, 0)))

    assert service.fetch(BookingFilter(room_id="auditorium")) == [auditorium]
    assert service.fetch(BookingFilter(status="pending")) == [library, later]
    assert service.fetch(
        BookingFilter(start_date=date(2026, 11, 2), end_date=date(2026, 11, 2))
    ) == [library, auditorium]
    assert service.fetch(BookingFilter(start_date=date(2026, 11, 3))) == [later]


# --- availability grid ---

def test_slots_for_day_marks_only_approved_slots() -> None:
    service = BookingService(
        repository=InMemoryBookingRepository(),
        catalog=RoomCatalog.with_sample_rooms(),
    )
    service.create_booking(_draft(), auto_approve=True)
    service.create_booking(_draft(time_slot_id="5"))

    slots = slots_for_day("library", date(2026, 11, 2), service.fetch(), DEFAULT_TIME_SLOTS)

    assert [slot.slot_id for slot in slots if not slot.available] == ["2"]
    assert len(slots) == 7


def test_catalog_slot_table_is_untouched_by_availability() -> None:
    catalog = RoomCatalog.with_sample_rooms()
    service = BookingService(InMemoryBookingRepository(), catalog)
    booking = service.create_booking(_draft(), auto_approve=True)
    slots_for_day("library", MONDAY, [booking], catalog.time_slots)
    assert all(slot.available for slot in catalog.time_slots)
