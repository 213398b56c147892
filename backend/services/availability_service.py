"""Slot availability predicate shared by calendar rendering and booking creation."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from backend.domain.models import BookingRequest, TimeSlot, as_day


def find_approved_booking(
    room_id: str,
    day: date | datetime,
    time_slot_id: str,
    bookings: Sequence[BookingRequest],
    *,
    exclude_booking_id: Optional[str] = None,
) -> Optional[BookingRequest]:
    target = as_day(day)
    for booking in bookings:
        if (
            booking.status == "approved"
            and booking.room_id == room_id
            and booking.day == target
            and booking.time_slot.slot_id == time_slot_id
            and booking.booking_id != exclude_booking_id
        ):
            return booking
    return None


def is_available(
    room_id: str,
    day: date | datetime,
    time_slot_id: str,
    bookings: Sequence[BookingRequest],
) -> bool:
    """False iff an approved booking holds the exact (room, day, slot) triple.

    Pending and rejected bookings never block a slot.
    """
    return find_approved_booking(room_id, day, time_slot_id, bookings) is None


def slots_for_day(
    room_id: str,
    day: date | datetime,
    bookings: Sequence[BookingRequest],
    time_slots: Sequence[TimeSlot],
) -> list[TimeSlot]:
    return [
        slot.with_availability(is_available(room_id, day, slot.slot_id, bookings))
        for slot in time_slots
    ]
