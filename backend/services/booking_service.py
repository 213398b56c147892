"""Booking request workflow: create, status transitions, and filtered fetch."""

from __future__ import annotations

import re
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from backend.domain.errors import ConflictError, NotFoundError, ValidationError
from backend.domain.models import (
    BookingDraft,
    BookingFilter,
    BookingRequest,
    BookingStatus,
    Room,
    TimeSlot,
)
from backend.repository.booking_repository import BookingRepository, InMemoryBookingRepository
from backend.repository.room_catalog import RoomCatalog
from backend.services.availability_service import find_approved_booking
from backend.utils.logger import get_logger


logger = get_logger(__name__)

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _require_text(value: Optional[str], field_name: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


class BookingService:
    """Owns booking creation rules; the approval actor is external and calls approve/reject."""

    def __init__(
        self,
        repository: Optional[BookingRepository] = None,
        catalog: Optional[RoomCatalog] = None,
    ) -> None:
        self._repository = repository or InMemoryBookingRepository()
        self._catalog = catalog or RoomCatalog.with_sample_rooms()

    @property
    def repository(self) -> BookingRepository:
        return self._repository

    def _validate_draft(self, draft: BookingDraft) -> tuple[Room, TimeSlot]:
        room_id = _require_text(draft.room_id, "roomId")
        slot_id = _require_text(draft.time_slot_id, "timeSlot")
        if draft.date is None:
            raise ValidationError("date is required")
        _require_text(draft.requester_name, "requesterName")
        email = _require_text(draft.requester_email, "requesterEmail")
        _require_text(draft.purpose, "purpose")
        if _EMAIL_PATTERN.fullmatch(email) is None:
            raise ValidationError("requesterEmail must be a valid email address")
        if draft.attendees is None or draft.attendees < 1:
            raise ValidationError("attendees must be at least 1")

        room = self._catalog.get_room(room_id)
        if room is None:
            raise ValidationError(f"unknown roomId: {room_id}")
        slot = self._catalog.get_time_slot(slot_id)
        if slot is None:
            raise ValidationError(f"unknown timeSlot: {slot_id}")
        return room, slot

    def create_booking(self, draft: BookingDraft, *, auto_approve: bool = False) -> BookingRequest:
        room, slot = self._validate_draft(draft)
        existing = self._repository.list_bookings()

        holder = find_approved_booking(room.room_id, draft.date, slot.slot_id, existing)
        if holder is not None:
            raise ConflictError(
                f"{room.name} is already booked on {draft.date.date().isoformat()} "
                f"at {slot.label}"
            )

        if draft.attendees > room.capacity:
            logger.warning(
                "Booking exceeds room capacity | room_id=%s | attendees=%s | capacity=%s",
                room.room_id,
                draft.attendees,
                room.capacity,
            )

        now = datetime.now(timezone.utc)
        booking = BookingRequest(
            booking_id=str(uuid4()),
            room_id=room.room_id,
            date=draft.date,
            time_slot=slot.with_availability(False),
            requester_name=draft.requester_name.strip(),
            requester_email=draft.requester_email.strip(),
            purpose=draft.purpose.strip(),
            attendees=draft.attendees,
            status="approved" if auto_approve else "pending",
            created_at=now,
            updated_at=now,
            notes=draft.notes,
        )
        self._repository.add_booking(booking)
        logger.info(
            "Booking created | booking_id=%s | room_id=%s | date=%s | slot=%s | status=%s",
            booking.booking_id,
            booking.room_id,
            booking.day.isoformat(),
            slot.slot_id,
            booking.status,
        )
        return booking

    def get_booking(self, booking_id: str) -> BookingRequest:
        booking = self._repository.get_booking(booking_id)
        if booking is None:
            raise NotFoundError(f"booking {booking_id} not found")
        return booking

    def _set_status(self, booking_id: str, status: BookingStatus) -> BookingRequest:
        booking = self.get_booking(booking_id)
        if booking.status == status:
            return booking
        updated = replace(booking, status=status, updated_at=datetime.now(timezone.utc))
        self._repository.update_booking(updated)
        logger.info(
            "Booking status changed | booking_id=%s | from=%s | to=%s",
            booking_id,
            booking.status,
            status,
        )
        return updated

    def approve(self, booking_id: str) -> BookingRequest:
        booking = self.get_booking(booking_id)
        holder = find_approved_booking(
            booking.room_id,
            booking.date,
            booking.time_slot.slot_id,
            self._repository.list_bookings(),
            exclude_booking_id=booking_id,
        )
        if holder is not None:
            raise ConflictError(
                f"slot already approved for booking {holder.booking_id}"
            )
        return self._set_status(booking_id, "approved")

    def reject(self, booking_id: str) -> BookingRequest:
        return self._set_status(booking_id, "rejected")

    def cancel(self, booking_id: str) -> BookingRequest:
        return self._set_status(booking_id, "cancelled")

    def delete(self, booking_id: str) -> None:
        self._repository.delete_booking(booking_id)
        logger.info("Booking deleted | booking_id=%s", booking_id)

    def fetch(self, filters: Optional[BookingFilter] = None) -> list[BookingRequest]:
        bookings = self._repository.list_bookings()
        if filters is None:
            return bookings
        if filters.room_id:
            bookings = [item for item in bookings if item.room_id == filters.room_id]
        if filters.status:
            bookings = [item for item in bookings if item.status == filters.status]
        if filters.start_date is not None:
            bookings = [item for item in bookings if item.day >= filters.start_date]
        if filters.end_date is not None:
            bookings = [item for item in bookings if item.day <= filters.end_date]
        return bookings
