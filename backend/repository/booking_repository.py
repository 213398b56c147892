"""Booking store: repository interface with in-memory and JSON-file backends.

Every write replaces the whole booking tuple, so readers always observe a
complete snapshot and the scoring functions can treat it as immutable.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from pathlib import Path
from threading import RLock
from typing import Any, Iterable, Optional

from backend.domain.errors import NotFoundError
from backend.domain.models import BookingRequest, TimeSlot
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


def booking_to_dict(booking: BookingRequest) -> dict[str, Any]:
    return {
        "id": booking.booking_id,
        "roomId": booking.room_id,
        "date": booking.date.isoformat(),
        "timeSlot": {
            "id": booking.time_slot.slot_id,
            "startTime": booking.time_slot.start_time,
            "endTime": booking.time_slot.end_time,
            "available": booking.time_slot.available,
        },
        "requesterName": booking.requester_name,
        "requesterEmail": booking.requester_email,
        "purpose": booking.purpose,
        "attendees": booking.attendees,
        "status": booking.status,
        "createdAt": booking.created_at.isoformat(),
        "updatedAt": booking.updated_at.isoformat(),
        "notes": booking.notes,
    }


def booking_from_dict(payload: dict[str, Any]) -> BookingRequest:
    """Rehydrate a stored booking, converting ISO date strings back to datetimes."""
    slot = payload["timeSlot"]
    return BookingRequest(
        booking_id=str(payload["id"]),
        room_id=str(payload["roomId"]),
        date=datetime.fromisoformat(payload["date"]),
        time_slot=TimeSlot(
            slot_id=str(slot["id"]),
            start_time=str(slot["startTime"]),
            end_time=str(slot["endTime"]),
            available=bool(slot.get("available", False)),
        ),
        requester_name=str(payload["requesterName"]),
        requester_email=str(payload["requesterEmail"]),
        purpose=str(payload["purpose"]),
        attendees=int(payload["attendees"]),
        status=payload["status"],
        created_at=datetime.fromisoformat(payload["createdAt"]),
        updated_at=datetime.fromisoformat(payload["updatedAt"]),
        notes=payload.get("notes"),
    )


def sample_bookings(now: Optional[datetime] = None) -> list[BookingRequest]:
    """Demonstration bookings relative to ``now``."""
    current = now or datetime.now(timezone.utc)
    return [
        BookingRequest(
            booking_id="sample-1",
            room_id="auditorium",
            date=current,
            time_slot=TimeSlot("2", "10:00", "11:00", available=False),
            requester_name="John Smith",
            requester_email="john.smith@company.com",
            purpose="Quarterly team presentation and review meeting",
            attendees=45,
            status="approved",
            created_at=current - timedelta(days=1),
            updated_at=current - timedelta(days=1),
            notes="Need microphone and projector setup",
        ),
        BookingRequest(
            booking_id="sample-2",
            room_id="library",
            date=current + timedelta(days=1),
            time_slot=TimeSlot("4", "13:00", "14:00", available=False),
            requester_name="Sarah Johnson",
            requester_email="sarah.johnson@company.com",
            purpose="Book club meeting and discussion",
            attendees=12,
            status="pending",
            created_at=current - timedelta(hours=1),
            updated_at=current - timedelta(hours=1),
            notes="Prefer quiet corner area",
        ),
    ]


class BookingRepository(ABC):
    """Storage-agnostic booking collection (create / list / update / delete)."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._bookings: tuple[BookingRequest, ...] = ()

    def list_bookings(self) -> list[BookingRequest]:
        return list(self._bookings)

    def get_booking(self, booking_id: str) -> Optional[BookingRequest]:
        for booking in self._bookings:
            if booking.booking_id == booking_id:
                return booking
        return None

    def add_booking(self, booking: BookingRequest) -> BookingRequest:
        with self._lock:
            self._replace(self._bookings + (booking,))
        return booking

    def update_booking(self, booking: BookingRequest) -> BookingRequest:
        with self._lock:
            if self.get_booking(booking.booking_id) is None:
                raise NotFoundError(f"booking {booking.booking_id} not found")
            self._replace(
                tuple(
                    booking if item.booking_id == booking.booking_id else item
                    for item in self._bookings
                )
            )
        return booking

    def delete_booking(self, booking_id: str) -> None:
        with self._lock:
            if self.get_booking(booking_id) is None:
                raise NotFoundError(f"booking {booking_id} not found")
            self._replace(
                tuple(item for item in self._bookings if item.booking_id != booking_id)
            )

    def count_bookings(self) -> int:
        return len(self._bookings)

    def _replace(self, bookings: Iterable[BookingRequest]) -> None:
        # Memory only moves once the snapshot is safely written.
        snapshot = tuple(bookings)
        self._persist(snapshot)
        self._bookings = snapshot

    @abstractmethod
    def _persist(self, bookings: tuple[BookingRequest, ...]) -> None:
        """Flush ``bookings`` to the backing medium; raise if the write fails."""


class InMemoryBookingRepository(BookingRepository):
    """Mock store for the REST variant and tests."""

    def __init__(self, bookings: Optional[Iterable[BookingRequest]] = None) -> None:
        super().__init__()
        self._bookings = tuple(bookings or ())

    def _persist(self, bookings: tuple[BookingRequest, ...]) -> None:
        return None


class JsonBookingRepository(BookingRepository):
    """JSON array of bookings in a single file, the server-side analogue of local storage."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        super().__init__()
        self._settings = settings or get_settings()
        self._path = Path(self._settings.booking_store_path)

    @property
    def store_path(self) -> Path:
        return self._path

    def load(self) -> int:
        """Load the stored array; unreadable data falls back to the sample set."""
        with self._lock:
            fallback = sample_bookings() if self._settings.seed_sample_bookings else []
            if not self._path.exists():
                logger.info("Booking store not found at %s; using sample data", self._path)
                self._replace(fallback)
                return len(self._bookings)
            try:
                raw = json.loads(self._path.read_text(encoding="utf-8"))
                if not isinstance(raw, list):
                    raise ValueError("booking store must contain a JSON array")
                self._bookings = tuple(booking_from_dict(item) for item in raw)
            except (OSError, ValueError, KeyError, TypeError) as exc:
                logger.warning(
                    "Failed to parse stored bookings | path=%s | error=%s",
                    self._path,
                    exc,
                )
                self._bookings = tuple(fallback)
            logger.info("Booking store loaded | path=%s | bookings=%s", self._path, len(self._bookings))
            return len(self._bookings)

    def _persist(self, bookings: tuple[BookingRequest, ...]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = [booking_to_dict(booking) for booking in bookings]
        temp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        temp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        temp_path.replace(self._path)
