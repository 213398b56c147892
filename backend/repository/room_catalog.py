"""Room catalog and time-slot reference data."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from backend.domain.models import (
    IS_INTIMATE_MEETING_SPACE,
    IS_OUTDOOR_SPACE,
    IS_QUIET_STUDY_SPACE,
    SUPPORTS_LARGE_PRESENTATION,
    Room,
    TimeSlot,
)
from backend.utils.logger import get_logger


logger = get_logger(__name__)

LARGE_PRESENTATION_MIN_CAPACITY = 100
INTIMATE_MEETING_MAX_CAPACITY = 60

_PRESENTATION_AMENITIES = {"projector", "sound system", "stage", "microphone"}
_QUIET_AMENITIES = {"quiet zone", "study tables"}
_OUTDOOR_AMENITIES = {"outdoor", "outside", "open space", "garden"}


DEFAULT_TIME_SLOTS: tuple[TimeSlot, ...] = (
    TimeSlot("1", "09:00", "10:00"),
    TimeSlot("2", "10:00", "11:00"),
    TimeSlot("3", "11:00", "12:00"),
    TimeSlot("4", "13:00", "14:00"),
    TimeSlot("5", "14:00", "15:00"),
    TimeSlot("6", "15:00", "16:00"),
    TimeSlot("7", "16:00", "17:00"),
)

_SAMPLE_ROOM_DATA = (
    {
        "room_id": "auditorium",
        "name": "Auditorium",
        "description": "Large presentation space with state-of-the-art audio-visual equipment",
        "capacity": 200,
        "hourly_rate": 150.0,
        "amenities": ("Projector", "Sound System", "Stage", "Microphone", "AC", "WiFi"),
    },
    {
        "room_id": "library",
        "name": "Library",
        "description": "Quiet study space perfect for focused work and small meetings",
        "capacity": 50,
        "hourly_rate": 75.0,
        "amenities": ("WiFi", "Whiteboard", "AC", "Quiet Zone", "Study Tables"),
    },
    {
        "room_id": "grounds",
        "name": "Grounds",
        "description": "Outdoor space ideal for team building and casual gatherings",
        "capacity": 300,
        "hourly_rate": 200.0,
        "amenities": ("Outdoor", "Parking", "Catering Area", "Open Space", "Garden"),
    },
)


def derive_capabilities(
    capacity: int,
    amenities: Iterable[str],
    description: str,
) -> frozenset[str]:
    """Infer archetype flags from descriptive data so rules never key on room ids."""
    amenity_set = {amenity.lower() for amenity in amenities}
    text = description.lower()
    capabilities: set[str] = set()

    if amenity_set & _OUTDOOR_AMENITIES or "outdoor" in text:
        capabilities.add(IS_OUTDOOR_SPACE)
    if capacity >= LARGE_PRESENTATION_MIN_CAPACITY and (
        amenity_set & _PRESENTATION_AMENITIES or "presentation" in text
    ):
        capabilities.add(SUPPORTS_LARGE_PRESENTATION)
    if amenity_set & _QUIET_AMENITIES or "quiet" in text or "study" in text:
        capabilities.add(IS_QUIET_STUDY_SPACE)
    if (
        capacity <= INTIMATE_MEETING_MAX_CAPACITY
        and IS_OUTDOOR_SPACE not in capabilities
        and (IS_QUIET_STUDY_SPACE in capabilities or "meeting" in text)
    ):
        capabilities.add(IS_INTIMATE_MEETING_SPACE)
    return frozenset(capabilities)


def build_room(
    *,
    room_id: str,
    name: str,
    capacity: int,
    description: str = "",
    amenities: Iterable[str] = (),
    hourly_rate: Optional[float] = None,
) -> Room:
    if not room_id.strip():
        raise ValueError("room_id must be non-empty")
    if capacity <= 0:
        raise ValueError(f"room {room_id} capacity must be > 0")
    if hourly_rate is not None and hourly_rate <= 0:
        raise ValueError(f"room {room_id} hourly_rate must be > 0")
    amenity_tuple = tuple(amenities)
    return Room(
        room_id=room_id,
        name=name,
        description=description,
        capacity=capacity,
        amenities=frozenset(amenity_tuple),
        hourly_rate=hourly_rate,
        capabilities=derive_capabilities(capacity, amenity_tuple, description),
    )


class RoomCatalog:
    """Immutable, ordered room reference data plus the daily slot table."""

    def __init__(
        self,
        rooms: Sequence[Room],
        time_slots: Sequence[TimeSlot] = DEFAULT_TIME_SLOTS,
    ) -> None:
        ids = [room.room_id for room in rooms]
        if len(ids) != len(set(ids)):
            raise ValueError("room ids must be unique")
        self._rooms = tuple(rooms)
        self._rooms_by_id = {room.room_id: room for room in self._rooms}
        self._time_slots = tuple(time_slots)
        self._slots_by_id = {slot.slot_id: slot for slot in self._time_slots}

    @classmethod
    def with_sample_rooms(cls) -> "RoomCatalog":
        rooms = [build_room(**data) for data in _SAMPLE_ROOM_DATA]
        logger.info("Room catalog loaded | rooms=%s", len(rooms))
        return cls(rooms)

    @property
    def rooms(self) -> list[Room]:
        return list(self._rooms)

    @property
    def time_slots(self) -> list[TimeSlot]:
        return list(self._time_slots)

    def get_room(self, room_id: str) -> Optional[Room]:
        return self._rooms_by_id.get(room_id)

    def get_time_slot(self, slot_id: str) -> Optional[TimeSlot]:
        return self._slots_by_id.get(slot_id)
