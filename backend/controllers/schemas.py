"""Wire DTOs shared by the controllers; JSON keys are camelCase."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from backend.domain.models import BookingRequest, Room, TimeSlot
from backend.repository.booking_repository import booking_to_dict


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RoomResponse(CamelModel):
    id: str
    name: str
    description: str
    capacity: int = Field(gt=0)
    amenities: list[str]
    hourly_rate: Optional[float] = None
    capabilities: list[str]

    @classmethod
    def from_room(cls, room: Room) -> "RoomResponse":
        return cls(
            id=room.room_id,
            name=room.name,
            description=room.description,
            capacity=room.capacity,
            amenities=sorted(room.amenities),
            hourly_rate=room.hourly_rate,
            capabilities=sorted(room.capabilities),
        )


class TimeSlotModel(CamelModel):
    id: str
    start_time: str
    end_time: str
    available: bool = True

    @classmethod
    def from_slot(cls, slot: TimeSlot) -> "TimeSlotModel":
        return cls(
            id=slot.slot_id,
            start_time=slot.start_time,
            end_time=slot.end_time,
            available=slot.available,
        )


class TimeSlotRef(CamelModel):
    """A slot reference as sent by clients: a bare id or the full slot object."""

    id: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    available: Optional[bool] = None


class BookingPayload(CamelModel):
    # Fields are optional so that missing values reach the service and
    # surface as 400 responses rather than schema errors.
    room_id: Optional[str] = None
    date: Optional[datetime] = None
    time_slot: Optional[TimeSlotRef] = None
    requester_name: Optional[str] = None
    requester_email: Optional[str] = None
    purpose: Optional[str] = None
    attendees: Optional[int] = None
    notes: Optional[str] = None

    @field_validator("time_slot", mode="before")
    @classmethod
    def accept_slot_id(cls, value: Any) -> Any:
        if isinstance(value, (str, int)):
            return {"id": str(value)}
        return value


class BookingFilterPayload(CamelModel):
    room_id: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class BookingResponse(CamelModel):
    id: str
    room_id: str
    date: datetime
    time_slot: TimeSlotModel
    requester_name: str
    requester_email: str
    purpose: str
    attendees: int
    status: str
    created_at: datetime
    updated_at: datetime
    notes: Optional[str] = None

    @classmethod
    def from_booking(cls, booking: BookingRequest) -> "BookingResponse":
        return cls.model_validate(booking_to_dict(booking))
