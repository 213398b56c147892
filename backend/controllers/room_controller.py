"""Controller layer for room reference data and calendar availability."""

from __future__ import annotations

from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import Field

from backend.controllers.dependencies import (
    get_booking_service,
    get_catalog,
    get_forecast_service,
)
from backend.controllers.schemas import CamelModel, RoomResponse, TimeSlotModel
from backend.domain.models import Room
from backend.repository.room_catalog import RoomCatalog
from backend.services.availability_service import slots_for_day
from backend.services.booking_service import BookingService
from backend.services.forecast_service import ForecastService


router = APIRouter(prefix="/rooms", tags=["rooms"])


class AvailabilityResponse(CamelModel):
    room_id: str
    day: date = Field(alias="date")
    density: str
    booked_slots: int
    total_slots: int
    slots: list[TimeSlotModel]


class DayDensityResponse(CamelModel):
    day: date = Field(alias="date")
    booked_slots: int
    total_slots: int
    density: float
    level: str


class OutlookResponse(CamelModel):
    room_id: str
    average_utilization: int
    busy_days: int
    insights: list[str]
    days: list[DayDensityResponse]


def _require_room(catalog: RoomCatalog, room_id: str) -> Room:
    room = catalog.get_room(room_id)
    if room is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"room {room_id} not found",
        )
    return room


@router.get("", response_model=list[RoomResponse])
async def list_rooms(catalog: RoomCatalog = Depends(get_catalog)) -> list[RoomResponse]:
    return [RoomResponse.from_room(room) for room in catalog.rooms]


@router.get("/{room_id}/availability", response_model=AvailabilityResponse)
async def room_availability(
    room_id: str,
    day: date | None = Query(default=None, alias="date"),
    catalog: RoomCatalog = Depends(get_catalog),
    booking_service: BookingService = Depends(get_booking_service),
    forecast_service: ForecastService = Depends(get_forecast_service),
) -> AvailabilityResponse:
    """Slot grid for one calendar cell; only approved bookings block a slot."""
    room = _require_room(catalog, room_id)
    target = day or datetime.now().date()
    bookings = booking_service.fetch()
    density = forecast_service.day_density(room.room_id, bookings, target)
    return AvailabilityResponse(
        room_id=room.room_id,
        day=target,
        density=density.level,
        booked_slots=density.booked_slots,
        total_slots=density.total_slots,
        slots=[
            TimeSlotModel.from_slot(slot)
            for slot in slots_for_day(room.room_id, target, bookings, catalog.time_slots)
        ],
    )


@router.get("/{room_id}/outlook", response_model=OutlookResponse)
async def room_outlook(
    room_id: str,
    day: date | None = Query(default=None, alias="date"),
    catalog: RoomCatalog = Depends(get_catalog),
    booking_service: BookingService = Depends(get_booking_service),
    forecast_service: ForecastService = Depends(get_forecast_service),
) -> OutlookResponse:
    room = _require_room(catalog, room_id)
    outlook = forecast_service.weekly_outlook(
        room.room_id,
        booking_service.fetch(),
        day or datetime.now().date(),
    )
    return OutlookResponse(
        room_id=outlook.room_id,
        average_utilization=outlook.average_utilization_percent,
        busy_days=outlook.busy_days,
        insights=outlook.insights,
        days=[
            DayDensityResponse(
                day=item.day,
                booked_slots=item.booked_slots,
                total_slots=item.total_slots,
                density=item.density,
                level=item.level,
            )
            for item in outlook.days
        ],
    )
