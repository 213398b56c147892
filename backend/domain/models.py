"""Domain models for room suggestions, availability, and occupancy forecasts."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Literal, Optional


BookingStatus = Literal["pending", "approved", "rejected", "cancelled"]
BOOKING_STATUSES: tuple[str, ...] = ("pending", "approved", "rejected", "cancelled")

FitLevel = Literal["perfect", "good", "acceptable", "poor"]
DensityLevel = Literal["none", "low", "medium", "high"]
DemandTrend = Literal["Low Demand", "Steady", "High Demand"]

# Room capability flags, derived from amenities/description at catalog load.
SUPPORTS_LARGE_PRESENTATION = "supports_large_presentation"
IS_QUIET_STUDY_SPACE = "is_quiet_study_space"
IS_OUTDOOR_SPACE = "is_outdoor_space"
IS_INTIMATE_MEETING_SPACE = "is_intimate_meeting_space"


@dataclass(frozen=True)
class Room:
    room_id: str
    name: str
    description: str
    capacity: int
    amenities: frozenset[str] = frozenset()
    hourly_rate: Optional[float] = None
    capabilities: frozenset[str] = frozenset()

    def has_capability(self, capability: str) -> bool:
        return capability in self.capabilities


@dataclass(frozen=True)
class TimeSlot:
    slot_id: str
    start_time: str
    end_time: str
    available: bool = True

    @property
    def label(self) -> str:
        return f"{self.start_time} - {self.end_time}"

    def with_availability(self, available: bool) -> "TimeSlot":
        return replace(self, available=available)


@dataclass(frozen=True)
class BookingRequest:
    booking_id: str
    room_id: str
    date: datetime
    time_slot: TimeSlot
    requester_name: str
    requester_email: str
    purpose: str
    attendees: int
    status: BookingStatus
    created_at: datetime
    updated_at: datetime
    notes: Optional[str] = None

    @property
    def day(self) -> date:
        """Calendar day of the booking; time of day never participates in matching."""
        return self.date.date()


@dataclass(frozen=True)
class BookingDraft:
    """User-submitted booking fields before id, status, and timestamps exist."""

    room_id: str
    date: datetime
    time_slot_id: str
    requester_name: str
    requester_email: str
    purpose: str
    attendees: int
    notes: Optional[str] = None


@dataclass(frozen=True)
class BookingFilter:
    room_id: Optional[str] = None
    status: Optional[BookingStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass(frozen=True)
class RoomSuggestion:
    room_id: str
    room_name: str
    score: int
    reasons: tuple[str, ...]
    fit: FitLevel

    @property
    def reason(self) -> str:
        if not self.reasons:
            return ""
        return ". ".join(self.reasons) + "."


@dataclass(frozen=True)
class DayDensity:
    day: date
    booked_slots: int
    total_slots: int
    density: float
    level: DensityLevel


@dataclass(frozen=True)
class BookingForecast:
    upcoming_count: int
    occupancy_rate_percent: int
    peak_time_slot: str
    trend: DemandTrend


@dataclass(frozen=True)
class WeeklyOutlook:
    room_id: str
    days: list[DayDensity]
    average_utilization_percent: int
    busy_days: int
    insights: list[str] = field(default_factory=list)


def as_day(value: date | datetime) -> date:
    """Normalize a date or datetime to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    return value
