from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta

import pytest

from backend.domain.constraints import ForecastConfig
from backend.domain.models import BookingRequest, TimeSlot
from backend.repository.room_catalog import DEFAULT_TIME_SLOTS
from backend.services.forecast_service import (
    ForecastService,
    classify_density,
    forecast,
    weekly_outlook,
)
from backend.utils.config import get_settings


REFERENCE = date(2026, 3, 2)
CONFIG = ForecastConfig(slots_per_day=7, horizon_days=7, default_peak_time="14:00 - 15:00")


def _booking(
    booking_id: str,
    day: date,
    slot: TimeSlot = DEFAULT_TIME_SLOTS[0],
    status: str = "approved",
    room_id: str = "library",
) -> BookingRequest:
    moment = datetime(day.year, day.month, day.day, 12, 0)
    return BookingRequest(
        booking_id=booking_id,
        room_id=room_id,
        date=moment,
        time_slot=slot.with_availability(False),
        requester_name="Test User",
        requester_email="test@example.com",
        purpose="Testing",
        attendees=5,
        status=status,
        created_at=moment,
        updated_at=moment,
    )


def _spread(count: int, room_id: str = "library") -> list[BookingRequest]:
    return [
        _booking(
            f"b-{index}",
            REFERENCE + timedelta(days=index % 7),
            DEFAULT_TIME_SLOTS[index % 7],
            room_id=room_id,
        )
        for index in range(count)
    ]


# --- density ---

@pytest.mark.parametrize(
    ("approved", "expected"),
    [(0, "none"), (1, "low"), (2, "low"), (3, "medium"), (5, "medium"), (6, "high"), (7, "high")],
)
def test_density_levels(approved: int, expected: str) -> None:
    bookings = [_booking(f"b-{index}", REFERENCE, DEFAULT_TIME_SLOTS[index]) for index in range(approved)]
    assert classify_density("library", bookings, REFERENCE, CONFIG) == expected


def test_density_ignores_pending_and_other_rooms() -> None:
    bookings = [
        _booking("pending", REFERENCE, status="pending"),
        _booking("rejected", REFERENCE, status="rejected"),
        _booking("other-room", REFERENCE, room_id="auditorium"),
        _booking("other-day", REFERENCE + timedelta(days=1)),
    ]
    assert classify_density("library", bookings, REFERENCE, CONFIG) == "none"


def test_density_accepts_datetime_cell() -> None:
    bookings = [_booking(f"b-{index}", REFERENCE, DEFAULT_TIME_SLOTS[index]) for index in range(6)]
    assert classify_density("library", bookings, datetime(2026, 3, 2, 23, 59), CONFIG) == "high"


def test_one_approved_booking_per_day_is_low_all_week() -> None:
    bookings = _spread(7)

    for offset in range(7):
        day = REFERENCE + timedelta(days=offset)
        assert classify_density("library", bookings, day, CONFIG) == "low"


# --- forecast ---

def test_forecast_without_bookings_uses_defaults() -> None:
    result = forecast("library", [], REFERENCE, CONFIG)

    assert result.upcoming_count == 0
    assert result.occupancy_rate_percent == 0
    assert result.peak_time_slot == "14:00 - 15:00"
    assert result.trend == "Low Demand"


@pytest.mark.parametrize(
    ("count", "rate", "trend"),
    [(10, 20, "Low Demand"), (20, 41, "Steady"), (35, 71, "High Demand"), (60, 100, "High Demand")],
)
def test_forecast_rate_and_trend(count: int, rate: int, trend: str) -> None:
    result = forecast("library", _spread(count), REFERENCE, CONFIG)

    assert result.upcoming_count == count
    assert result.occupancy_rate_percent == rate
    assert result.trend == trend


def test_forecast_window_is_inclusive_of_both_ends() -> None:
    bookings = [
        _booking("before", REFERENCE - timedelta(days=1)),
        _booking("start", REFERENCE),
        _booking("end", REFERENCE + timedelta(days=7)),
        _booking("after", REFERENCE + timedelta(days=8)),
    ]
    assert forecast("library", bookings, REFERENCE, CONFIG).upcoming_count == 2


def test_forecast_counts_every_status() -> None:
    bookings = [
        _booking("a", REFERENCE, status="approved"),
        _booking("p", REFERENCE, status="pending"),
        _booking("r", REFERENCE, status="rejected"),
    ]
    assert forecast("library", bookings, REFERENCE, CONFIG).upcoming_count == 3


def test_forecast_peak_is_most_frequent_start_time() -> None:
    ten, two = DEFAULT_TIME_SLOTS[1], DEFAULT_TIME_SLOTS[4]
    bookings = [
        _booking("1", REFERENCE, ten),
        _booking("2", REFERENCE + timedelta(days=1), ten),
        _booking("3", REFERENCE, two),
        _booking("4", REFERENCE + timedelta(days=1), two),
        _booking("5", REFERENCE + timedelta(days=2), two),
    ]
    assert forecast("library", bookings, REFERENCE, CONFIG).peak_time_slot == "14:00 - 15:00"


def test_forecast_peak_tie_keeps_first_seen() -> None:
    bookings = [
        _booking("1", REFERENCE, DEFAULT_TIME_SLOTS[2]),
        _booking("2", REFERENCE, DEFAULT_TIME_SLOTS[0]),
    ]
    assert forecast("library", bookings, REFERENCE, CONFIG).peak_time_slot == "11:00 - 12:00"


def test_forecast_ignores_other_rooms() -> None:
    result = forecast("library", _spread(12, room_id="auditorium"), REFERENCE, CONFIG)
    assert result.upcoming_count == 0


# --- weekly outlook ---

def test_weekly_outlook_summarises_the_week() -> None:
    busy = [_booking(f"b-{index}", REFERENCE, DEFAULT_TIME_SLOTS[index]) for index in range(6)]
    outlook = weekly_outlook("library", busy, REFERENCE, CONFIG)

    assert len(outlook.days) == 7
    assert outlook.days[0].level == "high"
    assert outlook.busy_days == 1
    assert outlook.average_utilization_percent == round(6 / 7 / 7 * 100)
    assert outlook.insights == ["Good availability this week", "1 busy day(s) in the next 7 days"]


def test_weekly_outlook_flags_high_demand() -> None:
    bookings = [
        _booking(f"b-{offset}-{slot.slot_id}", REFERENCE + timedelta(days=offset), slot)
        for offset in range(7)
        for slot in DEFAULT_TIME_SLOTS
    ]
    outlook = weekly_outlook("library", bookings, REFERENCE, CONFIG)

    assert outlook.average_utilization_percent == 100
    assert outlook.insights[0] == "High demand period - consider booking early"


# --- service ---

def test_service_without_ai_backend_matches_heuristic() -> None:
    get_settings.cache_clear()
    settings = replace(get_settings(), ai_base_url="")
    service = ForecastService(settings=settings)
    bookings = _spread(20)

    assert service.generate_forecast("library", bookings, REFERENCE) == forecast(
        "library", bookings, REFERENCE, service.config
    )


def test_service_rejects_invalid_settings() -> None:
    get_settings.cache_clear()
    settings = replace(get_settings(), slots_per_day=0)
    with pytest.raises(ValueError):
        ForecastService(settings=settings)
