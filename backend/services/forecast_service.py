"""Calendar density classification and 7-day occupancy forecasting."""

from __future__ import annotations

from collections import Counter
from datetime import date, datetime, timedelta
from typing import Any, Optional, Sequence

from backend.domain.constraints import ForecastConfig, validate_forecast_config
from backend.domain.errors import NetworkError
from backend.domain.models import (
    BookingForecast,
    BookingRequest,
    DayDensity,
    DemandTrend,
    DensityLevel,
    WeeklyOutlook,
    as_day,
)
from backend.services.ai_client import AIBackendClient
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


def density_level(density: float, config: ForecastConfig) -> DensityLevel:
    if density >= config.high_density_threshold:
        return "high"
    if density >= config.medium_density_threshold:
        return "medium"
    if density > 0:
        return "low"
    return "none"


def day_density(
    room_id: str,
    bookings: Sequence[BookingRequest],
    day: date | datetime,
    config: ForecastConfig,
) -> DayDensity:
    target = as_day(day)
    booked_slots = sum(
        1
        for booking in bookings
        if booking.room_id == room_id
        and booking.day == target
        and booking.status == "approved"
    )
    density = booked_slots / config.slots_per_day
    return DayDensity(
        day=target,
        booked_slots=booked_slots,
        total_slots=config.slots_per_day,
        density=density,
        level=density_level(density, config),
    )


def classify_density(
    room_id: str,
    bookings: Sequence[BookingRequest],
    day: date | datetime,
    config: ForecastConfig,
) -> DensityLevel:
    """Density tier of one calendar cell; recomputed from scratch on every call."""
    return day_density(room_id, bookings, day, config).level


def demand_trend(occupancy_rate: int, config: ForecastConfig) -> DemandTrend:
    if occupancy_rate > config.high_demand_rate:
        return "High Demand"
    if occupancy_rate < config.low_demand_rate:
        return "Low Demand"
    return "Steady"


def forecast(
    room_id: str,
    bookings: Sequence[BookingRequest],
    reference_date: date | datetime,
    config: ForecastConfig,
) -> BookingForecast:
    """Summarize demand for ``room_id`` over the horizon starting at ``reference_date``."""
    start = as_day(reference_date)
    end = start + timedelta(days=config.horizon_days)
    upcoming = [
        booking
        for booking in bookings
        if booking.room_id == room_id and start <= booking.day <= end
    ]

    total_slots = config.horizon_days * config.slots_per_day
    occupancy_rate = min(100, round(100 * len(upcoming) / total_slots))

    # Counter keeps insertion order, so the first-seen start time wins ties.
    start_counts = Counter(booking.time_slot.start_time for booking in upcoming)
    labels: dict[str, str] = {}
    for booking in upcoming:
        labels.setdefault(booking.time_slot.start_time, booking.time_slot.label)
    peak_time = config.default_peak_time
    best_count = 0
    for start_time, count in start_counts.items():
        if count > best_count:
            best_count = count
            peak_time = labels[start_time]

    return BookingForecast(
        upcoming_count=len(upcoming),
        occupancy_rate_percent=occupancy_rate,
        peak_time_slot=peak_time,
        trend=demand_trend(occupancy_rate, config),
    )


def weekly_outlook(
    room_id: str,
    bookings: Sequence[BookingRequest],
    reference_date: date | datetime,
    config: ForecastConfig,
) -> WeeklyOutlook:
    start = as_day(reference_date)
    days = [
        day_density(room_id, bookings, start + timedelta(days=offset), config)
        for offset in range(config.horizon_days)
    ]
    average = sum(item.density for item in days) / len(days)
    busy_days = sum(1 for item in days if item.level in ("medium", "high"))

    insights: list[str] = []
    if average > 0.7:
        insights.append("High demand period - consider booking early")
    elif average < 0.3:
        insights.append("Good availability this week")
    else:
        insights.append("Moderate demand - popular slots may fill up")
    if busy_days:
        insights.append(f"{busy_days} busy day(s) in the next {config.horizon_days} days")

    return WeeklyOutlook(
        room_id=room_id,
        days=days,
        average_utilization_percent=round(average * 100),
        busy_days=busy_days,
        insights=insights,
    )


def build_forecast_config(settings: Settings) -> ForecastConfig:
    config = ForecastConfig(
        slots_per_day=settings.slots_per_day,
        horizon_days=settings.forecast_horizon_days,
        default_peak_time=settings.forecast_default_peak_time,
    )
    validate_forecast_config(config)
    return config


def _parse_remote_forecast(payload: dict[str, Any]) -> Optional[BookingForecast]:
    if payload.get("upcomingBookings") is None:
        return None
    try:
        occupancy_rate = max(0, min(100, int(payload.get("occupancyRate", 0))))
        trend = str(payload.get("trend", "Steady"))
        if trend not in ("Low Demand", "Steady", "High Demand"):
            return None
        return BookingForecast(
            upcoming_count=int(payload["upcomingBookings"]),
            occupancy_rate_percent=occupancy_rate,
            peak_time_slot=str(payload.get("peakTime", "")),
            trend=trend,  # type: ignore[arg-type]
        )
    except (TypeError, ValueError):
        return None


class ForecastService:
    """Forecast workflow: AI backend first, deterministic heuristic on failure."""

    def __init__(
        self,
        ai_client: Optional[AIBackendClient] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._ai_client = ai_client
        self._config = build_forecast_config(self._settings)

    @property
    def config(self) -> ForecastConfig:
        return self._config

    def day_density(
        self,
        room_id: str,
        bookings: Sequence[BookingRequest],
        day: date | datetime,
    ) -> DayDensity:
        return day_density(room_id, bookings, day, self._config)

    def classify_density(
        self,
        room_id: str,
        bookings: Sequence[BookingRequest],
        day: date | datetime,
    ) -> DensityLevel:
        return classify_density(room_id, bookings, day, self._config)

    def weekly_outlook(
        self,
        room_id: str,
        bookings: Sequence[BookingRequest],
        reference_date: date | datetime,
    ) -> WeeklyOutlook:
        return weekly_outlook(room_id, bookings, reference_date, self._config)

    def generate_forecast(
        self,
        room_id: str,
        bookings: Sequence[BookingRequest],
        reference_date: Optional[date | datetime] = None,
    ) -> BookingForecast:
        reference = reference_date or date.today()
        if self._ai_client is not None and self._ai_client.enabled:
            try:
                payload = self._ai_client.post(
                    "/ai/forecast",
                    {
                        "roomId": room_id,
                        "bookings": [
                            {
                                "date": booking.date.isoformat(),
                                "timeSlot": booking.time_slot.label,
                                "status": booking.status,
                            }
                            for booking in bookings
                            if booking.room_id == room_id
                        ],
                    },
                )
                remote = _parse_remote_forecast(payload)
                if remote is not None:
                    return remote
                logger.warning("AI forecast payload malformed; using heuristic forecast")
            except NetworkError as exc:
                logger.warning("AI forecast unavailable; using heuristic forecast | error=%s", exc)

        result = forecast(room_id, bookings, reference, self._config)
        logger.info(
            "Forecast computed | room_id=%s | upcoming=%s | occupancy_rate=%s | trend=%s",
            room_id,
            result.upcoming_count,
            result.occupancy_rate_percent,
            result.trend,
        )
        return result
