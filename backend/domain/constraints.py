"""Rule-table types and validation for suggestion scoring and forecasting."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from backend.domain.models import FitLevel, Room


@dataclass(frozen=True)
class CapacityTier:
    """Points awarded when attendees/capacity falls at or under ``max_ratio``."""

    max_ratio: float
    points: int
    reason: str
    inclusive: bool = True

    def matches(self, ratio: float) -> bool:
        if self.inclusive:
            return ratio <= self.max_ratio
        return ratio < self.max_ratio


@dataclass(frozen=True)
class EventCategory:
    name: str
    keywords: tuple[str, ...]
    preferred_amenities: frozenset[str]

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)


@dataclass(frozen=True)
class BonusRule:
    """A fixed bonus (or penalty) applied when every configured condition holds.

    Unset conditions are ignored, so a rule may key on the detected event
    category, raw keywords in the description, a room capability, a room
    amenity, an attendee range, or any combination of those.
    """

    points: int
    reason: str
    categories: frozenset[str] = frozenset()
    keywords: tuple[str, ...] = ()
    capability: Optional[str] = None
    amenity: Optional[str] = None
    min_attendees: Optional[int] = None
    max_attendees: Optional[int] = None

    def applies(self, *, category: str, text: str, attendees: int, room: Room) -> bool:
        if self.categories and category not in self.categories:
            return False
        if self.keywords and not any(keyword in text for keyword in self.keywords):
            return False
        if self.capability is not None and not room.has_capability(self.capability):
            return False
        if self.amenity is not None and self.amenity.lower() not in {
            item.lower() for item in room.amenities
        }:
            return False
        if self.min_attendees is not None and attendees < self.min_attendees:
            return False
        if self.max_attendees is not None and attendees > self.max_attendees:
            return False
        return True


@dataclass(frozen=True)
class SuggestionConfig:
    name: str
    base_score: int
    capacity_tiers: tuple[CapacityTier, ...]
    event_categories: tuple[EventCategory, ...]
    amenity_points: int
    bonus_rules: tuple[BonusRule, ...]
    fit_thresholds: tuple[tuple[int, FitLevel], ...]
    default_category: str = "general"
    default_reason: str = ""
    min_score: int = 0
    max_score: int = 100


@dataclass(frozen=True)
class ForecastConfig:
    slots_per_day: int
    horizon_days: int
    default_peak_time: str
    high_density_threshold: float = 0.8
    medium_density_threshold: float = 0.4
    high_demand_rate: int = 70
    low_demand_rate: int = 30


def validate_suggestion_config(config: SuggestionConfig) -> None:
    if config.min_score >= config.max_score:
        raise ValueError("min_score must be lower than max_score")
    if not config.min_score <= config.base_score <= config.max_score:
        raise ValueError("base_score must lie within [min_score, max_score]")
    if not config.capacity_tiers:
        raise ValueError("capacity_tiers must not be empty")
    ratios = [tier.max_ratio for tier in config.capacity_tiers]
    if ratios != sorted(ratios):
        raise ValueError("capacity_tiers must be ordered by ascending max_ratio")
    if not math.isinf(ratios[-1]):
        raise ValueError("the last capacity tier must be open-ended (max_ratio=inf)")
    if config.amenity_points < 0:
        raise ValueError("amenity_points must be >= 0")
    names = [category.name for category in config.event_categories]
    if len(names) != len(set(names)):
        raise ValueError("event category names must be unique")
    thresholds = [threshold for threshold, _ in config.fit_thresholds]
    if thresholds != sorted(thresholds, reverse=True):
        raise ValueError("fit_thresholds must be ordered from highest to lowest")


def validate_forecast_config(config: ForecastConfig) -> None:
    if config.slots_per_day <= 0:
        raise ValueError("slots_per_day must be > 0")
    if config.horizon_days <= 0:
        raise ValueError("horizon_days must be > 0")
    if not 0.0 < config.medium_density_threshold < config.high_density_threshold <= 1.0:
        raise ValueError("density thresholds must satisfy 0 < medium < high <= 1")
    if not 0 <= config.low_demand_rate < config.high_demand_rate <= 100:
        raise ValueError("demand rates must satisfy 0 <= low < high <= 100")
