"""Room suggestion scoring and the AI-backed suggestion workflow."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from backend.domain.constraints import (
    EventCategory,
    SuggestionConfig,
    validate_suggestion_config,
)
from backend.domain.errors import NetworkError, ValidationError
from backend.domain.models import FitLevel, Room, RoomSuggestion
from backend.domain.rules import ADDITIVE_PROFILE, SUGGESTION_PROFILES
from backend.repository.room_catalog import RoomCatalog
from backend.services.ai_client import AIBackendClient
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


def detect_event_category(
    event_description: str,
    categories: Sequence[EventCategory],
) -> Optional[EventCategory]:
    text = event_description.lower()
    for category in categories:
        if category.matches(text):
            return category
    return None


def classify_fit(score: int, config: SuggestionConfig = ADDITIVE_PROFILE) -> FitLevel:
    for threshold, fit in config.fit_thresholds:
        if score >= threshold:
            return fit
    return "poor"


def score_room(
    room: Room,
    *,
    text: str,
    attendees: int,
    category: Optional[EventCategory],
    config: SuggestionConfig,
) -> RoomSuggestion:
    score = config.base_score
    reasons: list[str] = []

    ratio = attendees / room.capacity
    for tier in config.capacity_tiers:
        if tier.matches(ratio):
            score += tier.points
            if tier.reason:
                reasons.append(tier.reason.format(attendees=attendees, capacity=room.capacity))
            break

    category_name = category.name if category is not None else config.default_category
    if category is not None and config.amenity_points:
        matching = [
            amenity
            for amenity in sorted(room.amenities)
            if amenity.lower() in category.preferred_amenities
        ]
        score += len(matching) * config.amenity_points
        if matching:
            reasons.append(f"Has {', '.join(matching)}")

    for rule in config.bonus_rules:
        if rule.applies(category=category_name, text=text, attendees=attendees, room=room):
            score += rule.points
            reasons.append(rule.reason)

    if not reasons and config.default_reason:
        reasons.append(config.default_reason.format(attendees=attendees))

    score = max(config.min_score, min(config.max_score, score))
    return RoomSuggestion(
        room_id=room.room_id,
        room_name=room.name,
        score=score,
        reasons=tuple(reasons),
        fit=classify_fit(score, config),
    )


def suggest_rooms(
    event_description: str,
    attendee_count: int,
    rooms: Sequence[Room],
    config: SuggestionConfig = ADDITIVE_PROFILE,
) -> list[RoomSuggestion]:
    """Rank every room for an event, best first.

    Over-capacity rooms stay in the list with their capacity reason flagged.
    Ties keep catalog order because ``sorted`` is stable.
    """
    if not event_description or not event_description.strip():
        raise ValidationError("event description must be non-empty")
    if attendee_count < 1:
        raise ValidationError("attendee count must be at least 1")
    if not rooms:
        return []

    text = event_description.lower()
    category = detect_event_category(text, config.event_categories)
    suggestions = [
        score_room(
            room,
            text=text,
            attendees=attendee_count,
            category=category,
            config=config,
        )
        for room in rooms
    ]
    return sorted(suggestions, key=lambda item: item.score, reverse=True)


def _parse_remote_suggestions(
    payload: dict[str, Any],
    rooms: Sequence[Room],
) -> Optional[list[RoomSuggestion]]:
    items = payload.get("suggestions")
    if not isinstance(items, list):
        return None
    rooms_by_id = {room.room_id: room for room in rooms}
    parsed: list[RoomSuggestion] = []
    for item in items:
        if not isinstance(item, dict):
            return None
        room = rooms_by_id.get(str(item.get("roomId", "")))
        if room is None:
            return None
        try:
            score = max(0, min(100, int(item.get("score", 0))))
        except (TypeError, ValueError):
            return None
        reason = str(item.get("reason", "")).strip().rstrip(".")
        parsed.append(
            RoomSuggestion(
                room_id=room.room_id,
                room_name=room.name,
                score=score,
                reasons=tuple(part.strip() for part in reason.split(". ") if part.strip()),
                fit=classify_fit(score),
            )
        )
    return sorted(parsed, key=lambda item: item.score, reverse=True)


def _room_payload(room: Room) -> dict[str, Any]:
    return {
        "id": room.room_id,
        "name": room.name,
        "capacity": room.capacity,
        "hourlyRate": room.hourly_rate,
        "amenities": sorted(room.amenities),
    }


class RoomSuggestionService:
    """Serves suggestions from the AI backend, falling back to the rule engine."""

    def __init__(
        self,
        catalog: Optional[RoomCatalog] = None,
        ai_client: Optional[AIBackendClient] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._catalog = catalog or RoomCatalog.with_sample_rooms()
        self._ai_client = ai_client
        profile = SUGGESTION_PROFILES.get(self._settings.suggestion_profile)
        if profile is None:
            raise ValueError(f"unknown suggestion profile: {self._settings.suggestion_profile}")
        validate_suggestion_config(profile)
        self._profile = profile

    @property
    def profile(self) -> SuggestionConfig:
        return self._profile

    def suggest(
        self,
        event_description: str,
        attendee_count: int,
        rooms: Optional[Sequence[Room]] = None,
    ) -> list[RoomSuggestion]:
        return suggest_rooms(
            event_description,
            attendee_count,
            rooms if rooms is not None else self._catalog.rooms,
            self._profile,
        )

    def get_suggestions(
        self,
        meeting_type: str,
        attendees: int,
        purpose: str = "",
        rooms: Optional[Sequence[Room]] = None,
    ) -> list[RoomSuggestion]:
        """Ask the AI backend for a ranking; any failure degrades to ``suggest``."""
        description = " ".join(part.strip() for part in (meeting_type, purpose) if part and part.strip())
        if not description:
            raise ValidationError("meetingType must be non-empty")
        if attendees < 1:
            raise ValidationError("attendees must be at least 1")
        candidates = list(rooms) if rooms is not None else self._catalog.rooms

        if self._ai_client is not None and self._ai_client.enabled and candidates:
            try:
                payload = self._ai_client.post(
                    "/ai/room-suggestions",
                    {
                        "meetingType": meeting_type,
                        "attendees": attendees,
                        "purpose": purpose,
                        "rooms": [_room_payload(room) for room in candidates],
                    },
                )
                remote = _parse_remote_suggestions(payload, candidates)
                if remote is not None:
                    return remote
                logger.warning("AI suggestions payload malformed; using rule-based fallback")
            except NetworkError as exc:
                logger.warning("AI suggestions unavailable; using rule-based fallback | error=%s", exc)

        return self.suggest(description, attendees, candidates)
