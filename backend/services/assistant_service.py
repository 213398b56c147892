"""Keyword-table chat and FAQ answering.

This is a static lookup: the query is lowercased and checked against an
ordered table of keyword sets, and the first hit wins. The optional AI
backend is consulted first; any failure falls back to the table.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from backend.domain.errors import NetworkError, ValidationError
from backend.domain.models import Room
from backend.domain.rules import FAQ_ENTRIES, FAQ_FALLBACK_RESPONSE, FaqEntry
from backend.repository.room_catalog import RoomCatalog
from backend.services.ai_client import AIBackendClient
from backend.utils.logger import get_logger


logger = get_logger(__name__)


def _format_rate(room: Room) -> str:
    if room.hourly_rate is None:
        return f"{room.name} on request"
    return f"{room.name} ${room.hourly_rate:.0f}/hour"


def catalog_placeholders(rooms: Sequence[Room]) -> dict[str, str]:
    return {
        "room_rates": ", ".join(_format_rate(room) for room in rooms),
        "room_capacities": ", ".join(f"{room.name} ({room.capacity} people)" for room in rooms),
        "room_amenities": " | ".join(
            f"{room.name}: {', '.join(sorted(room.amenities))}" for room in rooms
        ),
    }


def room_entries(rooms: Sequence[Room]) -> list[FaqEntry]:
    """One entry per room, keyed on the room name, rendered from catalog data."""
    entries = []
    for room in rooms:
        parts = [f"The {room.name}: {room.description}." if room.description else f"The {room.name}."]
        parts.append(f"Capacity: {room.capacity} people.")
        if room.amenities:
            parts.append(f"Amenities: {', '.join(sorted(room.amenities))}.")
        if room.hourly_rate is not None:
            parts.append(f"Rate: ${room.hourly_rate:.0f}/hour.")
        entries.append(
            FaqEntry(
                category="room_info",
                keywords=(room.name.lower(),),
                response=" ".join(parts).replace("{", "{{").replace("}", "}}"),
            )
        )
    return entries


class _CatalogValues(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def answer(
    query: str,
    table: Sequence[FaqEntry] = FAQ_ENTRIES,
    placeholders: Optional[dict[str, str]] = None,
    fallback: str = FAQ_FALLBACK_RESPONSE,
) -> str:
    text = query.lower().strip()
    for entry in table:
        if entry.matches(text):
            return entry.response.format_map(_CatalogValues(placeholders or {}))
    return fallback


class AssistantService:
    """Chat box and question bot share one topic table built from the catalog."""

    def __init__(
        self,
        catalog: Optional[RoomCatalog] = None,
        ai_client: Optional[AIBackendClient] = None,
        entries: Sequence[FaqEntry] = FAQ_ENTRIES,
    ) -> None:
        self._catalog = catalog or RoomCatalog.with_sample_rooms()
        self._ai_client = ai_client
        rooms = self._catalog.rooms
        self._table: tuple[FaqEntry, ...] = tuple(room_entries(rooms)) + tuple(entries)
        self._placeholders = catalog_placeholders(rooms)

    @property
    def categories(self) -> list[str]:
        seen: list[str] = []
        for entry in self._table:
            if entry.category not in seen:
                seen.append(entry.category)
        return seen

    def answer(self, query: str) -> str:
        return answer(query, self._table, self._placeholders)

    def _context(self) -> dict[str, Any]:
        return {
            "rooms": [
                {
                    "id": room.room_id,
                    "name": room.name,
                    "capacity": room.capacity,
                    "hourlyRate": room.hourly_rate,
                    "amenities": sorted(room.amenities),
                }
                for room in self._catalog.rooms
            ],
            "timeSlots": [
                {"id": slot.slot_id, "start": slot.start_time, "end": slot.end_time}
                for slot in self._catalog.time_slots
            ],
        }

    def _ask_remote(self, endpoint: str, payload: dict[str, Any], keys: Sequence[str]) -> Optional[str]:
        if self._ai_client is None or not self._ai_client.enabled:
            return None
        try:
            response = self._ai_client.post(endpoint, payload)
        except NetworkError as exc:
            logger.warning("AI assistant unavailable; using keyword table | endpoint=%s | error=%s", endpoint, exc)
            return None
        for key in keys:
            value = response.get(key)
            if isinstance(value, str) and value.strip():
                return value
        logger.warning("AI assistant payload malformed; using keyword table | endpoint=%s", endpoint)
        return None

    def chat(self, message: str, history: Optional[list[dict[str, Any]]] = None) -> str:
        if not message or not message.strip():
            raise ValidationError("message must be non-empty")
        remote = self._ask_remote(
            "/ai/chat",
            {"message": message, "history": history or [], "context": self._context()},
            ("reply", "message"),
        )
        return remote if remote is not None else self.answer(message)

    def answer_question(self, question: str) -> str:
        if not question or not question.strip():
            raise ValidationError("question must be non-empty")
        remote = self._ask_remote(
            "/ai/question",
            {"question": question, "context": self._context()},
            ("answer", "reply"),
        )
        return remote if remote is not None else self.answer(question)
