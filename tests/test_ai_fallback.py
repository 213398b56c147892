from __future__ import annotations

import json
from dataclasses import replace
from datetime import date

import httpx
import pytest

from backend.domain.errors import NetworkError
from backend.repository.room_catalog import RoomCatalog, build_room
from backend.services.ai_client import AIBackendClient
from backend.services.assistant_service import AssistantService
from backend.services.forecast_service import ForecastService, forecast
from backend.services.suggestion_service import RoomSuggestionService, suggest_rooms
from backend.utils.config import get_settings


def _build_test_settings(**overrides):
    get_settings.cache_clear()
    defaults = {
        "ai_base_url": "http://ai.test",
        "ai_retry_attempts": 3,
        "ai_retry_delay_seconds": 1.0,
    }
    defaults.update(overrides)
    return replace(get_settings(), **defaults)


def _client(handler, sleeps: list[float] | None = None, **overrides) -> AIBackendClient:
    recorded = sleeps if sleeps is not None else []
    return AIBackendClient(
        settings=_build_test_settings(**overrides),
        transport=httpx.MockTransport(handler),
        sleep=recorded.append,
    )


def _failing(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


# --- client ---

def test_client_is_disabled_without_base_url() -> None:
    client = AIBackendClient(settings=_build_test_settings(ai_base_url=""))

    assert not client.enabled
    with pytest.raises(NetworkError):
        client.post("/ai/chat", {"message": "hi"})


def test_client_retries_with_linear_backoff() -> None:
    calls: list[str] = []
    sleeps: list[float] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(503, json={"error": "busy"})

    client = _client(handler, sleeps)
    with pytest.raises(NetworkError):
        client.post("/ai/chat", {"message": "hello"})

    assert calls == ["/ai/chat"] * 3
    assert sleeps == [1.0, 2.0]


def test_client_recovers_on_a_later_attempt() -> None:
    attempts = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        attempts["count"] += 1
        if attempts["count"] == 1:
            raise httpx.ReadTimeout("slow", request=request)
        assert json.loads(request.content) == {"message": "hello"}
        return httpx.Response(200, json={"reply": "hi there"})

    assert _client(handler).post("/ai/chat", {"message": "hello"}) == {"reply": "hi there"}
    assert attempts["count"] == 2


def test_client_rejects_non_object_bodies() -> None:
    client = _client(lambda request: httpx.Response(200, json=["not", "an", "object"]), ai_retry_attempts=1)
    with pytest.raises(NetworkError):
        client.post("/ai/chat", {"message": "hello"})


# --- service fallbacks ---

def test_suggestions_fall_back_to_rules_when_backend_is_down() -> None:
    catalog = RoomCatalog.with_sample_rooms()
    service = RoomSuggestionService(catalog=catalog, ai_client=_client(_failing))

    suggestions = service.get_suggestions("presentation", 40)

    assert suggestions == suggest_rooms("presentation", 40, catalog.rooms)


def test_suggestions_use_backend_ranking_when_available() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert [room["id"] for room in body["rooms"]] == ["auditorium", "library", "grounds"]
        return httpx.Response(
            200,
            json={
                "suggestions": [
                    {"roomId": "library", "score": 60, "reason": "Quiet. Close by."},
                    {"roomId": "grounds", "score": 95, "reason": "Lots of space."},
                ]
            },
        )

    service = RoomSuggestionService(catalog=RoomCatalog.with_sample_rooms(), ai_client=_client(handler))
    suggestions = service.get_suggestions("offsite", 30, "team day")

    assert [(item.room_id, item.score, item.fit) for item in suggestions] == [
        ("grounds", 95, "perfect"),
        ("library", 60, "good"),
    ]
    assert suggestions[1].reasons == ("Quiet", "Close by")


def test_suggestions_with_unknown_room_from_backend_fall_back() -> None:
    handler = lambda request: httpx.Response(
        200, json={"suggestions": [{"roomId": "moon-base", "score": 99, "reason": "?"}]}
    )
    catalog = RoomCatalog.with_sample_rooms()
    service = RoomSuggestionService(catalog=catalog, ai_client=_client(handler))

    assert service.get_suggestions("study", 5) == suggest_rooms("study", 5, catalog.rooms)


def test_suggestions_score_caller_supplied_rooms() -> None:
    rooms = [build_room(room_id="pod", name="Pod", capacity=4, amenities=("WiFi",))]
    service = RoomSuggestionService(catalog=RoomCatalog.with_sample_rooms(), ai_client=_client(_failing))

    [suggestion] = service.get_suggestions("quiet study", 2, rooms=rooms)

    assert suggestion.room_id == "pod"


def test_forecast_falls_back_to_heuristic() -> None:
    service = ForecastService(ai_client=_client(_failing), settings=_build_test_settings())
    result = service.generate_forecast("library", [], date(2026, 3, 2))

    assert result == forecast("library", [], date(2026, 3, 2), service.config)


def test_forecast_uses_backend_payload() -> None:
    handler = lambda request: httpx.Response(
        200,
        json={"upcomingBookings": 12, "occupancyRate": 24, "peakTime": "10:00 - 11:00", "trend": "Low Demand"},
    )
    service = ForecastService(ai_client=_client(handler), settings=_build_test_settings())
    result = service.generate_forecast("library", [])

    assert result.upcoming_count == 12
    assert result.peak_time_slot == "10:00 - 11:00"


def test_chat_falls_back_to_keyword_table() -> None:
    assistant = AssistantService(catalog=RoomCatalog.with_sample_rooms(), ai_client=_client(_failing))
    assert assistant.chat("refund?").startswith("You can cancel")


def test_chat_uses_backend_reply() -> None:
    handler = lambda request: httpx.Response(200, json={"reply": "From the model"})
    assistant = AssistantService(catalog=RoomCatalog.with_sample_rooms(), ai_client=_client(handler))
    assert assistant.chat("anything") == "From the model"
