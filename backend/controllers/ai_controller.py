"""Controller layer for room suggestions, assistant chat and occupancy forecasts."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import Field

from backend.controllers.dependencies import (
    get_assistant_service,
    get_booking_service,
    get_forecast_service,
    get_suggestion_service,
    require_user,
    to_http_exception,
)
from backend.controllers.schemas import CamelModel
from backend.domain.errors import BookingSystemError, ValidationError
from backend.domain.models import BookingRequest, Room
from backend.repository.booking_repository import booking_from_dict
from backend.repository.room_catalog import build_room
from backend.services.assistant_service import AssistantService
from backend.services.booking_service import BookingService
from backend.services.forecast_service import ForecastService
from backend.services.suggestion_service import RoomSuggestionService
from backend.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/ai", tags=["ai"], dependencies=[Depends(require_user)])


class RoomPayload(CamelModel):
    id: str
    name: str
    capacity: int
    description: str = ""
    amenities: list[str] = Field(default_factory=list)
    hourly_rate: Optional[float] = None


class SuggestionRequest(CamelModel):
    meeting_type: str = ""
    attendees: int
    purpose: str = ""
    rooms: Optional[list[RoomPayload]] = None


class SuggestionResponseItem(CamelModel):
    room_id: str
    room_name: str
    score: int = Field(ge=0, le=100)
    fit: str
    reason: str
    reasons: list[str]


class SuggestionResponse(CamelModel):
    suggestions: list[SuggestionResponseItem]


class ChatRequest(CamelModel):
    message: str
    history: list[dict[str, Any]] = Field(default_factory=list)
    context: Optional[dict[str, Any]] = None


class ChatResponse(CamelModel):
    reply: str


class QuestionRequest(CamelModel):
    question: str
    context: Optional[dict[str, Any]] = None


class QuestionResponse(CamelModel):
    answer: str


class ForecastRequest(CamelModel):
    room_id: str
    bookings: Optional[list[dict[str, Any]]] = None
    reference_date: Optional[date] = None


class ForecastResponse(CamelModel):
    upcoming_bookings: int = Field(ge=0)
    occupancy_rate: int = Field(ge=0, le=100)
    peak_time: str
    trend: str


def _rooms_from_payload(rooms: Optional[list[RoomPayload]]) -> Optional[list[Room]]:
    if rooms is None:
        return None
    try:
        return [
            build_room(
                room_id=item.id,
                name=item.name,
                capacity=item.capacity,
                description=item.description,
                amenities=item.amenities,
                hourly_rate=item.hourly_rate,
            )
            for item in rooms
        ]
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc


def _bookings_from_payload(bookings: list[dict[str, Any]]) -> list[BookingRequest]:
    try:
        return [booking_from_dict(item) for item in bookings]
    except (KeyError, TypeError, ValueError) as exc:
        raise ValidationError(f"malformed booking in forecast request: {exc}") from exc


@router.post("/room-suggestions", response_model=SuggestionResponse, status_code=status.HTTP_200_OK)
def room_suggestions(
    payload: SuggestionRequest,
    service: RoomSuggestionService = Depends(get_suggestion_service),
) -> SuggestionResponse:
    try:
        suggestions = service.get_suggestions(
            payload.meeting_type,
            payload.attendees,
            payload.purpose,
            rooms=_rooms_from_payload(payload.rooms),
        )
    except BookingSystemError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected suggestion failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate room suggestions",
        ) from exc
    return SuggestionResponse(
        suggestions=[
            SuggestionResponseItem(
                room_id=item.room_id,
                room_name=item.room_name,
                score=item.score,
                fit=item.fit,
                reason=item.reason,
                reasons=list(item.reasons),
            )
            for item in suggestions
        ]
    )


@router.post("/chat", response_model=ChatResponse, status_code=status.HTTP_200_OK)
def chat(
    payload: ChatRequest,
    service: AssistantService = Depends(get_assistant_service),
) -> ChatResponse:
    try:
        return ChatResponse(reply=service.chat(payload.message, payload.history))
    except BookingSystemError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected chat failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to process chat message",
        ) from exc


@router.post("/question", response_model=QuestionResponse, status_code=status.HTTP_200_OK)
def question(
    payload: QuestionRequest,
    service: AssistantService = Depends(get_assistant_service),
) -> QuestionResponse:
    try:
        return QuestionResponse(answer=service.answer_question(payload.question))
    except BookingSystemError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected question failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to answer question",
        ) from exc


@router.post("/forecast", response_model=ForecastResponse, status_code=status.HTTP_200_OK)
def booking_forecast(
    payload: ForecastRequest,
    service: ForecastService = Depends(get_forecast_service),
    booking_service: BookingService = Depends(get_booking_service),
) -> ForecastResponse:
    """Forecast from the supplied bookings, or from the store when none are sent."""
    try:
        if payload.bookings is None:
            bookings = booking_service.fetch()
        else:
            bookings = _bookings_from_payload(payload.bookings)
        result = service.generate_forecast(payload.room_id, bookings, payload.reference_date)
    except BookingSystemError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected forecast failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate forecast",
        ) from exc
    return ForecastResponse(
        upcoming_bookings=result.upcoming_count,
        occupancy_rate=result.occupancy_rate_percent,
        peak_time=result.peak_time_slot,
        trend=result.trend,
    )
