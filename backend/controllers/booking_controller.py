"""Controller layer for booking requests and their approval workflow."""

from __future__ import annotations

from typing import Callable, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from backend.controllers.dependencies import get_booking_service, require_user, to_http_exception
from backend.controllers.schemas import (
    BookingFilterPayload,
    BookingPayload,
    BookingResponse,
    CamelModel,
)
from backend.domain.errors import BookingSystemError, ValidationError
from backend.domain.models import BOOKING_STATUSES, BookingDraft, BookingFilter, BookingRequest
from backend.services.booking_service import BookingService
from backend.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"], dependencies=[Depends(require_user)])


class BookingsRequest(CamelModel):
    action: str
    booking: Optional[BookingPayload] = None
    filters: Optional[BookingFilterPayload] = None


class BookingsResponse(CamelModel):
    success: bool
    booking: Optional[BookingResponse] = None
    bookings: Optional[list[BookingResponse]] = None


def _draft_from_payload(payload: Optional[BookingPayload]) -> BookingDraft:
    if payload is None:
        raise ValidationError("booking is required")
    return BookingDraft(
        room_id=payload.room_id,
        date=payload.date,
        time_slot_id=payload.time_slot.id if payload.time_slot is not None else None,
        requester_name=payload.requester_name,
        requester_email=payload.requester_email,
        purpose=payload.purpose,
        attendees=payload.attendees,
        notes=payload.notes,
    )


def _filter_from_payload(payload: Optional[BookingFilterPayload]) -> Optional[BookingFilter]:
    if payload is None:
        return None
    if payload.status is not None and payload.status not in BOOKING_STATUSES:
        raise ValidationError(f"unknown status filter: {payload.status}")
    return BookingFilter(
        room_id=payload.room_id,
        status=payload.status,
        start_date=payload.start_date,
        end_date=payload.end_date,
    )


@router.post(
    "",
    response_model=BookingsResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
)
def bookings(
    payload: BookingsRequest,
    service: BookingService = Depends(get_booking_service),
) -> BookingsResponse:
    """Single entry point keyed on ``action``: ``create`` or ``fetch``."""
    try:
        if payload.action == "create":
            booking = service.create_booking(_draft_from_payload(payload.booking))
            return BookingsResponse(success=True, booking=BookingResponse.from_booking(booking))
        if payload.action == "fetch":
            found = service.fetch(_filter_from_payload(payload.filters))
            return BookingsResponse(
                success=True,
                bookings=[BookingResponse.from_booking(item) for item in found],
            )
        raise ValidationError("Invalid action")
    except BookingSystemError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected booking failure | action=%s", payload.action)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to process booking request",
        ) from exc


def _transition(
    booking_id: str,
    operation: Callable[[str], BookingRequest],
    label: str,
) -> BookingsResponse:
    try:
        booking = operation(booking_id)
    except BookingSystemError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected booking %s failure | booking_id=%s", label, booking_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to {label} booking",
        ) from exc
    return BookingsResponse(success=True, booking=BookingResponse.from_booking(booking))


@router.post(
    "/{booking_id}/approve",
    response_model=BookingsResponse,
    response_model_exclude_none=True,
)
def approve_booking(
    booking_id: str,
    service: BookingService = Depends(get_booking_service),
) -> BookingsResponse:
    return _transition(booking_id, service.approve, "approve")


@router.post(
    "/{booking_id}/reject",
    response_model=BookingsResponse,
    response_model_exclude_none=True,
)
def reject_booking(
    booking_id: str,
    service: BookingService = Depends(get_booking_service),
) -> BookingsResponse:
    return _transition(booking_id, service.reject, "reject")


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingsResponse,
    response_model_exclude_none=True,
)
def cancel_booking(
    booking_id: str,
    service: BookingService = Depends(get_booking_service),
) -> BookingsResponse:
    return _transition(booking_id, service.cancel, "cancel")


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking(
    booking_id: str,
    service: BookingService = Depends(get_booking_service),
) -> None:
    try:
        service.delete(booking_id)
    except BookingSystemError as exc:
        raise to_http_exception(exc) from exc
