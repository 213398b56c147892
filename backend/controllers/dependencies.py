"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backend.domain.errors import (
    AuthError,
    BookingSystemError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from backend.repository.room_catalog import RoomCatalog
from backend.services.assistant_service import AssistantService
from backend.services.auth_service import AuthService, UserSession
from backend.services.booking_service import BookingService
from backend.services.forecast_service import ForecastService
from backend.services.suggestion_service import RoomSuggestionService
from backend.utils.config import get_settings


bearer_scheme = HTTPBearer(auto_error=False)


def _service_from_state(request: Request, attribute: str, label: str):
    service = getattr(request.app.state, attribute, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} is not initialized",
        )
    return service


def get_auth_service(request: Request) -> AuthService:
    service = getattr(request.app.state, "auth_service", None)
    if service is None:
        service = AuthService(settings=get_settings())
        request.app.state.auth_service = service
    return service


def get_catalog(request: Request) -> RoomCatalog:
    return _service_from_state(request, "catalog", "Room catalog")


def get_booking_service(request: Request) -> BookingService:
    return _service_from_state(request, "booking_service", "Booking service")


def get_suggestion_service(request: Request) -> RoomSuggestionService:
    return _service_from_state(request, "suggestion_service", "Suggestion service")


def get_forecast_service(request: Request) -> ForecastService:
    return _service_from_state(request, "forecast_service", "Forecast service")


def get_assistant_service(request: Request) -> AssistantService:
    return _service_from_state(request, "assistant_service", "Assistant service")


async def require_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> UserSession:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header with Bearer token is required",
        )
    try:
        return auth_service.validate_bearer_token(credentials.credentials)
    except AuthError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


_ERROR_STATUS: tuple[tuple[type[BookingSystemError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (ConflictError, status.HTTP_409_CONFLICT),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (AuthError, status.HTTP_401_UNAUTHORIZED),
)


def to_http_exception(exc: BookingSystemError) -> HTTPException:
    """Translate a domain error into the HTTP status the API contract promises."""
    for error_type, status_code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(exc),
    )
