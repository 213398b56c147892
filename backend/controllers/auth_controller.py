"""Controller layer for health checks and demo login."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from backend.controllers.dependencies import get_auth_service, to_http_exception
from backend.controllers.schemas import CamelModel
from backend.domain.errors import BookingSystemError
from backend.services.auth_service import AuthService
from backend.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["auth"])


class HealthResponse(CamelModel):
    status: str
    timestamp: datetime


class AuthRequest(CamelModel):
    action: str
    username: Optional[str] = None
    password: Optional[str] = None


class UserResponse(CamelModel):
    id: str
    username: str
    email: str
    name: str


class AuthResponse(CamelModel):
    success: bool
    token: str
    user: UserResponse
    expires_at: datetime


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health() -> HealthResponse:
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc))


@router.post("/auth", response_model=AuthResponse, status_code=status.HTTP_200_OK)
async def authenticate(
    payload: AuthRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Demo login; every non-empty username/password pair is accepted."""
    if payload.action != "login":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid action",
        )
    try:
        token, session = auth_service.login(payload.username or "", payload.password or "")
    except BookingSystemError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected login failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication failed",
        ) from exc
    return AuthResponse(
        success=True,
        token=token,
        user=UserResponse(**session.to_user_dict()),
        expires_at=session.expires_at,
    )
