"""Demo authentication: any credentials log in and receive an expiring bearer token."""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from threading import RLock
from typing import Callable, Optional

from backend.domain.errors import AuthError, ValidationError
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


class InvalidTokenError(AuthError):
    """Raised when a bearer token is unknown."""


class ExpiredTokenError(AuthError):
    """Raised when a bearer token is past its expiry."""


@dataclass(frozen=True)
class UserSession:
    user_id: str
    username: str
    email: str
    name: str
    expires_at: datetime

    def to_user_dict(self) -> dict[str, str]:
        return {
            "id": self.user_id,
            "username": self.username,
            "email": self.email,
            "name": self.name,
        }


class AuthService:
    """Issues and validates session tokens; credentials are not checked."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._settings = settings or get_settings()
        self._clock = clock
        self._sessions: dict[str, UserSession] = {}
        self._lock = RLock()

    def login(self, username: str, password: str) -> tuple[str, UserSession]:
        if not username or not username.strip():
            raise ValidationError("username is required")
        if not password:
            raise ValidationError("password is required")

        username = username.strip()
        session = UserSession(
            user_id=f"user-{secrets.token_hex(6)}",
            username=username,
            email=f"{username}@example.com",
            name=username,
            expires_at=self._clock() + timedelta(hours=self._settings.auth_token_ttl_hours),
        )
        token = secrets.token_urlsafe(32)
        with self._lock:
            self._purge_expired()
            self._sessions[token] = session
        logger.info("User logged in | user_id=%s | username=%s", session.user_id, username)
        return token, session

    def validate_bearer_token(self, bearer_token: str) -> UserSession:
        with self._lock:
            session = self._sessions.get(bearer_token)
            if session is None:
                raise InvalidTokenError("Invalid or expired token")
            if session.expires_at <= self._clock():
                self._sessions.pop(bearer_token, None)
                raise ExpiredTokenError("Invalid or expired token")
            return session

    @property
    def active_sessions(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [token for token, session in self._sessions.items() if session.expires_at <= now]
        for token in expired:
            del self._sessions[token]
        if expired:
            logger.info("Expired sessions purged | count=%s", len(expired))
