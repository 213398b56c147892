from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from backend.domain.errors import ValidationError
from backend.services.auth_service import AuthService, ExpiredTokenError, InvalidTokenError
from backend.utils.config import get_settings


def test_login_issues_token_that_validates() -> None:
    service = AuthService()
    token, session = service.login("grace", "pw")

    assert service.validate_bearer_token(token) == session
    assert session.to_user_dict()["email"] == "grace@example.com"


def test_blank_credentials_are_rejected() -> None:
    service = AuthService()
    with pytest.raises(ValidationError):
        service.login(" ", "pw")
    with pytest.raises(ValidationError):
        service.login("grace", "")


def test_unknown_token_is_invalid() -> None:
    with pytest.raises(InvalidTokenError):
        AuthService().validate_bearer_token("nope")


def test_token_expires_after_ttl() -> None:
    get_settings.cache_clear()
    settings = replace(get_settings(), auth_token_ttl_hours=1)
    now = {"value": datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)}
    service = AuthService(settings=settings, clock=lambda: now["value"])
    token, _ = service.login("grace", "pw")

    now["value"] += timedelta(minutes=59)
    service.validate_bearer_token(token)

    now["value"] += timedelta(minutes=1)
    with pytest.raises(ExpiredTokenError):
        service.validate_bearer_token(token)


def test_login_purges_expired_sessions() -> None:
    get_settings.cache_clear()
    settings = replace(get_settings(), auth_token_ttl_hours=1)
    now = {"value": datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)}
    service = AuthService(settings=settings, clock=lambda: now["value"])
    stale_token, _ = service.login("grace", "pw")
    service.login("ada", "pw")
    assert service.active_sessions == 2

    now["value"] += timedelta(hours=2)
    fresh_token, session = service.login("grace", "pw")

    assert service.active_sessions == 1
    assert service.validate_bearer_token(fresh_token) == session
    with pytest.raises(InvalidTokenError):
        service.validate_bearer_token(stale_token)
