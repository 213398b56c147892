"""HTTP client for the optional external AI backend."""

from __future__ import annotations

import time
from typing import Any, Callable, Optional

import httpx

from backend.domain.errors import NetworkError
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


class AIBackendClient:
    """POSTs JSON to the AI backend with a timeout and linear-backoff retries.

    Every failure mode (transport error, timeout, non-2xx status, non-JSON
    body) is reported as ``NetworkError`` so callers have exactly one thing
    to recover from.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._settings = settings or get_settings()
        self._sleep = sleep
        self._client: Optional[httpx.Client] = None
        if self._settings.ai_enabled:
            headers = {"Content-Type": "application/json"}
            if self._settings.ai_api_key:
                headers["Authorization"] = f"Bearer {self._settings.ai_api_key}"
            self._client = httpx.Client(
                base_url=self._settings.ai_base_url.rstrip("/"),
                headers=headers,
                timeout=self._settings.ai_timeout_seconds,
                transport=transport,
            )

    @property
    def enabled(self) -> bool:
        return self._client is not None

    def post(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        if self._client is None:
            raise NetworkError("AI backend is not configured")

        attempts = max(1, self._settings.ai_retry_attempts)
        last_error: Optional[Exception] = None
        for attempt in range(attempts):
            try:
                response = self._client.post(endpoint, json=payload)
                response.raise_for_status()
                body = response.json()
                if not isinstance(body, dict):
                    raise ValueError("AI backend response must be a JSON object")
                return body
            except (httpx.HTTPError, ValueError) as exc:
                last_error = exc
                logger.warning(
                    "AI backend call failed | endpoint=%s | attempt=%s/%s | error=%s",
                    endpoint,
                    attempt + 1,
                    attempts,
                    exc,
                )
                if attempt < attempts - 1:
                    self._sleep(self._settings.ai_retry_delay_seconds * (attempt + 1))

        raise NetworkError(f"AI backend request to {endpoint} failed: {last_error}") from last_error

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
