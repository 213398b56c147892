"""
app.py — FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires all services, registers routers, and runs startup initialization.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from backend.controllers.ai_controller import router as ai_router
from backend.controllers.auth_controller import router as auth_router
from backend.controllers.booking_controller import router as booking_router
from backend.controllers.room_controller import router as room_router
from backend.repository.booking_repository import JsonBookingRepository
from backend.repository.room_catalog import RoomCatalog
from backend.services.ai_client import AIBackendClient
from backend.services.assistant_service import AssistantService
from backend.services.auth_service import AuthService
from backend.services.booking_service import BookingService
from backend.services.forecast_service import ForecastService
from backend.services.suggestion_service import RoomSuggestionService
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Instantiates all services with explicit dependency injection via app.state.
    No global singletons — every dependency is traceable from this function.
    """
    settings = settings or get_settings()

    # --- Reference data and storage ---
    catalog = RoomCatalog.with_sample_rooms()
    repository = JsonBookingRepository(settings)

    # --- Optional AI backend; disabled when AI_BACKEND_URL is empty ---
    ai_client = AIBackendClient(settings=settings)

    # --- Services ---
    booking_service = BookingService(repository=repository, catalog=catalog)
    suggestion_service = RoomSuggestionService(
        catalog=catalog,
        ai_client=ai_client,
        settings=settings,
    )
    forecast_service = ForecastService(ai_client=ai_client, settings=settings)
    assistant_service = AssistantService(catalog=catalog, ai_client=ai_client)
    auth_service = AuthService(settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app)
        yield
        app.state.ai_client.close()
        logger.info("Shutdown complete")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # --- Routers ---
    app.include_router(auth_router, prefix=settings.api_prefix)
    app.include_router(room_router, prefix=settings.api_prefix)
    app.include_router(booking_router, prefix=settings.api_prefix)
    app.include_router(ai_router, prefix=settings.api_prefix)

    # --- Inject services into app.state for dependency resolution ---
    app.state.settings = settings
    app.state.catalog = catalog
    app.state.repository = repository
    app.state.ai_client = ai_client
    app.state.booking_service = booking_service
    app.state.suggestion_service = suggestion_service
    app.state.forecast_service = forecast_service
    app.state.assistant_service = assistant_service
    app.state.auth_service = auth_service

    return app


def _startup(app: FastAPI) -> None:
    """Idempotent startup sequence. Safe to re-run on server restarts."""
    repository: JsonBookingRepository = app.state.repository
    ai_client: AIBackendClient = app.state.ai_client

    logger.info("Startup: loading booking store | path=%s", repository.store_path)
    count = repository.load()

    if ai_client.enabled:
        logger.info("Startup: AI backend enabled | base_url=%s", app.state.settings.ai_base_url)
    else:
        logger.info("Startup: AI backend disabled; rule-based fallbacks active")

    logger.info("Startup complete — system ready | bookings=%s", count)


# Module-level app object for uvicorn
app = create_app()
