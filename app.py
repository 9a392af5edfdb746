"""
app.py - FastAPI application factory and startup lifecycle.

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

from marchen.controllers.events_controller import router as events_router
from marchen.controllers.planning_controller import router as planning_router
from marchen.repository.data_repository import DataRepository
from marchen.services.auth_service import AuthService
from marchen.services.event_service import EventService
from marchen.services.schedule_optimizer import ScheduleOptimizationService
from marchen.services.staffing_calculator import StaffingPlanService
from marchen.utils.config import Settings, get_settings
from marchen.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Instantiates all services with explicit dependency injection via app.state.
    No global singletons - every dependency is traceable from this function.
    """
    settings = settings or get_settings()

    # --- Repository (SQLite connection factory) ---
    repository = DataRepository(settings)

    # --- Services (planning logic, no direct DB access) ---
    event_service = EventService(repository=repository, settings=settings)
    schedule_service = ScheduleOptimizationService(repository=repository, settings=settings)
    staffing_service = StaffingPlanService(repository=repository, settings=settings)
    auth_service = AuthService(settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # --- Routers ---
    app.include_router(planning_router)
    app.include_router(events_router)

    # --- Inject services into app.state for dependency resolution ---
    app.state.settings = settings
    app.state.repository = repository
    app.state.event_service = event_service
    app.state.schedule_service = schedule_service
    app.state.staffing_service = staffing_service
    app.state.auth_service = auth_service

    return app


def _startup(app: FastAPI) -> None:
    """
    Idempotent startup sequence. Safe to re-run on server restarts.

    The schema must exist before the demo marché is seeded; seeding is
    skipped when any event is already stored or when disabled in settings.
    """
    settings: Settings = app.state.settings
    repository: DataRepository = app.state.repository

    logger.info("Startup: initializing database schema")
    repository.initialize_database()

    if settings.seed_demo_data:
        logger.info("Startup: seeding demo marché (skipped if Events table not empty)")
        repository.seed_demo_data()

    if not settings.organizer_token:
        logger.warning("Startup: MARCHEN_ORGANIZER_TOKEN is unset; organizer endpoints are open")

    logger.info("Startup complete - system ready")


# Module-level app object for uvicorn
app = create_app()
