"""
app.py: FastAPI application factory and startup lifecycle.

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

from backend.controllers.dashboard_controller import router as dashboard_router
from backend.controllers.roster_controller import router as roster_router
from backend.repository.data_repository import DataRepository
from backend.services.auth_service import AuthService
from backend.services.notification_service import NotificationChannel
from backend.services.roster_service import RosterService
from backend.services.slot_assigner import SlotAssigner
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Instantiates all services with explicit dependency injection via app.state.
    No global singletons; every dependency is traceable from this function.
    """
    settings = settings or get_settings()

    # --- Repository (roster + schedule stores over one SQLite file) ---
    repository = DataRepository(settings)

    # --- Services (business logic, no direct DB access) ---
    notifications = NotificationChannel(settings)
    auth_service = AuthService(settings=settings)
    slot_assigner = SlotAssigner(
        repository=repository,
        notifications=notifications,
        settings=settings,
    )
    roster_service = RosterService(
        repository=repository,
        notifications=notifications,
        settings=settings,
        slot_assigner=slot_assigner,
    )

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
    app.include_router(dashboard_router)
    app.include_router(roster_router)

    # --- Inject services into app.state for dependency resolution ---
    app.state.settings = settings
    app.state.repository = repository
    app.state.notifications = notifications
    app.state.auth_service = auth_service
    app.state.roster_service = roster_service
    app.state.slot_assigner = slot_assigner

    return app


def _startup(app: FastAPI) -> None:
    """
    Idempotent startup sequence. Safe to re-run on server restarts.

    Order matters:
      1. Schema must exist before any coordinator row is written.
      2. The default coordinator owns the demo roster, so it is created first.
    """
    settings: Settings = app.state.settings
    repository: DataRepository = app.state.repository

    logger.info("Startup: initializing database schema")
    repository.initialize_database()

    logger.info("Startup: ensuring default coordinator %s", settings.default_coordinator_id)
    repository.ensure_coordinator(settings.default_coordinator_id)

    if settings.seed_demo_roster:
        logger.info("Startup: seeding demo roster (skipped if coordinator already has professors)")
        repository.seed_demo_roster(settings.default_coordinator_id)

    logger.info("Startup complete: system ready")


# Module-level app object for uvicorn
app = create_app()
