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

from fastapi import FastAPI

from prosjektstyring.controllers.project_controller import router as project_router
from prosjektstyring.controllers.schedule_controller import router as schedule_router
from prosjektstyring.controllers.staff_controller import router as staff_router
from prosjektstyring.repository.data_repository import DataRepository
from prosjektstyring.services.project_service import ProjectService
from prosjektstyring.services.schedule_service import ScheduleService
from prosjektstyring.services.staff_service import StaffService
from prosjektstyring.utils.config import get_settings
from prosjektstyring.utils.logger import get_logger


logger = get_logger(__name__)


def create_app() -> FastAPI:
    """
    Build and wire the FastAPI application.

    Services share one repository and are handed to controllers via app.state.
    """
    settings = get_settings()

    # --- Repository (single SQLite connection factory) ---
    repository = DataRepository(settings)

    # --- Services ---
    staff_service = StaffService(repository=repository, settings=settings)
    project_service = ProjectService(repository=repository, settings=settings)
    schedule_service = ScheduleService(
        repository=repository,
        staff_service=staff_service,
        settings=settings,
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
    app.include_router(schedule_router)
    app.include_router(staff_router)
    app.include_router(project_router)

    # --- Inject services into app.state for dependency resolution ---
    app.state.settings = settings
    app.state.repository = repository
    app.state.staff_service = staff_service
    app.state.project_service = project_service
    app.state.schedule_service = schedule_service

    return app


def _startup(app: FastAPI) -> None:
    """
    Idempotent startup sequence. Safe to re-run on server restarts.

    The schema must exist before the absence projects are seeded, and those
    must exist before demo data references them.
    """
    repository: DataRepository = app.state.repository
    settings = app.state.settings

    logger.info("Startup: initializing database schema")
    repository.initialize_database()

    logger.info("Startup: ensuring system absence projects exist")
    created = repository.seed_system_projects()
    if created:
        logger.info("Startup: created %s system projects", created)

    if settings.seed_demo_data:
        logger.info("Startup: seeding demo roster (skipped if Workers table not empty)")
        repository.seed_demo_data_if_empty()

    logger.info("Startup complete, system ready")


# Module-level app object for uvicorn
app = create_app()
