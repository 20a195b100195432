"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from prosjektstyring.services.project_service import ProjectService
from prosjektstyring.services.schedule_service import ScheduleService
from prosjektstyring.services.staff_service import StaffService


def _require_state(request: Request, attribute: str, label: str):
    service = getattr(request.app.state, attribute, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} is not initialized",
        )
    return service


def get_staff_service(request: Request) -> StaffService:
    return _require_state(request, "staff_service", "Staff service")


def get_project_service(request: Request) -> ProjectService:
    return _require_state(request, "project_service", "Project service")


def get_schedule_service(request: Request) -> ScheduleService:
    service = getattr(request.app.state, "schedule_service", None)
    if service is None:
        repository = getattr(request.app.state, "repository", None)
        staff_service = getattr(request.app.state, "staff_service", None)
        if repository is not None:
            service = ScheduleService(repository=repository, staff_service=staff_service)
            request.app.state.schedule_service = service
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Schedule service is not initialized",
        )
    return service
