"""HTTP controller layer for projects and calendar assignments."""

from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, Field, model_validator

from prosjektstyring.controllers.dependencies import get_project_service
from prosjektstyring.domain.models import Assignment, Project
from prosjektstyring.services.project_service import (
    AssignmentNotFoundError,
    ProjectNotFoundError,
    ProjectService,
    ProjectValidationError,
    SystemProjectLockedError,
)
from prosjektstyring.utils.config import get_settings
from prosjektstyring.utils.logger import get_logger


logger = get_logger(__name__)
settings = get_settings()

router = APIRouter(tags=["projects"])

BillingType = Literal["tilbud", "timer_materiell"]
ProjectStatus = Literal["active", "completed"]
ProjectType = Literal["regular", "sick_leave", "vacation"]
COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class ProjectCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=settings.project_name_max_length)
    description: str = ""
    color: Optional[str] = Field(default=None, pattern=COLOR_PATTERN)
    amount: float = Field(default=0.0, ge=0.0)
    a_konto_percent: float = Field(default=0.0, ge=0.0, le=100.0)
    billing_type: BillingType = "tilbud"
    project_type: ProjectType = "regular"
    project_leader_id: Optional[str] = None


class ProjectUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=settings.project_name_max_length)
    description: Optional[str] = None
    color: Optional[str] = Field(default=None, pattern=COLOR_PATTERN)
    amount: Optional[float] = Field(default=None, ge=0.0)
    a_konto_percent: Optional[float] = Field(default=None, ge=0.0, le=100.0)
    billing_type: Optional[BillingType] = None
    status: Optional[ProjectStatus] = None
    project_type: Optional[ProjectType] = None
    project_leader_id: Optional[str] = None


class ProjectResponse(BaseModel):
    id: str
    name: str
    description: str
    color: str
    amount: float
    a_konto_percent: float
    billing_type: str
    status: str
    project_type: str
    is_system: bool
    project_leader_id: Optional[str] = None
    created_at: str


class AssignmentCreateRequest(BaseModel):
    project_id: str = Field(min_length=1)
    worker_id: str = Field(min_length=1)
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def validate_range(self) -> "AssignmentCreateRequest":
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class AssignmentUpdateRequest(BaseModel):
    project_id: Optional[str] = Field(default=None, min_length=1)
    worker_id: Optional[str] = Field(default=None, min_length=1)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class AssignmentMoveRequest(BaseModel):
    start_date: date
    worker_id: Optional[str] = Field(default=None, min_length=1)


class AssignmentResponse(BaseModel):
    id: str
    project_id: str
    worker_id: str
    start_date: date
    end_date: date


class AssignmentDeleteResponse(BaseModel):
    project_deleted: bool


def _project_response(project: Project) -> ProjectResponse:
    return ProjectResponse(
        id=project.project_id,
        name=project.name,
        description=project.description,
        color=project.color,
        amount=project.amount,
        a_konto_percent=project.a_konto_percent,
        billing_type=project.billing_type,
        status=project.status,
        project_type=project.project_type,
        is_system=project.is_system,
        project_leader_id=project.project_leader_id,
        created_at=project.created_at,
    )


def _assignment_response(assignment: Assignment) -> AssignmentResponse:
    return AssignmentResponse(
        id=assignment.assignment_id,
        project_id=assignment.project_id,
        worker_id=assignment.worker_id,
        start_date=assignment.start_date,
        end_date=assignment.end_date,
    )


def _translate(exc: Exception) -> HTTPException:
    if isinstance(exc, ProjectValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, (ProjectNotFoundError, AssignmentNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, SystemProjectLockedError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    logger.exception("Unexpected project workflow failure")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Failed to process project request",
    )


# ----- projects -----


@router.get("/projects", response_model=list[ProjectResponse], status_code=status.HTTP_200_OK)
async def list_projects(
    project_status: Optional[ProjectStatus] = Query(default=None, alias="status"),
    service: ProjectService = Depends(get_project_service),
) -> list[ProjectResponse]:
    return [_project_response(p) for p in service.list_projects(status=project_status)]


@router.post("/projects", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: ProjectCreateRequest,
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    try:
        return _project_response(service.create_project(**payload.model_dump()))
    except Exception as exc:
        raise _translate(exc) from exc


@router.patch("/projects/{project_id}", response_model=ProjectResponse, status_code=status.HTTP_200_OK)
async def update_project(
    project_id: str,
    payload: ProjectUpdateRequest,
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    # An explicit null only means something for the leader link.
    changes = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key == "project_leader_id"
    }
    try:
        return _project_response(service.update_project(project_id, changes))
    except Exception as exc:
        raise _translate(exc) from exc


@router.post(
    "/projects/{project_id}/complete",
    response_model=ProjectResponse,
    status_code=status.HTTP_200_OK,
)
async def complete_project(
    project_id: str,
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    try:
        return _project_response(service.complete_project(project_id))
    except Exception as exc:
        raise _translate(exc) from exc


@router.post(
    "/projects/{project_id}/reopen",
    response_model=ProjectResponse,
    status_code=status.HTTP_200_OK,
)
async def reopen_project(
    project_id: str,
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    try:
        return _project_response(service.reopen_project(project_id))
    except Exception as exc:
        raise _translate(exc) from exc


@router.delete("/projects/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: str,
    service: ProjectService = Depends(get_project_service),
) -> Response:
    try:
        service.delete_project(project_id)
    except Exception as exc:
        raise _translate(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ----- assignments -----


@router.get("/assignments", response_model=list[AssignmentResponse], status_code=status.HTTP_200_OK)
async def list_assignments(
    worker_id: Optional[str] = Query(default=None),
    project_id: Optional[str] = Query(default=None),
    service: ProjectService = Depends(get_project_service),
) -> list[AssignmentResponse]:
    return [
        _assignment_response(a)
        for a in service.list_assignments(worker_id=worker_id, project_id=project_id)
    ]


@router.post("/assignments", response_model=AssignmentResponse, status_code=status.HTTP_201_CREATED)
async def create_assignment(
    payload: AssignmentCreateRequest,
    service: ProjectService = Depends(get_project_service),
) -> AssignmentResponse:
    try:
        assignment = service.create_assignment(
            project_id=payload.project_id,
            worker_id=payload.worker_id,
            start_date=payload.start_date.isoformat(),
            end_date=payload.end_date.isoformat(),
        )
        return _assignment_response(assignment)
    except Exception as exc:
        raise _translate(exc) from exc


@router.patch(
    "/assignments/{assignment_id}",
    response_model=AssignmentResponse,
    status_code=status.HTTP_200_OK,
)
async def update_assignment(
    assignment_id: str,
    payload: AssignmentUpdateRequest,
    service: ProjectService = Depends(get_project_service),
) -> AssignmentResponse:
    changes = {
        key: value.isoformat() if isinstance(value, date) else value
        for key, value in payload.model_dump(exclude_none=True).items()
    }
    try:
        return _assignment_response(service.update_assignment(assignment_id, changes))
    except Exception as exc:
        raise _translate(exc) from exc


@router.post(
    "/assignments/{assignment_id}/move",
    response_model=AssignmentResponse,
    status_code=status.HTTP_200_OK,
)
async def move_assignment(
    assignment_id: str,
    payload: AssignmentMoveRequest,
    service: ProjectService = Depends(get_project_service),
) -> AssignmentResponse:
    try:
        assignment = service.move_assignment(
            assignment_id,
            start_date=payload.start_date.isoformat(),
            worker_id=payload.worker_id,
        )
        return _assignment_response(assignment)
    except Exception as exc:
        raise _translate(exc) from exc


@router.delete(
    "/assignments/{assignment_id}",
    response_model=AssignmentDeleteResponse,
    status_code=status.HTTP_200_OK,
)
async def delete_assignment(
    assignment_id: str,
    delete_orphan_project: bool = Query(default=False),
    service: ProjectService = Depends(get_project_service),
) -> AssignmentDeleteResponse:
    try:
        deleted = service.delete_assignment(
            assignment_id,
            delete_orphan_project=delete_orphan_project,
        )
        return AssignmentDeleteResponse(project_deleted=deleted)
    except Exception as exc:
        raise _translate(exc) from exc
