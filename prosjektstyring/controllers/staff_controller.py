"""HTTP controller layer for the staff roster."""

from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field, field_validator

from prosjektstyring.controllers.dependencies import get_staff_service
from prosjektstyring.domain.models import Worker
from prosjektstyring.services.staff_service import (
    StaffService,
    StaffValidationError,
    WorkerNotFoundError,
)
from prosjektstyring.utils.config import get_settings


settings = get_settings()

router = APIRouter(tags=["workers"])

WorkerRole = Literal["prosjektleder", "tømrer"]


class WorkerCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=settings.worker_name_max_length)
    role: WorkerRole
    project_leader_id: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must be non-empty")
        return value


class WorkerUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=settings.worker_name_max_length)
    role: Optional[WorkerRole] = None
    project_leader_id: Optional[str] = None


class WorkerResponse(BaseModel):
    id: str
    name: str
    role: str
    project_leader_id: Optional[str] = None


class RosterGroupResponse(BaseModel):
    leader: Optional[WorkerResponse] = None
    members: list[WorkerResponse]


class RosterResponse(BaseModel):
    groups: list[RosterGroupResponse]


def _to_response(worker: Worker) -> WorkerResponse:
    return WorkerResponse(
        id=worker.worker_id,
        name=worker.name,
        role=worker.role,
        project_leader_id=worker.project_leader_id,
    )


@router.get("/workers", response_model=list[WorkerResponse], status_code=status.HTTP_200_OK)
async def list_workers(
    service: StaffService = Depends(get_staff_service),
) -> list[WorkerResponse]:
    return [_to_response(worker) for worker in service.list_workers()]


@router.get("/workers/roster", response_model=RosterResponse, status_code=status.HTTP_200_OK)
async def roster(
    service: StaffService = Depends(get_staff_service),
) -> RosterResponse:
    return RosterResponse(
        groups=[
            RosterGroupResponse(
                leader=_to_response(group.leader) if group.leader is not None else None,
                members=[_to_response(member) for member in group.members],
            )
            for group in service.roster()
        ]
    )


@router.post("/workers", response_model=WorkerResponse, status_code=status.HTTP_201_CREATED)
async def create_worker(
    payload: WorkerCreateRequest,
    service: StaffService = Depends(get_staff_service),
) -> WorkerResponse:
    try:
        worker = service.create_worker(
            name=payload.name,
            role=payload.role,
            project_leader_id=payload.project_leader_id,
        )
        return _to_response(worker)
    except StaffValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.patch("/workers/{worker_id}", response_model=WorkerResponse, status_code=status.HTTP_200_OK)
async def update_worker(
    worker_id: str,
    payload: WorkerUpdateRequest,
    service: StaffService = Depends(get_staff_service),
) -> WorkerResponse:
    try:
        worker = service.update_worker(worker_id, **payload.model_dump(exclude_unset=True))
        return _to_response(worker)
    except StaffValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except WorkerNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc


@router.delete("/workers/{worker_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_worker(
    worker_id: str,
    service: StaffService = Depends(get_staff_service),
) -> Response:
    try:
        service.delete_worker(worker_id)
    except WorkerNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
