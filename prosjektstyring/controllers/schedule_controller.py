"""HTTP controller layer for calendar lanes and the schedule board."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field, model_validator

from prosjektstyring.controllers.dependencies import get_schedule_service
from prosjektstyring.domain.models import Interval
from prosjektstyring.services.schedule_service import ScheduleService, ScheduleValidationError
from prosjektstyring.services.staff_service import WorkerNotFoundError
from prosjektstyring.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["schedule"])


class IntervalIn(BaseModel):
    """Date range to lay out; ``start_date`` after ``end_date`` is skipped."""

    id: str = Field(min_length=1)
    start_date: date
    end_date: date


class LaneRequest(BaseModel):
    intervals: list[IntervalIn] = Field(default_factory=list)
    window_start: date
    window_end: date

    @model_validator(mode="after")
    def validate_window(self) -> "LaneRequest":
        if self.window_start > self.window_end:
            raise ValueError("window_start must be on or before window_end")
        return self


class LaneOut(BaseModel):
    lane: int = Field(ge=0)
    total_lanes: int = Field(ge=1)


class LaneResponse(BaseModel):
    lanes: dict[str, LaneOut]


class WindowResponse(BaseModel):
    window_start: date
    window_end: date


class BarOut(BaseModel):
    key: str
    assignment_id: str
    project_id: str
    start_date: date
    end_date: date
    is_system_bar: bool
    lane: int = Field(ge=0)
    total_lanes: int = Field(ge=1)
    lane_start: int = Field(ge=0)
    lane_count: int = Field(ge=1)


class BoardRowOut(BaseModel):
    worker_id: str
    name: str
    role: str
    project_leader_id: Optional[str] = None
    total_lanes: int = Field(ge=1)
    bars: list[BarOut]


class BoardResponse(BaseModel):
    window_start: date
    window_end: date
    rows: list[BoardRowOut]


def _bad_request(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.post("/lanes", response_model=LaneResponse, status_code=status.HTTP_200_OK)
async def compute_lanes_endpoint(
    payload: LaneRequest,
    service: ScheduleService = Depends(get_schedule_service),
) -> LaneResponse:
    """Lay out posted intervals; nothing is read from or written to storage."""
    try:
        lanes = service.lanes_for_intervals(
            [
                Interval(
                    interval_id=item.id,
                    start_date=item.start_date.isoformat(),
                    end_date=item.end_date.isoformat(),
                )
                for item in payload.intervals
            ],
            payload.window_start.isoformat(),
            payload.window_end.isoformat(),
        )
        return LaneResponse(
            lanes={
                interval_id: LaneOut(lane=item.lane, total_lanes=item.total_lanes)
                for interval_id, item in lanes.items()
            }
        )
    except ScheduleValidationError as exc:
        raise _bad_request(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected lane computation failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute lanes",
        ) from exc


@router.get("/schedule/window", response_model=WindowResponse, status_code=status.HTTP_200_OK)
async def schedule_window(
    anchor: Optional[date] = Query(default=None),
    weeks: Optional[int] = Query(default=None, ge=1),
    offset: int = Query(default=0),
    service: ScheduleService = Depends(get_schedule_service),
) -> WindowResponse:
    try:
        start, end = service.shift_window(anchor or date.today(), offset, weeks)
        return WindowResponse(window_start=start, window_end=end)
    except ScheduleValidationError as exc:
        raise _bad_request(exc) from exc


@router.get("/schedule", response_model=BoardResponse, status_code=status.HTTP_200_OK)
async def schedule_board(
    start: Optional[date] = Query(default=None),
    weeks: Optional[int] = Query(default=None, ge=1),
    service: ScheduleService = Depends(get_schedule_service),
) -> BoardResponse:
    try:
        window_start, window_end = service.week_window(start or date.today(), weeks)
        return BoardResponse(**service.schedule_board(window_start, window_end))
    except ScheduleValidationError as exc:
        raise _bad_request(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected schedule board failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to build schedule board",
        ) from exc


@router.get(
    "/workers/{worker_id}/lanes",
    response_model=LaneResponse,
    status_code=status.HTTP_200_OK,
)
async def worker_lanes(
    worker_id: str,
    start: date = Query(...),
    end: date = Query(...),
    service: ScheduleService = Depends(get_schedule_service),
) -> LaneResponse:
    try:
        lanes = service.worker_lanes(worker_id, start.isoformat(), end.isoformat())
        return LaneResponse(
            lanes={
                assignment_id: LaneOut(lane=item.lane, total_lanes=item.total_lanes)
                for assignment_id, item in lanes.items()
            }
        )
    except ScheduleValidationError as exc:
        raise _bad_request(exc) from exc
    except WorkerNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
