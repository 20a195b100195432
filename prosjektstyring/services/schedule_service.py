"""Calendar service: visible windows, lane layout and the schedule board."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Iterable, Optional

from prosjektstyring.domain.constraints import (
    ScheduleConfig,
    validate_schedule_config,
    validate_schedule_window,
)
from prosjektstyring.domain.lanes import compute_lanes
from prosjektstyring.domain.models import Interval, LaneAssignment
from prosjektstyring.domain.segments import (
    build_worker_segments,
    compute_segment_lanes,
    segment_key,
)
from prosjektstyring.repository.data_repository import DataRepository
from prosjektstyring.services.staff_service import StaffService
from prosjektstyring.utils.config import Settings, get_settings
from prosjektstyring.utils.logger import get_logger


logger = get_logger(__name__)


class ScheduleValidationError(Exception):
    """Raised when a calendar window or lane request is invalid."""


class ScheduleService:
    """Read-only view over assignments laid out for the calendar."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        staff_service: Optional[StaffService] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._staff_service = staff_service or StaffService(
            repository=self._repository,
            settings=self._settings,
        )
        self._config = ScheduleConfig(
            weeks_to_show=self._settings.schedule_weeks_to_show,
            max_window_days=self._settings.schedule_max_window_days,
        )
        try:
            validate_schedule_config(self._config)
        except ValueError as exc:
            raise ScheduleValidationError(str(exc)) from exc

    def _check_window(self, window_start: str, window_end: str) -> None:
        try:
            validate_schedule_window(window_start, window_end, self._config.max_window_days)
        except ValueError as exc:
            raise ScheduleValidationError(str(exc)) from exc

    def week_window(self, anchor: date, weeks: Optional[int] = None) -> tuple[str, str]:
        """Return the weekday window the calendar shows around ``anchor``.

        The window starts on the Monday of the anchor's week and ends on the
        Friday of the last shown week.
        """
        weeks = weeks if weeks is not None else self._config.weeks_to_show
        if weeks <= 0 or weeks * 7 > self._config.max_window_days:
            raise ScheduleValidationError(
                f"weeks must be between 1 and {self._config.max_window_days // 7}"
            )
        monday = anchor - timedelta(days=anchor.weekday())
        friday = monday + timedelta(days=7 * (weeks - 1) + 4)
        return monday.isoformat(), friday.isoformat()

    def shift_window(
        self,
        anchor: date,
        offset_weeks: int,
        weeks: Optional[int] = None,
    ) -> tuple[str, str]:
        """Navigate the calendar by whole weeks."""
        return self.week_window(anchor + timedelta(days=7 * offset_weeks), weeks)

    def lanes_for_intervals(
        self,
        intervals: Iterable[Interval],
        window_start: str,
        window_end: str,
    ) -> dict[str, LaneAssignment]:
        self._check_window(window_start, window_end)
        return compute_lanes(intervals, window_start, window_end)

    def worker_lanes(
        self,
        worker_id: str,
        window_start: str,
        window_end: str,
    ) -> dict[str, LaneAssignment]:
        """Lane per assignment for one worker, active projects only."""
        self._check_window(window_start, window_end)
        self._staff_service.get_worker(worker_id)
        active_project_ids = {
            project.project_id for project in self._repository.list_projects(status="active")
        }
        intervals = [
            Interval(
                interval_id=assignment.assignment_id,
                start_date=assignment.start_date,
                end_date=assignment.end_date,
            )
            for assignment in self._repository.list_assignments(worker_id=worker_id)
            if assignment.project_id in active_project_ids
        ]
        return compute_lanes(intervals, window_start, window_end)

    def schedule_board(self, window_start: str, window_end: str) -> dict[str, Any]:
        """Lay out every worker row of the calendar for the window."""
        self._check_window(window_start, window_end)
        workers = self._repository.list_workers()
        projects = self._repository.list_projects()
        assignments = self._repository.list_assignments()

        rows: list[dict[str, Any]] = []
        for worker in self._staff_service.board_order(workers):
            segments = build_worker_segments(worker.worker_id, assignments, projects)
            lanes = compute_segment_lanes(segments, window_start, window_end)
            bars = []
            for index, segment in enumerate(segments):
                key = segment_key(segment, index)
                lane = lanes.get(key)
                if lane is None:
                    continue
                bars.append(
                    {
                        "key": key,
                        "assignment_id": segment.assignment_id,
                        "project_id": segment.project_id,
                        "start_date": segment.start_date,
                        "end_date": segment.end_date,
                        "is_system_bar": lane.is_system_bar,
                        "lane": lane.lane,
                        "total_lanes": lane.total_lanes,
                        "lane_start": lane.lane_start,
                        "lane_count": lane.lane_count,
                    }
                )
            rows.append(
                {
                    "worker_id": worker.worker_id,
                    "name": worker.name,
                    "role": worker.role,
                    "project_leader_id": worker.project_leader_id,
                    "total_lanes": max((bar["total_lanes"] for bar in bars), default=1),
                    "bars": bars,
                }
            )

        logger.debug(
            "Built schedule board %s..%s with %s rows",
            window_start,
            window_end,
            len(rows),
        )
        return {"window_start": window_start, "window_end": window_end, "rows": rows}
