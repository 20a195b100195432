"""Split assignments around absences and lay them out in calendar lanes."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Sequence

from prosjektstyring.domain.lanes import compute_lanes, dates_overlap
from prosjektstyring.domain.models import (
    Assignment,
    AssignmentSegment,
    Interval,
    Project,
    SegmentLane,
)


def _shift_day(day: str, days: int) -> str:
    return (date.fromisoformat(day) + timedelta(days=days)).isoformat()


def subtract_date_ranges(
    start: str,
    end: str,
    ranges: Iterable[tuple[str, str]],
) -> list[tuple[str, str]]:
    """Return the parts of inclusive ``[start, end]`` not covered by ``ranges``."""
    if start > end:
        return []
    blocks = sorted(
        (max(start, block_start), min(end, block_end))
        for block_start, block_end in ranges
        if block_start <= block_end and dates_overlap(start, end, block_start, block_end)
    )
    parts: list[tuple[str, str]] = []
    cursor = start
    for block_start, block_end in blocks:
        if block_start > cursor:
            parts.append((cursor, _shift_day(block_start, -1)))
        if block_end >= cursor:
            cursor = _shift_day(block_end, 1)
    if cursor <= end:
        parts.append((cursor, end))
    return parts


def build_worker_segments(
    worker_id: str,
    assignments: Iterable[Assignment],
    projects: Iterable[Project],
) -> list[AssignmentSegment]:
    """Build display segments for one worker.

    Absence assignments (on system projects) are kept whole. Regular
    assignments are cut around them. Assignments on missing or completed
    projects are not shown.
    """
    project_by_id = {project.project_id: project for project in projects}
    worker_assignments = [a for a in assignments if a.worker_id == worker_id]

    absence_ranges = []
    for assignment in worker_assignments:
        project = project_by_id.get(assignment.project_id)
        if project is not None and project.is_system:
            absence_ranges.append((assignment.start_date, assignment.end_date))

    segments: list[AssignmentSegment] = []
    for assignment in worker_assignments:
        project = project_by_id.get(assignment.project_id)
        if project is None or project.status != "active":
            continue
        if project.is_system:
            segments.append(
                AssignmentSegment(
                    assignment_id=assignment.assignment_id,
                    project_id=project.project_id,
                    start_date=assignment.start_date,
                    end_date=assignment.end_date,
                    is_system=True,
                )
            )
            continue
        for part_start, part_end in subtract_date_ranges(
            assignment.start_date,
            assignment.end_date,
            absence_ranges,
        ):
            segments.append(
                AssignmentSegment(
                    assignment_id=assignment.assignment_id,
                    project_id=project.project_id,
                    start_date=part_start,
                    end_date=part_end,
                    is_system=False,
                )
            )
    return segments


def segment_key(segment: AssignmentSegment, index: int) -> str:
    return f"{segment.assignment_id}-{segment.start_date}-{segment.end_date}-{index}"


def compute_segment_lanes(
    segments: Sequence[AssignmentSegment],
    window_start: str,
    window_end: str,
) -> dict[str, SegmentLane]:
    """Lay out one worker row.

    Parts of the same assignment share a lane: each assignment is packed as
    the envelope of its visible parts. Absence bars sit on lane 0 and span
    the lanes of every project bar they overlap or touch.
    """
    regular = [segment for segment in segments if not segment.is_system]

    envelopes: dict[str, tuple[str, str]] = {}
    for segment in regular:
        if not dates_overlap(segment.start_date, segment.end_date, window_start, window_end):
            continue
        existing = envelopes.get(segment.assignment_id)
        if existing is None:
            envelopes[segment.assignment_id] = (segment.start_date, segment.end_date)
        else:
            envelopes[segment.assignment_id] = (
                min(existing[0], segment.start_date),
                max(existing[1], segment.end_date),
            )

    packed = compute_lanes(
        [
            Interval(interval_id=assignment_id, start_date=start, end_date=end)
            for assignment_id, (start, end) in envelopes.items()
        ],
        window_start,
        window_end,
    )
    lane_by_assignment = {assignment_id: item.lane for assignment_id, item in packed.items()}
    total_lanes = next(iter(packed.values())).total_lanes if packed else 1

    def absence_span(start: str, end: str) -> tuple[int, int]:
        day_before = _shift_day(start, -1)
        day_after = _shift_day(end, 1)
        touching = {
            segment.assignment_id
            for segment in regular
            if dates_overlap(start, end, segment.start_date, segment.end_date)
            or segment.end_date == day_before
            or segment.start_date == day_after
        }
        if not touching:
            return 0, 1
        lanes = [lane_by_assignment.get(assignment_id, 0) for assignment_id in touching]
        return min(lanes), max(lanes) - min(lanes) + 1

    result: dict[str, SegmentLane] = {}
    for index, segment in enumerate(segments):
        if not dates_overlap(segment.start_date, segment.end_date, window_start, window_end):
            continue
        if segment.is_system:
            lane_start, lane_count = absence_span(segment.start_date, segment.end_date)
            result[segment_key(segment, index)] = SegmentLane(
                lane=0,
                total_lanes=total_lanes,
                is_system_bar=True,
                lane_start=lane_start,
                lane_count=lane_count,
            )
        else:
            result[segment_key(segment, index)] = SegmentLane(
                lane=lane_by_assignment.get(segment.assignment_id, 0),
                total_lanes=total_lanes,
                is_system_bar=False,
            )
    return result
