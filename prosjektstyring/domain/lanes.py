"""Greedy lane packing for date-ranged calendar bars.

Dates are ISO ``YYYY-MM-DD`` strings. The format is fixed width and zero
padded, so plain string comparison orders them chronologically.
"""

from __future__ import annotations

from typing import Iterable

from prosjektstyring.domain.models import Interval, LaneAssignment


def dates_overlap(start1: str, end1: str, start2: str, end2: str) -> bool:
    """Return True when two inclusive day ranges share at least one day."""
    return start1 <= end2 and end1 >= start2


def is_visible(interval: Interval, window_start: str, window_end: str) -> bool:
    return dates_overlap(interval.start_date, interval.end_date, window_start, window_end)


def compute_lanes(
    intervals: Iterable[Interval],
    window_start: str,
    window_end: str,
) -> dict[str, LaneAssignment]:
    """Assign every visible interval to the lowest free lane.

    Intervals are packed in start-date order. Python's sort is stable, so
    intervals starting on the same day keep their input order and repeated
    calls give the same layout. A lane is free for an interval only when its
    previous occupant ended strictly before the interval starts; two bars
    touching on the same day never share a lane.

    Intervals with ``start_date > end_date`` are skipped, as are intervals
    outside ``[window_start, window_end]``. Neither appears in the result.
    """
    visible = [
        interval
        for interval in intervals
        if interval.start_date <= interval.end_date
        and is_visible(interval, window_start, window_end)
    ]
    if not visible:
        return {}

    ordered = sorted(visible, key=lambda interval: interval.start_date)

    lane_end_dates: list[str] = []
    lane_by_id: dict[str, int] = {}
    for interval in ordered:
        assigned_lane = None
        for lane_index, lane_end in enumerate(lane_end_dates):
            if lane_end < interval.start_date:
                assigned_lane = lane_index
                break
        if assigned_lane is None:
            assigned_lane = len(lane_end_dates)
            lane_end_dates.append(interval.end_date)
        else:
            lane_end_dates[assigned_lane] = interval.end_date
        lane_by_id[interval.interval_id] = assigned_lane

    total_lanes = len(lane_end_dates)
    return {
        interval_id: LaneAssignment(lane=lane, total_lanes=total_lanes)
        for interval_id, lane in lane_by_id.items()
    }
