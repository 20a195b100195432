"""Domain models for workers, projects, assignments and calendar lanes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


ROLE_PROJECT_LEADER = "prosjektleder"
ROLE_CARPENTER = "tømrer"
WORKER_ROLES = (ROLE_PROJECT_LEADER, ROLE_CARPENTER)

BILLING_TYPES = ("tilbud", "timer_materiell")
PROJECT_STATUSES = ("active", "completed")
PROJECT_TYPES = ("regular", "sick_leave", "vacation")


@dataclass(frozen=True)
class Worker:
    worker_id: str
    name: str
    role: str
    project_leader_id: Optional[str] = None


@dataclass(frozen=True)
class Project:
    project_id: str
    name: str
    description: str
    color: str
    amount: float
    a_konto_percent: float
    billing_type: str
    status: str
    project_type: str
    is_system: bool
    project_leader_id: Optional[str]
    created_at: str


@dataclass(frozen=True)
class Assignment:
    assignment_id: str
    project_id: str
    worker_id: str
    start_date: str
    end_date: str


@dataclass(frozen=True)
class Interval:
    """Inclusive day range keyed by an opaque id."""

    interval_id: str
    start_date: str
    end_date: str


@dataclass(frozen=True)
class LaneAssignment:
    lane: int
    total_lanes: int


@dataclass(frozen=True)
class AssignmentSegment:
    """Displayable piece of an assignment after absence days are removed."""

    assignment_id: str
    project_id: str
    start_date: str
    end_date: str
    is_system: bool


@dataclass(frozen=True)
class SegmentLane:
    lane: int
    total_lanes: int
    is_system_bar: bool
    lane_start: int = 0
    lane_count: int = 1
