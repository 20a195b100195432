"""Domain-level validation rules for roster, projects and schedule windows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from prosjektstyring.domain.models import (
    BILLING_TYPES,
    PROJECT_STATUSES,
    PROJECT_TYPES,
    ROLE_CARPENTER,
    ROLE_PROJECT_LEADER,
    WORKER_ROLES,
    Worker,
)


@dataclass(frozen=True)
class ScheduleConfig:
    weeks_to_show: int
    max_window_days: int


def validate_schedule_config(config: ScheduleConfig) -> None:
    if config.weeks_to_show <= 0:
        raise ValueError("weeks_to_show must be > 0")
    if config.max_window_days <= 0:
        raise ValueError("max_window_days must be > 0")
    if config.weeks_to_show * 7 > config.max_window_days:
        raise ValueError("weeks_to_show must fit inside max_window_days")


def validate_iso_date(value: str, field_name: str = "date") -> None:
    try:
        parsed = date.fromisoformat(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{field_name} must follow YYYY-MM-DD format") from exc
    # fromisoformat accepts other ISO shapes on newer interpreters
    if parsed.isoformat() != value:
        raise ValueError(f"{field_name} must follow YYYY-MM-DD format")


def validate_date_range(start_date: str, end_date: str) -> None:
    validate_iso_date(start_date, "start_date")
    validate_iso_date(end_date, "end_date")
    if start_date > end_date:
        raise ValueError("start_date must be on or before end_date")


def validate_schedule_window(start_date: str, end_date: str, max_window_days: int) -> None:
    validate_date_range(start_date, end_date)
    span_days = (date.fromisoformat(end_date) - date.fromisoformat(start_date)).days + 1
    if span_days > max_window_days:
        raise ValueError(f"window must not exceed {max_window_days} days")


def validate_worker_fields(
    name: str,
    role: str,
    project_leader_id: Optional[str],
    max_name_length: int,
) -> None:
    if not name.strip():
        raise ValueError("name must be non-empty")
    if len(name) > max_name_length:
        raise ValueError(f"name must be at most {max_name_length} characters")
    if role not in WORKER_ROLES:
        raise ValueError(f"role must be one of {', '.join(WORKER_ROLES)}")
    if project_leader_id is not None and role != ROLE_CARPENTER:
        raise ValueError("only carpenters can be linked to a project leader")


def validate_project_leader_link(worker_id: Optional[str], leader: Optional[Worker]) -> None:
    """Check the target of a carpenter's project_leader_id."""
    if leader is None:
        raise ValueError("project_leader_id does not reference an existing worker")
    if leader.role != ROLE_PROJECT_LEADER:
        raise ValueError("project_leader_id must reference a project leader")
    if worker_id is not None and leader.worker_id == worker_id:
        raise ValueError("a worker cannot be their own project leader")


def validate_project_fields(
    name: str,
    amount: float,
    a_konto_percent: float,
    billing_type: str,
    status: str,
    project_type: str,
    max_name_length: int,
) -> None:
    if not name.strip():
        raise ValueError("name must be non-empty")
    if len(name) > max_name_length:
        raise ValueError(f"name must be at most {max_name_length} characters")
    if amount < 0:
        raise ValueError("amount must be >= 0")
    if not 0.0 <= a_konto_percent <= 100.0:
        raise ValueError("a_konto_percent must be between 0 and 100")
    if billing_type not in BILLING_TYPES:
        raise ValueError(f"billing_type must be one of {', '.join(BILLING_TYPES)}")
    if status not in PROJECT_STATUSES:
        raise ValueError(f"status must be one of {', '.join(PROJECT_STATUSES)}")
    if project_type not in PROJECT_TYPES:
        raise ValueError(f"project_type must be one of {', '.join(PROJECT_TYPES)}")
