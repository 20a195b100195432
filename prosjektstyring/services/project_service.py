"""Project and assignment management service."""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Any, Optional

from prosjektstyring.domain.constraints import (
    validate_date_range,
    validate_project_fields,
)
from prosjektstyring.domain.models import ROLE_PROJECT_LEADER, Assignment, Project
from prosjektstyring.repository.data_repository import DataRepository, RecordNotFoundError
from prosjektstyring.utils.config import Settings, get_settings
from prosjektstyring.utils.logger import get_logger


logger = get_logger(__name__)

_EDITABLE_PROJECT_FIELDS = (
    "name",
    "description",
    "color",
    "amount",
    "a_konto_percent",
    "billing_type",
    "status",
    "project_type",
    "project_leader_id",
)


class ProjectValidationError(Exception):
    """Raised when project or assignment inputs are invalid."""


class ProjectNotFoundError(Exception):
    """Raised when a project id does not exist."""


class AssignmentNotFoundError(Exception):
    """Raised when an assignment id does not exist."""


class SystemProjectLockedError(Exception):
    """Raised on attempts to edit or delete a built-in absence project."""


class ProjectService:
    """Validates project/assignment changes before they reach storage."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)

    # ----- projects -----

    def list_projects(self, status: Optional[str] = None) -> list[Project]:
        return self._repository.list_projects(status=status)

    def get_project(self, project_id: str) -> Project:
        project = self._repository.get_project(project_id)
        if project is None:
            raise ProjectNotFoundError(f"Project {project_id} not found")
        return project

    def _check_leader(self, project_leader_id: Optional[str]) -> None:
        if project_leader_id is None:
            return
        leader = self._repository.get_worker(project_leader_id)
        if leader is None or leader.role != ROLE_PROJECT_LEADER:
            raise ProjectValidationError("project_leader_id must reference a project leader")

    def _validate_project(self, project: Project) -> None:
        try:
            validate_project_fields(
                name=project.name,
                amount=project.amount,
                a_konto_percent=project.a_konto_percent,
                billing_type=project.billing_type,
                status=project.status,
                project_type=project.project_type,
                max_name_length=self._settings.project_name_max_length,
            )
        except ValueError as exc:
            raise ProjectValidationError(str(exc)) from exc
        self._check_leader(project.project_leader_id)

    def create_project(
        self,
        *,
        name: str,
        description: str = "",
        color: Optional[str] = None,
        amount: float = 0.0,
        a_konto_percent: float = 0.0,
        billing_type: str = "tilbud",
        project_type: str = "regular",
        project_leader_id: Optional[str] = None,
    ) -> Project:
        draft = Project(
            project_id="",
            name=name.strip(),
            description=description,
            color=color or self._settings.default_project_color,
            amount=float(amount),
            a_konto_percent=float(a_konto_percent),
            billing_type=billing_type,
            status="active",
            project_type=project_type,
            is_system=False,
            project_leader_id=project_leader_id,
            created_at="",
        )
        self._validate_project(draft)
        project = self._repository.create_project(
            name=draft.name,
            description=draft.description,
            color=draft.color,
            amount=draft.amount,
            a_konto_percent=draft.a_konto_percent,
            billing_type=draft.billing_type,
            project_type=draft.project_type,
            project_leader_id=draft.project_leader_id,
        )
        logger.info("Created project %s", project.project_id)
        return project

    def update_project(self, project_id: str, changes: dict[str, Any]) -> Project:
        """Apply a partial update; unknown keys are rejected."""
        current = self.get_project(project_id)
        if current.is_system:
            raise SystemProjectLockedError(f"Project {current.name} is a system project")
        unknown = set(changes) - set(_EDITABLE_PROJECT_FIELDS)
        if unknown:
            raise ProjectValidationError(f"Unknown project fields: {', '.join(sorted(unknown))}")

        updated = replace(current, **changes)
        if "name" in changes:
            updated = replace(updated, name=updated.name.strip())
        self._validate_project(updated)
        try:
            return self._repository.update_project(updated)
        except RecordNotFoundError as exc:
            raise ProjectNotFoundError(str(exc)) from exc

    def complete_project(self, project_id: str) -> Project:
        return self.update_project(project_id, {"status": "completed"})

    def reopen_project(self, project_id: str) -> Project:
        return self.update_project(project_id, {"status": "active"})

    def delete_project(self, project_id: str) -> None:
        project = self.get_project(project_id)
        if project.is_system:
            raise SystemProjectLockedError(f"Project {project.name} is a system project")
        try:
            self._repository.delete_project(project_id)
        except RecordNotFoundError as exc:
            raise ProjectNotFoundError(str(exc)) from exc

    # ----- assignments -----

    def list_assignments(
        self,
        worker_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> list[Assignment]:
        return self._repository.list_assignments(worker_id=worker_id, project_id=project_id)

    def get_assignment(self, assignment_id: str) -> Assignment:
        assignment = self._repository.get_assignment(assignment_id)
        if assignment is None:
            raise AssignmentNotFoundError(f"Assignment {assignment_id} not found")
        return assignment

    def _validate_assignment(self, assignment: Assignment) -> None:
        try:
            validate_date_range(assignment.start_date, assignment.end_date)
        except ValueError as exc:
            raise ProjectValidationError(str(exc)) from exc
        if self._repository.get_worker(assignment.worker_id) is None:
            raise ProjectValidationError(f"Worker {assignment.worker_id} does not exist")
        if self._repository.get_project(assignment.project_id) is None:
            raise ProjectValidationError(f"Project {assignment.project_id} does not exist")

    def create_assignment(
        self,
        *,
        project_id: str,
        worker_id: str,
        start_date: str,
        end_date: str,
    ) -> Assignment:
        draft = Assignment(
            assignment_id="",
            project_id=project_id,
            worker_id=worker_id,
            start_date=start_date,
            end_date=end_date,
        )
        self._validate_assignment(draft)
        return self._repository.create_assignment(project_id, worker_id, start_date, end_date)

    def update_assignment(self, assignment_id: str, changes: dict[str, Any]) -> Assignment:
        current = self.get_assignment(assignment_id)
        allowed = {"project_id", "worker_id", "start_date", "end_date"}
        unknown = set(changes) - allowed
        if unknown:
            raise ProjectValidationError(
                f"Unknown assignment fields: {', '.join(sorted(unknown))}"
            )
        updated = replace(current, **changes)
        self._validate_assignment(updated)
        try:
            return self._repository.update_assignment(updated)
        except RecordNotFoundError as exc:
            raise AssignmentNotFoundError(str(exc)) from exc

    def move_assignment(
        self,
        assignment_id: str,
        *,
        start_date: str,
        worker_id: Optional[str] = None,
    ) -> Assignment:
        """Drag a bar to a new start date, keeping its length in days."""
        current = self.get_assignment(assignment_id)
        try:
            validate_date_range(start_date, start_date)
        except ValueError as exc:
            raise ProjectValidationError(str(exc)) from exc
        length = date.fromisoformat(current.end_date) - date.fromisoformat(current.start_date)
        new_end = (date.fromisoformat(start_date) + length).isoformat()
        changes: dict[str, Any] = {"start_date": start_date, "end_date": new_end}
        if worker_id is not None:
            changes["worker_id"] = worker_id
        return self.update_assignment(assignment_id, changes)

    def resize_assignment(
        self,
        assignment_id: str,
        *,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Assignment:
        """Drag either edge of a bar."""
        changes: dict[str, Any] = {}
        if start_date is not None:
            changes["start_date"] = start_date
        if end_date is not None:
            changes["end_date"] = end_date
        if not changes:
            raise ProjectValidationError("start_date or end_date is required")
        return self.update_assignment(assignment_id, changes)

    def delete_assignment(
        self,
        assignment_id: str,
        *,
        delete_orphan_project: bool = False,
    ) -> bool:
        """Remove a bar from the calendar.

        Returns True when the project was removed as well, which only happens
        with ``delete_orphan_project`` for a regular project whose last
        assignment this was.
        """
        assignment = self.get_assignment(assignment_id)
        project = self._repository.get_project(assignment.project_id)
        try:
            self._repository.delete_assignment(assignment_id)
        except RecordNotFoundError as exc:
            raise AssignmentNotFoundError(str(exc)) from exc

        if (
            delete_orphan_project
            and project is not None
            and not project.is_system
            and self._repository.count_assignments(project.project_id) == 0
        ):
            self._repository.delete_project(project.project_id)
            logger.info("Deleted project %s with its last assignment", project.project_id)
            return True
        return False
