"""Staff roster service: workers and their project-leader grouping."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from prosjektstyring.domain.constraints import (
    validate_project_leader_link,
    validate_worker_fields,
)
from prosjektstyring.domain.models import ROLE_CARPENTER, ROLE_PROJECT_LEADER, Worker
from prosjektstyring.repository.data_repository import DataRepository, RecordNotFoundError
from prosjektstyring.utils.config import Settings, get_settings
from prosjektstyring.utils.logger import get_logger


logger = get_logger(__name__)

_UNSET = object()


class StaffValidationError(Exception):
    """Raised when worker inputs are invalid."""


class WorkerNotFoundError(Exception):
    """Raised when a worker id does not exist."""


@dataclass(frozen=True)
class RosterGroup:
    """A project leader (or None for unassigned) and the rows under them."""

    leader: Optional[Worker]
    members: list[Worker]


class StaffService:
    """Validates roster changes and derives the calendar row order."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)

    def list_workers(self) -> list[Worker]:
        return self._repository.list_workers()

    def get_worker(self, worker_id: str) -> Worker:
        worker = self._repository.get_worker(worker_id)
        if worker is None:
            raise WorkerNotFoundError(f"Worker {worker_id} not found")
        return worker

    def _validate(self, worker_id: Optional[str], name: str, role: str, leader_id: Optional[str]) -> None:
        try:
            validate_worker_fields(
                name=name,
                role=role,
                project_leader_id=leader_id,
                max_name_length=self._settings.worker_name_max_length,
            )
            if leader_id is not None:
                validate_project_leader_link(worker_id, self._repository.get_worker(leader_id))
        except ValueError as exc:
            raise StaffValidationError(str(exc)) from exc

    def create_worker(
        self,
        *,
        name: str,
        role: str,
        project_leader_id: Optional[str] = None,
    ) -> Worker:
        self._validate(None, name, role, project_leader_id)
        worker = self._repository.create_worker(name.strip(), role, project_leader_id)
        logger.info("Created worker %s (%s)", worker.worker_id, worker.role)
        return worker

    def update_worker(
        self,
        worker_id: str,
        *,
        name: Optional[str] = None,
        role: Optional[str] = None,
        project_leader_id: object = _UNSET,
    ) -> Worker:
        """Apply a partial update.

        ``project_leader_id`` distinguishes "not given" from an explicit
        ``None`` that unlinks a carpenter. Changing a carpenter into a
        project leader drops the link.
        """
        current = self.get_worker(worker_id)
        new_role = role if role is not None else current.role
        if project_leader_id is _UNSET:
            new_leader_id = current.project_leader_id if new_role == ROLE_CARPENTER else None
        else:
            new_leader_id = project_leader_id  # type: ignore[assignment]
        new_name = name if name is not None else current.name

        self._validate(worker_id, new_name, new_role, new_leader_id)
        if current.role == ROLE_PROJECT_LEADER and new_role != ROLE_PROJECT_LEADER:
            if any(w.project_leader_id == worker_id for w in self._repository.list_workers()):
                raise StaffValidationError(
                    "project leader still has carpenters; move them before changing role"
                )

        updated = replace(
            current,
            name=new_name.strip(),
            role=new_role,
            project_leader_id=new_leader_id,
        )
        try:
            return self._repository.update_worker(updated)
        except RecordNotFoundError as exc:
            raise WorkerNotFoundError(str(exc)) from exc

    def delete_worker(self, worker_id: str) -> None:
        try:
            self._repository.delete_worker(worker_id)
        except RecordNotFoundError as exc:
            raise WorkerNotFoundError(str(exc)) from exc

    def roster(self, workers: Optional[list[Worker]] = None) -> list[RosterGroup]:
        """Group carpenters under their leader, then the unassigned ones.

        Carpenters whose leader id points at a missing worker count as
        unassigned. The unassigned group is omitted when empty.
        """
        workers = workers if workers is not None else self._repository.list_workers()
        leaders = [w for w in workers if w.role == ROLE_PROJECT_LEADER]
        leader_ids = {leader.worker_id for leader in leaders}

        groups = [
            RosterGroup(
                leader=leader,
                members=[
                    w
                    for w in workers
                    if w.role == ROLE_CARPENTER and w.project_leader_id == leader.worker_id
                ],
            )
            for leader in leaders
        ]
        unassigned = [
            w
            for w in workers
            if w.role == ROLE_CARPENTER and w.project_leader_id not in leader_ids
        ]
        if unassigned:
            groups.append(RosterGroup(leader=None, members=unassigned))
        return groups

    def board_order(self, workers: Optional[list[Worker]] = None) -> list[Worker]:
        """Flatten the roster into calendar rows: each leader, then their team."""
        rows: list[Worker] = []
        for group in self.roster(workers):
            if group.leader is not None:
                rows.append(group.leader)
            rows.extend(group.members)
        return rows
