from __future__ import annotations

from dataclasses import replace

import pytest

from prosjektstyring.repository.data_repository import DataRepository
from prosjektstyring.services.project_service import (
    AssignmentNotFoundError,
    ProjectNotFoundError,
    ProjectService,
    ProjectValidationError,
    SystemProjectLockedError,
)
from prosjektstyring.utils.config import get_settings


def _build_test_setup(tmp_path) -> tuple[ProjectService, DataRepository]:
    get_settings.cache_clear()
    settings = replace(get_settings(), database_path=tmp_path / "projects.db")
    repository = DataRepository(settings)
    repository.initialize_database()
    repository.seed_system_projects()
    return ProjectService(repository=repository, settings=settings), repository


def _system_project(repository: DataRepository, project_type: str = "vacation"):
    return next(p for p in repository.list_projects() if p.is_system and p.project_type == project_type)


def test_create_project_applies_defaults(tmp_path) -> None:
    service, _ = _build_test_setup(tmp_path)

    project = service.create_project(name="  Kjøkken  ", amount=1000)

    assert project.name == "Kjøkken"
    assert project.status == "active"
    assert project.color == "#3B82F6"
    assert project.is_system is False
    assert service.get_project(project.project_id) == project


def test_create_project_validation(tmp_path) -> None:
    service, repository = _build_test_setup(tmp_path)
    carpenter = repository.create_worker("Ola", "tømrer")

    with pytest.raises(ProjectValidationError):
        service.create_project(name="Bad", a_konto_percent=120)
    with pytest.raises(ProjectValidationError):
        service.create_project(name="Bad", billing_type="fastpris")
    with pytest.raises(ProjectValidationError):
        service.create_project(name="Bad", project_leader_id=carpenter.worker_id)


def test_complete_and_reopen_project(tmp_path) -> None:
    service, _ = _build_test_setup(tmp_path)
    project = service.create_project(name="Bad")

    assert service.complete_project(project.project_id).status == "completed"
    assert [p.project_id for p in service.list_projects(status="completed")] == [project.project_id]
    assert service.reopen_project(project.project_id).status == "active"


def test_update_project_rejects_unknown_fields(tmp_path) -> None:
    service, _ = _build_test_setup(tmp_path)
    project = service.create_project(name="Bad")

    with pytest.raises(ProjectValidationError):
        service.update_project(project.project_id, {"is_system": True})

    updated = service.update_project(project.project_id, {"amount": 5000.0, "color": "#EF4444"})
    assert updated.amount == 5000.0
    assert updated.color == "#EF4444"


def test_system_projects_are_locked(tmp_path) -> None:
    service, repository = _build_test_setup(tmp_path)
    vacation = _system_project(repository)

    with pytest.raises(SystemProjectLockedError):
        service.update_project(vacation.project_id, {"name": "Fri"})
    with pytest.raises(SystemProjectLockedError):
        service.complete_project(vacation.project_id)
    with pytest.raises(SystemProjectLockedError):
        service.delete_project(vacation.project_id)


def test_missing_project_raises_not_found(tmp_path) -> None:
    service, _ = _build_test_setup(tmp_path)
    with pytest.raises(ProjectNotFoundError):
        service.delete_project("missing")


def test_create_assignment_requires_existing_references(tmp_path) -> None:
    service, repository = _build_test_setup(tmp_path)
    worker = repository.create_worker("Ola", "tømrer")
    project = service.create_project(name="Bad")

    with pytest.raises(ProjectValidationError):
        service.create_assignment(
            project_id=project.project_id,
            worker_id="missing",
            start_date="2024-01-01",
            end_date="2024-01-02",
        )
    with pytest.raises(ProjectValidationError):
        service.create_assignment(
            project_id=project.project_id,
            worker_id=worker.worker_id,
            start_date="2024-01-05",
            end_date="2024-01-02",
        )


def test_move_keeps_length_and_can_change_worker(tmp_path) -> None:
    service, repository = _build_test_setup(tmp_path)
    ola = repository.create_worker("Ola", "tømrer")
    per = repository.create_worker("Per", "tømrer")
    project = service.create_project(name="Bad")
    assignment = service.create_assignment(
        project_id=project.project_id,
        worker_id=ola.worker_id,
        start_date="2024-01-29",
        end_date="2024-02-02",
    )

    moved = service.move_assignment(
        assignment.assignment_id,
        start_date="2024-02-26",
        worker_id=per.worker_id,
    )

    assert (moved.start_date, moved.end_date) == ("2024-02-26", "2024-03-01")
    assert moved.worker_id == per.worker_id


def test_resize_assignment(tmp_path) -> None:
    service, repository = _build_test_setup(tmp_path)
    ola = repository.create_worker("Ola", "tømrer")
    project = service.create_project(name="Bad")
    assignment = service.create_assignment(
        project_id=project.project_id,
        worker_id=ola.worker_id,
        start_date="2024-01-01",
        end_date="2024-01-05",
    )

    resized = service.resize_assignment(assignment.assignment_id, end_date="2024-01-12")
    assert (resized.start_date, resized.end_date) == ("2024-01-01", "2024-01-12")

    with pytest.raises(ProjectValidationError):
        service.resize_assignment(assignment.assignment_id, start_date="2024-01-20")
    with pytest.raises(ProjectValidationError):
        service.resize_assignment(assignment.assignment_id)


def test_deleting_last_assignment_can_remove_project(tmp_path) -> None:
    service, repository = _build_test_setup(tmp_path)
    ola = repository.create_worker("Ola", "tømrer")
    project = service.create_project(name="Bad")
    first = service.create_assignment(
        project_id=project.project_id,
        worker_id=ola.worker_id,
        start_date="2024-01-01",
        end_date="2024-01-05",
    )
    second = service.create_assignment(
        project_id=project.project_id,
        worker_id=ola.worker_id,
        start_date="2024-01-08",
        end_date="2024-01-09",
    )

    assert service.delete_assignment(first.assignment_id, delete_orphan_project=True) is False
    assert service.get_project(project.project_id) is not None

    assert service.delete_assignment(second.assignment_id, delete_orphan_project=True) is True
    with pytest.raises(ProjectNotFoundError):
        service.get_project(project.project_id)


def test_orphaned_project_kept_by_default(tmp_path) -> None:
    service, repository = _build_test_setup(tmp_path)
    ola = repository.create_worker("Ola", "tømrer")
    project = service.create_project(name="Bad")
    assignment = service.create_assignment(
        project_id=project.project_id,
        worker_id=ola.worker_id,
        start_date="2024-01-01",
        end_date="2024-01-05",
    )

    assert service.delete_assignment(assignment.assignment_id) is False
    assert service.get_project(project.project_id).project_id == project.project_id


def test_system_project_survives_last_absence_removal(tmp_path) -> None:
    service, repository = _build_test_setup(tmp_path)
    ola = repository.create_worker("Ola", "tømrer")
    vacation = _system_project(repository)
    absence = service.create_assignment(
        project_id=vacation.project_id,
        worker_id=ola.worker_id,
        start_date="2024-07-01",
        end_date="2024-07-19",
    )

    assert service.delete_assignment(absence.assignment_id, delete_orphan_project=True) is False
    assert service.get_project(vacation.project_id).is_system


def test_missing_assignment_raises_not_found(tmp_path) -> None:
    service, _ = _build_test_setup(tmp_path)
    with pytest.raises(AssignmentNotFoundError):
        service.delete_assignment("missing")
    with pytest.raises(AssignmentNotFoundError):
        service.move_assignment("missing", start_date="2024-01-01")
