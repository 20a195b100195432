from __future__ import annotations

from dataclasses import replace

import pytest

from prosjektstyring.repository.data_repository import DataRepository
from prosjektstyring.services.staff_service import (
    StaffService,
    StaffValidationError,
    WorkerNotFoundError,
)
from prosjektstyring.utils.config import get_settings


def _build_service(tmp_path) -> StaffService:
    get_settings.cache_clear()
    settings = replace(get_settings(), database_path=tmp_path / "staff.db")
    repository = DataRepository(settings)
    repository.initialize_database()
    return StaffService(repository=repository, settings=settings)


def test_board_order_groups_carpenters_under_leaders(tmp_path) -> None:
    service = _build_service(tmp_path)
    loose = service.create_worker(name="Lise", role="tømrer")
    kari = service.create_worker(name="Kari", role="prosjektleder")
    ola = service.create_worker(name="Ola", role="tømrer", project_leader_id=kari.worker_id)
    nils = service.create_worker(name="Nils", role="prosjektleder")
    per = service.create_worker(name="Per", role="tømrer", project_leader_id=nils.worker_id)
    eva = service.create_worker(name="Eva", role="tømrer", project_leader_id=kari.worker_id)

    order = [w.name for w in service.board_order()]

    assert order == ["Kari", "Ola", "Eva", "Nils", "Per", "Lise"]
    groups = service.roster()
    assert [g.leader.name if g.leader else None for g in groups] == ["Kari", "Nils", None]
    assert groups[-1].members == [loose]
    assert ola in groups[0].members and eva in groups[0].members
    assert groups[1].members == [per]


def test_roster_without_unassigned_has_no_empty_group(tmp_path) -> None:
    service = _build_service(tmp_path)
    service.create_worker(name="Kari", role="prosjektleder")

    groups = service.roster()

    assert len(groups) == 1
    assert groups[0].members == []


def test_carpenter_with_deleted_leader_becomes_unassigned(tmp_path) -> None:
    service = _build_service(tmp_path)
    kari = service.create_worker(name="Kari", role="prosjektleder")
    ola = service.create_worker(name="Ola", role="tømrer", project_leader_id=kari.worker_id)

    service.delete_worker(kari.worker_id)

    assert [w.worker_id for w in service.board_order()] == [ola.worker_id]
    assert service.get_worker(ola.worker_id).project_leader_id is None


def test_create_worker_validation(tmp_path) -> None:
    service = _build_service(tmp_path)
    ola = service.create_worker(name="Ola", role="tømrer")

    with pytest.raises(StaffValidationError):
        service.create_worker(name="  ", role="tømrer")
    with pytest.raises(StaffValidationError):
        service.create_worker(name="Per", role="tømrer", project_leader_id=ola.worker_id)
    with pytest.raises(StaffValidationError):
        service.create_worker(name="Per", role="tømrer", project_leader_id="missing")


def test_update_worker_relinks_and_unlinks(tmp_path) -> None:
    service = _build_service(tmp_path)
    kari = service.create_worker(name="Kari", role="prosjektleder")
    ola = service.create_worker(name="Ola", role="tømrer")

    linked = service.update_worker(ola.worker_id, project_leader_id=kari.worker_id)
    assert linked.project_leader_id == kari.worker_id

    renamed = service.update_worker(ola.worker_id, name="Ola H.")
    assert renamed.project_leader_id == kari.worker_id

    unlinked = service.update_worker(ola.worker_id, project_leader_id=None)
    assert unlinked.project_leader_id is None


def test_promoting_carpenter_drops_leader_link(tmp_path) -> None:
    service = _build_service(tmp_path)
    kari = service.create_worker(name="Kari", role="prosjektleder")
    ola = service.create_worker(name="Ola", role="tømrer", project_leader_id=kari.worker_id)

    promoted = service.update_worker(ola.worker_id, role="prosjektleder")

    assert promoted.role == "prosjektleder"
    assert promoted.project_leader_id is None


def test_leader_with_team_cannot_change_role(tmp_path) -> None:
    service = _build_service(tmp_path)
    kari = service.create_worker(name="Kari", role="prosjektleder")
    service.create_worker(name="Ola", role="tømrer", project_leader_id=kari.worker_id)

    with pytest.raises(StaffValidationError):
        service.update_worker(kari.worker_id, role="tømrer")


def test_missing_worker_raises_not_found(tmp_path) -> None:
    service = _build_service(tmp_path)
    with pytest.raises(WorkerNotFoundError):
        service.get_worker("missing")
    with pytest.raises(WorkerNotFoundError):
        service.update_worker("missing", name="X")
    with pytest.raises(WorkerNotFoundError):
        service.delete_worker("missing")
