#!/usr/bin/env python3
"""Validate local Prosjektstyring environment readiness."""

from __future__ import annotations

import importlib
import shutil
import sys
import tempfile
from dataclasses import replace
from datetime import date
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from prosjektstyring.domain.lanes import compute_lanes
from prosjektstyring.domain.models import Interval
from prosjektstyring.repository.data_repository import DataRepository
from prosjektstyring.services.schedule_service import ScheduleService
from prosjektstyring.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="prosjekt-env-")

    # CHECK 1: Python version >= 3.11
    if sys.version_info >= (3, 11):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.11",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable
    package_specs = [
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
        ("pydantic", "pydantic"),
        ("httpx", "httpx"),
        ("pytest", "pytest"),
    ]
    from importlib.metadata import PackageNotFoundError, version

    import_errors: list[str] = []
    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
            version(dist_name)
        except (ImportError, PackageNotFoundError) as exc:
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    try:
        validation_settings = replace(
            get_settings(),
            database_path=Path(temp_dir) / "prosjekt_validation.db",
        )
        repository = DataRepository(validation_settings)

        # CHECK 3: Database initialization
        try:
            repository.initialize_database()
            if not repository.database_path.is_file():
                raise RuntimeError(f"no database file at {repository.database_path}")
            ok, line = _print_result("Database initialization", True)
        except Exception as exc:
            ok, line = _print_result("Database initialization", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 4: System absence projects, seeded once
        try:
            first = repository.seed_system_projects()
            second = repository.seed_system_projects()
            expected = len(validation_settings.system_project_names)
            if first != expected or second != 0:
                raise RuntimeError(f"expected {expected} then 0, got {first} then {second}")
            ok, line = _print_result("System projects", True, f": {first} seeded")
        except Exception as exc:
            ok, line = _print_result("System projects", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 5: Demo roster seeding
        try:
            seeded_demo = repository.seed_demo_data_if_empty()
            if seeded_demo <= 0:
                raise RuntimeError("demo seed inserted nothing")
            ok, line = _print_result("Demo data seeding", True, f": {seeded_demo} records")
        except Exception as exc:
            ok, line = _print_result("Demo data seeding", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 6: Lane packing
        try:
            lanes = compute_lanes(
                [
                    Interval("a", "2024-01-01", "2024-01-05"),
                    Interval("b", "2024-01-03", "2024-01-08"),
                    Interval("c", "2024-01-06", "2024-01-10"),
                ],
                "2024-01-01",
                "2024-01-31",
            )
            if [lanes[key].lane for key in "abc"] != [0, 1, 0] or lanes["a"].total_lanes != 2:
                raise RuntimeError(f"unexpected layout {lanes}")
            ok, line = _print_result("Lane packing", True)
        except Exception as exc:
            ok, line = _print_result("Lane packing", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 7: Schedule board over the seeded data
        try:
            schedule_service = ScheduleService(repository=repository, settings=validation_settings)
            window_start, window_end = schedule_service.week_window(date.today())
            board = schedule_service.schedule_board(window_start, window_end)
            bar_count = sum(len(row["bars"]) for row in board["rows"])
            ok, line = _print_result(
                "Schedule board",
                True,
                f": {len(board['rows'])} rows, {bar_count} bars",
            )
        except Exception as exc:
            ok, line = _print_result("Schedule board", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" Prosjektstyring Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
