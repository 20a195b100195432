"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    database_path: Path

    # Calendar view defaults
    schedule_weeks_to_show: int
    schedule_max_window_days: int

    # Seeding
    seed_demo_data: bool
    system_project_names: tuple[tuple[str, str, str], ...]

    # Validation
    worker_name_max_length: int
    project_name_max_length: int
    default_project_color: str


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process from environment variables."""
    database_path = os.environ.get("PROSJEKT_DB_PATH", "").strip()
    return Settings(
        app_name=os.environ.get("PROSJEKT_APP_NAME", "Prosjektstyring"),
        app_version=os.environ.get("PROSJEKT_APP_VERSION", "1.0.0"),
        log_level=os.environ.get("PROSJEKT_LOG_LEVEL", "INFO"),
        database_path=(
            Path(database_path)
            if database_path
            else PROJECT_ROOT / "data" / "prosjektstyring.db"
        ),
        schedule_weeks_to_show=_env_int("PROSJEKT_WEEKS_TO_SHOW", 12),
        schedule_max_window_days=_env_int("PROSJEKT_MAX_WINDOW_DAYS", 366),
        seed_demo_data=_env_bool("PROSJEKT_SEED_DEMO_DATA", False),
        # (name, project_type, color)
        system_project_names=(
            ("Sykdom", "sick_leave", "#9CA3AF"),
            ("Ferie", "vacation", "#FDE68A"),
        ),
        worker_name_max_length=120,
        project_name_max_length=200,
        default_project_color="#3B82F6",
    )
