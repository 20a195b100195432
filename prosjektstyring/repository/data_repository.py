"""Repository layer responsible for all database access."""

from __future__ import annotations

import sqlite3
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional
from uuid import uuid4

from prosjektstyring.domain.models import (
    ROLE_CARPENTER,
    ROLE_PROJECT_LEADER,
    Assignment,
    Project,
    Worker,
)
from prosjektstyring.utils.config import Settings, get_settings
from prosjektstyring.utils.logger import get_logger


logger = get_logger(__name__)


class RepositoryError(Exception):
    """Raised when a storage operation fails."""


class RecordNotFoundError(RepositoryError):
    """Raised when an update or delete targets a missing row."""


def _new_id() -> str:
    return uuid4().hex


def _row_to_worker(row: sqlite3.Row) -> Worker:
    return Worker(
        worker_id=str(row["id"]),
        name=str(row["name"]),
        role=str(row["role"]),
        project_leader_id=(
            str(row["project_leader_id"]) if row["project_leader_id"] is not None else None
        ),
    )


def _row_to_project(row: sqlite3.Row) -> Project:
    return Project(
        project_id=str(row["id"]),
        name=str(row["name"]),
        description=str(row["description"] or ""),
        color=str(row["color"]),
        amount=float(row["amount"]),
        a_konto_percent=float(row["a_konto_percent"]),
        billing_type=str(row["billing_type"]),
        status=str(row["status"]),
        project_type=str(row["project_type"]),
        is_system=bool(row["is_system"]),
        project_leader_id=(
            str(row["project_leader_id"]) if row["project_leader_id"] is not None else None
        ),
        created_at=str(row["created_at"]),
    )


def _row_to_assignment(row: sqlite3.Row) -> Assignment:
    return Assignment(
        assignment_id=str(row["id"]),
        project_id=str(row["project_id"]),
        worker_id=str(row["worker_id"]),
        start_date=str(row["start_date"]),
        end_date=str(row["end_date"]),
    )


def _project_params(project: Project) -> tuple:
    return (
        project.name,
        project.description,
        project.color,
        project.amount,
        project.a_konto_percent,
        project.billing_type,
        project.status,
        project.project_type,
        1 if project.is_system else 0,
        project.project_leader_id,
    )


class DataRepository:
    """Encapsulates SQLite access so business logic stays storage-agnostic."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._db_path)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON;")
        return connection

    def initialize_database(self) -> None:
        """Create all persistence artifacts before API startup."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Workers (
                        id TEXT PRIMARY KEY,
                        name TEXT NOT NULL,
                        role TEXT NOT NULL,
                        project_leader_id TEXT,
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                        FOREIGN KEY (project_leader_id) REFERENCES Workers(id)
                            ON DELETE SET NULL
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Projects (
                        id TEXT PRIMARY KEY,
                        name TEXT NOT NULL,
                        description TEXT NOT NULL DEFAULT '',
                        color TEXT NOT NULL,
                        amount REAL NOT NULL DEFAULT 0 CHECK (amount >= 0),
                        a_konto_percent REAL NOT NULL DEFAULT 0
                            CHECK (a_konto_percent BETWEEN 0 AND 100),
                        billing_type TEXT NOT NULL DEFAULT 'tilbud',
                        status TEXT NOT NULL DEFAULT 'active',
                        project_type TEXT NOT NULL DEFAULT 'regular',
                        is_system INTEGER NOT NULL DEFAULT 0 CHECK (is_system IN (0,1)),
                        project_leader_id TEXT,
                        created_at TEXT NOT NULL,
                        FOREIGN KEY (project_leader_id) REFERENCES Workers(id)
                            ON DELETE SET NULL
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Assignments (
                        id TEXT PRIMARY KEY,
                        project_id TEXT NOT NULL,
                        worker_id TEXT NOT NULL,
                        start_date TEXT NOT NULL,
                        end_date TEXT NOT NULL,
                        CHECK (start_date <= end_date),
                        FOREIGN KEY (project_id) REFERENCES Projects(id) ON DELETE CASCADE,
                        FOREIGN KEY (worker_id) REFERENCES Workers(id) ON DELETE CASCADE
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_assignments_worker_dates
                    ON Assignments(worker_id, start_date, end_date);
                    """
                )
                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_assignments_project
                    ON Assignments(project_id);
                    """
                )
                conn.commit()
            logger.info("Database initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise RepositoryError(f"Database initialization failed: {exc}") from exc

    def seed_system_projects(self) -> int:
        """Insert the built-in absence projects that are missing."""
        created = 0
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                for name, project_type, color in self._settings.system_project_names:
                    cursor.execute(
                        "SELECT COUNT(*) AS count FROM Projects WHERE is_system = 1 AND project_type = ?;",
                        (project_type,),
                    )
                    if int(cursor.fetchone()["count"]) > 0:
                        continue
                    cursor.execute(
                        """
                        INSERT INTO Projects (
                            id, name, description, color, amount, a_konto_percent,
                            billing_type, status, project_type, is_system,
                            project_leader_id, created_at
                        )
                        VALUES (?, ?, '', ?, 0, 0, 'tilbud', 'active', ?, 1, NULL, ?);
                        """,
                        (_new_id(), name, color, project_type, _utc_now()),
                    )
                    created += 1
                conn.commit()
        except sqlite3.Error as exc:
            raise RepositoryError(f"System project seeding failed: {exc}") from exc
        if created:
            logger.info("Seeded %s system projects", created)
        return created

    def seed_demo_data_if_empty(self) -> int:
        """Seed a small roster and schedule only when no workers exist."""
        if self.list_workers():
            logger.info("Workers already present; skipping demo seed")
            return 0

        monday = date.today() - timedelta(days=date.today().weekday())

        def day(offset: int) -> str:
            return (monday + timedelta(days=offset)).isoformat()

        leader = self.create_worker("Kari Nordmann", ROLE_PROJECT_LEADER)
        carpenter_a = self.create_worker("Ola Hansen", ROLE_CARPENTER, leader.worker_id)
        carpenter_b = self.create_worker("Per Olsen", ROLE_CARPENTER, leader.worker_id)
        loose = self.create_worker("Lise Berg", ROLE_CARPENTER)

        kitchen = self.create_project(
            name="Kjøkken Storgata 4",
            color="#EF4444",
            amount=450000.0,
            project_leader_id=leader.worker_id,
        )
        bathroom = self.create_project(
            name="Bad Parkveien 12",
            color="#22C55E",
            amount=180000.0,
            billing_type="timer_materiell",
            project_leader_id=leader.worker_id,
        )
        vacation = next(
            (p for p in self.list_projects() if p.is_system and p.project_type == "vacation"),
            None,
        )

        rows = [
            (kitchen.project_id, carpenter_a.worker_id, day(0), day(11)),
            (bathroom.project_id, carpenter_a.worker_id, day(7), day(18)),
            (kitchen.project_id, carpenter_b.worker_id, day(0), day(4)),
            (bathroom.project_id, loose.worker_id, day(14), day(25)),
        ]
        if vacation is not None:
            rows.append((vacation.project_id, carpenter_b.worker_id, day(7), day(11)))
        for project_id, worker_id, start, end in rows:
            self.create_assignment(project_id, worker_id, start, end)

        seeded = 4 + 2 + len(rows)
        logger.info("Demo seed completed with %s records", seeded)
        return seeded

    # ----- workers -----

    def create_worker(
        self,
        name: str,
        role: str,
        project_leader_id: Optional[str] = None,
    ) -> Worker:
        worker = Worker(
            worker_id=_new_id(),
            name=name,
            role=role,
            project_leader_id=project_leader_id,
        )
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO Workers (id, name, role, project_leader_id)
                    VALUES (?, ?, ?, ?);
                    """,
                    (worker.worker_id, worker.name, worker.role, worker.project_leader_id),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise RepositoryError(f"Could not create worker: {exc}") from exc
        return worker

    def get_worker(self, worker_id: str) -> Optional[Worker]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT id, name, role, project_leader_id FROM Workers WHERE id = ?;",
                (worker_id,),
            )
            row = cursor.fetchone()
            if row is None:
                return None
            return _row_to_worker(row)

    def list_workers(self) -> List[Worker]:
        """Return all workers in creation order."""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT id, name, role, project_leader_id
                FROM Workers
                ORDER BY created_at ASC, rowid ASC;
                """
            )
            return [_row_to_worker(row) for row in cursor.fetchall()]

    def update_worker(self, worker: Worker) -> Worker:
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    UPDATE Workers
                    SET name = ?, role = ?, project_leader_id = ?
                    WHERE id = ?;
                    """,
                    (worker.name, worker.role, worker.project_leader_id, worker.worker_id),
                )
                conn.commit()
                if cursor.rowcount == 0:
                    raise RecordNotFoundError(f"Worker {worker.worker_id} not found")
        except sqlite3.Error as exc:
            raise RepositoryError(f"Could not update worker: {exc}") from exc
        return worker

    def delete_worker(self, worker_id: str) -> None:
        """Delete a worker; their assignments go with them."""
        self._delete("Workers", worker_id, "Worker")

    # ----- projects -----

    def create_project(
        self,
        name: str,
        color: str,
        amount: float = 0.0,
        a_konto_percent: float = 0.0,
        billing_type: str = "tilbud",
        status: str = "active",
        project_type: str = "regular",
        description: str = "",
        project_leader_id: Optional[str] = None,
        is_system: bool = False,
    ) -> Project:
        project = Project(
            project_id=_new_id(),
            name=name,
            description=description,
            color=color,
            amount=float(amount),
            a_konto_percent=float(a_konto_percent),
            billing_type=billing_type,
            status=status,
            project_type=project_type,
            is_system=is_system,
            project_leader_id=project_leader_id,
            created_at=_utc_now(),
        )
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO Projects (
                        name, description, color, amount, a_konto_percent,
                        billing_type, status, project_type, is_system,
                        project_leader_id, id, created_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
                    """,
                    _project_params(project) + (project.project_id, project.created_at),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise RepositoryError(f"Could not create project: {exc}") from exc
        return project

    def get_project(self, project_id: str) -> Optional[Project]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM Projects WHERE id = ?;", (project_id,))
            row = cursor.fetchone()
            if row is None:
                return None
            return _row_to_project(row)

    def list_projects(self, status: Optional[str] = None) -> List[Project]:
        """Return projects, optionally filtered by status, oldest first."""
        with self._connect() as conn:
            cursor = conn.cursor()
            if status is None:
                cursor.execute("SELECT * FROM Projects ORDER BY created_at ASC, rowid ASC;")
            else:
                cursor.execute(
                    "SELECT * FROM Projects WHERE status = ? ORDER BY created_at ASC, rowid ASC;",
                    (status,),
                )
            return [_row_to_project(row) for row in cursor.fetchall()]

    def update_project(self, project: Project) -> Project:
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    UPDATE Projects
                    SET name = ?, description = ?, color = ?, amount = ?,
                        a_konto_percent = ?, billing_type = ?, status = ?,
                        project_type = ?, is_system = ?, project_leader_id = ?
                    WHERE id = ?;
                    """,
                    _project_params(project) + (project.project_id,),
                )
                conn.commit()
                if cursor.rowcount == 0:
                    raise RecordNotFoundError(f"Project {project.project_id} not found")
        except sqlite3.Error as exc:
            raise RepositoryError(f"Could not update project: {exc}") from exc
        return project

    def delete_project(self, project_id: str) -> None:
        """Delete a project and every assignment on it."""
        self._delete("Projects", project_id, "Project")

    # ----- assignments -----

    def create_assignment(
        self,
        project_id: str,
        worker_id: str,
        start_date: str,
        end_date: str,
    ) -> Assignment:
        assignment = Assignment(
            assignment_id=_new_id(),
            project_id=project_id,
            worker_id=worker_id,
            start_date=start_date,
            end_date=end_date,
        )
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO Assignments (id, project_id, worker_id, start_date, end_date)
                    VALUES (?, ?, ?, ?, ?);
                    """,
                    (
                        assignment.assignment_id,
                        assignment.project_id,
                        assignment.worker_id,
                        assignment.start_date,
                        assignment.end_date,
                    ),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise RepositoryError(f"Could not create assignment: {exc}") from exc
        return assignment

    def get_assignment(self, assignment_id: str) -> Optional[Assignment]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT id, project_id, worker_id, start_date, end_date
                FROM Assignments
                WHERE id = ?;
                """,
                (assignment_id,),
            )
            row = cursor.fetchone()
            if row is None:
                return None
            return _row_to_assignment(row)

    def list_assignments(
        self,
        worker_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> List[Assignment]:
        """Return assignments in insertion order, optionally filtered."""
        clauses = []
        params: list[str] = []
        if worker_id is not None:
            clauses.append("worker_id = ?")
            params.append(worker_id)
        if project_id is not None:
            clauses.append("project_id = ?")
            params.append(project_id)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT id, project_id, worker_id, start_date, end_date
                FROM Assignments
                {where}
                ORDER BY rowid ASC;
                """,
                tuple(params),
            )
            return [_row_to_assignment(row) for row in cursor.fetchall()]

    def count_assignments(self, project_id: str) -> int:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT COUNT(*) AS count FROM Assignments WHERE project_id = ?;",
                (project_id,),
            )
            return int(cursor.fetchone()["count"])

    def update_assignment(self, assignment: Assignment) -> Assignment:
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    UPDATE Assignments
                    SET project_id = ?, worker_id = ?, start_date = ?, end_date = ?
                    WHERE id = ?;
                    """,
                    (
                        assignment.project_id,
                        assignment.worker_id,
                        assignment.start_date,
                        assignment.end_date,
                        assignment.assignment_id,
                    ),
                )
                conn.commit()
                if cursor.rowcount == 0:
                    raise RecordNotFoundError(f"Assignment {assignment.assignment_id} not found")
        except sqlite3.Error as exc:
            raise RepositoryError(f"Could not update assignment: {exc}") from exc
        return assignment

    def delete_assignment(self, assignment_id: str) -> None:
        self._delete("Assignments", assignment_id, "Assignment")

    def _delete(self, table: str, record_id: str, label: str) -> None:
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(f"DELETE FROM {table} WHERE id = ?;", (record_id,))
                conn.commit()
                if cursor.rowcount == 0:
                    raise RecordNotFoundError(f"{label} {record_id} not found")
        except sqlite3.Error as exc:
            raise RepositoryError(f"Could not delete {label.lower()}: {exc}") from exc
        logger.info("Deleted %s %s", label.lower(), record_id)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()
