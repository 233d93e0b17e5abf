"""
Database layer for the application workflow engine.

Provides schema bootstrap and read-write access to jobs, applications and
their append-only note log, with per-operation connections and transaction
management.
"""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from models.application import Application, Job
from models.errors import (
    create_db_error,
    create_db_not_found_error,
    create_duplicate_application_error,
    create_not_found_error,
)
from models.status import ApplicationStatus, RoleCategory
from utils.validation import get_current_utc_timestamp

# Default database path relative to repository root
DEFAULT_DB_PATH = "data/ats.db"

# Keeps IN (...) lists under SQLite's bound-parameter limit
_IN_CHUNK_SIZE = 500

_APPLICATION_SELECT = """
    SELECT
        a.id,
        a.job_id,
        a.applicant_id,
        a.cover_letter,
        a.status,
        a.workflow_stage,
        a.submitted_at,
        a.last_updated,
        j.title AS job_title,
        j.role_category
    FROM applications a
    JOIN jobs j ON j.id = a.job_id
"""


def resolve_db_path(db_path: Optional[str] = None) -> Path:
    """
    Resolve the database path with support for overrides and defaults.

    Resolution order:
    1. Provided db_path parameter
    2. ATS_DB environment variable
    3. ATS_ROOT/data/ats.db
    4. Default path: data/ats.db

    Args:
        db_path: Optional database path override

    Returns:
        Resolved absolute Path to the database
    """
    if db_path is not None:
        path_str = db_path
    else:
        db_env = os.getenv("ATS_DB")
        if db_env:
            path_str = db_env
        else:
            root_env = os.getenv("ATS_ROOT")
            if root_env:
                return Path(root_env) / "data" / "ats.db"
            path_str = DEFAULT_DB_PATH

    path = Path(path_str)

    # If relative, resolve from repository root
    if not path.is_absolute():
        repo_root = Path(__file__).resolve().parents[1]  # db/ -> repo/
        path = repo_root / path

    return path


def ensure_parent_dirs(db_path: Path) -> None:
    """
    Ensure parent directories exist for the database file.

    Raises:
        ToolError: If directory creation fails
    """
    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise create_db_error(
            f"Failed to create parent directories: {str(e)}", retryable=False, original_error=e
        ) from e


def bootstrap_schema(conn: sqlite3.Connection) -> None:
    """
    Bootstrap all workflow tables and indexes if they don't exist.

    Creates:
    - jobs (role_category drives bot vs. admin routing)
    - applications (unique per applicant/job pair)
    - application_notes (append-only, ordered by id)
    - audit_logs (write sink for transition events)

    This operation is idempotent - safe to call on existing databases.

    Raises:
        ToolError: If schema creation fails
    """
    try:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS jobs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                department TEXT,
                role_category TEXT NOT NULL DEFAULT 'technical'
                    CHECK (role_category IN ('technical', 'non-technical')),
                is_active INTEGER NOT NULL DEFAULT 1,
                created_at TEXT NOT NULL
            )
        """)
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_jobs_role_category ON jobs(role_category)"
        )

        conn.execute("""
            CREATE TABLE IF NOT EXISTS applications (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                job_id INTEGER NOT NULL REFERENCES jobs(id),
                applicant_id TEXT NOT NULL,
                cover_letter TEXT,
                status TEXT NOT NULL DEFAULT 'pending',
                workflow_stage TEXT,
                submitted_at TEXT NOT NULL,
                last_updated TEXT NOT NULL,
                UNIQUE (applicant_id, job_id)
            )
        """)
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_applications_status ON applications(status)"
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_applications_job_id ON applications(job_id)"
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_applications_submitted_at "
            "ON applications(submitted_at)"
        )

        conn.execute("""
            CREATE TABLE IF NOT EXISTS application_notes (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                application_id INTEGER NOT NULL REFERENCES applications(id),
                text TEXT NOT NULL,
                added_by TEXT NOT NULL,
                added_at TEXT NOT NULL,
                processed_by TEXT,
                action_type TEXT
            )
        """)
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_application_notes_application_id "
            "ON application_notes(application_id)"
        )

        conn.execute("""
            CREATE TABLE IF NOT EXISTS audit_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                actor TEXT NOT NULL,
                action TEXT NOT NULL,
                resource_type TEXT NOT NULL,
                resource_id INTEGER NOT NULL,
                description TEXT NOT NULL,
                details_json TEXT NOT NULL DEFAULT '{}',
                timestamp TEXT NOT NULL
            )
        """)
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_audit_logs_resource "
            "ON audit_logs(resource_type, resource_id)"
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_audit_logs_timestamp ON audit_logs(timestamp)"
        )

    except sqlite3.Error as e:
        raise create_db_error(
            f"Schema bootstrap failed: {str(e)}", retryable=False, original_error=e
        ) from e


def initialize_database(db_path: Optional[str] = None) -> Path:
    """
    Create the database file (if needed) and bootstrap the schema.

    Args:
        db_path: Optional database path override

    Returns:
        Resolved absolute Path to the database

    Raises:
        ToolError: If directories or schema cannot be created
    """
    resolved_path = resolve_db_path(db_path)
    ensure_parent_dirs(resolved_path)

    conn = None
    try:
        conn = sqlite3.connect(str(resolved_path))
        bootstrap_schema(conn)
        conn.commit()
    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e
    finally:
        if conn is not None:
            conn.close()

    return resolved_path


def _chunks(values: List[Any], size: int = _IN_CHUNK_SIZE):
    for start in range(0, len(values), size):
        yield values[start : start + size]


class ApplicationStore:
    """
    Record store for applications and the jobs they reference.

    Every public method opens its own connection and commits (or rolls back)
    before returning, so a single store can be shared by the scheduler
    threads and tool handlers.

    Usage:
        store = ApplicationStore(db_path)
        apps = store.find_by_status_and_category(["pending"], RoleCategory.TECHNICAL)
        apps[0].status = ApplicationStatus.SHORTLISTED
        store.save(apps[0])
    """

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize store with database path.

        Args:
            db_path: Optional database path override
        """
        self.db_path = db_path
        self.resolved_path = resolve_db_path(db_path)

    @contextmanager
    def connect(self):
        """
        Open a read-write connection inside a transaction.

        Commits when the block exits normally, rolls back on any exception
        and always closes the connection.

        Yields:
            sqlite3.Connection: Database connection

        Raises:
            ToolError: If database file doesn't exist or a query fails
        """
        if not self.resolved_path.exists() or not self.resolved_path.is_file():
            raise create_db_not_found_error(str(self.resolved_path))

        try:
            conn = sqlite3.connect(str(self.resolved_path), timeout=30)
        except sqlite3.Error as e:
            raise create_db_error(str(e), retryable=True, original_error=e) from e

        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            yield conn
            conn.commit()
        except sqlite3.OperationalError as e:
            conn.rollback()
            # Locked databases are worth another attempt on the next tick
            raise create_db_error(str(e), retryable=True, original_error=e) from e
        except sqlite3.Error as e:
            conn.rollback()
            raise create_db_error(str(e), retryable=False, original_error=e) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    def create_job(
        self,
        title: str,
        role_category: RoleCategory,
        department: Optional[str] = None,
        is_active: bool = True,
        created_at: Optional[str] = None,
    ) -> Job:
        """Insert a job row and return it."""
        timestamp = created_at or get_current_utc_timestamp()
        with self.connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO jobs (title, department, role_category, is_active, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (title, department, RoleCategory(role_category).value, int(is_active), timestamp),
            )
            job_id = cursor.lastrowid

        return Job(
            id=job_id,
            title=title,
            department=department,
            role_category=role_category,
            is_active=is_active,
            created_at=timestamp,
        )

    def get_job(self, job_id: int) -> Optional[Job]:
        """Fetch a job by id, or None if it does not exist."""
        with self.connect() as conn:
            row = conn.execute(
                """
                SELECT id, title, department, role_category, is_active, created_at
                FROM jobs
                WHERE id = ?
                """,
                (job_id,),
            ).fetchone()

        if row is None:
            return None
        return Job.model_validate(dict(row))

    # ------------------------------------------------------------------
    # Applications
    # ------------------------------------------------------------------

    def create_application(
        self,
        job_id: int,
        applicant_id: str,
        cover_letter: Optional[str] = None,
        submitted_at: Optional[str] = None,
    ) -> Application:
        """
        Insert a new pending application.

        Raises:
            ToolError: DUPLICATE_APPLICATION if the applicant already applied
                for this job
        """
        timestamp = submitted_at or get_current_utc_timestamp()
        with self.connect() as conn:
            try:
                cursor = conn.execute(
                    """
                    INSERT INTO applications (
                        job_id, applicant_id, cover_letter, status,
                        submitted_at, last_updated
                    ) VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        job_id,
                        applicant_id,
                        cover_letter,
                        ApplicationStatus.PENDING.value,
                        timestamp,
                        timestamp,
                    ),
                )
            except sqlite3.IntegrityError as e:
                if "unique" in str(e).lower():
                    raise create_duplicate_application_error(applicant_id, job_id) from e
                raise create_db_error(str(e), retryable=False, original_error=e) from e

            application = self._fetch_application(conn, cursor.lastrowid)

        return application

    def get_application(self, application_id: int) -> Optional[Application]:
        """Fetch an application with its job fields and notes."""
        with self.connect() as conn:
            return self._fetch_application(conn, application_id)

    def find_by_status_and_category(
        self, statuses: Iterable[ApplicationStatus], role_category: RoleCategory
    ) -> List[Application]:
        """
        Query applications in any of ``statuses`` whose job has ``role_category``.

        Results are ordered by (submitted_at ASC, id ASC) so a processing pass
        handles the oldest submissions first.

        Args:
            statuses: Status values to match
            role_category: Job category to match

        Returns:
            List of applications with notes loaded
        """
        status_values = sorted({ApplicationStatus(s).value for s in statuses})
        if not status_values:
            return []

        placeholders = ",".join("?" * len(status_values))
        query = f"""
            {_APPLICATION_SELECT}
            WHERE a.status IN ({placeholders})
              AND j.role_category = ?
            ORDER BY a.submitted_at ASC, a.id ASC
        """

        with self.connect() as conn:
            rows = conn.execute(
                query, (*status_values, RoleCategory(role_category).value)
            ).fetchall()
            notes_by_app = self._fetch_notes(conn, [row["id"] for row in rows])

        return [
            self._row_to_application(row, notes_by_app.get(row["id"], [])) for row in rows
        ]

    def save(self, application: Application, timestamp: Optional[str] = None) -> Application:
        """
        Persist status, workflow stage and any newly appended notes.

        Existing notes are never updated or deleted. ``last_updated`` is
        refreshed on every save.

        Args:
            application: The mutated application record
            timestamp: Optional ISO 8601 timestamp for last_updated

        Returns:
            The same application with note ids and last_updated filled in

        Raises:
            ToolError: NOT_FOUND if the application row is gone, DB_ERROR on
                write failure
        """
        saved_at = timestamp or get_current_utc_timestamp()
        stage = application.workflow_stage.value if application.workflow_stage else None

        with self.connect() as conn:
            cursor = conn.execute(
                """
                UPDATE applications
                SET status = ?,
                    workflow_stage = ?,
                    last_updated = ?
                WHERE id = ?
                """,
                (ApplicationStatus(application.status).value, stage, saved_at, application.id),
            )

            if cursor.rowcount == 0:
                raise create_not_found_error("Application", application.id)

            for note in application.pending_notes():
                note_cursor = conn.execute(
                    """
                    INSERT INTO application_notes (
                        application_id, text, added_by, added_at, processed_by, action_type
                    ) VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        application.id,
                        note.text,
                        note.added_by,
                        note.added_at,
                        note.processed_by,
                        note.action_type.value if note.action_type else None,
                    ),
                )
                note.id = note_cursor.lastrowid

        application.last_updated = saved_at
        return application

    def stage_distribution(self, role_category: RoleCategory) -> Dict[str, int]:
        """
        Count applications per workflow position for one job category.

        The position is the Bot Mimic stage when set, otherwise the status.
        """
        with self.connect() as conn:
            rows = conn.execute(
                """
                SELECT COALESCE(a.workflow_stage, a.status) AS stage, COUNT(*) AS count
                FROM applications a
                JOIN jobs j ON j.id = a.job_id
                WHERE j.role_category = ?
                GROUP BY stage
                ORDER BY stage
                """,
                (RoleCategory(role_category).value,),
            ).fetchall()

        return {row["stage"]: row["count"] for row in rows}

    def count_by_category(self, role_category: RoleCategory) -> int:
        """Count all applications whose job has ``role_category``."""
        with self.connect() as conn:
            row = conn.execute(
                """
                SELECT COUNT(*) AS count
                FROM applications a
                JOIN jobs j ON j.id = a.job_id
                WHERE j.role_category = ?
                """,
                (RoleCategory(role_category).value,),
            ).fetchone()

        return row["count"]

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------

    def _fetch_application(
        self, conn: sqlite3.Connection, application_id: int
    ) -> Optional[Application]:
        row = conn.execute(
            f"{_APPLICATION_SELECT} WHERE a.id = ?", (application_id,)
        ).fetchone()
        if row is None:
            return None
        notes_by_app = self._fetch_notes(conn, [application_id])
        return self._row_to_application(row, notes_by_app.get(application_id, []))

    def _fetch_notes(
        self, conn: sqlite3.Connection, application_ids: List[int]
    ) -> Dict[int, List[Dict[str, Any]]]:
        notes_by_app: Dict[int, List[Dict[str, Any]]] = {}
        for chunk in _chunks(application_ids):
            placeholders = ",".join("?" * len(chunk))
            rows = conn.execute(
                f"""
                SELECT id, application_id, text, added_by, added_at, processed_by, action_type
                FROM application_notes
                WHERE application_id IN ({placeholders})
                ORDER BY id ASC
                """,
                chunk,
            ).fetchall()
            for row in rows:
                notes_by_app.setdefault(row["application_id"], []).append(dict(row))
        return notes_by_app

    @staticmethod
    def _row_to_application(row: sqlite3.Row, notes: List[Dict[str, Any]]) -> Application:
        data = dict(row)
        data["notes"] = notes
        return Application.model_validate(data)
