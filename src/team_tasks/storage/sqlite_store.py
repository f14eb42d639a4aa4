# src/team_tasks/storage/sqlite_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from pathlib import Path
from typing import Any

from ..core.errors import ConflictError
from ..core.models import Domain, Task, TaskPriority, TaskStatus, User, UserRole

logger = logging.getLogger(__name__)


class SqliteTeamStore:
    """
    SQLite TeamStore.

    The schema is intentionally simple and migration-safe:
    - create tables if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "team_tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            users, tasks = self.count_users(), self.count_tasks()
        except sqlite3.Error:
            users, tasks = -1, -1
        logger.info("SqliteTeamStore ready db=%s users=%s tasks=%s", self._db_path, users, tasks)

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    role TEXT NOT NULL,
                    preferred_domain TEXT
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS domains (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL UNIQUE,
                    description TEXT,
                    created_by INTEGER NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    description TEXT,
                    domain TEXT NOT NULL,
                    assigned_to INTEGER,
                    deadline_at REAL NOT NULL,
                    status TEXT NOT NULL DEFAULT 'pending',
                    priority TEXT NOT NULL DEFAULT 'medium',
                    created_by INTEGER NOT NULL,
                    created_at REAL NOT NULL,
                    completed_at REAL
                )
                """
            )

            # Migrations (safe): add missing task columns.
            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("SqliteTeamStore migration: added column tasks.%s", name)

            add_col("description", "TEXT")
            add_col("priority", "TEXT NOT NULL DEFAULT 'medium'")
            add_col("completed_at", "REAL")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_users_domain ON users(preferred_domain)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_domain ON tasks(domain)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_assigned ON tasks(assigned_to)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_status_deadline ON tasks(status, deadline_at)")

            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(
            id=int(row["id"]),
            name=str(row["name"] or ""),
            email=str(row["email"] or ""),
            password_hash=str(row["password_hash"] or ""),
            role=UserRole.parse(row["role"]) or UserRole.MEMBER,
            preferred_domain=row["preferred_domain"],
        )

    @staticmethod
    def _row_to_domain(row: sqlite3.Row) -> Domain:
        return Domain(
            id=int(row["id"]),
            name=str(row["name"]),
            description=row["description"],
            created_by=int(row["created_by"]),
        )

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            title=str(row["title"] or ""),
            description=row["description"],
            domain=str(row["domain"] or ""),
            assigned_to=int(row["assigned_to"]) if row["assigned_to"] is not None else None,
            deadline_at=float(row["deadline_at"] or 0.0),
            status=TaskStatus.from_db(row["status"]),
            priority=TaskPriority.from_db(row["priority"]),
            created_by=int(row["created_by"]),
            created_at=float(row["created_at"] or 0.0),
            completed_at=float(row["completed_at"]) if row["completed_at"] is not None else None,
        )

    def _fetch_one(self, sql: str, params: tuple[Any, ...]) -> sqlite3.Row | None:
        conn = self._get_conn()
        try:
            return conn.execute(sql, params).fetchone()
        finally:
            conn.close()

    def _fetch_all(self, sql: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        conn = self._get_conn()
        try:
            return conn.execute(sql, params).fetchall()
        finally:
            conn.close()

    # ---- users ----

    def get_user(self, user_id: int) -> User | None:
        row = self._fetch_one("SELECT * FROM users WHERE id = ?", (int(user_id),))
        return self._row_to_user(row) if row else None

    def get_user_by_email(self, email: str) -> User | None:
        key = (email or "").strip().lower()
        row = self._fetch_one("SELECT * FROM users WHERE email = ?", (key,))
        return self._row_to_user(row) if row else None

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: UserRole,
        preferred_domain: str | None = None,
    ) -> User:
        key = email.strip().lower()
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            try:
                cur.execute(
                    """
                    INSERT INTO users(name, email, password_hash, role, preferred_domain)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (name.strip(), key, password_hash, role.value, preferred_domain),
                )
            except sqlite3.IntegrityError as e:
                raise ConflictError("User already exists", error_code="user_exists") from e
            conn.commit()
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for users insert")
            user_id = int(rowid)
            logger.debug("User added id=%s role=%s domain=%s", user_id, role.value, preferred_domain)
        finally:
            conn.close()

        user = self.get_user(user_id)
        if user is None:
            raise RuntimeError(f"User {user_id} vanished right after insert")
        return user

    def update_user_domain(self, user_id: int, domain: str) -> User | None:
        conn = self._get_conn()
        try:
            cur = conn.execute(
                "UPDATE users SET preferred_domain = ? WHERE id = ?",
                (domain, int(user_id)),
            )
            conn.commit()
            if cur.rowcount != 1:
                return None
        finally:
            conn.close()
        return self.get_user(user_id)

    def get_users_by_domain(self, domain: str) -> list[User]:
        rows = self._fetch_all(
            "SELECT * FROM users WHERE preferred_domain = ? ORDER BY id ASC",
            (domain,),
        )
        return [self._row_to_user(r) for r in rows]

    def list_users(self) -> list[User]:
        return [self._row_to_user(r) for r in self._fetch_all("SELECT * FROM users ORDER BY id ASC")]

    def count_users(self) -> int:
        row = self._fetch_one("SELECT COUNT(*) FROM users", ())
        return int(row[0]) if row else 0

    # ---- domains ----

    def list_domains(self) -> list[Domain]:
        return [self._row_to_domain(r) for r in self._fetch_all("SELECT * FROM domains ORDER BY id ASC")]

    def create_domain(self, *, name: str, description: str | None, created_by: int) -> Domain:
        clean = name.strip()
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            try:
                cur.execute(
                    "INSERT INTO domains(name, description, created_by) VALUES (?, ?, ?)",
                    (clean, description, int(created_by)),
                )
            except sqlite3.IntegrityError as e:
                raise ConflictError(f"Domain {clean!r} already exists", error_code="domain_exists") from e
            conn.commit()
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for domains insert")
            return Domain(id=int(rowid), name=clean, description=description, created_by=int(created_by))
        finally:
            conn.close()

    def get_domain_by_name(self, name: str) -> Domain | None:
        row = self._fetch_one("SELECT * FROM domains WHERE name = ?", (name,))
        return self._row_to_domain(row) if row else None

    # ---- tasks ----

    def list_tasks(self) -> list[Task]:
        rows = self._fetch_all("SELECT * FROM tasks ORDER BY created_at DESC, id DESC")
        return [self._row_to_task(r) for r in rows]

    def get_tasks_by_user(self, user_id: int) -> list[Task]:
        rows = self._fetch_all(
            "SELECT * FROM tasks WHERE assigned_to = ? ORDER BY created_at DESC, id DESC",
            (int(user_id),),
        )
        return [self._row_to_task(r) for r in rows]

    def get_tasks_by_domain(self, domain: str) -> list[Task]:
        rows = self._fetch_all(
            "SELECT * FROM tasks WHERE domain = ? ORDER BY created_at DESC, id DESC",
            (domain,),
        )
        return [self._row_to_task(r) for r in rows]

    def get_task(self, task_id: int) -> Task | None:
        row = self._fetch_one("SELECT * FROM tasks WHERE id = ?", (int(task_id),))
        return self._row_to_task(row) if row else None

    def create_task(
        self,
        *,
        title: str,
        domain: str,
        deadline_at: float,
        created_by: int,
        description: str | None = None,
        assigned_to: int | None = None,
        priority: TaskPriority = TaskPriority.MEDIUM,
        status: TaskStatus = TaskStatus.PENDING,
    ) -> Task:
        now = time.time()
        completed_at = now if status == TaskStatus.COMPLETED else None

        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO tasks(
                    title, description, domain, assigned_to, deadline_at,
                    status, priority, created_by, created_at, completed_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    title.strip(),
                    description,
                    domain,
                    assigned_to,
                    float(deadline_at),
                    status.value,
                    priority.value,
                    int(created_by),
                    now,
                    completed_at,
                ),
            )
            conn.commit()
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for tasks insert")
            task_id = int(rowid)
            logger.debug(
                "Task added id=%s domain=%s assigned_to=%s deadline_at=%s",
                task_id,
                domain,
                assigned_to,
                deadline_at,
            )
        finally:
            conn.close()

        task = self.get_task(task_id)
        if task is None:
            raise RuntimeError(f"Task {task_id} vanished right after insert")
        return task

    def update_task_status(
        self,
        task_id: int,
        status: TaskStatus,
        completed_at: float | None = None,
    ) -> Task | None:
        if status == TaskStatus.COMPLETED:
            done_at = completed_at if completed_at is not None else time.time()
        else:
            done_at = None

        conn = self._get_conn()
        try:
            cur = conn.execute(
                "UPDATE tasks SET status = ?, completed_at = ? WHERE id = ?",
                (status.value, done_at, int(task_id)),
            )
            conn.commit()
            if cur.rowcount != 1:
                return None
        finally:
            conn.close()
        return self.get_task(task_id)

    def update_task_assignment(self, task_id: int, user_id: int) -> Task | None:
        conn = self._get_conn()
        try:
            cur = conn.execute(
                "UPDATE tasks SET assigned_to = ? WHERE id = ?",
                (int(user_id), int(task_id)),
            )
            conn.commit()
            if cur.rowcount != 1:
                return None
        finally:
            conn.close()
        return self.get_task(task_id)

    def get_overdue_tasks(self, *, now_ts: float | None = None) -> list[Task]:
        if now_ts is None:
            now_ts = time.time()
        rows = self._fetch_all(
            """
            SELECT *
            FROM tasks
            WHERE status = 'pending'
              AND deadline_at < ?
            ORDER BY deadline_at ASC, id ASC
            """,
            (float(now_ts),),
        )
        return [self._row_to_task(r) for r in rows]

    def count_tasks(self) -> int:
        row = self._fetch_one("SELECT COUNT(*) FROM tasks", ())
        return int(row[0]) if row else 0
