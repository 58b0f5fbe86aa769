"""Storage backends for tasks and prayer requests."""
import abc
import itertools
import logging
import sqlite3
from pathlib import Path
from typing import Dict, List, Optional, Union

from taskboard.models import (
    Prayer,
    PrayerCreate,
    PrayerUpdate,
    Task,
    TaskCreate,
    TaskUpdate,
)

logger = logging.getLogger(__name__)


class Storage(abc.ABC):
    """Keyed collections of tasks and prayer requests.

    Every method returns copies; changing a returned record never changes
    what is stored. Identifiers are per collection and never reused.
    """

    @abc.abstractmethod
    def list_tasks(self) -> List[Task]:
        """All tasks in insertion order."""

    @abc.abstractmethod
    def get_task(self, task_id: int) -> Optional[Task]:
        """The task with ``task_id`` or None."""

    @abc.abstractmethod
    def create_task(self, task: TaskCreate) -> Task:
        """Store a new task under a fresh identifier."""

    @abc.abstractmethod
    def update_task(self, task_id: int, updates: TaskUpdate) -> Optional[Task]:
        """Merge ``updates`` into the task; None if it does not exist."""

    @abc.abstractmethod
    def delete_task(self, task_id: int) -> bool:
        """Remove the task; False if it did not exist."""

    @abc.abstractmethod
    def list_prayers(self) -> List[Prayer]:
        """All prayer requests in insertion order."""

    @abc.abstractmethod
    def get_prayer(self, prayer_id: int) -> Optional[Prayer]:
        """The prayer request with ``prayer_id`` or None."""

    @abc.abstractmethod
    def create_prayer(self, prayer: PrayerCreate) -> Prayer:
        """Store a new prayer request under a fresh identifier."""

    @abc.abstractmethod
    def update_prayer(self, prayer_id: int,
                      updates: PrayerUpdate) -> Optional[Prayer]:
        """Merge ``updates`` into the prayer request.

        Raises pydantic.ValidationError if the merged record is invalid.
        """

    @abc.abstractmethod
    def delete_prayer(self, prayer_id: int) -> bool:
        """Remove the prayer request; False if it did not exist."""

    def counts(self) -> Dict[str, int]:
        return {
            "tasks": len(self.list_tasks()),
            "prayers": len(self.list_prayers()),
        }

    def close(self) -> None:
        """Release backend resources."""


class MemStorage(Storage):
    """Volatile storage backed by plain dicts."""

    def __init__(self):
        """Initialize empty collections."""
        self.tasks: Dict[int, Task] = {}
        self.prayers: Dict[int, Prayer] = {}
        self._task_ids = itertools.count(1)
        self._prayer_ids = itertools.count(1)
        logger.info("In-memory storage initialized")

    def list_tasks(self) -> List[Task]:
        return [task.model_copy() for task in self.tasks.values()]

    def get_task(self, task_id: int) -> Optional[Task]:
        task = self.tasks.get(task_id)
        if task is None:
            logger.debug(f"Task {task_id} not found")
            return None
        return task.model_copy()

    def create_task(self, task: TaskCreate) -> Task:
        """
        Insert a validated task.

        Args:
            task: Validated creation payload

        Returns:
            The stored task including its new identifier
        """
        task_id = next(self._task_ids)
        stored = Task(id=task_id, **task.model_dump(exclude={"id"}))
        self.tasks[task_id] = stored
        logger.info(f"Created task {task_id}: {stored.title!r}")
        return stored.model_copy()

    def update_task(self, task_id: int, updates: TaskUpdate) -> Optional[Task]:
        """
        Merge the fields present in ``updates`` into an existing task.

        Args:
            task_id: Identifier of the task
            updates: Validated partial payload

        Returns:
            The merged task, or None if the task does not exist
        """
        existing = self.tasks.get(task_id)
        if existing is None:
            logger.warning(f"Update requested for non-existent task: {task_id}")
            return None

        changes = updates.changes()
        updated = existing.model_copy(update=changes)
        self.tasks[task_id] = updated
        if changes:
            logger.info(
                f"Updated task {task_id}: {', '.join(sorted(changes))}")
        return updated.model_copy()

    def delete_task(self, task_id: int) -> bool:
        if self.tasks.pop(task_id, None) is None:
            logger.warning(f"Attempt to delete non-existent task: {task_id}")
            return False
        logger.info(f"Deleted task {task_id}")
        return True

    def list_prayers(self) -> List[Prayer]:
        return [prayer.model_copy() for prayer in self.prayers.values()]

    def get_prayer(self, prayer_id: int) -> Optional[Prayer]:
        prayer = self.prayers.get(prayer_id)
        return prayer.model_copy() if prayer is not None else None

    def create_prayer(self, prayer: PrayerCreate) -> Prayer:
        prayer_id = next(self._prayer_ids)
        stored = Prayer(id=prayer_id, **prayer.model_dump(exclude={"id"}))
        self.prayers[prayer_id] = stored
        logger.info(
            f"Created prayer request {prayer_id} ({stored.prayer_type})")
        return stored.model_copy()

    def update_prayer(self, prayer_id: int,
                      updates: PrayerUpdate) -> Optional[Prayer]:
        existing = self.prayers.get(prayer_id)
        if existing is None:
            logger.warning(
                f"Update requested for non-existent prayer request: {prayer_id}")
            return None

        updated = updates.apply_to(existing)
        self.prayers[prayer_id] = updated
        logger.info(f"Updated prayer request {prayer_id}")
        return updated.model_copy()

    def delete_prayer(self, prayer_id: int) -> bool:
        if self.prayers.pop(prayer_id, None) is None:
            logger.warning(
                f"Attempt to delete non-existent prayer request: {prayer_id}")
            return False
        logger.info(f"Deleted prayer request {prayer_id}")
        return True


SCHEMA = """
CREATE TABLE IF NOT EXISTS tasks (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    title       TEXT    NOT NULL,
    description TEXT,
    due_date    TEXT,
    priority    INTEGER NOT NULL DEFAULT 1,
    category    TEXT    NOT NULL DEFAULT 'general',
    completed   INTEGER NOT NULL DEFAULT 0
);
CREATE TABLE IF NOT EXISTS prayers (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    full_name       TEXT    NOT NULL,
    prayer_type     TEXT    NOT NULL CHECK (prayer_type IN ('alive', 'deceased')),
    birth_year      INTEGER NOT NULL,
    address         TEXT,
    death_year      INTEGER,
    burial_location TEXT
);
"""

TASK_COLUMNS = ("title", "description", "due_date", "priority", "category",
                "completed")
PRAYER_COLUMNS = ("full_name", "prayer_type", "birth_year", "address",
                  "death_year", "burial_location")


class SqliteStorage(Storage):
    """Durable storage in a single SQLite file.

    AUTOINCREMENT keys keep deleted identifiers from being handed out again.
    """

    def __init__(self, path: Union[Path, str] = "taskboard.db"):
        self.path = str(path)
        self.conn = sqlite3.connect(
            self.path, isolation_level=None, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL;")
        self.conn.executescript(SCHEMA)
        logger.info(f"SQLite storage opened at {self.path}")

    def close(self) -> None:
        self.conn.close()
        logger.info(f"SQLite storage at {self.path} closed")

    def counts(self) -> Dict[str, int]:
        return {
            table: self.conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
            for table in ("tasks", "prayers")
        }

    # -------------------------
    # Row conversion
    # -------------------------
    @staticmethod
    def _task_values(task: TaskCreate) -> tuple:
        return (
            task.title,
            task.description,
            task.due_date.isoformat() if task.due_date else None,
            task.priority,
            task.category,
            int(task.completed),
        )

    @staticmethod
    def _prayer_values(prayer: PrayerCreate) -> tuple:
        return tuple(getattr(prayer, column) for column in PRAYER_COLUMNS)

    def _insert(self, table: str, columns: tuple, values: tuple) -> int:
        placeholders = ", ".join("?" for _ in columns)
        cur = self.conn.execute(
            f"INSERT INTO {table}({', '.join(columns)}) VALUES ({placeholders})",
            values,
        )
        return int(cur.lastrowid)

    def _replace(self, table: str, record_id: int, columns: tuple,
                 values: tuple) -> None:
        assignments = ", ".join(f"{column} = ?" for column in columns)
        self.conn.execute(
            f"UPDATE {table} SET {assignments} WHERE id = ?",
            values + (record_id,),
        )

    def _delete(self, table: str, record_id: int) -> bool:
        cur = self.conn.execute(f"DELETE FROM {table} WHERE id = ?",
                                (record_id,))
        return cur.rowcount > 0

    # -------------------------
    # Tasks
    # -------------------------
    def list_tasks(self) -> List[Task]:
        rows = self.conn.execute("SELECT * FROM tasks ORDER BY id").fetchall()
        return [Task.model_validate(dict(row)) for row in rows]

    def get_task(self, task_id: int) -> Optional[Task]:
        row = self.conn.execute("SELECT * FROM tasks WHERE id = ?",
                                (task_id,)).fetchone()
        return Task.model_validate(dict(row)) if row else None

    def create_task(self, task: TaskCreate) -> Task:
        task_id = self._insert("tasks", TASK_COLUMNS, self._task_values(task))
        logger.info(f"Created task {task_id}: {task.title!r}")
        return Task(id=task_id, **task.model_dump(exclude={"id"}))

    def update_task(self, task_id: int, updates: TaskUpdate) -> Optional[Task]:
        existing = self.get_task(task_id)
        if existing is None:
            logger.warning(f"Update requested for non-existent task: {task_id}")
            return None

        updated = existing.model_copy(update=updates.changes())
        self._replace("tasks", task_id, TASK_COLUMNS, self._task_values(updated))
        logger.info(f"Updated task {task_id}")
        return updated

    def delete_task(self, task_id: int) -> bool:
        deleted = self._delete("tasks", task_id)
        if deleted:
            logger.info(f"Deleted task {task_id}")
        else:
            logger.warning(f"Attempt to delete non-existent task: {task_id}")
        return deleted

    # -------------------------
    # Prayer requests
    # -------------------------
    def list_prayers(self) -> List[Prayer]:
        rows = self.conn.execute("SELECT * FROM prayers ORDER BY id").fetchall()
        return [Prayer.model_validate(dict(row)) for row in rows]

    def get_prayer(self, prayer_id: int) -> Optional[Prayer]:
        row = self.conn.execute("SELECT * FROM prayers WHERE id = ?",
                                (prayer_id,)).fetchone()
        return Prayer.model_validate(dict(row)) if row else None

    def create_prayer(self, prayer: PrayerCreate) -> Prayer:
        prayer_id = self._insert("prayers", PRAYER_COLUMNS,
                                 self._prayer_values(prayer))
        logger.info(
            f"Created prayer request {prayer_id} ({prayer.prayer_type})")
        return Prayer(id=prayer_id, **prayer.model_dump(exclude={"id"}))

    def update_prayer(self, prayer_id: int,
                      updates: PrayerUpdate) -> Optional[Prayer]:
        existing = self.get_prayer(prayer_id)
        if existing is None:
            logger.warning(
                f"Update requested for non-existent prayer request: {prayer_id}")
            return None

        updated = updates.apply_to(existing)
        self._replace("prayers", prayer_id, PRAYER_COLUMNS,
                      self._prayer_values(updated))
        logger.info(f"Updated prayer request {prayer_id}")
        return updated

    def delete_prayer(self, prayer_id: int) -> bool:
        deleted = self._delete("prayers", prayer_id)
        if deleted:
            logger.info(f"Deleted prayer request {prayer_id}")
        else:
            logger.warning(
                f"Attempt to delete non-existent prayer request: {prayer_id}")
        return deleted


def create_storage(config) -> Storage:
    """Build the backend named by ``config.storage``."""
    if config.storage == "sqlite":
        return SqliteStorage(config.db_path)
    return MemStorage()
