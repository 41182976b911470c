"""In-memory task storage.

Tasks live in an ordered list for the lifetime of the process; nothing is
persisted. Every public method holds the store lock so a request's
read/modify/write sequence is atomic even when handlers run on a thread pool.
"""

import logging
import threading
from datetime import UTC, datetime
from enum import Enum
from typing import TypeVar

from task_api.errors import TaskNotFoundError, TaskValidationError
from task_api.models import (
    PriorityCounts,
    Task,
    TaskCreate,
    TaskPriority,
    TaskStats,
    TaskStatus,
    TaskUpdate,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Title and description are required"
INVALID_STATUS_MESSAGE = "Status must be: pending, in-progress, or completed"
INVALID_PRIORITY_MESSAGE = "Priority must be: low, medium, or high"

SEED_TASKS = (
    {
        "title": "Learn Node.js",
        "description": "Complete Node.js tutorial",
        "status": TaskStatus.PENDING,
        "priority": TaskPriority.HIGH,
    },
    {
        "title": "Build API",
        "description": "Create REST API for task management",
        "status": TaskStatus.IN_PROGRESS,
        "priority": TaskPriority.MEDIUM,
    },
)


E = TypeVar("E", bound=Enum)


def _parse_enum(enum_cls: type[E], value: str, message: str) -> E:
    try:
        return enum_cls(value.lower())
    except ValueError:
        raise TaskValidationError(message) from None


def _clean(value: str | None) -> str | None:
    """Trim a string field; empty and whitespace-only values count as omitted."""
    if value is None:
        return None
    return value.strip() or None


class TaskStore:
    """Ordered in-memory task storage with a monotonically increasing id counter."""

    def __init__(self, seed: bool = True) -> None:
        """Initialize the store, optionally with the two seed tasks."""
        self._lock = threading.Lock()
        self._seeded = seed
        self._tasks: list[Task] = []
        self._next_id = 1
        self._seed()

    def _seed(self) -> None:
        if not self._seeded:
            return
        now = datetime.now(UTC)
        for fields in SEED_TASKS:
            self._tasks.append(
                Task(id=self._next_id, created_at=now, updated_at=now, **fields)
            )
            self._next_id += 1

    def _index_of(self, task_id: int) -> int:
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                return index
        raise TaskNotFoundError()

    def list_all(
        self,
        status: str | None = None,
        priority: str | None = None,
    ) -> list[Task]:
        """Return tasks in insertion order, optionally filtered by status and priority."""
        with self._lock:
            tasks = list(self._tasks)
        if status:
            tasks = [t for t in tasks if t.status.value == status.lower()]
        if priority:
            tasks = [t for t in tasks if t.priority.value == priority.lower()]
        return tasks

    def get(self, task_id: int) -> Task:
        """Get a task by its ID. Raises TaskNotFoundError if absent."""
        with self._lock:
            return self._tasks[self._index_of(task_id)]

    def create(self, data: TaskCreate) -> Task:
        """Validate and append a new pending task, returning it."""
        title = _clean(data.title)
        description = _clean(data.description)
        if title is None or description is None:
            raise TaskValidationError(REQUIRED_FIELDS_MESSAGE)

        priority = TaskPriority.MEDIUM
        if data.priority is not None:
            priority = _parse_enum(TaskPriority, data.priority, INVALID_PRIORITY_MESSAGE)

        with self._lock:
            now = datetime.now(UTC)
            task = Task(
                id=self._next_id,
                title=title,
                description=description,
                status=TaskStatus.PENDING,
                priority=priority,
                created_at=now,
                updated_at=now,
            )
            self._next_id += 1
            self._tasks.append(task)
        logger.debug("Created task %d", task.id)
        return task

    def update(self, task_id: int, data: TaskUpdate) -> Task:
        """Apply the non-empty fields of ``data`` to a task and refresh updated_at."""
        with self._lock:
            index = self._index_of(task_id)

            changes: dict[str, object] = {}
            if data.status:
                changes["status"] = _parse_enum(
                    TaskStatus, data.status, INVALID_STATUS_MESSAGE
                )
            if data.priority:
                changes["priority"] = _parse_enum(
                    TaskPriority, data.priority, INVALID_PRIORITY_MESSAGE
                )
            if title := _clean(data.title):
                changes["title"] = title
            if description := _clean(data.description):
                changes["description"] = description
            changes["updated_at"] = datetime.now(UTC)

            updated_task = self._tasks[index].model_copy(update=changes)
            self._tasks[index] = updated_task
        logger.debug("Updated task %d: %s", task_id, sorted(changes))
        return updated_task

    def delete(self, task_id: int) -> Task:
        """Remove a task and return its last state. Raises TaskNotFoundError if absent."""
        with self._lock:
            task = self._tasks.pop(self._index_of(task_id))
        logger.debug("Deleted task %d", task_id)
        return task

    def stats(self) -> TaskStats:
        """Count tasks by status and by priority."""
        with self._lock:
            tasks = list(self._tasks)

        def count(attr: str, value: Enum) -> int:
            return sum(1 for t in tasks if getattr(t, attr) == value)

        return TaskStats(
            total=len(tasks),
            pending=count("status", TaskStatus.PENDING),
            in_progress=count("status", TaskStatus.IN_PROGRESS),
            completed=count("status", TaskStatus.COMPLETED),
            by_priority=PriorityCounts(
                high=count("priority", TaskPriority.HIGH),
                medium=count("priority", TaskPriority.MEDIUM),
                low=count("priority", TaskPriority.LOW),
            ),
        )

    def reset(self) -> None:
        """Restore the initial tasks and id counter. Useful for testing."""
        with self._lock:
            self._tasks.clear()
            self._next_id = 1
            self._seed()
