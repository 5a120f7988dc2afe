"""Task management operations exposed to clients."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable

from taskhive.logs import Logger
from taskhive.repository import TaskRepository
from taskhive.task import Task


class LogFetchError(Exception):
    """Raised when task logs cannot be fetched."""


@dataclass(frozen=True)
class TaskLog:
    """One recorded execution outcome of a task."""

    time: str
    status: str
    message: str


def _interval(value: timedelta | float) -> timedelta:
    if isinstance(value, timedelta):
        return value
    return timedelta(seconds=value)


def _new_id() -> str:
    return str(uuid.uuid4())


class TaskService:
    """Creates, reads, updates and deletes tasks and reads their logs."""

    def __init__(
        self,
        logger: Logger,
        repository: TaskRepository,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self.logger = logger
        self.repository = repository
        self.id_factory = id_factory

    def create_task(self, title: str, description: str, interval: timedelta | float) -> str:
        """Store a new task and return its generated id."""
        task_id = self.id_factory()
        task = Task(
            id=task_id,
            title=title,
            description=description,
            interval=_interval(interval),
        )
        self.repository.save_task(task)
        return task_id

    def get_task(self, task_id: str) -> Task:
        """Return the task with ``task_id``."""
        return self.repository.get_task(task_id)

    def update_task(
        self, task_id: str, title: str, description: str, interval: timedelta | float
    ) -> bool:
        """Update an existing task; raises if it does not exist."""
        updated = Task(
            id=task_id,
            title=title,
            description=description,
            interval=_interval(interval),
        )
        self.repository.update_task(task_id, updated)
        return True

    def delete_task(self, task_id: str) -> bool:
        """Delete the task with ``task_id``."""
        self.repository.delete_task(task_id)
        return True

    def get_task_logs(self, task_id: str, limit: int) -> list[TaskLog]:
        """Return up to ``limit`` log entries of ``task_id``, newest first."""
        try:
            entries = self.logger.get_task_logs(task_id, limit)
        except Exception as err:
            raise LogFetchError(f"Failed to fetch logs: {err}") from err
        logs = []
        for entry in entries:
            try:
                fields = {name: entry[name] for name in ("time", "status", "message")}
            except (KeyError, TypeError) as err:
                raise LogFetchError(f"Failed to fetch logs: malformed entry {entry!r}") from err
            if not all(isinstance(value, str) for value in fields.values()):
                raise LogFetchError(f"Failed to fetch logs: malformed entry {entry!r}")
            logs.append(TaskLog(**fields))
        return logs