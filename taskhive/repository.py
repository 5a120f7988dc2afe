"""Persistence of tasks and their last run times in a key/value store."""

from __future__ import annotations

import re
from datetime import datetime, timezone

from taskhive.storage import Store
from taskhive.task import Task

_TASK_PREFIX = "task:"
_LAST_RUN_PREFIX = "lastrun:"
_TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
_UNIX_SECONDS = re.compile(r"-?\d+")


class TaskRepository:
    """Reads and writes tasks through a Store."""

    def __init__(self, store: Store) -> None:
        self.store = store

    def save_task(self, task: Task) -> None:
        """Store ``task`` under its id, replacing any earlier version."""
        self.store.set(_TASK_PREFIX + task.id, task.to_json())

    def get_task(self, task_id: str) -> Task:
        """Load the task with ``task_id``.

        Raises KeyNotFoundError if it does not exist and ValueError if the
        stored data cannot be parsed.
        """
        return Task.from_json(self.store.get(_TASK_PREFIX + task_id))

    def update_task(self, task_id: str, task: Task) -> None:
        """Replace title, description and interval of an existing task."""
        existing = self.get_task(task_id)
        existing.title = task.title
        existing.description = task.description
        existing.interval = task.interval
        self.save_task(existing)

    def delete_task(self, task_id: str) -> None:
        """Remove the task with ``task_id``."""
        self.store.delete(_TASK_PREFIX + task_id)

    def get_all_tasks(self) -> list[Task]:
        """Return every stored task; entries that cannot be read are skipped."""
        tasks = []
        for key in self.store.keys(_TASK_PREFIX + "*"):
            try:
                tasks.append(self.get_task(key[len(_TASK_PREFIX):]))
            except (KeyError, ValueError):
                continue
        return tasks

    def get_task_last_run_time(self, task_id: str) -> datetime:
        """Return when ``task_id`` last ran, as an aware UTC datetime.

        Raises KeyNotFoundError if no run was recorded and ValueError if the
        recorded value is malformed.
        """
        text = self.store.get(_LAST_RUN_PREFIX + task_id).strip()
        if _UNIX_SECONDS.fullmatch(text):
            return datetime.fromtimestamp(int(text), tz=timezone.utc)
        return datetime.strptime(text, _TIME_FORMAT).replace(tzinfo=timezone.utc)

    def set_task_last_run_time(self, task_id: str, when: datetime) -> None:
        """Record ``when`` as the last run time of ``task_id`` (whole seconds)."""
        self.store.set(_LAST_RUN_PREFIX + task_id, int(when.timestamp()))