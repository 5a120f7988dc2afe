"""Recording and reading of task execution logs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable

from taskhive.storage import LogStore


def _rfc3339(moment: datetime) -> str:
    text = moment.astimezone().replace(microsecond=0).isoformat() if moment.tzinfo is None \
        else moment.replace(microsecond=0).isoformat()
    return text[:-6] + "Z" if text.endswith("+00:00") else text


def _now() -> datetime:
    return datetime.now().astimezone()


class Logger(ABC):
    """Interface for task execution logging."""

    @abstractmethod
    def log_task_execution(self, task_id: str, status: str, message: str) -> None: ...

    @abstractmethod
    def get_task_logs(self, task_id: str, count: int) -> list[dict[str, Any]]: ...


class TaskLogger(Logger):
    """Logger that writes timestamped entries into a LogStore."""

    def __init__(self, store: LogStore, clock: Callable[[], datetime] | None = None) -> None:
        self.store = store
        self.clock = clock or _now

    def log_task_execution(self, task_id: str, status: str, message: str) -> None:
        self.store.save_log(
            task_id,
            {"time": _rfc3339(self.clock()), "status": status, "message": message},
        )

    def get_task_logs(self, task_id: str, count: int) -> list[dict[str, Any]]:
        return self.store.get_logs(task_id, count)