"""Storage interfaces for key/value data and per-task logs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class KeyNotFoundError(KeyError):
    """A requested key does not exist."""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key


class Store(ABC):
    """A key/value store; get() raises KeyNotFoundError for missing keys."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None: ...

    @abstractmethod
    def get(self, key: str) -> str: ...

    @abstractmethod
    def delete(self, key: str) -> None: ...

    @abstractmethod
    def keys(self, pattern: str) -> list[str]: ...


class LogStore(ABC):
    """Per-task log storage, read back newest first."""

    @abstractmethod
    def save_log(self, task_id: str, log_entry: dict[str, Any]) -> None: ...

    @abstractmethod
    def get_logs(self, task_id: str, count: int) -> list[dict[str, Any]]: ...