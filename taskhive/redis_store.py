"""Redis-backed implementations of the storage interfaces."""

from __future__ import annotations

import json
from typing import Any

import redis

from taskhive.storage import KeyNotFoundError, LogStore, Store

_DEFAULT_PORT = 6379


def new_redis_client(addr: str, db: int) -> redis.Redis:
    """Create a Redis client for ``host:port`` using database ``db``."""
    host, sep, port = addr.rpartition(":")
    if not sep:
        host, port_number = addr, _DEFAULT_PORT
    else:
        port_number = int(port) if port else _DEFAULT_PORT
        host = host or "localhost"
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return redis.Redis(host=host, port=port_number, db=db, decode_responses=True)


def _text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


class RedisStore(Store):
    """Key/value store on top of a Redis client."""

    def __init__(self, client: Any) -> None:
        self.client = client

    def set(self, key: str, value: Any) -> None:
        self.client.set(key, value)

    def get(self, key: str) -> str:
        value = self.client.get(key)
        if value is None:
            raise KeyNotFoundError(key)
        return _text(value)

    def delete(self, key: str) -> None:
        self.client.delete(key)

    def keys(self, pattern: str) -> list[str]:
        return [_text(key) for key in self.client.keys(pattern)]


class RedisLogStore(LogStore):
    """Per-task log lists kept in Redis, newest entry first."""

    def __init__(self, client: Any) -> None:
        self.client = client

    @staticmethod
    def _key(task_id: str) -> str:
        return "log:" + task_id

    def save_log(self, task_id: str, log_entry: dict[str, Any]) -> None:
        data = json.dumps(log_entry, sort_keys=True, separators=(",", ":"))
        self.client.lpush(self._key(task_id), data)

    def get_logs(self, task_id: str, count: int) -> list[dict[str, Any]]:
        raw_logs = self.client.lrange(self._key(task_id), 0, count - 1)
        logs = []
        for raw in raw_logs:
            try:
                entry = json.loads(_text(raw))
            except ValueError:
                continue
            if isinstance(entry, dict):
                logs.append(entry)
        return logs