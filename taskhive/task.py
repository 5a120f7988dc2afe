"""The task record and its JSON form."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import timedelta

# Field name kept as existing stored data spells it.
_INTERVAL_FIELD = "inteval"
_TEXT_FIELDS = ("id", "title", "description")


@dataclass
class Task:
    """A recurring task; ``interval`` is the time between runs."""

    id: str = ""
    title: str = ""
    description: str = ""
    interval: timedelta = timedelta(0)

    def to_json(self) -> str:
        """Serialise to compact JSON, interval in seconds."""
        seconds = self.interval.total_seconds()
        obj = {name: getattr(self, name) for name in _TEXT_FIELDS}
        obj[_INTERVAL_FIELD] = int(seconds) if seconds.is_integer() else seconds
        return json.dumps(obj, separators=(",", ":"))

    @classmethod
    def from_json(cls, data: str | bytes) -> "Task":
        """Parse a task from JSON; missing fields take defaults."""
        obj = json.loads(data)
        if not isinstance(obj, dict):
            raise ValueError("task JSON must be an object")
        seconds = obj.get(_INTERVAL_FIELD)
        seconds = 0 if seconds is None else seconds
        if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
            raise ValueError(f"invalid task interval: {seconds!r}")
        fields = {n: "" if obj.get(n) is None else obj[n] for n in _TEXT_FIELDS}
        for name, value in fields.items():
            if not isinstance(value, str):
                raise ValueError(f"invalid task field {name}: {value!r}")
        return cls(interval=timedelta(seconds=seconds), **fields)