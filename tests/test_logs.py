from datetime import datetime, timedelta, timezone

import pytest

from taskhive.logs import Logger, TaskLogger
from taskhive.storage import LogStore


class _MemoryLogStore(LogStore):
    def __init__(self):
        self.entries = {}

    def save_log(self, task_id, log_entry):
        self.entries.setdefault(task_id, []).insert(0, dict(log_entry))

    def get_logs(self, task_id, count):
        return list(self.entries.get(task_id, []))[:count]


def _fixed(moment):
    return lambda: moment


def test_logger_is_abstract():
    with pytest.raises(TypeError):
        Logger()


def test_log_entry_fields():
    store = _MemoryLogStore()
    moment = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    logger = TaskLogger(store, clock=_fixed(moment))
    logger.log_task_execution("t1", "SUCCESS", "task executed successfuly")
    assert store.entries["t1"] == [
        {
            "time": "2024-01-02T03:04:05Z",
            "status": "SUCCESS",
            "message": "task executed successfuly",
        }
    ]


def test_log_time_keeps_offset_and_drops_fraction():
    store = _MemoryLogStore()
    zone = timezone(timedelta(hours=2))
    moment = datetime(2024, 1, 2, 3, 4, 5, 678, tzinfo=zone)
    TaskLogger(store, clock=_fixed(moment)).log_task_execution("t", "FAILED", "m")
    stamp = store.entries["t"][0]["time"]
    assert stamp.endswith("+02:00")
    assert datetime.fromisoformat(stamp) == moment.replace(microsecond=0)


def test_default_clock_produces_parseable_time():
    store = _MemoryLogStore()
    TaskLogger(store).log_task_execution("t", "SUCCESS", "ok")
    stamp = store.entries["t"][0]["time"].replace("Z", "+00:00")
    parsed = datetime.fromisoformat(stamp)
    assert parsed.tzinfo is not None
    assert abs(datetime.now(timezone.utc) - parsed) < timedelta(minutes=1)


def test_get_task_logs_passes_through_store():
    store = _MemoryLogStore()
    logger = TaskLogger(store)
    for status in ("FAILED", "FAILED", "PERMANENT_FAILURE"):
        logger.log_task_execution("t", status, "x")
    logs = logger.get_task_logs("t", 2)
    assert [e["status"] for e in logs] == ["PERMANENT_FAILURE", "FAILED"]