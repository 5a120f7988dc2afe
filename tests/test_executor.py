import fnmatch
import threading
import time
from datetime import datetime, timedelta, timezone
from unittest import mock

import pytest

from taskhive.executor import MAX_RETRIES, RETRY_BACKOFF, TaskExecutor, run_task_function
from taskhive.logs import Logger
from taskhive.repository import TaskRepository
from taskhive.storage import KeyNotFoundError, Store
from taskhive.task import Task

NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class MemoryStore(Store):
    def __init__(self):
        self.data = {}

    def set(self, key, value):
        self.data[key] = str(value)

    def get(self, key):
        try:
            return self.data[key]
        except KeyError:
            raise KeyNotFoundError(key) from None

    def delete(self, key):
        self.data.pop(key, None)

    def keys(self, pattern):
        return [k for k in list(self.data) if fnmatch.fnmatchcase(k, pattern)]


class BrokenStore(MemoryStore):
    def keys(self, pattern):
        raise ConnectionError("down")


class RecordingLogger(Logger):
    def __init__(self):
        self.entries = []
        self.lock = threading.Lock()

    def log_task_execution(self, task_id, status, message):
        with self.lock:
            self.entries.append((task_id, status, message))

    def get_task_logs(self, task_id, count):
        return [e for e in self.entries if e[0] == task_id][:count]


def make_executor(repo=None, runner=lambda task_id: None, sleeps=None, interval=1.0):
    logger = RecordingLogger()
    repo = repo or TaskRepository(MemoryStore())
    sleeps = [] if sleeps is None else sleeps
    executor = TaskExecutor(
        interval, logger, repo, runner=runner, sleep=sleeps.append, clock=lambda: NOW
    )
    return executor, logger, repo


def failing(task_id):
    raise RuntimeError("boom")


def test_run_task_function_fails_on_even_second():
    with mock.patch("time.time", return_value=120.0):
        with pytest.raises(RuntimeError, match="simulated failure"):
            run_task_function("t1")


def test_run_task_function_succeeds_on_odd_second():
    with mock.patch("time.time", return_value=121.0):
        assert run_task_function("t1") is None


def test_execute_task_success_first_attempt():
    sleeps = []
    executor, logger, _ = make_executor(sleeps=sleeps)
    assert executor.execute_task(Task(id="t1", title="job")) is True
    assert [e[1] for e in logger.entries] == ["SUCCESS"]
    assert sleeps == []


def test_execute_task_permanent_failure():
    sleeps = []
    executor, logger, _ = make_executor(runner=failing, sleeps=sleeps)
    assert executor.execute_task(Task(id="t1", title="job")) is False
    statuses = [e[1] for e in logger.entries]
    assert statuses == ["FAILED"] * MAX_RETRIES + ["PERMANENT_FAILURE"]
    assert logger.entries[0][2] == "Retry attempt 1: boom"
    assert logger.entries[-1][2] == "task failed after max retries"
    assert sleeps == [RETRY_BACKOFF.total_seconds()] * (MAX_RETRIES - 1)


def test_execute_task_recovers_after_failure():
    calls = []

    def flaky(task_id):
        calls.append(task_id)
        if len(calls) == 1:
            raise RuntimeError("boom")

    sleeps = []
    executor, logger, _ = make_executor(runner=flaky, sleeps=sleeps)
    assert executor.execute_task(Task(id="t1", title="job")) is True
    assert [e[1] for e in logger.entries] == ["FAILED", "SUCCESS"]
    assert len(sleeps) == 1


def test_due_task_without_last_run_is_executed():
    executor, logger, repo = make_executor()
    repo.save_task(Task(id="t1", title="job", interval=timedelta(seconds=60)))
    workers = executor.run_scheduled_tasks()
    for worker in workers:
        worker.join(5)
    assert len(workers) == 1
    assert logger.entries == [("t1", "SUCCESS", "task executed successfully")]
    assert repo.get_task_last_run_time("t1") == NOW


def test_recent_task_is_not_executed():
    executor, logger, repo = make_executor()
    repo.save_task(Task(id="t1", title="job", interval=timedelta(seconds=60)))
    repo.set_task_last_run_time("t1", NOW - timedelta(seconds=10))
    assert executor.run_scheduled_tasks() == []
    assert logger.entries == []


def test_overdue_task_is_executed():
    executor, logger, repo = make_executor()
    repo.save_task(Task(id="t1", title="job", interval=timedelta(seconds=60)))
    repo.set_task_last_run_time("t1", NOW - timedelta(seconds=60))
    workers = executor.run_scheduled_tasks()
    for worker in workers:
        worker.join(5)
    assert len(workers) == 1
    assert repo.get_task_last_run_time("t1") == NOW


def test_fetch_error_runs_nothing():
    executor, logger, _ = make_executor(repo=TaskRepository(BrokenStore()))
    assert executor.run_scheduled_tasks() == []
    assert logger.entries == []


def test_start_runs_until_stopped():
    executor, logger, repo = make_executor(interval=0.01)
    repo.save_task(Task(id="t1", title="job"))
    runner = threading.Thread(target=executor.start)
    runner.start()
    deadline = time.monotonic() + 5
    while not logger.entries and time.monotonic() < deadline:
        time.sleep(0.01)
    executor.stop()
    runner.join(5)
    assert not runner.is_alive()
    assert logger.entries[0] == ("t1", "SUCCESS", "task executed successfully")