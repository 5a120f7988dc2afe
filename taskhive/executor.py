"""Periodic execution of stored tasks with retries."""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timedelta, timezone
from typing import Callable

from taskhive.logs import Logger
from taskhive.repository import TaskRepository
from taskhive.task import Task

MAX_RETRIES = 3
RETRY_BACKOFF = timedelta(seconds=5)

log = logging.getLogger(__name__)


def run_task_function(task_id: str) -> None:
    """Simulated work: fails whenever the current second is even."""
    if int(time.time()) % 2 == 0:
        raise RuntimeError("simulated failure")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TaskExecutor:
    """Checks stored tasks at a fixed interval and runs those that are due."""

    def __init__(
        self,
        interval: timedelta | float,
        logger: Logger,
        repository: TaskRepository,
        *,
        runner: Callable[[str], None] = run_task_function,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        if isinstance(interval, timedelta):
            interval = interval.total_seconds()
        self.interval = float(interval)
        self.logger = logger
        self.repository = repository
        self.runner = runner
        self.sleep = sleep
        self.clock = clock
        self._stop = threading.Event()

    def start(self) -> None:
        """Check for due tasks every interval until stop() is called."""
        while not self._stop.wait(self.interval):
            self.run_scheduled_tasks()
        log.info("task executor stopped.")

    def stop(self) -> None:
        self._stop.set()

    def run_scheduled_tasks(self) -> list[threading.Thread]:
        """Start a worker for every due task and return the started threads."""
        try:
            tasks = self.repository.get_all_tasks()
        except Exception as err:
            log.error("error fetching tasks: %s", err)
            return []

        now = self.clock()
        workers = []
        for task in tasks:
            try:
                due = now - self.repository.get_task_last_run_time(task.id) >= task.interval
            except (KeyError, ValueError):
                due = True
            if not due:
                continue
            worker = threading.Thread(target=self.execute_task, args=(task,), daemon=True)
            worker.start()
            workers.append(worker)
            try:
                self.repository.set_task_last_run_time(task.id, now)
            except Exception as err:
                log.error("could not record run of task %s: %s", task.id, err)
        return workers

    def _record(self, task_id: str, status: str, message: str) -> None:
        try:
            self.logger.log_task_execution(task_id, status, message)
        except Exception as err:
            log.error("could not log execution of task %s: %s", task_id, err)

    def execute_task(self, task: Task) -> bool:
        """Run ``task`` up to MAX_RETRIES times; return whether it succeeded."""
        for attempt in range(1, MAX_RETRIES + 1):
            try:
                self.runner(task.id)
            except Exception as err:
                log.warning("task %s failed on attempt %d: %s", task.title, attempt, err)
                self._record(task.id, "FAILED", f"Retry attempt {attempt}: {err}")
                if attempt < MAX_RETRIES:
                    self.sleep(RETRY_BACKOFF.total_seconds())
                continue
            self._record(task.id, "SUCCESS", "task executed successfully")
            return True
        log.error("task %s failed after %d attempts", task.title, MAX_RETRIES)
        self._record(task.id, "PERMANENT_FAILURE", "task failed after max retries")
        return False