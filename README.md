# taskhive

taskhive keeps a set of periodic tasks in Redis. It runs each task again once
its interval has passed, retries failed runs, and records every attempt in a
per-task log.

## Parts

- `taskhive.storage` holds the `Store` interface (`set`, `get`, `delete`,
  `keys`) and the `LogStore` interface (`save_log`, `get_logs`). It also holds
  `KeyNotFoundError`, which `Store.get` raises for a missing key. It is a
  subclass of `KeyError`.
- `taskhive.redis_store` holds `new_redis_client(addr, db)`. It takes a
  `host:port` address, with port 6379 when none is given. The module also holds
  `RedisStore` and `RedisLogStore`, the Redis-backed implementations of the
  two interfaces.
- `taskhive.task` holds the `Task` dataclass, with the fields `id`, `title`,
  `description` and `interval`, where `interval` is a `timedelta`.
  - `Task.to_json()` writes compact JSON with the interval in seconds.
  - `Task.from_json(data)` parses it back and raises `ValueError` on malformed
    data.
- `taskhive.repository` holds `TaskRepository`. It has these methods:
  - `save_task`, `get_task`, `update_task`, `delete_task` and `get_all_tasks`.
    `update_task` replaces the title, description and interval of an existing
    task. `get_all_tasks` skips entries it cannot read.
  - `get_task_last_run_time` and `set_task_last_run_time`, which track when
    each task last ran.
- `taskhive.logs` holds the `Logger` interface and `TaskLogger`.
  - `TaskLogger` writes entries with a `time` (RFC 3339, whole seconds), a
    `status` and a `message` into a `LogStore`.
  - An optional `clock` argument supplies the current time.
- `taskhive.executor` holds `TaskExecutor` and `run_task_function(task_id)`.
  The function is a stand-in unit of work. It raises `RuntimeError` whenever
  the current second is even.
- `taskhive.service` holds `TaskService`, the operations offered to clients.
  - Its methods are `create_task`, `get_task`, `update_task`, `delete_task` and
    `get_task_logs`.
  - `get_task_logs` returns `TaskLog` entries. It raises `LogFetchError` when
    the logs cannot be read or an entry is malformed.

## Usage

```python
from taskhive.redis_store import new_redis_client, RedisStore, RedisLogStore
from taskhive.logs import TaskLogger
from taskhive.repository import TaskRepository
from taskhive.service import TaskService
from taskhive.executor import TaskExecutor

client = new_redis_client("localhost:6379", 0)
repository = TaskRepository(RedisStore(client))
logger = TaskLogger(RedisLogStore(client))

service = TaskService(logger, repository)
task_id = service.create_task("backup", "nightly database dump", 3600)

print(service.get_task(task_id))
service.update_task(task_id, "backup", "hourly database dump", 3600)

for entry in service.get_task_logs(task_id, 10):
    print(entry.time, entry.status, entry.message)

service.delete_task(task_id)

executor = TaskExecutor(10, logger, repository)
executor.start()  # blocks; call executor.stop() from another thread
```

Intervals may be given as seconds or as a `timedelta`. `TaskService` creates
ids with `uuid4`. Pass `id_factory` to supply your own.

## Execution

Each tick of `TaskExecutor.run_scheduled_tasks()` loads every stored task. A
task is due in either of these cases:

- It has no readable recorded run.
- Its interval has passed since its last recorded run.

Each due task is started in a daemon thread, and the current time is recorded
as its last run. The method returns the started threads.

`TaskExecutor.execute_task(task)` tries a task up to three times (`MAX_RETRIES`)
and waits five seconds (`RETRY_BACKOFF`) between attempts. It returns whether
the task succeeded, and logs each outcome:

- `SUCCESS` when an attempt succeeds.
- `FAILED`, with the attempt number and error, for each attempt that fails.
- `PERMANENT_FAILURE` when every attempt has failed.

The work itself, the wait between attempts and the clock come from the
`runner`, `sleep` and `clock` keyword arguments. Their defaults are
`run_task_function`, `time.sleep` and the current UTC time.

`TaskExecutor.start()` checks once per interval until `TaskExecutor.stop()` is
called.

## Storage layout

| Key | Contents |
| --- | --- |
| `task:<id>` | A task as JSON: `id`, `title`, `description`, `inteval` (seconds) |
| `lastrun:<id>` | The task's last run time, as a Unix timestamp |
| `log:<id>` | A Redis list of JSON log entries, newest first |

## What it does not do

taskhive is a library only.

- It has no network server, so clients call `TaskService` in-process.
- It installs no command.
- Tasks do not carry real work of their own. The executor runs
  `run_task_function` unless you pass a different `runner`.