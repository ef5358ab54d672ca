# taskloop

Building blocks for threaded, event-driven programs. The package uses only the
standard library. `taskloop.io_multiplex` is built on `select.poll`, so it
needs a POSIX system.

## Modules

- `taskloop.task_queue`
  - `TaskQueue` holds one FIFO queue of callables for each `TaskPriority`
    (`LOW`, `NORMAL`, `HIGH`). `fetch(count=None, priority=...)` removes up
    to `count` tasks and returns `(tasks, total_before_fetch)`. When `count`
    is `None` it removes them all.
  - `CondChecker` and `FetchFailure` (`BREAK`, `RETURN`, `CONTINUE`) describe
    which elements a fetch accepts.
- `taskloop.timers`
  - `TimeEvent` is one scheduled callback.
  - `TimerContainer` is a min-heap of events ordered by timestamp.
  - `TimerManager` schedules callbacks against a cached clock.
    - `register_timer(interval, callback, persist=False, start_time=None)`
      schedules `callback`.
    - `flush_time()` refreshes the cached clock.
    - `run_due()` fires every event that is due and returns how many fired.
      A persistent event is scheduled again after it fires.
    - An exception raised by a callback is logged and does not stop the
      other callbacks.
    - The clock can be injected: `TimerManager(clock=...)`.
- `taskloop.io_multiplex`
  - `IoMultiplexHandler` watches file descriptors (ints, or objects with
    `fileno()`).
    - `register(fd, flags, callback, arg=None, persist=False)` takes any
      combination of `EventFlag.READ`, `EventFlag.WRITE` and
      `EventFlag.ERROR`.
    - `wait(timeout)` polls the descriptors and calls
      `callback(fd, EventType.X, arg)` for each event.
    - A read or write registration fires once unless `persist=True`. A
      descriptor with no read or write interest left is dropped.
    - `unregister(fd)`, `fd_count()` and `close()` are also available, and
      the handler is a context manager.
- `taskloop.heart_beat_list`: `HeartBeatList` is a doubly linked list of
  `HeartBeatNode`s. It unlinks a node in O(1).
- `taskloop.heart_beat`
  - `HeartBeatElementManager` tracks hashable elements by their last
    activity.
    - `add` raises `ValueError` if the element is already tracked.
    - `update` and `remove` raise `KeyError` if the element is unknown.
    - `handle_timeout()` expires elements that have been idle for at least
      the timeout and returns how many expired.
    - With a maximum limit set, adding an element beyond the limit evicts
      the oldest one.
    - The callback set with `set_callback` receives every element that
      expires or is evicted.
    - `drain()` removes all elements and returns them, most recently active
      first.
  - `HeartBeatService` runs a manager on a service object that you supply
    (see below).
- `taskloop.threads`
  - `Worker` is a named thread with `cond_wait` and `cond_signal`.
  - `ThreadGroup` joins or visits all of its workers.
  - `RWLock` has `read_locked()` and `write_locked()` context managers.
  - `ScopedLockHolder` is a context manager that releases the lock it holds.
- `taskloop.ring_buffer`
  - `RingBuffer` is a fixed-capacity FIFO. Its `put` raises `RingBufferFull`
    and its `get` raises `RingBufferEmpty`.
  - `FastMsgQueue` is a queue built on `RingBuffer`. Its `pop()` returns
    `None` when the queue is empty.

## Tracking elements directly

```python
from taskloop.heart_beat import HeartBeatElementManager

now = [0.0]
manager = HeartBeatElementManager(clock=lambda: now[0])
expired = []
manager.set_callback(expired.append)
manager.set_timeout(True, 30)

manager.add("client-1")
manager.add("client-2")
now[0] = 20.0
manager.update("client-1")
now[0] = 35.0
manager.handle_timeout()      # returns 1
print(expired)                # ['client-2']
print("client-1" in manager)  # True
```

## Running a heart-beat service

`HeartBeatService` needs a service object with two methods:

- `post(task)`, which runs `task()` later;
- `register_timer(interval, callback)`, which calls `callback()` after
  `interval` seconds.

The package has no ready-made service of this kind. A minimal
single-threaded one can be built from `TaskQueue` and `TimerManager`:

```python
from taskloop.task_queue import TaskQueue
from taskloop.timers import TimerManager
from taskloop.heart_beat import HeartBeatService


class Loop:
    def __init__(self):
        self.tasks = TaskQueue()
        self.timers = TimerManager()

    def post(self, task):
        self.tasks.push(task)

    def register_timer(self, interval, callback):
        self.timers.register_timer(interval, callback)

    def run_once(self):
        self.timers.flush_time()
        self.timers.run_due()
        tasks, _ = self.tasks.fetch()
        for task in tasks:
            task()


loop = Loop()
beats = HeartBeatService(ticks=1)
beats.initialize(loop)
beats.set_callback(lambda element: print("expired:", element))
beats.set_timeout(True, 30)
beats.start()

beats.async_add("client-1")
loop.run_once()
```

Configuration (`initialize`, `set_callback`, `set_timeout`, `set_max_limit`)
raises `RuntimeError` once the service has started. `stop()` posts a task
that clears all elements and marks the service as stopped.

## What the package does not do

The package provides the parts of an event loop but not a loop itself. It has
no ready-made service that drives the task queue, timers and I/O handler on
worker threads. It also has no statistics collection or reporting, and no
command-line program.

## Tests

```
pip install .[test]
pytest
```