import pytest

from taskloop.task_queue import CondChecker, FetchFailure
from taskloop.timers import TimeEvent, TimerContainer, TimerManager


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def _event(timestamp, tag=None, persist=False):
    return TimeEvent(
        callback=lambda: tag,
        interval=1,
        start_time=timestamp - 1,
        timestamp=timestamp,
        persist=persist,
    )


def _all():
    return CondChecker()


def test_time_event_fire_returns_callback_result():
    event = _event(10, tag="fired")
    assert event.fire() == "fired"


def test_container_orders_by_timestamp():
    container = TimerContainer()
    for ts in (30, 10, 20):
        container.push(_event(ts))
    events, total = container.fetch(10, _all())
    assert [e.timestamp for e in events] == [10, 20, 30]
    assert total == 3
    assert container.empty()


def test_container_ties_keep_insertion_order():
    container = TimerContainer()
    first, second = _event(5, "a"), _event(5, "b")
    container.push(first)
    container.push(second)
    events, _ = container.fetch(2, _all())
    assert events == [first, second]


def test_container_fetch_respects_count():
    container = TimerContainer()
    for ts in (1, 2, 3):
        container.push(_event(ts))
    events, _ = container.fetch(2, _all())
    assert [e.timestamp for e in events] == [1, 2]
    assert container.size() == 1


def test_container_fetch_zero_or_empty():
    container = TimerContainer()
    assert container.fetch(5, _all()) == ([], 0)
    container.push(_event(1))
    assert container.fetch(0, _all()) == ([], 0)
    assert container.size() == 1


def test_container_fetch_requires_checker():
    container = TimerContainer()
    container.push(_event(1))
    with pytest.raises(ValueError):
        container.fetch(1, None)


def test_container_break_stops_at_first_failure():
    container = TimerContainer()
    for ts in (1, 2, 8, 9):
        container.push(_event(ts))
    checker = CondChecker(lambda e: e.timestamp <= 5, FetchFailure.BREAK)
    events, _ = container.fetch(10, checker)
    assert [e.timestamp for e in events] == [1, 2]
    assert container.size() == 2


def test_container_continue_skips_and_keeps():
    container = TimerContainer()
    for ts in (1, 2, 3, 4):
        container.push(_event(ts))
    checker = CondChecker(lambda e: e.timestamp % 2 == 0, FetchFailure.CONTINUE)
    events, _ = container.fetch(10, checker)
    assert [e.timestamp for e in events] == [2, 4]
    remaining, _ = container.fetch(10, _all())
    assert [e.timestamp for e in remaining] == [1, 3]


def test_container_clear():
    container = TimerContainer(locked=True)
    container.push(_event(1))
    container.clear()
    assert container.empty()


def test_manager_runs_when_due():
    clock = FakeClock(100)
    manager = TimerManager(clock=clock)
    calls = []
    manager.register_timer(5, lambda: calls.append(clock.now))
    clock.now = 104
    manager.flush_time()
    assert manager.run_due() == 0
    assert calls == []
    clock.now = 105
    manager.flush_time()
    assert manager.run_due() == 1
    assert calls == [105]
    assert manager.size() == 0


def test_manager_persistent_timer_repeats():
    clock = FakeClock(100)
    manager = TimerManager(clock=clock)
    calls = []
    event = manager.register_timer(10, lambda: calls.append(1), persist=True)
    clock.now = 110
    manager.flush_time()
    manager.run_due()
    assert manager.size() == 1
    assert event.last_exec_time == 110
    assert event.timestamp == 120
    clock.now = 120
    manager.flush_time()
    manager.run_due()
    assert len(calls) == 2


def test_manager_cached_time_only_changes_on_flush():
    clock = FakeClock(50.5)
    manager = TimerManager(clock=clock)
    assert manager.cached_time() == 50.5
    clock.now = 60.0
    assert manager.cached_time() == 50.5
    manager.flush_time()
    assert manager.cached_time() == 60.0


def test_manager_explicit_start_time():
    clock = FakeClock(100)
    manager = TimerManager(clock=clock)
    event = manager.register_timer(3, lambda: None, start_time=200)
    assert event.start_time == 200
    assert event.timestamp == 203
    assert manager.run_due() == 0


def test_manager_callback_error_does_not_stop_others():
    clock = FakeClock(100)
    manager = TimerManager(clock=clock)
    calls = []

    def boom():
        raise RuntimeError("boom")

    manager.register_timer(1, boom, persist=True)
    manager.register_timer(1, lambda: calls.append("ok"))
    clock.now = 101
    manager.flush_time()
    assert manager.run_due() == 2
    assert calls == ["ok"]
    assert manager.size() == 1


def test_locked_manager_allows_registering_from_callback():
    clock = FakeClock(100)
    manager = TimerManager(locked=True, clock=clock)
    calls = []
    manager.register_timer(1, lambda: manager.register_timer(1, lambda: calls.append(2)))
    clock.now = 101
    manager.flush_time()
    manager.run_due()
    assert manager.size() == 1
    clock.now = 102
    manager.flush_time()
    manager.run_due()
    assert calls == [2]


def test_manager_clear():
    manager = TimerManager(clock=FakeClock(10))
    manager.register_timer(1, lambda: None)
    manager.register_timer(2, lambda: None)
    assert manager.size() == 2
    manager.clear()
    assert manager.size() == 0