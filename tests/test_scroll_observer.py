import pytest

from src.alpha_nav.errors import ScrollSourceUnavailable
from src.alpha_nav.host_loop import HostLoop
from src.alpha_nav.scroll_observer import ScrollObserver

from conftest import FakeClock, FakeScrollSource


@pytest.fixture
def parts():
    clock = FakeClock()
    loop = HostLoop(clock=clock, sleep=clock.advance)
    source = FakeScrollSource()
    observer = ScrollObserver(source, loop, quiescence_s=0.15)
    return clock, loop, source, observer


def test_tick_runs_callback_and_records_offset(parts):
    _, _, source, observer = parts
    ticks = []
    observer.observe(lambda: ticks.append(observer.state.scroll_y))

    source.fire(120)
    source.fire(180)

    assert ticks == [120, 180]
    assert observer.state.is_scrolling is True


def test_scrolling_stopped_fires_once_per_quiet_window(parts):
    clock, loop, source, observer = parts
    changes = []
    observer.on_scrolling_change(changes.append)
    observer.observe(lambda: None)

    source.fire(10)
    clock.advance(0.1)
    source.fire(20)
    clock.advance(0.1)
    loop.run_due()
    # re-armed at t=0.1, so nothing yet at t=0.2
    assert changes == [True]

    clock.advance(0.06)
    loop.run_due()
    assert changes == [True, False]
    assert observer.state.is_scrolling is False

    clock.advance(1.0)
    loop.run_due()
    assert changes == [True, False]

    source.fire(30)
    assert changes == [True, False, True]


def test_one_timer_pending_however_many_ticks(parts):
    _, loop, source, observer = parts
    observer.observe(lambda: None)
    for y in range(0, 1000, 50):
        source.fire(y)
    assert loop.pending_timers() == 1


def test_unobserve_leaves_no_listener_and_no_timer(parts):
    clock, loop, source, observer = parts
    ticks = []
    changes = []
    observer.on_scrolling_change(changes.append)
    dispose = observer.observe(lambda: ticks.append(1))
    captured = list(source.listeners)

    source.fire(100)
    dispose()

    assert source.listener_count() == 0
    assert loop.pending_timers() == 0
    assert observer.state is None

    # a stale reference to the old callback must not do anything
    for listener in captured:
        listener(400)
    clock.advance(1.0)
    loop.run_due()

    assert ticks == [1]
    assert changes == [True]


def test_unobserve_without_pending_timer_is_safe_and_idempotent(parts):
    _, loop, source, observer = parts
    observer.observe(lambda: None)
    observer.unobserve()
    observer.unobserve()
    assert source.listener_count() == 0
    assert loop.pending_timers() == 0
    assert not observer.observing


def test_observe_registers_source_with_loop(parts):
    _, loop, source, observer = parts
    observer.observe(lambda: None)
    loop.turn()
    assert source.polls == 1

    observer.unobserve()
    loop.turn()
    assert source.polls == 1


def test_observe_twice_is_rejected(parts):
    _, _, _, observer = parts
    observer.observe(lambda: None)
    with pytest.raises(RuntimeError):
        observer.observe(lambda: None)


def test_missing_source_fails_fast():
    clock = FakeClock()
    observer = ScrollObserver(None, HostLoop(clock=clock))
    with pytest.raises(ScrollSourceUnavailable):
        observer.observe(lambda: None)
