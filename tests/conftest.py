from dataclasses import dataclass

import pytest

from src.alpha_nav.host_loop import HostLoop
from src.alpha_nav.instrumentation import Emitter, InstrumentPolicy, LogMode
from src.alpha_nav.navigation_rail import NavigationRail
from src.alpha_nav.scroll_observer import ScrollObserver
from src.alpha_nav.section_registry import SectionRegistry
from src.alpha_nav.tracker import ActiveSectionTracker


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, dt: float) -> None:
        self.now += dt


class FakeGeometry:
    def __init__(self, tops=None, scroll_y: float = 0.0):
        self.tops = dict(tops or {})
        self.y = scroll_y
        self.measures = 0

    def measure(self, anchor_ids):
        self.measures += 1
        return self.y, [self.tops.get(a) for a in anchor_ids]


class FakeScrollSource:
    """Scroll source whose events are fired by the test."""

    def __init__(self, geometry: FakeGeometry | None = None):
        self.geometry = geometry
        self.listeners = []
        self.polls = 0

    def add_listener(self, listener):
        self.listeners.append(listener)

    def remove_listener(self, listener):
        if listener in self.listeners:
            self.listeners.remove(listener)

    def listener_count(self):
        return len(self.listeners)

    def poll(self):
        self.polls += 1
        return 0

    def fire(self, scroll_y: float) -> None:
        if self.geometry is not None:
            self.geometry.y = scroll_y
        for listener in list(self.listeners):
            listener(scroll_y)


class RecordingCommand:
    def __init__(self):
        self.calls = []

    def scroll_to_anchor(self, anchor_id, *, smooth=True):
        self.calls.append((anchor_id, smooth))


@dataclass
class Host:
    clock: FakeClock
    loop: HostLoop
    geometry: FakeGeometry
    source: FakeScrollSource
    command: RecordingCommand
    emitter: Emitter
    registry: SectionRegistry
    observer: ScrollObserver
    tracker: ActiveSectionTracker
    rail: NavigationRail


@pytest.fixture
def emitter():
    return Emitter(policy=InstrumentPolicy(mode=LogMode.TRACE))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def host(clock, emitter):
    loop = HostLoop(clock=clock, sleep=clock.advance, emitter=emitter)
    geometry = FakeGeometry(
        {"letter-A": 0.0, "letter-B": 500.0, "letter-C": 1200.0},
    )
    source = FakeScrollSource(geometry)
    command = RecordingCommand()
    registry = SectionRegistry(emitter=emitter)
    observer = ScrollObserver(source, loop, quiescence_s=0.15, emitter=emitter)
    tracker = ActiveSectionTracker(
        registry, geometry, observer, command=command, header_offset=100, emitter=emitter
    )
    rail = NavigationRail(tracker, loop, smooth=True, emitter=emitter)
    return Host(clock, loop, geometry, source, command, emitter, registry, observer, tracker, rail)
