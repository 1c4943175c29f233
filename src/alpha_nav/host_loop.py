from __future__ import annotations

import heapq
import itertools
import time
from typing import Callable, List, Optional, Protocol

from .instrumentation import Cat, Emitter

ScrollListener = Callable[[float], None]


class ScrollEventSource(Protocol):
    """
    Host-side scroll event delivery.

    poll() dispatches whatever scroll activity happened since the last call
    to the registered listeners, passing the current scroll offset.
    """

    def add_listener(self, listener: ScrollListener) -> None:
        ...

    def remove_listener(self, listener: ScrollListener) -> None:
        ...

    def listener_count(self) -> int:
        ...

    def poll(self) -> int:
        ...


class TimerHandle:
    """One-shot timer returned by HostLoop.call_later(); cancel() is idempotent."""

    __slots__ = ("deadline", "_callback", "cancelled", "fired")

    def __init__(self, deadline: float, callback: Callable[[], None]) -> None:
        self.deadline = deadline
        self._callback: Optional[Callable[[], None]] = callback
        self.cancelled = False
        self.fired = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        self.cancelled = True
        self._callback = None

    def _run(self) -> None:
        cb = self._callback
        self.fired = True
        self._callback = None
        if cb is not None:
            cb()


class HostLoop:
    """
    Single-threaded cooperative loop standing in for the browser event loop.

    Each turn drains the scroll event sources, then runs the timers that are
    due. Callbacks never preempt each other.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        emitter: Emitter | None = None,
    ) -> None:
        self.clock = clock
        self._sleep = sleep
        self._emitter = emitter
        self._timers: List[tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()
        self._sources: List[ScrollEventSource] = []
        self._turn_hooks: List[Callable[[], None]] = []

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(self.clock() + max(0.0, delay_s), callback)
        heapq.heappush(self._timers, (handle.deadline, next(self._seq), handle))
        return handle

    def pending_timers(self) -> int:
        return sum(1 for _, _, h in self._timers if h.pending)

    def add_source(self, source: ScrollEventSource) -> None:
        if source not in self._sources:
            self._sources.append(source)

    def remove_source(self, source: ScrollEventSource) -> None:
        if source in self._sources:
            self._sources.remove(source)

    def add_turn_hook(self, hook: Callable[[], None]) -> Callable[[], None]:
        """Run `hook` once per turn, after the sources are drained. Returns the remover."""
        self._turn_hooks.append(hook)

        def _remove() -> None:
            if hook in self._turn_hooks:
                self._turn_hooks.remove(hook)

        return _remove

    def turn_hook_count(self) -> int:
        return len(self._turn_hooks)

    def run_due(self) -> int:
        """Run every timer whose deadline has passed. Returns how many fired."""
        now = self.clock()
        fired = 0
        while self._timers and self._timers[0][0] <= now:
            _, _, handle = heapq.heappop(self._timers)
            if not handle.pending:
                continue
            handle._run()
            fired += 1
        return fired

    def turn(self) -> None:
        for source in list(self._sources):
            source.poll()
        for hook in list(self._turn_hooks):
            hook()
        self.run_due()

    def run_for(self, seconds: float, *, poll_interval_s: float) -> None:
        end = self.clock() + seconds
        turns = 0
        while self.clock() < end:
            self.turn()
            turns += 1
            self._sleep(poll_interval_s)
        # drain timers that came due during the last sleep
        self.run_due()
        if self._emitter:
            self._emitter.emit_diag(Cat.SCROLL, "Host loop finished", turns=turns, seconds=seconds)
