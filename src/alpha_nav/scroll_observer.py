from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional

from .errors import ScrollSourceUnavailable
from .host_loop import HostLoop, ScrollEventSource, TimerHandle
from .instrumentation import Cat, Emitter
from .. import config


@dataclass
class ScrollState:
    scroll_y: float = 0.0
    is_scrolling: bool = False


class ScrollObserver:
    """
    Turn raw scroll events into cheap ticks plus an edge-triggered
    "scrolling stopped" signal.

    Every event re-arms a single quiescence timer. When the timer expires
    without another event, one is_scrolling=False transition is published.
    The first event after a quiet period publishes is_scrolling=True.

    is_scrolling is cosmetic (rail pulse); the active section never depends on it.
    """

    def __init__(
        self,
        source: ScrollEventSource | None,
        loop: HostLoop,
        *,
        quiescence_s: float = config.SCROLL_QUIESCENCE_S,
        emitter: Emitter | None = None,
    ) -> None:
        self.source = source
        self.loop = loop
        self.quiescence_s = quiescence_s
        self._emitter = emitter

        self.state: Optional[ScrollState] = None
        self._on_tick: Optional[Callable[[], None]] = None
        self._timer: Optional[TimerHandle] = None
        self._scrolling_listeners: List[Callable[[bool], None]] = []

    @property
    def observing(self) -> bool:
        return self._on_tick is not None

    def on_scrolling_change(self, callback: Callable[[bool], None]) -> Callable[[], None]:
        self._scrolling_listeners.append(callback)

        def _off() -> None:
            if callback in self._scrolling_listeners:
                self._scrolling_listeners.remove(callback)

        return _off

    def observe(self, on_tick: Callable[[], None]) -> Callable[[], None]:
        """Attach to the scroll source. Returns the disposer (same as unobserve)."""
        if self.source is None:
            raise ScrollSourceUnavailable("No scroll event source available on this host")
        if self._on_tick is not None:
            raise RuntimeError("ScrollObserver is already observing; call unobserve() first")

        self.source.add_listener(self._handle_scroll)
        self._on_tick = on_tick
        self.state = ScrollState()
        self.loop.add_source(self.source)
        if self._emitter:
            self._emitter.counters.inc("scroll.observe")
            self._emitter.emit_diag(Cat.SCROLL, "Scroll observer attached", quiescence_s=self.quiescence_s)
        return self.unobserve

    def unobserve(self) -> None:
        # Always clear the timer, pending or not
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

        if self._on_tick is None:
            return

        if self.source is not None:
            self.source.remove_listener(self._handle_scroll)
            if self.source.listener_count() == 0:
                self.loop.remove_source(self.source)
        self._on_tick = None
        self.state = None
        if self._emitter:
            self._emitter.counters.inc("scroll.unobserve")
            self._emitter.emit_diag(Cat.SCROLL, "Scroll observer detached")

    def _publish_scrolling(self, value: bool) -> None:
        if self.state is None:
            return
        self.state.is_scrolling = value
        if self._emitter:
            self._emitter.emit_trace(Cat.SCROLL, "Scrolling state changed", scrolling=value, y=self.state.scroll_y)
        for cb in list(self._scrolling_listeners):
            cb(value)

    def _handle_scroll(self, scroll_y: float) -> None:
        if self._on_tick is None or self.state is None:
            return

        self.state.scroll_y = scroll_y
        if self._emitter:
            self._emitter.counters.inc("scroll.ticks")
            self._emitter.emit_trace(Cat.SCROLL, "Scroll tick", key="SCROLL.tick", y=scroll_y)

        if not self.state.is_scrolling:
            self._publish_scrolling(True)

        if self._timer is not None:
            self._timer.cancel()
        self._timer = self.loop.call_later(self.quiescence_s, self._quiesce)

        self._on_tick()

    def _quiesce(self) -> None:
        self._timer = None
        self._publish_scrolling(False)
