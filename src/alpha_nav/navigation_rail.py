"""
Alphabetical navigation rail.

Renders one button per section key, marks the active key, and turns
activations into scroll requests. The rail only reads the tracker.
"""

from __future__ import annotations

import html
from typing import Callable, List, Optional, Sequence

from .host_loop import HostLoop, TimerHandle
from .instrumentation import Cat, Emitter
from .tracker import ActiveSectionTracker
from .. import config


class NavigationRail:
    def __init__(
        self,
        tracker: ActiveSectionTracker,
        loop: HostLoop,
        *,
        smooth: bool = config.SMOOTH_SCROLL,
        emitter: Emitter | None = None,
    ) -> None:
        self.tracker = tracker
        self.loop = loop
        self.smooth = smooth
        self._emitter = emitter

        self.pulsing = False
        self._pending: Optional[TimerHandle] = None
        self._pulse_timer: Optional[TimerHandle] = None
        self._requested: Optional[str] = None
        self._on_render: List[Callable[["NavigationRail"], None]] = []
        self._unsubs: List[Callable[[], None]] = []

    def attach(self) -> Callable[[], None]:
        """Follow the tracker and observer; returns the detach callable."""
        self._unsubs.append(self.tracker.subscribe(lambda _key: self._changed()))
        self._unsubs.append(self.tracker.observer.on_scrolling_change(self._scrolling_changed))
        return self.detach

    def detach(self) -> None:
        for unsub in self._unsubs:
            unsub()
        self._unsubs.clear()
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        if self._pulse_timer is not None:
            self._pulse_timer.cancel()
            self._pulse_timer = None
        self.pulsing = False

    def on_render(self, callback: Callable[["NavigationRail"], None]) -> Callable[[], None]:
        self._on_render.append(callback)

        def _off() -> None:
            if callback in self._on_render:
                self._on_render.remove(callback)

        return _off

    def render_callback_count(self) -> int:
        return len(self._on_render)

    def _changed(self) -> None:
        for cb in list(self._on_render):
            cb(self)

    def _scrolling_changed(self, scrolling: bool) -> None:
        # brief pulse on the active letter once the scroll settles
        if scrolling:
            self._end_pulse()
            return
        if self._pulse_timer is not None:
            self._pulse_timer.cancel()
        self.pulsing = True
        self._pulse_timer = self.loop.call_later(config.RAIL_PULSE_S, self._end_pulse)
        self._changed()

    def _end_pulse(self) -> None:
        if self._pulse_timer is not None:
            self._pulse_timer.cancel()
            self._pulse_timer = None
        if self.pulsing:
            self.pulsing = False
            self._changed()

    # ------------------------------------------------------------------
    # Activation
    # ------------------------------------------------------------------

    def activate(self, key: str) -> None:
        """
        Request a scroll to `key`.

        Activations inside one loop turn collapse: only the last key is sent
        to the host, so quick clicks never queue competing scroll animations.
        """
        self._requested = key
        if self._pending is not None and self._pending.pending:
            self._pending.cancel()
            if self._emitter:
                self._emitter.counters.inc("rail.superseded_clicks")
        self._pending = self.loop.call_later(0, self._flush)
        if self._emitter:
            self._emitter.emit_diag(Cat.RAIL, "Rail activation", sec=key)

    def _flush(self) -> None:
        key = self._requested
        self._pending = None
        self._requested = None
        if key is not None:
            self.tracker.scroll_to(key, smooth=self.smooth)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self) -> str:
        return render_rail_html(self.tracker.keys, self.tracker.active, pulsing=self.pulsing)


def render_rail_html(keys: Sequence[str], active: Optional[str], *, pulsing: bool = False) -> str:
    if not keys:
        return ""

    active_cls = config.PAGE_SELECTORS["rail_active_class"]
    pulse_cls = config.PAGE_SELECTORS["rail_pulse_class"]

    items: List[str] = []
    for key in keys:
        classes = ["alpha-rail__item"]
        current = key == active
        if current:
            classes.append(active_cls)
            if pulsing:
                classes.append(pulse_cls)
        esc = html.escape(key, quote=True)
        aria = ' aria-current="true"' if current else ""
        items.append(
            f'<button type="button" class="{" ".join(classes)}" data-key="{esc}"{aria}>{esc}</button>'
        )
    return f'<nav class="alpha-rail" aria-label="Jump to letter">{"".join(items)}</nav>'
