from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterable, Iterator, List, Optional, Protocol

from .instrumentation import Cat, Emitter
from .resolver import resolve_active_section
from .scroll_observer import ScrollObserver
from .section_handles import AnchorNaming, PageGeometry
from .section_registry import RegistryHandle, SectionRegistry
from .. import config

ActiveListener = Callable[[Optional[str]], None]


class ScrollCommand(Protocol):
    def scroll_to_anchor(self, anchor_id: str, *, smooth: bool = True) -> None:
        ...


class ActiveSectionTracker:
    """
    Single owner of the active section key.

    Mount registers the page's keys and starts observing scroll; every tick
    re-reads the anchors and re-resolves. Readers use `active` and
    subscribe(); nothing outside the tick path writes the value.
    """

    def __init__(
        self,
        registry: SectionRegistry,
        geometry: PageGeometry,
        observer: ScrollObserver,
        *,
        command: ScrollCommand | None = None,
        header_offset: float = config.HEADER_OFFSET_PX,
        emitter: Emitter | None = None,
    ) -> None:
        self.registry = registry
        self.geometry = geometry
        self.observer = observer
        self.command = command
        self.header_offset = header_offset
        self._emitter = emitter

        self._active: Optional[str] = None
        self._handle: Optional[RegistryHandle] = None
        self._listeners: List[ActiveListener] = []

    def _emit_signal(self, msg: str, *, level: str = "info", **ctx: Any) -> None:
        if self._emitter:
            self._emitter.emit_signal(Cat.NAV, msg, level=level, **ctx)

    def _emit_diag(self, msg: str, **ctx: Any) -> None:
        if self._emitter:
            self._emitter.emit_diag(Cat.RESOLVE, msg, **ctx)

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def active(self) -> Optional[str]:
        return self._active

    @property
    def keys(self) -> List[str]:
        return self._handle.keys if self._handle else []

    @property
    def mounted(self) -> bool:
        return self._handle is not None

    def subscribe(self, listener: ActiveListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def mount(self, keys: Iterable[str], *, prefix: Optional[str] = None) -> Callable[[], None]:
        if self._handle is not None:
            self.unmount()

        self._handle = self.registry.register(keys, AnchorNaming(prefix))
        try:
            self.observer.observe(self.refresh)
            self.refresh()
        except Exception:
            # nothing stays attached when setup fails halfway
            self.unmount()
            raise

        self._emit_signal("Tracker mounted", prefix=prefix, count=len(self._handle.keys))
        return self.unmount

    def unmount(self) -> None:
        self.observer.unobserve()
        if self._handle is not None:
            self._handle.unregister()
            self._handle = None
            self._emit_signal("Tracker unmounted")
        self._set_active(None)

    @contextmanager
    def tracking(self, keys: Iterable[str], *, prefix: Optional[str] = None) -> Iterator["ActiveSectionTracker"]:
        """Mount for the duration of a with-block; unmount on exit, errors included."""
        self.mount(keys, prefix=prefix)
        try:
            yield self
        finally:
            self.unmount()

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def refresh(self) -> Optional[str]:
        """Re-read scroll offset and anchors in one pass, resolve, publish on change."""
        if self._handle is None:
            self._set_active(None)
            return None

        scroll_y, sections = self._handle.measure(self.geometry)
        active = resolve_active_section(sections, scroll_y, self.header_offset)
        self._emit_diag("Resolved active section", active=active, y=scroll_y, count=len(sections))
        self._set_active(active)
        return active

    def _set_active(self, key: Optional[str]) -> None:
        if key == self._active:
            return
        previous = self._active
        self._active = key
        if self._emitter:
            self._emitter.counters.inc("tracker.active_changes")
            self._emitter.emit_diag(Cat.NAV, "Active section changed", active=key, previous=previous)
        for listener in list(self._listeners):
            listener(key)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def scroll_to(self, key: str, *, smooth: bool = config.SMOOTH_SCROLL) -> bool:
        """
        Ask the host to bring a section's anchor under the header.

        The active key is left alone here; the scroll events that follow
        update it through the normal tick path.
        """
        anchor_id = self._handle.anchor_id(key) if self._handle else None
        if anchor_id is None:
            self._emit_signal("scroll_to: unknown section key", level="warning", sec=key)
            return False
        if self.command is None:
            self._emit_signal("scroll_to: no scroll command on this host", level="warning", sec=key)
            return False

        self.command.scroll_to_anchor(anchor_id, smooth=smooth)
        if self._emitter:
            self._emitter.counters.inc("tracker.scroll_to")
        self._emit_diag("Scroll requested", sec=key, anchor=anchor_id, smooth=smooth)
        return True
