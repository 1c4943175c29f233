from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple

from .instrumentation import Cat, Emitter
from .section_handles import AnchorNaming, PageGeometry, Section


class RegistryHandle:
    """
    Live registration of one ordered key list on the page.

    Released handles expose no keys, so anything resolving through them
    lands on the empty-registry answer (None).
    """

    def __init__(self, registry: "SectionRegistry", keys: List[str], naming: AnchorNaming) -> None:
        self._registry = registry
        self._keys = keys
        self.naming = naming
        self.released = False

    @property
    def keys(self) -> List[str]:
        return [] if self.released else list(self._keys)

    def anchor_id(self, key: str) -> Optional[str]:
        if self.released or key not in self._keys:
            return None
        return self.naming.anchor_id(key)

    def measure(self, geometry: PageGeometry) -> Tuple[float, List[Section]]:
        """
        Read the scroll offset and every anchor position fresh from the host,
        in registration order, with one geometry call.

        A key whose anchor is not in the document yet gets an infinite top so
        the resolver never picks it as the reached section.
        """
        keys = self.keys
        scroll_y, tops = geometry.measure([self.naming.anchor_id(k) for k in keys])
        out: List[Section] = []
        missing = 0
        for key, top in zip(keys, tops):
            if top is None:
                missing += 1
                top = float("inf")
            out.append(Section(key=key, anchor_top=float(top)))

        if missing:
            self._registry._emit_diag(
                "Anchors missing from document",
                key="PAGE.anchor_missing",
                missing=missing,
                prefix=self.naming.prefix,
            )
        return float(scroll_y), out

    def sections(self, geometry: PageGeometry) -> List[Section]:
        return self.measure(geometry)[1]

    def unregister(self) -> None:
        if self.released:
            return
        self._registry._release(self)
        self.released = True


class SectionRegistry:
    """
    Ordered section keys for the lists mounted on the current page.

    - One handle per anchor prefix; registering the same prefix again replaces it.
    - Duplicate keys inside one registration: the last occurrence wins its position.
    """

    def __init__(self, *, emitter: Emitter | None = None) -> None:
        # prefix ("" for none) -> handle
        self._handles: Dict[str, RegistryHandle] = {}
        self._emitter = emitter

    def _emit_signal(self, msg: str, *, level: str = "info", **ctx: Any) -> None:
        if self._emitter:
            self._emitter.emit_signal(Cat.REG, msg, level=level, **ctx)

    def _emit_diag(self, msg: str, *, key: str | None = None, **ctx: Any) -> None:
        if self._emitter:
            self._emitter.emit_diag(Cat.REG, msg, key=key, **ctx)

    def _inc_counter(self, key: str, n: int = 1) -> None:
        if self._emitter:
            self._emitter.counters.inc(key, n)

    def register(self, keys: Iterable[str], naming: AnchorNaming | None = None) -> RegistryHandle:
        naming = naming or AnchorNaming()
        ordered: Dict[str, None] = {}
        for key in keys:
            if key in ordered:
                self._inc_counter("registry.duplicate_keys")
                self._emit_signal(
                    "Duplicate section key re-registered",
                    level="warning",
                    sec=key,
                    prefix=naming.prefix,
                )
                del ordered[key]
            ordered[key] = None

        slot = naming.prefix or ""
        previous = self._handles.get(slot)
        if previous is not None:
            self._inc_counter("registry.replaced")
            previous.unregister()

        handle = RegistryHandle(self, list(ordered), naming)
        self._handles[slot] = handle
        self._inc_counter("registry.register")

        if not ordered:
            self._emit_diag("Registered empty section list", prefix=naming.prefix)
        else:
            self._emit_diag(
                "Registered sections",
                prefix=naming.prefix,
                count=len(ordered),
                first=handle.keys[0],
                last=handle.keys[-1],
            )
        return handle

    def _release(self, handle: RegistryHandle) -> None:
        slot = handle.naming.prefix or ""
        if self._handles.get(slot) is handle:
            del self._handles[slot]
        self._inc_counter("registry.unregister")
        self._emit_diag("Released section handle", prefix=handle.naming.prefix)

    def handle_for(self, prefix: Optional[str] = None) -> Optional[RegistryHandle]:
        return self._handles.get(prefix or "")

    def stats(self) -> tuple[int, int]:
        return len(self._handles), sum(len(h.keys) for h in self._handles.values())
