# src/alpha_nav/page_session.py
import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from selenium.webdriver.support.ui import WebDriverWait
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.common.by import By
from selenium.common.exceptions import TimeoutException, WebDriverException

from .driver import create_driver
from .errors import ScrollSourceUnavailable
from .host_loop import ScrollListener
from .instrumentation import Cat, Emitter
from .. import config

_G = config.PAGE_GLOBALS

# One round-trip per tick: [scrollY, [top-or-null, ...]]
_MEASURE_JS = """
var y = window.scrollY || window.pageYOffset || 0;
var ids = arguments[0] || [];
var tops = [];
for (var i = 0; i < ids.length; i++) {
  var el = document.getElementById(ids[i]);
  tops.push(el ? el.getBoundingClientRect().top + y : null);
}
return [y, tops];
"""

_SCROLL_TO_JS = """
var el = document.getElementById(arguments[0]);
if (!el) { return false; }
var top = el.getBoundingClientRect().top + (window.scrollY || window.pageYOffset || 0) - arguments[1];
window.scrollTo({top: Math.max(0, top), behavior: arguments[2] ? 'smooth' : 'auto'});
return true;
"""

_INSTALL_LISTENER_JS = """
if (typeof window === 'undefined' || typeof window.addEventListener !== 'function') { return false; }
window.%(events)s = 0;
if (!window.%(listener)s) {
  window.%(listener)s = function () { window.%(events)s += 1; };
  window.addEventListener('scroll', window.%(listener)s, {passive: true});
}
return true;
""" % {"events": _G["scroll_events"], "listener": _G["scroll_listener"]}

_REMOVE_LISTENER_JS = """
if (window.%(listener)s) {
  window.removeEventListener('scroll', window.%(listener)s);
  delete window.%(listener)s;
}
window.%(events)s = 0;
return true;
""" % {"events": _G["scroll_events"], "listener": _G["scroll_listener"]}

_DRAIN_EVENTS_JS = """
var n = window.%(events)s || 0;
window.%(events)s = 0;
return [n, window.scrollY || window.pageYOffset || 0];
""" % {"events": _G["scroll_events"]}

_DRAIN_CLICKS_JS = """
var q = window.%(clicks)s || [];
window.%(clicks)s = [];
return q;
""" % {"clicks": _G["rail_clicks"]}

_APPLY_RAIL_JS = """
var items = document.querySelectorAll(arguments[0]);
for (var i = 0; i < items.length; i++) {
  var on = items[i].getAttribute('data-key') === arguments[1];
  items[i].classList.toggle(arguments[2], on);
  items[i].classList.toggle(arguments[3], on && arguments[4]);
  if (on) { items[i].setAttribute('aria-current', 'true'); } else { items[i].removeAttribute('aria-current'); }
}
return items.length;
"""


class PageSession:
    """
    Browser host for the tracker.

    Provides the geometry capability (anchor tops, scroll offset), the
    scroll-to command, and the rail highlight, all through execute_script.
    """

    def __init__(
        self,
        driver=None,
        *,
        emitter: Emitter | None = None,
        header_offset: float = config.HEADER_OFFSET_PX,
        headless: bool | None = None,
    ) -> None:
        self.driver = driver if driver is not None else create_driver(headless=headless)
        self.emitter = emitter or Emitter(logging.getLogger("alpha_nav"))
        self.header_offset = header_offset
        self.wait = WebDriverWait(self.driver, config.WAIT_TIME)

    def _ctx(self, *, kind: str | None = None, **extra: Any) -> dict[str, Any]:
        ctx: dict[str, Any] = {}
        if kind:
            ctx["kind"] = kind
        ctx.update(extra)
        return ctx

    def open(self, page_path: Path) -> None:
        url = Path(page_path).resolve().as_uri()
        self.driver.get(url)
        try:
            self.wait.until(
                EC.presence_of_element_located((By.CSS_SELECTOR, config.PAGE_SELECTORS["header"]))
            )
        except TimeoutException:
            self.emitter.emit_signal(
                Cat.PAGE,
                "Directory header did not appear; page may not have loaded",
                level="warning",
                **self._ctx(kind="open", url=url),
            )
            raise
        self.emitter.emit_signal(Cat.PAGE, "Opened directory page", **self._ctx(kind="open", url=url))

    def close(self) -> None:
        self.driver.quit()

    # ------------------------------------------------------------------
    # Geometry capability
    # ------------------------------------------------------------------

    def measure(self, anchor_ids: Sequence[str]) -> Tuple[float, List[Optional[float]]]:
        scroll_y, tops = self.driver.execute_script(_MEASURE_JS, list(anchor_ids)) or (0, [])
        return float(scroll_y or 0), [None if t is None else float(t) for t in tops]

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def scroll_to_anchor(self, anchor_id: str, *, smooth: bool = True) -> None:
        # A new scrollTo replaces any smooth scroll still in flight.
        ok = self.driver.execute_script(_SCROLL_TO_JS, anchor_id, float(self.header_offset), bool(smooth))
        if not ok:
            self.emitter.emit_signal(
                Cat.PAGE,
                "scroll_to_anchor: anchor not in document",
                level="warning",
                **self._ctx(kind="scroll_to", anchor=anchor_id),
            )

    def apply_rail_state(self, active: Optional[str], *, pulsing: bool = False) -> None:
        count = self.driver.execute_script(
            _APPLY_RAIL_JS,
            config.PAGE_SELECTORS["rail_item"],
            active,
            config.PAGE_SELECTORS["rail_active_class"],
            config.PAGE_SELECTORS["rail_pulse_class"],
            bool(pulsing),
        )
        self.emitter.emit_diag(Cat.RAIL, "Rail highlight applied", active=active, pulsing=pulsing, items=count)

    def drain_rail_clicks(self) -> List[str]:
        keys = self.driver.execute_script(_DRAIN_CLICKS_JS) or []
        return [str(k) for k in keys]


class SeleniumScrollSource:
    """
    Scroll events from the page, delivered by polling.

    The in-page listener only counts events; poll() drains the count and,
    when anything happened, calls each listener once with the current offset.
    """

    def __init__(self, page: PageSession) -> None:
        self.page = page
        self._listeners: List[ScrollListener] = []

    def listener_count(self) -> int:
        return len(self._listeners)

    def add_listener(self, listener: ScrollListener) -> None:
        if not self._listeners:
            try:
                ok = self.page.driver.execute_script(_INSTALL_LISTENER_JS)
            except WebDriverException as e:
                raise ScrollSourceUnavailable(f"Could not install scroll listener: {e.msg}") from e
            if not ok:
                raise ScrollSourceUnavailable("Page has no window.addEventListener")
            self.page.emitter.emit_diag(Cat.SCROLL, "In-page scroll listener installed")
        self._listeners.append(listener)

    def remove_listener(self, listener: ScrollListener) -> None:
        if listener not in self._listeners:
            return
        self._listeners.remove(listener)
        if not self._listeners:
            try:
                self.page.driver.execute_script(_REMOVE_LISTENER_JS)
            except WebDriverException as e:
                # the page may already be gone at teardown
                self.page.emitter.emit_signal(
                    Cat.SCROLL,
                    f"Could not remove in-page scroll listener: {e.msg}",
                    level="warning",
                )
                return
            self.page.emitter.emit_diag(Cat.SCROLL, "In-page scroll listener removed")

    def poll(self) -> int:
        if not self._listeners:
            return 0
        try:
            count, scroll_y = self.page.driver.execute_script(_DRAIN_EVENTS_JS)
            count = int(count or 0)
            if count:
                for listener in list(self._listeners):
                    listener(float(scroll_y or 0))
        except WebDriverException as e:
            # a dropped tick is corrected by the next one
            self.page.emitter.counters.inc("scroll.poll_errors")
            self.page.emitter.emit_signal(
                Cat.SCROLL,
                f"Scroll poll failed; skipping tick: {e.msg}",
                level="warning",
            )
            return 0
        return count
