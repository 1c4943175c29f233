import os
from dotenv import load_dotenv

load_dotenv()

# Sticky header height in px; anchors are considered "reached" this far above their top
HEADER_OFFSET_PX = float(os.getenv("NAV_HEADER_OFFSET_PX", "100"))

# Quiet period after the last scroll event before "scrolling stopped" fires
SCROLL_QUIESCENCE_S = 0.15

# How long the active rail letter pulses after scrolling settles (cosmetic)
RAIL_PULSE_S = 0.6

# How often the host loop drains scroll events from the page
POLL_INTERVAL_S = float(os.getenv("NAV_POLL_INTERVAL_S", "0.05"))

# How long `python -m src.main` keeps the tracker mounted
RUN_SECONDS = float(os.getenv("NAV_RUN_SECONDS", "30"))

# Selenium
WAIT_TIME = int(os.getenv("NAV_WAIT_TIME", "10"))
IMPLICIT_WAIT = int(os.getenv("NAV_IMPLICIT_WAIT", "3"))
HEADLESS = os.getenv("HEADLESS", "false").lower() == "true"

# --- Instrumentation / diagnostics ---
LOG_MODE = os.getenv("NAV_LOG_MODE", "live").lower()  # live | debug | trace
LOG_FILE = os.getenv("NAV_LOG_FILE", "alpha_nav.log")
LOG_RATE_LIMITS_S = {
    "SCROLL.tick": 0.5,
    "PAGE.anchor_missing": 2.0,
}

# --- Directory page ---
DIRECTORY_PATH = os.getenv("NAV_DIRECTORY_PATH", "data/universities.yaml")
PAGE_OUT_PATH = os.getenv("NAV_PAGE_OUT_PATH", "out/directory.html")
PAGE_TITLE = os.getenv("NAV_PAGE_TITLE", "Universities A-Z")

# Optional id prefix so several lettered lists can live on one page
ANCHOR_PREFIX = os.getenv("NAV_ANCHOR_PREFIX", "letter") or None
SMOOTH_SCROLL = os.getenv("NAV_SMOOTH_SCROLL", "true").lower() == "true"

PAGE_SELECTORS = {
    "rail_root": "nav.alpha-rail",
    "rail_item": "nav.alpha-rail button[data-key]",
    "rail_active_class": "is-active",
    "rail_pulse_class": "is-pulsing",
    "header": "header.directory__header",
}

# Names of the page globals used by the in-page scroll/click recorders
PAGE_GLOBALS = {
    "scroll_events": "__alphaNavScrollEvents",
    "scroll_listener": "__alphaNavScrollListener",
    "rail_clicks": "__alphaNavRailClicks",
}
