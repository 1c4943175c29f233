import argparse
import logging
from pathlib import Path

from selenium.common.exceptions import WebDriverException

from . import config
from .alpha_nav.controller import DirectoryNavController
from .alpha_nav.context import AppContext
from .alpha_nav.errors import DirectorySpecError, ScrollSourceUnavailable
from .alpha_nav.host_loop import HostLoop
from .alpha_nav.instrumentation import Cat, Emitter, InstrumentPolicy, parse_log_mode
from .alpha_nav.navigation_rail import NavigationRail
from .alpha_nav.page_session import PageSession, SeleniumScrollSource
from .alpha_nav.scroll_observer import ScrollObserver
from .alpha_nav.section_registry import SectionRegistry
from .alpha_nav.tracker import ActiveSectionTracker


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="alpha-nav",
        description="Render the lettered university directory and keep its A-Z rail in sync with scrolling.",
    )
    parser.add_argument("--directory", type=Path, default=Path(config.DIRECTORY_PATH),
                        help="YAML file with a top-level 'universities' list")
    parser.add_argument("--out", type=Path, default=Path(config.PAGE_OUT_PATH),
                        help="where to write the rendered HTML page")
    parser.add_argument("--seconds", type=float, default=config.RUN_SECONDS,
                        help="how long to keep the tracker mounted")
    parser.add_argument("--headless", action="store_true", default=config.HEADLESS)
    parser.add_argument("--verbose", action="store_true", help="log DEBUG to the console too")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logger = setup_logging(verbose_console=args.verbose)

    emitter = Emitter(
        logger,
        policy=InstrumentPolicy(
            mode=parse_log_mode(config.LOG_MODE),
            rate_limits_s=config.LOG_RATE_LIMITS_S,
        ),
    )
    emitter.emit_signal(
        Cat.STARTUP,
        "alpha-nav starting",
        log_mode=emitter.policy.mode.value,
        header_offset=config.HEADER_OFFSET_PX,
        quiescence_s=config.SCROLL_QUIESCENCE_S,
    )

    try:
        page = PageSession(emitter=emitter, headless=args.headless)
    except WebDriverException as e:
        logger.error("Could not start Chrome: %s", e.msg)
        return 1

    loop = HostLoop(emitter=emitter)
    registry = SectionRegistry(emitter=emitter)
    source = SeleniumScrollSource(page)
    observer = ScrollObserver(source, loop, emitter=emitter)
    tracker = ActiveSectionTracker(registry, page, observer, command=page, emitter=emitter)
    rail = NavigationRail(tracker, loop, emitter=emitter)

    ctx = AppContext(
        logger=logger,
        emitter=emitter,
        page=page,
        loop=loop,
        registry=registry,
        source=source,
        observer=observer,
        tracker=tracker,
        rail=rail,
    )
    controller = DirectoryNavController(ctx)

    try:
        controller.control_process(
            directory_path=args.directory,
            out_path=args.out,
            seconds=args.seconds,
        )
    except (DirectorySpecError, ScrollSourceUnavailable) as e:
        logger.error("%s", e)
        return 1
    except WebDriverException as e:
        logger.error("Browser session failed: %s", e.msg)
        return 1
    finally:
        page.close()

    return 0

def setup_logging(verbose_console: bool = False):
    logger = logging.getLogger("alpha_nav")
    logger.setLevel(logging.DEBUG)  # emit everything; handlers will filter

    # Clear existing handlers if this is called multiple times
    logger.handlers.clear()
    logger.propagate = False  # don't double-log via root

    fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    formatter = logging.Formatter(fmt)

    # --- Console: WARNING (or DEBUG if verbose_console=True) ---
    console_handler = logging.StreamHandler()
    console_level = logging.DEBUG if verbose_console else logging.WARNING
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)

    # --- File: DEBUG, truncated each run ---
    file_handler = logging.FileHandler(config.LOG_FILE, mode="w", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    file_handler.name = "default_file"

    logger.addHandler(console_handler)
    logger.addHandler(file_handler)

    return logger

if __name__ == "__main__":
    raise SystemExit(main())
