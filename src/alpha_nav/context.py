# src/alpha_nav/context.py
from dataclasses import dataclass
import logging

from .host_loop import HostLoop
from .instrumentation import Emitter
from .navigation_rail import NavigationRail
from .page_session import PageSession, SeleniumScrollSource
from .scroll_observer import ScrollObserver
from .section_registry import SectionRegistry
from .tracker import ActiveSectionTracker

@dataclass
class AppContext:
    logger: logging.Logger
    emitter: Emitter
    page: PageSession
    loop: HostLoop
    registry: SectionRegistry
    source: SeleniumScrollSource
    observer: ScrollObserver
    tracker: ActiveSectionTracker
    rail: NavigationRail
