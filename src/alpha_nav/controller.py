# controller.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

from .context import AppContext
from .directory import alphabetical_letters, group_by_letter, read_directory
from .directory_page import render_directory_page, write_directory_page
from .instrumentation import Cat
from .section_handles import AnchorNaming
from .timing import phase_timer
from .. import config


class DirectoryNavController:
    def __init__(self, ctx: AppContext):
        self.ctx = ctx
        self.logger = ctx.logger
        self.emitter = ctx.emitter
        self.page = ctx.page
        self.loop = ctx.loop
        self.tracker = ctx.tracker
        self.rail = ctx.rail

    def control_process(
        self,
        *,
        directory_path: Path,
        out_path: Path,
        seconds: float = config.RUN_SECONDS,
        prefix: Optional[str] = config.ANCHOR_PREFIX,
    ) -> None:
        """
        Landing point from src/main.py.

        1. read the directory and render the lettered page
        2. open it in the browser
        3. mount tracker + rail and run the host loop
        """
        emitter = self.emitter

        with phase_timer(emitter, "Directory read + render", cat=Cat.DIR):
            entries = read_directory(directory_path, emitter=emitter)
            groups = group_by_letter(entries)
            letters = alphabetical_letters(entries)
            page_html = render_directory_page(
                groups,
                naming=AnchorNaming(prefix),
                header_offset=self.tracker.header_offset,
            )
            write_directory_page(out_path, page_html)
            self.logger.info("Wrote directory page (%d letters) to %s", len(letters), out_path.as_posix())

        if not letters:
            emitter.emit_signal(Cat.DIR, "Directory is empty; rail will render nothing", level="warning")

        with phase_timer(emitter, "Open page", cat=Cat.PAGE):
            self.page.open(out_path)

        render_off = self.rail.on_render(
            lambda rail: self.page.apply_rail_state(self.tracker.active, pulsing=rail.pulsing)
        )
        remove_hook = self.loop.add_turn_hook(self._drain_rail_clicks)
        try:
            with phase_timer(emitter, f"Track scroll for {seconds:.0f}s", cat=Cat.SCROLL):
                with self.tracker.tracking(letters, prefix=prefix):
                    self.rail.attach()
                    try:
                        self.page.apply_rail_state(self.tracker.active)
                        self.loop.run_for(seconds, poll_interval_s=config.POLL_INTERVAL_S)
                    finally:
                        self.rail.detach()
        finally:
            remove_hook()
            render_off()

        emitter.emit_signal(Cat.NAV, "Tracking finished", **emitter.counters.snapshot())

    def _drain_rail_clicks(self) -> None:
        for key in self.page.drain_rail_clicks():
            self.rail.activate(key)
