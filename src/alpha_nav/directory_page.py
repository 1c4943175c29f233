from __future__ import annotations

import html
from pathlib import Path
from typing import Dict, List, Sequence

from .directory import DirectoryEntry
from .navigation_rail import render_rail_html
from .section_handles import AnchorNaming
from .. import config

_PAGE_CSS = """
body { margin: 0; font-family: system-ui, sans-serif; color: #1f2a44; }
.directory__header { position: sticky; top: 0; height: %(header)dpx; box-sizing: border-box;
  display: flex; align-items: center; padding: 0 24px; background: #fff;
  box-shadow: 0 1px 4px rgba(0,0,0,.08); z-index: 10; }
.directory__body { display: flex; gap: 24px; padding: 24px; }
.alpha-rail { position: sticky; top: %(rail_top)dpx; align-self: flex-start;
  display: flex; flex-direction: column; padding: 8px; border-radius: 8px;
  box-shadow: 0 1px 4px rgba(0,0,0,.12); background: #fff; }
.alpha-rail__item { width: 32px; height: 32px; margin: 2px 0; border: 0; border-radius: 50%%;
  background: transparent; cursor: pointer; }
.alpha-rail__item:hover { background: #dbeafe; }
.alpha-rail__item.is-active { background: #2563eb; color: #fff; }
.alpha-rail__item.is-pulsing { box-shadow: 0 0 0 4px rgba(37,99,235,.35); }
.directory__section { margin-bottom: 32px; }
.directory__letter { font-size: 28px; border-bottom: 1px solid #e5e7eb; }
.directory__entry { padding: 10px 0; }
.directory__entry small { color: #6b7280; margin-left: 8px; }
"""

# Rail clicks are queued for the Python host to drain; it decides the scroll.
_CLICK_RECORDER_JS = """
window.%(clicks)s = [];
document.addEventListener('click', function (ev) {
  var btn = ev.target.closest(%(item_sel)s);
  if (!btn) { return; }
  ev.preventDefault();
  window.%(clicks)s.push(btn.getAttribute('data-key'));
});
"""


def _render_entry(entry: DirectoryEntry) -> str:
    meta = ", ".join(x for x in (entry.state, entry.type) if x)
    meta_html = f"<small>{html.escape(meta)}</small>" if meta else ""
    return (
        f'<li class="directory__entry" data-id="{html.escape(entry.id, quote=True)}">'
        f"{html.escape(entry.name)}{meta_html}</li>"
    )


def render_directory_page(
    groups: Dict[str, List[DirectoryEntry]],
    *,
    naming: AnchorNaming,
    title: str = config.PAGE_TITLE,
    header_offset: float = config.HEADER_OFFSET_PX,
) -> str:
    """
    Full HTML document: sticky header, the letter rail, one anchored
    <section> per letter in the order of `groups`.
    """
    letters: Sequence[str] = list(groups)
    header_px = int(header_offset)

    sections: List[str] = []
    for letter in letters:
        anchor = html.escape(naming.anchor_id(letter), quote=True)
        items = "".join(_render_entry(e) for e in groups[letter])
        sections.append(
            f'<section class="directory__section" id="{anchor}">'
            f'<h2 class="directory__letter">{html.escape(letter)}</h2>'
            f'<ul class="directory__list">{items}</ul>'
            "</section>"
        )

    css = _PAGE_CSS % {"header": header_px, "rail_top": header_px + 16}
    js = _CLICK_RECORDER_JS % {
        "clicks": config.PAGE_GLOBALS["rail_clicks"],
        "item_sel": repr(config.PAGE_SELECTORS["rail_item"]),
    }
    rail = render_rail_html(letters, letters[0] if letters else None)
    body = "".join(sections) if sections else '<p class="directory__empty">No entries.</p>'

    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head><meta charset="utf-8">'
        f"<title>{html.escape(title)}</title>"
        f"<style>{css}</style></head>"
        "<body>"
        f'<header class="directory__header"><h1>{html.escape(title)}</h1></header>'
        f'<div class="directory__body">{rail}<main class="directory__main">{body}</main></div>'
        f"<script>{js}</script>"
        "</body></html>"
    )


def write_directory_page(out_path: Path, page_html: str) -> Path:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(page_html, encoding="utf-8")
    return out_path
