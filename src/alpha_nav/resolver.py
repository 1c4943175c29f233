from __future__ import annotations

from typing import Optional, Sequence

from .section_handles import Section


def resolve_active_section(
    sections: Sequence[Section],
    scroll_y: float,
    header_offset: float,
) -> Optional[str]:
    """
    Return the key of the section the reader is currently in.

    The active section is the bottom-most one whose anchor has scrolled past
    the sticky header. At the very top of the page the first section is
    active no matter where the anchors sit, and when nothing has been reached
    yet the first section is the fallback.

    Sections must be in document order (ascending anchor_top).
    """
    if not sections:
        return None

    first = sections[0].key
    if scroll_y == 0:
        return first

    for section in reversed(sections):
        if section.anchor_top - header_offset <= scroll_y:
            return section.key

    return first
