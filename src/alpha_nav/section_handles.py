from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, Tuple


@dataclass(frozen=True)
class Section:
    """
    One lettered section as the resolver sees it.

    anchor_top is the document y-coordinate of the section anchor, read fresh
    for every resolution. Missing anchors carry float("inf").
    """
    key: str
    anchor_top: float


@dataclass(frozen=True)
class AnchorNaming:
    """
    Deterministic anchor id for a section key.

    With a prefix the id is "<prefix>-<key>", so several lettered lists can
    share one document without id clashes.
    """
    prefix: Optional[str] = None

    def anchor_id(self, key: str) -> str:
        return f"{self.prefix}-{key}" if self.prefix else key


class PageGeometry(Protocol):
    """Geometry capability supplied by the host document."""

    def measure(self, anchor_ids: Sequence[str]) -> Tuple[float, List[Optional[float]]]:
        """
        Current scroll offset plus the document top of each anchor, in order,
        read in one pass. None for an anchor that is not in the document.
        """
        ...
