# src/alpha_nav/directory.py

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import yaml

from .errors import DirectorySpecError
from .instrumentation import Cat, Emitter


@dataclass(frozen=True)
class DirectoryEntry:
    """
    One row of the lettered university directory.
    """
    id: str
    name: str
    state: Optional[str] = None
    type: Optional[str] = None
    order_letter: str = ""   # section key; derived from the name when absent


def _letter_for(name: str, raw_letter: Any) -> str:
    letter = str(raw_letter or "").strip().upper()
    if letter:
        return letter
    stripped = name.strip()
    return stripped[0].upper() if stripped else "#"


def _optional_text(raw: Dict[str, Any], field: str, index: int, path: Path) -> Optional[str]:
    value = raw.get(field)
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        raise DirectorySpecError(
            f"{path}: universities[{index}].{field} must be a plain value, got {type(value).__name__}"
        )
    return str(value).strip() or None


def _entry_from_raw(raw: Dict[str, Any], index: int, path: Path) -> DirectoryEntry:
    if not isinstance(raw, dict):
        raise DirectorySpecError(f"{path}: universities[{index}] must be a mapping, got {type(raw).__name__}")

    name = str(raw.get("name") or "").strip()
    if not name:
        raise DirectorySpecError(f"{path}: universities[{index}] has no name")

    entry_id = str(raw.get("id") or name)
    return DirectoryEntry(
        id=entry_id,
        name=name,
        state=_optional_text(raw, "state", index, path),
        type=_optional_text(raw, "type", index, path),
        order_letter=_letter_for(name, raw.get("order_letter")),
    )


def read_directory(path: Union[str, Path], *, emitter: Emitter | None = None) -> List[DirectoryEntry]:
    """
    Load directory entries from a YAML file shaped like:

        universities:
          - id: harvard
            name: Harvard University
            state: MA
            type: private
            order_letter: H
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DirectorySpecError(f"{path}: cannot read directory file ({e})") from e

    try:
        doc = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise DirectorySpecError(f"{path}: invalid YAML ({e})") from e

    if not isinstance(doc, dict):
        raise DirectorySpecError(f"{path}: top level must be a mapping with a 'universities' list")

    rows = doc.get("universities") or []
    if not isinstance(rows, list):
        raise DirectorySpecError(f"{path}: 'universities' must be a list")

    entries = [_entry_from_raw(raw, i, path) for i, raw in enumerate(rows)]
    if emitter:
        emitter.emit_signal(Cat.DIR, f"Loaded {len(entries)} directory entries", path=path.as_posix())
    return entries


def group_by_letter(entries: Iterable[DirectoryEntry]) -> Dict[str, List[DirectoryEntry]]:
    """Letter -> entries sorted by name, letters in alphabetical order."""
    groups: Dict[str, List[DirectoryEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.order_letter, []).append(entry)

    return {
        letter: sorted(groups[letter], key=lambda e: e.name.casefold())
        for letter in sorted(groups)
    }


def alphabetical_letters(entries: Iterable[DirectoryEntry]) -> List[str]:
    return sorted({e.order_letter for e in entries})
