"""Row name lists from Paramdex (<code>/Names/<param stem>.txt).

Name list format: one entry per line, ``<decimal id><space><name text>``::

    1000 Dagger
    1001 Dagger +1

Lists are parsed once per (Paramdex root, game, param file name) and kept
in a caller-owned NameCache. Each key is populated under a lock, then only
read.
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, Hashable, Optional

from soulsparam.config import GameVersion, derive_names_path

logger = logging.getLogger(__name__)


def parse_names(text: str) -> dict[int, str]:
    """Parse a name list into an id -> name mapping."""
    names: dict[int, str] = {}
    for lineno, line in enumerate(text.splitlines(), 1):
        if not line.strip():
            continue
        end = 1 if line[:1] == "-" else 0
        while end < len(line) and line[end].isdigit():
            end += 1
        id_str = line[:end]
        if not id_str.lstrip("-"):
            logger.warning("name list line %d has no leading id: %r", lineno, line)
            continue
        names[int(id_str)] = line[end + 1:]
    return names


def names_key(file_name: str, game: Optional[GameVersion] = None,
              paramdex: Optional[Path] = None) -> tuple[Optional[str], Optional[str], str]:
    """Cache key for a name list: the same stem under another game or root is another list."""
    return (
        str(Path(paramdex).resolve()) if paramdex is not None else None,
        game.value if game is not None else None,
        Path(file_name).stem,
    )


class NameCache:
    """id -> name mappings, populated once per key (see ``names_key``)."""

    def __init__(self):
        self._tables: dict[Hashable, dict[int, str]] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable, load: Callable[[], dict[int, str]]) -> dict[int, str]:
        """Return the mapping for a key, calling ``load`` on first access only."""
        table = self._tables.get(key)
        if table is not None:
            return table
        with self._lock:
            table = self._tables.get(key)
            if table is None:
                table = load()
                self._tables[key] = table
        return table

    def invalidate(self, key: Hashable) -> None:
        with self._lock:
            self._tables.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._tables.clear()

    def __contains__(self, key: Hashable) -> bool:
        return key in self._tables

    @property
    def count(self) -> int:
        return len(self._tables)


def load_names(path: Optional[Path]) -> dict[int, str]:
    """Load a name list file; a missing file yields an empty mapping."""
    if path is None or not path.exists():
        return {}
    names = parse_names(path.read_text(encoding="utf-8-sig", errors="replace"))
    logger.debug("loaded %d names from %s", len(names), path)
    return names


def resolve_name(cache: NameCache, record_id: int, game: GameVersion,
                 file_name: str, paramdex: Path) -> Optional[str]:
    """Look up a record's name, or None if the param has no name for it."""
    names = cache.get(names_key(file_name, game, paramdex),
                      lambda: load_names(derive_names_path(paramdex, game, file_name)))
    return names.get(record_id)


def display_name(cache: NameCache, record_id: int, game: GameVersion,
                 file_name: str, paramdex: Path) -> str:
    """Record name for display, falling back to the bare id."""
    name = resolve_name(cache, record_id, game, file_name, paramdex)
    return name if name is not None else str(record_id)
