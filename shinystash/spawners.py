"""Spawner location catalog.

Each tier file holds one spawner per line in a loose format::

    "Name" - 0123456789ABCDEF - ... V3f(1.0, 2.0, 3.0) ...

Lines that do not fit are skipped; :func:`parse_spawner_line` reports why.
"""

from __future__ import annotations

import logging
import os
import re
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Union

logger = logging.getLogger(__name__)

DELIMITER = " - "
MIN_LINE_LENGTH = 20  # characters
HASH_RE = re.compile(r"[0-9A-Fa-f]{16}")

# (file name, map index); later files win on a repeated hash
TIER_FILES = (
    ("t1_point_spawners.txt", 0),
    ("t2_point_spawners.txt", 1),
    ("t3_point_spawners.txt", 2),
    ("t4_point_spawners.txt", 3),
)


@dataclass(frozen=True)
class SpawnerLocation:
    hash: int
    x: float
    y: float
    z: float
    map_index: int
    name: str


class SkipReason(Enum):
    TOO_SHORT = "too_short"
    NO_DELIMITER = "no_delimiter"
    BAD_HASH = "bad_hash"
    NO_COORDINATES = "no_coordinates"
    BAD_COORDINATES = "bad_coordinates"


ParseOutcome = Union[SpawnerLocation, SkipReason]


def _parse_coordinates(text: str) -> Optional[tuple]:
    parts = text.split(",")
    if len(parts) < 3:
        return None
    try:
        return tuple(float(p.strip()) for p in parts[:3])
    except ValueError:
        return None


def parse_spawner_line(line: str, map_index: int) -> ParseOutcome:
    """Parse one catalog line into a :class:`SpawnerLocation` or a skip reason."""

    if len(line) < MIN_LINE_LENGTH:
        return SkipReason.TOO_SHORT

    d1 = line.find(DELIMITER)
    if d1 == -1:
        return SkipReason.NO_DELIMITER
    hash_start = d1 + len(DELIMITER)
    d2 = line.find(DELIMITER, hash_start)
    if d2 == -1:
        return SkipReason.NO_DELIMITER

    hash_text = line[hash_start:d2]
    if not HASH_RE.fullmatch(hash_text):
        return SkipReason.BAD_HASH

    v = line.find("V3f(")
    if v == -1:
        return SkipReason.NO_COORDINATES
    start = v + 4
    end = line.find(")", start)
    if end == -1:
        return SkipReason.NO_COORDINATES
    coords = _parse_coordinates(line[start:end])
    if coords is None:
        return SkipReason.BAD_COORDINATES

    name = line[:d1].strip(" \t\"")
    x, y, z = coords
    return SpawnerLocation(int(hash_text, 16), x, y, z, map_index, name)


class SpawnerCatalog:
    """Hash indexed spawner locations across all maps."""

    def __init__(self) -> None:
        self._by_hash: Dict[int, SpawnerLocation] = {}
        self.skipped: Counter = Counter()

    def __len__(self) -> int:
        return len(self._by_hash)

    def __contains__(self, hash_: int) -> bool:
        return hash_ in self._by_hash

    def add(self, location: SpawnerLocation) -> None:
        self._by_hash[location.hash] = location

    def add_lines(self, lines: Iterable[str], map_index: int) -> int:
        """Parse ``lines`` for ``map_index`` and return how many were added."""
        added = 0
        for line in lines:
            outcome = parse_spawner_line(line, map_index)
            if isinstance(outcome, SkipReason):
                if line.strip():
                    self.skipped[outcome] += 1
                continue
            self.add(outcome)
            added += 1
        return added

    def add_text(self, content: str, map_index: int) -> int:
        return self.add_lines(content.split("\n"), map_index)

    def find(self, hash_: int) -> Optional[SpawnerLocation]:
        return self._by_hash.get(hash_)

    def on_map(self, map_index: int) -> List[SpawnerLocation]:
        return [loc for loc in self._by_hash.values() if loc.map_index == map_index]

    @classmethod
    def load(cls, data_dir: str) -> "SpawnerCatalog":
        """Load every tier file present in ``data_dir``."""

        catalog = cls()
        for file_name, map_index in TIER_FILES:
            path = os.path.join(data_dir, file_name)
            try:
                with open(path, "r", encoding="utf-8", errors="replace") as fh:
                    content = fh.read()
            except OSError as exc:
                logger.warning("Skipping spawner file %s: %s", path, exc)
                continue
            added = catalog.add_text(content, map_index)
            logger.debug("%s: %d spawners for map %d", file_name, added, map_index)
        if catalog.skipped:
            logger.debug(
                "Skipped catalog lines: %s",
                ", ".join(f"{r.value}={n}" for r, n in catalog.skipped.items()),
            )
        logger.info("Loaded %d spawner locations", len(catalog))
        return catalog
