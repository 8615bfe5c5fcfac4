from __future__ import annotations

"""Species id conversion and display names."""

import logging
import os
from typing import List, Sequence

logger = logging.getLogger(__name__)

# First internal species id whose public index differs.
REMAP_START = 917

# Signed delta added to internal ids REMAP_START .. REMAP_START + len - 1.
REMAP_DELTAS = (
    65, -1, -1, -1, -1, 31, 31, 47, 47, 29, 29, 53, 31, 31, 46, 44, 30, 30,
    -7, -7, -7, 13, 13, -2, -2, 23, 23, 24, -21, -21, 27, 27, 47, 47, 47, 26,
    14, -33, -33, -33, -17, -17, 3, -29, 12, -12, -31, -31, -31, 3, 3, -24,
    -24, -44, -44, -30, -30, -28, -28, 23, 23, 6, 7, 29, 8, 3, 4, 4, 20, 4,
    23, 6, 3, 3, 4, -1, 13, 9, 7, 5, 7, 9, 9, -43, -43, -43, -68, -68, -68,
    -58, -58, -25, -29, -31, 6, -1, 6, 0, 0, 0, 3, 3, 4, 2, 3, 3, -5, -12,
    -12,
)


def to_national(internal: int, deltas: Sequence[int] = REMAP_DELTAS) -> int:
    """Return the public species index for an internal species id."""
    idx = internal - REMAP_START
    if idx < 0 or idx >= len(deltas):
        return internal
    return internal + deltas[idx]


class SpeciesNames:
    """Display names indexed by public species index."""

    FILE_NAME = "species_en.txt"

    def __init__(self, names: List[str] | None = None) -> None:
        self.names = names or []

    @classmethod
    def from_text(cls, content: str) -> "SpeciesNames":
        lines = content.split("\n")
        if lines[-1] == "":
            lines.pop()
        return cls([line.rstrip("\r") for line in lines])

    @classmethod
    def load(cls, data_dir: str) -> "SpeciesNames":
        """Load ``species_en.txt`` from ``data_dir``; missing file gives no names."""
        path = os.path.join(data_dir, cls.FILE_NAME)
        try:
            with open(path, "r", encoding="utf-8") as fh:
                content = fh.read()
        except OSError as exc:
            logger.warning("Species names unavailable: %s", exc)
            return cls()
        names = cls.from_text(content)
        logger.debug("Loaded %d species names", len(names))
        return names

    def __len__(self) -> int:
        return len(self.names)

    def name(self, national: int) -> str:
        if 0 <= national < len(self.names):
            return self.names[national]
        return f"Species #{national}"
