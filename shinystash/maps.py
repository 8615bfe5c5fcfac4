"""Per-map texture calibrations, indexed by spawner map index."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .helpers import MapProfile


@dataclass(frozen=True)
class GameMap:
    name: str
    image: str
    profile: MapProfile


MAPS: Tuple[GameMap, ...] = (
    GameMap(
        "Lumiose City",
        "lumiose.png",
        MapProfile(4096, 4096, 3940, 3940, 1000, 1000, -1, -1, 500, 500),
    ),
    GameMap(
        "Lysandre Labs",
        "LysandreLabs.png",
        MapProfile(2160, 2160, 1662, 2041, 1662 / 10.291021, 2041 / 10.291021, -1, -1, -3, -80),
    ),
    GameMap(
        "The Sewers",
        "Sewers.png",
        MapProfile(2160, 2160, 1364, 1975, 1364 / 6.2, 1975 / 6.2, 1, 1, 1, 146),
    ),
    GameMap(
        "The Sewers B",
        "SewersB.png",
        MapProfile(2160, 2160, 1521, 1966, 1521 / 16.714285, 1966 / 16.714285, 1, 1, 39, 45),
    ),
)


def map_name(map_index: int) -> str:
    if 0 <= map_index < len(MAPS):
        return MAPS[map_index].name
    return f"Map #{map_index}"
