from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

import numpy as np


Vector3 = Tuple[float, float, float]


@dataclass(frozen=True)
class MapProfile:
    """Affine calibration from world X/Z to a map texture."""

    tex_w: float
    tex_h: float
    range_x: float
    range_z: float
    scale_x: float
    scale_z: float
    dir_x: float
    dir_z: float
    offset_x: float
    offset_z: float

    def convert_x(self, x: float) -> float:
        return self.tex_w / 2 + self.dir_x * ((self.range_x / self.scale_x) * (x + self.offset_x))

    def convert_z(self, z: float) -> float:
        return self.tex_h / 2 + self.dir_z * ((self.range_z / self.scale_z) * (z + self.offset_z))

    def project(self, x: float, z: float) -> Tuple[float, float]:
        """Return the texture coordinate of world position ``(x, z)``."""
        return self.convert_x(x), self.convert_z(z)


def world_to_image(
    profile: MapProfile,
    pos: Vector3,
    width: int,
    height: int,
) -> Optional[Tuple[int, int]]:
    """Convert ``pos`` to pixel coordinates on an image of ``width`` x ``height``.

    Returns ``None`` when the point falls outside the image.
    """
    tex_x, tex_z = profile.project(pos[0], pos[2])
    px = int((tex_x / profile.tex_w) * width)
    py = int((tex_z / profile.tex_h) * height)
    if px < 0 or px >= width or py < 0 or py >= height:
        return None
    return px, py


def project_many(profile: MapProfile, positions: Iterable[Vector3]) -> np.ndarray:
    """Return an ``(n, 2)`` array of texture coordinates for ``positions``."""
    pts = np.asarray(list(positions), dtype=np.float64).reshape(-1, 3)
    out = np.empty((len(pts), 2), dtype=np.float64)
    out[:, 0] = profile.tex_w / 2 + profile.dir_x * (profile.range_x / profile.scale_x) * (pts[:, 0] + profile.offset_x)
    out[:, 1] = profile.tex_h / 2 + profile.dir_z * (profile.range_z / profile.scale_z) * (pts[:, 2] + profile.offset_z)
    return out
