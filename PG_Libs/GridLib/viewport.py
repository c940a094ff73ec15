"""
Viewport scaling for the on-screen canvas.

The grid always has a fixed logical size; the viewport only decides the
integer zoom used to draw it crisply and maps display coordinates back to
grid cells. Nothing here touches the grid.
"""

import math
from dataclasses import dataclass
from typing import Tuple

from PG_Libs.constants import VIEWPORT_MARGIN


def compute_scale(
    container_width: float,
    container_height: float,
    resolution: int,
    margin: int = VIEWPORT_MARGIN,
) -> int:
    """max(1, floor((min(w, h) - margin) / resolution))"""
    if resolution < 1:
        raise ValueError(f"resolution must be >= 1, got {resolution}")
    available = min(container_width, container_height) - margin
    return max(1, math.floor(available / resolution))


def display_to_grid(display_x: float, display_y: float, scale: int) -> Tuple[int, int]:
    return math.floor(display_x / scale), math.floor(display_y / scale)


@dataclass(frozen=True)
class Viewport:
    scale: int = 1

    def __post_init__(self) -> None:
        if self.scale < 1:
            raise ValueError(f"scale must be >= 1, got {self.scale}")

    @classmethod
    def fit(
        cls,
        container_width: float,
        container_height: float,
        resolution: int,
        margin: int = VIEWPORT_MARGIN,
    ) -> "Viewport":
        return cls(compute_scale(container_width, container_height, resolution, margin))

    def to_grid(self, display_x: float, display_y: float) -> Tuple[int, int]:
        return display_to_grid(display_x, display_y, self.scale)

    def canvas_size(self, resolution: int) -> int:
        return resolution * self.scale
