"""
Pixel grid data models for Pixel Gen.

This module defines core data structures used throughout the editing system.

Classes:
    Resolution: Enumerated square grid side lengths
    PixelGrid: Immutable row-major grid of color strings or TRANSPARENT
    Tool: Raster editing tools
    ToolState: Active tool, brush size and draw color

Type Aliases:
    Color: Canonical "#rrggbb" string
    Cell: A Color or the TRANSPARENT sentinel
"""

import re
from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from PG_Libs.constants import (
    DEFAULT_DRAW_COLOR,
    MIN_BRUSH_SIZE,
    SUPPORTED_RESOLUTIONS,
    TRANSPARENT,
)

Color = str
Cell = str
RgbColor = Tuple[int, int, int]

_HEX_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


class Resolution(IntEnum):
    XS = 32
    S = 64
    M = 128
    L = 256


def validate_resolution(value: int) -> Resolution:
    """
    Return the Resolution member for value.

    Raises:
        ValueError: If value is not one of the supported grid sizes
    """
    try:
        return Resolution(int(value))
    except (TypeError, ValueError):
        raise ValueError(
            f"Unsupported resolution: {value}. Must be one of {SUPPORTED_RESOLUTIONS}"
        ) from None


def rgb_to_hex(r: int, g: int, b: int) -> Color:
    return f"#{int(r):02x}{int(g):02x}{int(b):02x}"


def hex_to_rgb(color: Color) -> RgbColor:
    value = normalize_color(color)
    return (int(value[1:3], 16), int(value[3:5], 16), int(value[5:7], 16))


def normalize_color(value: Union[str, Sequence[int]]) -> Color:
    """
    Normalize a color to its canonical lowercase "#rrggbb" form.

    Args:
        value: "#rgb" or "#rrggbb" string (any case), or an (r, g, b) sequence

    Returns:
        Canonical color string

    Raises:
        ValueError: If the value is not a valid opaque color
    """
    if isinstance(value, str):
        text = value.strip()
        if not _HEX_PATTERN.match(text):
            raise ValueError(f"Invalid color: {value!r}")
        digits = text[1:].lower()
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        return f"#{digits}"

    try:
        channels = [int(channel) for channel in value]
    except (TypeError, ValueError):
        raise ValueError(f"Invalid color: {value!r}") from None

    if len(channels) != 3 or any(channel < 0 or channel > 255 for channel in channels):
        raise ValueError(f"Invalid color: {value!r}")
    return rgb_to_hex(*channels)


def is_transparent(cell: Cell) -> bool:
    return cell == TRANSPARENT


@dataclass(frozen=True)
class PixelGrid:
    """Square, row-major, top-left origin grid; cell i = y * resolution + x.

    Instances are never mutated. Editing operations build a new grid and
    equality is by value.
    """

    resolution: int
    cells: Tuple[Cell, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "resolution", int(self.resolution))
        object.__setattr__(self, "cells", tuple(self.cells))
        if self.resolution < 1:
            raise ValueError(f"resolution must be >= 1, got {self.resolution}")
        expected = self.resolution * self.resolution
        if len(self.cells) != expected:
            raise ValueError(
                f"Grid length {len(self.cells)} does not match resolution "
                f"{self.resolution} (expected {expected})"
            )

    @classmethod
    def blank(cls, resolution: int) -> "PixelGrid":
        return cls(int(resolution), (TRANSPARENT,) * (int(resolution) * int(resolution)))

    @classmethod
    def from_cells(cls, cells: Sequence[Union[str, Sequence[int]]], resolution: int) -> "PixelGrid":
        """Build a grid, normalizing every non-transparent cell."""
        normalized = tuple(
            TRANSPARENT if cell == TRANSPARENT else normalize_color(cell)
            for cell in cells
        )
        return cls(int(resolution), normalized)

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.cells)

    def __getitem__(self, index: int) -> Cell:
        return self.cells[index]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.resolution and 0 <= y < self.resolution

    def index_of(self, x: int, y: int) -> int:
        return y * self.resolution + x

    def get(self, x: int, y: int) -> Cell:
        if not self.in_bounds(x, y):
            raise IndexError(f"Cell ({x}, {y}) outside {self.resolution}x{self.resolution} grid")
        return self.cells[self.index_of(x, y)]

    def with_cells(self, updates: Dict[int, Cell]) -> "PixelGrid":
        """Return a new grid with the given index -> cell replacements."""
        cells = list(self.cells)
        for index, cell in updates.items():
            cells[index] = cell
        return PixelGrid(self.resolution, tuple(cells))

    def palette(self) -> List[Color]:
        """Unique non-transparent colors in first-occurrence order."""
        return list(dict.fromkeys(cell for cell in self.cells if cell != TRANSPARENT))

    def first_color(self) -> Optional[Color]:
        return next((cell for cell in self.cells if cell != TRANSPARENT), None)

    def opaque_count(self) -> int:
        return sum(1 for cell in self.cells if cell != TRANSPARENT)


class Tool(str, Enum):
    PENCIL = "pencil"
    ERASER = "eraser"
    MAGIC_ERASER = "magic-eraser"
    NONE = "none"


@dataclass(frozen=True)
class ToolState:
    """Transient tool settings owned by an editing session.

    Attributes:
        active_tool: Which tool pointer input drives
        brush_size: Side of the square brush footprint (>= 1)
        draw_color: Color written by the pencil
    """
    active_tool: Tool = Tool.NONE
    brush_size: int = MIN_BRUSH_SIZE
    draw_color: Color = field(default=DEFAULT_DRAW_COLOR)

    def __post_init__(self) -> None:
        if int(self.brush_size) < MIN_BRUSH_SIZE:
            raise ValueError(f"brush_size must be >= {MIN_BRUSH_SIZE}, got {self.brush_size}")
        object.__setattr__(self, "active_tool", Tool(self.active_tool))
        object.__setattr__(self, "brush_size", int(self.brush_size))
        object.__setattr__(self, "draw_color", normalize_color(self.draw_color))

    @classmethod
    def for_grid(cls, grid: PixelGrid) -> "ToolState":
        """Defaults for a freshly loaded grid: pencil, first grid color, brush 1."""
        return cls(
            active_tool=Tool.PENCIL,
            brush_size=MIN_BRUSH_SIZE,
            draw_color=grid.first_color() or DEFAULT_DRAW_COLOR,
        )

    def with_tool(self, tool: Tool) -> "ToolState":
        return replace(self, active_tool=Tool(tool))

    def with_brush_size(self, brush_size: int) -> "ToolState":
        return replace(self, brush_size=brush_size)

    def with_draw_color(self, color: Union[str, Sequence[int]]) -> "ToolState":
        return replace(self, draw_color=normalize_color(color))
