"""
Raster editing operations for Pixel Gen.

apply_tool is the single mutation entry point for pointer-driven edits. It
never mutates its input: it returns a new PixelGrid when any cell changed
and the very same grid object otherwise, so callers can detect no-ops by
identity.

Functions:
    brush_footprint: Cells covered by a square brush, clipped to the grid
    apply_tool: Apply the active tool at a grid coordinate
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Tuple

from PG_Libs.constants import TRANSPARENT
from PG_Libs.GridLib.grid_models import Cell, PixelGrid, Tool, ToolState


@dataclass(frozen=True)
class EditResult:
    grid: PixelGrid
    changed: bool


def brush_footprint(x: int, y: int, brush_size: int, resolution: int) -> Iterator[Tuple[int, int]]:
    """
    Yield the in-bounds cells of a brush anchored at (x, y).

    Odd sizes are centered on the anchor; even sizes lean toward lower
    indices. Cells outside [0, resolution) are skipped.
    """
    half = brush_size // 2
    start_x = x - half
    start_y = y - half
    for py in range(max(0, start_y), min(resolution, start_y + brush_size)):
        for px in range(max(0, start_x), min(resolution, start_x + brush_size)):
            yield px, py


def _paint(grid: PixelGrid, state: ToolState, x: int, y: int, value: Cell) -> EditResult:
    updates: Dict[int, Cell] = {}
    for px, py in brush_footprint(x, y, state.brush_size, grid.resolution):
        index = grid.index_of(px, py)
        if grid.cells[index] != value:
            updates[index] = value

    if not updates:
        return EditResult(grid, False)
    return EditResult(grid.with_cells(updates), True)


def _pencil(grid: PixelGrid, state: ToolState, x: int, y: int) -> EditResult:
    return _paint(grid, state, x, y, state.draw_color)


def _eraser(grid: PixelGrid, state: ToolState, x: int, y: int) -> EditResult:
    return _paint(grid, state, x, y, TRANSPARENT)


def _magic_eraser(grid: PixelGrid, state: ToolState, x: int, y: int) -> EditResult:
    # Global replace by value, not a connected-region fill.
    target = grid.get(x, y)
    if target == TRANSPARENT:
        return EditResult(grid, False)

    cells = tuple(TRANSPARENT if cell == target else cell for cell in grid.cells)
    return EditResult(PixelGrid(grid.resolution, cells), True)


def _no_tool(grid: PixelGrid, state: ToolState, x: int, y: int) -> EditResult:
    return EditResult(grid, False)


TOOL_HANDLERS: Dict[Tool, Callable[[PixelGrid, ToolState, int, int], EditResult]] = {
    Tool.PENCIL: _pencil,
    Tool.ERASER: _eraser,
    Tool.MAGIC_ERASER: _magic_eraser,
    Tool.NONE: _no_tool,
}


def apply_tool(grid: PixelGrid, state: ToolState, x: int, y: int) -> EditResult:
    """
    Apply the active tool of state at grid coordinate (x, y).

    Args:
        grid: Current grid snapshot
        state: Tool settings
        x: Column of the anchor cell
        y: Row of the anchor cell

    Returns:
        EditResult holding a new grid if anything changed, else the input grid
    """
    if not grid.in_bounds(x, y):
        return EditResult(grid, False)
    return TOOL_HANDLERS[state.active_tool](grid, state, x, y)
