"""
Grid renderers for Pixel Gen.

Both renderers are pure functions of a grid snapshot. The export renderer
produces a true-alpha bitmap with hard pixel blocks; the canvas renderer
produces the on-screen projection, where transparent cells show a
two-tone checkerboard. The checkerboard is an editing aid only and is never
part of an export.

Functions:
    grid_to_rgba_array: (N, N, 4) uint8 array of a grid
    render_export: Magnified RGBA image for file export
    render_canvas: On-screen projection with checkerboard
"""

import numpy as np
from PIL import Image

from PG_Libs.constants import (
    CHECKER_DARK_COLOR,
    CHECKER_LIGHT_COLOR,
    EXPORT_SCALE,
    TRANSPARENT,
)
from PG_Libs.GridLib.grid_models import PixelGrid, hex_to_rgb


def grid_to_rgba_array(grid: PixelGrid) -> np.ndarray:
    """Transparent cells become (0, 0, 0, 0); colors become fully opaque."""
    size = grid.resolution
    out = np.zeros((size * size, 4), dtype=np.uint8)
    rgb_cache = {}
    for index, cell in enumerate(grid.cells):
        if cell == TRANSPARENT:
            continue
        rgb = rgb_cache.get(cell)
        if rgb is None:
            rgb = rgb_cache[cell] = hex_to_rgb(cell)
        out[index, :3] = rgb
        out[index, 3] = 255
    return out.reshape(size, size, 4)


def _magnify(pixels: np.ndarray, scale: int) -> np.ndarray:
    return np.repeat(np.repeat(pixels, scale, axis=0), scale, axis=1)


def render_export(grid: PixelGrid, export_scale: int = EXPORT_SCALE) -> "Image.Image":
    """
    Rasterize a grid for export.

    Args:
        grid: Grid snapshot
        export_scale: Side length in pixels of each cell block

    Returns:
        RGBA image of side resolution * export_scale; transparent cells are
        left fully transparent
    """
    if export_scale < 1:
        raise ValueError(f"export_scale must be >= 1, got {export_scale}")
    pixels = _magnify(grid_to_rgba_array(grid), int(export_scale))
    return Image.fromarray(pixels)


def render_canvas(grid: PixelGrid, scale: int = 1) -> "Image.Image":
    """Render the on-screen canvas: checkerboard behind transparent cells."""
    if scale < 1:
        raise ValueError(f"scale must be >= 1, got {scale}")

    size = grid.resolution
    pixels = grid_to_rgba_array(grid)

    ys, xs = np.indices((size, size))
    checker = np.where(
        ((xs + ys) % 2 == 0)[..., None],
        np.array(hex_to_rgb(CHECKER_DARK_COLOR), dtype=np.uint8),
        np.array(hex_to_rgb(CHECKER_LIGHT_COLOR), dtype=np.uint8),
    )

    transparent = pixels[..., 3] == 0
    rgb = np.where(transparent[..., None], checker, pixels[..., :3]).astype(np.uint8)
    return Image.fromarray(_magnify(rgb, int(scale)))
