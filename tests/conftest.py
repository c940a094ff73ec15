"""
Pytest configuration and shared fixtures for Pixel Gen tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

import pytest
from PIL import Image

from PG_Libs.constants import TRANSPARENT
from PG_Libs.GridLib.grid_models import PixelGrid


def make_sprite_image(
    size=256,
    background=(0, 0, 0, 255),
    color=(255, 0, 0, 255),
    box=(64, 64, 192, 192),
):
    """Solid background with one filled rectangle, like a generated sprite."""
    image = Image.new("RGBA", (size, size), color=background)
    image.paste(color, box)
    return image


def make_grid(resolution, painted):
    """Build a transparent grid with {(x, y): color} cells painted."""
    cells = [TRANSPARENT] * (resolution * resolution)
    for (x, y), color in painted.items():
        cells[y * resolution + x] = color
    return PixelGrid(resolution, tuple(cells))


@pytest.fixture
def temp_output_dir(tmp_path):
    """
    Provide a temporary directory for exported files.

    Args:
        tmp_path: Pytest's built-in temporary directory fixture

    Returns:
        Path object pointing to a temporary directory
    """
    return tmp_path


@pytest.fixture
def sprite_image():
    """
    256x256 black image with a red square covering grid cells 8..23 at 32x32.

    Returns:
        RGBA Pillow image
    """
    return make_sprite_image()


@pytest.fixture
def red_corner_grid():
    """32x32 grid, transparent except (0, 0) = #ff0000."""
    return make_grid(32, {(0, 0): "#ff0000"})


@pytest.fixture
def two_color_grid():
    """
    8x8 grid with two separate red blocks and one blue block.

    Returns:
        PixelGrid
    """
    painted = {}
    for x, y in [(1, 1), (2, 1), (6, 6), (7, 7)]:
        painted[(x, y)] = "#ff0000"
    for x, y in [(4, 4), (5, 4)]:
        painted[(x, y)] = "#0000ff"
    return make_grid(8, painted)
