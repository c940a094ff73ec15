"""
GridLib - Pixel grid core

This module provides the pixel grid model, background-aware quantizer,
raster editor, RLE codec, viewport scaler and renderers for the Pixel Gen
project.
"""

from PG_Libs.GridLib.grid_models import (
    Color,
    PixelGrid,
    Resolution,
    Tool,
    ToolState,
    normalize_color,
    validate_resolution,
)
from PG_Libs.GridLib.quantizer import QuantizerConfig, quantize, quantize_async
from PG_Libs.GridLib.raster_editor import EditResult, apply_tool, brush_footprint
from PG_Libs.GridLib.rle_codec import RleRecord, decode, dumps, encode, loads
from PG_Libs.GridLib.viewport import Viewport, compute_scale, display_to_grid
from PG_Libs.GridLib.renderers import render_canvas, render_export

__all__ = [
    "Color",
    "PixelGrid",
    "Resolution",
    "Tool",
    "ToolState",
    "normalize_color",
    "validate_resolution",
    "QuantizerConfig",
    "quantize",
    "quantize_async",
    "EditResult",
    "apply_tool",
    "brush_footprint",
    "RleRecord",
    "encode",
    "decode",
    "dumps",
    "loads",
    "Viewport",
    "compute_scale",
    "display_to_grid",
    "render_export",
    "render_canvas",
]
