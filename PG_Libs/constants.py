"""
Constants and configuration values for Pixel Gen.

This module centralizes all constant values, magic numbers, and
configuration settings used throughout the application.
"""

# Grid constants
SUPPORTED_RESOLUTIONS = (32, 64, 128, 256)
DEFAULT_RESOLUTION = 64
TRANSPARENT = "transparent"
DEFAULT_DRAW_COLOR = "#ffffff"

# Quantizer defaults (heuristic tuning knobs)
DEFAULT_BACKGROUND_THRESHOLD = 60.0
DEFAULT_ALPHA_CUTOFF = 50
DEFAULT_RESAMPLE = "box"
MAX_RGB_DISTANCE = 441.6729559300637  # sqrt(3) * 255

# Brush constants
MIN_BRUSH_SIZE = 1
MAX_BRUSH_SIZE = 5

# Viewport constants
VIEWPORT_MARGIN = 64

# Export constants
EXPORT_SCALE = 10
EXPORT_FILE_PREFIX = "pixelart"
DEFAULT_OUTPUT_FORMAT = "PNG"

# On-screen checkerboard for transparent cells (never baked into exports)
CHECKER_DARK_COLOR = "#1e293b"
CHECKER_LIGHT_COLOR = "#334155"

# RLE exchange format
RLE_FORMAT_TAG = "RLE (Value, Count)"
RLE_TRANSPARENT_INDEX = -1
RLE_FILE_EXTENSION = ".pxrle.json"

# RLE field names
FIELD_FORMAT = "format"
FIELD_WIDTH = "width"
FIELD_HEIGHT = "height"
FIELD_PALETTE = "palette"
FIELD_DATA = "data"

# Generation prompt
GENERATION_BACKGROUND_COLOR = "#000000"
GENERATION_OUTLINE_COLOR = "#222222"

# Supported file formats
SUPPORTED_STANDARD_IMAGES = {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tiff", ".webp"}

# UI constants
DEFAULT_WINDOW_WIDTH = 1200
DEFAULT_WINDOW_HEIGHT = 800
