"""
Background-aware quantizer for Pixel Gen.

Turns an arbitrary bitmap into a fixed-resolution pixel grid. The bitmap is
resampled to resolution x resolution with an area-averaging filter, then each
pixel is classified against the top-left pixel, which is taken as the
background reference:

- alpha below ``alpha_cutoff``                        -> TRANSPARENT
- RGB distance to the reference below the threshold  -> TRANSPARENT
- otherwise                                          -> "#rrggbb"

Known approximation: subject regions whose color is close to the top-left
pixel are removed along with the background. Upstream images are generated
on a solid black background so this rarely matters.

Classes:
    QuantizerConfig: Threshold, alpha cutoff and resampling filter

Functions:
    quantize: Bitmap -> PixelGrid
    quantize_async: Load a bitmap source and quantize it off the event loop
"""

import asyncio
import logging
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

import numpy as np
from PIL import Image

from PG_Libs.constants import (
    DEFAULT_ALPHA_CUTOFF,
    DEFAULT_BACKGROUND_THRESHOLD,
    DEFAULT_RESAMPLE,
    MAX_RGB_DISTANCE,
    TRANSPARENT,
)
from PG_Libs.errors import ResamplingError
from PG_Libs.GenerationLib.image_source import load_bitmap
from PG_Libs.GridLib.grid_models import PixelGrid, validate_resolution

logger = logging.getLogger(__name__)

RESAMPLE_FILTERS = {
    "box": Image.Resampling.BOX,
    "bilinear": Image.Resampling.BILINEAR,
    "bicubic": Image.Resampling.BICUBIC,
    "lanczos": Image.Resampling.LANCZOS,
    "hamming": Image.Resampling.HAMMING,
}


@dataclass
class QuantizerConfig:
    """Tuning knobs for background removal.

    Attributes:
        background_threshold: RGB distance below which a pixel counts as background
        alpha_cutoff: Alpha (0-255) below which a pixel is transparent
        resample: Name of the smoothing filter used to downsample
    """
    background_threshold: float = DEFAULT_BACKGROUND_THRESHOLD
    alpha_cutoff: int = DEFAULT_ALPHA_CUTOFF
    resample: str = DEFAULT_RESAMPLE

    def __post_init__(self) -> None:
        if not 0.0 <= float(self.background_threshold) <= MAX_RGB_DISTANCE:
            raise ValueError(
                f"background_threshold must be within [0, {MAX_RGB_DISTANCE:.1f}], "
                f"got {self.background_threshold}"
            )
        if not 0 <= int(self.alpha_cutoff) <= 256:
            raise ValueError(f"alpha_cutoff must be within [0, 256], got {self.alpha_cutoff}")
        if self.resample.lower() not in RESAMPLE_FILTERS:
            raise ValueError(
                f"Unsupported resample filter: {self.resample}. "
                f"Must be one of {sorted(RESAMPLE_FILTERS)}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuantizerConfig":
        """Create from dictionary."""
        normalized = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**normalized)

    def get_resample_filter(self) -> "Image.Resampling":
        return RESAMPLE_FILTERS[self.resample.lower()]


def _resample(image: "Image.Image", resolution: int, config: QuantizerConfig) -> np.ndarray:
    try:
        rgba = image.convert("RGBA")
        resized = rgba.resize((resolution, resolution), resample=config.get_resample_filter())
        pixels = np.asarray(resized, dtype=np.int32)
    except (OSError, ValueError, MemoryError) as e:
        raise ResamplingError(f"Could not resample bitmap to {resolution}x{resolution}: {e}") from e

    if pixels.shape != (resolution, resolution, 4):
        raise ResamplingError(
            f"Resampled surface has unexpected shape {pixels.shape}, "
            f"expected {(resolution, resolution, 4)}"
        )
    return pixels


def classify_pixels(pixels: np.ndarray, config: Optional[QuantizerConfig] = None) -> np.ndarray:
    """
    Compute the transparency mask for an (H, W, 4) RGBA array.

    The reference color is the RGB of pixel (0, 0).

    Returns:
        Boolean (H, W) array, True where the pixel is background/transparent
    """
    config = config or QuantizerConfig()
    rgb = pixels[..., :3].astype(np.float64)
    alpha = pixels[..., 3]

    reference = rgb[0, 0]
    distance = np.sqrt(np.sum((rgb - reference) ** 2, axis=-1))

    return (alpha < config.alpha_cutoff) | (distance < config.background_threshold)


def quantize(image: Any, resolution: int, config: Optional[QuantizerConfig] = None) -> PixelGrid:
    """
    Convert a bitmap into a resolution x resolution pixel grid.

    Args:
        image: Pillow image or any bitmap reference accepted by load_bitmap
        resolution: One of the supported grid sizes
        config: Optional tuning knobs; defaults match the reference behavior

    Returns:
        PixelGrid of exactly resolution**2 cells

    Raises:
        ValueError: If resolution is not supported
        ResamplingError: If the bitmap cannot be decoded or resampled
    """
    size = int(validate_resolution(resolution))
    config = config or QuantizerConfig()
    started = time.perf_counter()

    bitmap = image if isinstance(image, Image.Image) else load_bitmap(image)
    pixels = _resample(bitmap, size, config)
    background = classify_pixels(pixels, config).reshape(-1)

    flat = pixels.reshape(-1, 4)
    cells = tuple(
        TRANSPARENT if is_bg else f"#{r:02x}{g:02x}{b:02x}"
        for (r, g, b, _a), is_bg in zip(flat.tolist(), background.tolist())
    )

    grid = PixelGrid(size, cells)
    logger.debug(
        f"Quantized {bitmap.size[0]}x{bitmap.size[1]} bitmap to {size}x{size} "
        f"({grid.opaque_count()} opaque cells) in {time.perf_counter() - started:.3f}s"
    )
    return grid


async def quantize_async(
    source: Any,
    resolution: int,
    config: Optional[QuantizerConfig] = None,
) -> PixelGrid:
    """Load and quantize a bitmap source in a worker thread.

    Resolves with the grid or raises the same errors as quantize().
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, quantize, source, resolution, config)
