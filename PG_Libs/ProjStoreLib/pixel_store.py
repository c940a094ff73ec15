"""
Pixel grid file storage for Pixel Gen.

This module handles the persistence layer for finished grids: the RLE JSON
exchange file and the magnified PNG export.

Functions:
    export_filename: Default PNG export name, pixelart-{N}x{N}-{ms}.png
    save_png_export: Render a grid and write it as a PNG
    save_rle_file: Write a grid or record as RLE JSON
    load_rle_file: Read an RLE JSON file back into a grid
"""

import json
import logging
import time
from pathlib import Path
from typing import Optional, Union

from PG_Libs.constants import (
    DEFAULT_OUTPUT_FORMAT,
    EXPORT_FILE_PREFIX,
    EXPORT_SCALE,
    RLE_FILE_EXTENSION,
)
from PG_Libs.errors import RecordFormatError
from PG_Libs.GridLib.grid_models import PixelGrid
from PG_Libs.GridLib.renderers import render_export
from PG_Libs.GridLib.rle_codec import RleRecord, decode, encode

logger = logging.getLogger(__name__)


def export_filename(resolution: int, timestamp_ms: Optional[int] = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{EXPORT_FILE_PREFIX}-{int(resolution)}x{int(resolution)}-{timestamp_ms}.png"


def _validate_filename(filename: str) -> str:
    """Reject names that could escape the output directory."""
    path = Path(filename)
    if path.is_absolute() or ".." in path.parts or len(path.parts) != 1:
        raise ValueError(f"Export filename must be a plain file name: {filename}")
    return filename


def save_png_export(
    grid: PixelGrid,
    output_dir: Path,
    export_scale: int = EXPORT_SCALE,
    filename: Optional[str] = None,
) -> Path:
    """
    Render a grid at export_scale and save it as PNG.

    Args:
        grid: Grid snapshot to export
        output_dir: Directory to write into (created if missing)
        export_scale: Pixel block size per grid cell
        filename: Optional plain file name; defaults to export_filename()

    Returns:
        Path of the written file

    Raises:
        ValueError: If filename contains path components
        OSError: If the directory cannot be created or the file written
    """
    name = _validate_filename(filename or export_filename(grid.resolution))
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    if not output_dir.is_dir():
        raise OSError(f"Output path is not a directory: {output_dir}")

    image = render_export(grid, export_scale)
    save_path = output_dir / name
    image.save(save_path, format=DEFAULT_OUTPUT_FORMAT)
    logger.info(f"Saved {image.size[0]}x{image.size[1]} export to {save_path}")
    return save_path


def save_rle_file(path: Path, source: Union[PixelGrid, RleRecord], indent: Optional[int] = None) -> Path:
    """Write a grid or record as RLE JSON. Adds the default suffix if none is given."""
    path = Path(path)
    if not path.suffix:
        path = path.with_name(f"{path.name}{RLE_FILE_EXTENSION}")

    record = encode(source) if isinstance(source, PixelGrid) else source
    separators = None if indent is not None else (",", ":")
    path.write_text(
        json.dumps(record.to_dict(), indent=indent, separators=separators),
        encoding="utf-8",
    )
    logger.info(f"Saved RLE record ({len(record.runs)} runs) to {path}")
    return path


def load_rle_file(path: Path) -> PixelGrid:
    """
    Load and decode an RLE JSON file.

    Raises:
        RecordFormatError: If the file is missing, not JSON, or not a valid record
    """
    path = Path(path)
    if not path.is_file():
        raise RecordFormatError(f"RLE file does not exist: {path}")

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise RecordFormatError(f"Invalid JSON in {path}: {e}") from e

    grid = decode(RleRecord.from_dict(payload))
    logger.debug(f"Loaded {grid.resolution}x{grid.resolution} grid from {path}")
    return grid
