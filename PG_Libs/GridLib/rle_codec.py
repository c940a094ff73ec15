"""
Run-length encoded exchange format for pixel grids.

JSON layout::

    {"format": "RLE (Value, Count)", "width": 32, "height": 32,
     "palette": ["#ff0000", ...], "data": [0, 1, -1, 1023, ...]}

``data`` is a flat list of (value, count) pairs where value is a 0-based
palette index or -1 for transparent cells. The palette lists unique colors
in first-occurrence order so encoding is deterministic.

Classes:
    RleRecord: Decoded form of the exchange record

Functions:
    encode: PixelGrid -> RleRecord
    decode: RleRecord -> PixelGrid
    dumps: Compact JSON text for a grid or record
    loads: JSON text -> PixelGrid
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple, Union

from PG_Libs.constants import (
    FIELD_DATA,
    FIELD_FORMAT,
    FIELD_HEIGHT,
    FIELD_PALETTE,
    FIELD_WIDTH,
    RLE_FORMAT_TAG,
    RLE_TRANSPARENT_INDEX,
    SUPPORTED_RESOLUTIONS,
    TRANSPARENT,
)
from PG_Libs.errors import RecordFormatError
from PG_Libs.GridLib.grid_models import Color, PixelGrid, normalize_color

Run = Tuple[int, int]


@dataclass(frozen=True)
class RleRecord:
    width: int
    height: int
    palette: Tuple[Color, ...] = field(default_factory=tuple)
    runs: Tuple[Run, ...] = field(default_factory=tuple)

    def flat_data(self) -> List[int]:
        return [item for run in self.runs for item in run]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON exchange dictionary."""
        return {
            FIELD_FORMAT: RLE_FORMAT_TAG,
            FIELD_WIDTH: self.width,
            FIELD_HEIGHT: self.height,
            FIELD_PALETTE: list(self.palette),
            FIELD_DATA: self.flat_data(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RleRecord":
        """
        Create from a JSON exchange dictionary.

        Raises:
            RecordFormatError: If fields are missing or have the wrong shape
        """
        if not isinstance(data, dict):
            raise RecordFormatError(f"RLE record must be a JSON object, got {type(data).__name__}")

        tag = data.get(FIELD_FORMAT)
        if tag != RLE_FORMAT_TAG:
            raise RecordFormatError(f"Unsupported record format: {tag!r}")

        width = data.get(FIELD_WIDTH)
        height = data.get(FIELD_HEIGHT)
        if not _is_int(width) or not _is_int(height):
            raise RecordFormatError("width and height must be integers")

        palette = data.get(FIELD_PALETTE)
        if not isinstance(palette, list):
            raise RecordFormatError("palette must be a list of color strings")
        try:
            colors = tuple(normalize_color(color) for color in palette)
        except ValueError as e:
            raise RecordFormatError(f"Invalid palette entry: {e}") from e

        flat = data.get(FIELD_DATA)
        if not isinstance(flat, list) or not all(_is_int(item) for item in flat):
            raise RecordFormatError("data must be a list of integers")
        if len(flat) % 2 != 0:
            raise RecordFormatError(f"data length must be even, got {len(flat)}")

        runs = tuple((flat[i], flat[i + 1]) for i in range(0, len(flat), 2))
        return cls(width=width, height=height, palette=colors, runs=runs)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def encode(grid: PixelGrid) -> RleRecord:
    """Encode a grid as palette + (value, count) runs."""
    palette = grid.palette()
    lookup = {color: index for index, color in enumerate(palette)}
    indices = [
        RLE_TRANSPARENT_INDEX if cell == TRANSPARENT else lookup[cell]
        for cell in grid.cells
    ]

    runs: List[Run] = []
    if indices:
        current = indices[0]
        count = 1
        for value in indices[1:]:
            if value == current:
                count += 1
            else:
                runs.append((current, count))
                current = value
                count = 1
        runs.append((current, count))

    return RleRecord(
        width=grid.resolution,
        height=grid.resolution,
        palette=tuple(palette),
        runs=tuple(runs),
    )


def decode(record: RleRecord) -> PixelGrid:
    """
    Expand an RLE record back into a grid.

    Raises:
        RecordFormatError: If dimensions are not a supported square size, a
            run is malformed, or the runs do not cover exactly width * height cells
    """
    if record.width < 1 or record.height < 1:
        raise RecordFormatError(f"Invalid dimensions {record.width}x{record.height}")
    if record.width != record.height:
        raise RecordFormatError(
            f"Only square grids are supported, got {record.width}x{record.height}"
        )
    # Checked before any run is expanded.
    if record.width not in SUPPORTED_RESOLUTIONS:
        raise RecordFormatError(
            f"Unsupported grid size {record.width}x{record.height}, "
            f"expected one of {', '.join(f'{n}x{n}' for n in SUPPORTED_RESOLUTIONS)}"
        )

    expected = record.width * record.height
    total = sum(count for _value, count in record.runs)
    if total != expected:
        raise RecordFormatError(
            f"Run lengths sum to {total}, expected {expected} for "
            f"{record.width}x{record.height}"
        )

    cells: List[str] = []
    for value, count in record.runs:
        if count < 1:
            raise RecordFormatError(f"Run count must be >= 1, got {count}")
        if value == RLE_TRANSPARENT_INDEX:
            cell = TRANSPARENT
        elif 0 <= value < len(record.palette):
            cell = record.palette[value]
        else:
            raise RecordFormatError(
                f"Palette index {value} out of range for palette of {len(record.palette)}"
            )
        cells.extend([cell] * count)

    return PixelGrid(record.width, tuple(cells))


def dumps(source: Union[PixelGrid, RleRecord]) -> str:
    """Serialize a grid or record as compact JSON (no whitespace)."""
    record = encode(source) if isinstance(source, PixelGrid) else source
    return json.dumps(record.to_dict(), separators=(",", ":"))


def loads(text: Union[str, bytes]) -> PixelGrid:
    """
    Parse compact or pretty JSON into a grid.

    Raises:
        RecordFormatError: If the text is not valid JSON or not a valid record
    """
    try:
        payload = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise RecordFormatError(f"Invalid JSON: {e}") from e
    return decode(RleRecord.from_dict(payload))
