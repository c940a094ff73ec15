"""
Tests for the RLE exchange codec.

Tests cover:
- Palette ordering and run emission
- Exact decoding and round trips
- JSON serialization
- Rejection of malformed records
"""

import json

import pytest

from PG_Libs.constants import TRANSPARENT
from PG_Libs.errors import RecordFormatError
from PG_Libs.GridLib.grid_models import PixelGrid
from PG_Libs.GridLib.rle_codec import RleRecord, decode, dumps, encode, loads

from conftest import make_grid


class TestEncode:
    """Tests for encode function."""

    def test_red_corner_scenario(self, red_corner_grid):
        record = encode(red_corner_grid)

        assert record.width == 32
        assert record.height == 32
        assert list(record.palette) == ["#ff0000"]
        assert record.flat_data() == [0, 1, -1, 1023]

    def test_all_transparent_grid(self):
        record = encode(PixelGrid.blank(32))

        assert list(record.palette) == []
        assert record.flat_data() == [-1, 1024]

    def test_palette_uses_first_occurrence_order(self):
        grid = PixelGrid.from_cells(["#0000ff", "#ff0000", TRANSPARENT, "#0000ff"], 2)

        record = encode(grid)

        assert list(record.palette) == ["#0000ff", "#ff0000"]
        assert record.flat_data() == [0, 1, 1, 1, -1, 1, 0, 1]

    def test_runs_sum_to_cell_count(self, two_color_grid):
        record = encode(two_color_grid)

        assert sum(count for _value, count in record.runs) == 64

    def test_to_dict_layout(self, red_corner_grid):
        payload = encode(red_corner_grid).to_dict()

        assert payload == {
            "format": "RLE (Value, Count)",
            "width": 32,
            "height": 32,
            "palette": ["#ff0000"],
            "data": [0, 1, -1, 1023],
        }


class TestDecode:
    """Tests for decode function."""

    def test_red_corner_scenario(self, red_corner_grid):
        assert decode(encode(red_corner_grid)) == red_corner_grid

    @pytest.mark.parametrize("grid", [
        PixelGrid.blank(32),
        make_grid(32, {(x, x): "#00ff00" for x in range(32)}),
        make_grid(64, {(x, y): ("#111111", "#222222", "#333333")[(x + y) % 3]
                       for x in range(0, 64, 5) for y in range(0, 64, 3)}),
        PixelGrid.from_cells(["#abcdef"] * (128 * 128), 128),
    ])
    def test_round_trip(self, grid):
        assert decode(encode(grid)) == grid

    def test_rejects_short_runs(self):
        record = RleRecord(width=32, height=32, palette=("#ff0000",), runs=((0, 1), (-1, 1022)))

        with pytest.raises(RecordFormatError, match="sum to 1023"):
            decode(record)

    def test_rejects_palette_index_out_of_range(self):
        record = RleRecord(width=32, height=32, palette=("#ff0000",), runs=((1, 1024),))

        with pytest.raises(RecordFormatError, match="out of range"):
            decode(record)

    def test_rejects_index_below_transparent_marker(self):
        record = RleRecord(width=32, height=32, palette=(), runs=((-2, 1024),))

        with pytest.raises(RecordFormatError):
            decode(record)

    def test_rejects_zero_count_runs(self):
        record = RleRecord(width=32, height=32, palette=("#ff0000",), runs=((0, 0), (-1, 1024)))

        with pytest.raises(RecordFormatError):
            decode(record)

    def test_rejects_non_square_records(self):
        record = RleRecord(width=32, height=64, palette=(), runs=((-1, 2048),))

        with pytest.raises(RecordFormatError, match="square"):
            decode(record)

    @pytest.mark.parametrize("size", [3, 8, 48, 512])
    def test_rejects_unsupported_sizes(self, size):
        record = RleRecord(width=size, height=size, palette=(), runs=((-1, size * size),))

        with pytest.raises(RecordFormatError, match="Unsupported grid size"):
            decode(record)

    def test_rejects_oversized_record_without_expanding_runs(self):
        text = (
            '{"format":"RLE (Value, Count)","width":40000,"height":40000,'
            '"palette":[],"data":[-1,1600000000]}'
        )

        with pytest.raises(RecordFormatError, match="40000x40000"):
            loads(text)


class TestJson:
    """Tests for dumps/loads and RleRecord.from_dict."""

    def test_dumps_is_compact(self, red_corner_grid):
        text = dumps(red_corner_grid)

        assert " " not in text.replace("RLE (Value, Count)", "")
        assert json.loads(text)["data"] == [0, 1, -1, 1023]

    def test_loads_round_trip(self):
        grid = make_grid(64, {(1, 1): "#ff0000", (40, 2): "#0000ff", (63, 63): "#ff0000"})

        assert loads(dumps(grid)) == grid

    def test_loads_accepts_pretty_json(self, red_corner_grid):
        text = json.dumps(encode(red_corner_grid).to_dict(), indent=2)

        assert loads(text) == red_corner_grid

    def test_loads_rejects_invalid_json(self):
        with pytest.raises(RecordFormatError, match="Invalid JSON"):
            loads("{not json")

    @pytest.mark.parametrize("payload", [
        [],
        {"format": "PNG", "width": 2, "height": 2, "palette": [], "data": [-1, 4]},
        {"format": "RLE (Value, Count)", "width": "2", "height": 2, "palette": [], "data": [-1, 4]},
        {"format": "RLE (Value, Count)", "width": 2, "height": 2, "palette": "#ff0000", "data": [-1, 4]},
        {"format": "RLE (Value, Count)", "width": 2, "height": 2, "palette": ["nope"], "data": [-1, 4]},
        {"format": "RLE (Value, Count)", "width": 2, "height": 2, "palette": [], "data": [-1, 4, 0]},
        {"format": "RLE (Value, Count)", "width": 2, "height": 2, "palette": [], "data": [-1, 4.0]},
    ])
    def test_from_dict_rejects_malformed_payloads(self, payload):
        with pytest.raises(RecordFormatError):
            RleRecord.from_dict(payload)

    def test_record_format_error_is_value_error(self):
        with pytest.raises(ValueError):
            loads('{"format": "RLE (Value, Count)"}')
