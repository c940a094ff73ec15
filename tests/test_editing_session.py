"""
Tests for the editing session.

Tests cover:
- Loading images and default tool state
- Pointer press / drag / release handling
- Magic eraser drag suppression
- Stale generation results
- Failure handling that never corrupts the grid
"""

import asyncio
import tempfile
import unittest
from pathlib import Path

from PG_Libs.constants import TRANSPARENT
from PG_Libs.errors import GenerationError, RecordFormatError, ResamplingError
from PG_Libs.GridLib.grid_models import Tool
from PG_Libs.GridLib.quantizer import quantize
from PG_Libs.GridLib.rle_codec import dumps, encode
from PG_Libs.GridLib.viewport import Viewport
from PG_Libs.SessionLib.editing_session import EditingSession, PointerEvent, PointerKind

from conftest import make_grid, make_sprite_image


class TestSessionLoading(unittest.TestCase):
    """Test grid loading and tool defaults."""

    def test_new_session_has_no_grid(self):
        session = EditingSession()

        self.assertIsNone(session.grid)
        self.assertEqual(session.tool_state.active_tool, Tool.NONE)
        self.assertFalse(session.pointer_down(0, 0))

    def test_load_image_sets_grid_and_defaults(self):
        session = EditingSession()

        grid = asyncio.run(session.load_image(make_sprite_image(), 32))

        self.assertIs(session.grid, grid)
        self.assertEqual(session.resolution, 32)
        self.assertEqual(session.tool_state.active_tool, Tool.PENCIL)
        self.assertEqual(session.tool_state.draw_color, "#ff0000")
        self.assertEqual(session.tool_state.brush_size, 1)
        self.assertFalse(session.is_loading)

    def test_load_failure_leaves_grid_unset(self):
        session = EditingSession()
        session.set_grid(make_grid(32, {(0, 0): "#ff0000"}))

        with self.assertRaises(ResamplingError):
            asyncio.run(session.load_image(b"not an image", 32))

        self.assertIsNone(session.grid)
        self.assertIsNotNone(session.last_error)
        self.assertFalse(session.is_loading)

    def test_rejects_unsupported_resolution(self):
        with self.assertRaises(ValueError):
            EditingSession(resolution=100)


class TestPointerHandling(unittest.TestCase):
    """Test the press / drag / release state machine."""

    def setUp(self):
        self.session = EditingSession(resolution=32)
        self.session.set_grid(make_grid(8, {(1, 1): "#ff0000", (6, 6): "#ff0000", (4, 4): "#0000ff"}))
        self.session.viewport = Viewport(4)
        self.session.set_draw_color("#00ff00")

    def test_pointer_down_maps_display_to_grid(self):
        changed = self.session.pointer_down(9, 13)

        self.assertTrue(changed)
        self.assertEqual(self.session.grid.get(2, 3), "#00ff00")
        self.assertTrue(self.session.drag.dragging)
        self.assertEqual(self.session.drag.last_pos, (2, 3))

    def test_drag_paints_until_release(self):
        self.session.pointer_down(0, 0)
        self.session.pointer_move(4, 0)
        self.session.pointer_up()
        changed = self.session.pointer_move(8, 0)

        self.assertFalse(changed)
        self.assertEqual(self.session.grid.get(0, 0), "#00ff00")
        self.assertEqual(self.session.grid.get(1, 0), "#00ff00")
        self.assertEqual(self.session.grid.get(2, 0), TRANSPARENT)
        self.assertFalse(self.session.drag.dragging)

    def test_move_without_press_does_nothing(self):
        before = self.session.grid

        self.assertFalse(self.session.pointer_move(0, 0))
        self.assertIs(self.session.grid, before)

    def test_magic_eraser_applies_only_on_press(self):
        self.session.select_tool(Tool.MAGIC_ERASER)

        self.assertTrue(self.session.pointer_down(4, 4))
        self.assertFalse(self.session.pointer_move(16, 16))

        self.assertEqual(self.session.grid.palette(), ["#0000ff"])

    def test_unchanged_edit_keeps_grid_identity(self):
        self.session.select_tool(Tool.ERASER)
        before = self.session.grid

        self.assertFalse(self.session.pointer_down(0, 0))
        self.assertIs(self.session.grid, before)

    def test_out_of_canvas_pointer_is_ignored(self):
        before = self.session.grid

        self.assertFalse(self.session.pointer_down(-3, 100))
        self.assertIs(self.session.grid, before)

    def test_events_apply_in_order(self):
        self.session.set_brush_size(2)
        events = [
            PointerEvent(PointerKind.DOWN, 0, 0),
            PointerEvent(PointerKind.UP),
            PointerEvent(PointerKind.MOVE, 28, 28),
            PointerEvent(PointerKind.DOWN, 28, 28),
            PointerEvent(PointerKind.UP),
        ]

        changed = self.session.process_events(events)

        self.assertTrue(changed)
        self.assertEqual(self.session.grid.get(0, 0), "#00ff00")
        self.assertEqual(self.session.grid.get(6, 6), "#00ff00")
        self.assertEqual(self.session.grid.get(7, 7), "#00ff00")
        self.assertEqual(self.session.grid.get(5, 5), TRANSPARENT)
        self.assertEqual(self.session.grid.get(1, 1), "#ff0000")

    def test_set_container_size_updates_scale(self):
        self.session.resolution = 64
        self.assertEqual(self.session.set_container_size(500, 500), 6)


class TestGenerations(unittest.TestCase):
    """Test provider-driven generation and last-writer-wins."""

    def test_generate_quantizes_provider_image(self):
        session = EditingSession()
        prompts = []

        def provider(prompt, resolution):
            prompts.append((prompt, resolution))
            return make_sprite_image()

        grid = asyncio.run(session.generate("a red box", provider, 32))

        self.assertEqual(grid.get(10, 10), "#ff0000")
        self.assertEqual(prompts[0][1], 32)
        self.assertIn("a red box", prompts[0][0])

    def test_stale_result_is_discarded(self):
        session = EditingSession()
        red = make_sprite_image()
        blue = make_sprite_image(color=(0, 0, 255, 255))

        async def scenario():
            release = asyncio.Event()

            async def slow_provider(prompt, resolution):
                await release.wait()
                return blue

            async def fast_provider(prompt, resolution):
                return red

            first = asyncio.create_task(session.generate("slow", slow_provider, 32))
            await asyncio.sleep(0)
            latest = await session.generate("fast", fast_provider, 32)
            release.set()
            stale = await first
            return latest, stale

        latest, stale = asyncio.run(scenario())

        self.assertIsNone(stale)
        self.assertIs(session.grid, latest)
        self.assertEqual(session.grid.palette(), ["#ff0000"])

    def test_provider_failure_raises_generation_error(self):
        session = EditingSession()

        def provider(prompt, resolution):
            raise RuntimeError("403 permission denied")

        with self.assertRaises(GenerationError):
            asyncio.run(session.generate("anything", provider, 32))

        self.assertIsNone(session.grid)
        self.assertIn("403", session.last_error)

    def test_empty_provider_result_raises(self):
        session = EditingSession()

        with self.assertRaises(GenerationError):
            asyncio.run(session.generate("anything", lambda prompt, resolution: None, 32))

    def test_invalid_resolution_keeps_pending_generation_current(self):
        session = EditingSession()
        blue = make_sprite_image(color=(0, 0, 255, 255))

        async def scenario():
            release = asyncio.Event()

            async def slow_provider(prompt, resolution):
                await release.wait()
                return blue

            pending = asyncio.create_task(session.generate("slow", slow_provider, 32))
            await asyncio.sleep(0)
            with self.assertRaises(ValueError):
                await session.load_image(make_sprite_image(), 48)
            release.set()
            return await pending

        grid = asyncio.run(scenario())

        self.assertIsNotNone(grid)
        self.assertIs(session.grid, grid)
        self.assertEqual(session.resolution, 32)
        self.assertFalse(session.is_loading)

    def test_tokens_from_outside_the_event_loop(self):
        session = EditingSession()
        old_token = session.begin_generation(32)
        new_token = session.begin_generation(64)

        stale = quantize(make_sprite_image(), 32)
        self.assertIsNone(session.finish_generation(old_token, stale))
        self.assertFalse(session.fail_generation(old_token, ResamplingError("late failure")))
        self.assertIsNone(session.grid)
        self.assertIsNone(session.last_error)
        self.assertTrue(session.is_loading)

        fresh = quantize(make_sprite_image(), 64)
        self.assertIs(session.finish_generation(new_token, fresh), fresh)
        self.assertIs(session.grid, fresh)
        self.assertFalse(session.is_loading)


class TestSessionExport(unittest.TestCase):
    """Test export/import paths."""

    def setUp(self):
        self.session = EditingSession(resolution=32)
        self.grid = make_grid(32, {(0, 0): "#ff0000"})
        self.session.set_grid(self.grid)

    def test_export_rle_and_json(self):
        self.assertEqual(self.session.export_rle().flat_data(), [0, 1, -1, 1023])
        self.assertEqual(self.session.export_json(), dumps(self.grid))

    def test_import_replaces_grid(self):
        other = make_grid(32, {(5, 5): "#00ff00"})

        self.session.import_rle(dumps(other))

        self.assertEqual(self.session.grid, other)
        self.assertEqual(self.session.tool_state.draw_color, "#00ff00")

    def test_import_accepts_record(self):
        other = make_grid(32, {(1, 2): "#0000ff"})

        self.assertEqual(self.session.import_rle(encode(other)), other)

    def test_failed_import_keeps_grid(self):
        bad = '{"format": "RLE (Value, Count)", "width": 32, "height": 32, "palette": [], "data": [-1, 5]}'

        with self.assertRaises(RecordFormatError):
            self.session.import_rle(bad)

        self.assertIs(self.session.grid, self.grid)

    def test_import_rejects_unsupported_size(self):
        tiny = '{"format":"RLE (Value, Count)","width":3,"height":3,"palette":["#ff0000"],"data":[0,9]}'

        with self.assertRaises(RecordFormatError):
            self.session.import_rle(tiny)

        self.assertIs(self.session.grid, self.grid)
        self.assertEqual(self.session.resolution, 32)

    def test_import_rle_file_replaces_grid(self):
        other = make_grid(64, {(3, 4): "#00ff00"})

        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "sprite.json"
            path.write_text(dumps(other), encoding="utf-8")

            self.assertEqual(self.session.import_rle_file(path), other)

        self.assertEqual(self.session.resolution, 64)

    def test_import_rle_file_errors_keep_grid(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            tiny = Path(tmpdir) / "tiny.json"
            tiny.write_text(
                '{"format":"RLE (Value, Count)","width":3,"height":3,"palette":[],"data":[-1,9]}',
                encoding="utf-8",
            )

            with self.assertRaises(RecordFormatError):
                self.session.import_rle_file(tiny)
            with self.assertRaises(OSError):
                self.session.import_rle_file(Path(tmpdir))
            with self.assertRaises(OSError):
                self.session.import_rle_file(Path(tmpdir) / "missing.json")

        self.assertIs(self.session.grid, self.grid)

    def test_failed_export_keeps_grid(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            blocker = Path(tmpdir) / "file.txt"
            blocker.write_text("x")

            with self.assertRaises(OSError):
                self.session.save_png(blocker)

        self.assertIs(self.session.grid, self.grid)

    def test_save_png_writes_export(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            saved = self.session.save_png(Path(tmpdir), export_scale=2)

            self.assertTrue(saved.exists())
            self.assertTrue(saved.name.startswith("pixelart-32x32-"))

    def test_render_canvas_uses_viewport_scale(self):
        self.session.viewport = Viewport(2)

        self.assertEqual(self.session.render_canvas().size, (64, 64))
        self.assertEqual(self.session.render_export(1).size, (32, 32))

    def test_export_without_grid_raises(self):
        with self.assertRaises(ValueError):
            EditingSession().export_json()


if __name__ == "__main__":
    unittest.main()
