"""
Editing session for Pixel Gen.

The session is the single owner of the active grid. Pointer input is handled
as a small state machine ({dragging, last_pos}) processed synchronously per
event; each edit is a read-modify-write against the latest committed grid.

Loading or generating an image is the only asynchronous step. Each start
bumps a generation token, and a result that arrives for an older token is
discarded, so the most recent request always wins.

Classes:
    PointerKind: down / move / up
    PointerEvent: A pointer sample in display coordinates
    DragState: Whether a drag is armed and where it last applied
    EditingSession: Grid, tool state, viewport and pointer handling
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence, Tuple, Union

from PG_Libs.constants import EXPORT_SCALE, VIEWPORT_MARGIN
from PG_Libs.errors import GenerationError, PixelGenError, ResamplingError
from PG_Libs.GenerationLib.prompt_builder import ImageProvider, request_image
from PG_Libs.GridLib.grid_models import PixelGrid, Resolution, Tool, ToolState, validate_resolution
from PG_Libs.GridLib.quantizer import QuantizerConfig, quantize_async
from PG_Libs.GridLib.raster_editor import apply_tool
from PG_Libs.GridLib.renderers import render_canvas, render_export
from PG_Libs.GridLib.rle_codec import RleRecord, decode, dumps, encode, loads
from PG_Libs.GridLib.viewport import Viewport
from PG_Libs.ProjStoreLib.pixel_store import save_png_export, save_rle_file

logger = logging.getLogger(__name__)


class PointerKind(str, Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"


@dataclass(frozen=True)
class PointerEvent:
    kind: PointerKind
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class DragState:
    dragging: bool = False
    last_pos: Optional[Tuple[int, int]] = None


class EditingSession:
    """Holds the grid and routes tool input into the raster editor."""

    def __init__(
        self,
        resolution: int = Resolution.S,
        quantizer_config: Optional[QuantizerConfig] = None,
    ) -> None:
        self.resolution = validate_resolution(resolution)
        self.quantizer_config = quantizer_config or QuantizerConfig()
        self.grid: Optional[PixelGrid] = None
        self.tool_state = ToolState()
        self.viewport = Viewport()
        self.drag = DragState()
        self.last_error: Optional[str] = None
        self.is_loading = False
        self._generation = 0

    # Grid lifecycle

    def set_grid(self, grid: PixelGrid) -> None:
        """Replace the grid wholesale and reset tool defaults for it."""
        self.grid = grid
        self.resolution = grid.resolution
        self.tool_state = ToolState.for_grid(grid)
        self.drag = DragState()

    def clear(self) -> None:
        self.grid = None
        self.tool_state = ToolState()
        self.drag = DragState()

    def begin_generation(self, resolution: int) -> int:
        """
        Start a load or generation and return its token.

        Any request still in flight becomes stale. Callers that run the
        quantize step elsewhere hand the token back to finish_generation
        or fail_generation.

        Raises:
            ValueError: If resolution is unsupported; in-flight work stays current
        """
        resolution = validate_resolution(resolution)
        self._generation += 1
        self.resolution = resolution
        self.last_error = None
        self.is_loading = True
        self.clear()
        return self._generation

    def _is_current(self, token: int) -> bool:
        return token == self._generation

    def finish_generation(self, token: int, grid: PixelGrid) -> Optional[PixelGrid]:
        if not self._is_current(token):
            logger.info(f"Discarding stale generation result #{token} (current #{self._generation})")
            return None
        self.is_loading = False
        self.set_grid(grid)
        return grid

    def fail_generation(self, token: int, error: PixelGenError) -> bool:
        """Record a failure. Returns False if token was already superseded."""
        logger.warning(f"Generation #{token} failed: {error}")
        if not self._is_current(token):
            return False
        self.is_loading = False
        self.last_error = str(error)
        return True

    async def load_image(self, source: Any, resolution: Optional[int] = None) -> Optional[PixelGrid]:
        """
        Quantize a bitmap source into the session grid.

        Returns:
            The new grid, or None if a newer request superseded this one

        Raises:
            ResamplingError: If the bitmap cannot be decoded or resampled
        """
        token = self.begin_generation(resolution or self.resolution)
        try:
            grid = await quantize_async(source, self.resolution, self.quantizer_config)
        except ResamplingError as e:
            self.fail_generation(token, e)
            raise
        return self.finish_generation(token, grid)

    async def generate(
        self,
        subject: str,
        provider: ImageProvider,
        resolution: Optional[int] = None,
    ) -> Optional[PixelGrid]:
        """
        Ask the provider for an image of subject and quantize it.

        Raises:
            GenerationError: If the provider fails or returns nothing
            ResamplingError: If the returned bitmap cannot be processed
        """
        token = self.begin_generation(resolution or self.resolution)
        try:
            raw = await request_image(provider, subject, self.resolution)
            if not self._is_current(token):
                logger.info(f"Dropping provider result for stale generation #{token}")
                return None
            grid = await quantize_async(raw, self.resolution, self.quantizer_config)
        except (GenerationError, ResamplingError) as e:
            self.fail_generation(token, e)
            raise
        return self.finish_generation(token, grid)

    # Tool selection

    def select_tool(self, tool: Union[Tool, str]) -> None:
        self.tool_state = self.tool_state.with_tool(Tool(tool))

    def set_brush_size(self, brush_size: int) -> None:
        self.tool_state = self.tool_state.with_brush_size(brush_size)

    def set_draw_color(self, color: Union[str, Sequence[int]]) -> None:
        self.tool_state = self.tool_state.with_draw_color(color)

    # Viewport

    def set_container_size(self, width: float, height: float, margin: int = VIEWPORT_MARGIN) -> int:
        self.viewport = Viewport.fit(width, height, self.resolution, margin)
        return self.viewport.scale

    # Pointer input

    def apply_at(self, x: int, y: int) -> bool:
        """Apply the active tool at a grid cell. Returns True if the grid changed."""
        if self.grid is None:
            return False
        result = apply_tool(self.grid, self.tool_state, x, y)
        if result.changed:
            self.grid = result.grid
        return result.changed

    def pointer_down(self, display_x: float, display_y: float) -> bool:
        pos = self.viewport.to_grid(display_x, display_y)
        self.drag = DragState(dragging=True, last_pos=pos)
        return self.apply_at(*pos)

    def pointer_move(self, display_x: float, display_y: float) -> bool:
        # The magic eraser applies only on the initiating press.
        if not self.drag.dragging or self.tool_state.active_tool == Tool.MAGIC_ERASER:
            return False
        pos = self.viewport.to_grid(display_x, display_y)
        self.drag = DragState(dragging=True, last_pos=pos)
        return self.apply_at(*pos)

    def pointer_up(self) -> bool:
        self.drag = DragState()
        return False

    def handle_event(self, event: PointerEvent) -> bool:
        kind = PointerKind(event.kind)
        if kind == PointerKind.DOWN:
            return self.pointer_down(event.x, event.y)
        if kind == PointerKind.MOVE:
            return self.pointer_move(event.x, event.y)
        return self.pointer_up()

    def process_events(self, events: Iterable[PointerEvent]) -> bool:
        """Apply queued events in delivery order. Returns True if any changed the grid."""
        changed = False
        for event in events:
            changed = self.handle_event(event) or changed
        return changed

    # Export / import

    def _require_grid(self) -> PixelGrid:
        if self.grid is None:
            raise ValueError("No grid loaded")
        return self.grid

    def export_rle(self) -> RleRecord:
        return encode(self._require_grid())

    def export_json(self) -> str:
        return dumps(self._require_grid())

    def import_rle(self, source: Union[RleRecord, str, bytes]) -> PixelGrid:
        """
        Replace the grid with a decoded record.

        The current grid is kept untouched unless the whole record decodes.

        Raises:
            RecordFormatError: If the record is invalid
        """
        grid = decode(source) if isinstance(source, RleRecord) else loads(source)
        self.set_grid(grid)
        return grid

    def import_rle_file(self, path: Path) -> PixelGrid:
        """
        Replace the grid with the record stored at path.

        Raises:
            RecordFormatError: If the file content is not a valid record
            OSError: If the file cannot be read
        """
        grid = self.import_rle(Path(path).read_bytes())
        logger.info(f"Imported {grid.resolution}x{grid.resolution} grid from {path}")
        return grid

    def render_export(self, export_scale: int = EXPORT_SCALE):
        return render_export(self._require_grid(), export_scale)

    def render_canvas(self):
        return render_canvas(self._require_grid(), self.viewport.scale)

    def save_png(self, output_dir: Path, export_scale: int = EXPORT_SCALE) -> Path:
        return save_png_export(self._require_grid(), output_dir, export_scale)

    def save_rle(self, path: Path) -> Path:
        return save_rle_file(path, self._require_grid())
