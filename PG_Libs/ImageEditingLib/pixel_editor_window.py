import logging
from io import BytesIO
from pathlib import Path
from typing import Any, Optional

from PyQt5.QtCore import Qt, QThread, pyqtSignal
from PyQt5.QtGui import QColor, QPixmap
from PyQt5.QtWidgets import (
    QButtonGroup,
    QColorDialog,
    QComboBox,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from PG_Libs.constants import (
    DEFAULT_WINDOW_HEIGHT,
    DEFAULT_WINDOW_WIDTH,
    MAX_BRUSH_SIZE,
    MIN_BRUSH_SIZE,
    SUPPORTED_RESOLUTIONS,
)
from PG_Libs.errors import PixelGenError
from PG_Libs.GridLib.grid_models import PixelGrid, Resolution, Tool
from PG_Libs.GridLib.quantizer import QuantizerConfig, quantize
from PG_Libs.SessionLib.editing_session import EditingSession, PointerEvent, PointerKind

logger = logging.getLogger(__name__)

TOOL_LABELS = {
    Tool.PENCIL: "Pencil",
    Tool.ERASER: "Eraser",
    Tool.MAGIC_ERASER: "Magic Eraser",
}


class QuantizeThread(QThread):
    """Background thread that quantizes one bitmap for a generation token."""

    grid_ready = pyqtSignal(int, object)  # token, PixelGrid
    failed = pyqtSignal(int, object)  # token, PixelGenError

    def __init__(self, token: int, source: Any, resolution: int, config: QuantizerConfig) -> None:
        super().__init__()
        self.token = token
        self.source = source
        self.resolution = resolution
        self.config = config

    def run(self) -> None:
        try:
            grid = quantize(self.source, self.resolution, self.config)
        except PixelGenError as e:
            self.failed.emit(self.token, e)
            return
        self.grid_ready.emit(self.token, grid)


class PixelCanvas(QLabel):
    """Shows the rendered grid and forwards mouse input to the session."""

    def __init__(self, window: "PixelEditorWindow") -> None:
        super().__init__()
        self.window_ref = window
        self.setAlignment(Qt.AlignLeft | Qt.AlignTop)
        self.setMouseTracking(False)

    def _event(self, kind: PointerKind, event: Any) -> None:
        pos = event.pos()
        self.window_ref.on_pointer(PointerEvent(kind, pos.x(), pos.y()))

    def mousePressEvent(self, event: Any) -> None:
        if event.button() == Qt.LeftButton:
            self._event(PointerKind.DOWN, event)

    def mouseMoveEvent(self, event: Any) -> None:
        self._event(PointerKind.MOVE, event)

    def mouseReleaseEvent(self, event: Any) -> None:
        self._event(PointerKind.UP, event)

    def leaveEvent(self, event: Any) -> None:
        self.window_ref.on_pointer(PointerEvent(PointerKind.UP))


class PixelEditorWindow(QMainWindow):
    def __init__(self, session: Optional[EditingSession] = None) -> None:
        super().__init__()
        self.setWindowTitle("Pixel Gen Editor")
        self.resize(DEFAULT_WINDOW_WIDTH, DEFAULT_WINDOW_HEIGHT)

        self.session = session or EditingSession()
        self._workers = []

        self._build_ui()
        self._connect_signals()
        self.refresh_canvas()

    def _build_ui(self) -> None:
        central = QWidget(self)
        self.setCentralWidget(central)

        root = QHBoxLayout(central)
        controls_col = QVBoxLayout()

        self.combo_resolution = QComboBox()
        for size in SUPPORTED_RESOLUTIONS:
            self.combo_resolution.addItem(f"{size}x{size}", size)
        self.combo_resolution.setCurrentIndex(SUPPORTED_RESOLUTIONS.index(int(self.session.resolution)))

        self.btn_load_image = QPushButton("Load Image")
        self.btn_import_json = QPushButton("Import JSON")
        self.btn_export_png = QPushButton("Export PNG")
        self.btn_export_json = QPushButton("Show JSON")
        self.btn_pick_color = QPushButton("Pick Color")

        self.tool_group = QButtonGroup(self)
        self.tool_group.setExclusive(True)
        self.tool_buttons = {}
        for tool, label in TOOL_LABELS.items():
            button = QPushButton(label)
            button.setCheckable(True)
            self.tool_group.addButton(button)
            self.tool_buttons[tool] = button

        self.spin_brush = QSpinBox()
        self.spin_brush.setRange(MIN_BRUSH_SIZE, MAX_BRUSH_SIZE)

        self.label_color = QLabel("Color: -")
        self.label_status = QLabel("Load an image to start.")
        self.json_view = QPlainTextEdit()
        self.json_view.setReadOnly(True)
        self.json_view.setVisible(False)

        self.canvas = PixelCanvas(self)
        self.canvas.setMinimumSize(512, 512)
        self.canvas.setStyleSheet("border: 1px solid #888;")

        controls_col.addWidget(QLabel("Resolution"))
        controls_col.addWidget(self.combo_resolution)
        controls_col.addWidget(self.btn_load_image)
        controls_col.addWidget(self.btn_import_json)
        controls_col.addWidget(QLabel("Tools"))
        for button in self.tool_buttons.values():
            controls_col.addWidget(button)
        controls_col.addWidget(QLabel("Brush Size"))
        controls_col.addWidget(self.spin_brush)
        controls_col.addWidget(self.label_color)
        controls_col.addWidget(self.btn_pick_color)
        controls_col.addWidget(self.btn_export_png)
        controls_col.addWidget(self.btn_export_json)
        controls_col.addWidget(self.label_status)
        controls_col.addStretch(1)

        canvas_col = QVBoxLayout()
        canvas_col.addWidget(self.canvas, stretch=3)
        canvas_col.addWidget(self.json_view, stretch=1)

        root.addLayout(controls_col, stretch=1)
        root.addLayout(canvas_col, stretch=4)

    def _connect_signals(self) -> None:
        self.btn_load_image.clicked.connect(self.load_image)
        self.btn_import_json.clicked.connect(self.import_json)
        self.btn_export_png.clicked.connect(self.export_png)
        self.btn_export_json.clicked.connect(self.toggle_json)
        self.btn_pick_color.clicked.connect(self.pick_draw_color)
        self.spin_brush.valueChanged.connect(self.session.set_brush_size)
        for tool, button in self.tool_buttons.items():
            button.clicked.connect(lambda _checked=False, t=tool: self.select_tool(t))

    def resizeEvent(self, event: Any) -> None:
        super().resizeEvent(event)
        self.refresh_canvas()

    # Session actions

    def load_image(self, path: Optional[Path] = None) -> None:
        if not path:
            file_path, _ = QFileDialog.getOpenFileName(
                self,
                "Select Image",
                "",
                "Images (*.png *.jpg *.jpeg *.bmp *.gif *.webp)",
            )
            if not file_path:
                return
            path = Path(file_path)

        resolution = Resolution(self.combo_resolution.currentData())
        token = self.session.begin_generation(resolution)
        self.label_status.setText("Processing...")
        self.refresh_canvas()

        worker = QuantizeThread(token, Path(path), resolution, self.session.quantizer_config)
        worker.grid_ready.connect(lambda t, grid, name=Path(path).name: self._on_grid_ready(t, grid, name))
        worker.failed.connect(self._on_load_failed)
        worker.finished.connect(lambda w=worker: self._workers.remove(w))
        self._workers.append(worker)
        worker.start()

    def _on_grid_ready(self, token: int, grid: PixelGrid, name: str) -> None:
        if self.session.finish_generation(token, grid) is None:
            return
        self.label_status.setText(f"Loaded {name}")
        self.sync_tool_controls()
        self.refresh_canvas()

    def _on_load_failed(self, token: int, error: PixelGenError) -> None:
        if not self.session.fail_generation(token, error):
            return
        self.label_status.setText("Load failed")
        self._show_error("Load Failed", str(error))
        self.refresh_canvas()

    def import_json(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(self, "Import RLE JSON", "", "JSON (*.json)")
        if not file_path:
            return

        try:
            self.session.import_rle_file(Path(file_path))
        except (PixelGenError, OSError) as e:
            self._show_error("Import Failed", str(e))
            return

        self.sync_tool_controls()
        self.refresh_canvas()

    def export_png(self) -> None:
        if self.session.grid is None:
            return

        folder = QFileDialog.getExistingDirectory(self, "Select Export Directory")
        if not folder:
            return

        try:
            saved_path = self.session.save_png(Path(folder))
        except (OSError, ValueError) as e:
            self._show_error("Export Failed", str(e))
            return
        QMessageBox.information(self, "Success", f"Saved {saved_path.name}")

    def toggle_json(self) -> None:
        if self.session.grid is None:
            return
        visible = not self.json_view.isVisible()
        if visible:
            self.json_view.setPlainText(self.session.export_json())
        self.json_view.setVisible(visible)

    def pick_draw_color(self) -> None:
        color = QColorDialog.getColor(
            QColor(self.session.tool_state.draw_color),
            parent=self,
            title="Pick draw color",
        )
        if not color.isValid():
            return

        self.session.set_draw_color((color.red(), color.green(), color.blue()))
        self.sync_tool_controls()

    def select_tool(self, tool: Tool) -> None:
        if self.session.grid is None:
            return
        self.session.select_tool(tool)
        self.sync_tool_controls()

    def on_pointer(self, event: PointerEvent) -> None:
        if self.session.grid is None:
            return
        if self.session.handle_event(event):
            self.refresh_canvas(fit=False)

    # View

    def sync_tool_controls(self) -> None:
        state = self.session.tool_state
        for tool, button in self.tool_buttons.items():
            button.setChecked(tool == state.active_tool)
        self.spin_brush.blockSignals(True)
        self.spin_brush.setValue(min(state.brush_size, MAX_BRUSH_SIZE))
        self.spin_brush.blockSignals(False)
        self.label_color.setText(f"Color: {state.draw_color}")
        self.spin_brush.setEnabled(state.active_tool != Tool.MAGIC_ERASER)

    def refresh_canvas(self, fit: bool = True) -> None:
        if self.session.grid is None:
            self.canvas.clear()
            self.canvas.setText(self.session.last_error or "No image")
            return

        if fit:
            self.session.set_container_size(self.canvas.width(), self.canvas.height())

        pixmap = QPixmap()
        if not pixmap.loadFromData(self._to_png_bytes(self.session.render_canvas()), "PNG"):
            self.canvas.setText("Preview failed")
            return
        self.canvas.setPixmap(pixmap)

    def _to_png_bytes(self, image: Any) -> bytes:
        buffer = BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    def _show_error(self, title: str, message: str) -> None:
        logger.error(f"{title}: {message}")
        QMessageBox.critical(self, title, message)
