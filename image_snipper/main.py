import os
import sys
from pathlib import Path

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QApplication,
    QCheckBox,
    QFrame,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from image_snipper import file_dialogs
from image_snipper.busy_cursor import busy_cursor
from image_snipper.image_ops import ImageOpError
from image_snipper.logger import get_logger, setup_logger
from image_snipper.ops.crop_controller import PreviewGeometry, Rect
from image_snipper.ops.session import MAX_TARGET_SIZE, SnipSession
from image_snipper.settings_manager import SettingsManager
from image_snipper.styles import apply_theme
from image_snipper.ui_canvas import SnipCanvas

# --- CLI logging options -----------------------------------------------------
# Qt rejects unknown options, so ours are parsed first, mirrored into
# IMAGE_SNIPPER_LOG_LEVEL / IMAGE_SNIPPER_LOG_CATS and removed from argv.


def _apply_cli_logging_options(argv: list[str]) -> list[str]:
    import argparse

    parser = argparse.ArgumentParser(description="Image Snipper", add_help=False)
    parser.add_argument("--log-level", help="Set log level")
    parser.add_argument("--log-cats", help="Set log categories")
    args, remaining = parser.parse_known_args(argv[1:])
    if args.log_level:
        os.environ["IMAGE_SNIPPER_LOG_LEVEL"] = args.log_level
    if args.log_cats:
        os.environ["IMAGE_SNIPPER_LOG_CATS"] = args.log_cats
    return [*argv[:1], *remaining]


logger = get_logger("main")
_BASE_DIR = Path(getattr(sys, "_MEIPASS", Path(__file__).resolve().parent))

APP_TITLE = "Lightweight Snipping Tool"
EXIT_FATAL = 1


def _hline() -> QFrame:
    line = QFrame()
    line.setFrameShape(QFrame.Shape.HLine)
    line.setFrameShadow(QFrame.Shadow.Plain)
    return line


class SnipperWindow(QMainWindow):
    def __init__(self, settings_path: str | None = None):
        super().__init__()
        self.setWindowTitle(APP_TITLE)

        self._settings_path = settings_path or (_BASE_DIR / "settings.json").as_posix()
        self._settings_manager = SettingsManager(self._settings_path)
        sm = self._settings_manager
        self.session = SnipSession(
            target_width=sm.get_int("default_target_width"),
            target_height=sm.get_int("default_target_height"),
            keep_aspect=bool(sm.get("keep_aspect")),
            zoom_step=sm.get_float("zoom_step", minimum=1.0),
            max_preview=(
                float(sm.get_int("max_preview_width")),
                float(sm.get_int("max_preview_height")),
            ),
            jpeg_quality=sm.get_int("jpeg_quality"),
        )
        self._syncing = False
        self.aborted = False

        self.canvas = SnipCanvas(self.session)
        self.canvas.selection_finished.connect(self._on_selection_finished)
        self.canvas.view_changed.connect(self._update_zoom_label)

        central = QWidget()
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)
        layout.addWidget(self._create_header(), stretch=0)
        layout.addWidget(self.canvas, stretch=1)
        layout.addWidget(self._create_dock(), stretch=0)
        self.setCentralWidget(central)

        self.resize(1024, 900)
        self._refresh_all()

    # ---- layout ----
    def _create_header(self) -> QWidget:
        header = QWidget()
        header.setObjectName("snipHeader")
        header.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        layout = QVBoxLayout(header)
        layout.setContentsMargins(12, 8, 12, 8)
        heading = QLabel(APP_TITLE)
        heading.setObjectName("snipHeading")
        layout.addWidget(heading)
        self.info_label = QLabel()
        self.info_label.setObjectName("snipImageInfo")
        layout.addWidget(self.info_label)
        return header

    def _create_dock(self) -> QWidget:
        dock = QWidget()
        dock.setObjectName("snipDock")
        dock.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        layout = QVBoxLayout(dock)
        layout.setContentsMargins(12, 6, 12, 10)
        layout.addWidget(_hline())

        # Actions
        actions = QHBoxLayout()
        self.load_btn = QPushButton("Load Image...")
        self.load_btn.clicked.connect(self.load_image_dialog)
        self.reload_btn = QPushButton("Reload Original")
        self.reload_btn.clicked.connect(self.reload_original)
        self.resize_btn = QPushButton("Apply Resize")
        self.resize_btn.clicked.connect(self.resize_current_image)
        self.save_as_btn = QPushButton("Save As...")
        self.save_as_btn.clicked.connect(self.save_as)
        self.overwrite_btn = QPushButton("Overwrite Save")
        self.overwrite_btn.clicked.connect(self.save_overwrite)
        for btn in (self.load_btn, self.reload_btn, self.resize_btn, self.save_as_btn, self.overwrite_btn):
            actions.addWidget(btn)
        actions.addStretch()
        layout.addLayout(actions)
        layout.addWidget(_hline())

        # Target size
        size_row = QHBoxLayout()
        size_row.addWidget(QLabel("Width:"))
        self.width_spin = QSpinBox()
        self.width_spin.setRange(1, MAX_TARGET_SIZE)
        self.width_spin.valueChanged.connect(self._on_width_edited)
        size_row.addWidget(self.width_spin)
        size_row.addWidget(QLabel("Height:"))
        self.height_spin = QSpinBox()
        self.height_spin.setRange(1, MAX_TARGET_SIZE)
        self.height_spin.valueChanged.connect(self._on_height_edited)
        size_row.addWidget(self.height_spin)
        self.aspect_check = QCheckBox("Lock aspect ratio")
        self.aspect_check.toggled.connect(self._on_aspect_toggled)
        size_row.addWidget(self.aspect_check)
        size_row.addStretch()
        layout.addLayout(size_row)
        layout.addWidget(_hline())

        # Zoom
        zoom_row = QHBoxLayout()
        zoom_in_btn = QPushButton("Zoom In")
        zoom_in_btn.clicked.connect(self.zoom_in)
        zoom_out_btn = QPushButton("Zoom Out")
        zoom_out_btn.clicked.connect(self.zoom_out)
        reset_btn = QPushButton("Reset Zoom")
        reset_btn.clicked.connect(self.reset_zoom)
        self.zoom_label = QLabel()
        self.zoom_label.setObjectName("snipZoomLabel")
        for w in (zoom_in_btn, zoom_out_btn, reset_btn, self.zoom_label):
            zoom_row.addWidget(w)
        zoom_row.addStretch()
        layout.addLayout(zoom_row)
        return dock

    # ---- view sync ----
    def _refresh_all(self) -> None:
        self.info_label.setText(self.session.title_text())
        self._sync_size_controls()
        self._update_zoom_label()
        has_image = self.session.has_image
        self.resize_btn.setEnabled(has_image)
        self.save_as_btn.setEnabled(has_image)
        self.reload_btn.setEnabled(bool(self.session.source_path))
        self.overwrite_btn.setEnabled(has_image and bool(self.session.source_path))

    def _sync_size_controls(self) -> None:
        self._syncing = True
        try:
            self.width_spin.setValue(self.session.target_width)
            self.height_spin.setValue(self.session.target_height)
            self.aspect_check.setChecked(self.session.keep_aspect)
        finally:
            self._syncing = False

    def _update_zoom_label(self) -> None:
        self.zoom_label.setText(f"Zoom: {self.session.zoom_percent}%")
        self.canvas.update()

    def _image_replaced(self) -> None:
        self.canvas.image_changed()
        self._refresh_all()

    # ---- fatal errors ----
    def _abort(self, error: ImageOpError) -> None:
        """Load/save failures are unrecoverable: report and end the event loop."""
        logger.critical("Aborting: %s", error, exc_info=error)
        self.aborted = True
        QMessageBox.critical(self, "Fatal Error", f"{error}\n\nThe application will now exit.")
        QApplication.exit(EXIT_FATAL)

    # ---- commands ----
    def load_image(self, path: str) -> None:
        try:
            with busy_cursor("load"):
                self.session.load(path)
        except ImageOpError as e:
            self._abort(e)
            return
        self._image_replaced()

    def load_image_dialog(self) -> None:
        path = file_dialogs.ask_open_image(self, self._settings_manager)
        if path:
            self.load_image(path)

    def reload_original(self) -> None:
        try:
            with busy_cursor("reload"):
                reloaded = self.session.reload_original()
        except ImageOpError as e:
            self._abort(e)
            return
        if reloaded:
            self._image_replaced()

    def _on_selection_finished(self, rect: Rect, preview: PreviewGeometry) -> None:
        if self.session.crop_screen_rect(rect, preview):
            self._image_replaced()

    def resize_current_image(self) -> None:
        with busy_cursor("resize"):
            resized = self.session.resize()
        if resized:
            self._image_replaced()

    def save_as(self) -> None:
        if not self.session.has_image:
            return
        path = file_dialogs.ask_save_image(self, self._settings_manager)
        if not path:
            return
        try:
            with busy_cursor("save"):
                self.session.save_as(path)
        except ImageOpError as e:
            self._abort(e)

    def save_overwrite(self) -> None:
        try:
            with busy_cursor("overwrite"):
                self.session.overwrite()
        except ImageOpError as e:
            self._abort(e)

    def zoom_in(self) -> None:
        self.session.zoom_in()
        self._update_zoom_label()

    def zoom_out(self) -> None:
        self.session.zoom_out()
        self._update_zoom_label()

    def reset_zoom(self) -> None:
        self.session.reset_zoom()
        self._update_zoom_label()

    # ---- size controls ----
    def _on_width_edited(self, value: int) -> None:
        if self._syncing:
            return
        self.session.set_target_width(value)
        self._sync_size_controls()

    def _on_height_edited(self, value: int) -> None:
        if self._syncing:
            return
        self.session.set_target_height(value)
        self._sync_size_controls()

    def _on_aspect_toggled(self, checked: bool) -> None:
        if self._syncing:
            return
        self.session.set_keep_aspect(checked)


def run(argv: list[str] | None = None) -> int:
    """Application entrypoint (packaging-friendly)."""
    import argparse

    argv = _apply_cli_logging_options(sys.argv if argv is None else list(argv))
    setup_logger()

    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("start_path", nargs="?", help="Image file to open")
    args, _ = parser.parse_known_args(argv[1:])
    start_path = Path(args.start_path) if args.start_path else None

    app = QApplication(argv)
    window = SnipperWindow()
    apply_theme(app, str(window._settings_manager.get("theme")))
    window.show()

    if start_path is not None:
        if start_path.is_file():
            window.load_image(str(start_path))
            if window.aborted:
                return EXIT_FATAL
        else:
            logger.warning("start path is not a file: %s", start_path)

    return app.exec()


if __name__ == "__main__":
    sys.exit(run())
