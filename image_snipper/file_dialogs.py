"""Native open/save dialogs scoped to the supported image types."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from PySide6.QtCore import QStandardPaths
from PySide6.QtWidgets import QFileDialog, QWidget

from image_snipper.image_ops import OPEN_EXTENSIONS
from image_snipper.logger import get_logger

if TYPE_CHECKING:
    from image_snipper.settings_manager import SettingsManager

_logger = get_logger("file_dialogs")

OPEN_FILTER = "Image Files ({})".format(" ".join(f"*.{ext}" for ext in OPEN_EXTENSIONS))
SAVE_FILTERS = ";;".join(
    [
        "PNG Image (*.png)",
        "JPEG Image (*.jpg *.jpeg)",
        "WebP Image (*.webp)",
    ]
)
DEFAULT_SAVE_NAME = "output.png"


def default_directory(settings: SettingsManager | None = None) -> str:
    """Last used directory, else the Pictures folder, else home."""
    if settings is not None:
        last = settings.last_open_dir
        if last:
            return last
    pictures = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.PicturesLocation)
    if pictures and os.path.isdir(pictures):
        return pictures
    return os.path.expanduser("~")


def _remember_dir(settings: SettingsManager | None, path: str) -> None:
    if settings is None or not path:
        return
    settings.set("last_open_dir", os.path.dirname(path))


def ask_open_image(parent: QWidget | None, settings: SettingsManager | None = None) -> str | None:
    path, _ = QFileDialog.getOpenFileName(parent, "Load Image", default_directory(settings), OPEN_FILTER)
    if not path:
        _logger.debug("Open cancelled by user")
        return None
    _remember_dir(settings, path)
    return path


def ask_save_image(parent: QWidget | None, settings: SettingsManager | None = None) -> str | None:
    start = os.path.join(default_directory(settings), DEFAULT_SAVE_NAME)
    path, _ = QFileDialog.getSaveFileName(parent, "Save Image As", start, SAVE_FILTERS)
    if not path:
        _logger.debug("Save cancelled by user")
        return None
    _remember_dir(settings, path)
    return path
