"""Editing session: the current image plus view and resize parameters.

All image-replacing operations (load, reload, crop, resize) swap the whole
image and reset zoom and pan so the new content is centered.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from image_snipper import image_ops
from image_snipper.logger import get_logger

from .crop_controller import CropBox, PreviewGeometry, Rect, compute_preview, screen_rect_to_crop_box

_logger = get_logger("session")

DEFAULT_TARGET_SIZE = 256
DEFAULT_ZOOM_STEP = 1.1
DEFAULT_MAX_PREVIEW = (800.0, 800.0)
DEFAULT_SAVE_AS_PATH = "output.png"
MAX_TARGET_SIZE = 65535


def _clamp_target(value: float) -> int:
    return max(1, min(MAX_TARGET_SIZE, int(value)))


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


class SnipSession:
    def __init__(
        self,
        *,
        target_width: int = DEFAULT_TARGET_SIZE,
        target_height: int = DEFAULT_TARGET_SIZE,
        keep_aspect: bool = True,
        zoom_step: float = DEFAULT_ZOOM_STEP,
        max_preview: tuple[float, float] = DEFAULT_MAX_PREVIEW,
        jpeg_quality: int = image_ops.DEFAULT_JPEG_QUALITY,
    ) -> None:
        self.image: Any | None = None
        self.source_path: str | None = None
        self.target_width = _clamp_target(target_width)
        self.target_height = _clamp_target(target_height)
        self.keep_aspect = bool(keep_aspect)
        self.zoom = 1.0
        self.offset: tuple[float, float] = (0.0, 0.0)
        self.zoom_step = float(zoom_step)
        self.max_preview = (float(max_preview[0]), float(max_preview[1]))
        self.jpeg_quality = int(jpeg_quality)
        self.save_as_path = DEFAULT_SAVE_AS_PATH

    # ---- queries ----
    @property
    def has_image(self) -> bool:
        return self.image is not None

    @property
    def image_size(self) -> tuple[int, int] | None:
        if self.image is None:
            return None
        return int(self.image.width), int(self.image.height)

    @property
    def zoom_percent(self) -> int:
        return round(self.zoom * 100)

    def title_text(self) -> str:
        """Header line: file name and current dimensions."""
        size = self.image_size
        if size is None:
            return "No image loaded"
        name = Path(self.source_path).name if self.source_path else "Unnamed"
        return f"{name} - {size[0]}x{size[1]}"

    def preview_geometry(self, canvas: Rect) -> PreviewGeometry | None:
        size = self.image_size
        if size is None:
            return None
        return compute_preview(
            canvas,
            size[0],
            size[1],
            zoom=self.zoom,
            offset=self.offset,
            max_preview=self.max_preview,
        )

    # ---- image-replacing operations ----
    def _replace_image(self, image: Any) -> None:
        self.image = image
        self.zoom = 1.0
        self.offset = (0.0, 0.0)

    def load(self, path: str | os.PathLike[str]) -> None:
        """Open `path` as the new current image.

        Raises:
            image_ops.ImageOpError: If the file cannot be read
        """
        image = image_ops.load_image(path)
        self._replace_image(image)
        self.source_path = str(path)
        self.target_width, self.target_height = _clamp_target(image.width), _clamp_target(image.height)
        _logger.info("Loaded %s (%dx%d)", path, image.width, image.height)

    def reload_original(self) -> bool:
        """Reload the source file if it still exists."""
        if not self.source_path or not os.path.exists(self.source_path):
            _logger.debug("Reload skipped, no source on disk: %s", self.source_path)
            return False
        self.load(self.source_path)
        return True

    def crop(self, box: CropBox) -> bool:
        """Crop to `box`; an empty box leaves the image untouched."""
        if self.image is None or box.is_empty:
            _logger.debug("Crop ignored: %s", box)
            return False
        cropped = image_ops.crop_image(self.image, box)
        self._replace_image(cropped)
        self.target_width, self.target_height = _clamp_target(box.width), _clamp_target(box.height)
        _logger.info("Cropped to %s", box.as_tuple())
        return True

    def crop_screen_rect(self, rect: Rect, preview: PreviewGeometry) -> bool:
        """Crop using a selection drawn on the canvas over `preview`."""
        if self.image is None:
            return False
        return self.crop(screen_rect_to_crop_box(rect, preview))

    def resize(self) -> bool:
        if self.image is None:
            return False
        resized = image_ops.resize_image(self.image, self.target_width, self.target_height, self.keep_aspect)
        self._replace_image(resized)
        _logger.info(
            "Resized to %dx%d (target %dx%d, keep_aspect=%s)",
            resized.width,
            resized.height,
            self.target_width,
            self.target_height,
            self.keep_aspect,
        )
        return True

    # ---- target size ----
    def set_target_width(self, width: int) -> None:
        """Set the target width; with aspect lock the height follows, rounded half up.

        Both values stay within 1..MAX_TARGET_SIZE.
        """
        self.target_width = _clamp_target(width)
        size = self.image_size
        if self.keep_aspect and size is not None:
            self.target_height = _clamp_target(_round_half_up(self.target_width * size[1] / size[0]))

    def set_target_height(self, height: int) -> None:
        self.target_height = _clamp_target(height)
        size = self.image_size
        if self.keep_aspect and size is not None:
            self.target_width = _clamp_target(_round_half_up(self.target_height * size[0] / size[1]))

    def set_keep_aspect(self, keep: bool) -> None:
        self.keep_aspect = bool(keep)

    # ---- view ----
    def zoom_in(self) -> None:
        self.zoom *= self.zoom_step

    def zoom_out(self) -> None:
        self.zoom /= self.zoom_step

    def reset_zoom(self) -> None:
        self.zoom = 1.0
        self.offset = (0.0, 0.0)

    def pan_by(self, dx: float, dy: float) -> None:
        self.offset = (self.offset[0] + float(dx), self.offset[1] + float(dy))

    # ---- output ----
    def save_as(self, path: str | os.PathLike[str]) -> Path | None:
        """Write the current image to `path` (extension added when missing).

        Raises:
            image_ops.ImageOpError: If the file cannot be written
        """
        if self.image is None:
            return None
        out = image_ops.save_image(self.image, image_ops.resolve_save_path(path), self.jpeg_quality)
        self.save_as_path = str(out)
        return out

    def overwrite(self) -> Path | None:
        """Write the current image back over the source file.

        Raises:
            image_ops.ImageOpError: If the file cannot be written
        """
        if self.image is None or not self.source_path:
            return None
        return image_ops.save_image(self.image, self.source_path, self.jpeg_quality)
