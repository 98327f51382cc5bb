"""Image backend using pyvips.

Pure functions for loading, cropping, resizing and saving images, no Qt
dependencies. Every transforming call returns a new image; inputs are never
modified.
"""

from __future__ import annotations

import contextlib
import os
from pathlib import Path
from typing import Any

import numpy as np

from image_snipper.logger import get_logger
from image_snipper.ops.crop_controller import CropBox

_logger = get_logger("image_ops")

_LIBVIPS_BIN = os.environ.get("LIBVIPS_BIN")
if _LIBVIPS_BIN and os.name == "nt":
    # Best-effort only; the pyvips import reports missing DLLs itself
    with contextlib.suppress(OSError):
        os.add_dll_directory(_LIBVIPS_BIN)

RESAMPLE_KERNEL = "lanczos3"
DEFAULT_JPEG_QUALITY = 75
RGBA_BANDS = 4

# Extension -> output format. Anything not listed is written as PNG.
OUTPUT_FORMATS: dict[str, str] = {
    ".png": "png",
    ".jpg": "jpeg",
    ".jpeg": "jpeg",
    ".webp": "webp",
}
OPEN_EXTENSIONS = ("png", "jpg", "jpeg", "webp")

_pyvips: Any | None = None


class ImageOpError(RuntimeError):
    """An image could not be read or written."""

    def __init__(self, action: str, path: str | os.PathLike[str], cause: Exception):
        self.action = action
        self.path = str(path)
        self.cause = cause
        super().__init__(f"Failed to {action} {self.path}: {cause}")


def _get_pyvips_module() -> Any:
    global _pyvips
    if _pyvips is None:
        import pyvips  # type: ignore

        # Keep memory flat: images are owned by the session, not the vips cache
        with contextlib.suppress(Exception):
            pyvips.cache_set_max(0)
            pyvips.cache_set_max_mem(0)
            pyvips.cache_set_max_files(0)
        _pyvips = pyvips
    return _pyvips


def validate_crop_bounds(img_width: int, img_height: int, crop: tuple[int, int, int, int]) -> bool:
    """Validate that crop rectangle is non-empty and within image bounds.

    Args:
        img_width: Image width
        img_height: Image height
        crop: (left, top, width, height) crop rectangle

    Returns:
        True if crop is valid, False otherwise
    """
    left, top, width, height = crop
    if left < 0 or top < 0:
        return False
    if width <= 0 or height <= 0:
        return False
    if left + width > img_width:
        return False
    return not top + height > img_height


def load_image(path: str | os.PathLike[str]) -> Any:
    """Decode `path` fully into memory.

    The pixels are copied so the source file can be overwritten while the
    image is on screen.

    Raises:
        ImageOpError: If the file cannot be opened or decoded
    """
    pyvips = _get_pyvips_module()
    try:
        image = pyvips.Image.new_from_file(str(path))
        image = image.copy_memory()
    except pyvips.Error as e:
        _logger.error("Failed to open image %s: %s", path, e, exc_info=True)
        raise ImageOpError("open", path, e) from e
    _logger.debug("Loaded %s: %dx%d bands=%d format=%s", path, image.width, image.height, image.bands, image.format)
    return image


def crop_image(image: Any, box: CropBox) -> Any:
    """Return the `box` region of `image` as a new image.

    Raises:
        ValueError: If the box is empty or not inside the image
    """
    if not validate_crop_bounds(image.width, image.height, box.as_tuple()):
        raise ValueError(f"Crop bounds {box.as_tuple()} invalid for image size {image.width}x{image.height}")
    return image.crop(box.left, box.top, box.width, box.height)


def fit_dimensions(width: int, height: int, target_width: int, target_height: int) -> tuple[int, int]:
    """Largest size with the image's aspect ratio that fits in the target box."""
    ratio = min(target_width / width, target_height / height)
    return max(1, round(width * ratio)), max(1, round(height * ratio))


def _snap_size(image: Any, width: int, height: int) -> Any:
    # vips rounds the output size of resize(); trim or extend the last pixel row/column
    if image.width == width and image.height == height:
        return image
    if image.width >= width and image.height >= height:
        return image.crop(0, 0, width, height)
    return image.embed(0, 0, width, height, extend="copy")


def resize_image(image: Any, target_width: int, target_height: int, keep_aspect: bool) -> Any:
    """Resample `image` with the Lanczos-3 kernel.

    With `keep_aspect` the result fits inside the target box; otherwise it is
    stretched to exactly (target_width, target_height).
    """
    if target_width <= 0 or target_height <= 0:
        raise ValueError(f"Target size must be positive, got {target_width}x{target_height}")

    if keep_aspect:
        new_w, new_h = fit_dimensions(image.width, image.height, target_width, target_height)
    else:
        new_w, new_h = target_width, target_height

    hscale = new_w / image.width
    vscale = new_h / image.height
    _logger.debug("Resizing %dx%d -> %dx%d", image.width, image.height, new_w, new_h)

    if image.hasalpha():
        fmt = image.format
        resized = image.premultiply().resize(hscale, vscale=vscale, kernel=RESAMPLE_KERNEL)
        resized = resized.unpremultiply().cast(fmt)
    else:
        resized = image.resize(hscale, vscale=vscale, kernel=RESAMPLE_KERNEL)
    return _snap_size(resized, new_w, new_h)


def crop_and_resize(image: Any, box: CropBox, new_width: int, new_height: int) -> Any:
    """Crop to `box`, then fit the result into (new_width, new_height)."""
    return resize_image(crop_image(image, box), new_width, new_height, keep_aspect=True)


def output_format_for(path: str | os.PathLike[str]) -> str:
    return OUTPUT_FORMATS.get(Path(path).suffix.lower(), "png")


def resolve_save_path(path: str | os.PathLike[str]) -> Path:
    """Give an extension-less path one, guessed from the file name."""
    p = Path(path)
    if p.suffix:
        return p
    name = p.name.lower()
    if "webp" in name:
        return p.with_suffix(".webp")
    if "jpg" in name or "jpeg" in name:
        return p.with_suffix(".jpg")
    return p.with_suffix(".png")


def save_image(image: Any, path: str | os.PathLike[str], jpeg_quality: int = DEFAULT_JPEG_QUALITY) -> Path:
    """Encode `image` to `path`, picking the format from the extension.

    Returns:
        The path written

    Raises:
        ImageOpError: If encoding or writing fails
    """
    pyvips = _get_pyvips_module()
    out = Path(path)
    fmt = output_format_for(out)
    _logger.debug("Saving %dx%d image as %s: %s", image.width, image.height, fmt, out)
    try:
        if fmt == "jpeg":
            if image.hasalpha():
                image = image.flatten(background=[255, 255, 255])
            image.jpegsave(str(out), Q=int(jpeg_quality))
        elif fmt == "webp":
            image.webpsave(str(out), lossless=True)
        else:
            image.pngsave(str(out))
    except pyvips.Error as e:
        _logger.error("Error writing %s: %s", out, e, exc_info=True)
        raise ImageOpError("write", out, e) from e
    _logger.info("Image saved: %s", out)
    return out


def to_rgba_array(image: Any) -> np.ndarray:
    """Convert `image` to an (h, w, 4) uint8 sRGB array for display."""
    pyvips = _get_pyvips_module()
    with contextlib.suppress(pyvips.Error):
        image = image.colourspace("srgb")
    if not image.hasalpha():
        image = image.bandjoin(255)
    if image.bands > RGBA_BANDS:
        image = image.extract_band(0, n=RGBA_BANDS)
    if image.format != "uchar":
        image = image.cast("uchar")

    mem = image.write_to_memory()
    array = np.frombuffer(mem, dtype=np.uint8).reshape(image.height, image.width, image.bands)
    if array.shape[2] != RGBA_BANDS:
        raise RuntimeError(f"Unsupported band count after conversion: {array.shape[2]}")
    return array.copy()
