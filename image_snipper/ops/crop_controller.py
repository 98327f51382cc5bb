from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True, slots=True)
class Rect:
    """Screen-space rect in (x, y, w, h) form."""

    x: float
    y: float
    w: float
    h: float

    @property
    def x2(self) -> float:
        return self.x + self.w

    @property
    def y2(self) -> float:
        return self.y + self.h

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.w / 2.0, self.y + self.h / 2.0

    @classmethod
    def from_points(cls, a: tuple[float, float], b: tuple[float, float]) -> Rect:
        """Bounding box of two corner points, in any order."""
        x1, x2 = sorted((float(a[0]), float(b[0])))
        y1, y2 = sorted((float(a[1]), float(b[1])))
        return cls(x1, y1, x2 - x1, y2 - y1)

    @classmethod
    def from_center_size(cls, center: tuple[float, float], w: float, h: float) -> Rect:
        return cls(center[0] - w / 2.0, center[1] - h / 2.0, w, h)

    def normalized(self) -> Rect:
        return Rect.from_points((self.x, self.y), (self.x2, self.y2))

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px <= self.x2 and self.y <= py <= self.y2

    def clamp_point(self, px: float, py: float) -> tuple[float, float]:
        return _clamp(px, self.x, self.x2), _clamp(py, self.y, self.y2)


@dataclass(frozen=True, slots=True)
class CropBox:
    """Crop region in source-image pixels."""

    left: int
    top: int
    width: int
    height: int

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def as_tuple(self) -> tuple[int, int, int, int]:
        return self.left, self.top, self.width, self.height


@dataclass(frozen=True, slots=True)
class PreviewGeometry:
    """Where the image is drawn on the canvas and at which scale.

    `scale` is the preview scale: fit-to-bounds factor times zoom.
    """

    rect: Rect
    scale: float
    image_width: int
    image_height: int

    def to_image(self, px: float, py: float) -> tuple[float, float]:
        return (px - self.rect.x) / self.scale, (py - self.rect.y) / self.scale


def _clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def fit_scale(img_w: int, img_h: int, max_w: float, max_h: float) -> float:
    """Scale that fits the image into (max_w, max_h) without upscaling."""
    if img_w <= 0 or img_h <= 0:
        return 1.0
    return min(max_w / img_w, max_h / img_h, 1.0)


def compute_preview(
    canvas: Rect,
    img_w: int,
    img_h: int,
    *,
    zoom: float,
    offset: tuple[float, float],
    max_preview: tuple[float, float],
) -> PreviewGeometry:
    """Place the image centered on the canvas, shifted by the pan offset."""
    scale = fit_scale(img_w, img_h, max_preview[0], max_preview[1]) * float(zoom)
    cx, cy = canvas.center
    rect = Rect.from_center_size((cx + offset[0], cy + offset[1]), img_w * scale, img_h * scale)
    return PreviewGeometry(rect=rect, scale=scale, image_width=img_w, image_height=img_h)


def clamp_crop_box(x: float, y: float, w: float, h: float, img_w: int, img_h: int) -> CropBox:
    """Truncate an image-space rect to whole pixels inside the image.

    The origin is clamped to [0, img_w) / [0, img_h); the size is kept and only
    capped so the box never runs past the image from that origin. An origin at
    or beyond the right/bottom edge gives a zero-sized box.
    """
    if w < 0:
        x, w = x + w, -w
    if h < 0:
        y, h = y + h, -h

    left = int(max(0.0, x))
    top = int(max(0.0, y))
    width = int(w)
    height = int(h)

    width = max(0, min(width, img_w - left))
    height = max(0, min(height, img_h - top))
    left = min(left, max(0, img_w - 1))
    top = min(top, max(0, img_h - 1))
    return CropBox(left, top, width, height)


def screen_rect_to_crop_box(rect: Rect, preview: PreviewGeometry) -> CropBox:
    """Map a selection in canvas coordinates onto source-image pixels."""
    r = rect.normalized()
    if preview.scale <= 0:
        return CropBox(0, 0, 0, 0)
    ix, iy = preview.to_image(r.x, r.y)
    return clamp_crop_box(
        ix,
        iy,
        r.w / preview.scale,
        r.h / preview.scale,
        preview.image_width,
        preview.image_height,
    )


class DragPhase(Enum):
    IDLE = "idle"
    ANCHORED = "anchored"
    DRAGGING = "dragging"


class DragTracker:
    """Primary-button drag state: IDLE -> ANCHORED -> DRAGGING -> IDLE.

    Points are canvas coordinates. A press only anchors inside `bounds`; the live
    endpoint is kept inside the same bounds while dragging.
    """

    def __init__(self) -> None:
        self.phase = DragPhase.IDLE
        self.anchor: tuple[float, float] | None = None
        self.endpoint: tuple[float, float] | None = None
        self._bounds: Rect | None = None

    @property
    def active(self) -> bool:
        return self.phase is not DragPhase.IDLE

    def press(self, px: float, py: float, bounds: Rect) -> bool:
        if not bounds.contains(px, py):
            return False
        self._bounds = bounds
        self.anchor = (float(px), float(py))
        self.endpoint = self.anchor
        self.phase = DragPhase.ANCHORED
        return True

    def move(self, px: float, py: float) -> None:
        if self.phase is DragPhase.IDLE or self._bounds is None:
            return
        self.endpoint = self._bounds.clamp_point(float(px), float(py))
        self.phase = DragPhase.DRAGGING

    def selection(self) -> Rect | None:
        if self.anchor is None or self.endpoint is None:
            return None
        return Rect.from_points(self.anchor, self.endpoint)

    def release(self) -> Rect | None:
        """Finish the drag and return the selection (possibly zero-sized)."""
        rect = self.selection() if self.active else None
        self.reset()
        return rect

    def reset(self) -> None:
        self.phase = DragPhase.IDLE
        self.anchor = None
        self.endpoint = None
        self._bounds = None
