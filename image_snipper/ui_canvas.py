"""Preview canvas: draws the current image and turns left-drags into crop selections."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PySide6.QtCore import QPointF, QRectF, Qt, Signal
from PySide6.QtGui import QColor, QImage, QPainter, QPalette, QPen, QPixmap
from PySide6.QtWidgets import QSizePolicy, QStyle, QStyleOption, QWidget

from image_snipper import image_ops
from image_snipper.logger import get_logger
from image_snipper.ops.crop_controller import DragTracker, PreviewGeometry, Rect

if TYPE_CHECKING:
    from image_snipper.ops.session import SnipSession

_logger = get_logger("ui_canvas")

SELECTION_COLOR = QColor(255, 0, 0)
SELECTION_WIDTH = 2.0
PAN_BUTTONS = (Qt.MouseButton.RightButton, Qt.MouseButton.MiddleButton)


def _qrectf(rect: Rect) -> QRectF:
    return QRectF(rect.x, rect.y, rect.w, rect.h)


def _event_xy(event) -> tuple[float, float]:
    pos: QPointF = event.position()
    return float(pos.x()), float(pos.y())


def pixmap_from_image(image) -> QPixmap:
    """Upload a pyvips image as a QPixmap."""
    arr = image_ops.to_rgba_array(image)
    h, w, bands = arr.shape
    qimg = QImage(arr.data, w, h, w * bands, QImage.Format.Format_RGBA8888)
    # QImage borrows arr's buffer; copy before arr goes away
    return QPixmap.fromImage(qimg.copy())


class SnipCanvas(QWidget):
    """Central canvas.

    Left button: press inside the image, drag, release to select a crop region.
    Right/middle button: pan. Ctrl+wheel: zoom.
    """

    selection_finished = Signal(object, object)  # (Rect, PreviewGeometry)
    view_changed = Signal()

    def __init__(self, session: SnipSession, parent: QWidget | None = None):
        super().__init__(parent)
        self.setObjectName("snipCanvas")
        self._session = session
        self._pixmap: QPixmap | None = None
        self._tracker = DragTracker()
        self._pan_last: tuple[float, float] | None = None

        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        self.setMouseTracking(True)
        self.setCursor(Qt.CursorShape.CrossCursor)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setMinimumSize(320, 240)

    @property
    def tracker(self) -> DragTracker:
        return self._tracker

    def canvas_rect(self) -> Rect:
        return Rect(0.0, 0.0, float(self.width()), float(self.height()))

    def preview_geometry(self) -> PreviewGeometry | None:
        return self._session.preview_geometry(self.canvas_rect())

    def image_changed(self) -> None:
        """Re-upload the session image; any selection in progress is dropped."""
        self._tracker.reset()
        self._pan_last = None
        image = self._session.image
        self._pixmap = pixmap_from_image(image) if image is not None else None
        if self._pixmap is not None:
            _logger.debug("canvas pixmap %dx%d", self._pixmap.width(), self._pixmap.height())
        self.update()

    # ---- painting ----
    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        opt = QStyleOption()
        opt.initFrom(self)
        self.style().drawPrimitive(QStyle.PrimitiveElement.PE_Widget, opt, painter, self)

        preview = self.preview_geometry()
        if self._pixmap is None or preview is None:
            painter.setPen(self.palette().color(QPalette.ColorRole.PlaceholderText))
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "Load an image to start")
            painter.end()
            return

        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, True)
        painter.drawPixmap(_qrectf(preview.rect), self._pixmap, QRectF(self._pixmap.rect()))

        selection = self._tracker.selection()
        if selection is not None:
            pen = QPen(SELECTION_COLOR)
            pen.setWidthF(SELECTION_WIDTH)
            painter.setPen(pen)
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.drawRect(_qrectf(selection))
        painter.end()

    # ---- mouse ----
    def mousePressEvent(self, event) -> None:
        btn = event.button()
        x, y = _event_xy(event)
        if btn == Qt.MouseButton.LeftButton:
            preview = self.preview_geometry()
            if preview is not None and self._tracker.press(x, y, preview.rect):
                event.accept()
                self.update()
                return
        elif btn in PAN_BUTTONS and self._pixmap is not None:
            self._pan_last = (x, y)
            self.setCursor(Qt.CursorShape.ClosedHandCursor)
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event) -> None:
        x, y = _event_xy(event)
        if self._tracker.active:
            self._tracker.move(x, y)
            event.accept()
            self.update()
            return
        if self._pan_last is not None:
            dx, dy = x - self._pan_last[0], y - self._pan_last[1]
            self._pan_last = (x, y)
            self._session.pan_by(dx, dy)
            self.view_changed.emit()
            event.accept()
            self.update()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event) -> None:
        btn = event.button()
        if btn == Qt.MouseButton.LeftButton and self._tracker.active:
            rect = self._tracker.release()
            preview = self.preview_geometry()
            event.accept()
            self.update()
            if rect is not None and preview is not None:
                _logger.debug("selection released: %s", rect)
                self.selection_finished.emit(rect, preview)
            return
        if btn in PAN_BUTTONS and self._pan_last is not None:
            self._pan_last = None
            self.setCursor(Qt.CursorShape.CrossCursor)
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def wheelEvent(self, event) -> None:
        if self._pixmap is None or not (event.modifiers() & Qt.KeyboardModifier.ControlModifier):
            super().wheelEvent(event)
            return
        angle = event.angleDelta().y()
        if angle == 0:
            return
        if angle > 0:
            self._session.zoom_in()
        else:
            self._session.zoom_out()
        self.view_changed.emit()
        event.accept()
        self.update()
