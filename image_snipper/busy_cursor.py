"""Wait cursor for blocking image work on the GUI thread."""

import time
from contextlib import contextmanager

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QApplication

from image_snipper.logger import get_logger

_logger = get_logger("busy_cursor")


@contextmanager
def busy_cursor(label: str = ""):
    """Show the wait cursor while the block runs.

    Usage:
        with busy_cursor("load"):
            session.load(path)

    The cursor is restored even if the block raises.
    """
    started = time.perf_counter()
    try:
        QApplication.setOverrideCursor(Qt.CursorShape.WaitCursor)
        QApplication.processEvents()  # Show the cursor before blocking
        yield
    finally:
        QApplication.restoreOverrideCursor()
        if label:
            _logger.debug("%s took %.1f ms", label, (time.perf_counter() - started) * 1000.0)
