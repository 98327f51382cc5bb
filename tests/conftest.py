"""Pytest configuration.

Widget tests need a single `QApplication` for the whole session; it is created
as early as possible (before collection imports Qt modules) and shut down at
the end. Qt runs offscreen unless QT_QPA_PLATFORM is already set.

Test images are synthesized with pyvips so no binary fixtures live in the repo.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import pytest

_APP: Any | None = None


def pytest_configure(config) -> None:  # noqa: ARG001
    """Ensure a QApplication exists before collecting/running tests."""
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

    # Import lazily so non-Qt environments can still import this conftest.
    try:
        from PySide6.QtWidgets import QApplication
    except ImportError:
        return

    global _APP

    app = QApplication.instance()
    if app is None:
        # Keep a strong ref so it isn't GC'd mid-session.
        _APP = QApplication([])
    else:
        _APP = app


def pytest_sessionfinish(session, exitstatus) -> None:  # noqa: ARG001
    """Attempt a clean Qt shutdown to avoid lingering threads at interpreter exit."""

    try:
        from PySide6.QtWidgets import QApplication
    except ImportError:
        return

    app = QApplication.instance()
    if app is None:
        return

    app.quit()
    app.processEvents()


def gradient_image(width: int, height: int, alpha: bool = False):
    """Build a uchar RGB(A) image whose pixels depend on their position."""
    pyvips = pytest.importorskip("pyvips")
    xy = pyvips.Image.xyz(width, height)
    r = xy[0] % 256
    g = xy[1] % 256
    b = (xy[0] + xy[1] * 3) % 256
    image = r.bandjoin([g, b])
    if alpha:
        image = image.bandjoin((xy[0] * 7) % 256)
    return image.cast("uchar").copy(interpretation="srgb")


@pytest.fixture
def image_file(tmp_path: Path):
    """Factory writing a gradient PNG and returning its path."""

    def _make(width: int = 120, height: int = 80, name: str = "source.png", alpha: bool = False) -> Path:
        path = tmp_path / name
        gradient_image(width, height, alpha=alpha).write_to_file(str(path))
        return path

    return _make
