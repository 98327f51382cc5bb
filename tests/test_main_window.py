from __future__ import annotations

import os
from pathlib import Path

import pytest

pytest.importorskip("pyvips")

from PySide6.QtWidgets import QApplication, QMessageBox  # noqa: E402

from image_snipper import file_dialogs, image_ops, main  # noqa: E402
from image_snipper.ops.crop_controller import Rect  # noqa: E402
from image_snipper.ops.session import MAX_TARGET_SIZE  # noqa: E402


@pytest.fixture
def window(qtbot, tmp_path: Path):
    w = main.SnipperWindow(settings_path=str(tmp_path / "settings.json"))
    qtbot.addWidget(w)
    return w


@pytest.fixture
def fatal_calls(monkeypatch):
    """Record fatal-error dialogs and exit requests instead of showing/exiting."""
    calls: dict[str, list] = {"critical": [], "exit": []}
    monkeypatch.setattr(QMessageBox, "critical", lambda *a, **k: calls["critical"].append(a))
    monkeypatch.setattr(QApplication, "exit", lambda code=0: calls["exit"].append(code))
    return calls


def test_initial_state_without_image(window):
    assert window.info_label.text() == "No image loaded"
    assert window.zoom_label.text() == "Zoom: 100%"
    assert window.width_spin.value() == 256
    assert window.height_spin.value() == 256
    assert window.aspect_check.isChecked()
    assert not window.resize_btn.isEnabled()
    assert not window.save_as_btn.isEnabled()
    assert not window.overwrite_btn.isEnabled()


def test_load_image_updates_controls(window, image_file):
    path = image_file(120, 80)
    window.load_image(str(path))

    assert window.info_label.text() == "source.png - 120x80"
    assert (window.width_spin.value(), window.height_spin.value()) == (120, 80)
    assert window.resize_btn.isEnabled()
    assert window.overwrite_btn.isEnabled()


def test_width_edit_follows_aspect_lock(window, image_file):
    window.load_image(str(image_file(120, 80)))

    window.width_spin.setValue(60)
    assert window.height_spin.value() == 40

    window.aspect_check.setChecked(False)
    window.width_spin.setValue(90)
    assert window.height_spin.value() == 40


def test_height_edit_follows_aspect_lock(window, image_file):
    window.load_image(str(image_file(120, 80)))
    window.height_spin.setValue(20)
    assert window.width_spin.value() == 30


def test_spin_boxes_match_session_for_tall_image(window, image_file):
    window.load_image(str(image_file(2, 5000, name="tall.png")))

    window.width_spin.setValue(100)

    assert window.session.target_height == window.height_spin.value() == MAX_TARGET_SIZE
    assert window.session.target_width == window.width_spin.value() == 100


def test_resize_button_applies_targets(window, image_file):
    window.load_image(str(image_file(120, 80)))
    window.width_spin.setValue(60)
    window.zoom_in()

    window.resize_btn.click()

    assert window.session.image_size == (60, 40)
    assert window.info_label.text() == "source.png - 60x40"
    assert window.zoom_label.text() == "Zoom: 100%"


def test_zoom_buttons_update_label(window):
    window.zoom_in()
    assert window.zoom_label.text() == "Zoom: 110%"
    window.zoom_out()
    assert window.zoom_label.text() == "Zoom: 100%"
    window.zoom_out()
    assert window.zoom_label.text() == "Zoom: 91%"
    window.reset_zoom()
    assert window.zoom_label.text() == "Zoom: 100%"


def test_canvas_selection_crops(window, image_file):
    window.load_image(str(image_file(120, 80)))
    preview = window.session.preview_geometry(Rect(0, 0, 1000, 1000))

    window.canvas.selection_finished.emit(Rect(450, 470, 25, 15), preview)

    assert window.session.image_size == (25, 15)
    assert window.info_label.text() == "source.png - 25x15"
    assert (window.width_spin.value(), window.height_spin.value()) == (25, 15)


def test_selection_outside_image_is_ignored(window, image_file):
    window.load_image(str(image_file(120, 80)))
    preview = window.session.preview_geometry(Rect(0, 0, 1000, 1000))

    window.canvas.selection_finished.emit(Rect(560, 470, 20, 20), preview)

    assert window.session.image_size == (120, 80)


def test_reload_restores_original(window, image_file):
    window.load_image(str(image_file(120, 80)))
    preview = window.session.preview_geometry(Rect(0, 0, 1000, 1000))
    window.canvas.selection_finished.emit(Rect(450, 470, 25, 15), preview)

    window.reload_btn.click()

    assert window.session.image_size == (120, 80)


def test_save_as_uses_dialog_path(window, image_file, tmp_path, monkeypatch):
    window.load_image(str(image_file(120, 80)))
    target = tmp_path / "export_jpeg"
    monkeypatch.setattr(file_dialogs, "ask_save_image", lambda *a, **k: str(target))

    window.save_as()

    written = tmp_path / "export_jpeg.jpg"
    assert written.read_bytes()[:2] == b"\xff\xd8"
    assert window.session.save_as_path == str(written)


def test_save_as_cancelled_writes_nothing(window, image_file, tmp_path, monkeypatch):
    window.load_image(str(image_file(120, 80)))
    monkeypatch.setattr(file_dialogs, "ask_save_image", lambda *a, **k: None)
    window.save_as()
    assert window.session.save_as_path == "output.png"


def test_overwrite_writes_source(window, image_file):
    path = image_file(120, 80)
    window.load_image(str(path))
    window.width_spin.setValue(30)
    window.resize_current_image()

    window.overwrite_btn.click()

    again = image_ops.load_image(path)
    assert (again.width, again.height) == (30, 20)


def test_load_failure_is_fatal(window, tmp_path, fatal_calls):
    window.load_image(str(tmp_path / "missing.png"))

    assert window.aborted
    assert fatal_calls["exit"] == [main.EXIT_FATAL]
    assert len(fatal_calls["critical"]) == 1
    assert window.session.image is None


def test_save_failure_is_fatal(window, image_file, tmp_path, monkeypatch, fatal_calls):
    window.load_image(str(image_file(120, 80)))
    monkeypatch.setattr(file_dialogs, "ask_save_image", lambda *a, **k: str(tmp_path / "no" / "dir" / "x.png"))

    window.save_as()

    assert window.aborted
    assert fatal_calls["exit"] == [main.EXIT_FATAL]


def test_load_dialog_cancel_keeps_state(window, monkeypatch):
    monkeypatch.setattr(file_dialogs, "ask_open_image", lambda *a, **k: None)
    window.load_image_dialog()
    assert window.session.image is None
    assert not window.aborted


def test_window_reads_preferences(qtbot, tmp_path):
    settings_path = tmp_path / "settings.json"
    settings_path.write_text('{"keep_aspect": false, "default_target_width": 64, "zoom_step": 2.0}', encoding="utf-8")

    w = main.SnipperWindow(settings_path=str(settings_path))
    qtbot.addWidget(w)

    assert not w.aspect_check.isChecked()
    assert w.width_spin.value() == 64
    w.zoom_in()
    assert w.zoom_label.text() == "Zoom: 200%"


def test_cli_logging_options_are_stripped(monkeypatch):
    monkeypatch.setenv("IMAGE_SNIPPER_LOG_LEVEL", "")
    monkeypatch.setenv("IMAGE_SNIPPER_LOG_CATS", "")

    argv = main._apply_cli_logging_options(["prog", "--log-level", "debug", "--log-cats", "session", "shot.png"])

    assert argv == ["prog", "shot.png"]
    assert os.environ["IMAGE_SNIPPER_LOG_LEVEL"] == "debug"
    assert os.environ["IMAGE_SNIPPER_LOG_CATS"] == "session"


def test_default_directory_prefers_last_open_dir(tmp_path):
    from image_snipper.settings_manager import SettingsManager

    sm = SettingsManager(str(tmp_path / "settings.json"))
    folder = tmp_path / "shots"
    folder.mkdir()
    sm.set("last_open_dir", str(folder))

    assert file_dialogs.default_directory(sm) == str(folder.resolve())
    assert Path(file_dialogs.default_directory(None)).is_dir()


def test_open_dialog_remembers_directory(tmp_path, monkeypatch):
    from PySide6.QtWidgets import QFileDialog

    from image_snipper.settings_manager import SettingsManager

    sm = SettingsManager(str(tmp_path / "settings.json"))
    picked = tmp_path / "pics" / "a.png"
    picked.parent.mkdir()
    picked.write_bytes(b"x")
    monkeypatch.setattr(QFileDialog, "getOpenFileName", lambda *a, **k: (str(picked), file_dialogs.OPEN_FILTER))

    assert file_dialogs.ask_open_image(None, sm) == str(picked)
    assert sm.last_open_dir == str(picked.parent.resolve())
