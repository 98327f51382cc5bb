from PySide6.QtWidgets import QApplication

from image_snipper.styles import SnipColors, apply_theme, palette_for


def test_palette_for_unknown_theme_is_dark():
    assert palette_for("neon") == palette_for("dark")
    assert palette_for("light")["canvas"] == SnipColors.LIGHT_CANVAS


def test_apply_theme_fills_stylesheet_placeholders():
    app = QApplication.instance()
    old_sheet = app.styleSheet()
    old_palette = app.palette()
    try:
        apply_theme(app, "light", font_size=12)
        sheet = app.styleSheet()
        assert "{{" not in sheet
        assert SnipColors.LIGHT_CANVAS in sheet
        assert "16pt" in sheet  # heading is base size + 4
    finally:
        app.setStyleSheet(old_sheet)
        app.setPalette(old_palette)
