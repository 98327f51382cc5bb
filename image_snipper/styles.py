from PySide6.QtGui import QColor, QFont, QPalette
from PySide6.QtWidgets import QApplication

from image_snipper.logger import get_logger

_logger = get_logger("styles")

# -----------------------------------------------------------------------------
# Palette
# -----------------------------------------------------------------------------


class SnipColors:
    # Dark Theme
    DARK_WINDOW = "#202020"
    DARK_SURFACE = "#2D2D2D"
    DARK_SURFACE_ALT = "#323232"
    DARK_BORDER = "#454545"
    DARK_TEXT = "#E0E0E0"
    DARK_TEXT_SEC = "#A0A0A0"
    DARK_ACCENT = "#4CC2FF"
    DARK_ACCENT_TEXT = "#000000"
    DARK_CANVAS = "#161616"

    # Light Theme
    LIGHT_WINDOW = "#F3F3F3"
    LIGHT_SURFACE = "#FFFFFF"
    LIGHT_SURFACE_ALT = "#FAFAFA"
    LIGHT_BORDER = "#E5E5E5"
    LIGHT_TEXT = "#1F1F1F"
    LIGHT_TEXT_SEC = "#5D5D5D"
    LIGHT_ACCENT = "#0067C0"
    LIGHT_ACCENT_TEXT = "#FFFFFF"
    LIGHT_CANVAS = "#DADADA"


THEMES = ("dark", "light")

# -----------------------------------------------------------------------------
# Stylesheet template
# -----------------------------------------------------------------------------

SNIPPER_QSS = """
    * {
        font-size: {{font_size}}pt;
    }

    QToolTip {
        color: {{text}};
        background-color: {{surface}};
        border: 1px solid {{border}};
        padding: 6px;
        border-radius: 4px;
    }

    /* Header: title + file name / dimensions */
    #snipHeader {
        background-color: {{window}};
        border-bottom: 1px solid {{border}};
    }
    #snipHeading {
        color: {{text}};
        font-size: {{heading_font_size}}pt;
        font-weight: 600;
    }
    #snipImageInfo {
        color: {{text_sec}};
    }

    /* Canvas */
    #snipCanvas {
        background-color: {{canvas}};
    }

    /* Bottom control dock */
    #snipDock {
        background-color: {{window}};
        border-top: 1px solid {{border}};
    }
    #snipDock QFrame[frameShape="4"] {
        color: {{border}};
    }
    #snipZoomLabel {
        color: {{text_sec}};
        min-width: 80px;
    }

    QPushButton {
        background-color: {{surface}};
        border: 1px solid {{border}};
        color: {{text}};
        padding: 6px 16px;
        border-radius: 4px;
        font-weight: 500;
    }
    QPushButton:hover {
        background-color: {{surface_alt}};
    }
    QPushButton:pressed {
        background-color: {{border}};
    }
    QPushButton:disabled {
        color: {{text_sec}};
    }

    QSpinBox {
        background-color: {{surface}};
        border: 1px solid {{border}};
        border-bottom: 2px solid {{border}};
        color: {{text}};
        padding: 4px 6px;
        border-radius: 4px;
        min-width: 80px;
        selection-background-color: {{accent}};
        selection-color: {{accent_text}};
    }
    QSpinBox:focus {
        border-bottom: 2px solid {{accent}};
    }

    QCheckBox {
        color: {{text}};
        spacing: 6px;
    }
"""


def _apply_style(app: QApplication, pal_def: dict, font_size: int = 10) -> None:
    """Apply palette and QSS based on definition dict."""
    app.setStyle("Fusion")

    palette = QPalette()
    c_window = QColor(pal_def["window"])
    c_surface = QColor(pal_def["surface"])
    c_text = QColor(pal_def["text"])
    c_accent = QColor(pal_def["accent"])
    c_disabled = QColor(pal_def["text_sec"])

    palette.setColor(QPalette.Window, c_window)
    palette.setColor(QPalette.WindowText, c_text)
    palette.setColor(QPalette.Base, c_surface)
    palette.setColor(QPalette.AlternateBase, QColor(pal_def["surface_alt"]))
    palette.setColor(QPalette.Text, c_text)
    palette.setColor(QPalette.Button, c_surface)
    palette.setColor(QPalette.ButtonText, c_text)
    palette.setColor(QPalette.Highlight, c_accent)
    palette.setColor(QPalette.HighlightedText, QColor(pal_def["accent_text"]))

    palette.setColor(QPalette.Disabled, QPalette.Text, c_disabled)
    palette.setColor(QPalette.Disabled, QPalette.ButtonText, c_disabled)
    palette.setColor(QPalette.Disabled, QPalette.WindowText, c_disabled)
    app.setPalette(palette)

    font = QFont()
    font.setStyleHint(QFont.SansSerif)
    font.setPointSize(font_size)
    app.setFont(font)

    qss = SNIPPER_QSS.replace("{{font_size}}", str(font_size))
    qss = qss.replace("{{heading_font_size}}", str(font_size + 4))
    for key, val in pal_def.items():
        qss = qss.replace(f"{{{{{key}}}}}", val)

    app.setStyleSheet(qss)


def palette_for(theme: str) -> dict[str, str]:
    if theme == "light":
        return {
            "window": SnipColors.LIGHT_WINDOW,
            "surface": SnipColors.LIGHT_SURFACE,
            "surface_alt": SnipColors.LIGHT_SURFACE_ALT,
            "border": SnipColors.LIGHT_BORDER,
            "text": SnipColors.LIGHT_TEXT,
            "text_sec": SnipColors.LIGHT_TEXT_SEC,
            "accent": SnipColors.LIGHT_ACCENT,
            "accent_text": SnipColors.LIGHT_ACCENT_TEXT,
            "canvas": SnipColors.LIGHT_CANVAS,
        }
    return {
        "window": SnipColors.DARK_WINDOW,
        "surface": SnipColors.DARK_SURFACE,
        "surface_alt": SnipColors.DARK_SURFACE_ALT,
        "border": SnipColors.DARK_BORDER,
        "text": SnipColors.DARK_TEXT,
        "text_sec": SnipColors.DARK_TEXT_SEC,
        "accent": SnipColors.DARK_ACCENT,
        "accent_text": SnipColors.DARK_ACCENT_TEXT,
        "canvas": SnipColors.DARK_CANVAS,
    }


def apply_theme(app: QApplication, theme: str = "dark", font_size: int = 10) -> None:
    """Apply a theme to the application.

    Args:
        app: QApplication instance
        theme: Theme name ("dark" or "light"); unknown names fall back to dark
        font_size: Base font size in points (default: 10)
    """
    if theme not in THEMES:
        _logger.warning("unknown theme %r, using dark", theme)
    _apply_style(app, palette_for(theme), font_size)
