"""
Theme definitions for the problem viewer GUI.
"""


class Colors:
    # Primary Colors
    PRIMARY_BLUE = "#0364B8"
    PRIMARY_BLUE_HOVER = "#0A2767"

    # Backgrounds
    BACKGROUND = "#f5f5f5"
    SURFACE = "#ffffff"
    HOVER = "#f0f0f0"
    DISABLED_BG = "#e0e0e0"

    # Text
    TEXT_PRIMARY = "#1f1f1f"
    TEXT_SECONDARY = "#666666"
    TEXT_ON_PRIMARY = "#ffffff"

    # Borders
    BORDER = "#e0e0e0"
    BORDER_FOCUS = "#28A8EA"

    # Status
    ERROR = "#d32f2f"
    SUCCESS = "#388e3c"
    WARNING = "#f57c00"
    INFO = "#1976d2"

    # Difficulty bands (average badge)
    BAND_LOW = "#388e3c"
    BAND_MID = "#f57c00"
    BAND_HIGH = "#d32f2f"
    BAND_NONE = "#757575"


class Fonts:
    UI_FONT = "-apple-system, 'SF Pro Text', 'Segoe UI', 'Hiragino Sans', 'Yu Gothic', sans-serif"
    MONO_FONT = "Consolas, Monaco, Menlo, 'Courier New', monospace"

    H2 = "15pt"
    BODY = "13pt"
    SMALL = "11pt"
    CONSOLE = "12pt"


BAND_COLORS = {
    "low": Colors.BAND_LOW,
    "mid": Colors.BAND_MID,
    "high": Colors.BAND_HIGH,
    None: Colors.BAND_NONE,
}


def band_color(band):
    return BAND_COLORS.get(band, Colors.BAND_NONE)


GLOBAL_STYLESHEET = f"""
    QMainWindow {{
        background-color: {Colors.BACKGROUND};
    }}
    QLineEdit {{
        background-color: {Colors.SURFACE};
        border: 1px solid {Colors.BORDER};
        border-radius: 6px;
        padding: 6px 8px;
        font-size: {Fonts.BODY};
    }}
    QLineEdit:focus {{
        border: 1px solid {Colors.BORDER_FOCUS};
    }}
    QPushButton {{
        background-color: {Colors.SURFACE};
        border: 1px solid {Colors.BORDER};
        border-radius: 6px;
        padding: 5px 12px;
    }}
    QPushButton:hover {{
        background-color: {Colors.HOVER};
    }}
    QPushButton:disabled {{
        background-color: {Colors.DISABLED_BG};
        color: {Colors.TEXT_SECONDARY};
    }}
    QPushButton[selected="true"] {{
        background-color: {Colors.PRIMARY_BLUE};
        color: {Colors.TEXT_ON_PRIMARY};
    }}
    QFrame#ProblemCard {{
        background-color: {Colors.SURFACE};
        border: 1px solid {Colors.BORDER};
        border-radius: 10px;
    }}
    QLabel#Chip {{
        background-color: {Colors.HOVER};
        color: {Colors.TEXT_SECONDARY};
        border-radius: 8px;
        padding: 2px 8px;
        font-size: {Fonts.SMALL};
    }}
    QLabel#NoteBanner {{
        background-color: #fff3e0;
        border: 1px solid {Colors.WARNING};
        border-radius: 6px;
        padding: 8px;
    }}
"""

QNUM_STYLE = (
    f"span.qnum {{ font-weight: bold; color: {Colors.PRIMARY_BLUE}; }}"
)
