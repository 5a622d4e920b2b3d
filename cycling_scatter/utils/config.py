"""Configuration and constants for the race-time scatter chart."""

from pathlib import Path

# Project root: directory containing render_chart.py (two levels up from cycling_scatter/utils/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

# Data source: 35 fastest times up Alpe d'Huez
DATA_URL = (
    "https://raw.githubusercontent.com/freeCodeCamp/ProjectReferenceData/"
    "master/cyclist-data.json"
)
REQUEST_TIMEOUT_SEC = 30

# Exported charts (SVG, HTML, PNG)
DATA_DIR = _PROJECT_ROOT / "data"
FIGURES_DIR = DATA_DIR / "processed" / "figures"

# Drawing surface
WIDTH = 800
HEIGHT = 500
PADDING = 70
MARK_RADIUS = 6

TITLE = "Doping in Professional Bicycle Racing"
SUBTITLE = "35 Fastest times up Alpe d'Huez"
Y_AXIS_LABEL = "Time (mins)"

# Legend: insertion order is drawing order
LEGEND_DATA = {
    "dope": {
        "color": "#A56086",
        "description": "Riders with doping allegations",
    },
    "clean": {
        "color": "#2AC075",
        "description": "No doping allegations",
    },
}
LEGEND_X = 550
LEGEND_Y = 140
LEGEND_SWATCH_SIDE = 18
LEGEND_TEXT_MARGIN = 12
LEGEND_LINE_HEIGHT = 6

# Axes
X_TICK_PADDING = 9
Y_TICK_PADDING = 8
TICK_SIZE = 6

# Tooltip and guide lines (pointer interaction)
TOOLTIP_OFFSET_X = 15
TOOLTIP_OFFSET_Y = -30
TOOLTIP_OPACITY = 0.9
TOOLTIP_FADE_IN_MS = 100
TOOLTIP_FADE_OUT_MS = 300
GUIDE_LINE_GAP = 11
