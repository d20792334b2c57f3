"""Border and status bar styles (Catppuccin Mocha palette)."""
from rich.style import Style

COLOR_FOCUSED = "#a6e3a1"  # green
COLOR_BLURRED = "#45475a"  # dark gray
COLOR_STATUS = "#6c7086"   # muted

FOCUSED = Style(color=COLOR_FOCUSED)
BLURRED = Style(color=COLOR_BLURRED)
STATUS = Style(color=COLOR_STATUS)
