"""Side-by-side rendering of two panes into one frame.

Layout (column offsets from the drawing origin)::

    0            left pane left border
    1..pw        left pane content (pw columns)
    pw+1         left pane right border
    pw+2         divider
    pw+3         right pane left border
    pw+4..2pw+3  right pane content (pw columns)
    2pw+4        right pane right border

Total width is 2*pw + 5. Rows are the top border, ph content rows, the
bottom border and a status bar.
"""
from typing import Optional, Sequence, Tuple

from rich.style import Style
from textual.geometry import Region

from . import styles

FOCUS_LABELS = ("LEFT", "RIGHT")


def pane_size(width: int, height: int) -> Tuple[int, int]:
    """Content width and height of each pane for a width x height terminal."""
    pw = (width - 5) // 2
    ph = height - 3  # top border + bottom border + status bar
    return pw, ph


def layout_valid(width: int, height: int) -> bool:
    pw, ph = pane_size(width, height)
    return pw > 0 and ph > 0


def content_regions(origin_x: int, origin_y: int, pw: int, ph: int) -> Tuple[Region, Region]:
    """Content rectangles of the left and right pane."""
    left = Region(origin_x + 1, origin_y + 1, pw, ph)
    right = Region(origin_x + pw + 4, origin_y + 1, pw, ph)
    return left, right


def cursor_offset(focused: int, x: int, y: int, pw: int) -> Tuple[int, int]:
    """Translate a pane-local cursor into composite coordinates."""
    if focused == 1:
        # left pane width + its 2 borders + divider + right pane's left border
        return x + pw + 4, y + 1
    return x + 1, y + 1


def _set_cell(target, x: int, y: int, text: str, style: Style) -> None:
    if not target.bounds.contains(x, y):
        return
    target.set_cell(x, y, text, style)


def status_text(focused: int, switch_label: str = "Ctrl+A Tab", quit_label: str = "Ctrl+A q") -> str:
    return f"  Focus: {FOCUS_LABELS[focused]}  │  {switch_label}: switch  │  {quit_label}: quit"


class DualPaneLayer:
    """Draws two emulators side by side with borders and a status bar."""

    def __init__(self, panes: Sequence, focused: int, width: int, height: int,
                 switch_label: str = "Ctrl+A Tab", quit_label: str = "Ctrl+A q"):
        self.panes = panes
        self.focused = focused
        self.width = width
        self.height = height
        self.switch_label = switch_label
        self.quit_label = quit_label

    def draw(self, target, region: Optional[Region] = None) -> None:
        """Draw the frame into target, starting at region's origin."""
        if region is None:
            region = target.bounds
        pw, ph = pane_size(self.width, self.height)
        if pw <= 0 or ph <= 0:
            return

        left_style = styles.FOCUSED if self.focused == 0 else styles.BLURRED
        right_style = styles.FOCUSED if self.focused == 1 else styles.BLURRED
        div_style = styles.BLURRED

        ox, oy = region.x, region.y

        l_border_l = 0
        l_content = 1
        l_border_r = l_content + pw
        div_col = l_border_r + 1
        r_border_l = div_col + 1
        r_content = r_border_l + 1
        r_border_r = r_content + pw

        def horizontal(y, left, right):
            _set_cell(target, ox + l_border_l, y, left, left_style)
            for i in range(pw):
                _set_cell(target, ox + l_content + i, y, "─", left_style)
            _set_cell(target, ox + l_border_r, y, right, left_style)
            _set_cell(target, ox + div_col, y, "│", div_style)
            _set_cell(target, ox + r_border_l, y, left, right_style)
            for i in range(pw):
                _set_cell(target, ox + r_content + i, y, "─", right_style)
            _set_cell(target, ox + r_border_r, y, right, right_style)

        horizontal(oy, "╭", "╮")

        for row in range(ph):
            y = oy + 1 + row
            _set_cell(target, ox + l_border_l, y, "│", left_style)
            _set_cell(target, ox + l_border_r, y, "│", left_style)
            _set_cell(target, ox + div_col, y, "│", div_style)
            _set_cell(target, ox + r_border_l, y, "│", right_style)
            _set_cell(target, ox + r_border_r, y, "│", right_style)

        left_area, right_area = content_regions(ox, oy, pw, ph)
        self.panes[0].emulator.draw(target, left_area)
        self.panes[1].emulator.draw(target, right_area)

        bottom = oy + 1 + ph
        horizontal(bottom, "╰", "╯")

        status_y = bottom + 1
        text = status_text(self.focused, self.switch_label, self.quit_label)
        for i, ch in enumerate(text):
            x = ox + i
            if x >= region.right:
                break
            _set_cell(target, x, status_y, ch, styles.STATUS)
