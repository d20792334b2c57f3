"""In-memory screen buffer the compositor draws frames into."""
from dataclasses import dataclass
from typing import List, Optional

from rich.segment import Segment
from rich.style import Style
from textual.geometry import Offset, Region
from textual.strip import Strip

_BLANK = Style()
_CURSOR = Style(reverse=True)


@dataclass
class Cell:
    """One character cell. An empty text marks the tail of a wide glyph."""
    text: str = " "
    style: Style = _BLANK


class ScreenBuffer:
    """A width x height grid of styled cells plus a cursor."""

    def __init__(self, width: int, height: int):
        self.width = max(0, width)
        self.height = max(0, height)
        self._rows: List[List[Cell]] = [
            [Cell() for _ in range(self.width)] for _ in range(self.height)
        ]
        self.cursor: Optional[Offset] = None

    @property
    def bounds(self) -> Region:
        """The drawable area."""
        return Region(0, 0, self.width, self.height)

    def set_cell(self, x: int, y: int, text: str, style: Optional[Style] = None) -> None:
        """Write a cell; writes outside the bounds are dropped."""
        if not self.bounds.contains(x, y):
            return
        self._rows[y][x] = Cell(text, style or _BLANK)

    def get_cell(self, x: int, y: int) -> Cell:
        return self._rows[y][x]

    def set_cursor(self, x: int, y: int, visible: bool = True) -> None:
        """Place the cursor, or hide it."""
        self.cursor = Offset(x, y) if visible and self.bounds.contains(x, y) else None

    def row_text(self, y: int) -> str:
        return "".join(cell.text for cell in self._rows[y])

    def to_strip(self, y: int) -> Strip:
        """Render row y as a Textual strip, merging runs of equal style."""
        if not 0 <= y < self.height:
            return Strip.blank(self.width)

        segments = []
        run_text: List[str] = []
        run_style: Optional[Style] = None
        for x, cell in enumerate(self._rows[y]):
            if not cell.text:
                continue
            style = cell.style
            if self.cursor is not None and self.cursor == (x, y):
                style = style + _CURSOR
            if style != run_style and run_text:
                segments.append(Segment("".join(run_text), run_style))
                run_text = []
            run_style = style
            run_text.append(cell.text)
        if run_text:
            segments.append(Segment("".join(run_text), run_style))
        return Strip(segments, self.width)
