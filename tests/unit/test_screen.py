"""Tests for the in-memory screen buffer."""
from rich.style import Style

from planq.tui.screen import ScreenBuffer


def test_new_buffer_is_blank():
    buffer = ScreenBuffer(5, 2)

    assert buffer.row_text(0) == "     "
    assert buffer.cursor is None


def test_out_of_bounds_writes_are_dropped():
    buffer = ScreenBuffer(3, 2)

    buffer.set_cell(-1, 0, "x")
    buffer.set_cell(3, 0, "x")
    buffer.set_cell(0, 2, "x")
    buffer.set_cell(2, 1, "y")

    assert buffer.row_text(0) == "   "
    assert buffer.row_text(1) == "  y"


def test_negative_size_is_empty():
    buffer = ScreenBuffer(-4, -1)

    assert buffer.width == 0
    assert buffer.height == 0
    buffer.set_cell(0, 0, "x")


def test_to_strip_merges_runs():
    red = Style(color="red")
    buffer = ScreenBuffer(4, 1)
    buffer.set_cell(0, 0, "a", red)
    buffer.set_cell(1, 0, "b", red)
    buffer.set_cell(2, 0, "c")

    strip = buffer.to_strip(0)
    segments = list(strip)

    assert strip.text == "abc "
    assert segments[0].text == "ab"
    assert segments[0].style == red
    assert strip.cell_length == 4


def test_to_strip_skips_wide_glyph_tail():
    buffer = ScreenBuffer(3, 1)
    buffer.set_cell(0, 0, "中")
    buffer.set_cell(1, 0, "")

    strip = buffer.to_strip(0)

    assert strip.text == "中 "
    assert strip.cell_length == 3


def test_to_strip_out_of_range_is_blank():
    buffer = ScreenBuffer(4, 1)

    assert buffer.to_strip(5).text == "    "


def test_cursor_is_reversed():
    buffer = ScreenBuffer(3, 1)
    buffer.set_cell(1, 0, "x")
    buffer.set_cursor(1, 0)

    segments = list(buffer.to_strip(0))

    cursor_segment = next(s for s in segments if s.text == "x")
    assert cursor_segment.style.reverse is True
    assert not segments[0].style.reverse


def test_hidden_cursor():
    buffer = ScreenBuffer(3, 1)
    buffer.set_cursor(1, 0, visible=False)

    assert buffer.cursor is None


def test_cursor_outside_bounds_is_hidden():
    buffer = ScreenBuffer(3, 1)
    buffer.set_cursor(5, 0)

    assert buffer.cursor is None
