"""Thread-safe terminal emulator backed by pyte."""
import logging
import queue
import string
import threading
from functools import lru_cache
from typing import Optional, Tuple

import pyte
from rich.color import Color, ColorParseError
from rich.style import Style
from textual.geometry import Region

from .tui.keys import KeyPress, Mod

logger = logging.getLogger(__name__)

# pyte stores private modes shifted left by 5
DECCKM = 1 << 5

# pyte colour names that rich spells differently
_COLOR_ALIASES = {
    "brown": "yellow",
    "brightbrown": "bright_yellow",
}

_CURSOR_KEYS = {"up": "A", "down": "B", "right": "C", "left": "D", "home": "H", "end": "F"}

_TILDE_KEYS = {
    "insert": 2, "delete": 3, "pageup": 5, "pagedown": 6,
    "f5": 15, "f6": 17, "f7": 18, "f8": 19, "f9": 20, "f10": 21, "f11": 23, "f12": 24,
}

_SS3_KEYS = {"f1": "P", "f2": "Q", "f3": "R", "f4": "S"}

_PLAIN_KEYS = {
    "enter": b"\r",
    "tab": b"\t",
    "backspace": b"\x7f",
    "escape": b"\x1b",
    " ": b" ",
}

_CTRL_SYMBOLS = {" ": 0, "@": 0, "[": 27, "\\": 28, "]": 29, "^": 30, "_": 31, "?": 127}


def _convert_color(name: str) -> Optional[Color]:
    if not name or name == "default":
        return None
    name = _COLOR_ALIASES.get(name, name)
    if name.startswith("bright") and not name.startswith("bright_"):
        name = "bright_" + name[len("bright"):]
    elif len(name) == 6 and all(c in string.hexdigits for c in name):
        name = "#" + name
    try:
        return Color.parse(name)
    except ColorParseError:
        logger.debug(f"Unknown terminal colour {name!r}")
        return None


@lru_cache(maxsize=1024)
def char_style(fg: str, bg: str, bold: bool, italics: bool, underscore: bool,
               strikethrough: bool, reverse: bool, blink: bool) -> Style:
    """Convert pyte character attributes into a rich Style."""
    return Style(
        color=_convert_color(fg),
        bgcolor=_convert_color(bg),
        bold=bold or None,
        italic=italics or None,
        underline=underscore or None,
        strike=strikethrough or None,
        reverse=reverse or None,
        blink=blink or None,
    )


def encode_key(key: KeyPress, app_cursor: bool = False) -> bytes:
    """Translate a key press into the bytes a terminal application reads.

    Cursor and function keys use xterm modifier parameters
    (e.g. ctrl+up -> ESC [ 1 ; 5 A). Alt is sent as an ESC prefix.
    Unknown keys encode to b"".
    """
    code, mod = key.code, key.mod
    xterm_mod = 1 + int(mod)

    if code in _CURSOR_KEYS:
        final = _CURSOR_KEYS[code]
        if mod:
            return f"\x1b[1;{xterm_mod}{final}".encode()
        return f"\x1b{'O' if app_cursor else '['}{final}".encode()
    if code in _TILDE_KEYS:
        num = _TILDE_KEYS[code]
        if mod:
            return f"\x1b[{num};{xterm_mod}~".encode()
        return f"\x1b[{num}~".encode()
    if code in _SS3_KEYS:
        final = _SS3_KEYS[code]
        if mod:
            return f"\x1b[1;{xterm_mod}{final}".encode()
        return f"\x1bO{final}".encode()
    if code == "tab" and mod & Mod.SHIFT:
        return b"\x1b[Z"

    prefix = b"\x1b" if mod & Mod.ALT else b""

    if code in _PLAIN_KEYS and not mod & Mod.CTRL:
        return prefix + _PLAIN_KEYS[code]

    if len(code) == 1:
        if mod & Mod.CTRL:
            if code.isascii() and code.isalpha():
                return prefix + bytes([ord(code.lower()) - ord("a") + 1])
            if code in _CTRL_SYMBOLS:
                return prefix + bytes([_CTRL_SYMBOLS[code]])
            return b""
        return prefix + (key.text or code).encode("utf-8")

    return b""


class _ReportingScreen(pyte.Screen):
    """pyte screen that hands device reports back to its emulator."""

    def __init__(self, columns: int, lines: int, emulator: "Emulator"):
        super().__init__(columns, lines)
        self._emulator = emulator

    def write_process_input(self, data: str) -> None:
        self._emulator.queue_output(data.encode("utf-8"))


class Emulator:
    """A pyte screen guarded by a lock, with an outbound byte channel.

    Bytes from the child process go in through write(). Bytes the terminal
    wants to send back to the child (device status reports, encoded key
    presses) come out of read(), which blocks until data arrives or the
    emulator is closed.
    """

    def __init__(self, width: int, height: int):
        self._lock = threading.RLock()
        self._screen = _ReportingScreen(width, height, self)
        self._stream = pyte.ByteStream(self._screen)
        self._outbound: "queue.Queue[Optional[bytes]]" = queue.Queue()
        self._closed = False

    @property
    def size(self) -> Tuple[int, int]:
        with self._lock:
            return self._screen.columns, self._screen.lines

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, data: bytes) -> None:
        """Feed output of the child process into the screen."""
        with self._lock:
            if self._closed:
                return
            self._stream.feed(data)

    def queue_output(self, data: bytes) -> None:
        if data and not self._closed:
            self._outbound.put(data)

    def read(self, timeout: Optional[float] = None) -> bytes:
        """Next chunk of outbound bytes; b"" once closed.

        Raises:
            queue.Empty: If timeout elapses with nothing to read
        """
        data = self._outbound.get(timeout=timeout)
        if data is None:
            # Keep the sentinel for any other reader
            self._outbound.put(None)
            return b""
        return data

    def send_key(self, key: KeyPress) -> None:
        """Queue the byte encoding of a key press."""
        with self._lock:
            app_cursor = DECCKM in self._screen.mode
        self.queue_output(encode_key(key, app_cursor))

    def resize(self, width: int, height: int) -> None:
        with self._lock:
            self._screen.resize(lines=height, columns=width)

    def cursor_position(self) -> Tuple[int, int]:
        """Cursor position in local coordinates, clamped into the grid."""
        with self._lock:
            cursor = self._screen.cursor
            x = min(max(cursor.x, 0), self._screen.columns - 1)
            y = min(max(cursor.y, 0), self._screen.lines - 1)
            return x, y

    @property
    def cursor_visible(self) -> bool:
        with self._lock:
            return not self._screen.cursor.hidden

    def display(self) -> list:
        """Plain text of every row."""
        with self._lock:
            return list(self._screen.display)

    def draw(self, target, region: Region) -> None:
        """Render the grid into region of a screen buffer."""
        with self._lock:
            buffer = self._screen.buffer
            rows = min(region.height, self._screen.lines)
            cols = min(region.width, self._screen.columns)
            for y in range(rows):
                line = buffer[y]
                for x in range(cols):
                    char = line[x]
                    style = char_style(char.fg, char.bg, char.bold, char.italics,
                                       char.underscore, char.strikethrough,
                                       char.reverse, char.blink)
                    target.set_cell(region.x + x, region.y + y, char.data, style)

    def close(self) -> None:
        """Stop accepting input and wake up readers."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._outbound.put(None)
