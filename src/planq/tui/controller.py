"""State machine driving the dual-pane session."""
import logging
import threading
from enum import Enum
from typing import Callable, List, Optional

from ..pane import Pane, PaneError, ResizeError
from . import compositor
from .keys import KeyPress, parse_chord

logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL = 0.033  # ~30 Hz


class State(Enum):
    UNINITIALIZED = "uninitialized"
    RUNNING = "running"
    TERMINATED = "terminated"


class SessionController:
    """Owns both panes, the focus index and the meta-prefix state.

    The host feeds it resize(), key() and tick() from a single event loop
    and calls cleanup() on shutdown. on_quit is called exactly once when the
    session ends, whichever way it ends.
    """

    def __init__(self, left_command: List[str], right_command: List[str],
                 on_quit: Optional[Callable[[], None]] = None,
                 prefix_key: str = "ctrl+a", switch_key: str = "tab", quit_key: str = "q",
                 pane_factory: Callable[..., Pane] = Pane, **pane_kwargs):
        self.commands = (list(left_command), list(right_command))
        self.on_quit = on_quit
        self.prefix = parse_chord(prefix_key)
        self.switch = parse_chord(switch_key)
        self.quit = parse_chord(quit_key)
        self._pane_factory = pane_factory
        self._pane_kwargs = pane_kwargs

        self.panes: List[Pane] = []
        self.focused = 0
        self.meta_active = False
        self.width = 0
        self.height = 0
        self.state = State.UNINITIALIZED
        self.error: Optional[Exception] = None

        self._cleanup_lock = threading.Lock()
        self._cleanup_done = False
        self._cleanup_result: Optional[OSError] = None
        self._quit_signaled = False

    @property
    def started(self) -> bool:
        return self.state is State.RUNNING

    def resize(self, width: int, height: int) -> None:
        """Handle a terminal size change."""
        if self.state is State.TERMINATED:
            return
        self.width = width
        self.height = height

        pw, ph = compositor.pane_size(width, height)
        if pw <= 0 or ph <= 0:
            logger.debug(f"Terminal too small for panes: {width}x{height}")
            return

        if self.state is State.UNINITIALIZED:
            self._start(pw, ph)
            return

        for index, pane in enumerate(self.panes):
            try:
                pane.resize(pw, ph)
            except ResizeError as e:
                logger.warning(f"Pane {index} resize to {pw}x{ph} failed: {e}")

    def _start(self, pw: int, ph: int) -> None:
        panes = []
        try:
            for command in self.commands:
                panes.append(self._pane_factory(pw, ph, command, **self._pane_kwargs))
        except PaneError as e:
            logger.error(f"Failed to start panes: {e}")
            for pane in panes:
                pane.close()
            self.error = e
            self.state = State.TERMINATED
            self._signal_quit()
            return

        self.panes = panes
        self.state = State.RUNNING
        logger.info(f"Session started with panes of {pw}x{ph}")

    def tick(self) -> None:
        """Periodic check: end the session once both processes are gone."""
        if self.state is not State.RUNNING:
            return
        if all(pane.exited for pane in self.panes):
            logger.info("Both pane processes exited")
            self.cleanup()
            self._signal_quit()

    def key(self, key: KeyPress) -> None:
        """Route a key press: meta commands or the focused pane."""
        if self.state is not State.RUNNING:
            return

        if self.meta_active:
            self.meta_active = False
            if key.matches(self.switch):
                self.focused = 1 - self.focused
                logger.debug(f"Focus switched to pane {self.focused}")
            elif key.matches(self.quit):
                logger.info("Quit requested")
                self.cleanup()
                self._signal_quit()
            elif key.matches(self.prefix):
                self._send_key(self.prefix)
            return

        if key.matches(self.prefix):
            self.meta_active = True
            return

        self._send_key(key)

    def _send_key(self, key: KeyPress) -> None:
        pane = self.panes[self.focused]
        if not pane.exited:
            pane.send_key(key)

    def draw(self, target) -> None:
        """Draw the current frame and cursor into a screen buffer."""
        if self.state is State.TERMINATED:
            return
        if self.state is State.UNINITIALIZED:
            message = "Waiting for terminal size..."
            for i, ch in enumerate(message):
                target.set_cell(i, 0, ch)
            return

        layer = compositor.DualPaneLayer(
            self.panes, self.focused, self.width, self.height,
            switch_label=f"{self.prefix.label} {self.switch.label}",
            quit_label=f"{self.prefix.label} {self.quit.label}",
        )
        layer.draw(target)

        emulator = self.panes[self.focused].emulator
        x, y = emulator.cursor_position()
        pw, _ = compositor.pane_size(self.width, self.height)
        cx, cy = compositor.cursor_offset(self.focused, x, y, pw)
        target.set_cursor(cx, cy, emulator.cursor_visible)

    def cleanup(self) -> Optional[OSError]:
        """Close both panes once. Returns the first close error, if any."""
        with self._cleanup_lock:
            if self._cleanup_done:
                return self._cleanup_result
            self._cleanup_done = True

            first_error = None
            for pane in self.panes:
                err = pane.close()
                if err is not None and first_error is None:
                    first_error = err
            if first_error is not None:
                logger.warning(f"Error while closing panes: {first_error}")
            self._cleanup_result = first_error
            self.state = State.TERMINATED
            return first_error

    def _signal_quit(self) -> None:
        if self._quit_signaled:
            return
        self._quit_signaled = True
        if self.on_quit is not None:
            self.on_quit()
