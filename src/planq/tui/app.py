"""Textual host for the dual-pane session."""
import logging
import shlex
from pathlib import Path
from typing import List, Optional

from textual import events
from textual.app import App, ComposeResult
from textual.strip import Strip
from textual.widget import Widget

from ..config import Config, get_config
from .controller import DEFAULT_TICK_INTERVAL, SessionController
from .keys import from_textual
from .screen import ScreenBuffer

logger = logging.getLogger(__name__)


def setup_client_logging(config: Optional[Config] = None):
    """Set up client-side logging.

    A TUI owns the terminal, so logs go to a file or nowhere.
    """
    try:
        config = config or get_config()
        log_level = config.logging.level.upper()
        log_file = config.logging.log_file

        handlers = []
        if log_file:
            log_path = Path(log_file).expanduser()
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_path))
        else:
            # No file configured: stay silent rather than corrupt the display
            handlers.append(logging.NullHandler())

        logging.basicConfig(
            level=getattr(logging, log_level, logging.INFO),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=handlers,
            force=True
        )

        logger.info("Client logging initialized")

    except Exception:
        logging.basicConfig(handlers=[logging.NullHandler()], force=True)
        logger.exception("Failed to setup client logging, using defaults")


class DualPaneView(Widget, can_focus=True):
    """Paints the controller's latest frame."""

    DEFAULT_CSS = """
    DualPaneView {
        width: 100%;
        height: 100%;
    }
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.buffer = ScreenBuffer(0, 0)

    def update_buffer(self, buffer: ScreenBuffer) -> None:
        self.buffer = buffer
        self.refresh()

    def render_line(self, y: int) -> Strip:
        strip = self.buffer.to_strip(y)
        return strip.crop_extend(0, self.size.width, None)

    async def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        self.app.forward_key(event)


class SplitApp(App, inherit_bindings=False):
    """Two commands side by side, driven by a SessionController.

    App bindings are not inherited: every chord, ctrl+q and ctrl+c included,
    belongs to the panes.
    """

    ENABLE_COMMAND_PALETTE = False

    def __init__(self, controller: SessionController, tick_interval: float = DEFAULT_TICK_INTERVAL, **kwargs):
        super().__init__(**kwargs)
        self.controller = controller
        self.controller.on_quit = self.exit
        self.tick_interval = tick_interval
        self.pane_view: Optional[DualPaneView] = None

    def compose(self) -> ComposeResult:
        self.pane_view = DualPaneView()
        yield self.pane_view

    def on_mount(self) -> None:
        self.pane_view.focus()
        self.set_interval(self.tick_interval, self.check_panes)
        self.controller.resize(self.size.width, self.size.height)
        self.redraw()

    def on_resize(self, event: events.Resize) -> None:
        self.controller.resize(event.size.width, event.size.height)
        self.redraw()

    def forward_key(self, event: events.Key) -> None:
        self.controller.key(from_textual(event.key, event.character))
        self.redraw()

    def check_panes(self) -> None:
        self.controller.tick()
        self.redraw()

    def on_unmount(self) -> None:
        self.controller.cleanup()

    def redraw(self) -> None:
        if self.pane_view is None:
            return
        buffer = ScreenBuffer(self.size.width, self.size.height)
        self.controller.draw(buffer)
        self.pane_view.update_buffer(buffer)


def parse_command(command: str) -> List[str]:
    return shlex.split(command)


def run_tui(left: Optional[str] = None, right: Optional[str] = None,
            config: Optional[Config] = None) -> Optional[Exception]:
    """Run the dual-pane TUI until both commands exit or the user quits.

    Returns:
        The pane startup error, if the session could not start
    """
    config = config or get_config()
    setup_client_logging(config)

    controller = SessionController(
        parse_command(left or config.panes.left_command),
        parse_command(right or config.panes.right_command),
        prefix_key=config.tui.prefix_key,
        switch_key=config.tui.switch_key,
        quit_key=config.tui.quit_key,
        term=config.panes.term,
    )
    app = SplitApp(controller, tick_interval=config.tui.tick_interval_ms / 1000)
    try:
        app.run()
    finally:
        # Textual may exit without going through the controller
        controller.cleanup()
    return controller.error


if __name__ == "__main__":
    run_tui()
