"""Shared test fixtures."""
import time

import pytest

from planq.pane import ProcessStartError


class FakeEmulator:
    """Records what the controller and compositor ask of an emulator."""

    def __init__(self):
        self.keys = []
        self.draws = []
        self.cursor = (0, 0)
        self.cursor_visible = True

    def send_key(self, key):
        self.keys.append(key)

    def draw(self, target, region):
        self.draws.append(region)

    def cursor_position(self):
        return self.cursor


class FakePane:
    """Stand-in for Pane that never touches a real pty."""

    def __init__(self, width, height, command, **kwargs):
        self.size = (width, height)
        self.command = command
        self.kwargs = kwargs
        self.exited = False
        self.close_calls = 0
        self.resizes = []
        self.resize_error = None
        self.emulator = FakeEmulator()

    def resize(self, width, height):
        if self.resize_error is not None:
            raise self.resize_error
        self.resizes.append((width, height))
        self.size = (width, height)

    def send_key(self, key):
        self.emulator.send_key(key)

    def close(self):
        self.close_calls += 1
        return None


@pytest.fixture
def pane_factory():
    """Factory creating FakePanes; created panes are kept in .created."""
    created = []

    def factory(width, height, command, **kwargs):
        pane = FakePane(width, height, command, **kwargs)
        created.append(pane)
        return pane

    factory.created = created
    return factory


@pytest.fixture
def failing_pane_factory():
    """Factory whose second pane fails to start."""
    created = []

    def factory(width, height, command, **kwargs):
        if len(created) == 1:
            raise ProcessStartError("starting right: boom")
        pane = FakePane(width, height, command, **kwargs)
        created.append(pane)
        return pane

    factory.created = created
    return factory


@pytest.fixture
def wait_until():
    """Poll a predicate until it holds or the timeout expires."""

    def wait(predicate, timeout=5.0, interval=0.02):
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(interval)
        return predicate()

    return wait


@pytest.fixture
def reset_global_config():
    """Restore the process-wide config after a test."""
    from planq import config as config_module

    original = config_module._config
    yield
    config_module.set_config(original)


@pytest.fixture
def fake_panes():
    """A left and right FakePane sized for an 80x24 terminal."""
    return [FakePane(37, 21, ["left"]), FakePane(37, 21, ["right"])]
