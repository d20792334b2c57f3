"""A pseudo-terminal, its child process and its terminal emulator."""
import logging
import os
import select
import signal
import subprocess
import threading
from typing import List, Mapping, Optional

from . import proc
from .terminal import Emulator
from .tui.keys import KeyPress

logger = logging.getLogger(__name__)

READ_CHUNK = 65536
ABANDON_WAIT = 1.0  # seconds


class PaneError(Exception):
    """Base class for pane errors."""


class PtyAllocationError(PaneError):
    """The pseudo-terminal could not be allocated."""


class ProcessStartError(PaneError):
    """The command could not be started."""


class ResizeError(PaneError):
    """The pseudo-terminal could not be resized."""


class Pane:
    """Binds one pseudo-terminal to one child process and one emulator.

    Three daemon threads run for the lifetime of the pane:

    - pty output -> emulator, until EOF or error; then the pane is exited
    - emulator outbound bytes -> pty input, until the emulator is closed
    - wait for the child process; then the pane is exited

    Closing the pane's resources is what stops the threads.
    """

    def __init__(self, width: int, height: int, command: List[str],
                 env: Optional[Mapping[str, str]] = None, cwd: Optional[str] = None,
                 term: str = "xterm-256color"):
        """Allocate the pty, start the command and the pumps.

        Raises:
            PtyAllocationError: If the pty could not be allocated
            ProcessStartError: If the command could not be started
        """
        self.command = list(command)
        if not self.command:
            raise ProcessStartError("starting command: empty command line")

        try:
            master_fd, slave_fd = proc.open_pty(width, height)
        except OSError as e:
            raise PtyAllocationError(f"creating pty: {e}") from e

        try:
            self._proc = proc.spawn(self.command, slave_fd, env=env, cwd=cwd, term=term)
        except (OSError, subprocess.SubprocessError) as e:
            os.close(master_fd)
            os.close(slave_fd)
            raise ProcessStartError(f"starting {self.command[0]}: {e}") from e
        os.close(slave_fd)
        self._master_fd = master_fd

        try:
            self.emulator = Emulator(width, height)
            # Closing the write end wakes the output pump
            self._wake_r, self._wake_w = os.pipe()
        except Exception:
            self._abandon_process()
            raise

        self._exited = threading.Event()
        self._closed = threading.Event()
        self._close_lock = threading.Lock()
        self._close_done = False
        self._close_result: Optional[OSError] = None

        name = f"planq-pane:{self._proc.pid}"
        self._threads = [
            threading.Thread(target=self._pump_output, name=f"{name}:out", daemon=True),
            threading.Thread(target=self._pump_input, name=f"{name}:in", daemon=True),
            threading.Thread(target=self._wait_process, name=f"{name}:wait", daemon=True),
        ]
        for thread in self._threads:
            thread.start()

        logger.info(f"Pane started: pid={self._proc.pid} size={width}x{height} cmd={self.command}")

    def _abandon_process(self) -> None:
        """Terminate the child and release the pty after a failed construction."""
        logger.warning(f"Abandoning pid {self._proc.pid} after failed pane setup")
        try:
            self._proc.terminate()
        except OSError as e:
            logger.debug(f"Signalling pid {self._proc.pid} failed: {e}")
        os.close(self._master_fd)
        try:
            self._proc.wait(timeout=ABANDON_WAIT)
        except subprocess.TimeoutExpired:
            logger.warning(f"pid {self._proc.pid} did not exit after SIGTERM")

    @property
    def pid(self) -> int:
        return self._proc.pid

    @property
    def exited(self) -> bool:
        """True once the output stream ended or the process terminated."""
        return self._exited.is_set()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def resize(self, width: int, height: int) -> None:
        """Resize the pty and the emulator. No-op once closed or exited.

        Raises:
            ResizeError: If the pty resize failed; the emulator is left as is
        """
        if self.closed or self.exited:
            return
        try:
            proc.set_winsize(self._master_fd, width, height)
        except OSError as e:
            raise ResizeError(f"resizing pty: {e}") from e
        self.emulator.resize(width, height)

    def send_key(self, key: KeyPress) -> None:
        """Forward a key press to the child, unless it is gone."""
        if self.closed or self.exited:
            return
        self.emulator.send_key(key)

    def close(self) -> Optional[OSError]:
        """Shut down the child process, the emulator and the pty.

        Only the first call does any work; every call returns the error (if
        any) from releasing the pty, or else from signalling the process.
        Never raises.
        """
        with self._close_lock:
            if not self._close_done:
                self._close_done = True
                self._close_result = self._close()
            return self._close_result

    def _close(self) -> Optional[OSError]:
        self._closed.set()

        signal_error = None
        if not self.exited and self._proc.poll() is None:
            logger.debug(f"Sending SIGTERM to pid {self._proc.pid}")
            try:
                self._proc.send_signal(signal.SIGTERM)
            except OSError as e:
                logger.debug(f"Signalling pid {self._proc.pid} failed: {e}")
                signal_error = e

        self.emulator.close()

        result = None
        try:
            os.close(self._wake_w)
        except OSError as e:
            logger.debug(f"Closing wake pipe failed: {e}")
        try:
            os.close(self._master_fd)
        except OSError as e:
            result = e

        logger.info(f"Pane closed: pid={self._proc.pid}")
        return result or signal_error

    def _pump_output(self) -> None:
        fd = self._master_fd
        try:
            while not self.closed:
                try:
                    readable, _, _ = select.select([fd, self._wake_r], [], [])
                except (OSError, ValueError):
                    break
                if self._wake_r in readable:
                    break
                try:
                    data = os.read(fd, READ_CHUNK)
                except OSError:
                    # EIO once the child side is gone
                    break
                if not data:
                    break
                self.emulator.write(data)
        finally:
            self._exited.set()
            os.close(self._wake_r)
            logger.debug(f"Output pump finished: pid={self._proc.pid}")

    def _pump_input(self) -> None:
        while True:
            data = self.emulator.read()
            if not data or self.closed:
                break
            try:
                # The master fd number may be reused once close() released it
                while data and not self.closed:
                    written = os.write(self._master_fd, data)
                    data = data[written:]
            except OSError as e:
                logger.debug(f"Input pump write failed: {e}")
                break
        logger.debug(f"Input pump finished: pid={self._proc.pid}")

    def _wait_process(self) -> None:
        returncode = self._proc.wait()
        self._exited.set()
        logger.info(f"Process {self._proc.pid} exited with code {returncode}")
