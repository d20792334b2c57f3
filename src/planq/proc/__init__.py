"""Process and pseudo-terminal utilities."""
import fcntl
import logging
import os
import pty
import struct
import subprocess
import termios
from typing import Dict, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


def set_winsize(fd: int, cols: int, rows: int) -> None:
    """Set the window size of a pseudo-terminal.

    Raises:
        OSError: If the ioctl fails (e.g. the fd is closed)
    """
    winsize = struct.pack("HHHH", rows, cols, 0, 0)
    fcntl.ioctl(fd, termios.TIOCSWINSZ, winsize)


def open_pty(cols: int, rows: int) -> Tuple[int, int]:
    """Allocate a pseudo-terminal pair sized cols x rows.

    Returns:
        (master_fd, slave_fd)
    """
    master_fd, slave_fd = pty.openpty()
    try:
        set_winsize(master_fd, cols, rows)
    except OSError:
        os.close(master_fd)
        os.close(slave_fd)
        raise
    logger.debug(f"Allocated pty master={master_fd} slave={slave_fd} ({cols}x{rows})")
    return master_fd, slave_fd


def _make_controlling_tty() -> None:
    # Runs in the child after setsid(): adopt stdin (the pty slave) as ctty.
    fcntl.ioctl(0, termios.TIOCSCTTY, 0)


def build_env(env: Optional[Mapping[str, str]] = None, term: str = "xterm-256color") -> Dict[str, str]:
    """Inherit the current environment with TERM set to term, then overlay env.

    The host TERM describes the outer terminal, not the emulator the child
    draws into, so it is always replaced. An explicit TERM in env wins.
    """
    proc_env = os.environ.copy()
    proc_env["TERM"] = term
    if env:
        proc_env.update(env)
    return proc_env


def spawn(cmd: List[str], slave_fd: int, env: Optional[Mapping[str, str]] = None,
          cwd: Optional[str] = None, term: str = "xterm-256color") -> subprocess.Popen:
    """Start cmd attached to a pty slave as a new session leader.

    Args:
        cmd: Command to run as list of strings
        slave_fd: Slave side of the pty; used for stdin, stdout and stderr
        env: Extra environment variables for the child
        cwd: Working directory for the child
        term: TERM for the child unless env sets one

    Returns:
        The Popen handle of the child

    Raises:
        OSError: If the command could not be started
    """
    logger.debug(f"Spawning: {' '.join(cmd)}")

    proc = subprocess.Popen(
        cmd,
        stdin=slave_fd,
        stdout=slave_fd,
        stderr=slave_fd,
        cwd=cwd,
        env=build_env(env, term),
        close_fds=True,
        start_new_session=True,
        preexec_fn=_make_controlling_tty,
    )

    logger.debug(f"Spawned pid {proc.pid}: {' '.join(cmd)}")
    return proc
