"""planq: dual-pane terminal sessions for parallel agents."""

__version__ = "0.1.0"
