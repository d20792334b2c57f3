"""Dual-pane terminal UI."""
