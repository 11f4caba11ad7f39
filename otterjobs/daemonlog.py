"""Synchronous writes to the daemon log around startup."""

from __future__ import annotations

import os

from otterjobs.lifecycle import Config

STARTUP_MARKER_PREFIX = "--- ojd: starting (pid: "
"""Prefix of the line that marks the start of a startup attempt.

The full line reads ``--- ojd: starting (pid: 12345)``.
"""


def write_startup_marker(config: Config, pid: int | None = None) -> None:
    """Append the startup marker for ``pid`` (default: this process) to the log."""
    if pid is None:
        pid = os.getpid()
    config.log_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config.log_path, "a", encoding="utf-8") as log:
        log.write(f"{STARTUP_MARKER_PREFIX}{pid})\n")


def write_startup_error(config: Config, error: object) -> None:
    """Append a startup error line to the log; failures to write are ignored."""
    try:
        with open(config.log_path, "a", encoding="utf-8") as log:
            log.write(f"ERROR Failed to start daemon: {error}\n")
    except OSError:
        return