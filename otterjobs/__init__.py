"""Timers, agent session log monitoring, workspace preparation, daemon paths and IPC for a pipeline daemon."""

__version__ = "0.1.0"