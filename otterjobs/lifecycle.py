"""Daemon configuration and on-disk runtime files."""

from __future__ import annotations

import hashlib
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

_DEFAULT_SOCKET_DIR = Path("/tmp/oj")


class LifecycleError(Exception):
    """Base class for daemon lifecycle errors."""


class ProjectNotFound(LifecycleError):
    """The project root does not exist or cannot be resolved."""

    def __init__(self, path: str | os.PathLike[str], cause: OSError) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Project not found at {self.path}: {cause}")


class NoStateDir(LifecycleError):
    """Neither XDG_STATE_HOME nor HOME is set."""

    def __init__(self) -> None:
        super().__init__("Could not determine state directory")


def state_dir() -> Path:
    """State directory: ``$XDG_STATE_HOME/oj`` or ``~/.local/state/oj``."""
    xdg = os.environ.get("XDG_STATE_HOME")
    if xdg is not None:
        return Path(xdg) / "oj"
    home = os.environ.get("HOME")
    if home is None:
        raise NoStateDir()
    return Path(home) / ".local" / "state" / "oj"


def socket_dir() -> Path:
    """Socket directory: ``$OJ_SOCKET_DIR`` or ``/tmp/oj`` (kept short for socket path limits)."""
    override = os.environ.get("OJ_SOCKET_DIR")
    if override is not None:
        return Path(override)
    return _DEFAULT_SOCKET_DIR


def project_hash(path: str | os.PathLike[str]) -> str:
    """First 16 hex digits of the SHA-256 of the path."""
    data = str(Path(path)).encode("utf-8", errors="replace")
    return hashlib.sha256(data).digest()[:8].hex()


@dataclass(frozen=True)
class Config:
    """Paths used by the daemon of one project."""

    project_root: Path
    socket_path: Path
    lock_path: Path
    version_path: Path
    log_path: Path
    wal_path: Path
    workspaces_path: Path

    @classmethod
    def for_project(cls, project_root: str | os.PathLike[str]) -> Config:
        """Build the configuration for the project at ``project_root``."""
        try:
            canonical = Path(project_root).resolve(strict=True)
        except OSError as exc:
            raise ProjectNotFound(project_root, exc) from exc

        digest = project_hash(canonical)
        project_state = state_dir() / "projects" / digest
        return cls(
            project_root=canonical,
            socket_path=socket_dir() / f"{digest}.sock",
            lock_path=project_state / "daemon.pid",
            version_path=project_state / "daemon.version",
            log_path=project_state / "daemon.log",
            wal_path=project_state / "wal" / "events.wal",
            workspaces_path=project_state / "workspaces",
        )


def cleanup_on_failure(config: Config) -> None:
    """Silently remove the socket, version and lock files left by a failed start."""
    for path in (config.socket_path, config.version_path, config.lock_path):
        try:
            path.unlink(missing_ok=True)
        except OSError:
            pass


def remove_runtime_files(config: Config) -> None:
    """Remove the socket, PID and version files on shutdown, logging any failure."""
    for label, path in (
        ("socket", config.socket_path),
        ("PID", config.lock_path),
        ("version", config.version_path),
    ):
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Failed to remove %s file: %s", label, exc)