"""Reading agent session logs to work out what the agent is doing."""

from __future__ import annotations

import enum
import hashlib
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union


class FailureKind(enum.Enum):
    """Category of a session failure."""

    UNAUTHORIZED = "unauthorized"
    OUT_OF_CREDITS = "out_of_credits"
    NO_INTERNET = "no_internet"
    RATE_LIMITED = "rate_limited"
    OTHER = "other"


@dataclass(frozen=True)
class FailureReason:
    """Why a session failed; ``detail`` holds the raw message for ``OTHER``."""

    kind: FailureKind
    detail: str = ""


class SessionState(enum.Enum):
    """Non-failure states detected from a session log."""

    WORKING = "working"
    WAITING_FOR_INPUT = "waiting_for_input"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Failed:
    """The session encountered a failure."""

    reason: FailureReason


State = Union[SessionState, Failed]

_FAILURE_MESSAGES = {
    FailureKind.UNAUTHORIZED: "API key unauthorized",
    FailureKind.OUT_OF_CREDITS: "Out of API credits",
    FailureKind.NO_INTERNET: "Network error",
    FailureKind.RATE_LIMITED: "Rate limited",
}

_ERROR_PATTERNS = (
    (FailureKind.UNAUTHORIZED, ("unauthorized", "invalid api key")),
    (FailureKind.OUT_OF_CREDITS, ("credit", "quota", "billing")),
    (FailureKind.NO_INTERNET, ("network", "connection", "offline")),
    (FailureKind.RATE_LIMITED, ("rate limit", "too many requests")),
)


def failure_to_message(reason: FailureReason) -> str:
    """Human-readable message for a failure reason."""
    if reason.kind is FailureKind.OTHER:
        return reason.detail
    return _FAILURE_MESSAGES[reason.kind]


def _last_nonblank_line(path: Path) -> str | None:
    last = None
    with open(path, "rb") as handle:
        for raw in handle:
            try:
                line = raw.decode("utf-8")
            except UnicodeDecodeError:
                break
            line = line.rstrip("\n").removesuffix("\r")
            if line.strip():
                last = line
    return last


def _detect_error(record: dict[str, Any]) -> FailureReason | None:
    error = record.get("error")
    if not isinstance(error, str):
        message = record.get("message")
        error = message.get("error") if isinstance(message, dict) else None
        if not isinstance(error, str):
            return None

    lowered = error.lower()
    for kind, needles in _ERROR_PATTERNS:
        if any(needle in lowered for needle in needles):
            return FailureReason(kind)
    return FailureReason(FailureKind.OTHER, error)


class SessionLogWatcher:
    """Watches one session log file."""

    def __init__(self, session_log_path: str | os.PathLike[str]) -> None:
        self.path = Path(session_log_path)

    def check_state(self) -> State:
        """Read the log and classify its last entry."""
        try:
            last_line = _last_nonblank_line(self.path)
        except OSError:
            return SessionState.UNKNOWN
        if not last_line:
            return SessionState.UNKNOWN

        try:
            record = json.loads(last_line)
        except json.JSONDecodeError:
            return SessionState.UNKNOWN
        if not isinstance(record, dict):
            return SessionState.UNKNOWN

        failure = _detect_error(record)
        if failure is not None:
            return Failed(failure)

        entry_type = record.get("type")
        if entry_type == "assistant":
            message = record.get("message")
            stop_reason = message.get("stop_reason") if isinstance(message, dict) else None
            if stop_reason == "end_turn":
                return SessionState.WAITING_FOR_INPUT
            if stop_reason == "tool_use":
                return SessionState.WORKING
            return SessionState.UNKNOWN
        if entry_type == "user":
            return SessionState.WORKING
        return SessionState.UNKNOWN


def hash_project_path(path: str | os.PathLike[str]) -> str:
    """Stable directory name derived from a project path."""
    digest = hashlib.blake2b(str(Path(path)).encode("utf-8"), digest_size=8).digest()
    return format(int.from_bytes(digest, "big"), "x")


def find_session_log(project_path: str | os.PathLike[str], session_id: str) -> Path | None:
    """Find a session log, using ``CLAUDE_LOCAL_STATE_DIR`` or ``~/.claude``."""
    base = os.environ.get("CLAUDE_LOCAL_STATE_DIR")
    claude_base = Path(base) if base is not None else Path.home() / ".claude"
    return find_session_log_in(project_path, session_id, claude_base)


def find_session_log_in(
    project_path: str | os.PathLike[str],
    session_id: str,
    claude_base: str | os.PathLike[str],
) -> Path | None:
    """Find a session log under ``<claude_base>/projects/<hash>``.

    Prefers ``<session_id>.jsonl``; otherwise the most recently modified
    ``.jsonl`` file in the project directory.
    """
    project_dir = Path(claude_base) / "projects" / hash_project_path(project_path)
    if not project_dir.exists():
        return None

    session_file = project_dir / f"{session_id}.jsonl"
    if session_file.exists():
        return session_file

    def modified(candidate: Path) -> float:
        try:
            return candidate.stat().st_mtime
        except OSError:
            return float("-inf")

    try:
        candidates = [p for p in project_dir.iterdir() if p.suffix == ".jsonl"]
    except OSError:
        return None
    return max(candidates, key=modified, default=None)