"""Workspace preparation for agent execution."""

from __future__ import annotations

import os
import shutil
from pathlib import Path


def prepare_for_agent(
    workspace_path: str | os.PathLike[str],
    project_root: str | os.PathLike[str],
    pipeline_name: str,
    prompt: str,
) -> None:
    """Create the workspace, write CLAUDE.md and copy project settings if present."""
    workspace = Path(workspace_path)
    workspace.mkdir(parents=True, exist_ok=True)

    content = (
        f"# {pipeline_name}\n\n"
        f"{prompt}\n\n"
        "## Completion\n\n"
        "When done, run: `oj done`\n"
        'On error, run: `oj done --error "description"`\n'
    )
    (workspace / "CLAUDE.md").write_text(content, encoding="utf-8")

    project_settings = Path(project_root) / ".claude" / "settings.json"
    if project_settings.exists():
        claude_dir = workspace / ".claude"
        claude_dir.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(project_settings, claude_dir / "settings.local.json")