from otterjobs.workspace import prepare_for_agent


def test_prepare_creates_claude_md(tmp_path):
    workspace = tmp_path / "ws"
    project = tmp_path / "project"
    workspace.mkdir()
    project.mkdir()

    prepare_for_agent(workspace, project, "test-pipeline", "Do the thing")

    claude_md = workspace / "CLAUDE.md"
    assert claude_md.exists()
    content = claude_md.read_text()
    assert "# test-pipeline" in content
    assert "Do the thing" in content
    assert "oj done" in content


def test_prepare_copies_settings_if_present(tmp_path):
    workspace = tmp_path / "ws"
    project = tmp_path / "project"
    workspace.mkdir()
    settings_dir = project / ".claude"
    settings_dir.mkdir(parents=True)
    (settings_dir / "settings.json").write_text('{"key": "value"}')

    prepare_for_agent(workspace, project, "test", "prompt")

    local_settings = workspace / ".claude" / "settings.local.json"
    assert local_settings.exists()
    assert local_settings.read_text() == '{"key": "value"}'


def test_prepare_skips_settings_if_absent(tmp_path):
    workspace = tmp_path / "ws"
    project = tmp_path / "project"
    workspace.mkdir()
    project.mkdir()

    prepare_for_agent(workspace, project, "test", "prompt")

    assert not (workspace / ".claude" / "settings.local.json").exists()


def test_prepare_creates_missing_workspace(tmp_path):
    workspace = tmp_path / "nested" / "ws"
    project = tmp_path / "project"
    project.mkdir()

    prepare_for_agent(workspace, project, "name", "prompt")

    assert (workspace / "CLAUDE.md").read_text().startswith("# name\n\nprompt\n\n")