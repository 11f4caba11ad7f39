import string

import pytest

from otterjobs.lifecycle import (
    Config,
    LifecycleError,
    NoStateDir,
    ProjectNotFound,
    cleanup_on_failure,
    project_hash,
    remove_runtime_files,
    socket_dir,
    state_dir,
)


@pytest.fixture
def env(tmp_path, monkeypatch):
    state = tmp_path / "state"
    sockets = tmp_path / "sockets"
    monkeypatch.setenv("XDG_STATE_HOME", str(state))
    monkeypatch.setenv("OJ_SOCKET_DIR", str(sockets))
    project = tmp_path / "project"
    project.mkdir()
    return state, sockets, project


def _touch_all(config):
    config.socket_path.parent.mkdir(parents=True, exist_ok=True)
    config.lock_path.parent.mkdir(parents=True, exist_ok=True)
    for path in (config.socket_path, config.lock_path, config.version_path, config.log_path):
        path.write_text("x")


def test_project_hash_is_sixteen_hex_digits(tmp_path):
    digest = project_hash(tmp_path)
    assert len(digest) == 16
    assert set(digest) <= set(string.hexdigits.lower())


def test_project_hash_is_deterministic_and_distinguishes_paths(tmp_path):
    assert project_hash(tmp_path) == project_hash(str(tmp_path))
    assert project_hash(tmp_path / "a") != project_hash(tmp_path / "b")


def test_state_dir_uses_xdg(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path))
    assert state_dir() == tmp_path / "oj"


def test_state_dir_falls_back_to_home(monkeypatch, tmp_path):
    monkeypatch.delenv("XDG_STATE_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    assert state_dir() == tmp_path / ".local" / "state" / "oj"


def test_state_dir_without_home_raises(monkeypatch):
    monkeypatch.delenv("XDG_STATE_HOME", raising=False)
    monkeypatch.delenv("HOME", raising=False)
    with pytest.raises(NoStateDir) as info:
        state_dir()
    assert isinstance(info.value, LifecycleError)
    assert str(info.value) == "Could not determine state directory"


def test_socket_dir_default(monkeypatch):
    monkeypatch.delenv("OJ_SOCKET_DIR", raising=False)
    assert str(socket_dir()) == "/tmp/oj"


def test_socket_dir_override(monkeypatch, tmp_path):
    monkeypatch.setenv("OJ_SOCKET_DIR", str(tmp_path))
    assert socket_dir() == tmp_path


def test_config_for_project_paths(env):
    state, sockets, project = env
    config = Config.for_project(project)
    digest = project_hash(project.resolve())
    base = state / "oj" / "projects" / digest
    assert config.project_root == project.resolve()
    assert config.socket_path == sockets / f"{digest}.sock"
    assert config.lock_path == base / "daemon.pid"
    assert config.version_path == base / "daemon.version"
    assert config.log_path == base / "daemon.log"
    assert config.wal_path == base / "wal" / "events.wal"
    assert config.workspaces_path == base / "workspaces"


def test_config_for_project_canonicalizes(env):
    _, _, project = env
    (project / "sub").mkdir()
    via_parent = Config.for_project(project / "sub" / "..")
    assert via_parent == Config.for_project(project)


def test_config_for_missing_project_raises(env, tmp_path):
    missing = tmp_path / "missing"
    with pytest.raises(ProjectNotFound) as info:
        Config.for_project(missing)
    assert info.value.path == missing
    assert str(info.value).startswith(f"Project not found at {missing}: ")


def test_cleanup_on_failure_removes_runtime_files(env):
    _, _, project = env
    config = Config.for_project(project)
    _touch_all(config)
    cleanup_on_failure(config)
    assert not config.socket_path.exists()
    assert not config.lock_path.exists()
    assert not config.version_path.exists()
    assert config.log_path.exists()


def test_cleanup_on_failure_tolerates_missing_files(env):
    _, _, project = env
    config = Config.for_project(project)
    cleanup_on_failure(config)
    assert not config.socket_path.exists()
    assert not config.lock_path.exists()


def test_remove_runtime_files_keeps_log(env):
    _, _, project = env
    config = Config.for_project(project)
    _touch_all(config)
    remove_runtime_files(config)
    assert not config.socket_path.exists()
    assert not config.lock_path.exists()
    assert not config.version_path.exists()
    assert config.log_path.read_text() == "x"


def test_remove_runtime_files_tolerates_missing_files(env):
    _, _, project = env
    config = Config.for_project(project)
    config.lock_path.parent.mkdir(parents=True)
    config.version_path.write_text("0.1.0")
    remove_runtime_files(config)
    assert not config.version_path.exists()
    assert not config.socket_path.exists()