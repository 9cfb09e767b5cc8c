import os
import sys
from pathlib import Path

import pytest

from wallpaper_runtime import kde
from wallpaper_runtime.history import AppError, app_data_dir

GIT_SCRIPT = """#!/bin/sh
echo "git $*" >> "$CALL_LOG"
if [ "$1" = "clone" ]; then mkdir -p "$3"; fi
exit 0
"""

CMAKE_SCRIPT = """#!/bin/sh
echo "cmake $*" >> "$CALL_LOG"
exit 0
"""

FAILING_CMAKE_SCRIPT = """#!/bin/sh
if [ "$1" = "-DUSE_PLASMAPKG=ON" ]; then echo "boom" >&2; exit 1; fi
exit 0
"""


def _write_script(path: Path, body: str) -> None:
    path.write_text(body)
    path.chmod(0o755)


@pytest.fixture
def env(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("XDG_CURRENT_DESKTOP", "KDE")
    monkeypatch.delenv("DESKTOP_SESSION", raising=False)
    monkeypatch.setenv("PATH", str(bin_dir))
    monkeypatch.setenv("CALL_LOG", str(tmp_path / "calls.log"))
    return {"home": home, "bin": bin_dir, "log": tmp_path / "calls.log"}


def _use_system_path(env, monkeypatch):
    monkeypatch.setenv("PATH", str(env["bin"]) + os.pathsep + os.defpath)


def test_required_tools():
    assert kde.required_tools() == ["git", "cmake"]


def test_command_available():
    assert kde.command_available(sys.executable) is True
    assert kde.command_available("no-such-tool-for-wallpapers") is False


def test_plugin_workspace_dir_is_in_app_data(env):
    assert kde.plugin_workspace_dir() == app_data_dir() / "kde-plugin"


def test_installed_plugin_paths_use_home(env):
    paths = kde.installed_plugin_paths()
    assert paths[0] == env["home"] / ".local/share/plasma/wallpapers/com.github.casout.wallpaperEngineKde"
    assert paths[1] == Path("/usr/share/plasma/wallpapers/com.github.casout.wallpaperEngineKde")


def test_plugin_state_reports_missing_tools(env):
    state = kde.plugin_state()
    assert state.supported is True
    assert state.desktop == "KDE"
    assert state.missing_tools == ["git", "cmake"]
    assert state.repo_dir == str(kde.plugin_workspace_dir())


def test_plugin_state_detects_user_install(env):
    kde.installed_plugin_paths()[0].mkdir(parents=True)
    state = kde.plugin_state()
    assert state.plugin_installed is True
    assert state.message == "KDE Plasma support is installed and ready."


def test_install_plugin_refuses_without_tools(env):
    with pytest.raises(AppError, match="Missing required tools: git, cmake"):
        kde.install_plugin()


def test_install_plugin_clones_and_builds(env, monkeypatch):
    _write_script(env["bin"] / "git", GIT_SCRIPT)
    _write_script(env["bin"] / "cmake", CMAKE_SCRIPT)
    _use_system_path(env, monkeypatch)

    state = kde.install_plugin()

    repo = Path(state.repo_dir)
    assert (repo / "build").is_dir()
    assert state.missing_tools == []
    calls = env["log"].read_text().splitlines()
    assert f"git clone {kde.PLUGIN_REPO_URL} {repo}" in calls
    assert calls[-3:] == [
        "cmake -DUSE_PLASMAPKG=ON ..",
        "cmake --build . -- -j4",
        "cmake --install .",
    ]


def test_install_plugin_updates_existing_checkout(env, monkeypatch):
    _write_script(env["bin"] / "git", GIT_SCRIPT)
    _write_script(env["bin"] / "cmake", CMAKE_SCRIPT)
    _use_system_path(env, monkeypatch)
    kde.plugin_workspace_dir().mkdir(parents=True)

    kde.install_plugin()

    calls = env["log"].read_text().splitlines()
    assert f"git -C {kde.plugin_workspace_dir()} pull --ff-only" in calls
    assert not any(line.startswith("git clone") for line in calls)


def test_install_plugin_reports_build_failure(env, monkeypatch):
    _write_script(env["bin"] / "git", GIT_SCRIPT)
    _write_script(env["bin"] / "cmake", FAILING_CMAKE_SCRIPT)
    _use_system_path(env, monkeypatch)

    with pytest.raises(AppError) as info:
        kde.install_plugin()
    assert str(info.value) == "Configuring the KDE plugin build failed: boom"