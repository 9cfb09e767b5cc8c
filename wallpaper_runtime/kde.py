"""Detecting, building and installing the KDE Plasma wallpaper plugin."""

from __future__ import annotations

import os
import subprocess
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from .history import AppError, app_data_dir
from .steam import run_command

PLUGIN_REPO_URL = "https://github.com/catsout/wallpaper-engine-kde-plugin.git"
PLUGIN_ID = "com.github.casout.wallpaperEngineKde"


@dataclass
class PluginState:
    supported: bool
    plugin_installed: bool
    desktop: str
    repo_dir: str
    missing_tools: list[str] = field(default_factory=list)
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def required_tools() -> list[str]:
    return ["git", "cmake"]


def command_available(tool: str) -> bool:
    """Whether ``tool`` can be started at all."""
    try:
        subprocess.run(
            [tool, "--version"],
            stdin=subprocess.DEVNULL,
            capture_output=True,
            check=False,
        )
    except OSError:
        return False
    return True


def installed_plugin_paths() -> list[Path]:
    home = os.environ.get("HOME", "")
    return [
        Path(home) / ".local/share/plasma/wallpapers" / PLUGIN_ID,
        Path("/usr/share/plasma/wallpapers") / PLUGIN_ID,
    ]


def plugin_workspace_dir() -> Path:
    return app_data_dir() / "kde-plugin"


def plugin_state() -> PluginState:
    from .desktop import current_desktop_name

    repo_dir = plugin_workspace_dir()
    missing_tools = [tool for tool in required_tools() if not command_available(tool)]
    plugin_installed = any(path.exists() for path in installed_plugin_paths())

    return PluginState(
        supported=True,
        plugin_installed=plugin_installed,
        desktop=current_desktop_name(),
        repo_dir=str(repo_dir),
        missing_tools=missing_tools,
        message=(
            "KDE Plasma support is installed and ready."
            if plugin_installed
            else "KDE Plasma was detected, but the Wallpaper Engine plugin is not installed."
        ),
    )


def install_plugin() -> PluginState:
    """Clone or update the plugin sources, build them and install the result."""
    state = plugin_state()
    if state.missing_tools:
        raise AppError(f"Missing required tools: {', '.join(state.missing_tools)}")

    repo_dir = Path(state.repo_dir)
    build_dir = repo_dir / "build"
    try:
        repo_dir.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise AppError(str(exc)) from exc

    if repo_dir.exists():
        run_command(
            ["git", "-C", str(repo_dir), "pull", "--ff-only"],
            "Updating the KDE plugin repository failed",
        )
    else:
        run_command(
            ["git", "clone", PLUGIN_REPO_URL, str(repo_dir)],
            "Cloning the KDE plugin repository failed",
        )

    try:
        build_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise AppError(str(exc)) from exc

    steps = (
        (["cmake", "-DUSE_PLASMAPKG=ON", ".."], "Configuring the KDE plugin build failed"),
        (["cmake", "--build", ".", "--", "-j4"], "Building the KDE plugin failed"),
        (["cmake", "--install", "."], "Installing the KDE plugin failed"),
    )
    for args, context in steps:
        run_command(args, context, cwd=build_dir)

    return plugin_state()