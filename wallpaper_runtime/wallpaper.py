"""Pointing the desktop plugin at a downloaded wallpaper."""

from __future__ import annotations

import json
import os
from pathlib import Path

from .history import AppError

CONFIG_DIR_NAME = "wallpaper-engine-kde-plugin"
CONFIG_FILE_NAME = "current_wallpaper.json"


def home_config_dir() -> Path:
    """The ``.config`` directory inside the user's home directory."""
    home = os.environ.get("HOME")
    if home is None:
        raise AppError("HOME not set")
    return Path(home) / ".config"


class WallpaperManager:
    """Checks for downloaded wallpapers and records which one is active."""

    def is_installed(self, wallpaper_path: str | os.PathLike[str]) -> bool:
        return Path(wallpaper_path).exists()

    def apply_wallpaper(self, wallpaper_id: int, wallpaper_path: str | os.PathLike[str]) -> Path:
        """Write the plugin's current-wallpaper file and return its path."""
        wallpaper_path = Path(wallpaper_path)
        if not wallpaper_path.exists():
            raise AppError("Wallpaper not downloaded")

        config_path = home_config_dir() / CONFIG_DIR_NAME / CONFIG_FILE_NAME
        document = {"path": str(wallpaper_path), "wallpaper_id": wallpaper_id}

        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            config_path.write_text(json.dumps(document, indent=2, sort_keys=True), encoding="utf-8")
        except OSError as exc:
            raise AppError(str(exc)) from exc
        return config_path