"""Persistent record of recently applied wallpapers."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Iterable

from platformdirs import user_data_dir

APP_NAME = "wallpaper-engine-linux"
APP_AUTHOR = "opencom"
HISTORY_LIMIT = 25


class AppError(Exception):
    """An operation failed; the message is meant to be shown to the user."""


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string or null")
    return value


def _required_str(data: dict[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


@dataclass
class HistoryItem:
    """One wallpaper that was applied, with whatever metadata was known."""

    wallpaper_id: int
    title: str | None
    preview: str | None
    creator: str | None
    applied_at: str
    local_path: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> HistoryItem:
        if not isinstance(data, dict):
            raise ValueError("history entry must be an object")
        wallpaper_id = data["wallpaper_id"]
        if not isinstance(wallpaper_id, int) or isinstance(wallpaper_id, bool) or wallpaper_id < 0:
            raise ValueError("field 'wallpaper_id' must be a non-negative integer")
        return cls(
            wallpaper_id=wallpaper_id,
            title=_optional_str(data, "title"),
            preview=_optional_str(data, "preview"),
            creator=_optional_str(data, "creator"),
            applied_at=_required_str(data, "applied_at"),
            local_path=_required_str(data, "local_path"),
        )


def app_data_dir() -> Path:
    """The per-user local data directory of the application."""
    try:
        return Path(user_data_dir(APP_NAME, APP_AUTHOR))
    except Exception as exc:  # platformdirs may fail without a home directory
        raise AppError("Failed to resolve the app data directory.") from exc


def history_path() -> Path:
    return app_data_dir() / "history.json"


def load_history() -> list[HistoryItem]:
    """Read the stored history, newest first; empty if nothing was stored yet."""
    path = history_path()
    if not path.exists():
        return []

    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise AppError(f"Failed to read history: {exc}") from exc

    try:
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError("expected a list of history entries")
        return [HistoryItem.from_dict(entry) for entry in data]
    except (ValueError, KeyError, TypeError) as exc:
        raise AppError(f"Failed to parse history: {exc}") from exc


def save_history(items: Iterable[HistoryItem]) -> None:
    path = history_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise AppError(f"Failed to create history directory: {exc}") from exc

    try:
        serialized = json.dumps([item.to_dict() for item in items], indent=2)
    except (TypeError, ValueError) as exc:
        raise AppError(f"Failed to serialize history: {exc}") from exc

    try:
        path.write_text(serialized, encoding="utf-8")
    except OSError as exc:
        raise AppError(f"Failed to write history: {exc}") from exc


def record(item: HistoryItem) -> None:
    """Put ``item`` at the front of the history, replacing an older entry for the same wallpaper."""
    history = [entry for entry in load_history() if entry.wallpaper_id != item.wallpaper_id]
    history.insert(0, item)
    save_history(history[:HISTORY_LIMIT])