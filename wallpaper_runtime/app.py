"""Application actions and the command-line entry point."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict, dataclass, field, is_dataclass
from typing import Any, Sequence

from . import history, workshop
from .desktop import DesktopState, detect_backend
from .history import AppError, HistoryItem
from .steam import SteamState, install_managed, locate_steamcmd, steam_state
from .wallpaper import WallpaperManager
from .workshop import WorkshopItem


@dataclass
class DashboardState:
    environment: DesktopState
    steam: SteamState
    ready: bool
    message: str
    history: list[HistoryItem] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ActionResponse:
    message: str
    dashboard: DashboardState

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def build_dashboard_state() -> DashboardState:
    environment = detect_backend().state()
    steam = steam_state()
    items = history.load_history()
    ready = environment.supported and environment.plugin_installed and steam.installed

    if ready:
        message = "Setup complete. You can search, install, and apply wallpapers now."
    elif not environment.supported:
        message = (
            f"Detected desktop: {environment.detected_session}. KDE Plasma is implemented "
            "today, and the backend layer is ready for other desktops later."
        )
    elif not steam.installed and not environment.plugin_installed:
        message = "SteamCMD and the desktop plugin still need to be installed."
    elif not steam.installed:
        message = "Install SteamCMD to enable live workshop downloads."
    else:
        message = "Install the desktop plugin to start applying wallpapers."

    return DashboardState(
        environment=environment,
        steam=steam,
        ready=ready,
        message=message,
        history=items,
    )


def dashboard_state() -> DashboardState:
    return build_dashboard_state()


def check_environment() -> DashboardState:
    return build_dashboard_state()


def install_plugin() -> ActionResponse:
    detect_backend().install_plugin()
    return ActionResponse(
        message="The desktop wallpaper plugin was installed for the active backend.",
        dashboard=build_dashboard_state(),
    )


def install_steamcmd() -> ActionResponse:
    install_managed()
    return ActionResponse(
        message="SteamCMD was installed into the app runtime.",
        dashboard=build_dashboard_state(),
    )


def fetch_workshop(query: str | None = None) -> list[WorkshopItem]:
    return workshop.browse_workshop(query)


def get_history() -> list[HistoryItem]:
    return history.load_history()


def install_wallpaper(
    wallpaper_id: int,
    title: str | None = None,
    preview: str | None = None,
    creator: str | None = None,
) -> ActionResponse:
    """Download a wallpaper if needed, apply it and record it in the history."""
    steam = locate_steamcmd()
    manager = WallpaperManager()
    wallpaper_path = steam.workshop_path(wallpaper_id)

    if manager.is_installed(wallpaper_path):
        resolved_path = wallpaper_path
    else:
        resolved_path = steam.download_workshop_item(wallpaper_id)

    manager.apply_wallpaper(wallpaper_id, resolved_path)

    enriched: WorkshopItem | None = None
    if title is None or preview is None or creator is None:
        try:
            enriched = workshop.fetch_workshop_item_details(wallpaper_id)
        except AppError:
            enriched = None

    history.record(
        HistoryItem(
            wallpaper_id=wallpaper_id,
            title=title if title is not None else (enriched.title if enriched else None),
            preview=preview if preview is not None else (enriched.preview if enriched else None),
            creator=creator if creator is not None else (enriched.creator if enriched else None),
            applied_at=workshop.unix_timestamp_now(),
            local_path=str(resolved_path),
        )
    )

    return ActionResponse(
        message=f"Wallpaper {wallpaper_id} is now active in the configured desktop backend.",
        dashboard=build_dashboard_state(),
    )


def _jsonable(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, list):
        return [_jsonable(entry) for entry in value]
    return value


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wallpaper-runtime",
        description="Browse, download and apply Wallpaper Engine workshop wallpapers.",
    )
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("dashboard", help="show the setup state and history")
    commands.add_parser("check", help="check the desktop and SteamCMD setup")
    commands.add_parser("install-plugin", help="install the desktop wallpaper plugin")
    commands.add_parser("install-steamcmd", help="install SteamCMD into the app runtime")
    search = commands.add_parser("search", help="browse or search the workshop")
    search.add_argument("query", nargs="?", default=None)
    commands.add_parser("history", help="list recently applied wallpapers")
    install = commands.add_parser("install", help="download and apply a wallpaper")
    install.add_argument("wallpaper_id", type=int)
    install.add_argument("--title")
    install.add_argument("--preview")
    install.add_argument("--creator")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _parser().parse_args(argv)
    actions = {
        "dashboard": dashboard_state,
        "check": check_environment,
        "install-plugin": install_plugin,
        "install-steamcmd": install_steamcmd,
        "search": lambda: fetch_workshop(args.query),
        "history": get_history,
        "install": lambda: install_wallpaper(
            args.wallpaper_id, args.title, args.preview, args.creator
        ),
    }
    try:
        result = actions[args.command]()
    except AppError as exc:
        print(exc, file=sys.stderr)
        return 1
    print(json.dumps(_jsonable(result), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())