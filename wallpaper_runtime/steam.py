"""Locating, installing and driving SteamCMD."""

from __future__ import annotations

import io
import signal
import subprocess
import tarfile
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import requests

from .history import AppError, app_data_dir

WALLPAPER_ENGINE_APP_ID = 431960
STEAMCMD_URL = "https://steamcdn-a.akamaihd.net/client/installer/steamcmd_linux.tar.gz"
_DOWNLOAD_TIMEOUT = 300


@dataclass
class SteamState:
    installed: bool
    binary_path: str | None
    managed_install: bool
    root_dir: str
    message: str


@dataclass(frozen=True)
class SteamCMD:
    """A usable SteamCMD binary and the directory it installs content into."""

    path: Path
    root_dir: Path

    def download_workshop_item(self, workshop_id: int) -> Path:
        """Download a Wallpaper Engine workshop item and return its folder."""
        try:
            self.root_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise AppError(str(exc)) from exc

        run_command(
            [
                str(self.path),
                "+@ShutdownOnFailedCommand",
                "1",
                "+@NoPromptForPassword",
                "1",
                "+force_install_dir",
                str(self.root_dir),
                "+login",
                "anonymous",
                "+workshop_download_item",
                str(WALLPAPER_ENGINE_APP_ID),
                str(workshop_id),
                "+quit",
            ],
            "SteamCMD exited with an error while downloading the wallpaper",
        )

        workshop_path = self.workshop_path(workshop_id)
        if not workshop_path.exists():
            raise AppError(
                "SteamCMD completed, but the workshop item folder was not found afterwards."
            )
        return workshop_path

    def workshop_path(self, workshop_id: int) -> Path:
        return (
            self.root_dir
            / "steamapps"
            / "workshop"
            / "content"
            / str(WALLPAPER_ENGINE_APP_ID)
            / str(workshop_id)
        )


def managed_root_dir() -> Path:
    return app_data_dir() / "steamcmd"


def _command_exists(candidate: Path) -> bool:
    try:
        subprocess.run(
            [str(candidate), "+quit"],
            stdin=subprocess.DEVNULL,
            capture_output=True,
            check=False,
        )
    except OSError:
        return False
    return True


def locate_steamcmd() -> SteamCMD:
    """Find SteamCMD, preferring the app-managed copy over system installs."""
    root_dir = managed_root_dir()
    candidates = (
        root_dir / "steamcmd.sh",
        Path("steamcmd"),
        Path("/usr/games/steamcmd"),
        Path("/usr/bin/steamcmd"),
    )
    for candidate in candidates:
        if _command_exists(candidate):
            return SteamCMD(path=candidate, root_dir=root_dir)
    raise AppError("SteamCMD was not found.")


def steam_state() -> SteamState:
    root_dir = managed_root_dir()
    try:
        steam = locate_steamcmd()
    except AppError:
        return SteamState(
            installed=False,
            binary_path=None,
            managed_install=False,
            root_dir=str(root_dir),
            message="SteamCMD is missing. Install it from the app to enable workshop downloads.",
        )

    managed_install = steam.path.is_relative_to(root_dir)
    return SteamState(
        installed=True,
        binary_path=str(steam.path),
        managed_install=managed_install,
        root_dir=str(steam.root_dir),
        message=(
            "SteamCMD is installed in the app-managed runtime."
            if managed_install
            else "SteamCMD is available from your system."
        ),
    )


def _extract_all(archive: tarfile.TarFile, destination: Path) -> None:
    if hasattr(tarfile, "data_filter"):
        archive.extractall(destination, filter="data")
    else:
        archive.extractall(destination)


def install_managed() -> SteamState:
    """Download SteamCMD and unpack it into the app-managed directory."""
    root_dir = managed_root_dir()
    try:
        root_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise AppError(str(exc)) from exc

    try:
        response = requests.get(STEAMCMD_URL, timeout=_DOWNLOAD_TIMEOUT)
    except requests.RequestException as exc:
        raise AppError(f"Failed to download SteamCMD: {exc}") from exc
    try:
        response.raise_for_status()
    except requests.HTTPError as exc:
        raise AppError(f"SteamCMD download failed: {exc}") from exc
    try:
        archive_bytes = response.content
    except requests.RequestException as exc:
        raise AppError(f"Failed to read SteamCMD archive: {exc}") from exc

    try:
        with tarfile.open(fileobj=io.BytesIO(archive_bytes), mode="r:gz") as archive:
            _extract_all(archive, root_dir)
    except (tarfile.TarError, OSError, EOFError) as exc:
        raise AppError(f"Failed to unpack SteamCMD: {exc}") from exc

    binary = root_dir / "steamcmd.sh"
    if not binary.exists():
        raise AppError("SteamCMD download finished but steamcmd.sh was not found.")

    return SteamState(
        installed=True,
        binary_path=str(binary),
        managed_install=True,
        root_dir=str(root_dir),
        message="SteamCMD was installed into the app runtime.",
    )


def _describe_exit(returncode: int) -> str:
    if returncode < 0:
        try:
            name = signal.Signals(-returncode).name
        except ValueError:
            return f"signal: {-returncode}"
        return f"signal: {-returncode} ({name})"
    return f"exit status: {returncode}"


def _to_text(output: bytes | str | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")
    return output.strip()


def format_command_failure(
    context: str, returncode: int, stdout: bytes | str | None, stderr: bytes | str | None
) -> str:
    """Describe a failed command, preferring its stderr, then its stdout."""
    details = _to_text(stderr) or _to_text(stdout) or f"process exited with {_describe_exit(returncode)}"
    return f"{context}: {details}"


def run_command(args: Sequence[str], context: str, cwd: str | Path | None = None) -> None:
    """Run a command to completion, raising AppError if it cannot start or fails."""
    try:
        completed = subprocess.run(
            list(args),
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            check=False,
        )
    except OSError as exc:
        raise AppError(f"{context}: {exc}") from exc

    if completed.returncode != 0:
        raise AppError(
            format_command_failure(context, completed.returncode, completed.stdout, completed.stderr)
        )