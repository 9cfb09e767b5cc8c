"""Detecting the running desktop and choosing a wallpaper backend for it."""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from . import kde
from .history import AppError


@dataclass
class DesktopState:
    backend_id: str
    backend_name: str
    detected_session: str
    supported: bool
    plugin_installed: bool
    plugin_workspace: str | None
    missing_tools: list[str] = field(default_factory=list)
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class BackendKind(Enum):
    KDE = "kde"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class DesktopBackend:
    """The wallpaper backend for a detected desktop session."""

    kind: BackendKind
    session: str

    def state(self) -> DesktopState:
        if self.kind is BackendKind.KDE:
            plugin = kde.plugin_state()
            return DesktopState(
                backend_id="kde",
                backend_name="KDE Plasma",
                detected_session=plugin.desktop,
                supported=plugin.supported,
                plugin_installed=plugin.plugin_installed,
                plugin_workspace=plugin.repo_dir,
                missing_tools=list(plugin.missing_tools),
                message=plugin.message,
            )
        return DesktopState(
            backend_id="unsupported",
            backend_name="Unsupported Desktop",
            detected_session=self.session,
            supported=False,
            plugin_installed=False,
            plugin_workspace=None,
            missing_tools=[],
            message=(
                f"{self.session} was detected. KDE Plasma is currently implemented, and the "
                "backend layer is ready for future non-GNOME targets."
            ),
        )

    def install_plugin(self) -> DesktopState:
        if self.kind is not BackendKind.KDE:
            raise AppError(
                "Plugin installation is only available for the KDE Plasma backend right now."
            )
        kde.install_plugin()
        return self.state()


def current_desktop_name() -> str:
    """The session name from the environment, or ``Unknown``."""
    for variable in ("XDG_CURRENT_DESKTOP", "DESKTOP_SESSION"):
        value = os.environ.get(variable, "")
        if value.strip():
            return value
    return "Unknown"


def detect_backend() -> DesktopBackend:
    session = current_desktop_name()
    lowered = session.lower()
    if "kde" in lowered or "plasma" in lowered:
        return DesktopBackend(BackendKind.KDE, session)
    return DesktopBackend(BackendKind.UNSUPPORTED, session)