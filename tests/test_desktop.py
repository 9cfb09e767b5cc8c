import pytest

from wallpaper_runtime import kde
from wallpaper_runtime.desktop import (
    BackendKind,
    DesktopBackend,
    current_desktop_name,
    detect_backend,
)
from wallpaper_runtime.history import AppError


@pytest.fixture
def env(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("PATH", str(bin_dir))
    monkeypatch.delenv("XDG_CURRENT_DESKTOP", raising=False)
    monkeypatch.delenv("DESKTOP_SESSION", raising=False)
    return monkeypatch


def test_current_desktop_prefers_xdg(env):
    env.setenv("XDG_CURRENT_DESKTOP", "KDE")
    env.setenv("DESKTOP_SESSION", "plasmawayland")
    assert current_desktop_name() == "KDE"


def test_current_desktop_falls_back_to_session(env):
    env.setenv("XDG_CURRENT_DESKTOP", "   ")
    env.setenv("DESKTOP_SESSION", "xfce")
    assert current_desktop_name() == "xfce"


def test_current_desktop_unknown(env):
    assert current_desktop_name() == "Unknown"


@pytest.mark.parametrize("session", ["KDE", "plasma", "X-KDE-Plasma"])
def test_detect_kde(env, session):
    env.setenv("XDG_CURRENT_DESKTOP", session)
    assert detect_backend().kind is BackendKind.KDE


def test_detect_unsupported_keeps_session(env):
    env.setenv("XDG_CURRENT_DESKTOP", "ubuntu:GNOME")
    backend = detect_backend()
    assert backend == DesktopBackend(BackendKind.UNSUPPORTED, "ubuntu:GNOME")


def test_unsupported_state(env):
    state = DesktopBackend(BackendKind.UNSUPPORTED, "GNOME").state()
    assert state.backend_id == "unsupported"
    assert state.supported is False
    assert state.plugin_workspace is None
    assert state.message == (
        "GNOME was detected. KDE Plasma is currently implemented, and the backend layer "
        "is ready for future non-GNOME targets."
    )


def test_unsupported_cannot_install_plugin(env):
    with pytest.raises(AppError, match="only available for the KDE Plasma backend"):
        DesktopBackend(BackendKind.UNSUPPORTED, "GNOME").install_plugin()


def test_kde_state_mirrors_plugin_state(env):
    env.setenv("XDG_CURRENT_DESKTOP", "KDE")
    state = detect_backend().state()
    assert state.backend_id == "kde"
    assert state.backend_name == "KDE Plasma"
    assert state.detected_session == "KDE"
    assert state.supported is True
    assert state.plugin_workspace == str(kde.plugin_workspace_dir())
    assert state.missing_tools == ["git", "cmake"]
    assert state.to_dict()["backend_id"] == "kde"


def test_kde_install_plugin_needs_tools(env):
    env.setenv("XDG_CURRENT_DESKTOP", "KDE")
    with pytest.raises(AppError, match="Missing required tools"):
        detect_backend().install_plugin()