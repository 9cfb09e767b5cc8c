# wallpaper-runtime

A Linux runtime for Wallpaper Engine workshop content. It detects your desktop
session, builds and installs the KDE Plasma wallpaper plugin, keeps its own
SteamCMD installation, searches the Steam Workshop, downloads wallpapers with
SteamCMD and applies them, and keeps a history of the last 25 wallpapers you
applied.

KDE Plasma is the only desktop backend today. Any other session is detected
and reported as unsupported; installing the plugin there raises an error.

## Installation

```
pip install .
```

Installing the KDE plugin needs `git` and `cmake` on your `PATH`; the plugin
is cloned, configured and built with them.

## Command line

The `wallpaper-runtime` command wraps the runtime's actions and prints the
result as JSON. Errors are printed to stderr and the command exits with 1.

```
wallpaper-runtime dashboard          # setup state and history
wallpaper-runtime check              # same report, meant as a re-check
wallpaper-runtime install-plugin     # build and install the desktop plugin
wallpaper-runtime install-steamcmd   # download SteamCMD into the app data directory
wallpaper-runtime search [QUERY]     # trending items, or a search
wallpaper-runtime history            # recently applied wallpapers
wallpaper-runtime install ID [--title T] [--preview URL] [--creator NAME]
```

A typical session: `check`, then `install-steamcmd` and `install-plugin` if
either is missing, then `search`, then `install` with a workshop id. When
`install` is not given a title, preview or creator, it tries to read them from
the item's workshop page; if that fails the history entry simply lacks them.

## Library use

```python
from wallpaper_runtime import app

state = app.dashboard_state()
print(state.ready, state.message)

for item in app.fetch_workshop("rain"):
    print(item.id, item.title, item.creator, item.tags)

response = app.install_wallpaper(2813557391, None, None, None)
print(response.message)
```

The actions return dataclasses (`DashboardState`, `ActionResponse`,
`WorkshopItem`, `HistoryItem`); most have a `to_dict()` method. Every failure
(network errors, missing tools, a failed SteamCMD or build run, an unreadable
history file) is raised as `wallpaper_runtime.history.AppError` with a readable
message.

The workshop parsers work on HTML text you already have:

```python
from wallpaper_runtime.workshop import build_browse_url, parse_workshop_html, parse_item_detail_html

url = build_browse_url("rain & neon")       # ...&searchtext=rain+%26+neon
items = parse_workshop_html(browse_page)     # at most 12 items
item = parse_item_detail_html(99, detail_page)  # None if the page has no title
```

Other pieces can be used on their own: `desktop.detect_backend()` and
`desktop.current_desktop_name()` (from `XDG_CURRENT_DESKTOP`, then
`DESKTOP_SESSION`, else `Unknown`), `steam.locate_steamcmd()` and
`steam.steam_state()`, `kde.plugin_state()`, and
`wallpaper.WallpaperManager().apply_wallpaper(id, path)`, which returns the path
of the file it wrote.

## Where data lives

The SteamCMD installation, its downloaded workshop content, the KDE plugin
checkout and `history.json` are kept in the application's local data directory
(`wallpaper_runtime.history.app_data_dir()`). SteamCMD is looked for there
first, then as `steamcmd` on the `PATH`, `/usr/games/steamcmd` and
`/usr/bin/steamcmd`. The active wallpaper is written to
`~/.config/wallpaper-engine-kde-plugin/current_wallpaper.json`, which the
plugin reads.

## What it does not do

There is no graphical window: the runtime is a command-line tool and a Python
library. It does not render wallpapers itself; it downloads them and points the
KDE plugin at them. Workshop metadata is scraped from the Steam pages' HTML, so
changes to those pages can make searches come back empty.

## Tests

```
pip install .[test]
pytest
```