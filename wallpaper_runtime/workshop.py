"""Browsing the Steam workshop and scraping item metadata."""

from __future__ import annotations

import re
import time
from dataclasses import asdict, dataclass, field
from itertools import islice
from typing import Any
from urllib.parse import quote_plus

import requests

from .history import AppError
from .steam import WALLPAPER_ENGINE_APP_ID

USER_AGENT = "wallpaper-engine-linux/0.1"
BROWSE_URL = "https://steamcommunity.com/workshop/browse/"
DETAILS_URL = "https://steamcommunity.com/sharedfiles/filedetails/?id={id}"
ACCENT_PALETTE = ("#7ce2c3", "#ff7a59", "#6ea8fe", "#f6c666", "#d18fff", "#8bc34a")
_HTTP_TIMEOUT = 30
_MAX_ID = 2**64 - 1

_CONTAINER_RE = re.compile(
    r'<a[^>]*href="(?:https://steamcommunity\.com)?/sharedfiles/filedetails/\?id=(\d+)[^"]*"'
    r'[^>]*class="[^"]*workshopItem[^"]*"[^>]*>(.*?)</a>',
    re.S,
)
_TITLE_RE = re.compile(r'<div[^>]*class="workshopItemTitle"[^>]*>(.*?)</div>', re.S)
_AUTHOR_RE = re.compile(r'<div[^>]*class="workshopItemAuthorName"[^>]*>(.*?)</div>', re.S)
_SRC_RE = re.compile(r'src="([^"]+)"')
_SHORT_DESC_RE = re.compile(r'<div[^>]*class="workshopItemShortDesc"[^>]*>(.*?)</div>', re.S)
_SUBSCRIPTIONS_RE = re.compile(r'<span[^>]*class="subscriptions"[^>]*>(.*?)</span>', re.S)
_FAVORITED_RE = re.compile(r'<span[^>]*class="favorited"[^>]*>(.*?)</span>', re.S)
_FILE_SIZE_RE = re.compile(r'<span[^>]*class="fileSize"[^>]*>(.*?)</span>', re.S)

_DESCRIPTION_RE = re.compile(r'<div[^>]*class="workshopItemDescription"[^>]*>(.*?)</div>', re.S)
_PREVIEW_MAIN_RE = re.compile(r'<img[^>]*id="previewImageMain"[^>]*src="([^"]+)"', re.S)
_FRIEND_BLOCK_RE = re.compile(r'<div[^>]*class="friendBlockContent"[^>]*>\s*(.*?)<br', re.S)
_STAT_RIGHT_RE = re.compile(r'<div[^>]*class="detailsStatRight"[^>]*>(.*?)</div>', re.S)
_TAGS_RE = re.compile(r'<a[^>]*class="workshopTags"[^>]*>(.*?)</a>', re.S)

_TAG_RE = re.compile(r"<[^>]+>")


@dataclass
class WorkshopItem:
    id: int
    title: str
    creator: str
    tags: list[str]
    accent: str
    preview: str
    description: str
    file_size: str | None = None
    subscriptions: str | None = None
    favorited: str | None = None
    source: str = field(default="live")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _form_encode(value: str) -> str:
    return quote_plus(value, safe="*").replace("~", "%7E")


def build_browse_url(query: str) -> str:
    """The workshop browse URL for trending Wallpaper Engine items, optionally searched."""
    pairs = [
        ("appid", str(WALLPAPER_ENGINE_APP_ID)),
        ("browsesort", "trend"),
        ("section", "readytouseitems"),
        ("requiredtags[]", "Any"),
        ("actualsort", "trend"),
        ("p", "1"),
    ]
    trimmed = query.strip()
    if trimmed:
        pairs.append(("searchtext", trimmed))
    encoded = "&".join(f"{_form_encode(key)}={_form_encode(value)}" for key, value in pairs)
    return f"{BROWSE_URL}?{encoded}"


def strip_html(value: str) -> str:
    """Drop tags, decode the common entities and collapse whitespace."""
    stripped = _TAG_RE.sub(" ", value)
    for entity, text in (
        ("&amp;", "&"),
        ("&quot;", '"'),
        ("&#39;", "'"),
        ("&lt;", "<"),
        ("&gt;", ">"),
    ):
        stripped = stripped.replace(entity, text)
    return " ".join(stripped.split())


def infer_tags(description: str) -> list[str]:
    """Guess a few display tags from an item's description."""
    text = description.lower()
    tags = []
    if "anime" in text:
        tags.append("Anime")
    if "nature" in text or "forest" in text:
        tags.append("Nature")
    if "city" in text or "neon" in text:
        tags.append("City")
    if "abstract" in text or "ambient" in text:
        tags.append("Ambient")
    if not tags:
        tags.append("Workshop")
    if len(tags) < 2:
        tags.append("Wallpaper")
    return tags


def accent_from_id(wallpaper_id: int) -> str:
    return ACCENT_PALETTE[wallpaper_id % len(ACCENT_PALETTE)]


def unix_timestamp_now() -> str:
    return str(max(int(time.time()), 0))


def _capture(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text)
    return match.group(1) if match else None


def _stripped(pattern: re.Pattern[str], text: str) -> str | None:
    raw = _capture(pattern, text)
    return strip_html(raw) if raw is not None else None


def _nonempty(pattern: re.Pattern[str], text: str) -> str | None:
    return _stripped(pattern, text) or None


def _preview(pattern: re.Pattern[str], text: str) -> str:
    raw = _capture(pattern, text)
    return raw.replace("&amp;", "&") if raw is not None else ""


def _parse_id(digits: str) -> int | None:
    if not digits.isascii():
        return None
    value = int(digits)
    return value if value <= _MAX_ID else None


def parse_workshop_html(html: str) -> list[WorkshopItem]:
    """Extract up to twelve items from a workshop browse page."""
    items = []
    for match in islice(_CONTAINER_RE.finditer(html), 12):
        wallpaper_id = _parse_id(match.group(1))
        if wallpaper_id is None:
            continue
        body = match.group(2)
        title = _nonempty(_TITLE_RE, body)
        if title is None:
            continue
        description = _nonempty(_SHORT_DESC_RE, body) or "Steam workshop item"
        items.append(
            WorkshopItem(
                id=wallpaper_id,
                title=title,
                creator=_nonempty(_AUTHOR_RE, body) or "Steam Workshop",
                tags=infer_tags(description),
                accent=accent_from_id(wallpaper_id),
                preview=_preview(_SRC_RE, body),
                description=description,
                file_size=_nonempty(_FILE_SIZE_RE, body),
                subscriptions=_nonempty(_SUBSCRIPTIONS_RE, body),
                favorited=_nonempty(_FAVORITED_RE, body),
            )
        )
    return items


def parse_item_detail_html(wallpaper_id: int, html: str) -> WorkshopItem | None:
    """Extract an item from its detail page, or None when it has no title."""
    title = _stripped(_TITLE_RE, html)
    if title is None:
        return None

    description = _stripped(_DESCRIPTION_RE, html)
    if description is None:
        description = "Steam workshop item"
    creator = _stripped(_FRIEND_BLOCK_RE, html)
    if creator is None:
        creator = "Steam Workshop"

    tags = [
        text
        for text in (strip_html(m.group(1)) for m in islice(_TAGS_RE.finditer(html), 4))
        if text
    ]
    stats = [
        text
        for text in (strip_html(m.group(1)) for m in islice(_STAT_RIGHT_RE.finditer(html), 6))
        if text
    ]

    return WorkshopItem(
        id=wallpaper_id,
        title=title,
        creator=creator,
        tags=tags or infer_tags(description),
        accent=accent_from_id(wallpaper_id),
        preview=_preview(_PREVIEW_MAIN_RE, html),
        description=description,
        file_size=None,
        subscriptions=stats[0] if stats else None,
        favorited=stats[1] if len(stats) > 1 else None,
    )


def _fetch_text(url: str, fetch_context: str, read_context: str) -> str:
    try:
        response = requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=_HTTP_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise AppError(f"{fetch_context}: {exc}") from exc
    try:
        return response.text
    except requests.RequestException as exc:
        raise AppError(f"{read_context}: {exc}") from exc


def browse_workshop(query: str | None = None) -> list[WorkshopItem]:
    """Fetch trending (or searched) workshop items from Steam."""
    url = build_browse_url(query or "")
    html = _fetch_text(
        url,
        "Failed to fetch Steam workshop results",
        "Failed to read Steam workshop results",
    )
    items = parse_workshop_html(html)
    if not items:
        raise AppError("No workshop items were parsed from the Steam page.")
    return items


def fetch_workshop_item_details(wallpaper_id: int) -> WorkshopItem:
    html = _fetch_text(
        DETAILS_URL.format(id=wallpaper_id),
        "Failed to fetch workshop item details",
        "Failed to read workshop item details",
    )
    item = parse_item_detail_html(wallpaper_id, html)
    if item is None:
        raise AppError("The workshop item page loaded, but the metadata could not be parsed.")
    return item