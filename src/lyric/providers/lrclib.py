from __future__ import annotations

import logging
from typing import Optional

import requests

from core.errors import ProviderError
from core.lrc import parse_lrc
from core.models import LyricNone, LyricPair, PlainText, SearchQuery

logger = logging.getLogger(__name__)

DEFAULT_INSTANCE = "https://lrclib.net"


def _strip_empty(s: str | None) -> str | None:
    if not s:
        return None
    s = s.strip()
    return s or None


class LrcLibProvider:
    name = "lrclib"

    def __init__(self, base_url: str = DEFAULT_INSTANCE, user_agent: str = "lyricsync/0.1", timeout: float = 15):
        self.base_url = (base_url or DEFAULT_INSTANCE).rstrip("/")
        if self.base_url.endswith("/api"):
            self.base_url = self.base_url[: -len("/api")]
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    def get_by_metadata(self, query: SearchQuery) -> Optional[dict]:
        # GET /api/get?track_name=&artist_name=&album_name=&duration=
        params = {
            "track_name": query.title,
            "artist_name": query.artist_text(),
        }
        if query.album:
            params["album_name"] = query.album
        if query.length_ms and query.length_ms > 0:
            params["duration"] = int(round(query.length_ms / 1000))

        r = self.session.get(f"{self.base_url}/api/get", params=params, timeout=self.timeout)
        if r.status_code == 404:
            return None
        r.raise_for_status()
        return r.json()

    def search_text(self, text: str, limit: int = 10) -> list[dict]:
        # GET /api/search?q=...
        r = self.session.get(f"{self.base_url}/api/search", params={"q": text}, timeout=self.timeout)
        r.raise_for_status()
        items = r.json()
        return items[:limit] if isinstance(items, list) else []

    def search(self, query: SearchQuery) -> LyricPair:
        try:
            data = None
            if query.title and query.artists and not query.free_text_only:
                data = self.get_by_metadata(query)
            if not data and query.text:
                items = self.search_text(query.text)
                data = next((it for it in items if it.get("syncedLyrics")), items[0] if items else None)
        except (requests.RequestException, ValueError) as e:
            raise ProviderError(self.name, str(e)) from e

        if not data:
            logger.debug("lrclib: nothing for %r", query.text)
            return LyricPair.empty()
        return self._to_pair(data)

    @staticmethod
    def _to_pair(data: dict) -> LyricPair:
        synced = _strip_empty(data.get("syncedLyrics"))
        plain = _strip_empty(data.get("plainLyrics"))
        instrumental = bool(data.get("instrumental", False)) or (synced == "[au: instrumental]")
        if instrumental:
            return LyricPair.empty()

        if synced:
            lines = parse_lrc(synced)
            if not lines.is_empty():
                return LyricPair(lines, LyricNone())
        if plain:
            return LyricPair(PlainText(plain), LyricNone())
        return LyricPair.empty()
