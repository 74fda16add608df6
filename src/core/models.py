# core/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from core.utils import collapse


@dataclass(frozen=True)
class TrackMeta:
    title: str
    album: str | None = None
    artists: Tuple[str, ...] | None = None
    url: str | None = None           # xesam:url, file:// for local tracks
    length_ms: int | None = None


@dataclass(frozen=True)
class LyricNone:
    def is_empty(self) -> bool:
        return True


@dataclass(frozen=True)
class LineTimestamp:
    lines: Tuple[Tuple[int, str], ...] = ()   # (time_ms, text), sorted by time

    def is_empty(self) -> bool:
        return not self.lines

    def times(self) -> list[int]:
        return [t for t, _ in self.lines]


@dataclass(frozen=True)
class PlainText:
    text: str = ""

    def is_empty(self) -> bool:
        return not self.text.strip()


LyricContent = Union[LyricNone, LineTimestamp, PlainText]


@dataclass(frozen=True)
class LyricPair:
    origin: LyricContent = field(default_factory=LyricNone)
    translation: LyricContent = field(default_factory=LyricNone)

    @staticmethod
    def empty() -> "LyricPair":
        return LyricPair(LyricNone(), LyricNone())

    @staticmethod
    def removed() -> "LyricPair":
        # "this track has no lyric", remembered in the cache
        return LyricPair(LineTimestamp(()), LyricNone())

    def is_empty(self) -> bool:
        return self.origin.is_empty()


def default_search_query(album: str, artists: list[str] | tuple[str, ...], title: str) -> str:
    """
    Free-text query used by search-based providers and as the default text
    of the search command. Album only goes in when there is no artist to
    narrow the search.
    """
    parts = list(artists) if artists else [album]
    parts.append(title)
    return collapse(" ".join(parts))


@dataclass(frozen=True)
class SearchQuery:
    title: str
    album: str
    artists: Tuple[str, ...]
    url: Optional[str] = None
    length_ms: Optional[int] = None
    text: str = ""
    free_text_only: bool = False   # hand-edited search: skip metadata lookups

    @staticmethod
    def from_meta(meta: TrackMeta) -> "SearchQuery":
        album = meta.album or ""
        artists = tuple(meta.artists or ())
        title = meta.title or ""
        return SearchQuery(
            title=title,
            album=album,
            artists=artists,
            url=meta.url,
            length_ms=meta.length_ms,
            text=default_search_query(album, artists, title),
        )

    def artist_text(self) -> str:
        return ", ".join(self.artists)
