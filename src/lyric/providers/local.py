# lyric/providers/local.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple
from urllib.parse import unquote, urlparse

from mutagen import File as MutagenFile, MutagenError
from mutagen.id3 import ID3, ID3NoHeaderError
from mutagen.flac import FLAC
from mutagen.oggvorbis import OggVorbis
from mutagen.oggopus import OggOpus
from mutagen.mp4 import MP4

from core.errors import ProviderError
from core.lrc import parse_lrc, strip_timestamps
from core.models import LyricNone, LyricPair, PlainText, SearchQuery

logger = logging.getLogger(__name__)

# Tag conventions shared with lrcget-style taggers:
#   synced LRC -> LYRICS, plain -> UNSYNCEDLYRICS
VORBIS_SYNCED_KEY = "LYRICS"
VORBIS_PLAIN_KEY = "UNSYNCEDLYRICS"
ID3_SYNCED_DESC = "LYRICS"
MP4_PLAIN_KEY = "\xa9lyr"
MP4_SYNCED_KEY = "----:com.lrclib:LYRICS"


def track_path_from_url(url: str | None) -> Optional[Path]:
    if not url:
        return None
    parsed = urlparse(url)
    if parsed.scheme != "file":
        return None
    return Path(unquote(parsed.path))


def _norm(s) -> Optional[str]:
    if s is None:
        return None
    s2 = str(s).strip()
    return s2 or None


def _first(values) -> Optional[str]:
    if isinstance(values, (list, tuple)):
        if not values:
            return None
        first = values[0]
        if isinstance(first, (bytes, bytearray)):
            return first.decode("utf-8", errors="replace")
        return str(first)
    if values is None:
        return None
    return str(values)


def read_sidecar(path: Path) -> Tuple[Optional[str], Optional[str]]:
    """(plain, synced) from song.txt / song.lrc next to the audio file."""
    txt_path = path.with_suffix(".txt")
    lrc_path = path.with_suffix(".lrc")

    txt = None
    lrc = None
    if txt_path.is_file():
        txt = txt_path.read_text(encoding="utf-8", errors="replace")
    if lrc_path.is_file():
        lrc = lrc_path.read_text(encoding="utf-8", errors="replace")
    return _norm(txt), _norm(lrc)


def read_embedded_lyrics(path: Path) -> Tuple[Optional[str], Optional[str]]:
    """
    Read embedded plain lyrics and synced LRC from an audio file.
    Returns (plain_or_None, synced_or_None).

      - MP3: USLT for plain, TXXX:LYRICS for synced.
      - FLAC/Ogg/Opus: UNSYNCEDLYRICS and LYRICS vorbis comments.
      - MP4/M4A: '\\xa9lyr' and the custom '----:com.lrclib:LYRICS' atom.
    """
    ext = path.suffix.lower()
    plain: Optional[str] = None
    synced: Optional[str] = None

    if ext == ".mp3":
        try:
            tags = ID3(path)
        except ID3NoHeaderError:
            return None, None
        uslt = tags.getall("USLT")
        if uslt:
            plain = getattr(uslt[0], "text", None)
        for frame in tags.getall("TXXX"):
            if getattr(frame, "desc", "") == ID3_SYNCED_DESC:
                synced = _first(getattr(frame, "text", None))
                break

    elif ext in {".flac", ".ogg", ".oga", ".opus"}:
        cls = {".flac": FLAC, ".opus": OggOpus}.get(ext, OggVorbis)
        audio = cls(path)
        plain = _first(audio.get(VORBIS_PLAIN_KEY))
        synced = _first(audio.get(VORBIS_SYNCED_KEY))

    elif ext in {".m4a", ".mp4"}:
        audio = MP4(path)
        plain = _first(audio.get(MP4_PLAIN_KEY))
        synced = _first(audio.get(MP4_SYNCED_KEY))

    else:
        audio = MutagenFile(path, easy=False)
        tags = getattr(audio, "tags", None) if audio is not None else None
        if tags:
            synced = _first(tags.get(VORBIS_SYNCED_KEY))
            plain = _first(tags.get(VORBIS_PLAIN_KEY))

    return _norm(plain), _norm(synced)


def _to_pair(plain: Optional[str], synced: Optional[str]) -> LyricPair:
    if synced:
        lines = parse_lrc(synced)
        if not lines.is_empty():
            return LyricPair(lines, LyricNone())
        if not plain:
            # untimed .lrc: show it as plain text
            plain = strip_timestamps(synced) or None
    if plain:
        return LyricPair(PlainText(plain), LyricNone())
    return LyricPair.empty()


class LocalProvider:
    """Lyrics stored with the track itself: sidecar files first, then tags."""
    name = "local"

    def search(self, query: SearchQuery) -> LyricPair:
        path = track_path_from_url(query.url)
        if query.free_text_only or path is None or not path.is_file():
            return LyricPair.empty()

        try:
            pair = _to_pair(*read_sidecar(path))
            if not pair.is_empty():
                logger.debug("local: sidecar lyric for %s", path)
                return pair
            pair = _to_pair(*read_embedded_lyrics(path))
        except (MutagenError, OSError) as e:
            raise ProviderError(self.name, f"{path}: {e}") from e

        if not pair.is_empty():
            logger.debug("local: embedded lyric for %s", path)
        return pair

