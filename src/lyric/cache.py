# lyric/cache.py
from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from core.errors import CacheIoError
from core.models import LineTimestamp, LyricContent, LyricNone, LyricPair, PlainText, TrackMeta
from core.utils import prepare_input

logger = logging.getLogger(__name__)

CACHE_FORMAT_VERSION = 1


def get_cache_path(meta: TrackMeta, cache_root: str | os.PathLike) -> Path:
    """
    Deterministic cache location for a track.

    Title, album and artists are normalized first so that cosmetic
    differences between players ("Song (Remastered)" vs "song remastered")
    land on the same entry.
    """
    key = "\x1f".join([
        prepare_input(meta.title or ""),
        prepare_input(meta.album or ""),
        "\x1e".join(prepare_input(a) for a in (meta.artists or ())),
    ])
    digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
    return Path(cache_root) / digest[:2] / f"{digest}.json"


# -------------------------------
# CODEC
# -------------------------------
def _dump_content(content: LyricContent) -> dict[str, Any]:
    if isinstance(content, LineTimestamp):
        return {"kind": "line_timestamp", "lines": [[t, text] for t, text in content.lines]}
    if isinstance(content, PlainText):
        return {"kind": "plain", "text": content.text}
    return {"kind": "none"}


def _load_content(raw: dict[str, Any]) -> LyricContent:
    kind = raw.get("kind")
    if kind == "line_timestamp":
        return LineTimestamp(tuple((int(t), str(text)) for t, text in raw.get("lines", [])))
    if kind == "plain":
        return PlainText(str(raw.get("text", "")))
    if kind == "none":
        return LyricNone()
    raise ValueError(f"unknown lyric kind: {kind!r}")


def dump_lyric_pair(pair: LyricPair) -> str:
    return json.dumps({
        "version": CACHE_FORMAT_VERSION,
        "origin": _dump_content(pair.origin),
        "translation": _dump_content(pair.translation),
    }, ensure_ascii=False)


def load_lyric_pair(blob: str) -> LyricPair:
    data = json.loads(blob)
    if data.get("version") != CACHE_FORMAT_VERSION:
        raise ValueError(f"unsupported cache version: {data.get('version')!r}")
    return LyricPair(_load_content(data["origin"]), _load_content(data["translation"]))


# -------------------------------
# I/O
# -------------------------------
def update_lyric_cache(path: str | os.PathLike, pair: LyricPair) -> None:
    path = Path(path)
    blob = dump_lyric_pair(pair)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        # write next to the target, then swap in, so readers never see half a file
        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(blob)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise
    except OSError as e:
        raise CacheIoError(f"cannot write lyric cache {path}: {e}") from e
    logger.debug("lyric cache updated: %s", path)


def load_lyric_cache(path: str | os.PathLike) -> Optional[LyricPair]:
    path = Path(path)
    try:
        blob = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.warning("cannot read lyric cache %s: %s", path, e)
        return None

    try:
        return load_lyric_pair(blob)
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        logger.warning("ignoring corrupt lyric cache %s: %s", path, e)
        return None
