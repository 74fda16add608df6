# src/player/player.py
from __future__ import annotations

import logging
import subprocess
from typing import Optional, Protocol

from core.errors import PlayerGone, PlayerNotFound
from core.models import TrackMeta

logger = logging.getLogger(__name__)

_FIELD_SEP = "\x1f"
_METADATA_FORMAT = _FIELD_SEP.join([
    "{{xesam:title}}",
    "{{xesam:album}}",
    "{{xesam:artist}}",
    "{{xesam:url}}",
    "{{mpris:length}}",
])


class PlayerHandle(Protocol):
    name: str

    def metadata(self) -> Optional[TrackMeta]: ...

    def position_ms(self) -> int: ...


class PlayerFinder(Protocol):
    def find_by_name(self, player_id: str) -> PlayerHandle: ...


def _run_playerctl(*args: str, timeout: float = 2.0) -> subprocess.CompletedProcess:
    return subprocess.run(
        ["playerctl", *args],
        capture_output=True,
        text=True,
        timeout=timeout,
    )


def parse_metadata(output: str) -> Optional[TrackMeta]:
    """Turn one line of `playerctl metadata --format` output into a TrackMeta."""
    fields = output.rstrip("\n").split(_FIELD_SEP)
    if len(fields) != 5:
        return None
    title, album, artist, url, length = (f.strip() for f in fields)
    if not title:
        return None

    # playerctl joins xesam:artist with ", "
    artists = tuple(a.strip() for a in artist.split(", ") if a.strip())
    length_ms = None
    if length.isdigit():
        length_ms = int(length) // 1000   # mpris:length is in microseconds

    return TrackMeta(
        title=title,
        album=album or None,
        artists=artists or None,
        url=url or None,
        length_ms=length_ms,
    )


class PlayerctlPlayer:
    """An MPRIS player reached through the `playerctl` command line tool."""

    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return f"PlayerctlPlayer({self.name!r})"

    def _query(self, *args: str) -> str:
        try:
            r = _run_playerctl("-p", self.name, *args)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise PlayerGone(f"{self.name}: {e}") from e
        if r.returncode != 0:
            err = (r.stderr or "").strip()
            if "No players found" in err or "No player could handle" in err:
                raise PlayerGone(f"{self.name}: {err}")
            # stopped players answer with a non-zero status and no metadata
            return ""
        return r.stdout

    def metadata(self) -> Optional[TrackMeta]:
        out = self._query("metadata", "--format", _METADATA_FORMAT)
        return parse_metadata(out) if out else None

    def position_ms(self) -> int:
        out = self._query("position").strip()
        try:
            return int(float(out) * 1000)
        except ValueError:
            return 0


def list_players() -> list[str]:
    try:
        r = _run_playerctl("-l")
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning("cannot list players: %s", e)
        return []
    if r.returncode != 0:
        return []
    return [line.strip() for line in r.stdout.splitlines() if line.strip()]


class PlayerctlFinder:
    def find_by_name(self, player_id: str) -> PlayerctlPlayer:
        """
        Accepts the bus name suffix exactly ("spotify") or with an instance
        suffix ("firefox" matches "firefox.instance_1_42").
        """
        if not player_id:
            raise PlayerNotFound(player_id, "empty player id")
        players = list_players()
        for name in players:
            if name == player_id:
                return PlayerctlPlayer(name)
        for name in players:
            if name.startswith(player_id + "."):
                return PlayerctlPlayer(name)
        raise PlayerNotFound(player_id)
