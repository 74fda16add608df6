from __future__ import annotations

from dataclasses import dataclass
import sqlite3


@dataclass
class Config:
    cache_lyrics: bool = True
    player_id: str = ""
    providers: str = "local,lrclib"
    lrclib_instance: str = "https://lrclib.net"
    poll_interval_ms: int = 200
    refetch_shortcut: str = "F5"
    search_shortcut: str = "Ctrl+F"
    remove_shortcut: str = "Ctrl+Delete"
    connect_shortcut: str = "Ctrl+P"

    @staticmethod
    def from_row(row: sqlite3.Row) -> "Config":
        return Config(
            cache_lyrics=bool(row["cache_lyrics"]),
            player_id=row["player_id"] or "",
            providers=row["providers"] or "",
            lrclib_instance=row["lrclib_instance"] or "https://lrclib.net",
            poll_interval_ms=int(row["poll_interval_ms"] or 200),
            refetch_shortcut=row["refetch_shortcut"] or "",
            search_shortcut=row["search_shortcut"] or "",
            remove_shortcut=row["remove_shortcut"] or "",
            connect_shortcut=row["connect_shortcut"] or "",
        )
