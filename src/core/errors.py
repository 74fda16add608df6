# core/errors.py
from __future__ import annotations


class LyricSyncError(Exception):
    pass


class ConnectError(LyricSyncError):
    pass


class PlayerNotFound(ConnectError):
    def __init__(self, player_id: str, reason: str = ""):
        self.player_id = player_id
        msg = f"player not found: {player_id}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class PlayerGone(LyricSyncError):
    """A connected player stopped answering (process exited, bus name released)."""


class ProviderError(LyricSyncError):
    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class ResolveError(LyricSyncError):
    pass


class CacheIoError(LyricSyncError):
    pass
