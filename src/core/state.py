from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QObject, Signal, Slot

from core.models import LyricPair, TrackMeta


@dataclass(frozen=True)
class Notify:
    message: str
    notify_type: str = "info"   # info/success/warn/error


@dataclass(frozen=True)
class TrackState:
    metainfo: Optional[TrackMeta] = None
    cache_path: Optional[Path] = None

    def __post_init__(self):
        if self.cache_path is not None and self.metainfo is None:
            raise ValueError("cache_path set without a track")


class PlaybackState(QObject):
    """
    Registers shared by every trigger: the connected player, the current
    track and the lyric on screen. Only the sync engine writes them, and
    only from callbacks running on the Qt event loop.
    """
    notification = Signal(object)   # emits Notify

    def __init__(self, parent=None):
        super().__init__(parent)
        self.player = None                  # PlayerHandle | None
        self.track = TrackState()
        self.lyric = LyricPair.empty()

    @property
    def connected(self) -> bool:
        return self.player is not None

    @Slot(str, str)
    def notify(self, message: str, notify_type: str = "info"):
        self.notification.emit(Notify(message=message, notify_type=notify_type))
