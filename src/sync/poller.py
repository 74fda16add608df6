# sync/poller.py
from __future__ import annotations

import logging

from PySide6.QtCore import QObject, QTimer

from core.errors import PlayerGone
from core.state import PlaybackState

logger = logging.getLogger(__name__)


class PlaybackPoller(QObject):
    """
    Timer-driven trigger source: reads the connected player's metadata and
    position and feeds changes into the engine.
    """

    def __init__(self, state: PlaybackState, engine, interval_ms: int = 200, parent=None):
        super().__init__(parent)
        self.state = state
        self.engine = engine

        self._timer = QTimer(self)
        self._timer.setInterval(max(10, int(interval_ms)))
        self._timer.timeout.connect(self.poll)

    def start(self) -> None:
        self._timer.start()

    def stop(self) -> None:
        self._timer.stop()

    def poll(self) -> None:
        player = self.state.player
        if not self.state.connected:
            return

        try:
            meta = player.metadata()
            if meta != self.state.track.metainfo:
                self.engine.track_changed(meta)
            # the engine may have dropped the player meanwhile
            if self.state.player is player:
                self.engine.update_position(player.position_ms())
        except PlayerGone as e:
            logger.warning("player went away: %s", e)
            self.engine.disconnect_player()
