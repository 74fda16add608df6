# sync/actions.py
from __future__ import annotations

import logging
import signal
from typing import Any, Callable, Optional

from PySide6.QtCore import QObject, QTimer
from PySide6.QtGui import QKeySequence, QShortcut

from sync.engine import SyncEngine

logger = logging.getLogger(__name__)

ACTIONS = ("connect", "disconnect", "refetch", "remove", "search")


class ActionDispatcher:
    """
    Named user commands -> engine entry points.

    `connect` without a player id asks `player_chooser` (if any) which
    player to use, so a shortcut can reconnect after a disconnect.
    """

    def __init__(self, engine: SyncEngine, player_chooser: Optional[Callable[[], Optional[str]]] = None):
        self.engine = engine
        self.player_chooser = player_chooser
        self._handlers: dict[str, Callable[[Optional[Any]], Any]] = {
            "connect": self._connect,
            "disconnect": lambda _arg: self.engine.disconnect_player(),
            "refetch": lambda _arg: self.engine.refetch(),
            "remove": lambda _arg: self.engine.remove_lyric(),
            "search": lambda _arg: self.engine.search(),
        }

    def dispatch(self, name: str, arg: Optional[Any] = None) -> bool:
        handler = self._handlers.get(name)
        if handler is None:
            logger.warning("unknown action %r", name)
            return False
        handler(arg)
        return True

    def _connect(self, player_id: Optional[Any]):
        if player_id is None and self.player_chooser is not None:
            player_id = self.player_chooser()
            if not player_id:
                return
        if not isinstance(player_id, str) or not player_id:
            logger.warning("did not receive a string parameter for action 'connect'")
            return
        self.engine.connect_player(player_id)


def bind_shortcut(widget, dispatcher: ActionDispatcher, action: str, trigger: str) -> Optional[QShortcut]:
    if not trigger:
        return None
    seq = QKeySequence(trigger)
    if seq.isEmpty():
        logger.warning("invalid shortcut %r for %s", trigger, action)
        return None
    return QShortcut(seq, widget, activated=lambda: dispatcher.dispatch(action))


class SignalDisconnect(QObject):
    """
    SIGUSR1 -> the same disconnect path as the user action.

    Python only runs signal handlers between bytecodes, and a Qt loop idling
    in C++ never gets there, so a short keep-alive timer wakes the
    interpreter up.
    """

    def __init__(self, dispatcher: ActionDispatcher, signum: int = signal.SIGUSR1, wake_ms: int = 250, parent=None):
        super().__init__(parent)
        self.dispatcher = dispatcher
        self.signum = signum
        self._previous = signal.signal(signum, self._handle)

        self._keepalive = QTimer(self)
        self._keepalive.setInterval(wake_ms)
        self._keepalive.timeout.connect(lambda: None)
        self._keepalive.start()

    def _handle(self, signum, frame):
        # defer to the loop; never mutate state from inside the handler
        QTimer.singleShot(0, lambda: self.dispatcher.dispatch("disconnect"))

    def restore(self) -> None:
        self._keepalive.stop()
        signal.signal(self.signum, self._previous)


def register_sigusr1_disconnect(dispatcher: ActionDispatcher, parent=None) -> SignalDisconnect:
    return SignalDisconnect(dispatcher, parent=parent)
