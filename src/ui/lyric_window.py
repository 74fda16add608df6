# ui/lyric_window.py
from __future__ import annotations

from bisect import bisect_right
from typing import Optional

from PySide6.QtCore import Qt, QTimer, Signal, Slot
from PySide6.QtWidgets import QInputDialog, QLabel, QVBoxLayout, QWidget

from core.models import LineTimestamp, LyricPair, PlainText
from core.state import Notify


def _translation_at(pair: LyricPair, time_ms: int) -> str:
    tr = pair.translation
    if not isinstance(tr, LineTimestamp) or not tr.lines:
        return ""
    idx = bisect_right(tr.times(), time_ms) - 1
    return tr.lines[idx][1] if idx >= 0 else ""


class LyricWindow(QWidget):
    """
    Two-line lyric display: the active line, the next line below it and,
    when there is one, the translation of the active line.
    """
    searchSubmitted = Signal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Lyrics")
        self.resize(640, 140)

        self._pair: LyricPair = LyricPair.empty()

        root = QVBoxLayout(self)
        root.setContentsMargins(12, 12, 12, 12)
        root.setSpacing(4)

        self.current = QLabel("")
        self.current.setAlignment(Qt.AlignCenter)
        self.current.setWordWrap(True)
        self.current.setStyleSheet("font-weight: 650; font-size: 18px;")
        root.addWidget(self.current)

        self.translation = QLabel("")
        self.translation.setAlignment(Qt.AlignCenter)
        self.translation.setStyleSheet("font-size: 14px; color: rgba(128, 128, 128, 217);")
        root.addWidget(self.translation)

        self.next = QLabel("")
        self.next.setAlignment(Qt.AlignCenter)
        self.next.setStyleSheet("font-size: 14px; color: gray;")
        root.addWidget(self.next)

        self.status = QLabel("")
        self.status.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
        self.status.setStyleSheet("font-size: 11px; color: gray;")
        root.addWidget(self.status)

    # --- presenter interface ---

    def notify(self, pair: LyricPair) -> None:
        self._pair = pair
        origin = pair.origin
        self.translation.setText("")
        if pair.is_empty():
            self.current.setText("No lyric found")
            self.next.setText("")
        elif isinstance(origin, PlainText):
            lines = [l for l in origin.text.splitlines() if l.strip()]
            self.current.setText(lines[0] if lines else "")
            self.next.setText(lines[1] if len(lines) > 1 else "")
        else:
            self.current.setText("")
            self.next.setText(origin.lines[0][1])

    def notify_cleared(self) -> None:
        self._pair = LyricPair.empty()
        self.current.setText("")
        self.translation.setText("")
        self.next.setText("")

    # --- engine signals ---

    @Slot(int)
    def on_line_changed(self, index: int) -> None:
        origin = self._pair.origin
        if not isinstance(origin, LineTimestamp) or not origin.lines:
            return
        if index < 0:
            self.current.setText("")
            self.translation.setText("")
            self.next.setText(origin.lines[0][1])
            return

        time_ms, text = origin.lines[index]
        self.current.setText(text)
        self.translation.setText(_translation_at(self._pair, time_ms))
        nxt: Optional[str] = origin.lines[index + 1][1] if index + 1 < len(origin.lines) else ""
        self.next.setText(nxt)

    @Slot(object)
    def on_search_requested(self, default_query: Optional[str]) -> None:
        text, ok = QInputDialog.getText(self, "Search lyric", "Query:", text=default_query or "")
        if ok and text.strip():
            self.searchSubmitted.emit(text.strip())

    def choose_player(self, players: list[str], current: str = "") -> Optional[str]:
        if not players:
            self.on_notification(Notify("No running players", "warn"))
            return None
        index = players.index(current) if current in players else 0
        name, ok = QInputDialog.getItem(self, "Connect", "Player:", players, index, False)
        return name if ok and name else None

    @Slot(object)
    def on_notification(self, notify: Notify) -> None:
        self.status.setText(notify.message)
        QTimer.singleShot(5000, lambda: self.status.setText(""))
