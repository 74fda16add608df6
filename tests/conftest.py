"""
Shared fixtures: a Qt application, fake player/provider/presenter
collaborators and a dispatcher that holds resolver jobs until the test
decides to finish them.
"""
import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtCore import QEventLoop, QObject, QTimer, Signal
from PySide6.QtWidgets import QApplication

from core.errors import LyricSyncError, PlayerGone, PlayerNotFound, ProviderError
from core.models import LyricPair
from core.state import PlaybackState
from lyric.resolver import LyricResolver, Resolution
from sync.engine import SyncEngine


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


def run_event_loop(ms: int = 100) -> None:
    """Spin the Qt loop for a while so queued signals and timers get delivered."""
    loop = QEventLoop()
    QTimer.singleShot(ms, loop.quit)
    loop.exec()


class ManualDispatcher(QObject):
    resolved = Signal(object, object)
    failed = Signal(object, str)

    def __init__(self):
        super().__init__()
        self.jobs = []

    def submit(self, request, job):
        self.jobs.append((request, job))

    def complete(self, index=0, pair=None):
        """Finish a job, either with a canned provider answer or by running it."""
        request, job = self.jobs.pop(index)
        if pair is not None:
            self.resolved.emit(request, Resolution(pair, cacheable=True))
            return request
        try:
            result = job(request)
        except LyricSyncError as e:
            self.failed.emit(request, str(e))
        else:
            self.resolved.emit(request, result)
        return request

    def fail(self, index=0, message="boom"):
        request, _job = self.jobs.pop(index)
        self.failed.emit(request, message)
        return request

    def complete_all(self):
        while self.jobs:
            self.complete(0)


class FakePlayer:
    def __init__(self, name="fake", meta=None, position=0):
        self.name = name
        self.meta = meta
        self.position = position
        self.gone = False

    def metadata(self):
        if self.gone:
            raise PlayerGone(self.name)
        return self.meta

    def position_ms(self):
        if self.gone:
            raise PlayerGone(self.name)
        return self.position


class FakeFinder:
    def __init__(self, *players):
        self.players = {p.name: p for p in players}
        self.calls = []

    def find_by_name(self, player_id):
        self.calls.append(player_id)
        try:
            return self.players[player_id]
        except KeyError:
            raise PlayerNotFound(player_id) from None


class FakeProvider:
    def __init__(self, name, result=None, error=None):
        self.name = name
        self.result = result if result is not None else LyricPair.empty()
        self.error = error
        self.queries = []

    def search(self, query):
        self.queries.append(query)
        if self.error:
            raise ProviderError(self.name, self.error)
        return self.result


class RecordingPresenter:
    def __init__(self):
        self.events = []

    def notify(self, pair):
        self.events.append(("notify", pair))

    def notify_cleared(self):
        self.events.append(("cleared", None))


@pytest.fixture
def dispatcher():
    return ManualDispatcher()


@pytest.fixture
def player():
    return FakePlayer("spotify")


@pytest.fixture
def provider():
    return FakeProvider("fake")


@pytest.fixture
def presenter():
    return RecordingPresenter()


@pytest.fixture
def state():
    return PlaybackState()


@pytest.fixture
def make_engine(state, dispatcher, player, provider, presenter, tmp_path):
    def _make(cache=True, providers=None):
        resolver = LyricResolver(providers if providers is not None else [provider])
        engine = SyncEngine(
            state,
            resolver,
            FakeFinder(player),
            cache_root=tmp_path / "cache" if cache else None,
            dispatcher=dispatcher,
        )
        engine.attach_presenter(presenter)
        return engine
    return _make


@pytest.fixture
def engine(make_engine):
    return make_engine()
