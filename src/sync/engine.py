# sync/engine.py
from __future__ import annotations

import logging
import os
import weakref
from dataclasses import replace
from pathlib import Path
from typing import Optional, Protocol

from PySide6.QtCore import QObject, Signal, Slot

from core.errors import CacheIoError, ConnectError
from core.lrc import find_line_index
from core.models import LineTimestamp, LyricPair, SearchQuery, TrackMeta
from core.state import PlaybackState, TrackState
from lyric.cache import get_cache_path, update_lyric_cache
from lyric.resolver import LyricResolver, Resolution
from player.player import PlayerFinder
from sync.workers import ResolveRequest, ThreadedDispatcher

logger = logging.getLogger(__name__)


class LyricPresenter(Protocol):
    def notify(self, pair: LyricPair) -> None: ...

    def notify_cleared(self) -> None: ...


class SyncEngine(QObject):
    """
    Track/lyric state machine.

    Every public method is a trigger entry point and must be called from
    the Qt event loop. Resolver jobs run on worker threads; their results
    come back through the dispatcher and are applied, and written through
    to the cache, only if nothing has touched the lyric since the job was
    issued and the track is unchanged.
    """
    lineChanged = Signal(int)           # index into the current LineTimestamp, -1 = none
    searchRequested = Signal(object)    # default query text or None

    def __init__(
        self,
        state: PlaybackState,
        resolver: LyricResolver,
        player_finder: PlayerFinder,
        cache_root: str | os.PathLike | None = None,
        dispatcher=None,
        parent=None,
    ):
        super().__init__(parent)
        self.state = state
        self.resolver = resolver
        self.player_finder = player_finder
        self.cache_root = Path(cache_root) if cache_root is not None else None

        self._serial = 0
        self._line_index = -1
        self._presenter: Optional[weakref.ref] = None

        self._dispatcher = dispatcher if dispatcher is not None else ThreadedDispatcher(self)
        self._dispatcher.resolved.connect(self._on_resolved)
        self._dispatcher.failed.connect(self._on_resolve_failed)

    @property
    def cache_lyrics(self) -> bool:
        return self.cache_root is not None

    def attach_presenter(self, presenter: LyricPresenter) -> None:
        # the presentation layer owns itself; we only talk to it while it lives
        self._presenter = weakref.ref(presenter)

    # ----------------------------
    # Player connection
    # ----------------------------

    def connect_player(self, player_id: str) -> bool:
        try:
            player = self.player_finder.find_by_name(player_id)
        except ConnectError as e:
            logger.error("cannot connect to: %s (%s)", player_id, e)
            return False
        self.state.player = player
        logger.info("connected to player %s", getattr(player, "name", player_id))
        return True

    def disconnect_player(self) -> None:
        # track and lyric stay on screen until the next track change
        if self.state.player is not None:
            logger.info("disconnected from player %s", getattr(self.state.player, "name", "?"))
        self.state.player = None

    # ----------------------------
    # Track / lyric transitions
    # ----------------------------

    def track_changed(self, meta: Optional[TrackMeta]) -> None:
        if not self.state.connected:
            logger.debug("track change ignored while disconnected")
            return

        if meta is None:
            logger.info("no track playing")
            self.state.track = TrackState()
            self._serial += 1
            self._set_lyric(LyricPair.empty())
            self._notify_cleared()
            return

        cache_path = self._cache_path_for(meta)
        self.state.track = TrackState(metainfo=meta, cache_path=cache_path)
        logger.info("track changed: %s", meta.title)
        self._request(meta, cache_path, force_refetch=False)

    def refetch(self) -> None:
        meta = self.state.track.metainfo
        if meta is None:
            return
        cache_path = self.state.track.cache_path
        if cache_path is None and self.cache_lyrics:
            cache_path = self._cache_path_for(meta)
        logger.info("cleaned current lyric, refetching %s", meta.title)
        self._request(meta, cache_path, force_refetch=True)

    def remove_lyric(self) -> None:
        self._serial += 1
        pair = LyricPair.removed()
        self._set_lyric(pair)

        cache_path = self.state.track.cache_path
        if self.cache_lyrics and cache_path is not None:
            self._write_cache(cache_path, pair)

        self._notify_cleared()
        logger.info("removed lyric")

    def search(self) -> Optional[str]:
        meta = self.state.track.metainfo
        text = SearchQuery.from_meta(meta).text if meta is not None else None
        self.searchRequested.emit(text)
        return text

    def search_with_query(self, text: str) -> None:
        """Refetch the current track with a hand-edited search text."""
        meta = self.state.track.metainfo
        text = (text or "").strip()
        if meta is None or not text:
            return
        logger.info("searching lyric for %s with %r", meta.title, text)
        self._request(meta, self.state.track.cache_path, force_refetch=True, query_text=text)

    def update_position(self, position_ms: int) -> None:
        origin = self.state.lyric.origin
        if isinstance(origin, LineTimestamp) and origin.lines:
            idx = find_line_index(origin.lines, position_ms)
        else:
            idx = -1
        if idx != self._line_index:
            self._line_index = idx
            self.lineChanged.emit(idx)

    @property
    def line_index(self) -> int:
        return self._line_index

    # ----------------------------
    # Resolver plumbing
    # ----------------------------

    def _request(
        self,
        meta: TrackMeta,
        cache_path: Optional[Path],
        force_refetch: bool,
        query_text: Optional[str] = None,
    ) -> None:
        self._serial += 1
        request = ResolveRequest(
            meta=meta,
            cache_path=cache_path,
            force_refetch=force_refetch,
            serial=self._serial,
            query_text=query_text,
        )
        self._dispatcher.submit(request, self._run_resolve)

    def _run_resolve(self, request: ResolveRequest) -> Resolution:
        # worker thread: resolver only, no shared state
        query = None
        if request.query_text:
            query = replace(SearchQuery.from_meta(request.meta), text=request.query_text, free_text_only=True)
        return self.resolver.resolve(request.meta, request.cache_path, request.force_refetch, query=query)

    def _is_current(self, request: ResolveRequest) -> bool:
        return request.serial == self._serial and request.meta == self.state.track.metainfo

    @Slot(object, object)
    def _on_resolved(self, request: ResolveRequest, result: Resolution):
        if not self._is_current(request):
            logger.debug("discarding stale lyric for %r", request.meta.title)
            return
        if result.cacheable and request.cache_path is not None:
            self._write_cache(request.cache_path, result.pair)
        self._set_lyric(result.pair)
        self._notify(result.pair)

    @Slot(object, str)
    def _on_resolve_failed(self, request: ResolveRequest, message: str):
        if not self._is_current(request):
            return
        logger.warning("lyric resolve failed for %r: %s", request.meta.title, message)
        self.state.notify(f"Failed to fetch lyric: {message}", "warn")

    # ----------------------------
    # Helpers
    # ----------------------------

    def _cache_path_for(self, meta: TrackMeta) -> Optional[Path]:
        if self.cache_root is None:
            return None
        return get_cache_path(meta, self.cache_root)

    def _write_cache(self, path: Path, pair: LyricPair) -> None:
        try:
            update_lyric_cache(path, pair)
        except CacheIoError as e:
            logger.warning("%s", e)

    def _set_lyric(self, pair: LyricPair) -> None:
        self.state.lyric = pair
        self._line_index = -1

    def _presenter_ref(self) -> Optional[LyricPresenter]:
        return self._presenter() if self._presenter is not None else None

    def _notify(self, pair: LyricPair) -> None:
        presenter = self._presenter_ref()
        if presenter is not None:
            presenter.notify(pair)

    def _notify_cleared(self) -> None:
        presenter = self._presenter_ref()
        if presenter is not None:
            presenter.notify_cleared()
