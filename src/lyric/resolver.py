# lyric/resolver.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple

from core.errors import ProviderError, ResolveError
from core.models import LyricPair, SearchQuery, TrackMeta
from lyric.cache import load_lyric_cache
from lyric.providers.base import LyricProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    pair: LyricPair
    cacheable: bool = False   # fresh provider answer the caller may write through


class LyricResolver:
    """
    Decides cache vs providers vs nothing for one track.

    Runs on worker threads: it reads the cache directory and talks to the
    network, but never writes the cache nor touches the shared playback
    state. Writing through is left to the engine, once it knows the result
    is still wanted.
    """

    def __init__(self, providers: Sequence[LyricProvider]):
        self.providers = list(providers)

    def resolve(
        self,
        meta: TrackMeta,
        cache_path: Optional[Path],
        force_refetch: bool = False,
        query: Optional[SearchQuery] = None,
    ) -> Resolution:
        if not force_refetch and cache_path is not None:
            cached = load_lyric_cache(cache_path)
            if cached is not None:
                logger.info("lyric cache hit: %s", meta.title)
                return Resolution(cached)

        pair, answered = self._search(query or SearchQuery.from_meta(meta))

        if pair.is_empty() and not answered and force_refetch:
            # refetch keeps the prior lyric when no provider answered
            raise ResolveError(f"no provider answered for {meta.title!r}")

        # empty is only remembered when every provider really answered
        return Resolution(pair, cacheable=answered or not pair.is_empty())

    def _search(self, query: SearchQuery) -> Tuple[LyricPair, bool]:
        answered = True
        for provider in self.providers:
            try:
                pair = provider.search(query)
            except ProviderError as e:
                logger.warning("lyric provider failed: %s", e)
                answered = False
                continue

            if not pair.is_empty():
                logger.info("lyric found by %s for %r", provider.name, query.text)
                return pair, True
            logger.debug("%s: no lyric for %r", provider.name, query.text)

        logger.info("no lyric found for %r", query.text)
        return LyricPair.empty(), answered
