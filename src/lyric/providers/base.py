# lyric/providers/base.py
from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.models import LyricPair, SearchQuery


@runtime_checkable
class LyricProvider(Protocol):
    """
    A source of lyrics. `search` returns an empty LyricPair when it has
    nothing for the query and raises ProviderError when it could not ask.
    """
    name: str

    def search(self, query: SearchQuery) -> LyricPair: ...
