# lyric/providers/registry.py
from __future__ import annotations

import logging
from typing import Callable

from db.models import Config
from lyric.providers.base import LyricProvider
from lyric.providers.local import LocalProvider
from lyric.providers.lrclib import LrcLibProvider

logger = logging.getLogger(__name__)

DEFAULT_PROVIDERS = "local,lrclib"

_FACTORIES: dict[str, Callable[[Config], LyricProvider]] = {
    "local": lambda config: LocalProvider(),
    "lrclib": lambda config: LrcLibProvider(base_url=config.lrclib_instance),
}


def parse_provider_names(names: str | None) -> list[str]:
    raw = names if names is not None else DEFAULT_PROVIDERS
    out: list[str] = []
    for name in raw.split(","):
        name = name.strip().lower()
        if name and name not in out:
            out.append(name)
    return out


def build_providers(names: str | None, config: Config) -> list[LyricProvider]:
    """Provider set in priority order; unknown names are skipped."""
    providers: list[LyricProvider] = []
    for name in parse_provider_names(names):
        factory = _FACTORIES.get(name)
        if factory is None:
            logger.warning("unknown lyric provider %r, skipped", name)
            continue
        providers.append(factory(config))
    return providers
