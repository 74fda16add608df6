import argparse
import logging
import os
import sys
from pathlib import Path

from PySide6.QtCore import QStandardPaths
from PySide6.QtWidgets import QApplication

ROOT = Path(__file__).resolve().parent
SRC_DIR = ROOT / "src"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from core.state import PlaybackState
from db.database import get_config, initialize_database, set_config
from lyric.providers.registry import build_providers
from lyric.resolver import LyricResolver
from player.player import PlayerctlFinder, list_players
from sync.actions import ActionDispatcher, bind_shortcut, register_sigusr1_disconnect
from sync.engine import SyncEngine
from sync.poller import PlaybackPoller
from ui.lyric_window import LyricWindow

logger = logging.getLogger("lyricsync")


def get_app_data_dir() -> str:
    base = QStandardPaths.writableLocation(QStandardPaths.AppDataLocation)
    os.makedirs(base, exist_ok=True)
    return base


def get_cache_dir() -> str:
    base = QStandardPaths.writableLocation(QStandardPaths.CacheLocation)
    return os.path.join(base, "lyrics")


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="lyricsync", description="Show synced lyrics for the playing track")
    parser.add_argument("--player", help="MPRIS player to connect to (e.g. spotify)")
    parser.add_argument("--no-cache", action="store_true", help="do not read or write the lyric cache")
    parser.add_argument("--cache-dir", help="lyric cache directory")
    parser.add_argument("--list-players", action="store_true", help="list running MPRIS players and exit")
    parser.add_argument("--debug", action="store_true", help="verbose logging")
    return parser.parse_args(argv)


def setup_logging(debug: bool) -> None:
    level = logging.DEBUG if debug or os.getenv("LYRICSYNC_DEBUG") == "1" else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )
    # chatty at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def main() -> int:
    qt_app = QApplication(sys.argv)
    qt_app.setApplicationName("lyricsync")
    args = parse_args(qt_app.arguments()[1:])
    setup_logging(args.debug)

    if args.list_players:
        for name in list_players():
            print(name)
        return 0

    db = initialize_database(get_app_data_dir())
    config = get_config(db)

    cache_root = None
    if config.cache_lyrics and not args.no_cache:
        cache_root = args.cache_dir or get_cache_dir()
        logger.info("lyric cache: %s", cache_root)

    state = PlaybackState()
    resolver = LyricResolver(build_providers(config.providers, config))
    engine = SyncEngine(state, resolver, PlayerctlFinder(), cache_root=cache_root)

    window = LyricWindow()

    def choose_player():
        player_id = window.choose_player(list_players(), config.player_id)
        if player_id and player_id != config.player_id:
            config.player_id = player_id
            set_config(db, config)
        return player_id

    actions = ActionDispatcher(engine, player_chooser=choose_player)
    engine.attach_presenter(window)
    engine.lineChanged.connect(window.on_line_changed)
    state.notification.connect(window.on_notification)
    engine.searchRequested.connect(window.on_search_requested)
    window.searchSubmitted.connect(engine.search_with_query)

    bind_shortcut(window, actions, "refetch", config.refetch_shortcut)
    bind_shortcut(window, actions, "search", config.search_shortcut)
    bind_shortcut(window, actions, "remove", config.remove_shortcut)
    bind_shortcut(window, actions, "connect", config.connect_shortcut)

    register_sigusr1_disconnect(actions, parent=qt_app)

    poller = PlaybackPoller(state, engine, interval_ms=config.poll_interval_ms)
    poller.start()

    player_id = args.player or config.player_id
    if player_id:
        actions.dispatch("connect", player_id)

    window.show()
    return qt_app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
