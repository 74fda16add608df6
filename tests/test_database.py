from db.database import CURRENT_DB_VERSION, get_config, initialize_database, set_config
from db.models import Config


def test_fresh_database_has_defaults(tmp_path):
    db = initialize_database(str(tmp_path))
    assert db.execute("PRAGMA user_version").fetchone()[0] == CURRENT_DB_VERSION
    assert get_config(db) == Config()
    db.close()


def test_config_round_trip(tmp_path):
    db = initialize_database(str(tmp_path))
    config = Config(
        cache_lyrics=False,
        player_id="mpd",
        providers="lrclib",
        lrclib_instance="https://lrclib.example",
        poll_interval_ms=500,
        refetch_shortcut="Ctrl+R",
        search_shortcut="",
        remove_shortcut="Del",
    )
    set_config(db, config)
    db.close()

    db = initialize_database(str(tmp_path))
    assert get_config(db) == config
    assert db.execute("SELECT COUNT(*) FROM config_data").fetchone()[0] == 1
    db.close()


def test_upgrade_from_version_1(tmp_path):
    import sqlite3

    path = tmp_path / "db.sqlite3"
    db = sqlite3.connect(path)
    db.executescript("""
        PRAGMA user_version=1;
        CREATE TABLE config_data (
            id INTEGER PRIMARY KEY,
            cache_lyrics BOOLEAN,
            player_id TEXT,
            providers TEXT,
            lrclib_instance TEXT,
            poll_interval_ms INTEGER
        );
        INSERT INTO config_data (cache_lyrics, player_id, providers, lrclib_instance, poll_interval_ms)
        VALUES (0, 'vlc', 'local', 'https://lrclib.net', 300);
    """)
    db.commit()
    db.close()

    db = initialize_database(str(tmp_path))
    config = get_config(db)
    assert config.player_id == "vlc"
    assert not config.cache_lyrics
    assert config.refetch_shortcut == "F5"
    assert config.connect_shortcut == "Ctrl+P"
    db.close()


def test_chosen_player_is_remembered(tmp_path):
    db = initialize_database(str(tmp_path))
    config = get_config(db)
    config.player_id = "spotify"
    set_config(db, config)

    assert get_config(db).player_id == "spotify"
    assert get_config(db).connect_shortcut == "Ctrl+P"
    db.close()
