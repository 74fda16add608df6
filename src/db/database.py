import logging
import os
import sqlite3

from db.models import Config

logger = logging.getLogger(__name__)

CURRENT_DB_VERSION = 3


def initialize_database(app_data_dir: str) -> sqlite3.Connection:
    os.makedirs(app_data_dir, exist_ok=True)
    sqlite_path = os.path.join(app_data_dir, "db.sqlite3")
    logger.info("Database file path: %s", sqlite_path)

    db = sqlite3.connect(sqlite_path)
    db.row_factory = sqlite3.Row

    existing_version = db.execute("PRAGMA user_version").fetchone()[0]
    upgrade_database_if_needed(db, existing_version)

    return db


def upgrade_database_if_needed(db: sqlite3.Connection, existing_version: int):
    logger.debug("Existing database version: %s", existing_version)

    if existing_version >= CURRENT_DB_VERSION:
        return

    if existing_version <= 0:
        logger.info("Migrate database version 1...")
        db.execute("PRAGMA user_version=1")
        db.executescript("""
            CREATE TABLE config_data (
                id INTEGER PRIMARY KEY,
                cache_lyrics BOOLEAN,
                player_id TEXT,
                providers TEXT,
                lrclib_instance TEXT,
                poll_interval_ms INTEGER
            );
            INSERT INTO config_data (cache_lyrics, player_id, providers, lrclib_instance, poll_interval_ms)
            VALUES (1, '', 'local,lrclib', 'https://lrclib.net', 200);
        """)
        db.commit()

    if existing_version <= 1:
        logger.info("Migrate database version 2...")
        db.execute("PRAGMA user_version=2")
        db.executescript("""
            ALTER TABLE config_data ADD COLUMN refetch_shortcut TEXT DEFAULT 'F5';
            ALTER TABLE config_data ADD COLUMN search_shortcut TEXT DEFAULT 'Ctrl+F';
            ALTER TABLE config_data ADD COLUMN remove_shortcut TEXT DEFAULT 'Ctrl+Delete';
        """)
        db.commit()

    if existing_version <= 2:
        logger.info("Migrate database version 3...")
        db.execute("PRAGMA user_version=3")
        db.execute("ALTER TABLE config_data ADD COLUMN connect_shortcut TEXT DEFAULT 'Ctrl+P'")
        db.commit()


# -------------------------------
# CONFIG
# -------------------------------
def get_config(db: sqlite3.Connection) -> Config:
    row = db.execute("""
        SELECT cache_lyrics,
               player_id,
               providers,
               lrclib_instance,
               poll_interval_ms,
               refetch_shortcut,
               search_shortcut,
               remove_shortcut,
               connect_shortcut
        FROM config_data
        LIMIT 1
    """).fetchone()
    return Config.from_row(row)


def set_config(db: sqlite3.Connection, config: Config):
    db.execute("""
        UPDATE config_data
        SET cache_lyrics = ?,
            player_id = ?,
            providers = ?,
            lrclib_instance = ?,
            poll_interval_ms = ?,
            refetch_shortcut = ?,
            search_shortcut = ?,
            remove_shortcut = ?,
            connect_shortcut = ?
        WHERE 1
    """, (
        config.cache_lyrics,
        config.player_id,
        config.providers,
        config.lrclib_instance,
        config.poll_interval_ms,
        config.refetch_shortcut,
        config.search_shortcut,
        config.remove_shortcut,
        config.connect_shortcut,
    ))
    db.commit()
