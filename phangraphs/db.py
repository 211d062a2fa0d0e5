"""SQLite access to the setlist track table.

The table is owned and filled by the ingestion side; the engine only
reads it.  Computed leaderboards are never written back.
"""

import os
import sqlite3

from phangraphs.config import DB_PATH

SCHEMA = """
CREATE TABLE IF NOT EXISTS tracks (
    id          INTEGER PRIMARY KEY,
    song_name   TEXT NOT NULL,
    show_date   TEXT NOT NULL,
    set_name    TEXT,
    position    INTEGER,
    duration_ms INTEGER DEFAULT 0,
    likes       INTEGER DEFAULT 0,
    is_jamchart INTEGER DEFAULT 0,
    jam_notes   TEXT DEFAULT '',
    venue       TEXT,
    location    TEXT
);
CREATE INDEX IF NOT EXISTS idx_tracks_date ON tracks(show_date);
CREATE INDEX IF NOT EXISTS idx_tracks_song ON tracks(song_name);
"""

TRACK_COLUMNS = (
    "song_name", "show_date", "set_name", "position", "duration_ms",
    "likes", "is_jamchart", "jam_notes", "venue", "location",
)


def get_connection(db_path=None):
    """Get a SQLite connection, creating the DB and schema if needed."""
    path = db_path or DB_PATH
    if path != ":memory:":
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    conn.executescript(SCHEMA)
    return conn


def insert_track(conn, *, song_name, show_date, set_name, position,
                 duration_ms=0, likes=0, is_jamchart=False, jam_notes="",
                 venue="", location=""):
    cur = conn.execute(
        """INSERT INTO tracks
           (song_name, show_date, set_name, position, duration_ms, likes,
            is_jamchart, jam_notes, venue, location)
           VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        (song_name, show_date, set_name, position, duration_ms, likes,
         int(is_jamchart), jam_notes, venue, location),
    )
    return cur.lastrowid


def load_track_rows(conn):
    """Return every track as a plain dict, in show / set / position order."""
    rows = conn.execute(
        f"SELECT {', '.join(TRACK_COLUMNS)} FROM tracks "
        "ORDER BY show_date, set_name, position, id"
    ).fetchall()
    return [dict(r) for r in rows]


def db_stats(conn):
    """Return summary counts for the track table."""
    row = conn.execute("""
        SELECT COUNT(*)                                   AS tracks,
               COUNT(DISTINCT song_name)                  AS songs,
               COUNT(DISTINCT show_date)                  AS shows,
               SUM(CASE WHEN duration_ms > 0 THEN 1 ELSE 0 END) AS tracks_with_duration,
               SUM(CASE WHEN is_jamchart THEN 1 ELSE 0 END)      AS jamcharts,
               MIN(show_date)                             AS first_show,
               MAX(show_date)                             AS last_show
        FROM tracks
    """).fetchone()
    return {k: row[k] for k in row.keys()}
