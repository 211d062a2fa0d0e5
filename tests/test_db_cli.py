"""Tests for the track table adapter and the CLI."""

import csv

import pytest

from phangraphs import db
from phangraphs.cli import main
from tests.conftest import make_row


def _fill(conn, rows):
    for row in rows:
        db.insert_track(conn, **row)
    conn.commit()


def _sample_rows():
    return [
        make_row(song_name="Tweezer", show_date="2019-07-12", position=1,
                 duration_ms=1200000, is_jamchart=1, likes=50),
        make_row(song_name="Tweezer", show_date="2019-07-13", position=1,
                 duration_ms=600000, likes=10),
        make_row(song_name="Fluffhead", show_date="2019-07-13", position=2,
                 duration_ms=800000, likes=5),
    ]


class TestDb:

    def test_load_returns_dicts(self, conn):
        _fill(conn, _sample_rows())
        rows = db.load_track_rows(conn)
        assert len(rows) == 3
        assert isinstance(rows[0], dict)
        assert set(rows[0]) == set(db.TRACK_COLUMNS)

    def test_stats(self, conn):
        _fill(conn, _sample_rows())
        stats = db.db_stats(conn)
        assert stats["tracks"] == 3
        assert stats["songs"] == 2
        assert stats["shows"] == 2
        assert stats["jamcharts"] == 1
        assert stats["first_show"] == "2019-07-12"

    def test_empty_stats(self, conn):
        assert db.db_stats(conn)["tracks"] == 0


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "phangraphs.db")
    conn = db.get_connection(path)
    _fill(conn, _sample_rows())
    conn.close()
    return path


class TestCli:

    def test_leaderboard(self, db_path, capsys):
        main(["--db", db_path, "leaderboard", "--min-played", "2"])
        out = capsys.readouterr().out
        assert "Tweezer" in out
        assert "Fluffhead" not in out

    def test_leaderboard_empty(self, db_path, capsys):
        main(["--db", db_path, "leaderboard", "--min-jamcharts", "5"])
        assert "No songs qualify" in capsys.readouterr().out

    def test_leaderboard_by_year(self, db_path, capsys):
        main(["--db", db_path, "leaderboard", "--by", "by_year"])
        assert "2019" in capsys.readouterr().out

    def test_export_csv(self, db_path, tmp_path):
        out = tmp_path / "board.csv"
        main(["--db", db_path, "export", "-o", str(out)])
        with open(out, newline="") as f:
            rows = list(csv.DictReader(f))
        assert {r["song_name"] for r in rows} == {"Tweezer", "Fluffhead"}
        assert "career_war" in rows[0]

    def test_status(self, db_path, capsys):
        main(["--db", db_path, "status"])
        out = capsys.readouterr().out
        assert "Tracks:             3" in out
        assert "Malformed rows:     0" in out

    def test_no_command_exits(self, capsys):
        with pytest.raises(SystemExit):
            main([])
