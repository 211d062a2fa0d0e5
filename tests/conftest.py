"""Shared fixtures and factories for phangraphs tests."""

import datetime

import pytest

from phangraphs import db
from phangraphs.models import PerformanceRecord


@pytest.fixture
def conn():
    """Fresh in-memory database with schema applied."""
    c = db.get_connection(db_path=":memory:")
    yield c
    c.close()


def make_row(**overrides):
    """A raw track row in the ingestion shape."""
    row = {
        "song_name": "Tweezer",
        "show_date": "2019-07-12",
        "set_name": "Set 2",
        "position": 1,
        "duration_ms": 600000,
        "likes": 10,
        "is_jamchart": 0,
        "jam_notes": "",
        "venue": "Alpine Valley Music Theatre",
        "location": "East Troy, WI",
    }
    row.update(overrides)
    return row


def make_record(**overrides):
    """A PerformanceRecord with sensible defaults; show_date may be a string."""
    fields = {
        "song_name": "Tweezer",
        "show_date": datetime.date(2019, 7, 12),
        "tour_id": "summer-2019",
        "tour_label": "Summer 2019",
        "set_label": "Set 2",
        "position": 1,
        "venue": "Alpine Valley Music Theatre",
        "state": "WI",
        "country": "USA",
        "duration_ms": 600000,
        "likes": 10,
    }
    fields.update(overrides)
    if isinstance(fields["show_date"], str):
        fields["show_date"] = datetime.date.fromisoformat(fields["show_date"])
    return PerformanceRecord(**fields)


def scenario_records():
    """Two Tweezers and one Fluffhead, all 2019."""
    return [
        make_record(song_name="Tweezer", show_date="2019-07-12", position=1,
                    duration_ms=1200000, is_jamchart=True, likes=50),
        make_record(song_name="Tweezer", show_date="2019-07-13", position=1,
                    duration_ms=600000, is_jamchart=False, likes=10),
        make_record(song_name="Fluffhead", show_date="2019-07-13", position=2,
                    duration_ms=800000, is_jamchart=False, likes=5),
    ]
