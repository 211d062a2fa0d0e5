"""Record Store: turn raw track rows into immutable PerformanceRecords.

Raw rows arrive from the ingestion side in the setlist table shape:
    song_name, show_date, set_name, position, duration_ms, likes,
    is_jamchart, jam_notes, venue, location

Malformed rows are dropped and counted rather than raised, so one bad
scrape never blocks a leaderboard.  Tours, venue runs, and show
opener/closer flags are derived here from the valid rows.
"""

import datetime
import itertools
from collections.abc import Mapping

from phangraphs.config import SET_LABELS, SET_ORDER
from phangraphs.location import parse_location
from phangraphs.models import PerformanceRecord
from phangraphs.shows import (
    build_tour_date_map,
    classify_venue_runs,
    identify_tours,
    show_boundaries,
)

_versions = itertools.count(1)

_TRUE_FLAGS = ("1", "true", "t", "yes", "y")
_FALSE_FLAGS = ("0", "false", "f", "no", "n", "")


def _as_count(value):
    """Coerce a non-negative integer field; None means 0.  Raises ValueError."""
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"non-integer count {value!r}")
        value = int(value)
    value = int(value)
    if value < 0:
        raise ValueError(f"negative count {value}")
    return value


def _as_flag(value):
    """Coerce a yes/no field given as 0/1 or text.  Raises ValueError."""
    if value is None:
        return False
    if isinstance(value, (bool, int, float)):
        if value not in (0, 1):
            raise ValueError(f"bad flag {value!r}")
        return bool(value)
    text = str(value).strip().lower()
    if text in _TRUE_FLAGS:
        return True
    if text in _FALSE_FLAGS:
        return False
    raise ValueError(f"bad flag {value!r}")


def clean_row(row):
    """Validate and normalise one raw row.  Returns a dict or None if malformed."""
    if not isinstance(row, Mapping):
        return None
    try:
        song_name = (row.get("song_name") or "").strip()
        show_date = datetime.date.fromisoformat(str(row["show_date"])[:10])
        set_name = row.get("set_name")
        position = int(row["position"])
        duration_ms = _as_count(row.get("duration_ms"))
        likes = _as_count(row.get("likes"))
        is_jamchart = _as_flag(row.get("is_jamchart"))
        venue = (row.get("venue") or "").strip()
        location = (row.get("location") or "").strip()
    except (AttributeError, KeyError, TypeError, ValueError):
        return None
    if not song_name or set_name not in SET_LABELS or position < 1:
        return None
    return {
        "song_name": song_name,
        "show_date": show_date.isoformat(),
        "set_name": set_name,
        "position": position,
        "duration_ms": duration_ms,
        "likes": likes,
        "is_jamchart": is_jamchart,
        "jam_notes": str(row.get("jam_notes") or ""),
        "venue": venue,
        "location": location,
    }


def build_records(rows, verbose=False):
    """Build PerformanceRecords from raw rows.

    Returns (records, dropped_count).  Records keep the input order of
    the valid rows.  A repeated (song, date, set, position) slot keeps
    the first occurrence and counts the rest as dropped.
    """
    cleaned = []
    seen_slots = set()
    dropped = 0
    for row in rows:
        c = clean_row(row)
        if c is None:
            dropped += 1
            continue
        slot = (c["song_name"], c["show_date"], c["set_name"], c["position"])
        if slot in seen_slots:
            dropped += 1
            continue
        seen_slots.add(slot)
        cleaned.append(c)

    tour_map = build_tour_date_map(identify_tours(cleaned))
    run_map = classify_venue_runs(cleaned)
    bounds = show_boundaries(cleaned)

    records = []
    for c in cleaned:
        date = c["show_date"]
        tour = tour_map[date]
        run = run_map[date]
        first, last = bounds[date]
        slot = (SET_ORDER[c["set_name"]], c["position"])
        _, state, country = parse_location(c["location"])
        records.append(PerformanceRecord(
            song_name=c["song_name"],
            show_date=datetime.date.fromisoformat(date),
            tour_id=tour.tour_id,
            tour_label=tour.tour_label,
            set_label=c["set_name"],
            position=c["position"],
            venue=c["venue"],
            state=state,
            country=country,
            is_opener=slot == first,
            is_closer=slot == last,
            run_position=run.run_position,
            run_night=run.night,
            run_length=run.run_length,
            duration_ms=c["duration_ms"],
            likes=c["likes"],
            is_jamchart=c["is_jamchart"],
            jam_notes=c["jam_notes"],
        ))

    if verbose:
        print(f"  Loaded {len(records)} performances from {len(tour_map)} shows")
        if dropped:
            print(f"  Dropped {dropped} malformed rows")
    return records, dropped


class RecordStore:
    """Immutable snapshot of performance records for one session.

    ``version`` identifies the snapshot for cache keys; building a new
    store (a reload) is the only way to get a new version.
    """

    def __init__(self, records, dropped_count=0):
        self._records = tuple(records)
        self.dropped_count = dropped_count
        self.version = next(_versions)

    @classmethod
    def from_rows(cls, rows, verbose=False):
        records, dropped = build_records(rows, verbose=verbose)
        return cls(records, dropped)

    @property
    def records(self):
        return self._records

    def __len__(self):
        return len(self._records)

    def __iter__(self):
        return iter(self._records)
