"""Record, filter, and leaderboard types.

Everything here is immutable: records are loaded once per session, and
filter specs and leaderboard entries are rebuilt for every query.
"""

import datetime
from dataclasses import dataclass, field
from typing import NamedTuple, Optional

from phangraphs.config import (
    AGGREGATIONS,
    COUNTRY_FILTERS,
    RUN_POSITIONS,
    SET_SPLITS,
    YEAR_MAX,
    YEAR_MIN,
)


@dataclass(frozen=True)
class PerformanceRecord:
    """One song performance at one show."""
    song_name: str
    show_date: datetime.date
    tour_id: str
    tour_label: str
    set_label: str          # one of config.SET_LABELS
    position: int           # 1-based, within its set
    venue: str
    country: str
    state: Optional[str] = None
    is_opener: bool = False     # first song of the show
    is_closer: bool = False     # last song of the show
    run_position: str = "none"  # none / opener / n2..n5 / closer
    run_night: int = 1
    run_length: int = 1
    duration_ms: int = 0        # 0 = unknown
    likes: int = 0
    is_jamchart: bool = False
    jam_notes: str = ""

    @property
    def year(self):
        return self.show_date.year


@dataclass(frozen=True)
class FilterSpec:
    """Request-scoped query: record filters, unit thresholds, and granularity."""
    year_range: tuple = (YEAR_MIN, YEAR_MAX)
    set_split: str = "all"
    min_times_played: int = 0
    min_shows_appeared: int = 0
    min_jamchart_count: int = 0
    min_total_minutes: float = 0
    venue: Optional[str] = None
    state: Optional[str] = None
    country: str = "all"
    run_position: str = "all"
    aggregation: str = "career"

    def __post_init__(self):
        start, end = self.year_range
        if start > end:
            raise ValueError(f"year_range start {start} is after end {end}")
        # Normalise lists (e.g. from argparse nargs=2) so specs stay hashable
        object.__setattr__(self, "year_range", (int(start), int(end)))
        for name, allowed in (
            ("set_split", SET_SPLITS),
            ("country", COUNTRY_FILTERS),
            ("run_position", RUN_POSITIONS),
            ("aggregation", AGGREGATIONS),
        ):
            value = getattr(self, name)
            if value not in allowed:
                raise ValueError(
                    f"{name}={value!r} is not one of {', '.join(allowed)}"
                )


class AggregationKey(NamedTuple):
    song_name: str
    year: Optional[int] = None
    tour_id: Optional[str] = None
    tour_label: Optional[str] = None


@dataclass(frozen=True)
class ScoredPerformance:
    record: PerformanceRecord
    jis: float
    duration_signal: float
    curation_signal: float
    approval_signal: float


@dataclass(frozen=True)
class CountingStats:
    times_played: int
    jamchart_count: int
    shows_appeared: int
    times_20_min: int = 0
    times_25_min: int = 0
    total_minutes: float = 0.0
    bustout_count: int = 0
    mega_bustout_count: int = 0
    max_shows_between_plays: int = 0
    avg_shows_between_plays: float = 0.0


@dataclass(frozen=True)
class RateStats:
    jam_rate: float
    rate_20_plus: float = 0.0
    rate_25_plus: float = 0.0
    bustout_rate: float = 0.0
    plays_per_show: float = 0.0
    jam_per_show: float = 0.0
    avg_length_ms: int = 0
    median_length_ms: int = 0


@dataclass(frozen=True)
class JISStats:
    avg_jis: float
    peak_jis: float
    jis_volatility: float


@dataclass(frozen=True)
class WARStats:
    career_war: float
    war_per_play: float
    war_per_show: float
    war_by_year: dict = field(default_factory=dict)
    peak_war_year: Optional[int] = None


@dataclass(frozen=True)
class AggregationUnit:
    """Metrics for one AggregationKey, before thresholds are applied."""
    key: AggregationKey
    counting: CountingStats
    rates: RateStats
    jis: JISStats
    war: WARStats


@dataclass(frozen=True)
class LeaderboardEntry:
    song_name: str
    aggregation_key: AggregationKey
    counting: CountingStats
    rates: RateStats
    jis: JISStats
    war: WARStats


class Leaderboard(NamedTuple):
    entries: list
    dropped_count: int = 0
    qualified_count: int = 0
