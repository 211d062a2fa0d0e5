"""Leaderboard Builder and the full query pipeline.

    records + FilterSpec
      → filter_records  (qualified performances)
      → score_records   (JIS per performance)
      → aggregate       (units, replacement baselines, WAR)
      → build           (thresholds, rounding)
      → Leaderboard(entries, dropped_count, qualified_count)

Entries come back unordered; sort_entries() gives the standard
descending-with-tiebreaks ordering for any numeric column.
"""

import copy
from collections import OrderedDict
from dataclasses import replace

from phangraphs.config import LEADERBOARD_CACHE_SIZE, RATE_ROUND_DIGITS, ROUND_DIGITS
from phangraphs.filters import filter_records, unit_qualifies
from phangraphs.jis import score_records
from phangraphs.models import Leaderboard, LeaderboardEntry
from phangraphs.war import aggregate

# Sortable column → getter on a LeaderboardEntry
SORT_FIELDS = {
    "career_war": lambda e: e.war.career_war,
    "war_per_play": lambda e: e.war.war_per_play,
    "war_per_show": lambda e: e.war.war_per_show,
    "avg_jis": lambda e: e.jis.avg_jis,
    "peak_jis": lambda e: e.jis.peak_jis,
    "jis_volatility": lambda e: e.jis.jis_volatility,
    "times_played": lambda e: e.counting.times_played,
    "shows_appeared": lambda e: e.counting.shows_appeared,
    "jamchart_count": lambda e: e.counting.jamchart_count,
    "jam_rate": lambda e: e.rates.jam_rate,
    "total_minutes": lambda e: e.counting.total_minutes,
}


def _round_rates(rates):
    return replace(
        rates,
        jam_rate=round(rates.jam_rate, RATE_ROUND_DIGITS),
        rate_20_plus=round(rates.rate_20_plus, RATE_ROUND_DIGITS),
        rate_25_plus=round(rates.rate_25_plus, RATE_ROUND_DIGITS),
        bustout_rate=round(rates.bustout_rate, RATE_ROUND_DIGITS),
        plays_per_show=round(rates.plays_per_show, RATE_ROUND_DIGITS),
        jam_per_show=round(rates.jam_per_show, RATE_ROUND_DIGITS),
    )


def _round_jis(jis):
    return replace(
        jis,
        avg_jis=round(jis.avg_jis, ROUND_DIGITS),
        peak_jis=round(jis.peak_jis, ROUND_DIGITS),
        jis_volatility=round(jis.jis_volatility, ROUND_DIGITS),
    )


def _round_war(war):
    return replace(
        war,
        career_war=round(war.career_war, ROUND_DIGITS),
        war_per_play=round(war.war_per_play, ROUND_DIGITS),
        war_per_show=round(war.war_per_show, ROUND_DIGITS),
        war_by_year={y: round(w, ROUND_DIGITS) for y, w in sorted(war.war_by_year.items())},
    )


def to_entry(unit):
    return LeaderboardEntry(
        song_name=unit.key.song_name,
        aggregation_key=unit.key,
        counting=unit.counting,
        rates=_round_rates(unit.rates),
        jis=_round_jis(unit.jis),
        war=_round_war(unit.war),
    )


def build(units, spec):
    """Drop units under the spec's thresholds and map the rest to entries."""
    return [to_entry(u) for u in units if unit_qualifies(u, spec)]


def sort_entries(entries, field="career_war", descending=True):
    """Sort by one numeric column; ties → jamchart_count desc, song_name asc."""
    if field not in SORT_FIELDS:
        raise ValueError(
            f"unknown sort field {field!r}; choose from {', '.join(SORT_FIELDS)}"
        )
    get = SORT_FIELDS[field]
    sign = -1 if descending else 1
    return sorted(
        entries,
        key=lambda e: (sign * get(e), -e.counting.jamchart_count, e.song_name,
                       e.aggregation_key.year or 0, e.aggregation_key.tour_id or ""),
    )


def compute_leaderboard(records, spec, dropped_count=None, verbose=False):
    """Run the full pipeline for one FilterSpec.

    ``records`` may be a RecordStore (its dropped_count is carried
    through) or any iterable of PerformanceRecords.
    """
    if dropped_count is None:
        dropped_count = getattr(records, "dropped_count", 0)
    qualified = filter_records(records, spec)
    if verbose:
        print(f"  {len(qualified)} performances qualify")
    if not qualified:
        return Leaderboard(entries=[], dropped_count=dropped_count, qualified_count=0)

    scored = score_records(qualified)
    units = aggregate(scored, spec, verbose=verbose)
    entries = build(units, spec)
    if verbose:
        print(f"  {len(entries)} of {len(units)} units pass thresholds")
    return Leaderboard(
        entries=entries,
        dropped_count=dropped_count,
        qualified_count=len(qualified),
    )


class LeaderboardCache:
    """Memoise leaderboards by (store version, FilterSpec).

    Stores are immutable, so a reload (new version) is the only
    invalidation needed.  Oldest entries are evicted first.  Callers get
    their own copy, so mutating a returned leaderboard never reaches the
    cached one.
    """

    def __init__(self, max_size=LEADERBOARD_CACHE_SIZE):
        self.max_size = max_size
        self._entries = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, store, spec, verbose=False):
        key = (store.version, spec)
        if key in self._entries:
            self.hits += 1
            return copy.deepcopy(self._entries[key])
        self.misses += 1
        result = compute_leaderboard(store, spec, verbose=verbose)
        self._entries[key] = result
        while len(self._entries) > self.max_size:
            self._entries.popitem(last=False)
        return copy.deepcopy(result)

    def __len__(self):
        return len(self._entries)
