"""WAR Aggregator: group scored performances into units and value them.

Units are keyed per aggregation mode (song, song x year, song x tour).
Each mode also names a baseline bucket (whole population for career,
year for by_year, tour for by_tour), and the replacement level is the
mean JIS of that bucket:

    war(p)      = max(0, JIS(p) - replacement[bucket(p)]) / WAR_SCALE_FACTOR
    career_war  = sum of war(p) over the unit

Baselines are computed in one pass over every scored performance before
any unit is valued.  A bucket with fewer than two performances or fewer
than two distinct songs has no meaningful replacement level, so its
performances are worth 0 WAR.

Counting stats that depend on show order (bustouts, gaps, plays per
show) are measured against the distinct shows of the baseline bucket.
"""

import statistics

from phangraphs.config import (
    BUSTOUT_GAP,
    MEGA_BUSTOUT_GAP,
    MIN_BASELINE_PERFORMANCES,
    MIN_BASELINE_SONGS,
    MS_20_MIN,
    MS_25_MIN,
    WAR_SCALE_FACTOR,
)
from phangraphs.models import (
    AggregationKey,
    AggregationUnit,
    CountingStats,
    JISStats,
    RateStats,
    WARStats,
)


def _career_key(r):
    return AggregationKey(r.song_name)


def _year_key(r):
    return AggregationKey(r.song_name, year=r.year)


def _tour_key(r):
    return AggregationKey(r.song_name, tour_id=r.tour_id, tour_label=r.tour_label)


# mode → (unit key, baseline bucket)
AGGREGATION_STRATEGIES = {
    "career": (_career_key, lambda r: None),
    "by_year": (_year_key, lambda r: r.year),
    "by_tour": (_tour_key, lambda r: r.tour_id),
}


def compute_baselines(scored, aggregation):
    """Return dict: bucket → replacement JIS, or None for a degenerate bucket."""
    _, bucket_of = AGGREGATION_STRATEGIES[aggregation]
    buckets = {}
    for p in scored:
        buckets.setdefault(bucket_of(p.record), []).append(p)

    baselines = {}
    for bucket, perfs in buckets.items():
        songs = {p.record.song_name for p in perfs}
        if len(perfs) < MIN_BASELINE_PERFORMANCES or len(songs) < MIN_BASELINE_SONGS:
            baselines[bucket] = None
        else:
            baselines[bucket] = statistics.mean(p.jis for p in perfs)
    return baselines


def performance_war(jis, replacement, scale=WAR_SCALE_FACTOR):
    """WAR for one performance; 0 when there is no replacement level."""
    if replacement is None:
        return 0.0
    return max(0.0, jis - replacement) / scale


def _show_indexes(scored, bucket_of):
    """Return dict: bucket → {show_date: ordinal} over distinct shows."""
    dates = {}
    for p in scored:
        dates.setdefault(bucket_of(p.record), set()).add(p.record.show_date)
    return {b: {d: i for i, d in enumerate(sorted(ds))} for b, ds in dates.items()}


def _ratio(num, den):
    return num / den if den else 0.0


def _counting_and_rates(perfs, show_index):
    records = [p.record for p in perfs]
    times_played = len(records)
    jamchart_count = sum(1 for r in records if r.is_jamchart)
    show_dates = sorted({r.show_date for r in records}, key=show_index.get)

    gaps = [show_index[b] - show_index[a] for a, b in zip(show_dates, show_dates[1:])]
    bustouts = sum(1 for g in gaps if g >= BUSTOUT_GAP)

    durations = [r.duration_ms for r in records]
    known = [d for d in durations if d > 0]
    times_20 = sum(1 for d in durations if d >= MS_20_MIN)
    times_25 = sum(1 for d in durations if d >= MS_25_MIN)
    total_shows = len(show_index)

    counting = CountingStats(
        times_played=times_played,
        jamchart_count=jamchart_count,
        shows_appeared=len(show_dates),
        times_20_min=times_20,
        times_25_min=times_25,
        total_minutes=round(sum(known) / 60000, 1),
        bustout_count=bustouts,
        mega_bustout_count=sum(1 for g in gaps if g >= MEGA_BUSTOUT_GAP),
        max_shows_between_plays=max(gaps, default=0),
        avg_shows_between_plays=round(statistics.mean(gaps), 1) if gaps else 0.0,
    )
    rates = RateStats(
        jam_rate=_ratio(jamchart_count, times_played),
        rate_20_plus=_ratio(times_20, times_played),
        rate_25_plus=_ratio(times_25, times_played),
        bustout_rate=_ratio(bustouts, times_played),
        plays_per_show=_ratio(times_played, total_shows),
        jam_per_show=_ratio(jamchart_count, total_shows),
        avg_length_ms=round(statistics.mean(known)) if known else 0,
        median_length_ms=round(statistics.median(known)) if known else 0,
    )
    return counting, rates


def _jis_stats(perfs):
    scores = [p.jis for p in perfs]
    return JISStats(
        avg_jis=statistics.mean(scores),
        peak_jis=max(scores),
        jis_volatility=statistics.pstdev(scores) if len(scores) >= 2 else 0.0,
    )


def _war_stats(perfs, baselines, bucket_of, shows_appeared):
    war_by_year = {}
    career = 0.0
    for p in perfs:
        war = performance_war(p.jis, baselines[bucket_of(p.record)])
        war_by_year[p.record.year] = war_by_year.get(p.record.year, 0.0) + war
        career += war

    # Earliest year wins ties; all-zero years still name a peak
    peak_year = None
    for year in sorted(war_by_year):
        if peak_year is None or war_by_year[year] > war_by_year[peak_year]:
            peak_year = year

    return WARStats(
        career_war=career,
        war_per_play=career / len(perfs),
        war_per_show=career / shows_appeared,
        war_by_year=war_by_year,
        peak_war_year=peak_year,
    )


def aggregate(scored, spec, verbose=False):
    """Group scored performances by spec.aggregation and derive unit metrics.

    Returns AggregationUnits in first-seen order of their key.
    """
    key_of, bucket_of = AGGREGATION_STRATEGIES[spec.aggregation]

    # Baseline pass: every replacement level is fixed before any WAR.
    if len(scored) < MIN_BASELINE_PERFORMANCES:
        baselines = {bucket_of(p.record): None for p in scored}
    else:
        baselines = compute_baselines(scored, spec.aggregation)
    show_indexes = _show_indexes(scored, bucket_of)

    groups = {}
    for p in scored:
        groups.setdefault(key_of(p.record), []).append(p)

    units = []
    for key, perfs in groups.items():
        # Every performance in a unit shares one baseline bucket
        show_index = show_indexes[bucket_of(perfs[0].record)]
        counting, rates = _counting_and_rates(perfs, show_index)
        units.append(AggregationUnit(
            key=key,
            counting=counting,
            rates=rates,
            jis=_jis_stats(perfs),
            war=_war_stats(perfs, baselines, bucket_of, counting.shows_appeared),
        ))

    if verbose:
        degenerate = sum(1 for b in baselines.values() if b is None)
        print(f"  Aggregated {len(scored)} performances into {len(units)} "
              f"{spec.aggregation} units ({len(baselines)} baselines, "
              f"{degenerate} degenerate)")
    return units
