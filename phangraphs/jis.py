"""Jam Intensity Score (JIS): how standout a single performance was.

Each performance is judged against the other qualified performances of
the same song, not the whole catalogue.  A ten-minute version of a
two-minute song is exceptional; the same length for a fifteen-minute
jam vehicle is not.

    JIS = 0.25 * duration + 0.55 * curation + 0.20 * approval

    duration  robust z-score of duration_ms vs the song's median / MAD,
              clamped to [-3, 3] and rescaled to [0, 100]; 50 when the
              song has < 2 known durations or this one is unknown
    curation  100 if the performance is on the jamchart, else 0
    approval  mid-rank percentile of likes among the song's performances
"""

import numpy as np

from phangraphs.config import (
    DURATION_Z_CLAMP,
    JIS_APPROVAL_WEIGHT,
    JIS_CURATION_WEIGHT,
    JIS_DURATION_WEIGHT,
    MIN_KNOWN_DURATIONS,
    NEUTRAL_SIGNAL,
)
from phangraphs.models import ScoredPerformance


class SongBaseline:
    """Duration and likes distribution for one song's qualified performances."""

    def __init__(self, records):
        durations = np.array([r.duration_ms for r in records if r.duration_ms > 0],
                             dtype=float)
        self.known_durations = len(durations)
        if self.known_durations:
            self.median_ms = float(np.median(durations))
            self.mad_ms = float(np.median(np.abs(durations - self.median_ms)))
        else:
            self.median_ms = 0.0
            self.mad_ms = 0.0
        self.sorted_likes = np.sort(np.array([r.likes for r in records], dtype=float))

    def duration_signal(self, duration_ms):
        if duration_ms <= 0 or self.known_durations < MIN_KNOWN_DURATIONS:
            return NEUTRAL_SIGNAL
        delta = duration_ms - self.median_ms
        if self.mad_ms > 0:
            z = delta / self.mad_ms
        else:
            z = float(np.sign(delta)) * DURATION_Z_CLAMP
        z = max(-DURATION_Z_CLAMP, min(DURATION_Z_CLAMP, z))
        return 100.0 * (z + DURATION_Z_CLAMP) / (2 * DURATION_Z_CLAMP)

    def approval_signal(self, likes):
        n = len(self.sorted_likes)
        if n == 0:
            return NEUTRAL_SIGNAL
        below = np.searchsorted(self.sorted_likes, likes, side="left")
        not_above = np.searchsorted(self.sorted_likes, likes, side="right")
        return 100.0 * (below + 0.5 * (not_above - below)) / n


def curation_signal(record):
    return 100.0 if record.is_jamchart else 0.0


def combine(duration, curation, approval):
    return (JIS_DURATION_WEIGHT * duration
            + JIS_CURATION_WEIGHT * curation
            + JIS_APPROVAL_WEIGHT * approval)


def song_baselines(records):
    """Return dict: song_name → SongBaseline over the given records."""
    by_song = {}
    for r in records:
        by_song.setdefault(r.song_name, []).append(r)
    return {song: SongBaseline(recs) for song, recs in by_song.items()}


def score(record, baseline):
    """Score one record against its song's baseline."""
    d = baseline.duration_signal(record.duration_ms)
    c = curation_signal(record)
    a = float(baseline.approval_signal(record.likes))
    return ScoredPerformance(
        record=record,
        jis=combine(d, c, a),
        duration_signal=d,
        curation_signal=c,
        approval_signal=a,
    )


def score_records(records):
    """Score every qualified record; output order matches input order."""
    baselines = song_baselines(records)
    return [score(r, baselines[r.song_name]) for r in records]
