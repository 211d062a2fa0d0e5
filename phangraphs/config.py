"""Constants, weights, and thresholds for the PhanGraphs engine."""

import datetime
import os

# ── Paths ──────────────────────────────────────────────────────────────
DB_DIR = os.path.expanduser("~/.phangraphs")
DB_PATH = os.path.join(DB_DIR, "phangraphs.db")

# ── Year bounds ───────────────────────────────────────────────────────
# Default filter range covers every representable year
YEAR_MIN = datetime.MINYEAR
YEAR_MAX = datetime.MAXYEAR

# ── Set labels ────────────────────────────────────────────────────────
# Show order; is_opener / is_closer are derived by walking sets in this order.
SET_LABELS = ("Set 1", "Set 2", "Set 3", "Encore", "Encore 2")
SET_ORDER = {label: i for i, label in enumerate(SET_LABELS)}

# setSplit filter value → set label it selects.  opener/closer are positional.
SET_SPLIT_LABELS = {
    "set1": "Set 1",
    "set2": "Set 2",
    "set3": "Set 3",
    "encore": "Encore",
}
SET_SPLITS = ("all", *SET_SPLIT_LABELS, "opener", "closer")

# ── Location ──────────────────────────────────────────────────────────
US_COUNTRY = "USA"
COUNTRY_FILTERS = ("all", "us", "international")

# ── Runs and tours ────────────────────────────────────────────────────
MAX_NAMED_RUN_NIGHT = 5
RUN_POSITIONS = ("all", "none", "opener", "n1", "n2", "n3", "n4", "n5", "closer")
TOUR_GAP_DAYS = 5  # a gap longer than this starts a new tour

# ── Aggregation ───────────────────────────────────────────────────────
AGGREGATIONS = ("career", "by_year", "by_tour")

# ── JIS (Jam Intensity Score) ─────────────────────────────────────────
JIS_DURATION_WEIGHT = 0.25
JIS_CURATION_WEIGHT = 0.55
JIS_APPROVAL_WEIGHT = 0.20
DURATION_Z_CLAMP = 3.0
NEUTRAL_SIGNAL = 50.0
MIN_KNOWN_DURATIONS = 2  # per song, before the duration signal is used

# ── WAR ───────────────────────────────────────────────────────────────
# JIS points per WAR unit.  20 is roughly one population std dev of JIS
# across the 2009+ catalogue, so 1 WAR ~ one sigma above replacement.
WAR_SCALE_FACTOR = 20.0
MIN_BASELINE_PERFORMANCES = 2
MIN_BASELINE_SONGS = 2

# ── Counting stats ────────────────────────────────────────────────────
MS_20_MIN = 20 * 60 * 1000
MS_25_MIN = 25 * 60 * 1000
BUSTOUT_GAP = 25        # shows between plays
MEGA_BUSTOUT_GAP = 100

# ── Output ────────────────────────────────────────────────────────────
ROUND_DIGITS = 2
RATE_ROUND_DIGITS = 3
LEADERBOARD_CACHE_SIZE = 32
