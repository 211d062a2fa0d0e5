"""Show-level structure: tours, multi-night venue runs, and set ordering.

All functions take plain track-row dicts (the ingestion shape) keyed by
``show_date`` as an ISO ``YYYY-MM-DD`` string, and return lookups keyed
by that date.
"""

import datetime
import re
from dataclasses import dataclass, field

from phangraphs.config import MAX_NAMED_RUN_NIGHT, SET_ORDER, TOUR_GAP_DAYS


@dataclass
class Tour:
    tour_id: str
    tour_label: str
    start_date: str
    end_date: str
    shows: list = field(default_factory=list)  # sorted ISO dates

    @property
    def show_count(self):
        return len(self.shows)


@dataclass(frozen=True)
class VenueRun:
    venue: str
    run_length: int
    night: int  # 1-based position within the run

    @property
    def run_position(self):
        """Primary run-position label for a show in this run."""
        if self.run_length <= 1:
            return "none"
        if self.night == 1:
            return "opener"
        if self.night == self.run_length:
            return "closer"
        if self.night <= MAX_NAMED_RUN_NIGHT:
            return f"n{self.night}"
        return "none"


def _to_date(iso):
    return datetime.date.fromisoformat(iso)


def _slug(label):
    return re.sub(r"[^a-z0-9]+", "-", label.lower()).strip("-")


def _month_to_season(month):
    if month <= 3:
        return "Winter"
    if month <= 5:
        return "Spring"
    if month <= 8:
        return "Summer"
    if month <= 11:
        return "Fall"
    return "Winter"


def season_label(start_date, end_date):
    """Label a tour by the season of its first show.

    A tour touching Dec 28-31 at either end is a NYE run and is
    labelled by its starting year ("NYE 2023" even if it ends 1/1/2024).
    """
    start, end = _to_date(start_date), _to_date(end_date)
    if (end.month == 12 and end.day >= 28) or (start.month == 12 and start.day >= 28):
        return f"NYE {start.year}"
    return f"{_month_to_season(start.month)} {start.year}"


def identify_tours(rows, gap_days=TOUR_GAP_DAYS):
    """Group distinct show dates into tours split on gaps > gap_days.

    Labels that occur more than once are numbered in date order:
    "Summer 2023 (1)", "Summer 2023 (2)".
    """
    dates = sorted({r["show_date"] for r in rows})
    if not dates:
        return []

    groups = [[dates[0]]]
    for prev, cur in zip(dates, dates[1:]):
        if (_to_date(cur) - _to_date(prev)).days > gap_days:
            groups.append([cur])
        else:
            groups[-1].append(cur)

    labels = [season_label(g[0], g[-1]) for g in groups]
    totals = {}
    for label in labels:
        totals[label] = totals.get(label, 0) + 1

    tours = []
    seen = {}
    for shows, label in zip(groups, labels):
        if totals[label] > 1:
            seen[label] = seen.get(label, 0) + 1
            label = f"{label} ({seen[label]})"
        tours.append(Tour(
            tour_id=_slug(label),
            tour_label=label,
            start_date=shows[0],
            end_date=shows[-1],
            shows=shows,
        ))
    return tours


def build_tour_date_map(tours):
    """Return dict: show_date → Tour."""
    return {date: tour for tour in tours for date in tour.shows}


def classify_venue_runs(rows):
    """Detect multi-night runs: consecutive calendar days at one venue.

    Returns dict: show_date → VenueRun.  A one-off show is a run of length 1.
    """
    show_venues = {}
    for r in rows:
        show_venues.setdefault(r["show_date"], r["venue"])
    if not show_venues:
        return {}

    ordered = sorted(show_venues.items())
    runs = [[ordered[0]]]
    for date, venue in ordered[1:]:
        prev_date, prev_venue = runs[-1][-1]
        if venue == prev_venue and (_to_date(date) - _to_date(prev_date)).days == 1:
            runs[-1].append((date, venue))
        else:
            runs.append([(date, venue)])

    result = {}
    for run in runs:
        for i, (date, venue) in enumerate(run):
            result[date] = VenueRun(venue=venue, run_length=len(run), night=i + 1)
    return result


def show_boundaries(rows):
    """Return dict: show_date → (first (set, position), last (set, position)).

    Sets are ordered Set 1 → Encore 2, positions ascending within a set,
    so the first slot is the show opener and the last the show closer.
    """
    bounds = {}
    for r in rows:
        slot = (SET_ORDER[r["set_name"]], r["position"])
        lo_hi = bounds.get(r["show_date"])
        if lo_hi is None:
            bounds[r["show_date"]] = (slot, slot)
        else:
            bounds[r["show_date"]] = (min(lo_hi[0], slot), max(lo_hi[1], slot))
    return bounds
