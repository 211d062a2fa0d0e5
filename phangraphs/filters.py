"""Filter Engine: project records onto the qualified subset for a FilterSpec.

Record filters (year, set split, venue, location, run position) run here.
Minimum-count thresholds gate aggregation units instead, since "times
played" only means something after grouping; see unit_qualifies().
"""

from phangraphs.config import SET_SPLIT_LABELS, US_COUNTRY


def matches_set_split(record, set_split):
    if set_split == "all":
        return True
    if set_split == "opener":
        return record.is_opener
    if set_split == "closer":
        return record.is_closer
    return record.set_label == SET_SPLIT_LABELS[set_split]


def matches_country(record, country):
    if country == "us":
        return record.country == US_COUNTRY
    if country == "international":
        return record.country != US_COUNTRY
    return True


def matches_run_position(record, run_position):
    """Match the record's primary run label, or a role it also holds.

    Night 1 of a multi-night run is both "opener" and "n1"; the final
    night of a three-night run is both "closer" and "n3".  "none" only
    selects shows outside a multi-night run, whatever the night's label.
    """
    if run_position == "all":
        return True
    if run_position == "none":
        return record.run_length <= 1
    if run_position == record.run_position:
        return True
    if record.run_length <= 1:
        return False
    if run_position == "opener":
        return record.run_night == 1
    if run_position == "closer":
        return record.run_night == record.run_length
    if run_position.startswith("n") and run_position[1:].isdigit():
        return record.run_night == int(run_position[1:])
    return False


def record_passes(record, spec):
    start, end = spec.year_range
    return (
        start <= record.year <= end
        and matches_set_split(record, spec.set_split)
        and (spec.venue is None or record.venue == spec.venue)
        and (spec.state is None or record.state == spec.state)
        and matches_country(record, spec.country)
        and matches_run_position(record, spec.run_position)
    )


def filter_records(records, spec):
    """Return the records that pass spec, in input order."""
    return [r for r in records if record_passes(r, spec)]


def unit_qualifies(unit, spec):
    """Apply the minimum-count thresholds to an aggregation unit."""
    c = unit.counting
    return (
        c.times_played >= spec.min_times_played
        and c.jamchart_count >= spec.min_jamchart_count
        and c.shows_appeared >= spec.min_shows_appeared
        and c.total_minutes >= spec.min_total_minutes
    )
