"""CLI with subcommands for the PhanGraphs leaderboard."""

import argparse
import csv
import sys

from phangraphs import db
from phangraphs.config import (
    AGGREGATIONS,
    COUNTRY_FILTERS,
    RUN_POSITIONS,
    SET_SPLITS,
    YEAR_MAX,
    YEAR_MIN,
)
from phangraphs.leaderboard import SORT_FIELDS, compute_leaderboard, sort_entries
from phangraphs.models import FilterSpec
from phangraphs.records import RecordStore


def _load_store(args):
    conn = db.get_connection(args.db)
    rows = db.load_track_rows(conn)
    conn.close()
    if not rows:
        print("No tracks in the database. Load setlist data first.")
        return None
    return RecordStore.from_rows(rows, verbose=args.verbose)


def _spec_from_args(args):
    return FilterSpec(
        year_range=(args.year_start, args.year_end),
        set_split=args.set_split,
        min_times_played=args.min_played,
        min_shows_appeared=args.min_shows,
        min_jamchart_count=args.min_jamcharts,
        min_total_minutes=args.min_minutes,
        venue=args.venue,
        state=args.state,
        country=args.country,
        run_position=args.run_position,
        aggregation=args.by,
    )


def _unit_label(entry):
    key = entry.aggregation_key
    if key.year is not None:
        return str(key.year)
    return key.tour_label or ""


def _query(args):
    store = _load_store(args)
    if store is None:
        return None
    try:
        spec = _spec_from_args(args)
    except ValueError as e:
        print(f"Invalid filter: {e}")
        sys.exit(2)
    board = compute_leaderboard(store, spec, verbose=args.verbose)
    entries = sort_entries(board.entries, args.sort, descending=not args.asc)
    return board, entries


def cmd_leaderboard(args):
    """Print the leaderboard as a table."""
    result = _query(args)
    if result is None:
        return
    board, entries = result
    if board.dropped_count:
        print(f"  Note: {board.dropped_count} malformed rows were skipped")
    if not entries:
        print("  No songs qualify under these filters.")
        return

    shown = entries[:args.top] if args.top else entries
    unit_col = args.by != "career"
    print(f"\n  {len(entries)} {'rows' if unit_col else 'songs'} qualified "
          f"({board.qualified_count} performances)")
    header = f"  {'#':>3} {'Song':<32}"
    if unit_col:
        header += f" {'Unit':<18}"
    header += (f" {'WAR':>6} {'WAR/P':>6} {'WAR/S':>6} {'AvgJIS':>7} "
               f"{'Peak':>6} {'Vol':>6} {'N':>4} {'JC':>4} {'JC%':>6} {'PeakYr':>6}")
    print(header)
    print("  " + "-" * (len(header) - 2))
    for i, e in enumerate(shown, 1):
        line = f"  {i:>3} {e.song_name[:32]:<32}"
        if unit_col:
            line += f" {_unit_label(e)[:18]:<18}"
        peak = e.war.peak_war_year if e.war.peak_war_year is not None else "-"
        line += (f" {e.war.career_war:>6.2f} {e.war.war_per_play:>6.2f} "
                 f"{e.war.war_per_show:>6.2f} {e.jis.avg_jis:>7.2f} "
                 f"{e.jis.peak_jis:>6.2f} {e.jis.jis_volatility:>6.2f} "
                 f"{e.counting.times_played:>4} {e.counting.jamchart_count:>4} "
                 f"{e.rates.jam_rate * 100:>5.1f}% {peak:>6}")
        print(line)


def _flatten(entry):
    key = entry.aggregation_key
    row = {
        "song_name": entry.song_name,
        "year": key.year if key.year is not None else "",
        "tour_id": key.tour_id or "",
        "tour_label": key.tour_label or "",
    }
    for block in (entry.counting, entry.rates, entry.jis, entry.war):
        for name, value in vars(block).items():
            if name == "war_by_year":
                value = ";".join(f"{y}:{w}" for y, w in value.items())
            row[name] = "" if value is None else value
    return row


def cmd_export(args):
    """Export the leaderboard to CSV."""
    result = _query(args)
    if result is None:
        return
    _, entries = result
    if not entries:
        print("No songs qualify under these filters.")
        return

    rows = [_flatten(e) for e in entries]
    fieldnames = list(rows[0].keys())
    out = args.output
    if out == "-":
        writer = csv.DictWriter(sys.stdout, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)
    else:
        with open(out, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(rows)
        print(f"Exported {len(rows)} rows to {out}")


def cmd_status(args):
    """Show database statistics."""
    conn = db.get_connection(args.db)
    stats = db.db_stats(conn)
    rows = db.load_track_rows(conn)
    conn.close()
    store = RecordStore.from_rows(rows)
    print(f"  Tracks:             {stats['tracks']}")
    print(f"  Songs:              {stats['songs']}")
    print(f"  Shows:              {stats['shows']}")
    print(f"  Tracks w/ duration: {stats['tracks_with_duration'] or 0}")
    print(f"  Jamchart tracks:    {stats['jamcharts'] or 0}")
    if stats["first_show"]:
        print(f"  Span:               {stats['first_show']} .. {stats['last_show']}")
    print(f"  Usable records:     {len(store)}")
    print(f"  Malformed rows:     {store.dropped_count}")


def _add_filter_args(p):
    p.add_argument("--years", nargs=2, type=int, metavar=("START", "END"),
                   dest="years", default=None,
                   help="Inclusive year range (default: every year)")
    p.add_argument("--set", dest="set_split", choices=SET_SPLITS, default="all",
                   help="Set split (default: all)")
    p.add_argument("--venue", default=None, help="Exact venue name")
    p.add_argument("--state", default=None, help="Two-letter US state")
    p.add_argument("--country", choices=COUNTRY_FILTERS, default="all")
    p.add_argument("--run-position", choices=RUN_POSITIONS, default="all",
                   help="Night within a multi-night venue run")
    p.add_argument("--by", choices=AGGREGATIONS, default="career",
                   help="Aggregation granularity (default: career)")
    p.add_argument("--min-played", type=int, default=0)
    p.add_argument("--min-shows", type=int, default=0)
    p.add_argument("--min-jamcharts", type=int, default=0)
    p.add_argument("--min-minutes", type=float, default=0)
    p.add_argument("--sort", choices=list(SORT_FIELDS), default="career_war")
    p.add_argument("--asc", action="store_true", help="Sort ascending")


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="phangraphs",
        description="PhanGraphs song sabermetrics (JIS / WAR leaderboards)",
    )
    parser.add_argument("--db", default=None, help="SQLite DB path")
    parser.add_argument("-v", "--verbose", action="store_true")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # leaderboard
    p_board = subparsers.add_parser("leaderboard", help="Print the leaderboard")
    _add_filter_args(p_board)
    p_board.add_argument("--top", type=int, default=25,
                         help="Rows to show (0 = all, default: 25)")
    p_board.set_defaults(func=cmd_leaderboard)

    # export
    p_export = subparsers.add_parser("export", help="Export leaderboard to CSV")
    _add_filter_args(p_export)
    p_export.add_argument("-o", "--output", default="-",
                          help="Output file (default: stdout)")
    p_export.set_defaults(func=cmd_export)

    # status
    p_status = subparsers.add_parser("status", help="Show DB statistics")
    p_status.set_defaults(func=cmd_status)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        sys.exit(1)

    if getattr(args, "years", None):
        args.year_start, args.year_end = args.years
    else:
        args.year_start, args.year_end = YEAR_MIN, YEAR_MAX

    args.func(args)
