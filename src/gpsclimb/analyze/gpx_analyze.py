#!/usr/bin/env python3
"""
gpsclimb-analyze: distance, elevation gain, grades and climbs of GPX file(s)

Parameters come from gpsclimb.config (env > user config > repo config >
defaults); flags given here override them.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from gpsclimb.analyze.track import analyze_track
from gpsclimb.config import load_config
from gpsclimb.errors import GPSClimbError
from gpsclimb.util.fzf import fzf_select_paths
from gpsclimb.util.logging import configure_library_logging, log


TSV_HEADER = "file\tpoints\tdistance_m\televation_gain_m\tgrade_segments\tmax_grade\tclimbs\tclimb_elevation_m"


def print_report(path: Path, stats: dict, *, tsv: bool, climbs: bool = False) -> None:
    if tsv:
        print(
            f"{path}\t"
            f"{stats.get('points', 0)}\t"
            f"{stats.get('distance_m', 0.0):.2f}\t"
            f"{stats.get('elevation_gain_m', 0.0):.1f}\t"
            f"{stats.get('grade_segments', 0)}\t"
            f"{stats.get('max_grade', 0.0):.4f}\t"
            f"{stats.get('climbs', 0)}\t"
            f"{stats.get('climb_elevation_m', 0.0):.1f}"
        )
        return

    print(f"\n{path}")
    print(f"  title              : {stats.get('title', '')}")
    print(f"  points             : {stats.get('points', 0)}")
    print(f"  distance (m)       : {stats.get('distance_m', 0.0):.2f}")
    if "precise_distance_m" in stats:
        print(f"  precise dist. (m)  : {stats['precise_distance_m']:.2f}")
    print(f"  elevation gain (m) : {stats.get('elevation_gain_m', 0.0):.1f}")
    print(f"  grade segments     : {stats.get('grade_segments', 0)}")
    print(f"  max grade          : {stats.get('max_grade', 0.0) * 100:.1f} %")
    print(f"  climbs             : {stats.get('climbs', 0)}")
    print(f"  climb gain (m)     : {stats.get('climb_elevation_m', 0.0):.1f}")
    if climbs:
        for c in stats.get("climb_list", []):
            print(
                f"    {c.start:9.1f} - {c.end:9.1f} m"
                f"  +{c.elevation:6.1f} m"
                f"  avg {c.grade * 100:5.1f} %"
                f"  max {c.max_grade * 100:5.1f} %"
                f"  score {c.score:6.2f}"
            )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="gpsclimb: Analyze GPX file(s).")
    ap.add_argument("gpx", nargs="*", type=Path,
                    help="One or more GPX files. If omitted, use fzf selection.")
    ap.add_argument("--root", default=None,
                    help="Where to look for GPX files for fzf selection (default: from config or ~/GPS/_work)")
    ap.add_argument("--segment-length", type=float, default=None,
                    help="Grade segment length in meters.")
    ap.add_argument("--epsilon", type=float, default=None,
                    help="Climb simplification tolerance in meters.")
    ap.add_argument("--minimum-grade", type=float, default=None,
                    help="Minimum climb grade as a fraction (0.03 = 3%%).")
    ap.add_argument("--max-join-distance", type=float, default=None,
                    help="Join climbs separated by at most this many meters.")
    ap.add_argument("--precise", action="store_true",
                    help="Also report the ellipsoidal (Vincenty) distance.")
    ap.add_argument("--tsv", action="store_true",
                    help="Print tab-separated output (good for piping).")
    ap.add_argument("--climbs", action="store_true",
                    help="List the individual climbs.")
    ap.add_argument("--plot", action="store_true",
                    help="Show the elevation profile with climbs highlighted.")
    ap.add_argument("-v", "--verbose", action="store_true",
                    help="Log analysis details to stderr.")
    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_library_logging(args.verbose)
    cfg = load_config()

    segment_length = args.segment_length if args.segment_length is not None else cfg.segment_length
    epsilon = args.epsilon if args.epsilon is not None else cfg.climbs.epsilon
    minimum_grade = args.minimum_grade if args.minimum_grade is not None else cfg.climbs.minimum_grade
    max_join_distance = (
        args.max_join_distance if args.max_join_distance is not None else cfg.climbs.max_join_distance
    )

    selected: list[Path] = list(args.gpx)
    if not selected:
        root = Path(args.root).expanduser() if args.root else cfg.track_root
        gpx_files = sorted(root.rglob("*.gpx"))
        if not gpx_files:
            raise SystemExit(f"No GPX files found under {root}")
        selected = fzf_select_paths(gpx_files, header="Select GPX file(s) to analyze:", multi=True)

    if args.tsv:
        print(TSV_HEADER)

    rc = 0
    for path in selected:
        if not path.is_file():
            log(f"Skipping (not a file): {path}")
            continue
        try:
            stats = analyze_track(
                path,
                segment_length=segment_length,
                epsilon=epsilon,
                minimum_grade=minimum_grade,
                max_join_distance=max_join_distance,
                precise=args.precise,
                tolerance=cfg.distance.tolerance,
                max_iterations=cfg.distance.max_iterations,
            )
        except GPSClimbError as e:
            log(f"Failed: {path}: {e}")
            rc = 1
            continue
        print_report(path, stats, tsv=args.tsv, climbs=args.climbs)

        if args.plot:
            import matplotlib.pyplot as plt
            from gpsclimb.visualize.plot import plot_profile

            plot_profile(stats["graph"], stats["climb_list"], title=stats["title"])
            plt.show()

    return rc


if __name__ == "__main__":
    raise SystemExit(main())
