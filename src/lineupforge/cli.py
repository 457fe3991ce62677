"""Command-line interface for generating lineups from a player CSV."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from lineupforge.config import RosterTemplate, get_template, get_template_by_key, template_from_mapping
from lineupforge.config_loader import ColumnProfile
from lineupforge.export import export_lineups_to_csv, lineups_to_summary_csv
from lineupforge.ingest import DEFAULT_PROJECTION_MAPPING, load_records_from_csv
from lineupforge.optimizer import EmptyPoolError, generate_lineups


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate fantasy lineups from a player pool CSV")
    parser.add_argument("players", type=Path, help="Path to players CSV (name, team, pos, salary, proj)")
    parser.add_argument("--site", default="DK", help="Site key (e.g., DK, FD)")
    parser.add_argument("--sport", default="NFL", help="Sport key (e.g., NFL, MLB)")
    parser.add_argument("--template", type=Path, default=None, help="Custom roster template JSON")
    parser.add_argument(
        "--column",
        action="append",
        default=[],
        help="Mapping for CSV columns (e.g., projection=fppg or name=First|Last)",
    )
    parser.add_argument("--load-profile", type=Path, help="Load column mapping JSON", default=None)
    parser.add_argument("--save-profile", type=Path, help="Save column mapping JSON", default=None)
    parser.add_argument("--lineups", type=int, default=1, help="Number of lineups to build")
    parser.add_argument("--noise", type=float, default=1.0, help="Projection noise per attempt (points)")
    parser.add_argument(
        "--temperature",
        type=float,
        default=0.05,
        help="Ranking jitter as a fraction of the best value density",
    )
    parser.add_argument("--min-diff", type=int, default=2, help="Minimum differing players between lineups")
    parser.add_argument("--max-team", type=int, default=None, help="Maximum players from one team")
    parser.add_argument("--tries", type=int, default=None, help="Attempts per lineup before giving up")
    parser.add_argument("--cap", type=int, default=None, help="Salary cap override")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible runs")
    parser.add_argument("--workers", type=int, default=1, help="Worker processes for attempts")
    parser.add_argument("--max-attempts", type=int, default=None, help="Global ceiling on lineup draws")
    parser.add_argument("--time-limit", type=float, default=None, help="Stop after this many seconds")
    parser.add_argument("--output", type=Path, default=Path("lineups.csv"), help="Output CSV path")
    parser.add_argument(
        "--contest-output",
        type=Path,
        default=None,
        help="Optional upload CSV with player ids in slot order",
    )
    parser.add_argument("--verbose", action="store_true", help="Log generation progress")
    return parser.parse_args(argv)


def _parse_mapping(entries: list[str]) -> dict[str, str]:
    mapping: dict[str, str] = {}
    for entry in entries:
        if "=" not in entry:
            raise ValueError(f"Invalid mapping entry '{entry}', expected key=value")
        key, value = entry.split("=", 1)
        mapping[key.strip()] = value.strip()
    return mapping


def _resolve_template(args: argparse.Namespace, profile: ColumnProfile | None) -> RosterTemplate:
    if args.template:
        return template_from_mapping(json.loads(args.template.read_text(encoding="utf-8")))
    if profile and profile.template_key:
        return get_template_by_key(profile.template_key)
    return get_template(args.site, args.sport)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    try:
        mapping = _parse_mapping(args.column)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc

    profile = None
    if args.load_profile:
        profile = ColumnProfile.load(args.load_profile)
        mapping = profile.column_mapping | mapping

    try:
        template = _resolve_template(args, profile)
    except (KeyError, ValueError) as exc:
        raise SystemExit(f"Invalid roster template: {exc}") from exc

    if mapping:
        mapping = DEFAULT_PROJECTION_MAPPING | mapping
    records, report = load_records_from_csv(args.players, template=template, mapping=mapping or None)
    print(f"Loaded {report.loaded_players}/{report.total_rows} players for {template.key}")
    if report.skipped_rows:
        preview = ", ".join(f"{label} ({reason})" for label, reason in report.skipped_rows[:5])
        more = len(report.skipped_rows) - 5
        suffix = f", +{more} more" if more > 0 else ""
        print(f"Skipped rows: {preview}{suffix}")

    if args.save_profile:
        ColumnProfile(mapping, template.key).save(args.save_profile)
        print(f"Saved column profile to {args.save_profile}")

    try:
        output = generate_lineups(
            records,
            template,
            n_lineups=args.lineups,
            noise=args.noise,
            temperature=args.temperature,
            min_diff=args.min_diff,
            max_from_one_team=args.max_team,
            tries_per_lineup=args.tries,
            salary_cap=args.cap,
            seed=args.seed,
            max_attempts=args.max_attempts,
            time_limit=args.time_limit,
            parallel_jobs=args.workers,
        )
    except EmptyPoolError as exc:
        raise SystemExit(str(exc)) from exc

    args.output.write_text(lineups_to_summary_csv(output.lineups), encoding="utf-8")
    print(f"Wrote {output.count}/{output.requested} lineups to {args.output}")
    if args.contest_output:
        args.contest_output.write_text(export_lineups_to_csv(output.lineups, template=template), encoding="utf-8")
        print(f"Wrote contest upload to {args.contest_output}")

    if output.message:
        print(f"Lineup generation stopped early: {output.message}")


if __name__ == "__main__":
    main()
