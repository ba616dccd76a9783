"""Command-line entrypoint for tag-rate checks and SCOBI exports."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from tagrate_checker.application.dto import SeasonRun
from tagrate_checker.application.use_cases import (
    ExportForScobiUseCase,
    InvestigateNoAssignmentUseCase,
    ReconcileReleaseGroupsUseCase,
    ReconciliationContext,
)
from tagrate_checker.config import SETTINGS
from tagrate_checker.domain.errors import TagRateCheckerError
from tagrate_checker.domain.services import ReleaseGroupReconciler
from tagrate_checker.infrastructure.repositories.csv_repositories import (
    CsvTagRateRepository,
    CsvTrapRepository,
)
from tagrate_checker.logging_config import setup_logging
from tagrate_checker.presentation.anomaly_report import render_csv
from tagrate_checker.presentation.console_report import render_diagnosis, render_export, render_report

EXIT_PASS = 0
EXIT_FAIL = 1
EXIT_ERROR = 2
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _add_season_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--year", type=int, required=True, help="Spawn year, e.g. 2025")
    parser.add_argument("--species", type=str, required=True, help="Species code, e.g. STHD")
    parser.add_argument("--data-dir", type=Path, default=SETTINGS.data_dir, help="Directory holding the input files")
    parser.add_argument("--trap", type=Path, help="Override the trap table path")


def _add_tag_rate_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--tag-rates", type=Path, help="Override the tag-rate table path")
    parser.add_argument(
        "--strict-headers",
        action="store_true",
        default=SETTINGS.strict_tag_rate_headers,
        help="Fail instead of falling back to positional tag-rate columns",
    )


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Check hatchery release groups in trap data against tag rates")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="WARNING",
        help="Console log level",
    )
    parser.add_argument("--log-file", type=Path, help="Also write a DEBUG log to this file")
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="Report missing and invalid tag rates")
    _add_season_args(check)
    _add_tag_rate_args(check)
    check.add_argument("--anomalies-out", type=Path, help="Write all anomalies to this CSV file")

    export = sub.add_parser("export", help="Write SCOBI-formatted trap and tag-rate files")
    _add_season_args(export)
    _add_tag_rate_args(export)
    export.add_argument("--out-dir", type=Path, help="Output directory (defaults to --data-dir)")

    investigate = sub.add_parser("investigate", help="Explain trap records without a release group")
    _add_season_args(investigate)
    return parser.parse_args(argv)


def _input_paths(args: argparse.Namespace) -> tuple[Path, Path]:
    season = SeasonRun(year=args.year, species=args.species)
    trap_path, tag_rate_path = season.input_paths(args.data_dir)
    return args.trap or trap_path, getattr(args, "tag_rates", None) or tag_rate_path


def run_check(args: argparse.Namespace) -> int:
    trap_path, tag_rate_path = _input_paths(args)
    context = ReconciliationContext(
        trap_repository=CsvTrapRepository(trap_path),
        tag_rate_repository=CsvTagRateRepository(tag_rate_path, strict=args.strict_headers),
        reconciler=ReleaseGroupReconciler(na_label=SETTINGS.na_label),
    )
    report, _, _ = ReconcileReleaseGroupsUseCase(context).execute()
    print(render_report(report))

    if args.anomalies_out:
        args.anomalies_out.write_bytes(render_csv(tuple(report.iter_all_anomalies())))
        print(f"\nAnomalies written to {args.anomalies_out}")
    return EXIT_PASS if report.passed else EXIT_FAIL


def run_export(args: argparse.Namespace) -> int:
    season = SeasonRun(year=args.year, species=args.species)
    trap_path, tag_rate_path = _input_paths(args)
    trap_out, tag_rate_out = season.export_paths(args.out_dir or args.data_dir)
    use_case = ExportForScobiUseCase(ReleaseGroupReconciler(na_label=SETTINGS.na_label), args.strict_headers)
    result = use_case.execute(trap_path, tag_rate_path, trap_out, tag_rate_out)
    print(render_export(result))
    return EXIT_PASS if result.ready else EXIT_FAIL


def run_investigate(args: argparse.Namespace) -> int:
    trap_path, _ = _input_paths(args)
    reconciler = ReleaseGroupReconciler(na_label=SETTINGS.na_label, sample_size=SETTINGS.sample_size)
    diagnosis, classification = InvestigateNoAssignmentUseCase(CsvTrapRepository(trap_path), reconciler).execute()
    print(render_diagnosis(diagnosis, classification))
    return EXIT_PASS


COMMANDS = {
    "check": run_check,
    "export": run_export,
    "investigate": run_investigate,
}


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    setup_logging(level=getattr(logging, args.log_level), log_file=args.log_file)
    try:
        return COMMANDS[args.command](args)
    except TagRateCheckerError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
