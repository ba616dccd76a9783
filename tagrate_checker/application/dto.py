"""Application-level DTOs for reconciliation and export runs."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from tagrate_checker.config import season_export_paths, season_input_paths, season_prefix
from tagrate_checker.domain.results import ClassificationReport, CoverageResult


@dataclass(slots=True, frozen=True)
class SeasonRun:
    """Spawn year and species that name a season's input and export files."""

    year: int
    species: str

    @property
    def prefix(self) -> str:
        return season_prefix(self.year, self.species)

    def input_paths(self, data_dir: Path | None = None) -> tuple[Path, Path]:
        return season_input_paths(self.year, self.species, data_dir)

    def export_paths(self, out_dir: Path | None = None) -> tuple[Path, Path]:
        return season_export_paths(self.year, self.species, out_dir)


@dataclass(slots=True, frozen=True)
class ExportResult:
    trap_path: Path
    tag_rate_path: Path
    trap_rows: int
    tag_rate_rows: int
    classification: ClassificationReport
    original: CoverageResult
    round_trip: CoverageResult

    @property
    def round_trip_consistent(self) -> bool:
        return tuple(self.original.missing) == tuple(self.round_trip.missing)

    @property
    def ready(self) -> bool:
        return self.round_trip.is_empty and self.round_trip_consistent
