"""Application services orchestrating the reconciliation and export workflows."""
from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Sequence

from tagrate_checker.application.dto import ExportResult
from tagrate_checker.config import SCOBI_RELEASE_GROUP_COLUMN, TRAP_REQUIRED_COLUMNS
from tagrate_checker.domain.models import TagRateEntry, TrapRecord
from tagrate_checker.domain.repositories import TagRateRepository, TrapRecordRepository
from tagrate_checker.domain.results import ClassificationReport, NoAssignmentDiagnosis, ReconciliationReport
from tagrate_checker.domain.services import ReleaseGroupReconciler
from tagrate_checker.infrastructure.export.scobi import (
    build_tag_rate_export,
    build_trap_export,
    write_export,
)
from tagrate_checker.infrastructure.parsing.tag_rates import read_tag_rates, tag_rates_to_records
from tagrate_checker.infrastructure.parsing.trap import read_trap_raw, trap_to_records, validate_trap_columns
from tagrate_checker.infrastructure.parsing.utils import ensure_bytes, source_label
from tagrate_checker.infrastructure.repositories.csv_repositories import (
    CsvTagRateRepository,
    CsvTrapRepository,
)
from tagrate_checker.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(slots=True)
class ReconciliationContext:
    trap_repository: TrapRecordRepository
    tag_rate_repository: TagRateRepository
    reconciler: ReleaseGroupReconciler


class ReconcileReleaseGroupsUseCase:
    def __init__(self, context: ReconciliationContext) -> None:
        self._context = context

    def execute(self) -> tuple[ReconciliationReport, Sequence[TrapRecord], Sequence[TagRateEntry]]:
        trap_records = self._context.trap_repository.list_trap_records()
        tag_rates = self._context.tag_rate_repository.list_tag_rates()
        report = self._context.reconciler.reconcile(trap_records, tag_rates)
        return report, trap_records, tag_rates


class InvestigateNoAssignmentUseCase:
    def __init__(self, trap_repository: TrapRecordRepository, reconciler: ReleaseGroupReconciler) -> None:
        self._trap_repository = trap_repository
        self._reconciler = reconciler

    def execute(self) -> tuple[NoAssignmentDiagnosis, ClassificationReport]:
        records = self._trap_repository.list_trap_records()
        return self._reconciler.diagnose_no_assignment(records), self._reconciler.classify(records)


class ExportForScobiUseCase:
    """Write the SCOBI-shaped trap and tag-rate files, then re-check them from disk."""

    def __init__(self, reconciler: ReleaseGroupReconciler, strict_headers: bool | None = None) -> None:
        self._reconciler = reconciler
        self._strict_headers = strict_headers

    def execute(
        self,
        trap_source: BytesIO | Path | bytes,
        tag_rate_source: BytesIO | Path | bytes,
        trap_out: Path,
        tag_rate_out: Path,
        trap_name: str | None = None,
        tag_rate_name: str | None = None,
    ) -> ExportResult:
        trap_label = source_label(trap_source, trap_name)
        tag_rate_label = source_label(tag_rate_source, tag_rate_name)

        trap_df = read_trap_raw(ensure_bytes(trap_source), trap_label)
        validate_trap_columns(trap_df, trap_label, TRAP_REQUIRED_COLUMNS)
        tag_rate_df = read_tag_rates(ensure_bytes(tag_rate_source), tag_rate_label, strict=self._strict_headers)

        original = self._reconciler.find_missing_tag_rates(
            trap_to_records(trap_df), tag_rates_to_records(tag_rate_df)
        )

        trap_path = write_export(build_trap_export(trap_df), trap_out)
        tag_rate_path = write_export(build_tag_rate_export(tag_rate_df), tag_rate_out)

        exported_trap = CsvTrapRepository(trap_path, release_group_column=SCOBI_RELEASE_GROUP_COLUMN).list_trap_records()
        exported_tag_rates = CsvTagRateRepository(tag_rate_path, strict=True).list_tag_rates()
        round_trip = self._reconciler.find_missing_tag_rates(exported_trap, exported_tag_rates)

        result = ExportResult(
            trap_path=trap_path,
            tag_rate_path=tag_rate_path,
            trap_rows=len(exported_trap),
            tag_rate_rows=len(exported_tag_rates),
            classification=self._reconciler.classify(exported_trap),
            original=original,
            round_trip=round_trip,
        )
        if not result.round_trip_consistent:
            logger.error(
                f"Exported tables disagree with the originals: {list(original.missing)} vs {list(round_trip.missing)}"
            )
        return result
