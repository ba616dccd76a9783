"""Release-group tag-rate reconciliation toolkit."""
from tagrate_checker.application.use_cases import (
    ExportForScobiUseCase,
    ReconcileReleaseGroupsUseCase,
    ReconciliationContext,
)
from tagrate_checker.domain.services import ReleaseGroupReconciler
from tagrate_checker.infrastructure.repositories.csv_repositories import (
    CsvTagRateRepository,
    CsvTrapRepository,
)

__all__ = [
    "ReconcileReleaseGroupsUseCase",
    "ReconciliationContext",
    "ExportForScobiUseCase",
    "ReleaseGroupReconciler",
    "CsvTrapRepository",
    "CsvTagRateRepository",
]
