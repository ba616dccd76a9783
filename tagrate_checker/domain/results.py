"""Domain-level results for release-group reconciliation."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Mapping, Sequence

from .models import Anomaly, ReleaseGroupStatus, TagRateEntry, TrapRecord


@dataclass(frozen=True)
class ClassificationReport:
    total: int
    counts: Mapping[ReleaseGroupStatus, int]
    by_rear: Mapping[tuple[ReleaseGroupStatus, str], int]
    by_rear_and_mark: Mapping[tuple[ReleaseGroupStatus, str, str], int]

    def count(self, status: ReleaseGroupStatus) -> int:
        return self.counts.get(status, 0)


@dataclass(frozen=True)
class MissingGroupImpact:
    group: str
    count: int
    by_rear: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class CoverageResult:
    missing: Sequence[str]
    impacts: Sequence[MissingGroupImpact]
    total_affected: int
    candidate_groups: int
    reference_groups: int

    @property
    def is_empty(self) -> bool:
        return not self.missing

    def affected(self, group: str) -> int:
        for impact in self.impacts:
            if impact.group == group:
                return impact.count
        return 0


@dataclass(frozen=True)
class CoverageRow:
    record: TrapRecord
    tag_rate: TagRateEntry | None

    @property
    def has_tag_rate(self) -> bool:
        return self.tag_rate is not None and self.tag_rate.tag_rate is not None


@dataclass(frozen=True)
class CoverageCheck:
    total: int
    with_tag_rate: int
    missing_tag_rate: int
    rows: Sequence[CoverageRow] = field(default_factory=tuple)


@dataclass(frozen=True)
class TagRateDistribution:
    """Summary statistics over present tag rates; statistics are None when no rate is present."""

    count: int
    na_count: int
    minimum: float | None = None
    first_quartile: float | None = None
    median: float | None = None
    mean: float | None = None
    third_quartile: float | None = None
    maximum: float | None = None


@dataclass(frozen=True)
class NoAssignmentDiagnosis:
    total: int
    by_rear_and_mark: Mapping[tuple[str, str], int]
    pbt_calls: Sequence[tuple[str, str, int]]
    wild_total: int
    wild_gen_stock: Sequence[tuple[str, int]]
    hatchery_total: int
    hatchery_sample: Sequence[TrapRecord]
    wild_expected_unassigned: int


@dataclass(frozen=True)
class ReconciliationSummary:
    total_trap_records: int
    total_tag_rates: int
    no_assignment: int
    unassigned: int
    assigned: int
    missing_groups: int
    affected_records: int
    invalid_tag_rates: int
    duplicate_groups: int
    unrecognized_rear_types: int
    release_group_mismatches: int
    generated_at: datetime


@dataclass(frozen=True)
class ReconciliationReport:
    summary: ReconciliationSummary
    classification: ClassificationReport
    coverage: CoverageResult
    hatchery_coverage: CoverageCheck
    tag_rate_distribution: TagRateDistribution
    missing_tag_rates: Sequence[Anomaly] = field(default_factory=tuple)
    invalid_tag_rates: Sequence[Anomaly] = field(default_factory=tuple)
    duplicate_groups: Sequence[Anomaly] = field(default_factory=tuple)
    rear_type_issues: Sequence[Anomaly] = field(default_factory=tuple)
    derivation_issues: Sequence[Anomaly] = field(default_factory=tuple)

    @property
    def passed(self) -> bool:
        return self.coverage.is_empty

    def has_anomalies(self) -> bool:
        return any(True for _ in self.iter_all_anomalies())

    def iter_all_anomalies(self) -> Iterable[Anomaly]:
        yield from self.missing_tag_rates
        yield from self.invalid_tag_rates
        yield from self.duplicate_groups
        yield from self.rear_type_issues
        yield from self.derivation_issues
