"""Domain services implementing the release-group reconciliation rules."""
from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Mapping, Sequence

import pandas as pd

from tagrate_checker.logging_config import get_logger

from .models import (
    Anomaly,
    RearType,
    ReleaseGroupStatus,
    TagRateEntry,
    TrapRecord,
    derive_release_group,
)
from .results import (
    ClassificationReport,
    CoverageCheck,
    CoverageResult,
    CoverageRow,
    MissingGroupImpact,
    NoAssignmentDiagnosis,
    ReconciliationReport,
    ReconciliationSummary,
    TagRateDistribution,
)

logger = get_logger(__name__)


class ReleaseGroupReconciler:
    """Checks that every hatchery release group seen at the trap has a usable tag rate.

    The reconciler trusts the precomputed ``release_group`` of each record.
    Only ``Assigned`` records ever take part in tag-rate coverage; absent and
    ``"Unassigned"`` release groups are expected and never need a tag rate.
    """

    def __init__(self, na_label: str = "NA", sample_size: int = 20) -> None:
        self._na_label = na_label
        self._sample_size = sample_size

    def classify(self, records: Sequence[TrapRecord]) -> ClassificationReport:
        counts: dict[ReleaseGroupStatus, int] = {status: 0 for status in ReleaseGroupStatus}
        by_rear: dict[tuple[ReleaseGroupStatus, str], int] = defaultdict(int)
        by_rear_and_mark: dict[tuple[ReleaseGroupStatus, str, str], int] = defaultdict(int)
        for record in records:
            status = record.release_group.status
            rear = self._label(record.rear)
            counts[status] += 1
            by_rear[(status, rear)] += 1
            by_rear_and_mark[(status, rear, self._label(record.mark))] += 1
        return ClassificationReport(
            total=len(records),
            counts=counts,
            by_rear=dict(sorted(by_rear.items(), key=_status_key)),
            by_rear_and_mark=dict(sorted(by_rear_and_mark.items(), key=_status_key)),
        )

    def find_missing_tag_rates(
        self, records: Sequence[TrapRecord], tag_rates: Sequence[TagRateEntry]
    ) -> CoverageResult:
        candidates = {record.release_group.group_id for record in records if record.release_group.is_assigned}
        reference = {entry.group for entry in tag_rates}
        missing = sorted(candidates - reference)

        missing_set = set(missing)
        counts: dict[str, int] = defaultdict(int)
        by_rear: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
        for record in records:
            group_id = record.release_group.group_id
            if group_id in missing_set:
                counts[group_id] += 1
                by_rear[group_id][self._label(record.rear)] += 1

        impacts = [
            MissingGroupImpact(group=group, count=counts[group], by_rear=dict(sorted(by_rear[group].items())))
            for group in missing
        ]
        impacts.sort(key=lambda impact: (-impact.count, impact.group))
        return CoverageResult(
            missing=tuple(missing),
            impacts=tuple(impacts),
            total_affected=sum(impact.count for impact in impacts),
            candidate_groups=len(candidates),
            reference_groups=len(reference),
        )

    def check_coverage(self, records: Sequence[TrapRecord], tag_rates: Sequence[TagRateEntry]) -> CoverageCheck:
        lookup = self._tag_rate_lookup(tag_rates)
        rows = [
            CoverageRow(record=record, tag_rate=lookup.get(record.release_group.group_id))
            for record in records
            if record.is_hatchery and record.release_group.is_assigned
        ]
        with_tag_rate = sum(1 for row in rows if row.has_tag_rate)
        return CoverageCheck(
            total=len(rows),
            with_tag_rate=with_tag_rate,
            missing_tag_rate=len(rows) - with_tag_rate,
            rows=tuple(rows),
        )

    def validate_tag_rates(self, tag_rates: Sequence[TagRateEntry]) -> list[Anomaly]:
        return self._invalid_rates(tag_rates) + self._duplicate_groups(tag_rates)

    def tag_rate_distribution(self, tag_rates: Sequence[TagRateEntry]) -> TagRateDistribution:
        rates = pd.Series([entry.tag_rate for entry in tag_rates], dtype="float64")
        present = rates.dropna()
        na_count = len(rates) - len(present)
        if present.empty:
            return TagRateDistribution(count=0, na_count=na_count)
        stats = present.describe()
        return TagRateDistribution(
            count=len(present),
            na_count=na_count,
            minimum=float(stats["min"]),
            first_quartile=float(stats["25%"]),
            median=float(stats["50%"]),
            mean=float(stats["mean"]),
            third_quartile=float(stats["75%"]),
            maximum=float(stats["max"]),
        )

    def check_rear_types(self, records: Sequence[TrapRecord]) -> list[Anomaly]:
        counts: dict[str, int] = defaultdict(int)
        for record in records:
            if record.rear_type is None:
                counts[self._label(record.rear)] += 1
        return [
            Anomaly(
                issue_type="unrecognized_rear_type",
                subject=rear,
                message=f"{count} record(s) have unrecognized rear type {rear!r}",
                count=count,
            )
            for rear, count in sorted(counts.items())
        ]

    def check_derivation(self, records: Sequence[TrapRecord]) -> list[Anomaly]:
        anomalies: list[Anomaly] = []
        for record in records:
            expected = derive_release_group(record)
            if expected != record.release_group:
                anomalies.append(
                    Anomaly(
                        issue_type="release_group_mismatch",
                        subject=record.record_id,
                        message=f"releaseGroup is {record.release_group} but rear/GenStock/PBT calls imply {expected}",
                        record=record,
                    )
                )
        return anomalies

    def diagnose_no_assignment(self, records: Sequence[TrapRecord]) -> NoAssignmentDiagnosis:
        no_call = [r for r in records if r.release_group.status is ReleaseGroupStatus.NO_ASSIGNMENT]

        by_rear_and_mark: dict[tuple[str, str], int] = defaultdict(int)
        pbt_calls: dict[tuple[str, str], int] = defaultdict(int)
        for record in no_call:
            by_rear_and_mark[(self._label(record.rear), self._label(record.mark))] += 1
            pbt_calls[(self._label(record.pbt_hatchery), self._label(record.pbt_release_group))] += 1

        wild = [r for r in no_call if r.rear_type is RearType.WILD]
        gen_stock: dict[str, int] = defaultdict(int)
        for record in wild:
            gen_stock[self._label(record.gen_stock)] += 1
        hatchery = [r for r in no_call if r.is_hatchery]

        return NoAssignmentDiagnosis(
            total=len(no_call),
            by_rear_and_mark=dict(sorted(by_rear_and_mark.items())),
            pbt_calls=tuple(
                (hat, group, n) for (hat, group), n in sorted(pbt_calls.items(), key=lambda item: (-item[1], item[0]))
            ),
            wild_total=len(wild),
            wild_gen_stock=tuple(sorted(gen_stock.items(), key=lambda item: (-item[1], item[0]))),
            hatchery_total=len(hatchery),
            hatchery_sample=tuple(hatchery[: self._sample_size]),
            wild_expected_unassigned=sum(1 for r in wild if r.gen_stock),
        )

    def reconcile(self, records: Sequence[TrapRecord], tag_rates: Sequence[TagRateEntry]) -> ReconciliationReport:
        classification = self.classify(records)
        coverage = self.find_missing_tag_rates(records, tag_rates)
        hatchery_coverage = self.check_coverage(records, tag_rates)
        invalid = self._invalid_rates(tag_rates)
        duplicates = self._duplicate_groups(tag_rates)
        rear_issues = self.check_rear_types(records)
        derivation_issues = self.check_derivation(records)

        missing = tuple(
            Anomaly(
                issue_type="missing_tag_rate",
                subject=impact.group,
                message=f"Release group {impact.group} has no tag rate ({impact.count} fish affected)",
                count=impact.count,
            )
            for impact in coverage.impacts
        )

        summary = ReconciliationSummary(
            total_trap_records=len(records),
            total_tag_rates=len(tag_rates),
            no_assignment=classification.count(ReleaseGroupStatus.NO_ASSIGNMENT),
            unassigned=classification.count(ReleaseGroupStatus.UNASSIGNED),
            assigned=classification.count(ReleaseGroupStatus.ASSIGNED),
            missing_groups=len(coverage.missing),
            affected_records=coverage.total_affected,
            invalid_tag_rates=len(invalid),
            duplicate_groups=len(duplicates),
            unrecognized_rear_types=sum(a.count for a in rear_issues),
            release_group_mismatches=len(derivation_issues),
            generated_at=datetime.now(),
        )
        if coverage.is_empty:
            logger.info(f"All {coverage.candidate_groups} assigned release group(s) have tag rates")
        else:
            logger.warning(
                f"{len(coverage.missing)} release group(s) missing tag rates, {coverage.total_affected} fish affected"
            )

        return ReconciliationReport(
            summary=summary,
            classification=classification,
            coverage=coverage,
            hatchery_coverage=hatchery_coverage,
            tag_rate_distribution=self.tag_rate_distribution(tag_rates),
            missing_tag_rates=missing,
            invalid_tag_rates=tuple(invalid),
            duplicate_groups=tuple(duplicates),
            rear_type_issues=tuple(rear_issues),
            derivation_issues=tuple(derivation_issues),
        )

    @staticmethod
    def _tag_rate_lookup(tag_rates: Sequence[TagRateEntry]) -> Mapping[str, TagRateEntry]:
        lookup: dict[str, TagRateEntry] = {}
        for entry in tag_rates:
            current = lookup.get(entry.group)
            if current is None or (current.tag_rate is None and entry.tag_rate is not None):
                lookup[entry.group] = entry
        return lookup

    @staticmethod
    def _invalid_rates(tag_rates: Sequence[TagRateEntry]) -> list[Anomaly]:
        return [
            Anomaly(
                issue_type="invalid_tag_rate",
                subject=entry.group,
                message=f"Tag rate {_format_rate(entry.tag_rate)} for {entry.group} is outside (0, 1]",
                tag_rate=entry,
            )
            for entry in tag_rates
            if not entry.is_valid_rate
        ]

    @staticmethod
    def _duplicate_groups(tag_rates: Sequence[TagRateEntry]) -> list[Anomaly]:
        counts: dict[str, int] = defaultdict(int)
        for entry in tag_rates:
            counts[entry.group] += 1
        return [
            Anomaly(
                issue_type="duplicate_group",
                subject=group,
                message=f"{count} tag-rate rows share release group {group}",
                count=count,
            )
            for group, count in sorted(counts.items())
            if count > 1
        ]

    def _label(self, value: str | None) -> str:
        return value if value else self._na_label


def _status_key(item: tuple[tuple, int]) -> tuple:
    key = item[0]
    return (list(ReleaseGroupStatus).index(key[0]),) + tuple(key[1:])


def _format_rate(value: float | None) -> str:
    return "NA" if value is None else f"{value:g}"
