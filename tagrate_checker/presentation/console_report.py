"""Plain-text reports printed by the command line tools."""
from __future__ import annotations

from tagrate_checker.application.dto import ExportResult
from tagrate_checker.domain.models import ReleaseGroupStatus
from tagrate_checker.domain.results import (
    ClassificationReport,
    CoverageResult,
    NoAssignmentDiagnosis,
    ReconciliationReport,
    TagRateDistribution,
)

STATUS_LABELS = {
    ReleaseGroupStatus.NO_ASSIGNMENT: "NA (No PBT assignment)",
    ReleaseGroupStatus.UNASSIGNED: "Unassigned (Wild/Failed PBT)",
    ReleaseGroupStatus.ASSIGNED: "Assigned (Hatchery)",
}


def _heading(title: str) -> list[str]:
    return ["", title, "-" * len(title)]


def _missing_lines(coverage: CoverageResult) -> list[str]:
    if coverage.is_empty:
        return ["All trap release groups have corresponding tag rates"]
    lines = [f"WARNING: {len(coverage.missing)} release group(s) in trap data are missing from tag rates:"]
    for impact in coverage.impacts:
        rears = ", ".join(f"{rear}={n}" for rear, n in impact.by_rear.items())
        lines.append(f"  {impact.group}: {impact.count} fish ({rears})")
    lines.append(f"Total fish affected: {coverage.total_affected}")
    return lines


def _format_stat(value: float | None) -> str:
    return "NA" if value is None else f"{value:.4g}"


def _distribution_lines(distribution: TagRateDistribution) -> list[str]:
    if distribution.count == 0:
        return [f"No tag rates present (NA: {distribution.na_count})"]
    stats = [
        ("Min", distribution.minimum),
        ("1st Qu", distribution.first_quartile),
        ("Median", distribution.median),
        ("Mean", distribution.mean),
        ("3rd Qu", distribution.third_quartile),
        ("Max", distribution.maximum),
    ]
    summary = "  ".join(f"{name}={_format_stat(value)}" for name, value in stats)
    return [f"Tag rate summary: {summary}  NA's={distribution.na_count}"]


def render_report(report: ReconciliationReport) -> str:
    summary = report.summary
    classification = report.classification
    lines = ["Tag Rate Check", "=============="]
    lines.append(f"Trap records: {summary.total_trap_records}")
    lines.append(f"Tag rates: {summary.total_tag_rates}")

    lines += _heading("Release group assignment")
    for status, label in STATUS_LABELS.items():
        lines.append(f"{label}: {classification.count(status)}")
    for (status, rear), n in classification.by_rear.items():
        lines.append(f"  {status.value:<13} Rear={rear:<4} {n}")

    lines += _heading("Missing tag rates")
    lines.append(
        f"Unique hatchery release groups in trap: {report.coverage.candidate_groups}; "
        f"in tag rates: {report.coverage.reference_groups}"
    )
    lines += _missing_lines(report.coverage)

    lines += _heading("Hatchery tag rate coverage")
    coverage = report.hatchery_coverage
    if coverage.total == 0:
        lines.append("No hatchery fish with PBT assignments found")
    else:
        lines.append(f"total_hatchery={coverage.total} with_tagrate={coverage.with_tag_rate} "
                     f"missing_tagrate={coverage.missing_tag_rate}")

    lines += _heading("Tag rate validity")
    lines += _distribution_lines(report.tag_rate_distribution)
    if report.invalid_tag_rates:
        lines.append("WARNING: invalid tag rates (should be in (0, 1]):")
        lines += [f"  {a.message}" for a in report.invalid_tag_rates]
    else:
        lines.append("All tag rates are valid")

    lines += _heading("Duplicate release groups in tag rates")
    if report.duplicate_groups:
        lines += [f"  {a.subject}: {a.count} rows" for a in report.duplicate_groups]
    else:
        lines.append("No duplicate release groups")

    other = tuple(report.rear_type_issues) + tuple(report.derivation_issues)
    if other:
        lines += _heading("Other anomalies")
        lines += [f"  [{a.issue_type}] {a.message}" for a in other]

    lines.append("")
    if report.passed:
        lines.append("RESULT: PASS - all assigned release groups have tag rates")
    else:
        lines.append(
            f"RESULT: FAIL - {summary.missing_groups} release group(s) missing tag rates "
            f"({summary.affected_records} fish)"
        )
    return "\n".join(lines)


def render_export(result: ExportResult) -> str:
    lines = ["SCOBI Export", "============"]
    lines.append(f"Trap file: {result.trap_path} ({result.trap_rows} records)")
    lines.append(f"Tag rate file: {result.tag_rate_path} ({result.tag_rate_rows} records)")
    lines.append(f"Unique hatchery groups in trap: {result.round_trip.candidate_groups}")
    lines.append(f"Missing tag rates: {len(result.round_trip.missing)}")
    lines.append(
        f"Records with NA release groups: {result.classification.count(ReleaseGroupStatus.NO_ASSIGNMENT)} (expected)"
    )
    lines.append(
        f"Records with 'Unassigned' groups: {result.classification.count(ReleaseGroupStatus.UNASSIGNED)} (expected)"
    )
    lines += _heading("Check on exported files")
    lines += _missing_lines(result.round_trip)
    lines.append("")
    if not result.round_trip_consistent:
        lines.append("RESULT: FAIL - exported files do not reproduce the missing tag rates of the inputs")
    elif result.ready:
        lines.append("RESULT: PASS - files are ready for SCOBI")
    else:
        lines.append("RESULT: FAIL - add tag rates for the missing groups before using these files with SCOBI")
    return "\n".join(lines)


def render_diagnosis(diagnosis: NoAssignmentDiagnosis, classification: ClassificationReport) -> str:
    lines = ["NoAssignment Investigation", "=========================="]
    lines.append(f"Total records with NA releaseGroup: {diagnosis.total}")

    lines += _heading("By Rear and LGDMarkAD")
    lines += [f"  Rear={rear:<4} LGDMarkAD={mark:<4} {n}" for (rear, mark), n in diagnosis.by_rear_and_mark.items()]

    lines += _heading("PBT calls (PBTBYHat / PBTRGroup)")
    lines += [f"  {hat} / {group}: {n}" for hat, group, n in diagnosis.pbt_calls]

    lines += _heading("Wild fish")
    lines.append(f"Wild fish with NA releaseGroup: {diagnosis.wild_total}")
    lines += [f"  GenStock={stock}: {n}" for stock, n in diagnosis.wild_gen_stock]
    if diagnosis.wild_expected_unassigned:
        lines.append(
            f"WARNING: {diagnosis.wild_expected_unassigned} wild fish have a GenStock call "
            "and should read releaseGroup='Unassigned'"
        )

    lines += _heading("Hatchery fish")
    lines.append(f"Hatchery fish with NA releaseGroup: {diagnosis.hatchery_total}")
    for record in diagnosis.hatchery_sample:
        lines.append(
            f"  {record.record_id} LGDMarkAD={record.mark or 'NA'} Rear={record.rear} "
            f"physTag={record.passthrough.get('physTag') or 'NA'} "
            f"PBTBYHat={record.pbt_hatchery or 'NA'} PBTRGroup={record.pbt_release_group or 'NA'}"
        )

    no_assignment = classification.count(ReleaseGroupStatus.NO_ASSIGNMENT)
    lines += _heading("Summary statistics")
    lines.append(f"total_fish={classification.total} has_releaseGroup={classification.total - no_assignment} "
                 f"na_releaseGroup={no_assignment} "
                 f"unassigned_releaseGroup={classification.count(ReleaseGroupStatus.UNASSIGNED)} "
                 f"assigned_to_hatchery={classification.count(ReleaseGroupStatus.ASSIGNED)}")
    statuses = list(ReleaseGroupStatus)
    by_rear = sorted(classification.by_rear.items(), key=lambda item: (item[0][1], statuses.index(item[0][0])))
    for (status, rear), n in by_rear:
        lines.append(f"  Rear={rear:<4} {STATUS_LABELS[status]:<30} {n}")
    return "\n".join(lines)
