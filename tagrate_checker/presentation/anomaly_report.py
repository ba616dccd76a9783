"""Anomaly report generators (CSV, HTML, Excel)."""
from __future__ import annotations

import csv
import html
import io
from typing import Sequence

import pandas as pd

from tagrate_checker.domain.models import Anomaly
from tagrate_checker.domain.results import ReconciliationReport

ANOMALY_FIELDS = ["issue_type", "subject", "count", "message", "tag_rate", "source_row"]


def anomalies_to_rows(anomalies: Sequence[Anomaly]) -> list[dict[str, str]]:
    rows: list[dict[str, str]] = []
    for item in anomalies:
        tag_rate = ""
        source_row = ""
        if item.tag_rate is not None:
            tag_rate = "NA" if item.tag_rate.tag_rate is None else str(item.tag_rate.tag_rate)
            source_row = item.tag_rate.lineage or ""
        elif item.record is not None:
            source_row = item.record.lineage or ""
        rows.append(
            {
                "issue_type": item.issue_type,
                "subject": item.subject,
                "count": str(item.count),
                "message": item.message,
                "tag_rate": tag_rate,
                "source_row": source_row,
            }
        )
    return rows


def render_csv(anomalies: Sequence[Anomaly]) -> bytes:
    rows = anomalies_to_rows(anomalies)
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=ANOMALY_FIELDS)
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


def render_html(report: ReconciliationReport) -> str:
    rows = anomalies_to_rows(tuple(report.iter_all_anomalies()))
    if not rows:
        return "<p>No anomalies detected.</p>"
    header = "".join(f"<th>{html.escape(col)}</th>" for col in ANOMALY_FIELDS)
    body_parts = []
    for row in rows:
        body_parts.append("<tr>" + "".join(f"<td>{html.escape(row[col])}</td>" for col in ANOMALY_FIELDS) + "</tr>")
    body_html = "".join(body_parts)
    return f"<table><thead><tr>{header}</tr></thead><tbody>{body_html}</tbody></table>"


def classification_frame(report: ReconciliationReport) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"status": status.value, "Rear": rear, "n": n}
            for (status, rear), n in report.classification.by_rear.items()
        ],
        columns=["status", "Rear", "n"],
    )


def missing_groups_frame(report: ReconciliationReport) -> pd.DataFrame:
    return pd.DataFrame(
        [{"releaseGroup": impact.group, "n": impact.count} for impact in report.coverage.impacts],
        columns=["releaseGroup", "n"],
    )


def render_xlsx(report: ReconciliationReport) -> bytes:
    """Workbook with one sheet each for the summary, classification, missing groups and anomalies."""
    summary = report.summary
    summary_df = pd.DataFrame(
        [
            ("Trap records", summary.total_trap_records),
            ("Tag rates", summary.total_tag_rates),
            ("NoAssignment", summary.no_assignment),
            ("Unassigned", summary.unassigned),
            ("Assigned", summary.assigned),
            ("Missing release groups", summary.missing_groups),
            ("Fish affected", summary.affected_records),
            ("Invalid tag rates", summary.invalid_tag_rates),
            ("Duplicate groups", summary.duplicate_groups),
            ("Verdict", "PASS" if report.passed else "FAIL"),
        ],
        columns=["metric", "value"],
    )
    anomalies_df = pd.DataFrame(anomalies_to_rows(tuple(report.iter_all_anomalies())), columns=ANOMALY_FIELDS)

    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="xlsxwriter") as writer:
        summary_df.to_excel(writer, sheet_name="summary", index=False)
        classification_frame(report).to_excel(writer, sheet_name="classification", index=False)
        missing_groups_frame(report).to_excel(writer, sheet_name="missing_tag_rates", index=False)
        anomalies_df.to_excel(writer, sheet_name="anomalies", index=False)
    return buf.getvalue()
