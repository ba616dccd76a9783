import csv
import io

import pandas as pd

from tagrate_checker.domain.models import ReleaseGroup, TagRateEntry, TrapRecord
from tagrate_checker.domain.services import ReleaseGroupReconciler
from tagrate_checker.presentation.anomaly_report import render_csv, render_html, render_xlsx


def build_report(tag_rates):
    records = [
        TrapRecord(record_id="1", rear="H", release_group=ReleaseGroup.assigned_to("G1"), pbt_hatchery="DWOR",
                   pbt_release_group="G1"),
        TrapRecord(record_id="2", rear="H", release_group=ReleaseGroup.assigned_to("G2"), pbt_hatchery="DWOR",
                   pbt_release_group="G2"),
    ]
    return ReleaseGroupReconciler().reconcile(records, tag_rates)


def test_csv_lists_every_anomaly():
    report = build_report([TagRateEntry("G1", 0.0, lineage="row=0"), TagRateEntry("G1", 0.5, lineage="row=1")])

    rows = list(csv.DictReader(io.StringIO(render_csv(tuple(report.iter_all_anomalies())).decode("utf-8"))))

    assert [row["issue_type"] for row in rows] == ["missing_tag_rate", "invalid_tag_rate", "duplicate_group"]
    assert rows[0]["subject"] == "G2"
    assert rows[1]["tag_rate"] == "0.0"
    assert rows[1]["source_row"] == "row=0"
    assert rows[2]["count"] == "2"


def test_html_without_anomalies():
    report = build_report([TagRateEntry("G1", 0.5), TagRateEntry("G2", 0.5)])

    assert render_html(report) == "<p>No anomalies detected.</p>"


def test_xlsx_workbook_sheets():
    report = build_report([TagRateEntry("G1", 0.5)])

    sheets = pd.read_excel(io.BytesIO(render_xlsx(report)), sheet_name=None, engine="openpyxl")

    assert list(sheets) == ["summary", "classification", "missing_tag_rates", "anomalies"]
    assert sheets["missing_tag_rates"]["releaseGroup"].tolist() == ["G2"]
    verdict = sheets["summary"].set_index("metric").loc["Verdict", "value"]
    assert verdict == "FAIL"


def test_html_escapes_cell_text():
    records = [
        TrapRecord(record_id="1", rear="H", release_group=ReleaseGroup.assigned_to("G<b>2"), pbt_hatchery="DWOR",
                   pbt_release_group="G<b>2"),
    ]
    report = ReleaseGroupReconciler().reconcile(records, [])

    table = render_html(report)

    assert "G&lt;b&gt;2" in table
    assert "<b>" not in table
