"""Streamlit front-end for the tag-rate check and SCOBI export."""
from __future__ import annotations

import tempfile
from io import BytesIO
from pathlib import Path
from typing import Sequence

import pandas as pd
import streamlit as st

from tagrate_checker import (
    CsvTagRateRepository,
    CsvTrapRepository,
    ExportForScobiUseCase,
    ReconcileReleaseGroupsUseCase,
    ReconciliationContext,
    ReleaseGroupReconciler,
)
from tagrate_checker.application.dto import SeasonRun
from tagrate_checker.domain.errors import TagRateCheckerError
from tagrate_checker.domain.models import TagRateEntry, TrapRecord
from tagrate_checker.domain.results import ReconciliationReport
from tagrate_checker.logging_config import setup_logging
from tagrate_checker.presentation.anomaly_report import (
    anomalies_to_rows,
    classification_frame,
    missing_groups_frame,
    render_csv,
    render_html,
    render_xlsx,
)

setup_logging()
st.set_page_config(page_title="Tag Rate Check", layout="wide")
st.title("SCOBI Tag Rate Check")


def trap_to_dataframe(records: Sequence[TrapRecord]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "MasterID": r.record_id,
                "Rear": r.rear,
                "LGDMarkAD": r.mark,
                "GenStock": r.gen_stock,
                "PBTBYHat": r.pbt_hatchery,
                "PBTRGroup": r.pbt_release_group,
                "releaseGroup": r.release_group.to_raw(),
                "status": r.release_group.status.value,
            }
            for r in records
        ]
    )


def tag_rates_to_dataframe(entries: Sequence[TagRateEntry]) -> pd.DataFrame:
    return pd.DataFrame([{"group": e.group, "tagRate": e.tag_rate, "source": e.lineage} for e in entries])


def run_check(
    trap_bytes: bytes, trap_name: str, tag_bytes: bytes, tag_name: str, strict: bool
) -> tuple[ReconciliationReport, Sequence[TrapRecord], Sequence[TagRateEntry]]:
    context = ReconciliationContext(
        trap_repository=CsvTrapRepository(BytesIO(trap_bytes), name=trap_name),
        tag_rate_repository=CsvTagRateRepository(BytesIO(tag_bytes), name=tag_name, strict=strict),
        reconciler=ReleaseGroupReconciler(),
    )
    return ReconcileReleaseGroupsUseCase(context).execute()


def run_export(
    trap_bytes: bytes, trap_name: str, tag_bytes: bytes, tag_name: str, strict: bool, season: SeasonRun
) -> dict[str, bytes]:
    with tempfile.TemporaryDirectory() as tmp:
        trap_out, tag_out = season.export_paths(Path(tmp))
        ExportForScobiUseCase(ReleaseGroupReconciler(), strict).execute(
            trap_bytes, tag_bytes, trap_out, tag_out, trap_name=trap_name, tag_rate_name=tag_name
        )
        return {trap_out.name: trap_out.read_bytes(), tag_out.name: tag_out.read_bytes()}


if "view" not in st.session_state:
    st.session_state["view"] = "upload"
if "result" not in st.session_state:
    st.session_state["result"] = None


if st.session_state["view"] == "upload":
    col1, col2 = st.columns(2)
    with col1:
        trap_file = st.file_uploader("Upload trap table", type=["csv", "xlsx", "xls"])
    with col2:
        tag_file = st.file_uploader("Upload tag rates", type=["csv", "xlsx", "xls"])

    col3, col4, col5 = st.columns([1, 1, 2])
    with col3:
        year = st.number_input("Spawn year", min_value=1990, max_value=2100, value=2025, step=1)
    with col4:
        species = st.text_input("Species", value="STHD")
    with col5:
        strict = st.checkbox("Require recognized tag-rate headers", value=False)

    run_btn = st.button("Run Check", disabled=not (trap_file and tag_file))
    if run_btn and trap_file and tag_file:
        trap_bytes = trap_file.read()
        tag_bytes = tag_file.read()
        season = SeasonRun(year=int(year), species=species.strip())
        try:
            with st.spinner("Checking..."):
                report, trap_records, tag_rates = run_check(trap_bytes, trap_file.name, tag_bytes, tag_file.name, strict)
                exports = run_export(trap_bytes, trap_file.name, tag_bytes, tag_file.name, strict, season)
        except TagRateCheckerError as exc:
            st.error(str(exc))
        else:
            st.session_state["result"] = {
                "report": report,
                "trap": trap_records,
                "tag_rates": tag_rates,
                "exports": exports,
            }
            st.session_state["view"] = "results"
            st.rerun()
else:
    back_clicked = st.button("← Back", key="back_to_upload")
    if back_clicked:
        st.session_state["view"] = "upload"
        st.session_state["result"] = None
        st.rerun()

    result = st.session_state.get("result")
    if not result:
        st.info("No results available. Upload files and run the check first.")
    else:
        report: ReconciliationReport = result["report"]
        summary = report.summary

        if report.passed:
            st.success("All assigned release groups have tag rates")
        else:
            st.error(f"{summary.missing_groups} release group(s) missing tag rates ({summary.affected_records} fish)")

        cols = st.columns(6)
        cols[0].metric("Trap records", summary.total_trap_records)
        cols[1].metric("Tag rates", summary.total_tag_rates)
        cols[2].metric("NA release group", summary.no_assignment)
        cols[3].metric("Unassigned", summary.unassigned)
        cols[4].metric("Assigned", summary.assigned)
        cols[5].metric("Hatchery missing tag rate", report.hatchery_coverage.missing_tag_rate)

        tabs = st.tabs(["Classification", "Missing tag rates", "Anomalies", "Trap", "Tag rates", "Downloads"])
        with tabs[0]:
            st.dataframe(classification_frame(report))
        with tabs[1]:
            st.dataframe(missing_groups_frame(report))
        with tabs[2]:
            st.dataframe(pd.DataFrame(anomalies_to_rows(tuple(report.iter_all_anomalies()))))
        with tabs[3]:
            st.dataframe(trap_to_dataframe(result["trap"]))
        with tabs[4]:
            st.dataframe(tag_rates_to_dataframe(result["tag_rates"]))
        with tabs[5]:
            for name, content in result["exports"].items():
                st.download_button(f"Download {name}", data=content, file_name=name, mime="text/csv")
            st.download_button(
                "Download anomalies CSV",
                data=render_csv(tuple(report.iter_all_anomalies())),
                file_name="tagrate_anomalies.csv",
                mime="text/csv",
            )
            st.download_button(
                "Download anomalies HTML",
                data=render_html(report).encode("utf-8"),
                file_name="tagrate_anomalies.html",
                mime="text/html",
            )
            st.download_button(
                "Download report workbook",
                data=render_xlsx(report),
                file_name="tagrate_report.xlsx",
                mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            )
