from pathlib import Path

import pandas as pd
import pytest

from conftest import TRAP_HEADER, TRAP_ROWS, write_tag_rates, write_trap
from tagrate_checker.domain.errors import InputNotFound, InputUnreadable, SchemaMismatch
from tagrate_checker.domain.models import ReleaseGroupStatus
from tagrate_checker.infrastructure.parsing.tag_rates import load_tag_rates, normalize_tag_rate_columns
from tagrate_checker.infrastructure.parsing.trap import load_trap_records
from tagrate_checker.infrastructure.repositories.csv_repositories import CsvTrapRepository


def test_trap_na_values_become_no_assignment(tmp_path: Path):
    records = load_trap_records(write_trap(tmp_path / "trap.csv"))

    by_id = {r.record_id: r for r in records}
    assert len(records) == len(TRAP_ROWS)
    assert by_id["F001"].release_group.status is ReleaseGroupStatus.UNASSIGNED
    assert by_id["F002"].release_group.status is ReleaseGroupStatus.NO_ASSIGNMENT
    assert by_id["F002"].gen_stock is None
    assert by_id["F003"].release_group.group_id == "DWOR-SU-2021"
    assert by_id["F003"].passthrough["physTag"] == "3D9.1C2D"
    assert by_id["F004"].rear == "HNC"


def test_trap_missing_column_is_schema_mismatch(tmp_path: Path):
    header = TRAP_HEADER.replace(",releaseGroup", "")
    rows = [",".join(row.split(",")[:8] + row.split(",")[9:]) for row in TRAP_ROWS]

    with pytest.raises(SchemaMismatch) as excinfo:
        load_trap_records(write_trap(tmp_path / "trap.csv", rows, header))

    assert excinfo.value.missing == ("releaseGroup",)
    assert "releaseGroup" in str(excinfo.value)


def test_missing_file_is_input_not_found(tmp_path: Path):
    path = tmp_path / "SY2025STHD_trap.csv"

    with pytest.raises(InputNotFound) as excinfo:
        CsvTrapRepository(path)

    assert str(path) in str(excinfo.value)


def test_directory_in_place_of_file_is_input_unreadable(tmp_path: Path):
    path = tmp_path / "SY2025STHD_trap.csv"
    path.mkdir()

    with pytest.raises(InputUnreadable) as excinfo:
        CsvTrapRepository(path)

    assert excinfo.value.path == str(path)
    assert str(path) in str(excinfo.value)


def test_empty_file_is_input_unreadable(tmp_path: Path):
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")

    with pytest.raises(InputUnreadable):
        load_trap_records(path)


@pytest.mark.parametrize(
    "text",
    [
        "group,tagRate\nG1,0.5\nG2,1\n",
        "PBT_RELEASE_GROUP,TAG_RATE\nG1,0.5\nG2,1\n",
        "release,rate\nG1,0.5\nG2,1\n",
    ],
)
def test_tag_rate_header_spellings(tmp_path: Path, text: str):
    entries = load_tag_rates(write_tag_rates(tmp_path / "rates.csv", text))

    assert [(e.group, e.tag_rate) for e in entries] == [("G1", 0.5), ("G2", 1.0)]


def test_strict_headers_reject_positional_fallback(tmp_path: Path):
    path = write_tag_rates(tmp_path / "rates.csv", "release,rate\nG1,0.5\n")

    with pytest.raises(SchemaMismatch) as excinfo:
        load_tag_rates(path, strict=True)

    assert excinfo.value.missing == ("group", "tagRate")


def test_mixed_headers_only_fall_back_where_needed():
    df = pd.DataFrame({"PBT_RELEASE_GROUP": ["G1"], "rate": ["0.3"], "notes": ["x"]})

    normalized = normalize_tag_rate_columns(df, strict=False)

    assert list(normalized.columns) == ["group", "tagRate", "notes"]


def test_single_column_tag_rates_is_schema_mismatch():
    with pytest.raises(SchemaMismatch):
        normalize_tag_rate_columns(pd.DataFrame({"group": ["G1"]}), strict=False)


def test_unparseable_and_blank_tag_rate_rows(tmp_path: Path):
    path = write_tag_rates(tmp_path / "rates.csv", "group,tagRate\nG1,abc\n,0.5\nG2,NA\nG3,0.1\n")

    entries = load_tag_rates(path)

    assert [(e.group, e.tag_rate) for e in entries] == [("G1", None), ("G2", None), ("G3", 0.1)]
