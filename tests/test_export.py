from pathlib import Path

import pandas as pd

from conftest import write_tag_rates
from tagrate_checker.application.dto import SeasonRun
from tagrate_checker.application.use_cases import ExportForScobiUseCase
from tagrate_checker.config import SCOBI_RELEASE_GROUP_COLUMN, TRAP_EXPORT_COLUMNS
from tagrate_checker.domain.services import ReleaseGroupReconciler
from tagrate_checker.infrastructure.export.scobi import build_tag_rate_export


def run_export(season_dir: Path, out_dir: Path):
    season = SeasonRun(year=2025, species="STHD")
    trap_path, tag_rate_path = season.input_paths(season_dir)
    trap_out, tag_rate_out = season.export_paths(out_dir)
    return ExportForScobiUseCase(ReleaseGroupReconciler()).execute(trap_path, tag_rate_path, trap_out, tag_rate_out)


def test_export_file_names_and_layout(season_dir: Path, tmp_path: Path):
    result = run_export(season_dir, tmp_path / "out")

    assert result.trap_path.name == "SY2025STHD_trap_forSCOBI.csv"
    assert result.tag_rate_path.name == "SY2025STHD_tagRates_forSCOBI.csv"

    trap = pd.read_csv(result.trap_path, dtype=str, keep_default_na=False)
    assert list(trap.columns) == list(TRAP_EXPORT_COLUMNS)
    assert (trap[SCOBI_RELEASE_GROUP_COLUMN] == trap["releaseGroup"]).all()
    assert trap.loc[trap["MasterID"] == "F002", "releaseGroup"].item() == "NA"

    rates = pd.read_csv(result.tag_rate_path, dtype=str)
    assert list(rates.columns) == ["PBT_RELEASE_GROUP", "TAG_RATE"]
    assert len(rates) == 2


def test_round_trip_reproduces_missing_groups(season_dir: Path, tmp_path: Path):
    result = run_export(season_dir, tmp_path / "out")

    assert list(result.original.missing) == ["DWOR-HNC-2021"]
    assert result.round_trip.missing == result.original.missing
    assert result.round_trip.total_affected == 2
    assert result.round_trip_consistent
    assert not result.ready


def test_round_trip_with_positional_tag_rate_headers(season_dir: Path, tmp_path: Path):
    write_tag_rates(
        season_dir / "SY2025STHD_tagRates.csv",
        "release_group,rate,comment\nDWOR-SU-2021,0.25,ok\nDWOR-HNC-2021,0.3,ok\n",
    )

    result = run_export(season_dir, tmp_path / "out")

    assert result.original.is_empty
    assert result.round_trip.is_empty
    assert result.ready
    rates = pd.read_csv(result.tag_rate_path, dtype=str)
    assert list(rates.columns) == ["PBT_RELEASE_GROUP", "TAG_RATE"]


def test_tag_rate_export_drops_extra_columns():
    df = pd.DataFrame({"group": ["G1"], "tagRate": [0.5], "hatchery": ["DWOR"]})

    exported = build_tag_rate_export(df)

    assert exported.to_dict("records") == [{"PBT_RELEASE_GROUP": "G1", "TAG_RATE": 0.5}]
