from pathlib import Path

import pytest

TRAP_HEADER = (
    "MasterID,CollectionDate,sWeek,LGDMarkAD,Rear,physTag,PBTBYHat,PBTRGroup,"
    "releaseGroup,GenStock,MPG,Age,GenSex,LGDFLmm"
)

TRAP_ROWS = [
    "F001,2024-07-02,27,AI,W,NA,NA,NA,Unassigned,UPSALM,Salmon,1:2,F,612",
    "F002,2024-07-03,27,AD,H,NA,NA,NA,NA,NA,NA,NA,M,590",
    "F003,2024-07-09,28,AD,H,3D9.1C2D,DWOR,DWOR-SU-2021,DWOR-SU-2021,NA,NA,1:1,F,640",
    "F004,2024-07-10,28,AI,HNC,NA,DWOR,DWOR-HNC-2021,DWOR-HNC-2021,NA,NA,1:1,M,701",
    "F005,2024-07-16,29,AD,H,NA,DWOR,DWOR-HNC-2021,DWOR-HNC-2021,NA,NA,2:1,F,655",
    "F006,2024-07-17,29,AI,W,NA,NA,NA,NA,NA,NA,NA,F,580",
]


def write_trap(path: Path, rows: list[str] | None = None, header: str = TRAP_HEADER) -> Path:
    path.write_text("\n".join([header] + (TRAP_ROWS if rows is None else rows)) + "\n", encoding="utf-8")
    return path


def write_tag_rates(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def season_dir(tmp_path: Path) -> Path:
    write_trap(tmp_path / "SY2025STHD_trap.csv")
    write_tag_rates(tmp_path / "SY2025STHD_tagRates.csv", "group,tagRate\nDWOR-SU-2021,0.25\nIMNH-SU-2021,0.5\n")
    return tmp_path
