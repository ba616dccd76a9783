"""Central configuration for the tag-rate checker package."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

# Column contract with the EASE workflow that produces the trap table.
TRAP_REQUIRED_COLUMNS = (
    "MasterID",
    "CollectionDate",
    "sWeek",
    "LGDMarkAD",
    "Rear",
    "physTag",
    "PBTBYHat",
    "PBTRGroup",
    "releaseGroup",
    "GenStock",
    "MPG",
    "Age",
    "GenSex",
    "LGDFLmm",
)

SCOBI_RELEASE_GROUP_COLUMN = "GenPBT_ByHatGenPBT_RGroup"

TRAP_EXPORT_COLUMNS = (
    "MasterID",
    "CollectionDate",
    "sWeek",
    "LGDMarkAD",
    "Rear",
    "physTag",
    "PBTBYHat",
    "PBTRGroup",
    SCOBI_RELEASE_GROUP_COLUMN,
    "releaseGroup",
    "GenStock",
    "MPG",
    "Age",
    "GenSex",
    "LGDFLmm",
)

# Accepted (group, tag rate) header spellings, in order of preference.
TAG_RATE_HEADER_ALIASES = (
    ("group", "tagRate"),
    ("PBT_RELEASE_GROUP", "TAG_RATE"),
)
TAG_RATE_EXPORT_COLUMNS = ("PBT_RELEASE_GROUP", "TAG_RATE")

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_DIR / "data"


@dataclass(slots=True, frozen=True)
class Settings:
    na_label: str
    export_na_rep: str
    data_dir: Path
    sample_size: int
    strict_tag_rate_headers: bool


SETTINGS = Settings(
    na_label="NA",
    export_na_rep="NA",
    data_dir=DATA_DIR,
    sample_size=20,
    strict_tag_rate_headers=False,
)


def season_prefix(year: int | str, species: str) -> str:
    return f"SY{year}{species}"


def season_input_paths(year: int | str, species: str, data_dir: Path | None = None) -> tuple[Path, Path]:
    root = Path(data_dir) if data_dir is not None else SETTINGS.data_dir
    prefix = season_prefix(year, species)
    return root / f"{prefix}_trap.csv", root / f"{prefix}_tagRates.csv"


def season_export_paths(year: int | str, species: str, out_dir: Path | None = None) -> tuple[Path, Path]:
    root = Path(out_dir) if out_dir is not None else SETTINGS.data_dir
    prefix = season_prefix(year, species)
    return root / f"{prefix}_trap_forSCOBI.csv", root / f"{prefix}_tagRates_forSCOBI.csv"
