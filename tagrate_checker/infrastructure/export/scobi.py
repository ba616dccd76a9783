"""Normalized exports in the column layout SCOBI expects."""
from __future__ import annotations

from pathlib import Path

import pandas as pd

from tagrate_checker.config import (
    SCOBI_RELEASE_GROUP_COLUMN,
    SETTINGS,
    TAG_RATE_EXPORT_COLUMNS,
    TRAP_EXPORT_COLUMNS,
    TRAP_REQUIRED_COLUMNS,
)
from tagrate_checker.infrastructure.parsing.tag_rates import GROUP_COLUMN, TAG_RATE_COLUMN
from tagrate_checker.infrastructure.parsing.trap import validate_trap_columns
from tagrate_checker.logging_config import get_logger

logger = get_logger(__name__)


def build_trap_export(trap: pd.DataFrame) -> pd.DataFrame:
    validate_trap_columns(trap, "trap table", TRAP_REQUIRED_COLUMNS)
    work = trap.copy()
    work[SCOBI_RELEASE_GROUP_COLUMN] = work["releaseGroup"]
    return work.loc[:, list(TRAP_EXPORT_COLUMNS)]


def build_tag_rate_export(tag_rates: pd.DataFrame) -> pd.DataFrame:
    """Rename canonical ``group`` / ``tagRate`` columns to the SCOBI headers and drop the rest."""
    renames = dict(zip((GROUP_COLUMN, TAG_RATE_COLUMN), TAG_RATE_EXPORT_COLUMNS))
    return tag_rates.rename(columns=renames).loc[:, list(TAG_RATE_EXPORT_COLUMNS)]


def write_export(df: pd.DataFrame, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False, na_rep=SETTINGS.export_na_rep)
    logger.info(f"Wrote {len(df)} rows to {path}")
    return path
