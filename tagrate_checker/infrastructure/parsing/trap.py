"""Trap table parser producing canonical trap records."""
from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Sequence

import pandas as pd

from tagrate_checker.config import TRAP_REQUIRED_COLUMNS
from tagrate_checker.domain.errors import SchemaMismatch
from tagrate_checker.domain.models import ReleaseGroup, TrapRecord
from tagrate_checker.infrastructure.parsing.utils import (
    ensure_bytes,
    optional_str,
    read_table,
    source_label,
)
from tagrate_checker.logging_config import get_logger

logger = get_logger(__name__)

RECORD_FIELDS = {
    "MasterID",
    "Rear",
    "releaseGroup",
    "GenStock",
    "PBTBYHat",
    "PBTRGroup",
    "LGDMarkAD",
}


def read_trap_raw(source: BytesIO | Path | bytes, name: str | None = None) -> pd.DataFrame:
    label = source_label(source, name)
    return read_table(ensure_bytes(source), label)


def validate_trap_columns(
    df: pd.DataFrame,
    source: str = "trap table",
    required: Sequence[str] = TRAP_REQUIRED_COLUMNS,
) -> None:
    missing = [column for column in required if column not in df.columns]
    if missing:
        raise SchemaMismatch(source, missing)


def trap_to_records(df: pd.DataFrame, release_group_column: str = "releaseGroup") -> Sequence[TrapRecord]:
    passthrough_columns = [c for c in df.columns if c not in RECORD_FIELDS and c != release_group_column]

    records: list[TrapRecord] = []
    for idx, row in df.iterrows():
        record_id = optional_str(row.get("MasterID"))
        if record_id is None:
            record_id = f"row-{idx}"
            logger.warning(f"Trap row {idx} has no MasterID; using {record_id}")
        records.append(
            TrapRecord(
                record_id=record_id,
                rear=optional_str(row.get("Rear")),
                release_group=ReleaseGroup.from_raw(optional_str(row.get(release_group_column))),
                gen_stock=optional_str(row.get("GenStock")),
                pbt_hatchery=optional_str(row.get("PBTBYHat")),
                pbt_release_group=optional_str(row.get("PBTRGroup")),
                mark=optional_str(row.get("LGDMarkAD")),
                passthrough={column: optional_str(row.get(column)) for column in passthrough_columns},
                lineage=f"row={idx}",
            )
        )
    return records


def load_trap_records(
    source: BytesIO | Path | bytes,
    name: str | None = None,
    release_group_column: str = "releaseGroup",
) -> Sequence[TrapRecord]:
    label = source_label(source, name)
    dataframe = read_trap_raw(source, label)
    required = list(TRAP_REQUIRED_COLUMNS)
    if release_group_column not in required:
        required.append(release_group_column)
    validate_trap_columns(dataframe, label, required)
    records = trap_to_records(dataframe, release_group_column=release_group_column)
    logger.info(f"Loaded {len(records)} trap records from {label}")
    return records
