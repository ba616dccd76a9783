"""Tag-rate table parser.

Tag-rate files arrive under several header spellings. ``normalize_tag_rate_columns``
is the single place that maps them onto the canonical ``group`` / ``tagRate``
names; nothing downstream of it looks at raw headers.
"""
from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Sequence

import pandas as pd

from tagrate_checker.config import SETTINGS, TAG_RATE_HEADER_ALIASES
from tagrate_checker.domain.errors import SchemaMismatch
from tagrate_checker.domain.models import TagRateEntry
from tagrate_checker.infrastructure.parsing.utils import (
    ensure_bytes,
    optional_str,
    parse_rate,
    read_table,
    source_label,
)
from tagrate_checker.logging_config import get_logger

logger = get_logger(__name__)

GROUP_COLUMN = "group"
TAG_RATE_COLUMN = "tagRate"


def _find_alias(columns: Sequence[str], position: int) -> str | None:
    for aliases in TAG_RATE_HEADER_ALIASES:
        if aliases[position] in columns:
            return aliases[position]
    return None


def normalize_tag_rate_columns(
    df: pd.DataFrame,
    strict: bool | None = None,
    source: str = "tag-rate table",
) -> pd.DataFrame:
    if strict is None:
        strict = SETTINGS.strict_tag_rate_headers
    columns = list(df.columns)
    canonical_names = (GROUP_COLUMN, TAG_RATE_COLUMN)
    matches = {canonical: _find_alias(columns, position) for position, canonical in enumerate(canonical_names)}
    renames = {alias: canonical for canonical, alias in matches.items() if alias is not None}
    unmatched: list[str] = []

    for position, canonical in enumerate(canonical_names):
        if matches[canonical] is not None:
            continue
        if strict or len(columns) <= position or columns[position] in renames:
            unmatched.append(canonical)
            continue
        fallback = columns[position]
        logger.warning(
            f"{source}: no recognized header for {canonical!r}; using column {position + 1} ({fallback!r})"
        )
        renames[fallback] = canonical

    if unmatched:
        raise SchemaMismatch(source, unmatched)

    return df.rename(columns=renames)


def tag_rates_to_records(df: pd.DataFrame) -> Sequence[TagRateEntry]:
    records: list[TagRateEntry] = []
    for idx, row in df.iterrows():
        group = optional_str(row.get(GROUP_COLUMN))
        if group is None:
            logger.warning(f"Skipping tag-rate row {idx}: no release group")
            continue
        records.append(
            TagRateEntry(
                group=group,
                tag_rate=parse_rate(row.get(TAG_RATE_COLUMN)),
                lineage=f"row={idx}",
            )
        )
    return records


def read_tag_rates(
    source: BytesIO | Path | bytes,
    name: str | None = None,
    strict: bool | None = None,
) -> pd.DataFrame:
    """Read a tag-rate table and return it with canonical column names."""
    label = source_label(source, name)
    dataframe = read_table(ensure_bytes(source), label)
    return normalize_tag_rate_columns(dataframe, strict=strict, source=label)


def load_tag_rates(
    source: BytesIO | Path | bytes,
    name: str | None = None,
    strict: bool | None = None,
) -> Sequence[TagRateEntry]:
    label = source_label(source, name)
    records = tag_rates_to_records(read_tag_rates(source, label, strict=strict))
    logger.info(f"Loaded {len(records)} tag rates from {label}")
    return records
