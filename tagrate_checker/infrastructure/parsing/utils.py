"""Shared parsing utilities for trap and tag-rate ingestion."""
from __future__ import annotations

from io import BytesIO
from pathlib import Path

import pandas as pd

from tagrate_checker.domain.errors import InputNotFound, InputUnreadable
from tagrate_checker.logging_config import get_logger

logger = get_logger(__name__)

EXCEL_ENGINES = {
    ".xlsx": "openpyxl",
    ".xlsm": "openpyxl",
    ".xls": "xlrd",
}


def ensure_bytes(source: BytesIO | Path | bytes) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, BytesIO):
        return source.getvalue()
    if isinstance(source, Path):
        if not source.exists():
            raise InputNotFound(str(source))
        try:
            return source.read_bytes()
        except OSError as exc:
            raise InputUnreadable(str(source), exc.strerror or str(exc)) from exc
    raise TypeError(f"Unsupported source type: {type(source)!r}")


def source_label(source: BytesIO | Path | bytes, name: str | None = None) -> str:
    if name:
        return name
    if isinstance(source, Path):
        return str(source)
    return "<memory>"


def read_table(data: bytes, name: str) -> pd.DataFrame:
    """Read a CSV or Excel table as strings, with R-style NA markers treated as missing."""
    suffix = Path(name).suffix.lower()
    engine = EXCEL_ENGINES.get(suffix)
    if engine is not None:
        try:
            df = pd.read_excel(BytesIO(data), sheet_name=0, engine=engine, dtype=str)
        except Exception as exc:
            # openpyxl and xlrd each raise their own error types for corrupt workbooks
            raise InputUnreadable(name, str(exc)) from exc
    else:
        try:
            df = pd.read_csv(BytesIO(data), dtype=str, skipinitialspace=True)
        except (ValueError, UnicodeDecodeError) as exc:
            raise InputUnreadable(name, str(exc)) from exc
    df.columns = [str(c).strip() for c in df.columns]
    logger.debug(f"Read {len(df)} rows x {len(df.columns)} columns from {name}")
    return df


def optional_str(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, float) and pd.isna(value):
        return None
    s = str(value).strip()
    if not s or s.upper() in {"NA", "NAN"}:
        return None
    return s


def parse_rate(value: object) -> float | None:
    s = optional_str(value)
    if s is None:
        return None
    try:
        rate = float(s)
    except ValueError:
        return None
    if pd.isna(rate):
        return None
    return rate
