"""File-backed repositories for trap and tag-rate tables."""
from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Sequence

from tagrate_checker.domain.models import TagRateEntry, TrapRecord
from tagrate_checker.domain.repositories import TagRateRepository, TrapRecordRepository
from tagrate_checker.infrastructure.parsing.tag_rates import load_tag_rates
from tagrate_checker.infrastructure.parsing.trap import load_trap_records
from tagrate_checker.infrastructure.parsing.utils import ensure_bytes, source_label


class CsvTrapRepository(TrapRecordRepository):
    def __init__(
        self,
        source: BytesIO | Path | bytes,
        name: str | None = None,
        release_group_column: str = "releaseGroup",
    ) -> None:
        self._name = source_label(source, name)
        self._source = ensure_bytes(source)
        self._release_group_column = release_group_column

    def list_trap_records(self) -> Sequence[TrapRecord]:
        return load_trap_records(self._source, self._name, release_group_column=self._release_group_column)


class CsvTagRateRepository(TagRateRepository):
    def __init__(self, source: BytesIO | Path | bytes, name: str | None = None, strict: bool | None = None) -> None:
        self._name = source_label(source, name)
        self._source = ensure_bytes(source)
        self._strict = strict

    def list_tag_rates(self) -> Sequence[TagRateEntry]:
        return load_tag_rates(self._source, self._name, strict=self._strict)
