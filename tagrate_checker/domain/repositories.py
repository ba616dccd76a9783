"""Repository interfaces anchoring the domain layer."""
from __future__ import annotations

from typing import Protocol, Sequence

from .models import TagRateEntry, TrapRecord


class TrapRecordRepository(Protocol):
    """Provides trap records, one per captured fish."""

    def list_trap_records(self) -> Sequence[TrapRecord]:
        ...


class TagRateRepository(Protocol):
    """Provides tag-rate entries, one per hatchery release group."""

    def list_tag_rates(self) -> Sequence[TagRateEntry]:
        ...
