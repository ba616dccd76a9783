"""Domain models for release-group reconciliation.

These dataclasses capture the canonical shape of trap records and tag-rate
entries once the input tables have been normalized.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

UNASSIGNED = "Unassigned"


class RearType(str, Enum):
    WILD = "W"
    HATCHERY = "H"
    HATCHERY_NO_CLIP = "HNC"

    @classmethod
    def from_code(cls, code: str | None) -> RearType | None:
        if code is None:
            return None
        try:
            return cls(code)
        except ValueError:
            return None


HATCHERY_REAR_TYPES = frozenset({RearType.HATCHERY, RearType.HATCHERY_NO_CLIP})


class ReleaseGroupStatus(str, Enum):
    NO_ASSIGNMENT = "NoAssignment"
    UNASSIGNED = "Unassigned"
    ASSIGNED = "Assigned"


@dataclass(frozen=True)
class ReleaseGroup:
    """Three-state release group: no call, excluded ("Unassigned"), or a specific group."""

    status: ReleaseGroupStatus
    group_id: str | None = None

    def __post_init__(self) -> None:
        if (self.status is ReleaseGroupStatus.ASSIGNED) != bool(self.group_id):
            raise ValueError(f"Release group {self.status.value} cannot carry group_id={self.group_id!r}")

    @classmethod
    def no_call(cls) -> ReleaseGroup:
        return cls(ReleaseGroupStatus.NO_ASSIGNMENT)

    @classmethod
    def excluded(cls) -> ReleaseGroup:
        return cls(ReleaseGroupStatus.UNASSIGNED)

    @classmethod
    def assigned_to(cls, group_id: str) -> ReleaseGroup:
        return cls(ReleaseGroupStatus.ASSIGNED, group_id)

    @classmethod
    def from_raw(cls, value: str | None) -> ReleaseGroup:
        if value is None or not value.strip():
            return cls.no_call()
        value = value.strip()
        if value == UNASSIGNED:
            return cls.excluded()
        return cls.assigned_to(value)

    @property
    def is_assigned(self) -> bool:
        return self.status is ReleaseGroupStatus.ASSIGNED

    def to_raw(self) -> str | None:
        if self.status is ReleaseGroupStatus.NO_ASSIGNMENT:
            return None
        if self.status is ReleaseGroupStatus.UNASSIGNED:
            return UNASSIGNED
        return self.group_id

    def __str__(self) -> str:
        return self.to_raw() or "NA"


@dataclass(frozen=True)
class TrapRecord:
    """One captured fish as read from the trap table."""

    record_id: str
    rear: str | None
    release_group: ReleaseGroup
    gen_stock: str | None = None
    pbt_hatchery: str | None = None
    pbt_release_group: str | None = None
    mark: str | None = None
    passthrough: Mapping[str, str | None] = field(default_factory=dict, compare=False, hash=False)
    lineage: str | None = None

    @property
    def rear_type(self) -> RearType | None:
        return RearType.from_code(self.rear)

    @property
    def is_hatchery(self) -> bool:
        return self.rear_type in HATCHERY_REAR_TYPES


@dataclass(frozen=True)
class TagRateEntry:
    """One row of the tag-rate table."""

    group: str
    tag_rate: float | None
    lineage: str | None = None

    @property
    def is_valid_rate(self) -> bool:
        return self.tag_rate is not None and 0 < self.tag_rate <= 1


@dataclass(frozen=True)
class Anomaly:
    """A non-fatal data problem surfaced in the report."""

    issue_type: str
    subject: str
    message: str
    count: int = 1
    tag_rate: TagRateEntry | None = None
    record: TrapRecord | None = None


def derive_release_group(record: TrapRecord) -> ReleaseGroup:
    """Release group implied by the rear type, GenStock and PBT calls of ``record``."""
    if record.rear_type is RearType.WILD:
        return ReleaseGroup.excluded() if record.gen_stock else ReleaseGroup.no_call()
    if not record.pbt_hatchery:
        return ReleaseGroup.no_call()
    if record.pbt_hatchery == UNASSIGNED:
        return ReleaseGroup.excluded()
    return ReleaseGroup.from_raw(record.pbt_release_group)
