import pytest

from tagrate_checker.domain.models import (
    ReleaseGroup,
    ReleaseGroupStatus,
    TrapRecord,
    derive_release_group,
)
from tagrate_checker.domain.services import ReleaseGroupReconciler


@pytest.mark.parametrize(
    "raw, status, group_id",
    [
        (None, ReleaseGroupStatus.NO_ASSIGNMENT, None),
        ("", ReleaseGroupStatus.NO_ASSIGNMENT, None),
        ("  ", ReleaseGroupStatus.NO_ASSIGNMENT, None),
        ("Unassigned", ReleaseGroupStatus.UNASSIGNED, None),
        (" Unassigned ", ReleaseGroupStatus.UNASSIGNED, None),
        ("DWOR-SUMMER-2022", ReleaseGroupStatus.ASSIGNED, "DWOR-SUMMER-2022"),
    ],
)
def test_release_group_from_raw(raw, status, group_id):
    release_group = ReleaseGroup.from_raw(raw)

    assert release_group.status is status
    assert release_group.group_id == group_id


def test_release_group_rejects_inconsistent_state():
    with pytest.raises(ValueError):
        ReleaseGroup(ReleaseGroupStatus.ASSIGNED)
    with pytest.raises(ValueError):
        ReleaseGroup(ReleaseGroupStatus.UNASSIGNED, "G1")


def test_release_group_to_raw_round_trips():
    for raw in (None, "Unassigned", "G1"):
        assert ReleaseGroup.from_raw(raw).to_raw() == raw


def _record(rear, gen_stock=None, pbt_hatchery=None, pbt_release_group=None, release_group=None):
    return TrapRecord(
        record_id="1",
        rear=rear,
        release_group=ReleaseGroup.from_raw(release_group),
        gen_stock=gen_stock,
        pbt_hatchery=pbt_hatchery,
        pbt_release_group=pbt_release_group,
    )


@pytest.mark.parametrize(
    "record, expected",
    [
        (_record("W", gen_stock="UPSALM"), ReleaseGroup.excluded()),
        (_record("W", pbt_hatchery="DWOR", pbt_release_group="G1"), ReleaseGroup.no_call()),
        (_record("H"), ReleaseGroup.no_call()),
        (_record("HNC", pbt_hatchery="Unassigned"), ReleaseGroup.excluded()),
        (_record("H", pbt_hatchery="DWOR", pbt_release_group="G1"), ReleaseGroup.assigned_to("G1")),
    ],
)
def test_derive_release_group(record, expected):
    assert derive_release_group(record) == expected


def test_check_derivation_flags_wild_fish_missing_unassigned():
    reconciler = ReleaseGroupReconciler()
    records = [
        _record("W", gen_stock="UPSALM", release_group=None),
        _record("W", gen_stock="UPSALM", release_group="Unassigned"),
        _record("H", pbt_hatchery="DWOR", pbt_release_group="G1", release_group="G1"),
    ]

    anomalies = reconciler.check_derivation(records)

    assert len(anomalies) == 1
    assert anomalies[0].issue_type == "release_group_mismatch"
    assert "Unassigned" in anomalies[0].message
