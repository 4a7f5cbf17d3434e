from __future__ import annotations

import json

import pytest

from launchpad.errors import AllocationError
from launchpad.lptypes.offering import Snapshot
from launchpad.proofs.distribution import (METHOD, Distribution, check_conservation,
                                           generate_distribution, get_claim_data, verify_claim,
                                           verify_participant_allocation)

from .conftest import ALICE, BOB, CAROL, DAVE


@pytest.fixture
def snapshot() -> Snapshot:
    return Snapshot(
        offering_id=1,
        max_allocation=1_000,
        tokens_for_participants=6_000,
        deposits=((ALICE, 500), (BOB, 400), (CAROL, 300)),
    )


def test_generate_assigns_dense_indices_in_deposit_order(snapshot):
    dist = generate_distribution(snapshot)
    assert [e.index for e in dist.entries] == [0, 1, 2]
    assert [e.address for e in dist.entries] == [ALICE, BOB, CAROL]
    assert [(e.token_amount, e.refund_amount) for e in dist.entries] == [(2_139, 144), (2_054, 58), (1_800, 0)]
    assert dist.method == METHOD


def test_summary_fields(snapshot):
    s = generate_distribution(snapshot).summary
    assert s["totalParticipants"] == 3
    assert s["totalTokens"] == "5993"
    assert s["totalRefunds"] == "202"
    assert s["regime"] == "over_subscribed"
    assert s["avgAllocation"] == "333"
    assert s["totalLeftover"] == "33"
    assert s["totalExcess"] == "234"
    assert s["tokensForParticipants"] == "6000"


def test_every_entry_proves_against_root(snapshot):
    dist = generate_distribution(snapshot)
    for e in dist.entries:
        assert verify_claim(dist, e.claim())


def test_json_roundtrip_keeps_root_and_proofs(snapshot):
    dist = generate_distribution(snapshot)
    doc = json.loads(dist.to_json())
    assert doc["merkleRoot"] == "0x" + dist.merkle_root.hex()
    assert doc["participants"][0]["tokenAmount"] == "2139"
    back = Distribution.from_json(dist.to_json())
    assert back.merkle_root == dist.merkle_root
    assert [e.proof for e in back.entries] == [e.proof for e in dist.entries]


def test_claim_lookup_is_case_insensitive(snapshot):
    dist = generate_distribution(snapshot)
    claim = get_claim_data(dist, "0x" + BOB[2:].upper())
    assert claim is not None
    assert claim.leaf.index == 1
    assert get_claim_data(dist, DAVE) is None


def test_no_participants_is_an_error():
    with pytest.raises(AllocationError):
        generate_distribution(Snapshot(offering_id=9, max_allocation=1, tokens_for_participants=1))


def test_verify_participant_allocation(snapshot):
    dist = generate_distribution(snapshot)
    report = verify_participant_allocation(snapshot, dist, ALICE)
    assert report["verified"] is True
    assert report["calculatedTokens"] == report["claimedTokens"] == "2139"
    assert report["proofValid"] is True


def test_verify_participant_allocation_detects_inflated_leaf(snapshot):
    dist = generate_distribution(snapshot)
    dist.entries[0].token_amount += 1
    report = verify_participant_allocation(snapshot, dist, ALICE)
    assert report["verified"] is False
    assert report["tokensMatch"] is False
    assert report["proofValid"] is False


def test_unknown_participant_not_verified(snapshot):
    report = verify_participant_allocation(snapshot, generate_distribution(snapshot), DAVE)
    assert report["verified"] is False
    assert report["claimedTokens"] == "0"


def test_conservation_ok(snapshot):
    report = check_conservation(snapshot, generate_distribution(snapshot))
    assert report.ok, report.violations
    assert report.total_tokens == 5_993


def test_conservation_flags_tampering(snapshot):
    dist = generate_distribution(snapshot)
    dist.entries[2].refund_amount = 50
    report = check_conservation(snapshot, dist)
    assert not report.ok
    assert any("merkle root" in v for v in report.violations)
    assert any("index 2" in v for v in report.violations)


def test_conservation_undersubscribed():
    snap = Snapshot(offering_id=2, max_allocation=1_000, tokens_for_participants=6_000,
                    deposits=((ALICE, 300), (BOB, 200)))
    report = check_conservation(snap, generate_distribution(snap))
    assert report.ok
    assert report.regime == "under_subscribed"
    assert report.total_refunds == 0


def test_snapshot_dict_roundtrip(snapshot):
    assert Snapshot.from_dict(snapshot.to_dict()) == snapshot
