from __future__ import annotations

from dataclasses import replace

import pytest

from launchpad.lptypes.offering import Snapshot
from launchpad.proofs.commitment import (Commitment, commitment_for, generate_keypair, public_key_of,
                                         sign_commitment, verify_commitment)
from launchpad.proofs.distribution import generate_distribution

from .conftest import ALICE, BOB


def _dist():
    return generate_distribution(
        Snapshot(offering_id=3, max_allocation=1_000, tokens_for_participants=6_000,
                 deposits=((ALICE, 700), (BOB, 600)))
    )


def test_sign_and_verify():
    priv, pub = generate_keypair()
    assert public_key_of(priv) == pub
    c = sign_commitment(commitment_for(_dist()), priv)
    assert len(c.signature) == 64
    assert verify_commitment(c, pub)


def test_any_field_change_breaks_signature():
    priv, pub = generate_keypair()
    c = sign_commitment(commitment_for(_dist()), priv)
    assert not verify_commitment(replace(c, total_refunds=c.total_refunds + 1), pub)
    assert not verify_commitment(replace(c, merkle_root=b"\x00" * 32), pub)
    assert not verify_commitment(replace(c, signature=b""), pub)


def test_wrong_length_public_key_is_rejected():
    priv, pub = generate_keypair()
    c = sign_commitment(commitment_for(_dist()), priv)
    with pytest.raises(ValueError):
        verify_commitment(c, pub[:31])


def test_commitment_carries_aggregates():
    d = _dist()
    c = commitment_for(d)
    assert c.participant_count == 2
    assert c.total_tokens == d.total_tokens
    assert c.total_leftover == d.total_leftover == 0
    assert c.total_excess == d.total_excess


def test_dict_roundtrip():
    priv, _ = generate_keypair()
    c = sign_commitment(commitment_for(_dist()), priv)
    assert Commitment.from_dict(c.to_dict()) == c
