from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from launchpad.lptypes.claim import ClaimLeaf
from launchpad.proofs.hash import LEAF_PREIMAGE_LEN, encode_leaf, keccak256, leaf_hash, uint256
from launchpad.proofs.merkle import (build_all_proofs, build_layers, build_proof, hash_pair,
                                     merkle_root, process_proof, verify_proof)

from .conftest import ALICE, BOB


def H(i: int) -> bytes:
    return keccak256(i.to_bytes(4, "big"))


def test_keccak_vector():
    # Keccak-256 (not SHA3-256) of the empty string.
    assert keccak256(b"").hex() == "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"


def test_leaf_encoding_is_packed():
    raw = encode_leaf(7, ALICE, 10**18, 5)
    assert len(raw) == LEAF_PREIMAGE_LEN == 116
    assert raw[:32] == uint256(7)
    assert raw[32:52] == bytes.fromhex(ALICE[2:])
    assert raw[52:84] == uint256(10**18)
    assert raw[84:] == uint256(5)
    assert leaf_hash(ClaimLeaf(7, ALICE, 10**18, 5)) == keccak256(raw)


def test_leaf_hash_is_case_insensitive_on_address():
    upper = "0x" + BOB[2:].upper()
    assert leaf_hash(ClaimLeaf(0, upper, 1, 0)) == leaf_hash(ClaimLeaf(0, BOB, 1, 0))


def test_hash_pair_is_order_independent():
    a, b = H(1), H(2)
    assert hash_pair(a, b) == hash_pair(b, a)
    assert hash_pair(a, b) == keccak256(min(a, b) + max(a, b))


def test_single_leaf_is_its_own_root():
    assert merkle_root([H(0)]) == H(0)
    assert build_proof([H(0)], 0) == []
    assert verify_proof(H(0), [], H(0))


def test_odd_node_is_promoted_without_a_sibling():
    leaves = [H(0), H(1), H(2)]
    layers = build_layers(leaves)
    assert layers[1] == [hash_pair(H(0), H(1)), H(2)]
    assert merkle_root(leaves) == hash_pair(hash_pair(H(0), H(1)), H(2))
    assert build_proof(leaves, 2) == [hash_pair(H(0), H(1))]
    assert build_proof(leaves, 0) == [H(1), H(2)]


def test_five_leaves_promote_twice():
    leaves = [H(i) for i in range(5)]
    left = hash_pair(hash_pair(H(0), H(1)), hash_pair(H(2), H(3)))
    assert merkle_root(leaves) == hash_pair(left, H(4))
    assert build_proof(leaves, 4) == [left]


def test_empty_tree_rejected():
    with pytest.raises(ValueError):
        merkle_root([])


def test_proof_index_out_of_range():
    with pytest.raises(IndexError):
        build_proof([H(0), H(1)], 2)


def test_tampered_proof_fails():
    leaves = [H(i) for i in range(6)]
    root = merkle_root(leaves)
    proof = build_proof(leaves, 3)
    assert verify_proof(leaves[3], proof, root)
    assert not verify_proof(leaves[4], proof, root)
    assert not verify_proof(leaves[3], proof[:-1], root)
    assert not verify_proof(leaves[3], [b"\x00" * 31] + proof[1:], root)


@settings(max_examples=60, deadline=None)
@given(n=st.integers(min_value=1, max_value=70))
def test_every_proof_verifies(n):
    leaves = [H(i) for i in range(n)]
    root = merkle_root(leaves)
    for i, proof in enumerate(build_all_proofs(leaves)):
        assert process_proof(leaves[i], proof) == root
        assert proof == build_proof(leaves, i)
