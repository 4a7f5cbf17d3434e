"""
Claim proofs: leaf hashing, sorted-pair Merkle trees, the off-chain
distribution generator and signed commitments.
"""
from __future__ import annotations

from .hash import encode_leaf, keccak256, leaf_hash
from .merkle import build_all_proofs, build_proof, hash_pair, merkle_root, verify_proof

__all__ = [
    "encode_leaf",
    "keccak256",
    "leaf_hash",
    "build_all_proofs",
    "build_proof",
    "hash_pair",
    "merkle_root",
    "verify_proof",
]
