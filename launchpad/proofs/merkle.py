"""
Sorted-pair Merkle trees over claim leaves.

Design choices
--------------
• Leaves are already-hashed 32-byte digests (see `proofs.hash.leaf_hash`),
  kept in claim-index order.
• Inner nodes hash the two children in ascending byte order:
      node = keccak256(min(a, b) || max(a, b))
  so a proof is just the list of siblings; no left/right flags are needed.
• An unpaired node at the end of an odd-length layer is PROMOTED unchanged to
  the next layer (no duplication, no zero padding). It contributes no sibling
  to the proof at that level. Generation and verification both use this rule.
• A single leaf is its own root with an empty proof.

Key functions
-------------
- hash_pair(a, b)
- build_layers(leaf_hashes)
- merkle_root(leaf_hashes)
- build_proof(leaf_hashes, index)       -> list of siblings
- build_all_proofs(leaf_hashes)         -> proofs for every index (one tree build)
- verify_proof(leaf_hash, proof, root)  -> bool
"""
from __future__ import annotations

from typing import List, Sequence

from .hash import keccak256

Hash = bytes

HASH_LEN = 32


def hash_pair(a: Hash, b: Hash) -> Hash:
    if len(a) != HASH_LEN or len(b) != HASH_LEN:
        raise ValueError("merkle nodes must be 32 bytes")
    return keccak256(a + b) if a <= b else keccak256(b + a)


def build_layers(leaf_hashes: Sequence[Hash]) -> List[List[Hash]]:
    """
    Return every layer, leaves first and root last.

    Raises:
        ValueError if `leaf_hashes` is empty.
    """
    if not leaf_hashes:
        raise ValueError("cannot build a tree over an empty leaf set")
    layer: List[Hash] = [bytes(h) for h in leaf_hashes]
    for h in layer:
        if len(h) != HASH_LEN:
            raise ValueError("leaf hashes must be 32 bytes")
    layers = [layer]
    while len(layer) > 1:
        nxt: List[Hash] = []
        for i in range(0, len(layer) - 1, 2):
            nxt.append(hash_pair(layer[i], layer[i + 1]))
        if len(layer) % 2 == 1:
            nxt.append(layer[-1])
        layers.append(nxt)
        layer = nxt
    return layers


def merkle_root(leaf_hashes: Sequence[Hash]) -> Hash:
    return build_layers(leaf_hashes)[-1][0]


def _proof_from_layers(layers: List[List[Hash]], index: int) -> List[Hash]:
    proof: List[Hash] = []
    i = index
    for layer in layers[:-1]:
        sib = i ^ 1
        if sib < len(layer):
            proof.append(layer[sib])
        i //= 2
    return proof


def build_proof(leaf_hashes: Sequence[Hash], index: int) -> List[Hash]:
    if not (0 <= index < len(leaf_hashes)):
        raise IndexError(f"leaf index out of range: {index}")
    return _proof_from_layers(build_layers(leaf_hashes), index)


def build_all_proofs(leaf_hashes: Sequence[Hash]) -> List[List[Hash]]:
    layers = build_layers(leaf_hashes)
    return [_proof_from_layers(layers, i) for i in range(len(leaf_hashes))]


def process_proof(leaf_hash: Hash, proof: Sequence[Hash]) -> Hash:
    node = bytes(leaf_hash)
    for sib in proof:
        node = hash_pair(node, bytes(sib))
    return node


def verify_proof(leaf_hash: Hash, proof: Sequence[Hash], root: Hash) -> bool:
    """Walk `proof` from `leaf_hash`; True iff the result equals `root`."""
    try:
        return process_proof(leaf_hash, proof) == bytes(root)
    except ValueError:
        return False


__all__ = [
    "Hash",
    "HASH_LEN",
    "hash_pair",
    "build_layers",
    "merkle_root",
    "build_proof",
    "build_all_proofs",
    "process_proof",
    "verify_proof",
]
