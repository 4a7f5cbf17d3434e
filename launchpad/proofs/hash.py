"""
Keccak-256 and the packed claim-leaf encoding.

Leaf preimage (tightly packed, big-endian, 116 bytes):

    uint256 index | address participant (20) | uint256 tokenAmount | uint256 refundAmount

This is the same layout as Solidity's `abi.encodePacked(uint256, address,
uint256, uint256)`, so leaves can be checked by an EVM verifier as well.
"""
from __future__ import annotations

from typing import Union

from Crypto.Hash import keccak as _keccak

from launchpad.lptypes.address import address_bytes
from launchpad.lptypes.claim import ClaimLeaf

BytesLike = Union[bytes, bytearray, memoryview]

UINT256_MAX = (1 << 256) - 1
LEAF_PREIMAGE_LEN = 32 + 20 + 32 + 32


def keccak256(data: BytesLike) -> bytes:
    h = _keccak.new(digest_bits=256)
    h.update(bytes(data))
    return h.digest()


def keccak256_hex(data: BytesLike) -> str:
    return "0x" + keccak256(data).hex()


def uint256(value: int) -> bytes:
    if not (0 <= value <= UINT256_MAX):
        raise ValueError(f"value out of uint256 range: {value}")
    return value.to_bytes(32, "big")


def encode_leaf(index: int, address: str, token_amount: int, refund_amount: int) -> bytes:
    return uint256(index) + address_bytes(address) + uint256(token_amount) + uint256(refund_amount)


def leaf_hash(leaf: ClaimLeaf) -> bytes:
    return keccak256(encode_leaf(leaf.index, leaf.address, leaf.token_amount, leaf.refund_amount))


__all__ = [
    "UINT256_MAX",
    "LEAF_PREIMAGE_LEN",
    "keccak256",
    "keccak256_hex",
    "uint256",
    "encode_leaf",
    "leaf_hash",
]
