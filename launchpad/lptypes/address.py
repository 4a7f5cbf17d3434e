"""
Account addresses.

Addresses are carried around as canonical lowercase hex strings
(`0x` + 40 hex chars). Packed encodings use the raw 20 bytes.
"""
from __future__ import annotations

import re
from typing import Union

from launchpad.errors import InvalidAddress

Address = str

ADDRESS_BYTES = 20
ZERO_ADDRESS: Address = "0x" + "00" * ADDRESS_BYTES

_HEX40 = re.compile(r"^(0x|0X)?[0-9a-fA-F]{40}$")


def normalize_address(value: Union[str, bytes, bytearray]) -> Address:
    """Return the canonical lowercase `0x…` form, or raise InvalidAddress."""
    if isinstance(value, (bytes, bytearray)):
        if len(value) != ADDRESS_BYTES:
            raise InvalidAddress("address must be 20 bytes", details={"length": len(value)})
        return "0x" + bytes(value).hex()
    if not isinstance(value, str) or not _HEX40.match(value.strip()):
        raise InvalidAddress("malformed address", details={"address": str(value)})
    v = value.strip()
    if v[:2] in ("0x", "0X"):
        v = v[2:]
    return "0x" + v.lower()


def address_bytes(value: Union[str, bytes, bytearray]) -> bytes:
    return bytes.fromhex(normalize_address(value)[2:])


def is_address(value: object) -> bool:
    try:
        normalize_address(value)  # type: ignore[arg-type]
    except InvalidAddress:
        return False
    return True


__all__ = ["Address", "ADDRESS_BYTES", "ZERO_ADDRESS", "normalize_address", "address_bytes", "is_address"]
