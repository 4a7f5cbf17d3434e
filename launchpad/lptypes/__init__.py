"""Shared record types for the launchpad."""
from __future__ import annotations

from .address import ADDRESS_BYTES, ZERO_ADDRESS, Address, address_bytes, is_address, normalize_address
from .claim import Claim, ClaimLeaf, ClaimReason
from .offering import BPS, Offering, OfferingStatus, Participant, Snapshot

__all__ = [
    "Address",
    "ADDRESS_BYTES",
    "ZERO_ADDRESS",
    "normalize_address",
    "address_bytes",
    "is_address",
    "Claim",
    "ClaimLeaf",
    "ClaimReason",
    "BPS",
    "Offering",
    "OfferingStatus",
    "Participant",
    "Snapshot",
]
