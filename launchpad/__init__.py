"""
launchpad — token launch platform.

A token factory, a capped Sybil-resistant giveaway of project tokens against
quote-token deposits, a deterministic fair-allocation engine and a Merkle
claim protocol that carries the engine's results back to participants.

Public surface:
- __version__
- allocation: the allocation engine and basis-point breakdowns
- proofs: leaf hashing, Merkle trees, distributions and commitments
- giveaway: the offering state machine (GiveawayService)
- platform: one-shot token + giveaway launches (LaunchPlatform)
"""
from .version import __version__

__all__ = ["__version__"]
