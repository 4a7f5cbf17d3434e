"""External collaborators: identity gate and liquidity deployer."""
from __future__ import annotations

from .dex import LiquidityDeployer, LiquidityPosition, PoolRegistry
from .identity import IdentityGate, NullifierRegistry, Verification

__all__ = [
    "IdentityGate",
    "NullifierRegistry",
    "Verification",
    "LiquidityDeployer",
    "LiquidityPosition",
    "PoolRegistry",
]
