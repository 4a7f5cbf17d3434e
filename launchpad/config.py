"""
launchpad.config — configuration for the token launchpad

Covers:
- Allocation policy floors/ceilings (basis points, 10_000 = 100%)
- Platform fee skimmed at finalize and its recipient
- Token-creation fee charged by the orchestrator (native base units)
- Claim limits (batch size)
- Distribution authority public key (optional signed commitments)

Environment overrides (all optional; sensible defaults provided):

  # Allocation policy (basis points)
  LAUNCHPAD_MIN_LIQUIDITY_BPS=2000
  LAUNCHPAD_MAX_COMBINED_BPS=7000

  # Fees
  LAUNCHPAD_PLATFORM_FEE_BPS=250
  LAUNCHPAD_FEE_RECIPIENT=0x000000000000000000000000000000000000fee0
  LAUNCHPAD_TOKEN_CREATION_FEE=100000000000000000

  # Claims
  LAUNCHPAD_MAX_BATCH_SIZE=500

  # Distribution authority (hex-encoded raw Ed25519 public key)
  LAUNCHPAD_AUTHORITY_PUBKEY=

You can also load from a JSON or YAML file via
`LAUNCHPAD_CONFIG_FILE=/path/to/config.(json|yaml|yml)`.
File values override defaults; environment overrides the file.
"""
from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .lptypes.address import normalize_address

BPS_DENOMINATOR = 10_000


# -------------------------- Data classes --------------------------


@dataclass
class AllocationPolicy:
    """Policy floors/ceilings enforced once, at offering creation."""
    min_liquidity_bps: int = 2_000     # 20% floor for liquidity
    max_combined_bps: int = 7_000      # dev + liquidity ceiling (70%)

    def validate(self) -> None:
        for name, v in (("min_liquidity_bps", self.min_liquidity_bps),
                        ("max_combined_bps", self.max_combined_bps)):
            if not (0 <= v <= BPS_DENOMINATOR):
                raise ValueError(f"{name} must be between 0 and 10000 (got {v}).")
        if self.min_liquidity_bps > self.max_combined_bps:
            raise ValueError("min_liquidity_bps cannot exceed max_combined_bps.")


@dataclass
class FeeConfig:
    """Platform fee (bps of the final allocation) and creation fee (native units)."""
    platform_fee_bps: int = 250
    fee_recipient: str = "0x000000000000000000000000000000000000fee0"
    token_creation_fee: int = 10**17   # 0.1 native token

    def validate(self) -> None:
        if not (0 <= self.platform_fee_bps <= BPS_DENOMINATOR):
            raise ValueError(f"platform_fee_bps must be between 0 and 10000 (got {self.platform_fee_bps}).")
        if self.token_creation_fee < 0:
            raise ValueError("token_creation_fee must be non-negative.")
        self.fee_recipient = normalize_address(self.fee_recipient)


@dataclass
class ClaimConfig:
    max_batch_size: int = 500

    def validate(self) -> None:
        if self.max_batch_size <= 0:
            raise ValueError("max_batch_size must be positive.")


@dataclass
class AuthorityConfig:
    """
    When `public_key` is set, set_merkle_root requires a commitment signed by
    the matching Ed25519 key.
    """
    public_key: Optional[str] = None   # hex, 32 raw bytes

    def validate(self) -> None:
        if self.public_key in (None, ""):
            self.public_key = None
            return
        raw = self.public_key[2:] if self.public_key.startswith("0x") else self.public_key
        try:
            b = bytes.fromhex(raw)
        except ValueError as e:
            raise ValueError(f"authority public_key is not hex: {self.public_key!r}") from e
        if len(b) != 32:
            raise ValueError("authority public_key must be 32 bytes (raw Ed25519).")


@dataclass
class LaunchpadConfig:
    """Top-level configuration container."""
    policy: AllocationPolicy = field(default_factory=AllocationPolicy)
    fees: FeeConfig = field(default_factory=FeeConfig)
    claims: ClaimConfig = field(default_factory=ClaimConfig)
    authority: AuthorityConfig = field(default_factory=AuthorityConfig)

    def validate(self) -> None:
        self.policy.validate()
        self.fees.validate()
        self.claims.validate()
        self.authority.validate()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# -------------------------- Loaders --------------------------


def _getenv_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    try:
        return int(str(v).replace("_", ""))
    except ValueError as e:
        raise ValueError(f"Invalid int for {name}: {v!r}") from e


def _getenv_bps(name: str, default: int) -> int:
    bps = _getenv_int(name, default)
    if not (0 <= bps <= BPS_DENOMINATOR):
        raise ValueError(f"{name} must be between 0 and 10000 bps (got {bps}).")
    return bps


def _getenv_str(name: str, default: Optional[str]) -> Optional[str]:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    return v.strip()


def from_env(base: Optional[LaunchpadConfig] = None, prefix: str = "LAUNCHPAD_") -> LaunchpadConfig:
    """
    Build a LaunchpadConfig from environment variables, optionally layering on top of `base`.
    """
    cfg = base or LaunchpadConfig()

    new_cfg = LaunchpadConfig(
        policy=AllocationPolicy(
            min_liquidity_bps=_getenv_bps(f"{prefix}MIN_LIQUIDITY_BPS", cfg.policy.min_liquidity_bps),
            max_combined_bps=_getenv_bps(f"{prefix}MAX_COMBINED_BPS", cfg.policy.max_combined_bps),
        ),
        fees=FeeConfig(
            platform_fee_bps=_getenv_bps(f"{prefix}PLATFORM_FEE_BPS", cfg.fees.platform_fee_bps),
            fee_recipient=_getenv_str(f"{prefix}FEE_RECIPIENT", cfg.fees.fee_recipient) or cfg.fees.fee_recipient,
            token_creation_fee=_getenv_int(f"{prefix}TOKEN_CREATION_FEE", cfg.fees.token_creation_fee),
        ),
        claims=ClaimConfig(
            max_batch_size=_getenv_int(f"{prefix}MAX_BATCH_SIZE", cfg.claims.max_batch_size),
        ),
        authority=AuthorityConfig(
            public_key=_getenv_str(f"{prefix}AUTHORITY_PUBKEY", cfg.authority.public_key),
        ),
    )
    new_cfg.validate()
    return new_cfg


def from_file(path: str | os.PathLike[str]) -> LaunchpadConfig:
    """
    Load configuration from a JSON or YAML file.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(p)

    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text or "{}")

    policy = data.get("policy", {})
    fees = data.get("fees", {})
    claims = data.get("claims", {})
    authority = data.get("authority", {})

    cfg = LaunchpadConfig(
        policy=AllocationPolicy(
            min_liquidity_bps=policy.get("min_liquidity_bps", AllocationPolicy().min_liquidity_bps),
            max_combined_bps=policy.get("max_combined_bps", AllocationPolicy().max_combined_bps),
        ),
        fees=FeeConfig(
            platform_fee_bps=fees.get("platform_fee_bps", FeeConfig().platform_fee_bps),
            fee_recipient=fees.get("fee_recipient", FeeConfig().fee_recipient),
            token_creation_fee=int(fees.get("token_creation_fee", FeeConfig().token_creation_fee)),
        ),
        claims=ClaimConfig(
            max_batch_size=claims.get("max_batch_size", ClaimConfig().max_batch_size),
        ),
        authority=AuthorityConfig(public_key=authority.get("public_key")),
    )
    cfg.validate()
    return cfg


def load() -> LaunchpadConfig:
    """
    Load configuration using the following precedence:
      1) File at $LAUNCHPAD_CONFIG_FILE (JSON/YAML)
      2) Environment variables (LAUNCHPAD_*), applied on top of defaults or file values
    """
    file_path = os.getenv("LAUNCHPAD_CONFIG_FILE")
    base = from_file(file_path) if file_path else LaunchpadConfig()
    return from_env(base=base)


# -------------------------- Utilities --------------------------


def pretty(cfg: Optional[LaunchpadConfig] = None) -> str:
    """Return a human-readable JSON string of the current config."""
    obj = (cfg or load()).to_dict()
    return json.dumps(obj, indent=2, sort_keys=True)


__all__ = [
    "BPS_DENOMINATOR",
    "AllocationPolicy",
    "FeeConfig",
    "ClaimConfig",
    "AuthorityConfig",
    "LaunchpadConfig",
    "from_env",
    "from_file",
    "load",
    "pretty",
]
