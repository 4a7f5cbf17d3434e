"""
Error types for the launchpad (token factory, giveaway state machine and the
Merkle claim protocol). Every failure cause gets its own class with a stable
`code` string so RPC layers and UIs can map aborts to actionable messages.

Families:
- PhaseError          entry point called outside its valid lifecycle state
- PolicyError         parameters outside allowed ranges (rejected at entry)
- AuthorizationError  caller is not allowed (owner checks, identity gate, signatures)
- ProofError          invalid Merkle proofs, replayed claim indices
- CollaboratorError   token ledger / liquidity deployer failures
- AllocationError     arithmetic edge cases inside the allocation engine
- ReentrancyError     a guarded entry point was re-entered mid-call
"""
from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional


class LaunchpadError(Exception):
    """Base class for launchpad domain errors."""

    code: str = "LP_ERROR"

    def __init__(self, message: str = "", *, details: Optional[Mapping[str, Any]] = None) -> None:
        self.message = message or self.__class__.__name__
        self.details = dict(details or {})
        super().__init__(self.__str__())

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.details:
            packed = json.dumps(self.details, sort_keys=True, separators=(",", ":"), default=str)
            return f"{self.code}: {self.message} [{packed}]"
        return f"{self.code}: {self.message}"


def _with(details: Optional[Mapping[str, Any]], **extra: Any) -> Dict[str, Any]:
    d = dict(details or {})
    for k, v in extra.items():
        if v is not None:
            d.setdefault(k, v)
    return d


# ───────────────────────────── lookups ─────────────────────────────


class OfferingNotFound(LaunchpadError):
    code = "LP_OFFERING_NOT_FOUND"

    def __init__(self, offering_id: int, *, details: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__("offering not found", details=_with(details, offering_id=offering_id))


# ───────────────────────────── phase ─────────────────────────────


class PhaseError(LaunchpadError):
    """Entry point called outside its valid state. Never retried automatically."""

    code = "LP_PHASE"

    def __init__(
        self,
        message: str = "",
        *,
        offering_id: Optional[int] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=_with(details, offering_id=offering_id))


class OfferingCancelled(PhaseError):
    code = "LP_OFFERING_CANCELLED"


class DepositWindowNotOpen(PhaseError):
    code = "LP_DEPOSIT_NOT_OPEN"


class DepositWindowClosed(PhaseError):
    code = "LP_DEPOSIT_CLOSED"


class AlreadyStarted(PhaseError):
    """Cancel attempted at or after the start of the deposit window."""

    code = "LP_ALREADY_STARTED"


class NotEnded(PhaseError):
    code = "LP_NOT_ENDED"


class AlreadyFinalized(PhaseError):
    code = "LP_ALREADY_FINALIZED"


class NotFinalized(PhaseError):
    code = "LP_NOT_FINALIZED"


class MerkleRootAlreadySet(PhaseError):
    code = "LP_ROOT_ALREADY_SET"


class MerkleRootNotSet(PhaseError):
    code = "LP_ROOT_NOT_SET"


class DevTokensAlreadyClaimed(PhaseError):
    code = "LP_DEV_ALREADY_CLAIMED"


class LiquidityTokensAlreadyClaimed(PhaseError):
    code = "LP_LIQUIDITY_ALREADY_CLAIMED"


# ───────────────────────────── policy ─────────────────────────────


class PolicyError(LaunchpadError):
    """Parameters outside the allowed ranges. Rejected before any effect."""

    code = "LP_POLICY"


class InvalidWindow(PolicyError):
    code = "LP_INVALID_WINDOW"


class StartInPast(PolicyError):
    code = "LP_START_IN_PAST"


class ZeroAmount(PolicyError):
    code = "LP_ZERO_AMOUNT"


class PercentageOutOfRange(PolicyError):
    code = "LP_PERCENTAGE_OUT_OF_RANGE"


class LiquidityBelowMinimum(PolicyError):
    code = "LP_LIQUIDITY_BELOW_MINIMUM"


class CombinedAllocationTooHigh(PolicyError):
    code = "LP_COMBINED_ALLOCATION_TOO_HIGH"


class NoParticipantShare(PolicyError):
    """The participant share of the sale rounds down to zero tokens."""

    code = "LP_NO_PARTICIPANT_SHARE"


class InvalidAddress(PolicyError, ValueError):
    code = "LP_INVALID_ADDRESS"


class AlreadyDeposited(PolicyError):
    code = "LP_ALREADY_DEPOSITED"


class LengthMismatch(PolicyError):
    code = "LP_LENGTH_MISMATCH"


class BatchTooLarge(PolicyError):
    code = "LP_BATCH_TOO_LARGE"


class InsufficientFee(PolicyError):
    code = "LP_INSUFFICIENT_FEE"


# ───────────────────────────── authorization ─────────────────────────────


class AuthorizationError(LaunchpadError):
    code = "LP_UNAUTHORIZED"


class NotOwner(AuthorizationError):
    code = "LP_NOT_OWNER"

    def __init__(
        self,
        *,
        caller: str,
        owner: str,
        message: str = "caller is not the owner",
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=_with(details, caller=caller, owner=owner))


class NotVerified(AuthorizationError):
    """Caller did not pass the identity gate."""

    code = "LP_NOT_VERIFIED"


class NullifierAlreadyUsed(AuthorizationError):
    code = "LP_NULLIFIER_USED"


class InvalidCommitment(AuthorizationError):
    """Missing or badly signed distribution commitment."""

    code = "LP_INVALID_COMMITMENT"


# ───────────────────────────── proofs / claims ─────────────────────────────


class ProofError(LaunchpadError):
    code = "LP_PROOF"

    def __init__(
        self,
        message: str = "",
        *,
        offering_id: Optional[int] = None,
        index: Optional[int] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=_with(details, offering_id=offering_id, index=index))


class InvalidProof(ProofError):
    code = "LP_INVALID_PROOF"


class AlreadyClaimed(ProofError):
    code = "LP_ALREADY_CLAIMED"


class NothingToClaim(ProofError):
    code = "LP_NOTHING_TO_CLAIM"


class EscrowExhausted(ProofError):
    """A claim would pay out more than the offering holds for participants."""

    code = "LP_ESCROW_EXHAUSTED"


class CommitmentExceedsEscrow(ProofError):
    code = "LP_COMMITMENT_EXCEEDS_ESCROW"


# ───────────────────────────── collaborators ─────────────────────────────


class CollaboratorError(LaunchpadError):
    code = "LP_COLLABORATOR"


class TokenError(CollaboratorError):
    code = "LP_TOKEN"


class TokenNotFound(TokenError):
    code = "LP_TOKEN_NOT_FOUND"


class InsufficientBalance(TokenError):
    code = "LP_INSUFFICIENT_BALANCE"

    def __init__(
        self,
        *,
        token: str,
        account: str,
        have: int,
        need: int,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(
            "insufficient balance",
            details=_with(details, token=token, account=account, have=int(have), need=int(need)),
        )


class InsufficientAllowance(TokenError):
    code = "LP_INSUFFICIENT_ALLOWANCE"


class SupplyCapExceeded(TokenError):
    code = "LP_SUPPLY_CAP_EXCEEDED"


class TradingDisabled(TokenError):
    code = "LP_TRADING_DISABLED"


class LiquidityDeploymentFailed(CollaboratorError):
    code = "LP_LIQUIDITY_DEPLOYMENT_FAILED"


# ───────────────────────────── arithmetic / guard ─────────────────────────────


class AllocationError(LaunchpadError):
    code = "LP_ALLOCATION"


class ReentrancyError(LaunchpadError):
    code = "LP_REENTRANCY"


__all__ = [
    "LaunchpadError",
    "OfferingNotFound",
    "PhaseError",
    "OfferingCancelled",
    "DepositWindowNotOpen",
    "DepositWindowClosed",
    "AlreadyStarted",
    "NotEnded",
    "AlreadyFinalized",
    "NotFinalized",
    "MerkleRootAlreadySet",
    "MerkleRootNotSet",
    "DevTokensAlreadyClaimed",
    "LiquidityTokensAlreadyClaimed",
    "PolicyError",
    "InvalidWindow",
    "StartInPast",
    "ZeroAmount",
    "PercentageOutOfRange",
    "LiquidityBelowMinimum",
    "CombinedAllocationTooHigh",
    "NoParticipantShare",
    "InvalidAddress",
    "AlreadyDeposited",
    "LengthMismatch",
    "BatchTooLarge",
    "InsufficientFee",
    "AuthorizationError",
    "NotOwner",
    "NotVerified",
    "NullifierAlreadyUsed",
    "InvalidCommitment",
    "ProofError",
    "InvalidProof",
    "AlreadyClaimed",
    "NothingToClaim",
    "EscrowExhausted",
    "CommitmentExceedsEscrow",
    "CollaboratorError",
    "TokenError",
    "TokenNotFound",
    "InsufficientBalance",
    "InsufficientAllowance",
    "SupplyCapExceeded",
    "TradingDisabled",
    "LiquidityDeploymentFailed",
    "AllocationError",
    "ReentrancyError",
]
