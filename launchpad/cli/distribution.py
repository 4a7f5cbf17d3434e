"""
launchpad.cli.distribution — off-chain distribution tooling.

Implements:
  - launchpad-dist generate SNAPSHOT -o DIST            Allocate + build the Merkle tree
  - launchpad-dist claim-data DIST ADDRESS              Print one participant's claim
  - launchpad-dist verify-proof DIST ADDRESS            Check a claim against the root
  - launchpad-dist verify-allocation SNAPSHOT DIST ADDR Recompute and compare one allocation
  - launchpad-dist audit SNAPSHOT DIST                  Conservation / indexing audit
  - launchpad-dist keygen -o KEYFILE                    New Ed25519 authority key
  - launchpad-dist sign DIST --key KEYFILE -o COMMIT    Signed commitment for a distribution
  - launchpad-dist verify-commitment COMMIT [--pubkey]  Check a commitment signature

Snapshot files use the camelCase layout produced by `Snapshot.to_dict()`:

    {"offeringId": 1, "maxAllocation": "100000000000",
     "tokensForParticipants": "…", "deposits": [{"address": "0x…", "amount": "…"}]}

Failed verifications exit with status 1; unreadable or malformed input exits with 2.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

import typer

from launchpad.config import load as load_config
from launchpad.errors import LaunchpadError
from launchpad.lptypes.offering import Snapshot
from launchpad.proofs.commitment import (Commitment, commitment_for, generate_keypair,
                                         public_key_of, sign_commitment, verify_commitment)
from launchpad.proofs.distribution import (Distribution, check_conservation, generate_distribution,
                                           get_claim_data, verify_claim,
                                           verify_participant_allocation)
from launchpad.version import runtime_banner

app = typer.Typer(
    name="launchpad-dist",
    help="Generate, inspect and verify launchpad claim distributions",
    add_completion=False,
    no_args_is_help=True,
)

T = TypeVar("T")


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        typer.secho(f"Error: cannot read {path}: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(2) from e


def _write_json(path: Path, obj: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, indent=2) + "\n", encoding="utf-8")


def _echo_json(obj: Any) -> None:
    typer.echo(json.dumps(obj, indent=2))


def _unhex(s: str) -> bytes:
    s = s.strip()
    return bytes.fromhex(s[2:] if s.startswith(("0x", "0X")) else s)


def _parse(path: Path, factory: Callable[[Any], T]) -> T:
    data = _read_json(path)
    try:
        return factory(data)
    except (KeyError, TypeError, ValueError, LaunchpadError) as e:
        typer.secho(f"Error: malformed {path}: {e!r}", fg=typer.colors.RED, err=True)
        raise typer.Exit(2) from e


def _load_distribution(path: Path) -> Distribution:
    return _parse(path, Distribution.from_dict)


def _load_snapshot(path: Path) -> Snapshot:
    return _parse(path, Snapshot.from_dict)


def _public_key(key_hex: str) -> bytes:
    try:
        raw = _unhex(key_hex)
    except ValueError as e:
        typer.secho(f"Error: public key is not hex: {key_hex!r}", fg=typer.colors.RED, err=True)
        raise typer.Exit(2) from e
    if len(raw) != 32:
        typer.secho(f"Error: public key must be 32 bytes, got {len(raw)}", fg=typer.colors.RED, err=True)
        raise typer.Exit(2)
    return raw


@app.callback(invoke_without_command=True)
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress to stderr"),
    version: bool = typer.Option(False, "--version", help="Print version and exit"),
) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if version:
        typer.echo(runtime_banner("launchpad-dist"))
        raise typer.Exit(0)


@app.command()
def generate(
    snapshot: Path = typer.Argument(..., exists=True, dir_okay=False, help="Snapshot JSON"),
    out: Path = typer.Option(..., "--out", "-o", help="Where to write the distribution JSON"),
) -> None:
    """Allocate every participant and write the distribution document."""
    snap = _load_snapshot(snapshot)
    try:
        dist = generate_distribution(snap)
    except LaunchpadError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from e
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(dist.to_json() + "\n", encoding="utf-8")
    s = dist.summary
    typer.echo(f"merkleRoot: 0x{dist.merkle_root.hex()}")
    typer.echo(f"participants: {s['totalParticipants']}  regime: {s['regime']}")
    typer.echo(f"totalTokens: {s['totalTokens']}  totalRefunds: {s['totalRefunds']}")
    typer.echo(f"Wrote {out}")


@app.command("claim-data")
def claim_data(
    distribution: Path = typer.Argument(..., exists=True, dir_okay=False),
    address: str = typer.Argument(..., help="Participant address (any case)"),
) -> None:
    """Print the claim (index, amounts, proof) for ADDRESS."""
    dist = _load_distribution(distribution)
    claim = get_claim_data(dist, address)
    if claim is None:
        typer.secho(f"No allocation for {address}", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(1)
    _echo_json(claim.to_dict())


@app.command("verify-proof")
def verify_proof_cmd(
    distribution: Path = typer.Argument(..., exists=True, dir_okay=False),
    address: str = typer.Argument(...),
) -> None:
    """Check that ADDRESS's leaf and proof reproduce the published root."""
    dist = _load_distribution(distribution)
    claim = get_claim_data(dist, address)
    if claim is None:
        typer.secho(f"No allocation for {address}", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(1)
    if verify_claim(dist, claim):
        typer.secho(f"valid: index={claim.leaf.index} root=0x{dist.merkle_root.hex()}", fg=typer.colors.GREEN)
        return
    typer.secho("invalid: proof does not match root", fg=typer.colors.RED)
    raise typer.Exit(1)


@app.command("verify-allocation")
def verify_allocation(
    snapshot: Path = typer.Argument(..., exists=True, dir_okay=False),
    distribution: Path = typer.Argument(..., exists=True, dir_okay=False),
    address: str = typer.Argument(...),
) -> None:
    """Recompute ADDRESS's allocation from the snapshot and compare."""
    report = verify_participant_allocation(_load_snapshot(snapshot), _load_distribution(distribution), address)
    _echo_json(report)
    if not report["verified"]:
        raise typer.Exit(1)


@app.command()
def audit(
    snapshot: Path = typer.Argument(..., exists=True, dir_okay=False),
    distribution: Path = typer.Argument(..., exists=True, dir_okay=False),
) -> None:
    """Check indexing, root and conservation of a whole distribution."""
    report = check_conservation(_load_snapshot(snapshot), _load_distribution(distribution))
    _echo_json(report.to_dict())
    if not report.ok:
        raise typer.Exit(1)


@app.command()
def keygen(
    out: Path = typer.Option(..., "--out", "-o", help="Key file to create"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing key file"),
) -> None:
    """Generate an Ed25519 distribution-authority key."""
    if out.exists() and not force:
        typer.secho(f"Error: {out} exists (use --force)", fg=typer.colors.RED, err=True)
        raise typer.Exit(2)
    priv, pub = generate_keypair()
    _write_json(out, {"algorithm": "ed25519", "privateKey": "0x" + priv.hex(), "publicKey": "0x" + pub.hex()})
    out.chmod(0o600)
    typer.echo(f"publicKey: 0x{pub.hex()}")


@app.command()
def sign(
    distribution: Path = typer.Argument(..., exists=True, dir_okay=False),
    key: Path = typer.Option(..., "--key", "-k", exists=True, dir_okay=False, help="Key file from keygen"),
    out: Path = typer.Option(..., "--out", "-o", help="Where to write the commitment JSON"),
) -> None:
    """Sign the distribution's root and totals."""
    dist = _load_distribution(distribution)
    priv = _parse(key, lambda d: _unhex(d["privateKey"]))
    signed = sign_commitment(commitment_for(dist), priv)
    _write_json(out, signed.to_dict())
    typer.echo(f"signed root 0x{dist.merkle_root.hex()} with 0x{public_key_of(priv).hex()}")


@app.command("verify-commitment")
def verify_commitment_cmd(
    commitment: Path = typer.Argument(..., exists=True, dir_okay=False),
    pubkey: Optional[str] = typer.Option(
        None, "--pubkey", help="Authority public key (hex); defaults to LAUNCHPAD_AUTHORITY_PUBKEY"
    ),
    distribution: Optional[Path] = typer.Option(
        None, "--distribution", "-d", exists=True, dir_okay=False, help="Also check it matches this distribution"
    ),
) -> None:
    """Verify a commitment's signature (and optionally its totals)."""
    c = _parse(commitment, Commitment.from_dict)
    key_hex = pubkey or load_config().authority.public_key
    if not key_hex:
        typer.secho("Error: no public key (pass --pubkey or set LAUNCHPAD_AUTHORITY_PUBKEY)", fg=typer.colors.RED, err=True)
        raise typer.Exit(2)
    if not verify_commitment(c, _public_key(key_hex)):
        typer.secho("invalid: bad signature", fg=typer.colors.RED)
        raise typer.Exit(1)
    if distribution is not None:
        expected = commitment_for(_load_distribution(distribution))
        if expected.message() != c.message():
            typer.secho("invalid: commitment does not match distribution", fg=typer.colors.RED)
            raise typer.Exit(1)
    typer.secho(f"valid: offering={c.offering_id} root=0x{c.merkle_root.hex()}", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
