from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from launchpad.cli.distribution import app
from launchpad.lptypes.offering import Snapshot

from .conftest import ALICE, BOB, CAROL, DAVE

runner = CliRunner()


def run_ok(args):
    result = runner.invoke(app, args)
    assert result.exit_code == 0, result.output
    return result.output


@pytest.fixture
def files(tmp_path: Path):
    snap = Snapshot(offering_id=1, max_allocation=1_000, tokens_for_participants=6_000,
                    deposits=((ALICE, 500), (BOB, 400), (CAROL, 300)))
    snap_path = tmp_path / "snapshot.json"
    snap_path.write_text(json.dumps(snap.to_dict()))
    dist_path = tmp_path / "out" / "distribution.json"
    run_ok(["generate", str(snap_path), "-o", str(dist_path)])
    return snap_path, dist_path


def test_generate_writes_document(files):
    _, dist_path = files
    doc = json.loads(dist_path.read_text())
    assert doc["summary"]["totalTokens"] == "5993"
    assert [p["index"] for p in doc["participants"]] == [0, 1, 2]


def test_claim_data_and_verify_proof(files):
    _, dist_path = files
    claim = json.loads(run_ok(["claim-data", str(dist_path), BOB.upper().replace("0X", "0x")]))
    assert claim["index"] == 1 and claim["tokenAmount"] == "2054"
    assert run_ok(["verify-proof", str(dist_path), BOB]).startswith("valid")
    missing = runner.invoke(app, ["claim-data", str(dist_path), DAVE])
    assert missing.exit_code == 1


def test_verify_proof_detects_tampering(files):
    _, dist_path = files
    doc = json.loads(dist_path.read_text())
    doc["participants"][0]["tokenAmount"] = "9999"
    dist_path.write_text(json.dumps(doc))
    result = runner.invoke(app, ["verify-proof", str(dist_path), ALICE])
    assert result.exit_code == 1
    assert "invalid" in result.output


def test_verify_allocation_and_audit(files):
    snap_path, dist_path = files
    report = json.loads(run_ok(["verify-allocation", str(snap_path), str(dist_path), CAROL]))
    assert report["verified"] is True
    audit = json.loads(run_ok(["audit", str(snap_path), str(dist_path)]))
    assert audit["ok"] is True


def test_keygen_sign_verify(files, tmp_path, monkeypatch):
    monkeypatch.delenv("LAUNCHPAD_CONFIG_FILE", raising=False)
    monkeypatch.delenv("LAUNCHPAD_AUTHORITY_PUBKEY", raising=False)
    _, dist_path = files
    key = tmp_path / "authority.json"
    run_ok(["keygen", "-o", str(key)])
    pub = json.loads(key.read_text())["publicKey"]
    assert runner.invoke(app, ["keygen", "-o", str(key)]).exit_code == 2

    commit = tmp_path / "commitment.json"
    run_ok(["sign", str(dist_path), "--key", str(key), "-o", str(commit)])
    out = run_ok(["verify-commitment", str(commit), "--pubkey", pub, "-d", str(dist_path)])
    assert out.startswith("valid")

    monkeypatch.setenv("LAUNCHPAD_AUTHORITY_PUBKEY", pub)
    run_ok(["verify-commitment", str(commit)])

    doc = json.loads(commit.read_text())
    doc["totalRefunds"] = "1"
    commit.write_text(json.dumps(doc))
    assert runner.invoke(app, ["verify-commitment", str(commit), "--pubkey", pub]).exit_code == 1


def test_verify_commitment_needs_a_key(files, tmp_path, monkeypatch):
    monkeypatch.delenv("LAUNCHPAD_CONFIG_FILE", raising=False)
    monkeypatch.delenv("LAUNCHPAD_AUTHORITY_PUBKEY", raising=False)
    _, dist_path = files
    key = tmp_path / "k.json"
    commit = tmp_path / "c.json"
    run_ok(["keygen", "-o", str(key)])
    run_ok(["sign", str(dist_path), "-k", str(key), "-o", str(commit)])
    assert runner.invoke(app, ["verify-commitment", str(commit)]).exit_code == 2


def test_generate_rejects_empty_snapshot(tmp_path):
    p = tmp_path / "empty.json"
    p.write_text(json.dumps({"offeringId": 1, "maxAllocation": "1", "tokensForParticipants": "1", "deposits": []}))
    result = runner.invoke(app, ["generate", str(p), "-o", str(tmp_path / "d.json")])
    assert result.exit_code == 1


def test_version():
    assert "launchpad-dist" in run_ok(["--version"])


def test_verify_commitment_bad_pubkey_exits_2(files, tmp_path):
    _, dist_path = files
    key = tmp_path / "k.json"
    commit = tmp_path / "c.json"
    run_ok(["keygen", "-o", str(key)])
    run_ok(["sign", str(dist_path), "-k", str(key), "-o", str(commit)])
    for bad in ("0x" + "ab" * 31, "0xnothex"):
        result = runner.invoke(app, ["verify-commitment", str(commit), "--pubkey", bad])
        assert result.exit_code == 2
        assert result.exception is None or isinstance(result.exception, SystemExit)


@pytest.mark.parametrize("command", ["claim-data", "verify-proof"])
def test_distribution_missing_fields_exits_2(files, tmp_path, command):
    _, dist_path = files
    doc = json.loads(dist_path.read_text())
    del doc["merkleRoot"]
    broken = tmp_path / "broken.json"
    broken.write_text(json.dumps(doc))
    result = runner.invoke(app, [command, str(broken), ALICE])
    assert result.exit_code == 2
    assert "malformed" in result.output


def test_snapshot_missing_fields_exits_2(tmp_path):
    p = tmp_path / "snap.json"
    p.write_text(json.dumps({"offeringId": 1, "deposits": []}))
    result = runner.invoke(app, ["generate", str(p), "-o", str(tmp_path / "d.json")])
    assert result.exit_code == 2
