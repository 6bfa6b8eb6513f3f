"""Tests for the command line interface."""

import json
from pathlib import Path

from click.testing import CliRunner

from attest_keylib.cli.main import cli

DATA = Path(__file__).parent / "data"


def test_keyid_of_pem():
    """keyid prints the key id of a PEM file."""
    result = CliRunner().invoke(cli, ["keyid", str(DATA / "ed25519.pub.pem")])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "308e3f53523b632983a988b72a2e39c85fe8fc967116043ce51fa8d92a6aef64"


def test_keyid_of_non_pem(tmp_path):
    """Non-PEM key files fail with a message."""
    path = tmp_path / "garbage.txt"
    path.write_text("garbage")
    result = CliRunner().invoke(cli, ["keyid", str(path)])
    assert result.exit_code != 0
    assert "PEM" in result.output


def test_generate_sign_verify(tmp_path):
    """A generated key signs and verifies a file."""
    runner = CliRunner()
    base = tmp_path / "keys" / "alice"
    result = runner.invoke(cli, ["generate", "--type", "ed25519", "--output", str(base)])
    assert result.exit_code == 0, result.output

    private_path = base.with_suffix(".json")
    public_path = base.with_suffix(".pub.json")
    assert json.loads(public_path.read_text())["keyval"]["private"] == ""

    payload = tmp_path / "payload.bin"
    payload.write_bytes(b"artifact contents")

    result = runner.invoke(cli, ["sign", "--key", str(private_path), str(payload)])
    assert result.exit_code == 0, result.output
    signature_path = tmp_path / "payload.sig"
    signature_path.write_text(result.output)

    result = runner.invoke(cli, [
        "verify", "--key", str(public_path), "--signature", str(signature_path), str(payload)
    ])
    assert result.exit_code == 0, result.output
    assert "VALID" in result.output

    payload.write_bytes(b"tampered contents")
    result = runner.invoke(cli, [
        "verify", "--key", str(public_path), "--signature", str(signature_path), str(payload)
    ])
    assert result.exit_code == 1


def test_sign_with_pem_key(tmp_path):
    """PEM key files can sign directly."""
    payload = tmp_path / "payload.bin"
    payload.write_bytes(b"abc")
    result = CliRunner().invoke(cli, ["sign", "--key", str(DATA / "ed25519.pem"), str(payload)])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["sig"].startswith("2c3710b7")


def test_pem_options_rejected_for_json_keys(tmp_path):
    """--scheme and --hash-algorithm cannot be combined with a JSON key document."""
    runner = CliRunner()
    base = tmp_path / "bob"
    result = runner.invoke(cli, ["generate", "--type", "ed25519", "--output", str(base)])
    assert result.exit_code == 0, result.output
    public_path = str(base.with_suffix(".pub.json"))

    result = runner.invoke(cli, ["keyid", "--scheme", "ed25519", public_path])
    assert result.exit_code == 2
    assert "PEM keys only" in result.output

    result = runner.invoke(cli, ["keyid", "--hash-algorithm", "sha256", public_path])
    assert result.exit_code == 2

    result = runner.invoke(cli, ["keyid", public_path])
    assert result.exit_code == 0, result.output
