"""Command line interface for attest-keylib."""

import json
import logging
import sys
from pathlib import Path

import click

from ..crypto import generate_key, load_key_from_bytes, parse_key_json, sign_data, verify_signature
from ..crypto.schemes import DEFAULT_KEYID_HASH_ALGORITHMS, SUPPORTED_KEYID_HASH_ALGORITHMS, SUPPORTED_SCHEMES
from ..errors import InvalidSignatureError, KeyLibError
from ..models import Key, Signature

logger = logging.getLogger(__name__)


def _read_key(path: str, scheme, hash_algorithms) -> Key:
    """Load a key from a PEM file or a JSON key document."""
    data = Path(path).read_bytes()
    if data.lstrip().startswith(b"{"):
        # JSON documents carry their own scheme and hash algorithms
        if scheme or hash_algorithms:
            raise click.UsageError("--scheme and --hash-algorithm apply to PEM keys only")
        return parse_key_json(data)
    return load_key_from_bytes(data, scheme, hash_algorithms or None)


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
def cli(debug):
    """attest-keylib - key ids and signatures for in-toto style attestations."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


@cli.command()
@click.argument('keyfile', type=click.Path(exists=True, dir_okay=False))
@click.option('--scheme', default=None, help='Signature scheme for PEM keys (defaults per key type)')
@click.option('--hash-algorithm', 'hash_algorithms', multiple=True,
              type=click.Choice(sorted(SUPPORTED_KEYID_HASH_ALGORITHMS)),
              help='Key id hash algorithm for PEM keys (repeatable)')
def keyid(keyfile, scheme, hash_algorithms):
    """Print the key id of a key file."""
    try:
        key = _read_key(keyfile, scheme, hash_algorithms)
    except KeyLibError as e:
        raise click.ClickException(str(e))
    click.echo(key.key_id)


@cli.command()
@click.option('--type', 'key_type', required=True, type=click.Choice(sorted(SUPPORTED_SCHEMES)),
              help='Key type')
@click.option('--scheme', default=None, help='Signature scheme (defaults per key type)')
@click.option('--output', required=True, help='Output path (without extension)')
def generate(key_type, scheme, output):
    """Generate a key pair as JSON key documents."""
    try:
        key = generate_key(key_type, scheme, DEFAULT_KEYID_HASH_ALGORITHMS)
    except KeyLibError as e:
        raise click.ClickException(str(e))

    base = Path(output)
    base.parent.mkdir(parents=True, exist_ok=True)
    private_path = base.with_suffix('.json')
    public_path = base.with_suffix('.pub.json')

    private_path.write_text(key.to_json())
    # Restrict private key permissions
    private_path.chmod(0o600)
    public_path.write_text(key.public_only().to_json())

    click.echo(f"✓ {key.key_type} key generated ({key.scheme})")
    click.echo(f"  Private key: {private_path}")
    click.echo(f"  Public key:  {public_path}")
    click.echo(f"  Key id:      {key.key_id}")


@cli.command()
@click.option('--key', 'keyfile', required=True, type=click.Path(exists=True, dir_okay=False),
              help='Private key (PEM or JSON)')
@click.option('--scheme', default=None, help='Signature scheme for PEM keys')
@click.argument('payload', type=click.File('rb'))
def sign(keyfile, scheme, payload):
    """Sign PAYLOAD and print the signature as JSON."""
    try:
        key = _read_key(keyfile, scheme, None)
        signature = sign_data(key, payload.read())
    except KeyLibError as e:
        raise click.ClickException(str(e))
    click.echo(json.dumps(signature.to_dict()))


@cli.command()
@click.option('--key', 'keyfile', required=True, type=click.Path(exists=True, dir_okay=False),
              help='Public key (PEM or JSON)')
@click.option('--scheme', default=None, help='Signature scheme for PEM keys')
@click.option('--signature', 'signature_file', required=True, type=click.File('r'),
              help='Signature JSON as printed by "sign"')
@click.argument('payload', type=click.File('rb'))
def verify(keyfile, scheme, signature_file, payload):
    """Verify a signature over PAYLOAD."""
    try:
        key = _read_key(keyfile, scheme, None)
        signature = Signature.model_validate(json.load(signature_file))
    except (KeyLibError, ValueError) as e:
        raise click.ClickException(str(e))

    try:
        verify_signature(key, signature, payload.read())
    except InvalidSignatureError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)
    except KeyLibError as e:
        raise click.ClickException(str(e))

    click.echo(f"✓ Signature from {signature.key_id}: VALID")


def main():
    """Entry point for CLI."""
    cli()


if __name__ == '__main__':
    main()
