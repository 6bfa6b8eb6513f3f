"""Key construction, loading, identifier derivation and generation."""

import json
import logging
from pathlib import Path
from typing import Optional, Sequence, Union

import nacl.signing
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from pydantic import ValidationError

from ..errors import InvalidKeyError, UnsupportedKeyTypeError
from ..models.key import Key, KeyType, KeyVal, key_id_for
from .codec import (
    PEM_PRIVATE_KEY,
    PEM_PUBLIC_KEY,
    PEM_RSA_PRIVATE_KEY,
    decode_and_parse,
    decode_hex,
    ed25519_raw_private,
    ed25519_raw_public,
    encode_hex,
    encode_pem,
    public_der,
)
from .schemes import (
    DEFAULT_KEYID_HASH_ALGORITHMS,
    DEFAULT_RSA_KEY_SIZE,
    DEFAULT_SCHEMES,
    ecdsa_curve_for_scheme,
    ecdsa_scheme_for_curve,
    validate_key,
)

logger = logging.getLogger(__name__)

_PRIVATE_PEM_LABELS = {
    KeyType.RSA: PEM_RSA_PRIVATE_KEY,
    KeyType.ECDSA: PEM_PRIVATE_KEY,
}


def derive_key_id(key: Key) -> str:
    """Recompute the key id of an existing key."""
    return key_id_for(key.key_type, key.scheme, key.key_id_hash_algorithms, key.public)


def _encode_components(key_type: KeyType, public_bytes: bytes, private_bytes: bytes) -> KeyVal:
    if key_type == KeyType.ED25519:
        public = encode_hex(public_bytes)
        private = encode_hex(private_bytes) if private_bytes else ""
    else:
        public = encode_pem(public_bytes, PEM_PUBLIC_KEY)
        private = encode_pem(private_bytes, _PRIVATE_PEM_LABELS[key_type]) if private_bytes else ""
    return KeyVal(public=public, private=private)


def normalize_key(
    public_bytes: bytes,
    private_bytes: bytes,
    key_type: str,
    scheme: str,
    key_id_hash_algorithms: Sequence[str]
) -> Key:
    """
    Build a validated Key from raw key components.

    rsa and ecdsa components are DER (PKIX public, PKCS1/PKCS8 private) and
    get wrapped in PEM; ed25519 components are raw bytes stored as hex.
    An empty private_bytes produces a public-only key.

    Args:
        public_bytes: Public key bytes
        private_bytes: Private key bytes, or b"" for a public-only key
        key_type: rsa, ecdsa or ed25519
        scheme: Signature scheme valid for key_type
        key_id_hash_algorithms: Subset of sha256, sha512

    Returns:
        Key with its key id computed

    Raises:
        UnsupportedKeyTypeError: If key_type is unknown
        InvalidKeyError: If scheme or hash algorithms are not valid for the key
    """
    try:
        family = KeyType(key_type)
    except ValueError:
        raise UnsupportedKeyTypeError(f"unsupported key type: {key_type}") from None

    key_val = _encode_components(family, public_bytes, private_bytes)
    algorithms = tuple(key_id_hash_algorithms)
    key = Key(
        key_id=key_id_for(family.value, scheme, algorithms, key_val.public),
        key_type=family.value,
        scheme=scheme,
        key_id_hash_algorithms=algorithms,
        key_val=key_val,
    )
    validate_key(key)
    return key


def load_key_from_bytes(
    data: Union[bytes, str],
    scheme: Optional[str] = None,
    key_id_hash_algorithms: Optional[Sequence[str]] = None
) -> Key:
    """
    Load a key from a PEM encoded buffer.

    Accepts PKCS8 and PKCS1 private keys and PKIX public keys. The key type
    is derived from the parsed key. When scheme is omitted the default
    scheme for the key type is used; for ECDSA it follows the curve.

    Raises:
        NoPemBlockError: If data holds no PEM block
        FailedPemParsingError: If the block is not a supported key encoding
        UnsupportedKeyTypeError: If the key is not RSA, ECDSA or Ed25519
        InvalidKeyError: If the scheme does not fit the key
    """
    decoded = decode_and_parse(data)
    material = decoded.material

    if decoded.key_type == KeyType.ED25519:
        public_bytes = ed25519_raw_public(material)
        private_bytes = ed25519_raw_private(material) if decoded.is_private else b""
    else:
        # Public halves are always stored as PKIX SubjectPublicKeyInfo;
        # private halves keep the DER they were loaded from.
        public_bytes = public_der(material)
        private_bytes = decoded.der if decoded.is_private else b""

    if scheme is None:
        scheme = DEFAULT_SCHEMES[decoded.key_type.value]
        if decoded.key_type == KeyType.ECDSA:
            scheme = ecdsa_scheme_for_curve(material.curve.key_size) or scheme

    if key_id_hash_algorithms is None:
        key_id_hash_algorithms = DEFAULT_KEYID_HASH_ALGORITHMS

    key = normalize_key(public_bytes, private_bytes, decoded.key_type.value, scheme, key_id_hash_algorithms)
    logger.debug("Loaded %s key %s (private=%s)", key.key_type, key.key_id, key.has_private)
    return key


def load_key(
    path: Union[str, Path],
    scheme: Optional[str] = None,
    key_id_hash_algorithms: Optional[Sequence[str]] = None
) -> Key:
    """
    Load a key from a PEM file.

    Args:
        path: Path to a PEM encoded key file
        scheme: Signature scheme, defaults per key type
        key_id_hash_algorithms: Defaults to sha256 and sha512

    Returns:
        Key: Loaded key
    """
    return load_key_from_bytes(Path(path).read_bytes(), scheme, key_id_hash_algorithms)


def parse_key_json(text: Union[str, bytes]) -> Key:
    """
    Parse a key from its JSON form (keytype, scheme, keyid,
    keyid_hash_algorithms, keyval).

    The key id is re-derived from the key material and must match the
    keyid in the document.

    Raises:
        InvalidKeyError: If the document is malformed, fails validation or
            carries a keyid that does not match its material
    """
    try:
        key = Key.model_validate(json.loads(text))
    except InvalidKeyError as e:
        logger.warning("Rejecting key document: %s", e)
        raise
    except (ValueError, ValidationError) as e:
        raise InvalidKeyError(f"malformed key document: {e}") from e

    validate_key(key)
    return key


def parse_ed25519_from_private_json(text: Union[str, bytes]) -> Key:
    """
    Parse an ed25519 key pair from JSON.

    The private value may be the 32-byte seed or the 64-byte seed||public form.

    Raises:
        InvalidKeyError: If the document is not an ed25519 key pair
        InvalidHexStringError: If the key material is not hex
    """
    key = parse_key_json(text)
    if key.key_type != KeyType.ED25519.value:
        raise InvalidKeyError("this is not an ed25519 key")
    if not key.has_private:
        raise InvalidKeyError("this is not a valid ed25519 private key: private part is empty")
    if len(decode_hex(key.private)) not in (32, 64):
        raise InvalidKeyError("this is not a valid ed25519 private key: wrong length")
    return key


def generate_key(
    key_type: str,
    scheme: Optional[str] = None,
    key_id_hash_algorithms: Optional[Sequence[str]] = None
) -> Key:
    """
    Generate a new key pair.

    RSA keys are 3072 bits and stored as PKCS1; ECDSA keys use the curve named
    by the scheme and are stored as PKCS8; Ed25519 keys come from PyNaCl.

    Args:
        key_type: rsa, ecdsa or ed25519
        scheme: Signature scheme, defaults per key type
        key_id_hash_algorithms: Defaults to sha256 and sha512

    Returns:
        Key: New key with both public and private material
    """
    try:
        family = KeyType(key_type)
    except ValueError:
        raise UnsupportedKeyTypeError(f"unsupported key type: {key_type}") from None

    scheme = scheme or DEFAULT_SCHEMES[family.value]
    if key_id_hash_algorithms is None:
        key_id_hash_algorithms = DEFAULT_KEYID_HASH_ALGORITHMS

    if family == KeyType.RSA:
        private_key = rsa.generate_private_key(public_exponent=65537, key_size=DEFAULT_RSA_KEY_SIZE)
        private_bytes = private_key.private_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        )
        public_bytes = public_der(private_key)
    elif family == KeyType.ECDSA:
        private_key = ec.generate_private_key(ecdsa_curve_for_scheme(scheme))
        private_bytes = private_key.private_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
        public_bytes = public_der(private_key)
    else:
        signing_key = nacl.signing.SigningKey.generate()
        public_bytes = bytes(signing_key.verify_key)
        private_bytes = bytes(signing_key) + public_bytes

    key = normalize_key(public_bytes, private_bytes, family.value, scheme, key_id_hash_algorithms)
    logger.debug("Generated %s key %s", key.key_type, key.key_id)
    return key
