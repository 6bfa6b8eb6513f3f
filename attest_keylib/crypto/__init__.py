"""Cryptographic operations for attest_keylib."""

from ..canonical import encode_canonical
from .keys import (
    key_id_for,
    derive_key_id,
    normalize_key,
    load_key,
    load_key_from_bytes,
    parse_key_json,
    parse_ed25519_from_private_json,
    generate_key,
)
from .schemes import validate_key, match_ecdsa_scheme
from .signing import sign_data, verify_signature

__all__ = [
    "encode_canonical",
    "key_id_for",
    "derive_key_id",
    "normalize_key",
    "load_key",
    "load_key_from_bytes",
    "parse_key_json",
    "parse_ed25519_from_private_json",
    "generate_key",
    "validate_key",
    "match_ecdsa_scheme",
    "sign_data",
    "verify_signature",
]
