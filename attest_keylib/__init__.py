"""Key loading, key ids and signatures for in-toto style attestations."""

__version__ = "0.1.0"

from .crypto import (
    derive_key_id,
    generate_key,
    load_key,
    load_key_from_bytes,
    normalize_key,
    parse_ed25519_from_private_json,
    parse_key_json,
    sign_data,
    validate_key,
    verify_signature,
)
from .errors import KeyLibError
from .models import EcdsaSignatureValue, Key, KeyType, KeyVal, Signature

__all__ = [
    "derive_key_id",
    "generate_key",
    "load_key",
    "load_key_from_bytes",
    "normalize_key",
    "parse_ed25519_from_private_json",
    "parse_key_json",
    "sign_data",
    "validate_key",
    "verify_signature",
    "KeyLibError",
    "EcdsaSignatureValue",
    "Key",
    "KeyType",
    "KeyVal",
    "Signature",
]
