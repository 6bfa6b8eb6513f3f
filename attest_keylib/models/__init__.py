"""Data models for keys and signatures."""

from .key import KeyType, KeyVal, Key, Signature, EcdsaSignatureValue, key_id_for

__all__ = [
    "KeyType",
    "KeyVal",
    "Key",
    "Signature",
    "EcdsaSignatureValue",
    "key_id_for",
]
