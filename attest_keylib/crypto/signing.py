"""Signature creation and verification for rsa, ecdsa and ed25519 keys."""

import logging

import nacl.exceptions
import nacl.signing
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, padding
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed

from ..errors import (
    InvalidHexStringError,
    InvalidKeyError,
    InvalidSignatureError,
    KeyTypeMismatchError,
    MalformedSignatureError,
    MissingPrivateKeyError,
)
from ..models.key import EcdsaSignatureValue, Key, KeyType, Signature
from .codec import DecodedKey, decode_and_parse, decode_hex, encode_hex
from .schemes import RSASSA_PSS_SHA256, ecdsa_hash_for_curve, match_ecdsa_curve, validate_key

logger = logging.getLogger(__name__)

ED25519_PUBLIC_KEY_SIZE = 32
ED25519_SEED_SIZE = 32


def _digest(algorithm: hashes.HashAlgorithm, data: bytes) -> bytes:
    h = hashes.Hash(algorithm)
    h.update(data)
    return h.finalize()


def _pss_padding() -> padding.PSS:
    # Salt length equals the digest size; MGF1 uses the message digest
    return padding.PSS(
        mgf=padding.MGF1(hashes.SHA256()),
        salt_length=hashes.SHA256.digest_size,
    )


def _decode_private(key: Key, expected: KeyType) -> DecodedKey:
    if not key.has_private:
        raise MissingPrivateKeyError(f"key {key.key_id} has no private key material")
    decoded = decode_and_parse(key.private)
    if decoded.key_type != expected or not decoded.is_private:
        raise KeyTypeMismatchError(
            f"private key material of {key.key_id} is not a {expected.value} private key"
        )
    return decoded


def _decode_public(key: Key, expected: KeyType) -> DecodedKey:
    decoded = decode_and_parse(key.public)
    if decoded.key_type != expected or decoded.is_private:
        raise KeyTypeMismatchError(
            f"public key material of {key.key_id} is not a {expected.value} public key"
        )
    return decoded


def _ed25519_signing_key(private_hex: str) -> nacl.signing.SigningKey:
    raw = decode_hex(private_hex)
    # Either the bare seed or Go-style seed||public
    if len(raw) not in (ED25519_SEED_SIZE, ED25519_SEED_SIZE + ED25519_PUBLIC_KEY_SIZE):
        raise InvalidHexStringError(f"ed25519 private key must be 32 or 64 bytes, got {len(raw)}")
    return nacl.signing.SigningKey(raw[:ED25519_SEED_SIZE])


def _sign_rsa(key: Key, payload: bytes) -> bytes:
    decoded = _decode_private(key, KeyType.RSA)
    if key.scheme != RSASSA_PSS_SHA256:
        raise AssertionError(f"unexpected rsa scheme {key.scheme} after validation")
    hashed = _digest(hashes.SHA256(), payload)
    try:
        return decoded.material.sign(hashed, _pss_padding(), Prehashed(hashes.SHA256()))
    except ValueError as e:
        raise InvalidKeyError(f"rsa key {key.key_id} cannot sign: {e}") from e


def _sign_ecdsa(key: Key, payload: bytes) -> bytes:
    decoded = _decode_private(key, KeyType.ECDSA)
    curve_size = decoded.material.curve.key_size
    match_ecdsa_curve(decoded.material.curve, key.scheme)
    algorithm = ecdsa_hash_for_curve(curve_size)
    # The digest is signed as-is; OpenSSL truncates it to the curve order
    hashed = _digest(algorithm, payload)
    # cryptography returns the DER SEQUENCE(r, s) directly
    try:
        return decoded.material.sign(hashed, ec.ECDSA(Prehashed(algorithm)))
    except ValueError as e:
        raise InvalidKeyError(f"ecdsa key {key.key_id} cannot sign: {e}") from e


def _sign_ed25519(key: Key, payload: bytes) -> bytes:
    if not key.has_private:
        raise MissingPrivateKeyError(f"key {key.key_id} has no private key material")
    signing_key = _ed25519_signing_key(key.private)
    return signing_key.sign(payload).signature


def _verify_rsa(key: Key, sig: bytes, payload: bytes) -> None:
    decoded = _decode_public(key, KeyType.RSA)
    if key.scheme != RSASSA_PSS_SHA256:
        raise AssertionError(f"unexpected rsa scheme {key.scheme} after validation")
    hashed = _digest(hashes.SHA256(), payload)
    try:
        decoded.material.verify(sig, hashed, _pss_padding(), Prehashed(hashes.SHA256()))
    except InvalidSignature as e:
        raise InvalidSignatureError(KeyType.RSA.value) from e
    except ValueError as e:
        raise InvalidSignatureError(KeyType.RSA.value, str(e)) from e


def _verify_ecdsa(key: Key, sig: bytes, payload: bytes) -> None:
    decoded = _decode_public(key, KeyType.ECDSA)
    curve_size = decoded.material.curve.key_size
    match_ecdsa_curve(decoded.material.curve, key.scheme)
    algorithm = ecdsa_hash_for_curve(curve_size)
    hashed = _digest(algorithm, payload)
    try:
        value = EcdsaSignatureValue.from_der(sig)
    except ValueError as e:
        raise MalformedSignatureError(KeyType.ECDSA.value, "signature is not an ASN.1 SEQUENCE(r, s)") from e
    try:
        decoded.material.verify(value.to_der(), hashed, ec.ECDSA(Prehashed(algorithm)))
    except InvalidSignature as e:
        raise InvalidSignatureError(KeyType.ECDSA.value) from e
    except ValueError as e:
        raise InvalidSignatureError(KeyType.ECDSA.value, str(e)) from e


def _verify_ed25519(key: Key, sig: bytes, payload: bytes) -> None:
    public = decode_hex(key.public)
    if len(public) != ED25519_PUBLIC_KEY_SIZE:
        raise InvalidHexStringError(f"ed25519 public key must be 32 bytes, got {len(public)}")
    verify_key = nacl.signing.VerifyKey(public)
    try:
        verify_key.verify(payload, sig)
    except (nacl.exceptions.BadSignatureError, ValueError) as e:
        raise InvalidSignatureError(KeyType.ED25519.value) from e


_SIGNERS = {
    KeyType.RSA: _sign_rsa,
    KeyType.ECDSA: _sign_ecdsa,
    KeyType.ED25519: _sign_ed25519,
}

_VERIFIERS = {
    KeyType.RSA: _verify_rsa,
    KeyType.ECDSA: _verify_ecdsa,
    KeyType.ED25519: _verify_ed25519,
}


def sign_data(key: Key, payload: bytes) -> Signature:
    """
    Sign a payload with a key.

    rsa keys sign with RSASSA-PSS over SHA-256; ecdsa keys sign the
    curve-sized SHA-2 digest of the payload and emit DER (r, s); ed25519
    keys sign the raw payload.

    Args:
        key: Key holding private material
        payload: Bytes to sign

    Returns:
        Signature carrying the key id and hex-encoded signature bytes

    Raises:
        InvalidKeyError: If the key fails validation or is unusable for its scheme
        MissingPrivateKeyError: If the key is public-only
        KeyTypeMismatchError: If the private material is of another key type
        UnsupportedKeyTypeError: If the stored material is not a supported key or curve
        CurveSizeSchemeMismatchError: If the ecdsa curve does not fit the scheme
        NoPemBlockError, FailedPemParsingError: If stored PEM text is broken
        InvalidHexStringError: If stored ed25519 hex is broken
    """
    validate_key(key)
    signature_bytes = _SIGNERS[KeyType(key.key_type)](key, payload)
    logger.debug("Signed %d bytes with %s key %s", len(payload), key.key_type, key.key_id)
    return Signature(key_id=key.key_id, sig=encode_hex(signature_bytes))


def verify_signature(key: Key, signature: Signature, payload: bytes) -> None:
    """
    Verify a signature over a payload.

    Only the public half of the key is used.

    Raises:
        InvalidKeyError: If the key fails validation
        InvalidHexStringError: If the signature or ed25519 key is not hex
        KeyTypeMismatchError: If the public material is of another key type
        UnsupportedKeyTypeError: If the stored material is not a supported key or curve
        CurveSizeSchemeMismatchError: If the ecdsa curve does not fit the scheme
        MalformedSignatureError: If an ecdsa signature is not DER (r, s)
        InvalidSignatureError: If the signature does not verify
    """
    validate_key(key)
    sig = decode_hex(signature.sig)
    try:
        _VERIFIERS[KeyType(key.key_type)](key, sig, payload)
    except InvalidSignatureError:
        logger.debug("Signature by %s rejected for %s key %s", signature.key_id, key.key_type, key.key_id)
        raise
