"""Signature scheme registry and key validation."""

from types import MappingProxyType
from typing import Mapping, Optional

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec

from ..errors import CurveSizeSchemeMismatchError, InvalidKeyError
from ..models.key import Key, KeyType

RSASSA_PSS_SHA256 = "rsassa-pss-sha256"
ECDSA_SHA2_NISTP224 = "ecdsa-sha2-nistp224"
ECDSA_SHA2_NISTP256 = "ecdsa-sha2-nistp256"
ECDSA_SHA2_NISTP384 = "ecdsa-sha2-nistp384"
ECDSA_SHA2_NISTP521 = "ecdsa-sha2-nistp521"
ED25519_SCHEME = "ed25519"

SUPPORTED_SCHEMES: Mapping[str, frozenset] = MappingProxyType({
    KeyType.RSA.value: frozenset({RSASSA_PSS_SHA256}),
    KeyType.ECDSA.value: frozenset({ECDSA_SHA2_NISTP224, ECDSA_SHA2_NISTP384, ECDSA_SHA2_NISTP521}),
    KeyType.ED25519.value: frozenset({ED25519_SCHEME}),
})

SUPPORTED_KEYID_HASH_ALGORITHMS = frozenset({"sha256", "sha512"})

DEFAULT_KEYID_HASH_ALGORITHMS = ("sha256", "sha512")

DEFAULT_SCHEMES: Mapping[str, str] = MappingProxyType({
    KeyType.RSA.value: RSASSA_PSS_SHA256,
    KeyType.ECDSA.value: ECDSA_SHA2_NISTP384,
    KeyType.ED25519.value: ED25519_SCHEME,
})

DEFAULT_RSA_KEY_SIZE = 3072

# Curve bit size -> scheme that names it
_CURVE_SCHEMES: Mapping[int, str] = MappingProxyType({
    224: ECDSA_SHA2_NISTP224,
    256: ECDSA_SHA2_NISTP256,
    384: ECDSA_SHA2_NISTP384,
    521: ECDSA_SHA2_NISTP521,
})

_SCHEME_CURVES: Mapping[str, type] = MappingProxyType({
    ECDSA_SHA2_NISTP224: ec.SECP224R1,
    ECDSA_SHA2_NISTP256: ec.SECP256R1,
    ECDSA_SHA2_NISTP384: ec.SECP384R1,
    ECDSA_SHA2_NISTP521: ec.SECP521R1,
})

# Only the NIST prime curves are ecdsa keys here
SUPPORTED_CURVE_NAMES = frozenset(curve.name for curve in _SCHEME_CURVES.values())


def validate_key(key: Key) -> None:
    """
    Check that a key's type, scheme and key id hash algorithms are supported.

    Must pass before any signing or verification.

    Raises:
        InvalidKeyError: If any of the three checks fails
    """
    schemes = SUPPORTED_SCHEMES.get(key.key_type)
    if schemes is None:
        raise InvalidKeyError(f"unsupported key type: {key.key_type}")
    if key.scheme not in schemes:
        raise InvalidKeyError(f"scheme {key.scheme} is not valid for key type {key.key_type}")
    if not key.key_id_hash_algorithms:
        raise InvalidKeyError("keyid_hash_algorithms must not be empty")
    unknown = [a for a in key.key_id_hash_algorithms if a not in SUPPORTED_KEYID_HASH_ALGORITHMS]
    if unknown:
        raise InvalidKeyError(f"unsupported keyid hash algorithms: {', '.join(unknown)}")


def match_ecdsa_scheme(curve_size: int, scheme: str) -> None:
    """
    Ensure the scheme names the curve actually embedded in the key.

    Raises:
        CurveSizeSchemeMismatchError: If the scheme names another curve
    """
    if _CURVE_SCHEMES.get(curve_size) != scheme:
        raise CurveSizeSchemeMismatchError(
            f"curve size {curve_size} does not match scheme {scheme}"
        )


def match_ecdsa_curve(curve: ec.EllipticCurve, scheme: str) -> None:
    """
    Ensure the scheme names this exact curve, not just one of the same size.

    Raises:
        CurveSizeSchemeMismatchError: If the scheme names another curve
    """
    match_ecdsa_scheme(curve.key_size, scheme)
    if curve.name != _SCHEME_CURVES[scheme].name:
        raise CurveSizeSchemeMismatchError(f"curve {curve.name} does not match scheme {scheme}")


def ecdsa_scheme_for_curve(curve_size: int) -> Optional[str]:
    return _CURVE_SCHEMES.get(curve_size)


def ecdsa_curve_for_scheme(scheme: str) -> ec.EllipticCurve:
    try:
        return _SCHEME_CURVES[scheme]()
    except KeyError:
        raise InvalidKeyError(f"scheme {scheme} does not name an ECDSA curve") from None


def ecdsa_hash_for_curve(curve_size: int) -> hashes.HashAlgorithm:
    """Pick the digest for an ECDSA curve size (RFC 5656, section 6.2.1)."""
    if curve_size <= 256:
        return hashes.SHA256()
    if curve_size <= 384:
        return hashes.SHA384()
    return hashes.SHA512()
