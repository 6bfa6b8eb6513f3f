"""PEM/DER/hex codec for key material."""

import base64
import binascii
import logging
import re
from dataclasses import dataclass
from typing import Any, Tuple, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

from ..errors import FailedPemParsingError, InvalidHexStringError, NoPemBlockError, UnsupportedKeyTypeError
from ..models.key import KeyType
from .schemes import SUPPORTED_CURVE_NAMES

logger = logging.getLogger(__name__)

PEM_PUBLIC_KEY = "PUBLIC KEY"
PEM_PRIVATE_KEY = "PRIVATE KEY"
PEM_RSA_PRIVATE_KEY = "PRIVATE RSA KEY"

# Same framing rules as Go's encoding/pem: first BEGIN/END pair with equal labels,
# optional "Name: value" headers before a blank line.
_PEM_RE = re.compile(
    rb"-----BEGIN (?P<label>[^-\r\n]*)-----\r?\n"
    rb"(?P<body>.*?)"
    rb"-----END (?P=label)-----",
    re.DOTALL,
)
_PEM_LINE_LENGTH = 64


@dataclass(frozen=True)
class DecodedKey:
    """A parsed key tagged with its family."""
    key_type: KeyType
    is_private: bool
    der: bytes
    material: Any


def _strip_pem_headers(body: bytes) -> bytes:
    lines = body.splitlines()
    if lines and b":" in lines[0]:
        # Headers end at the first blank line
        for index, line in enumerate(lines):
            if not line.strip():
                return b"\n".join(lines[index + 1:])
        return b""
    return body


def decode_pem(data: Union[bytes, str]) -> Tuple[str, bytes]:
    """
    Find the first PEM block in data.

    Returns:
        Tuple of (label, der_bytes)

    Raises:
        NoPemBlockError: If no well formed PEM block is present
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    for match in _PEM_RE.finditer(data):
        body = _strip_pem_headers(match.group("body"))
        try:
            der = base64.b64decode(b"".join(body.split()), validate=True)
        except binascii.Error:
            continue
        return match.group("label").decode("ascii", "replace"), der
    raise NoPemBlockError()


def encode_pem(der: bytes, label: str) -> str:
    """Wrap DER bytes in a PEM block without headers or surrounding whitespace."""
    encoded = base64.b64encode(der).decode("ascii")
    lines = [f"-----BEGIN {label}-----"]
    lines.extend(encoded[i:i + _PEM_LINE_LENGTH] for i in range(0, len(encoded), _PEM_LINE_LENGTH))
    lines.append(f"-----END {label}-----")
    return "\n".join(lines).strip()


def encode_hex(data: bytes) -> str:
    return data.hex()


def decode_hex(text: str) -> bytes:
    """
    Decode hex text.

    Raises:
        InvalidHexStringError: If the text is not valid hex
    """
    try:
        return binascii.unhexlify(text)
    except (binascii.Error, ValueError) as e:
        raise InvalidHexStringError(f"invalid hex string: {e}") from e


def _classify(material: Any) -> Tuple[KeyType, bool]:
    if isinstance(material, rsa.RSAPrivateKey):
        return KeyType.RSA, True
    if isinstance(material, rsa.RSAPublicKey):
        return KeyType.RSA, False
    if isinstance(material, (ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey)):
        if material.curve.name not in SUPPORTED_CURVE_NAMES:
            raise UnsupportedKeyTypeError(f"unsupported ecdsa curve: {material.curve.name}")
        return KeyType.ECDSA, isinstance(material, ec.EllipticCurvePrivateKey)
    if isinstance(material, ed25519.Ed25519PrivateKey):
        return KeyType.ED25519, True
    if isinstance(material, ed25519.Ed25519PublicKey):
        return KeyType.ED25519, False
    raise UnsupportedKeyTypeError(f"unsupported key type: {type(material).__name__}")


def parse_der(der: bytes) -> Any:
    """
    Parse DER as a PKCS8 or PKCS1 private key, then as a PKIX public key.

    Raises:
        FailedPemParsingError: If no format matches
    """
    try:
        return serialization.load_der_private_key(der, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm):
        pass
    try:
        return serialization.load_der_public_key(der)
    except (ValueError, UnsupportedAlgorithm):
        pass
    raise FailedPemParsingError()


def decode_and_parse(data: Union[bytes, str]) -> DecodedKey:
    """
    Decode a PEM block and parse the key it carries.

    Raises:
        NoPemBlockError: If data holds no PEM block
        FailedPemParsingError: If the block is not a supported key encoding
        UnsupportedKeyTypeError: If the key is not RSA, ECDSA or Ed25519
    """
    label, der = decode_pem(data)
    material = parse_der(der)
    key_type, is_private = _classify(material)
    logger.debug("Parsed %s %s key from PEM block %r", key_type.value,
                 "private" if is_private else "public", label)
    return DecodedKey(key_type=key_type, is_private=is_private, der=der, material=material)


def public_der(material: Any) -> bytes:
    """PKIX SubjectPublicKeyInfo DER for an RSA or ECDSA key object."""
    if isinstance(material, (rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey)):
        material = material.public_key()
    return material.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def ed25519_raw_public(material: Any) -> bytes:
    if isinstance(material, ed25519.Ed25519PrivateKey):
        material = material.public_key()
    return material.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


def ed25519_raw_private(material: ed25519.Ed25519PrivateKey) -> bytes:
    """64-byte seed||public form of an Ed25519 private key."""
    seed = material.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return seed + ed25519_raw_public(material)
