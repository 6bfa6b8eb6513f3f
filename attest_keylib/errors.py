"""Exception hierarchy for key handling and signatures."""

from typing import Optional


class KeyLibError(Exception):
    """Base error for attest_keylib."""


class FormatError(KeyLibError):
    """Input bytes or text could not be decoded."""


class NoPemBlockError(FormatError):
    """No PEM block was found in the input."""

    def __init__(self, message: str = "failed to decode the data as PEM block (are you sure this is a pem file?)"):
        super().__init__(message)


class FailedPemParsingError(FormatError):
    """PEM body is neither a PKCS8/PKCS1 private key nor a PKIX public key."""

    def __init__(self, message: str = "failed parsing the PEM block: unsupported PEM type"):
        super().__init__(message)


class InvalidHexStringError(FormatError):
    """Hex encoded key material or signature is malformed."""


class CanonicalEncodingError(FormatError):
    """Value cannot be represented in canonical JSON."""


class PolicyError(KeyLibError):
    """Key metadata violates the supported type/scheme policy."""


class UnsupportedKeyTypeError(PolicyError):
    """Key type is not one of rsa, ecdsa or ed25519."""


class InvalidKeyError(PolicyError):
    """Key failed validation."""


class CurveSizeSchemeMismatchError(PolicyError):
    """ECDSA curve embedded in the key does not match the key scheme."""


class KeyTypeMismatchError(KeyLibError):
    """Decoded key material does not belong to the declared key type."""


class MissingPrivateKeyError(KeyTypeMismatchError):
    """Signing was requested with a public-only key."""


class InvalidSignatureError(KeyLibError):
    """Signature did not verify."""

    def __init__(self, family: str, reason: Optional[str] = None):
        self.family = family
        self.reason = reason
        message = f"invalid signature: {family}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class MalformedSignatureError(InvalidSignatureError, FormatError):
    """Signature bytes could not be decoded for the key family."""
