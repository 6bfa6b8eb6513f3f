"""Key and signature data models."""

import hashlib
import json
from enum import Enum
from typing import Any, Mapping, NamedTuple, Optional, Sequence, Tuple

from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature, encode_dss_signature
from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..canonical import encode_canonical
from ..errors import InvalidKeyError


def key_id_for(
    key_type: str,
    scheme: str,
    key_id_hash_algorithms: Sequence[str],
    public: str
) -> str:
    """
    Compute the key id from the public-facing key fields.

    The private half of the key never takes part, so a key pair and its
    public-only view share one identifier.

    Returns:
        Lowercase hex SHA-256 of the canonical JSON of the fields
    """
    key_to_be_hashed = {
        "keytype": key_type,
        "scheme": scheme,
        "keyid_hash_algorithms": list(key_id_hash_algorithms),
        "keyval": {
            "public": public,
        },
    }
    return hashlib.sha256(encode_canonical(key_to_be_hashed)).hexdigest()


class KeyType(str, Enum):
    """Supported key families."""
    RSA = "rsa"
    ECDSA = "ecdsa"
    ED25519 = "ed25519"


class KeyVal(BaseModel):
    """Textual key material: PEM for rsa/ecdsa, hex for ed25519."""
    model_config = ConfigDict(frozen=True)

    public: str = Field(..., description="Public key (PEM or hex)")
    private: str = Field("", description="Private key (PEM or hex), empty for public-only keys")


class Key(BaseModel):
    """
    A public key or key pair together with its signing metadata.

    Attribute names are Pythonic; the serialized form uses the field
    names shared with the other in-toto implementations (keyid, keytype,
    keyid_hash_algorithms, keyval).
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key_id: str = Field(..., alias="keyid", description="SHA-256 over the canonical public key fields")
    key_type: str = Field(..., alias="keytype", description="rsa, ecdsa or ed25519")
    scheme: str = Field(..., description="Signature scheme")
    key_id_hash_algorithms: Tuple[str, ...] = Field(
        ...,
        alias="keyid_hash_algorithms",
        description="Hash algorithms allowed for alternate key ids"
    )
    key_val: KeyVal = Field(..., alias="keyval", description="Key material")

    @model_validator(mode="after")
    def check_key_id(self) -> "Key":
        expected = key_id_for(self.key_type, self.scheme, self.key_id_hash_algorithms, self.key_val.public)
        if self.key_id != expected:
            raise InvalidKeyError(f"keyid {self.key_id} does not match key material (expected {expected})")
        return self

    @property
    def public(self) -> str:
        return self.key_val.public

    @property
    def private(self) -> str:
        return self.key_val.private

    @property
    def has_private(self) -> bool:
        """True if this key can sign."""
        return bool(self.key_val.private)

    def public_only(self) -> "Key":
        """Return the verification-only view of this key."""
        return Key(
            key_id=self.key_id,
            key_type=self.key_type,
            scheme=self.scheme,
            key_id_hash_algorithms=self.key_id_hash_algorithms,
            key_val=KeyVal(public=self.key_val.public),
        )

    def model_copy(self, *, update: Optional[Mapping[str, Any]] = None, deep: bool = False) -> "Key":
        """Copy the key; a copy with updated fields is validated like a new key."""
        copied = super().model_copy(update=update, deep=deep)
        if update:
            return Key.model_validate(copied.model_dump())
        return copied

    def to_dict(self) -> dict:
        """Convert to the serialized key shape."""
        return self.model_dump(by_alias=True, mode="json")

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


class Signature(BaseModel):
    """Signature with the identifier of the signing key."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key_id: str = Field(..., alias="keyid", description="Identifier of the signing key")
    sig: str = Field(..., description="Hex-encoded signature")

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)


class EcdsaSignatureValue(NamedTuple):
    """The (r, s) pair carried as an ASN.1 DER SEQUENCE of two INTEGERs."""
    r: int
    s: int

    def to_der(self) -> bytes:
        return encode_dss_signature(self.r, self.s)

    @classmethod
    def from_der(cls, data: bytes) -> "EcdsaSignatureValue":
        """
        Decode a DER signature.

        Raises:
            ValueError: If the data is not a DER SEQUENCE of two INTEGERs
        """
        r, s = decode_dss_signature(data)
        return cls(r=r, s=s)
