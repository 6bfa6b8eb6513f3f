"""Tests for canonical JSON encoding."""

import pytest

from attest_keylib.canonical import encode_canonical
from attest_keylib.errors import CanonicalEncodingError


def test_keys_sorted_without_whitespace():
    """Object keys are sorted and no whitespace is emitted."""
    assert encode_canonical({"b": 1, "a": [True, False, None]}) == b'{"a":[true,false,null],"b":1}'


def test_insertion_order_does_not_matter():
    """Same logical content gives the same bytes."""
    first = {"scheme": "ed25519", "keytype": "ed25519", "keyval": {"public": "ab"}}
    second = {"keyval": {"public": "ab"}, "keytype": "ed25519", "scheme": "ed25519"}
    assert encode_canonical(first) == encode_canonical(second)


def test_only_quote_and_backslash_are_escaped():
    """Newlines and non-ASCII text are emitted verbatim."""
    encoded = encode_canonical({"k": 'line1\nline2 "q" \\ é'})
    assert encoded == '{"k":"line1\nline2 \\"q\\" \\\\ é"}'.encode("utf-8")


def test_key_id_document():
    """Canonical form of the key id document matches other implementations."""
    document = {
        "keytype": "ed25519",
        "scheme": "ed25519",
        "keyid_hash_algorithms": ["sha256", "sha512"],
        "keyval": {"public": "8f93f549eb4cca8dc2142fb655ba2d0955d1824f79474f354e38d6a359e9d440"},
    }
    assert encode_canonical(document) == (
        b'{"keyid_hash_algorithms":["sha256","sha512"],"keytype":"ed25519",'
        b'"keyval":{"public":"8f93f549eb4cca8dc2142fb655ba2d0955d1824f79474f354e38d6a359e9d440"},'
        b'"scheme":"ed25519"}'
    )


def test_rejects_floats_and_unknown_types():
    """Floats, non-string keys and arbitrary objects cannot be canonicalized."""
    with pytest.raises(CanonicalEncodingError):
        encode_canonical({"a": 1.5})
    with pytest.raises(CanonicalEncodingError):
        encode_canonical({1: "a"})
    with pytest.raises(CanonicalEncodingError):
        encode_canonical(object())
