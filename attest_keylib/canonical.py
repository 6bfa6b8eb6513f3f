"""Canonical JSON encoding used for key identifiers.

This is the OLPC canonical JSON dialect shared with the other in-toto
implementations:

- object keys are sorted by code point and must be strings
- no whitespace between tokens
- strings escape only backslash and double quote; everything else,
  including newlines and non-ASCII text, is emitted verbatim as UTF-8
- integers render in plain decimal; floats are rejected
- true, false and null as in JSON

The output is a wire contract: identical logical content must give
identical bytes in every implementation.
"""

from typing import Any, List

from .errors import CanonicalEncodingError


def _encode_string(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _encode(value: Any, parts: List[str]) -> None:
    # bool is a subclass of int; check it first
    if value is True:
        parts.append("true")
    elif value is False:
        parts.append("false")
    elif value is None:
        parts.append("null")
    elif isinstance(value, str):
        parts.append(_encode_string(value))
    elif isinstance(value, int):
        parts.append(str(int(value)))
    elif isinstance(value, (list, tuple)):
        parts.append("[")
        for index, item in enumerate(value):
            if index:
                parts.append(",")
            _encode(item, parts)
        parts.append("]")
    elif isinstance(value, dict):
        for key in value:
            if not isinstance(key, str):
                raise CanonicalEncodingError(f"object keys must be strings, got {type(key).__name__}")
        parts.append("{")
        for index, key in enumerate(sorted(value)):
            if index:
                parts.append(",")
            parts.append(_encode_string(key))
            parts.append(":")
            _encode(value[key], parts)
        parts.append("}")
    else:
        raise CanonicalEncodingError(f"cannot canonicalize value of type {type(value).__name__}")


def encode_canonical(value: Any) -> bytes:
    """
    Encode a JSON-compatible value as canonical JSON.

    Args:
        value: Nested dicts, lists/tuples, strings, ints, booleans or None

    Returns:
        UTF-8 encoded canonical JSON

    Raises:
        CanonicalEncodingError: If the value holds floats or other unsupported types
    """
    parts: List[str] = []
    _encode(value, parts)
    return "".join(parts).encode("utf-8")
