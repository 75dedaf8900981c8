"""Base64url encoding/decoding utilities for pasetolite."""

from __future__ import annotations

import base64
import binascii
import re

from ..errors import Base64URLDecodeError

# Characters that belong to standard base64 or padding but not to base64url
_FORBIDDEN_CHARS = re.compile(r"[+/=]")
_BASE64URL_CHARS = re.compile(r"^[A-Za-z0-9_-]*$")


def to_base64url(data: bytes) -> str:
    """Encode bytes to URL-safe base64 without padding.

    Args:
        data: The bytes to encode.

    Returns:
        URL-safe base64 string without padding.
    """
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def from_base64url(s: str) -> bytes:
    """Decode an unpadded URL-safe base64 string to bytes.

    Only the base64url alphabet is accepted. Padding, the standard base64
    characters ``+`` and ``/`` and lengths that cannot come out of
    ``to_base64url`` are rejected.

    Args:
        s: The base64url string to decode.

    Returns:
        The decoded bytes.

    Raises:
        Base64URLDecodeError: If the input is not strict base64url.
    """
    if _FORBIDDEN_CHARS.search(s):
        raise Base64URLDecodeError("Base64URL input contains forbidden characters (+, / or =)")
    if not _BASE64URL_CHARS.match(s):
        raise Base64URLDecodeError("Base64URL input contains non-Base64URL characters")
    if len(s) % 4 == 1:
        raise Base64URLDecodeError(f"Invalid Base64URL length: {len(s)}")

    # Add padding if needed
    padding = 4 - (len(s) % 4)
    if padding != 4:
        s += "=" * padding
    try:
        decoded = base64.urlsafe_b64decode(s)
    except binascii.Error as e:
        raise Base64URLDecodeError(f"Invalid Base64URL input: {e}") from e

    # Non-canonical trailing bits would let two strings decode to the same bytes
    if to_base64url(decoded) != s.rstrip("="):
        raise Base64URLDecodeError("Base64URL input has non-zero trailing bits")
    return decoded
