"""Pre-Authentication Encoding (PAE) for pasetolite.

PAE binds an ordered list of byte strings into one unambiguous byte string
before it is signed or authenticated. Every part is length-prefixed and the
list itself is count-prefixed, so no two different lists (including two
different splits of the same bytes) encode to the same output.
"""

from __future__ import annotations

from collections.abc import Sequence

from .constants import PAE_LENGTH_SIZE

# Largest length whose prefix is still a valid signed 64-bit integer
_MAX_LENGTH = (1 << 63) - 1


def le64(n: int) -> bytes:
    """Encode a non-negative integer as 8 little-endian bytes.

    Args:
        n: The integer to encode.

    Returns:
        The 8-byte encoding; its most significant bit is always zero.

    Raises:
        ValueError: If n is negative or does not fit in 63 bits.
    """
    if n < 0:
        raise ValueError(f"Cannot encode negative length: {n}")
    if n > _MAX_LENGTH:
        raise ValueError(f"Length too large to encode: {n}")
    return n.to_bytes(PAE_LENGTH_SIZE, "little")


def pae(parts: Sequence[bytes | str]) -> bytes:
    """Encode parts with Pre-Authentication Encoding.

    ``str`` parts are encoded as UTF-8 first.

    Args:
        parts: The ordered parts to encode.

    Returns:
        LE64(count) followed by LE64(len(part)) || part for each part.
    """
    encoded = [p.encode("utf-8") if isinstance(p, str) else bytes(p) for p in parts]
    output = bytearray(le64(len(encoded)))
    for part in encoded:
        output += le64(len(part))
        output += part
    return bytes(output)
