"""Type definitions for pasetolite."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

# Operations a provider may be asked to perform
Operation = Literal["sign", "verify", "encrypt", "decrypt"]


class KeyUsage(str, Enum):
    """What a key is allowed to be used for."""

    SIGN = "sign"
    VERIFY = "verify"
    LOCAL = "local"


@dataclass(frozen=True)
class AlgorithmParams:
    """Fixed algorithm parameters for one (version, purpose).

    Attributes:
        name: Algorithm identifier, e.g. ``RSA-PSS``.
        hash_name: Digest used for signing, MGF1 or MAC.
        key_size: Key size in bits.
        tag_length: Bytes appended to the payload inside the token body
            (the signature for public tokens, the MAC for local tokens).
        salt_length: PSS salt length in bytes, public only.
        public_exponent: RSA public exponent, public only.
        nonce_length: Nonce bytes prefixed to the ciphertext, local only.
    """

    name: str
    hash_name: str
    key_size: int
    tag_length: int
    salt_length: int | None = None
    public_exponent: int | None = None
    nonce_length: int = 0


@dataclass(frozen=True)
class Capabilities:
    """Operations a protocol supports."""

    can_sign: bool = False
    can_verify: bool = False
    can_encrypt: bool = False
    can_decrypt: bool = False

    def allows(self, operation: Operation) -> bool:
        """Return whether the operation is supported."""
        return bool(getattr(self, f"can_{operation}"))


@dataclass(frozen=True)
class ParsedToken:
    """A token split into its wire components.

    Attributes:
        version: The version segment, e.g. ``v1``.
        purpose: The purpose segment, e.g. ``public``.
        payload: Body bytes before the trailing tag.
        signature: The trailing tag bytes (signature or MAC).
        footer: The decoded footer, ``""`` when absent.
        raw_body: The whole decoded body.
        raw_footer: The decoded footer bytes.
    """

    version: str
    purpose: str
    payload: bytes
    signature: bytes
    footer: str
    raw_body: bytes
    raw_footer: bytes = b""


@dataclass(frozen=True)
class VerifiedToken:
    """Result of a successful verify or decrypt.

    Attributes:
        message: The claims carried by the token.
        footer: The footer string, ``""`` when the token has none.
    """

    message: dict[str, Any]
    footer: str = ""


@dataclass
class ExportedKey:
    """Exported provider key for persistence/sharing.

    The export format includes:
    - version: Export format version (must be 1)
    - protocol: The protocol header, ``v1.public`` or ``v1.local``
    - privateKey: PEM private key (public) or base64url secret key (local)
    - publicKey: PEM public key, public protocols only
    - exportedAt: Export timestamp (ISO 8601)

    Attributes:
        version: Export format version (always 1).
        protocol: The ``version.purpose`` header of the provider.
        private_key: Private or secret key, None for verify-only exports.
        public_key: PEM public key, None for local keys.
        exported_at: ISO 8601 timestamp when the key was exported.
    """

    version: int
    protocol: str
    private_key: str | None = None
    public_key: str | None = None
    exported_at: str = ""
