"""Error hierarchy for pasetolite."""

from __future__ import annotations


class PasetoError(Exception):
    """Base exception for all pasetolite errors."""

    pass


class ProviderStateError(PasetoError):
    """The provider already holds a key and cannot generate another."""

    pass


class KeyPurposeError(PasetoError):
    """The key is missing or not authorized for the requested operation.

    Raised on every operation, independent of how the provider was built,
    to close key-confusion attacks.
    """

    pass


class MalformedTokenError(PasetoError):
    """The token does not follow the wire format."""

    pass


class HeaderMismatchError(PasetoError):
    """The token header names a different version or purpose."""

    pass


class InvalidMessageError(PasetoError):
    """The message or footer cannot be turned into a token payload."""

    pass


class ClaimsError(PasetoError):
    """The verified payload is not a valid claims object."""

    pass


class VerificationError(PasetoError):
    """Signature verification failure.

    CRITICAL: The message is always the same, whatever the cause. Never
    attach the underlying reason, it would give an attacker an oracle.
    """

    pass


class DecryptionError(PasetoError):
    """Authenticated decryption failure for local tokens.

    Like VerificationError, it carries one fixed message.
    """

    pass


class UnsupportedProtocolError(PasetoError):
    """No provider is registered for the requested version and purpose."""

    pass


class UnsupportedOperationError(PasetoError):
    """The protocol does not offer the requested operation."""

    pass


class InvalidImportDataError(PasetoError):
    """Invalid data provided for key import."""

    pass


class Base64URLDecodeError(ValueError):
    """Input is not strict, unpadded base64url."""

    pass
