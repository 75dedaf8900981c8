"""Token framing: packing and parsing the wire format.

    token  := version "." purpose "." body ["." footer]
    body   := base64url(payload || signature)
    footer := base64url(footer bytes)
"""

from __future__ import annotations

from .constants import (
    TOKEN_SEGMENTS_WITH_FOOTER,
    TOKEN_SEGMENTS_WITHOUT_FOOTER,
    TOKEN_SEPARATOR,
    VERIFICATION_FAILED_MESSAGE,
)
from .crypto.utils import from_base64url, to_base64url
from .errors import (
    Base64URLDecodeError,
    HeaderMismatchError,
    MalformedTokenError,
    PasetoError,
    VerificationError,
)
from .types import ParsedToken


def pack(header: str, payload: bytes, signature: bytes, footer: str | bytes = "") -> str:
    """Assemble a token from its parts.

    Args:
        header: The ``version.purpose`` header.
        payload: Payload bytes (for local tokens: nonce || ciphertext).
        signature: Signature or MAC bytes appended to the payload.
        footer: Optional footer; omitted from the token when empty.

    Returns:
        The token in transit form.
    """
    token = f"{header}{TOKEN_SEPARATOR}{to_base64url(payload + signature)}"
    if footer:
        footer_bytes = footer.encode("utf-8") if isinstance(footer, str) else footer
        token += f"{TOKEN_SEPARATOR}{to_base64url(footer_bytes)}"
    return token


def parse_raw_token(
    raw_token: str,
    *,
    version: str,
    purpose: str,
    signature_length: int,
    failure: type[PasetoError] = VerificationError,
    failure_message: str = VERIFICATION_FAILED_MESSAGE,
) -> ParsedToken:
    """Split a token into its components.

    Structural problems are reported as MalformedTokenError and a foreign
    header as HeaderMismatchError, both before any cryptographic work. A
    footer that does not decode can never be authentic, so it is reported
    with the same uninformative failure as a bad signature.

    Args:
        raw_token: The token in transit form.
        version: Expected version segment.
        purpose: Expected purpose segment.
        signature_length: Length of the trailing signature/MAC in the body.
        failure: Error raised for an undecodable footer.
        failure_message: Message for that error.

    Returns:
        The parsed token.

    Raises:
        MalformedTokenError: If the token does not follow the wire format.
        HeaderMismatchError: If the header names another version or purpose.
    """
    if not isinstance(raw_token, str):
        raise MalformedTokenError(f"Token must be a string, got {type(raw_token).__name__}")

    segments = raw_token.split(TOKEN_SEPARATOR)
    if len(segments) not in (TOKEN_SEGMENTS_WITHOUT_FOOTER, TOKEN_SEGMENTS_WITH_FOOTER):
        raise MalformedTokenError(
            f"Invalid token segment count: {len(segments)}, "
            f"expected {TOKEN_SEGMENTS_WITHOUT_FOOTER} or {TOKEN_SEGMENTS_WITH_FOOTER}"
        )

    token_version, token_purpose, body_segment = segments[:3]
    if token_version != version or token_purpose != purpose:
        raise HeaderMismatchError(
            f"Invalid token header: {token_version}.{token_purpose}, expected {version}.{purpose}"
        )

    try:
        body = from_base64url(body_segment)
    except Base64URLDecodeError as e:
        raise MalformedTokenError(f"Invalid token body encoding: {e}") from e

    if len(body) < signature_length:
        raise MalformedTokenError(
            f"Invalid token body size: {len(body)} bytes, expected at least {signature_length}"
        )

    split = len(body) - signature_length
    payload = body[:split]
    signature = body[split:]

    raw_footer = b""
    footer = ""
    if len(segments) == TOKEN_SEGMENTS_WITH_FOOTER:
        if not segments[3]:
            raise MalformedTokenError("Token has an empty footer segment")
        try:
            raw_footer = from_base64url(segments[3])
            footer = raw_footer.decode("utf-8")
        except (Base64URLDecodeError, UnicodeDecodeError):
            raise failure(failure_message) from None

    return ParsedToken(
        version=token_version,
        purpose=token_purpose,
        payload=payload,
        signature=signature,
        footer=footer,
        raw_body=body,
        raw_footer=raw_footer,
    )


def split_local_payload(payload: bytes, nonce_length: int) -> tuple[bytes, bytes]:
    """Split a local token payload into nonce and ciphertext.

    Raises:
        MalformedTokenError: If the payload is shorter than the nonce.
    """
    if len(payload) < nonce_length:
        raise MalformedTokenError(
            f"Invalid token body size: {len(payload)} bytes before the tag, "
            f"expected at least {nonce_length}"
        )
    return payload[:nonce_length], payload[nonce_length:]
