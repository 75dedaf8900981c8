"""Message, footer, header and claims validation for pasetolite."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable
from typing import Any, cast

from .errors import ClaimsError, HeaderMismatchError, InvalidMessageError

# Callables run against verified claims; they raise ClaimsError to reject
ClaimsValidator = Callable[[dict[str, Any]], None]


def validate_message(message: Any) -> bytes:
    """Serialize a message into deterministic payload bytes.

    Keys are sorted and separators are compact, so logically equal messages
    always sign the same bytes.

    Args:
        message: A dict with string keys and JSON-compatible values.

    Returns:
        The UTF-8 encoded JSON payload.

    Raises:
        InvalidMessageError: If the message is not a serializable object.
    """
    if not isinstance(message, dict):
        raise InvalidMessageError(
            f"Message must be an object (dict), got {type(message).__name__}"
        )

    _check_keys(message)

    try:
        serialized = json.dumps(
            message,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
        return serialized.encode("utf-8")
    except UnicodeEncodeError as e:
        raise InvalidMessageError(f"Message is not valid UTF-8 text: {e}") from e
    except (TypeError, ValueError, RecursionError) as e:
        raise InvalidMessageError(f"Message is not JSON serializable: {e}") from e


def _check_keys(message: dict[Any, Any]) -> None:
    """Reject non-string keys at any depth.

    json.dumps would silently turn them into strings, so the verified claims
    would differ from the signed message.
    """
    seen: set[int] = set()
    stack: list[Any] = [message]
    while stack:
        node = stack.pop()
        if id(node) in seen:
            continue
        if isinstance(node, dict):
            seen.add(id(node))
            for key, value in node.items():
                if not isinstance(key, str):
                    raise InvalidMessageError(
                        f"Message keys must be strings, got {type(key).__name__}"
                    )
                stack.append(value)
        elif isinstance(node, (list, tuple)):
            seen.add(id(node))
            stack.extend(node)


def validate_footer(footer: Any = "") -> str:
    """Type-check a footer.

    Raises:
        InvalidMessageError: If the footer is not a string or not encodable as UTF-8.
    """
    if not isinstance(footer, str):
        raise InvalidMessageError(f"Footer must be a string, got {type(footer).__name__}")
    try:
        footer.encode("utf-8")
    except UnicodeEncodeError as e:
        raise InvalidMessageError(f"Footer is not valid UTF-8 text: {e}") from e
    return footer


def validate_header(
    expected_version: str,
    expected_purpose: str,
    actual_version: str,
    actual_purpose: str,
) -> str:
    """Check a token header against the provider's own.

    Must run before any signature check, so tokens that can never be valid
    for this provider cost no cryptographic work.

    Returns:
        The header string, e.g. ``v1.public``.

    Raises:
        HeaderMismatchError: If version or purpose differ.
    """
    if actual_version != expected_version:
        raise HeaderMismatchError(
            f"Invalid token version: {actual_version}, expected {expected_version}"
        )
    if actual_purpose != expected_purpose:
        raise HeaderMismatchError(
            f"Invalid token purpose: {actual_purpose}, expected {expected_purpose}"
        )
    return f"{expected_version}.{expected_purpose}"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {name}")


def validate_claims(
    payload: bytes,
    validators: Iterable[ClaimsValidator] = (),
) -> dict[str, Any]:
    """Parse verified payload bytes into claims.

    Registered claims (``exp``, ``nbf``, ...) are passed through untouched;
    callers enforce them by passing validators.

    Args:
        payload: The verified payload bytes.
        validators: Optional callables run against the claims in order.

    Returns:
        The claims dict.

    Raises:
        ClaimsError: If the payload is not a JSON object or a validator rejects it.
    """
    try:
        claims = json.loads(payload.decode("utf-8"), parse_constant=_reject_constant)
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        raise ClaimsError(f"Failed to parse token claims: {e}") from e

    if not isinstance(claims, dict):
        raise ClaimsError(f"Token claims must be an object, got {type(claims).__name__}")

    for validator in validators:
        try:
            validator(claims)
        except ClaimsError:
            raise
        except Exception as e:
            raise ClaimsError(f"Claims validation failed: {e}") from e

    return cast(dict[str, Any], claims)
