"""Cryptographic operations for pasetolite."""

from .keys import (
    KeyPair,
    TokenKey,
    check_key_purpose,
    generate_keypair,
    generate_secret_key,
)
from .pae import le64, pae
from .signature import sign_message, verify_message
from .utils import from_base64url, to_base64url

__all__ = [
    "KeyPair",
    "TokenKey",
    "check_key_purpose",
    "from_base64url",
    "generate_keypair",
    "generate_secret_key",
    "le64",
    "pae",
    "sign_message",
    "to_base64url",
    "verify_message",
]
