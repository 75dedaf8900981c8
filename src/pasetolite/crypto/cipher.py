"""Encrypt-then-MAC primitives for v1.local tokens.

The secret key is split with HKDF-SHA384 into an AES-256-CTR encryption key
and an HMAC-SHA384 authentication key. Both are salted with the first half
of the nonce; the second half is the CTR counter block.
"""

from __future__ import annotations

import hashlib
import hmac
import os

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from .constants import (
    HKDF_INFO_AUTHENTICATION,
    HKDF_INFO_ENCRYPTION,
    V1_LOCAL_HKDF_SALT_SIZE,
    V1_LOCAL_KEY_SIZE,
    V1_LOCAL_NONCE_SIZE,
    V1_LOCAL_SEED_SIZE,
)


def get_nonce(message: bytes, seed: bytes | None = None) -> bytes:
    """Derive the nonce for a message.

    The nonce is HMAC-SHA384 of the message keyed with a random seed,
    truncated to 32 bytes, so a weak random source alone never repeats a
    nonce for different messages.

    Args:
        message: The plaintext.
        seed: Random seed; a fresh one is drawn when omitted.

    Returns:
        A 32-byte nonce.
    """
    if seed is None:
        seed = os.urandom(V1_LOCAL_SEED_SIZE)
    return hmac.new(seed, message, hashlib.sha384).digest()[:V1_LOCAL_NONCE_SIZE]


def derive_keys(secret_key: bytes, nonce: bytes) -> tuple[bytes, bytes]:
    """Split the secret key into encryption and authentication keys.

    Args:
        secret_key: The 32-byte local key.
        nonce: The 32-byte token nonce.

    Returns:
        Tuple of (encryption_key, authentication_key), 32 bytes each.
    """
    salt = nonce[:V1_LOCAL_HKDF_SALT_SIZE]
    encryption_key = HKDF(
        algorithm=hashes.SHA384(),
        length=V1_LOCAL_KEY_SIZE,
        salt=salt,
        info=HKDF_INFO_ENCRYPTION,
    ).derive(secret_key)
    authentication_key = HKDF(
        algorithm=hashes.SHA384(),
        length=V1_LOCAL_KEY_SIZE,
        salt=salt,
        info=HKDF_INFO_AUTHENTICATION,
    ).derive(secret_key)
    return encryption_key, authentication_key


def aes_ctr(encryption_key: bytes, nonce: bytes, data: bytes) -> bytes:
    """Apply AES-256-CTR; the same call encrypts and decrypts."""
    counter = nonce[V1_LOCAL_HKDF_SALT_SIZE:]
    cipher = Cipher(algorithms.AES(encryption_key), modes.CTR(counter))
    encryptor = cipher.encryptor()
    return encryptor.update(data) + encryptor.finalize()


def compute_tag(authentication_key: bytes, pre_auth: bytes) -> bytes:
    """Compute the HMAC-SHA384 tag over pre-authentication encoded data."""
    return hmac.new(authentication_key, pre_auth, hashlib.sha384).digest()


def tags_match(expected: bytes, actual: bytes) -> bool:
    """Compare two tags in constant time."""
    return hmac.compare_digest(expected, actual)
