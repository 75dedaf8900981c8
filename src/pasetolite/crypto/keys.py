"""Key material, key generation and key purpose checks for pasetolite."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ..errors import KeyPurposeError
from ..types import AlgorithmParams, KeyUsage, Operation

# Which key usage each operation requires
_REQUIRED_USAGE: dict[str, KeyUsage] = {
    "sign": KeyUsage.SIGN,
    "verify": KeyUsage.VERIFY,
    "encrypt": KeyUsage.LOCAL,
    "decrypt": KeyUsage.LOCAL,
}


@dataclass(frozen=True)
class TokenKey:
    """A key owned by exactly one provider.

    Attributes:
        material: RSA private/public key object, or raw secret bytes for local keys.
        usage: What the key may be used for.
        protocol: The ``version.purpose`` header the key belongs to.
        params: Algorithm parameters the key was made for.
    """

    material: Any
    usage: KeyUsage
    protocol: str
    params: AlgorithmParams

    def __repr__(self) -> str:
        # Never render key material
        return f"TokenKey(usage={self.usage.value!r}, protocol={self.protocol!r})"


@dataclass(frozen=True)
class KeyPair:
    """Signing and verification keys for a public protocol.

    Attributes:
        verification_key: The public key.
        signing_key: The private key, None for verify-only pairs.
    """

    verification_key: TokenKey
    signing_key: TokenKey | None = None


def generate_keypair(protocol: str, params: AlgorithmParams) -> KeyPair:
    """Generate a new RSA key pair with the protocol's fixed parameters.

    Blocking; callers on an event loop should run it in a worker thread.

    Args:
        protocol: The ``version.purpose`` header the pair is for.
        params: The protocol's algorithm parameters.

    Returns:
        A KeyPair holding both keys.

    Raises:
        ValueError: If the parameters carry no public exponent.
    """
    if params.public_exponent is None:
        raise ValueError(f"{protocol} parameters carry no RSA public exponent")
    private_key = rsa.generate_private_key(
        public_exponent=params.public_exponent,
        key_size=params.key_size,
    )
    return keypair_from_private_key(private_key, protocol, params)


def keypair_from_private_key(
    private_key: rsa.RSAPrivateKey, protocol: str, params: AlgorithmParams
) -> KeyPair:
    """Wrap an RSA private key and its public half in a KeyPair."""
    return KeyPair(
        verification_key=TokenKey(private_key.public_key(), KeyUsage.VERIFY, protocol, params),
        signing_key=TokenKey(private_key, KeyUsage.SIGN, protocol, params),
    )


def generate_secret_key(protocol: str, params: AlgorithmParams) -> TokenKey:
    """Generate a new random secret key for a local protocol.

    Args:
        protocol: The ``version.purpose`` header the key is for.
        params: The protocol's algorithm parameters.

    Returns:
        A TokenKey holding the raw secret bytes.
    """
    return TokenKey(os.urandom(params.key_size // 8), KeyUsage.LOCAL, protocol, params)


def check_key_purpose(operation: Operation, key: TokenKey | None, protocol: str) -> TokenKey:
    """Ensure a key may be used for an operation.

    This runs on every operation, so a key meant for one purpose can never
    be used for another, whatever the provider was constructed with.

    Args:
        operation: The operation about to run.
        key: The key the provider would use.
        protocol: The ``version.purpose`` header of the provider.

    Returns:
        The key, unchanged.

    Raises:
        KeyPurposeError: If the key is missing or not valid for the operation.
    """
    if key is None:
        raise KeyPurposeError(f"No key available to {operation} with this provider.")

    if not isinstance(key, TokenKey):
        raise KeyPurposeError(f"Expected a TokenKey, got {type(key).__name__}.")

    required = _REQUIRED_USAGE[operation]
    if key.usage is not required:
        raise KeyPurposeError(
            f"Key with usage {key.usage.value!r} cannot be used to {operation}; "
            f"expected {required.value!r}."
        )

    if key.protocol != protocol:
        raise KeyPurposeError(f"Key for {key.protocol!r} cannot be used with {protocol!r}.")

    material = key.material
    if required is KeyUsage.SIGN:
        valid = isinstance(material, rsa.RSAPrivateKey)
    elif required is KeyUsage.VERIFY:
        valid = isinstance(material, rsa.RSAPublicKey)
    else:
        valid = isinstance(material, bytes) and len(material) * 8 == key.params.key_size
    if not valid:
        raise KeyPurposeError(f"Key material is not valid to {operation} with {protocol!r}.")

    # The signature length is fixed per protocol, so the modulus must be too
    if required is not KeyUsage.LOCAL and material.key_size != key.params.key_size:
        raise KeyPurposeError(
            f"Invalid RSA modulus size: {material.key_size}, expected {key.params.key_size}"
        )

    return key


def private_key_to_pem(key: TokenKey) -> str:
    """Serialize a signing key as unencrypted PKCS#8 PEM."""
    pem: bytes = key.material.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return pem.decode("ascii")


def public_key_to_pem(key: TokenKey) -> str:
    """Serialize a verification key as SubjectPublicKeyInfo PEM."""
    pem: bytes = key.material.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return pem.decode("ascii")


def load_private_key_pem(pem: str) -> rsa.RSAPrivateKey:
    """Load an RSA private key from PEM.

    Raises:
        ValueError: If the PEM is invalid or does not hold an RSA private key.
    """
    key = serialization.load_pem_private_key(pem.encode("ascii"), password=None)
    if not isinstance(key, rsa.RSAPrivateKey):
        raise ValueError(f"Expected an RSA private key, got {type(key).__name__}")
    return key


def load_public_key_pem(pem: str) -> rsa.RSAPublicKey:
    """Load an RSA public key from PEM.

    Raises:
        ValueError: If the PEM is invalid or does not hold an RSA public key.
    """
    key = serialization.load_pem_public_key(pem.encode("ascii"))
    if not isinstance(key, rsa.RSAPublicKey):
        raise ValueError(f"Expected an RSA public key, got {type(key).__name__}")
    return key
