"""RSA-PSS signing and verification for pasetolite."""

from __future__ import annotations

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from ..types import AlgorithmParams
from .keys import TokenKey

_HASHES: dict[str, type[hashes.HashAlgorithm]] = {
    "SHA384": hashes.SHA384,
}


def _pss(params: AlgorithmParams) -> tuple[padding.PSS, hashes.HashAlgorithm]:
    """Build the PSS padding and digest for a protocol's parameters."""
    if params.salt_length is None:
        raise ValueError(f"{params.name} parameters carry no PSS salt length")
    digest = _HASHES[params.hash_name]()
    pss = padding.PSS(
        mgf=padding.MGF1(_HASHES[params.hash_name]()),
        salt_length=params.salt_length,
    )
    return pss, digest


def sign_message(message: bytes, key: TokenKey) -> bytes:
    """Sign a pre-authentication encoded message with RSA-PSS.

    Args:
        message: The PAE bytes to sign.
        key: A signing key, already checked for purpose.

    Returns:
        The signature, exactly one RSA block long.
    """
    pss, digest = _pss(key.params)
    signature: bytes = key.material.sign(message, pss, digest)
    return signature


def verify_message(message: bytes, signature: bytes, key: TokenKey) -> bool:
    """Verify an RSA-PSS signature over a pre-authentication encoded message.

    Args:
        message: The PAE bytes that were signed.
        signature: The signature taken from the token.
        key: A verification key, already checked for purpose.

    Returns:
        True if the signature is valid, False otherwise.
    """
    pss, digest = _pss(key.params)
    try:
        key.material.verify(signature, message, pss, digest)
    except InvalidSignature:
        return False
    return True
