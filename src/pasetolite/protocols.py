"""Protocol registry for pasetolite.

Each supported (version, purpose) maps to its fixed algorithm parameters and
the operations it offers. Providers dispatch by looking the pair up here.
"""

from __future__ import annotations

from dataclasses import dataclass

from .crypto.constants import (
    RSA_KEY_SIZE,
    RSA_PSS_SALT_LENGTH,
    RSA_PUBLIC_EXPONENT,
    V1_LOCAL_KEY_SIZE,
    V1_LOCAL_NONCE_SIZE,
    V1_LOCAL_TAG_SIZE,
    V1_PUBLIC_SIGNATURE_SIZE,
)
from .errors import UnsupportedProtocolError
from .types import AlgorithmParams, Capabilities


@dataclass(frozen=True)
class ProtocolSpec:
    """One registered (version, purpose).

    Attributes:
        version: Protocol version, e.g. ``v1``.
        purpose: ``local`` or ``public``.
        params: Fixed algorithm parameters.
        capabilities: Operations the protocol offers.
    """

    version: str
    purpose: str
    params: AlgorithmParams
    capabilities: Capabilities

    @property
    def header(self) -> str:
        """The ``version.purpose`` header, e.g. ``v1.public``."""
        return f"{self.version}.{self.purpose}"


V1_PUBLIC = ProtocolSpec(
    version="v1",
    purpose="public",
    params=AlgorithmParams(
        name="RSA-PSS",
        hash_name="SHA384",
        key_size=RSA_KEY_SIZE,
        tag_length=V1_PUBLIC_SIGNATURE_SIZE,
        salt_length=RSA_PSS_SALT_LENGTH,
        public_exponent=RSA_PUBLIC_EXPONENT,
    ),
    capabilities=Capabilities(can_sign=True, can_verify=True),
)

V1_LOCAL = ProtocolSpec(
    version="v1",
    purpose="local",
    params=AlgorithmParams(
        name="AES-256-CTR+HMAC-SHA384",
        hash_name="SHA384",
        key_size=V1_LOCAL_KEY_SIZE * 8,
        tag_length=V1_LOCAL_TAG_SIZE,
        nonce_length=V1_LOCAL_NONCE_SIZE,
    ),
    capabilities=Capabilities(can_encrypt=True, can_decrypt=True),
)

PROTOCOLS: dict[tuple[str, str], ProtocolSpec] = {
    (V1_PUBLIC.version, V1_PUBLIC.purpose): V1_PUBLIC,
    (V1_LOCAL.version, V1_LOCAL.purpose): V1_LOCAL,
}


def get_protocol(version: str, purpose: str) -> ProtocolSpec:
    """Look up a registered protocol.

    Raises:
        UnsupportedProtocolError: If the pair is not registered.
    """
    try:
        return PROTOCOLS[(version, purpose)]
    except KeyError:
        raise UnsupportedProtocolError(
            f"Unsupported protocol: {version}.{purpose}, expected one of "
            f"{', '.join(spec.header for spec in PROTOCOLS.values())}"
        ) from None
