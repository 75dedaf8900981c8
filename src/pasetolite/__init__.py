"""pasetolite - versioned, stateless secure tokens.

Protocol v1 providers: ``public`` tokens signed with RSA-PSS and ``local``
tokens encrypted with AES-256-CTR and authenticated with HMAC-SHA384.

Example:
    ```python
    import asyncio
    from pasetolite import V1Public

    async def main():
        provider = V1Public()
        await provider.generate_key()

        token = await provider.sign({"sub": "alice"}, "footer1")
        print(f"Token: {token}")

        verified = await provider.verify(token)
        print(f"Claims: {verified.message}")
        print(f"Footer: {verified.footer}")

    asyncio.run(main())
    ```
"""

from .constants import DEFAULT_PURPOSE, DEFAULT_VERSION, EXPORT_VERSION
from .crypto import KeyPair, TokenKey, pae
from .errors import (
    Base64URLDecodeError,
    ClaimsError,
    DecryptionError,
    HeaderMismatchError,
    InvalidImportDataError,
    InvalidMessageError,
    KeyPurposeError,
    MalformedTokenError,
    PasetoError,
    ProviderStateError,
    UnsupportedOperationError,
    UnsupportedProtocolError,
    VerificationError,
)
from .protocols import PROTOCOLS, V1_LOCAL, V1_PUBLIC, ProtocolSpec, get_protocol
from .provider import Provider, V1Local, V1Public, create_provider
from .token import pack, parse_raw_token
from .types import (
    AlgorithmParams,
    Capabilities,
    ExportedKey,
    KeyUsage,
    ParsedToken,
    VerifiedToken,
)

__version__ = "0.1.0"

__all__ = [
    # Providers
    "Provider",
    "V1Public",
    "V1Local",
    "create_provider",
    # Protocol registry
    "PROTOCOLS",
    "V1_PUBLIC",
    "V1_LOCAL",
    "ProtocolSpec",
    "get_protocol",
    # Constants
    "DEFAULT_VERSION",
    "DEFAULT_PURPOSE",
    "EXPORT_VERSION",
    # Framing
    "pae",
    "pack",
    "parse_raw_token",
    # Data types
    "AlgorithmParams",
    "Capabilities",
    "ExportedKey",
    "KeyPair",
    "KeyUsage",
    "ParsedToken",
    "TokenKey",
    "VerifiedToken",
    # Errors
    "PasetoError",
    "ProviderStateError",
    "KeyPurposeError",
    "MalformedTokenError",
    "HeaderMismatchError",
    "InvalidMessageError",
    "ClaimsError",
    "VerificationError",
    "DecryptionError",
    "UnsupportedProtocolError",
    "UnsupportedOperationError",
    "InvalidImportDataError",
    "Base64URLDecodeError",
    # Version
    "__version__",
]
