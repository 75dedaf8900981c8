"""Token providers - sign/verify and encrypt/decrypt engines for pasetolite."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any, Union

from .constants import (
    DECRYPTION_FAILED_MESSAGE,
    DEFAULT_PURPOSE,
    DEFAULT_VERSION,
    EXPORT_VERSION,
    VERIFICATION_FAILED_MESSAGE,
)
from .crypto.cipher import aes_ctr, compute_tag, derive_keys, get_nonce, tags_match
from .crypto.keys import (
    KeyPair,
    TokenKey,
    check_key_purpose,
    generate_keypair,
    generate_secret_key,
    keypair_from_private_key,
    load_private_key_pem,
    load_public_key_pem,
    private_key_to_pem,
    public_key_to_pem,
)
from .crypto.pae import pae
from .crypto.signature import sign_message, verify_message
from .crypto.utils import from_base64url, to_base64url
from .errors import (
    DecryptionError,
    InvalidImportDataError,
    KeyPurposeError,
    ProviderStateError,
    UnsupportedOperationError,
    UnsupportedProtocolError,
    VerificationError,
)
from .protocols import ProtocolSpec, get_protocol
from .token import pack, parse_raw_token, split_local_payload
from .types import ExportedKey, KeyUsage, Operation, VerifiedToken
from .utils import parse_iso_timestamp, utc_now_iso
from .validation import (
    ClaimsValidator,
    validate_claims,
    validate_footer,
    validate_header,
    validate_message,
)

logger = logging.getLogger("pasetolite")

# What a provider's key slot holds: a pair for public, a secret key for local
ProviderKey = Union[KeyPair, TokenKey]

# Key generators by purpose
_KEY_GENERATORS: dict[str, Callable[[str, Any], ProviderKey]] = {
    "public": generate_keypair,
    "local": generate_secret_key,
}


class Provider:
    """A token provider for one (version, purpose).

    The provider owns at most one key for its whole lifetime. It starts
    without a key and moves to a ready state either at construction (when a
    key is given) or through a single successful ``generate_key()`` call.
    The key is never replaced.

    Example:
        ```python
        provider = Provider("v1", "public")
        await provider.generate_key()

        token = await provider.sign({"sub": "alice"}, "footer1")
        verified = await provider.verify(token)
        print(verified.message, verified.footer)
        ```
    """

    def __init__(
        self,
        version: str = DEFAULT_VERSION,
        purpose: str = DEFAULT_PURPOSE,
        key: ProviderKey | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            version: Protocol version, e.g. ``v1``.
            purpose: ``public`` or ``local``.
            key: Optional predefined key; a KeyPair for public providers,
                a TokenKey for local ones.

        Raises:
            UnsupportedProtocolError: If the protocol is not registered.
            KeyPurposeError: If the key does not belong to this protocol.
        """
        self._protocol = get_protocol(version, purpose)
        self._key: ProviderKey | None = None
        self._key_lock = asyncio.Lock()
        if key is not None:
            self._key = self._check_slot_key(key)

    @property
    def protocol(self) -> ProtocolSpec:
        """The registered protocol this provider implements."""
        return self._protocol

    @property
    def version(self) -> str:
        return self._protocol.version

    @property
    def purpose(self) -> str:
        return self._protocol.purpose

    @property
    def header(self) -> str:
        """The ``version.purpose`` header, e.g. ``v1.public``."""
        return self._protocol.header

    @property
    def has_key(self) -> bool:
        """Whether the provider holds a key."""
        return self._key is not None

    @property
    def key(self) -> ProviderKey | None:
        """The provider's key, None until one is set."""
        return self._key

    def __repr__(self) -> str:
        return f"Provider({self.header!r}, has_key={self.has_key})"

    def _check_slot_key(self, key: Any) -> ProviderKey:
        """Ensure a predefined key fits this provider's key slot."""
        if self.purpose == "public":
            if not isinstance(key, KeyPair):
                raise KeyPurposeError(f"A {self.header} provider needs a KeyPair.")
            check_key_purpose("verify", key.verification_key, self.header)
            if key.signing_key is not None:
                check_key_purpose("sign", key.signing_key, self.header)
            return key

        check_key_purpose("encrypt", key, self.header)
        return key

    def _key_for(self, operation: Operation) -> TokenKey | None:
        """Pick the key an operation would use from the key slot."""
        slot = self._key
        if isinstance(slot, KeyPair):
            return slot.signing_key if operation == "sign" else slot.verification_key
        return slot

    def _require(self, operation: Operation) -> TokenKey:
        """Check the protocol offers an operation and return a key fit for it.

        Raises:
            UnsupportedOperationError: If the protocol lacks the operation.
            KeyPurposeError: If no key is fit for the operation.
        """
        if not self._protocol.capabilities.allows(operation):
            raise UnsupportedOperationError(
                f"{self.header} providers do not support {operation}."
            )
        return check_key_purpose(operation, self._key_for(operation), self.header)

    async def generate_key(self) -> None:
        """Generate a key with the protocol's fixed parameters and keep it.

        Only the first call on a provider can succeed, even when several
        calls overlap.

        Raises:
            ProviderStateError: If the provider already has a key.
        """
        noun = "key pair" if self.purpose == "public" else "secret key"
        async with self._key_lock:
            if self._key is not None:
                raise ProviderStateError(f"This provider already has a {noun}.")

            generator = _KEY_GENERATORS[self.purpose]
            self._key = await asyncio.to_thread(generator, self.header, self._protocol.params)
            logger.debug("Generated %s for %s", noun, self.header)

    async def sign(self, message: dict[str, Any], footer: str = "") -> str:
        """Sign a message into a public token.

        Args:
            message: Claims to sign; a dict that serializes as JSON.
            footer: Optional footer, sent in clear but covered by the signature.

        Returns:
            The signed token in transit form.

        Raises:
            UnsupportedOperationError: If this is not a public provider.
            KeyPurposeError: If the provider has no signing key.
            InvalidMessageError: If the message or footer is invalid.
        """
        key = self._require("sign")

        m = validate_message(message)
        f = validate_footer(footer)
        h = self.header
        pre_auth = pae([h, m, f])

        signature = await asyncio.to_thread(sign_message, pre_auth, key)
        return pack(h, m, signature, f)

    async def verify(
        self,
        raw_token: str,
        validators: Iterable[ClaimsValidator] = (),
    ) -> VerifiedToken:
        """Verify a public token and return its claims and footer.

        Args:
            raw_token: The token in transit form.
            validators: Optional claims validators run after verification.

        Returns:
            The verified message and footer.

        Raises:
            UnsupportedOperationError: If this is not a public provider.
            KeyPurposeError: If the provider has no verification key.
            MalformedTokenError: If the token does not follow the wire format.
            HeaderMismatchError: If the token is for another version or purpose.
            VerificationError: If the token is not authentic, whatever the reason.
            ClaimsError: If the verified payload is not a claims object.
        """
        key = self._require("verify")

        parsed = parse_raw_token(
            raw_token,
            version=self.version,
            purpose=self.purpose,
            signature_length=self._protocol.params.tag_length,
        )
        h = validate_header(self.version, self.purpose, parsed.version, parsed.purpose)
        pre_auth = pae([h, parsed.payload, parsed.raw_footer])

        is_verified = await asyncio.to_thread(verify_message, pre_auth, parsed.signature, key)
        if is_verified:
            return VerifiedToken(
                message=validate_claims(parsed.payload, validators),
                footer=parsed.footer,
            )

        # Default state should be a vague failure case
        logger.debug("Token failed verification for %s", h)
        raise VerificationError(VERIFICATION_FAILED_MESSAGE)

    async def encrypt(self, message: dict[str, Any], footer: str = "") -> str:
        """Encrypt a message into a local token.

        Args:
            message: Claims to encrypt; a dict that serializes as JSON.
            footer: Optional footer, sent in clear but authenticated.

        Returns:
            The encrypted token in transit form.

        Raises:
            UnsupportedOperationError: If this is not a local provider.
            KeyPurposeError: If the provider has no secret key.
            InvalidMessageError: If the message or footer is invalid.
        """
        key = self._require("encrypt")

        m = validate_message(message)
        f = validate_footer(footer)
        h = self.header

        nonce = get_nonce(m)
        encryption_key, authentication_key = derive_keys(key.material, nonce)
        ciphertext = aes_ctr(encryption_key, nonce, m)
        tag = compute_tag(authentication_key, pae([h, nonce, ciphertext, f]))

        return pack(h, nonce + ciphertext, tag, f)

    async def decrypt(
        self,
        raw_token: str,
        validators: Iterable[ClaimsValidator] = (),
    ) -> VerifiedToken:
        """Authenticate and decrypt a local token.

        Args:
            raw_token: The token in transit form.
            validators: Optional claims validators run after decryption.

        Returns:
            The decrypted message and footer.

        Raises:
            UnsupportedOperationError: If this is not a local provider.
            KeyPurposeError: If the provider has no secret key.
            MalformedTokenError: If the token does not follow the wire format.
            HeaderMismatchError: If the token is for another version or purpose.
            DecryptionError: If the token is not authentic, whatever the reason.
            ClaimsError: If the decrypted payload is not a claims object.
        """
        key = self._require("decrypt")
        params = self._protocol.params

        parsed = parse_raw_token(
            raw_token,
            version=self.version,
            purpose=self.purpose,
            signature_length=params.tag_length,
            failure=DecryptionError,
            failure_message=DECRYPTION_FAILED_MESSAGE,
        )
        h = validate_header(self.version, self.purpose, parsed.version, parsed.purpose)
        nonce, ciphertext = split_local_payload(parsed.payload, params.nonce_length)

        encryption_key, authentication_key = derive_keys(key.material, nonce)
        expected = compute_tag(authentication_key, pae([h, nonce, ciphertext, parsed.raw_footer]))
        if not tags_match(expected, parsed.signature):
            logger.debug("Token failed decryption for %s", h)
            raise DecryptionError(DECRYPTION_FAILED_MESSAGE)

        plaintext = aes_ctr(encryption_key, nonce, ciphertext)
        return VerifiedToken(
            message=validate_claims(plaintext, validators),
            footer=parsed.footer,
        )

    def export_key(self) -> ExportedKey:
        """Export the provider's key for persistence/sharing.

        WARNING: Exported data contains private keys. Handle securely.

        Returns:
            ExportedKey with the key material and metadata.

        Raises:
            ProviderStateError: If the provider has no key yet.
        """
        slot = self._key
        if slot is None:
            raise ProviderStateError("This provider has no key to export.")

        if isinstance(slot, KeyPair):
            return ExportedKey(
                version=EXPORT_VERSION,
                protocol=self.header,
                private_key=private_key_to_pem(slot.signing_key) if slot.signing_key else None,
                public_key=public_key_to_pem(slot.verification_key),
                exported_at=utc_now_iso(),
            )

        return ExportedKey(
            version=EXPORT_VERSION,
            protocol=self.header,
            private_key=to_base64url(slot.material),
            exported_at=utc_now_iso(),
        )

    def export_public_key(self) -> ExportedKey:
        """Export only the verification key of a public provider.

        Raises:
            UnsupportedOperationError: If this is not a public provider.
            ProviderStateError: If the provider has no key yet.
        """
        if self.purpose != "public":
            raise UnsupportedOperationError(f"{self.header} providers have no public key.")
        exported = self.export_key()
        exported.private_key = None
        return exported

    async def export_key_to_file(self, file_path: str | Path) -> None:
        """Export the provider's key to a JSON file.

        WARNING: The file contains private keys. Handle securely.

        Args:
            file_path: Path to the output file.

        Raises:
            ProviderStateError: If the provider has no key yet.
        """
        exported = self.export_key()
        # Field names are camelCase in JSON
        data: dict[str, Any] = {
            "version": exported.version,
            "protocol": exported.protocol,
            "exportedAt": exported.exported_at,
        }
        if exported.private_key is not None:
            data["privateKey"] = exported.private_key
        if exported.public_key is not None:
            data["publicKey"] = exported.public_key

        path = Path(file_path)
        path.write_text(json.dumps(data, indent=2))

    @classmethod
    def import_key(cls, data: ExportedKey) -> Provider:
        """Create a provider from exported key data.

        A public export without a private key gives a verify-only provider.

        Args:
            data: The exported key data.

        Returns:
            A provider holding the imported key.

        Raises:
            InvalidImportDataError: If the import data is invalid.
        """
        spec = _validate_import_data(data)

        if spec.purpose == "local":
            secret = TokenKey(
                from_base64url(data.private_key or ""), KeyUsage.LOCAL, spec.header, spec.params
            )
            logger.debug("Imported secret key for %s", spec.header)
            return cls(spec.version, spec.purpose, key=secret)

        try:
            public_key = load_public_key_pem(data.public_key or "")
            if data.private_key:
                keypair = keypair_from_private_key(
                    load_private_key_pem(data.private_key), spec.header, spec.params
                )
            else:
                keypair = KeyPair(TokenKey(public_key, KeyUsage.VERIFY, spec.header, spec.params))
        except Exception as e:
            raise InvalidImportDataError(f"Invalid key in import data: {e}") from e

        if keypair.verification_key.material.public_numbers() != public_key.public_numbers():
            raise InvalidImportDataError("publicKey does not match privateKey")

        try:
            provider = cls(spec.version, spec.purpose, key=keypair)
        except KeyPurposeError as e:
            raise InvalidImportDataError(f"Invalid key in import data: {e}") from e

        logger.debug(
            "Imported %s for %s",
            "key pair" if keypair.signing_key else "verification key",
            spec.header,
        )
        return provider

    @classmethod
    async def import_key_from_file(cls, file_path: str | Path) -> Provider:
        """Create a provider from a JSON key file.

        Args:
            file_path: Path to the import file.

        Returns:
            A provider holding the imported key.

        Raises:
            InvalidImportDataError: If the JSON is invalid or missing required fields.
        """
        path = Path(file_path)
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            raise InvalidImportDataError(f"Invalid JSON in import file: {e}") from e

        if not isinstance(data, dict):
            raise InvalidImportDataError("Import file must contain a JSON object")

        try:
            exported = ExportedKey(
                version=data["version"],
                protocol=data["protocol"],
                private_key=data.get("privateKey"),
                public_key=data.get("publicKey"),
                exported_at=data.get("exportedAt", ""),
            )
        except KeyError as e:
            raise InvalidImportDataError(f"Missing required field in import file: {e}") from e

        return cls.import_key(exported)


def _validate_import_data(data: ExportedKey) -> ProtocolSpec:
    """Validate exported key data.

    Validation steps (must be performed in order):
    1. Validate version == 1
    2. Validate protocol is a registered ``version.purpose``
    3. For local keys: Validate and decode privateKey (32 bytes)
    4. For public keys: Validate publicKey is present
    5. Validate exportedAt timestamp

    Args:
        data: The exported key data.

    Returns:
        The protocol the key belongs to.

    Raises:
        InvalidImportDataError: If the data is invalid.
    """
    # Step 1: Validate version
    if data.version != EXPORT_VERSION:
        raise InvalidImportDataError(
            f"Unsupported export version: {data.version}, expected {EXPORT_VERSION}"
        )

    # Step 2: Validate protocol
    if not isinstance(data.protocol, str) or data.protocol.count(".") != 1:
        raise InvalidImportDataError(f"Invalid protocol: {data.protocol!r}")
    version, purpose = data.protocol.split(".")
    try:
        spec = get_protocol(version, purpose)
    except UnsupportedProtocolError as e:
        raise InvalidImportDataError(str(e)) from e

    if spec.purpose == "local":
        # Step 3: Validate and decode privateKey
        if not data.private_key:
            raise InvalidImportDataError("Missing privateKey for local key")
        if data.public_key:
            raise InvalidImportDataError("Local keys have no publicKey")
        try:
            secret = from_base64url(data.private_key)
        except Exception as e:
            raise InvalidImportDataError(f"Invalid privateKey encoding: {e}") from e
        expected = spec.params.key_size // 8
        if len(secret) != expected:
            raise InvalidImportDataError(
                f"Invalid privateKey length: {len(secret)} bytes, expected {expected}"
            )
    elif not data.public_key:
        # Step 4: Public keys always carry their verification key
        raise InvalidImportDataError("Missing publicKey for public key")

    # Step 5: Validate timestamp
    if data.exported_at:
        try:
            parse_iso_timestamp(data.exported_at)
        except ValueError as e:
            raise InvalidImportDataError(f"Invalid exportedAt format: {e}") from e

    return spec


def create_provider(
    version: str = DEFAULT_VERSION,
    purpose: str = DEFAULT_PURPOSE,
    key: ProviderKey | None = None,
) -> Provider:
    """Create a provider for a registered (version, purpose).

    Raises:
        UnsupportedProtocolError: If the protocol is not registered.
    """
    return Provider(version, purpose, key=key)


def V1Public(key: KeyPair | None = None) -> Provider:
    """Create a v1.public provider, optionally with a predefined key pair."""
    return Provider("v1", "public", key=key)


def V1Local(key: TokenKey | None = None) -> Provider:
    """Create a v1.local provider, optionally with a predefined secret key."""
    return Provider("v1", "local", key=key)
