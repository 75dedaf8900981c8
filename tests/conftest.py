"""Shared fixtures for pasetolite tests."""

from __future__ import annotations

import pytest

from pasetolite import V1_LOCAL, V1_PUBLIC, KeyPair, Provider, TokenKey
from pasetolite.crypto import generate_keypair, generate_secret_key


@pytest.fixture(scope="session")
def keypair() -> KeyPair:
    """One v1.public key pair for the whole run; RSA generation is slow."""
    return generate_keypair(V1_PUBLIC.header, V1_PUBLIC.params)


@pytest.fixture(scope="session")
def other_keypair() -> KeyPair:
    """A second, unrelated v1.public key pair."""
    return generate_keypair(V1_PUBLIC.header, V1_PUBLIC.params)


@pytest.fixture
def secret_key() -> TokenKey:
    return generate_secret_key(V1_LOCAL.header, V1_LOCAL.params)


@pytest.fixture
def public_provider(keypair: KeyPair) -> Provider:
    return Provider("v1", "public", key=keypair)


@pytest.fixture
def local_provider(secret_key: TokenKey) -> Provider:
    return Provider("v1", "local", key=secret_key)
