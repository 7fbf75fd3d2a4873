"""
Pytest configuration and shared fixtures for nostrid tests.

Provides:
- A fixed test secret key and its derived public key
- In-memory stores, key storage and fully built identity contexts
- Fake injected signers (ready, rejecting) and signer hosts
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import pytest
from nostr_sdk import Keys

from nostrid.core.config import IdentityConfig
from nostrid.core.storage import KeyStorage, MemoryStore
from nostrid.services.context import IdentityContext
from nostrid.utils.signer import LocalKeySigner, SignerHost


# Valid secp256k1 test key (DO NOT USE IN PRODUCTION)
TEST_NSEC = "nsec1vl029mgpspedva04g90vltkh6fvh240zqtv9k0t9af8935ke9laqsnlfe5"  # pragma: allowlist secret


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Configure logging for tests."""
    logging.basicConfig(level=logging.DEBUG)


# ============================================================================
# Key Fixtures
# ============================================================================


@pytest.fixture
def nsec() -> str:
    """A valid bech32 secret key."""
    return TEST_NSEC


@pytest.fixture
def pubkey_hex() -> str:
    """Hex public key of the ``nsec`` fixture, derived independently of nostrid."""
    return Keys.parse(TEST_NSEC).public_key().to_hex()


@pytest.fixture
def other_nsec() -> str:
    """A second, freshly generated secret key."""
    return Keys.generate().secret_key().to_bech32()


# ============================================================================
# Storage Fixtures
# ============================================================================


@pytest.fixture
def store() -> MemoryStore:
    """An empty in-memory key/value store."""
    return MemoryStore()


@pytest.fixture
def key_storage(store: MemoryStore) -> KeyStorage:
    """KeyStorage over the ``store`` fixture."""
    return KeyStorage(store)


# ============================================================================
# Signer Fixtures
# ============================================================================


class FakeSigner:
    """Injected signer backed by a local key that records its calls."""

    def __init__(self, nsec: str, *, reject: bool = False) -> None:
        self._signer = LocalKeySigner.from_nsec(nsec)
        self.reject = reject
        self.sign_calls: list[dict[str, Any]] = []

    async def get_public_key(self) -> str:
        if self.reject:
            raise RuntimeError("user rejected")
        return await self._signer.get_public_key()

    async def sign_event(self, event: dict[str, Any]) -> dict[str, Any]:
        self.sign_calls.append(event)
        if self.reject:
            raise RuntimeError("user rejected")
        return await self._signer.sign_event(event)


@pytest.fixture
def make_signer(nsec: str) -> Callable[..., FakeSigner]:
    """Factory for fake injected signers using the ``nsec`` fixture key."""

    def factory(*, reject: bool = False) -> FakeSigner:
        return FakeSigner(nsec, reject=reject)

    return factory


@pytest.fixture
def signer_host() -> SignerHost:
    """A host whose injected signer slot starts empty."""
    return SignerHost()


# ============================================================================
# Context Fixtures
# ============================================================================


@pytest.fixture
def fast_config() -> IdentityConfig:
    """Config with a short signer wait so poll tests stay fast."""
    return IdentityConfig.from_dict({"auth": {"max_wait": 0.2, "poll_interval": 0.02}})


@pytest.fixture
def context(fast_config: IdentityConfig, signer_host: SignerHost, store: MemoryStore) -> IdentityContext:
    """Identity context over the in-memory ``store`` and empty ``signer_host``."""
    return IdentityContext(fast_config, signer_host, store=store)
