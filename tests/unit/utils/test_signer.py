"""
Unit tests for utils.signer module.

Tests:
- LocalKeySigner signing and event shape
- ExternalAuthChecker.is_available() / detect() capability probing
- ExternalAuthChecker.get_public_key() result reporting
"""

import json
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock

import pytest
from nostr_sdk import Event

from nostrid.models.constants import ErrorType
from nostrid.utils.signer import ExternalAuthChecker, ExternalSigner, LocalKeySigner, SignerHost


TEMPLATE: dict[str, Any] = {
    "kind": 27235,
    "created_at": 1700000000,
    "tags": [["u", "https://example.com"], ["method", "POST"]],
    "content": "",
}


# =============================================================================
# LocalKeySigner
# =============================================================================


class TestLocalKeySigner:
    """Signing with an in-memory key."""

    @pytest.mark.asyncio
    async def test_public_key(self, nsec: str, pubkey_hex: str) -> None:
        signer = LocalKeySigner.from_nsec(nsec)
        assert await signer.get_public_key() == pubkey_hex

    @pytest.mark.asyncio
    async def test_sign_event_shape(self, nsec: str, pubkey_hex: str) -> None:
        signed = await LocalKeySigner.from_nsec(nsec).sign_event(TEMPLATE)

        assert signed["pubkey"] == pubkey_hex
        assert signed["kind"] == 27235
        assert signed["created_at"] == 1700000000
        assert signed["tags"] == TEMPLATE["tags"]
        assert signed["content"] == ""
        assert len(signed["sig"]) == 128

    @pytest.mark.asyncio
    async def test_signed_event_verifies(self, nsec: str) -> None:
        signed = await LocalKeySigner.from_nsec(nsec).sign_event(TEMPLATE)
        assert Event.from_json(json.dumps(signed)).verify()

    def test_invalid_nsec_raises(self) -> None:
        with pytest.raises(ValueError):
            LocalKeySigner.from_nsec("not-a-key")

    def test_satisfies_protocol(self, nsec: str) -> None:
        assert isinstance(LocalKeySigner.from_nsec(nsec), ExternalSigner)


# =============================================================================
# ExternalAuthChecker capability probing
# =============================================================================


class TestExternalAuthCheckerProbe:
    """is_available() and detect()."""

    def test_no_host(self) -> None:
        checker = ExternalAuthChecker()
        assert not checker.is_available()
        assert checker.detect() is None

    def test_empty_slot(self, signer_host: SignerHost) -> None:
        checker = ExternalAuthChecker(signer_host)
        assert not checker.is_available()
        assert checker.detect() is None

    def test_ready_signer(self, signer_host: SignerHost, make_signer: Any) -> None:
        signer = make_signer()
        signer_host.nostr = signer
        checker = ExternalAuthChecker(signer_host)

        assert checker.is_available()
        assert checker.detect() is signer

    def test_signer_appears_later(self, signer_host: SignerHost, make_signer: Any) -> None:
        checker = ExternalAuthChecker(signer_host)
        assert checker.detect() is None

        signer_host.nostr = make_signer()
        assert checker.detect() is not None

    def test_non_callable_get_public_key(self) -> None:
        host = SimpleNamespace(nostr=SimpleNamespace(get_public_key="npub1"))
        assert not ExternalAuthChecker(host).is_available()

    def test_key_only_capability_not_detected(self) -> None:
        """A capability that cannot sign is available but not a signer."""
        host = SimpleNamespace(nostr=SimpleNamespace(get_public_key=AsyncMock()))
        checker = ExternalAuthChecker(host)

        assert checker.is_available()
        assert checker.detect() is None

    def test_host_without_slot(self) -> None:
        assert not ExternalAuthChecker(object()).is_available()


# =============================================================================
# ExternalAuthChecker.get_public_key()
# =============================================================================


class TestExternalAuthCheckerGetPublicKey:
    """Result reporting for get_public_key()."""

    @pytest.mark.asyncio
    async def test_success(
        self, signer_host: SignerHost, make_signer: Any, pubkey_hex: str
    ) -> None:
        signer_host.nostr = make_signer()
        result = await ExternalAuthChecker(signer_host).get_public_key()

        assert result.success
        assert result.pubkey == pubkey_hex
        assert result.error is None

    @pytest.mark.asyncio
    async def test_unavailable_is_validation_error(self, signer_host: SignerHost) -> None:
        result = await ExternalAuthChecker(signer_host).get_public_key()

        assert not result.success
        assert result.error is not None
        assert result.error.type is ErrorType.VALIDATION

    @pytest.mark.asyncio
    async def test_rejection_is_network_error(
        self, signer_host: SignerHost, make_signer: Any
    ) -> None:
        signer_host.nostr = make_signer(reject=True)
        result = await ExternalAuthChecker(signer_host).get_public_key()

        assert not result.success
        assert result.error is not None
        assert result.error.type is ErrorType.NETWORK
        assert isinstance(result.error.original_error, RuntimeError)

    @pytest.mark.asyncio
    async def test_called_once(self) -> None:
        get_public_key = AsyncMock(side_effect=RuntimeError("locked"))
        host = SimpleNamespace(nostr=SimpleNamespace(get_public_key=get_public_key))

        await ExternalAuthChecker(host).get_public_key()

        get_public_key.assert_awaited_once()
