"""Event signers: the local key signer and the injected external signer.

An injected signer (browser extension, embedded wallet, remote bunker
bridge) is reached through the ``nostr`` attribute of a host object and may
appear at any time after startup. [ExternalAuthChecker][nostrid.utils.signer.ExternalAuthChecker]
answers "is it there right now?" and never waits; waiting is left to the
caller that owns the deadline.

Both signers accept the NIP-07 ``signEvent`` input shape
(``kind``, ``created_at``, ``tags``, ``content``) and return the signed
event as a ``dict`` with ``id``, ``pubkey`` and ``sig`` added.

See Also:
    [nostrid.services.nostr_auth.NostrAuthService][]: Polls
        [detect()][nostrid.utils.signer.ExternalAuthChecker.detect] under a
        deadline.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from nostr_sdk import EventBuilder, Keys, Kind, Tag, Timestamp

from nostrid.models.constants import ErrorType
from nostrid.models.results import KeyManagerError, PublicKeyResult

from .keys import parse_keys


logger = logging.getLogger(__name__)

HOST_SIGNER_ATTR = "nostr"


@runtime_checkable
class ExternalSigner(Protocol):
    """The two calls this package needs from an injected signer."""

    async def get_public_key(self) -> str: ...

    async def sign_event(self, event: dict[str, Any]) -> dict[str, Any]: ...


@dataclass
class SignerHost:
    """Mutable slot where the host environment installs its signer.

    Attributes:
        nostr: The injected signer, or ``None`` until it becomes ready.
    """

    nostr: Any = None


class LocalKeySigner:
    """Signs with a secret key held in memory for the lifetime of this object.

    Instances are meant to be short-lived: create one per signing call so the
    key is not retained afterwards.
    """

    __slots__ = ("_keys",)

    def __init__(self, keys: Keys) -> None:
        self._keys = keys

    @classmethod
    def from_nsec(cls, nsec: str) -> LocalKeySigner:
        """Build a signer from an ``nsec``.

        Raises:
            ValueError: If *nsec* is not nsec-encoded.
            nostr_sdk.NostrSdkError: If the key payload is invalid.
        """
        return cls(parse_keys(nsec))

    async def get_public_key(self) -> str:
        return self._keys.public_key().to_hex()

    async def sign_event(self, event: dict[str, Any]) -> dict[str, Any]:
        builder = (
            EventBuilder(Kind(int(event["kind"])), event.get("content", ""))
            .tags([Tag.parse(list(tag)) for tag in event.get("tags", [])])
            .custom_created_at(Timestamp.from_secs(int(event["created_at"])))
        )
        signed = builder.finalize(self._keys)
        return json.loads(signed.as_json())


class ExternalAuthChecker:
    """Capability probe for the injected signer on *host*.

    Args:
        host: Object whose ``nostr`` attribute holds the injected signer
            (``None`` means no host environment at all).
    """

    def __init__(self, host: object | None = None) -> None:
        self._host = host

    @property
    def host(self) -> object | None:
        return self._host

    def _capability(self) -> Any:
        if self._host is None:
            return None
        return getattr(self._host, HOST_SIGNER_ATTR, None)

    def is_available(self) -> bool:
        """Return True if the host currently exposes a callable ``get_public_key``."""
        return callable(getattr(self._capability(), "get_public_key", None))

    def detect(self) -> ExternalSigner | None:
        """Return the injected signer if it can both report a key and sign, else ``None``."""
        capability = self._capability()
        if self.is_available() and callable(getattr(capability, "sign_event", None)):
            return capability
        return None

    async def get_public_key(self) -> PublicKeyResult:
        """Ask the injected signer for its public key.

        Returns:
            A successful [PublicKeyResult][nostrid.models.results.PublicKeyResult]
            with the hex key, a ``validation`` error when no signer is
            installed, or a ``network`` error when the signer rejects.
        """
        if not self.is_available():
            return PublicKeyResult(
                success=False,
                error=KeyManagerError(ErrorType.VALIDATION, "external signer is not available"),
            )
        try:
            pubkey = await self._capability().get_public_key()
        except Exception as e:  # any rejection from the injected signer
            logger.error("external signer rejected get_public_key: %s", e)
            return PublicKeyResult(
                success=False,
                error=KeyManagerError(
                    ErrorType.NETWORK, "failed to get public key from external signer", e
                ),
            )
        return PublicKeyResult(success=True, pubkey=pubkey)
