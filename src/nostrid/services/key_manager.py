"""Key manager facade.

The single entry point the rest of the application uses to read or write
identity material. It composes the pure validators in
[nostrid.utils.keys][], the [KeyStorage][nostrid.core.storage.KeyStorage]
slot and the [ExternalAuthChecker][nostrid.utils.signer.ExternalAuthChecker]
probe without adding behaviour of its own.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from nostrid.utils.keys import derive_public_key, encode_public_key_hex, is_valid_secret_key


if TYPE_CHECKING:
    from nostrid.core.storage import KeyStorage
    from nostrid.models.identity import PublicKeyData
    from nostrid.models.results import PublicKeyResult, SaveResult
    from nostrid.utils.signer import ExternalAuthChecker, ExternalSigner


class KeyManager:
    """Facade over key validation, key storage and the injected signer probe.

    Args:
        storage: Owner of the secret key slot.
        checker: Probe for the host's injected signer.
    """

    def __init__(self, storage: KeyStorage, checker: ExternalAuthChecker) -> None:
        self._storage = storage
        self._checker = checker

    @property
    def storage(self) -> KeyStorage:
        return self._storage

    @property
    def checker(self) -> ExternalAuthChecker:
        return self._checker

    # Validation

    def is_valid_secret_key(self, key: str) -> bool:
        return is_valid_secret_key(key)

    def derive_public_key(self, nsec: str) -> PublicKeyData:
        return derive_public_key(nsec)

    def encode_public_key_hex(self, pubkey_hex: str) -> str:
        return encode_public_key_hex(pubkey_hex)

    # Storage

    def save_to_storage(self, key: str) -> SaveResult:
        return self._storage.save(key)

    def load_from_storage(self) -> str | None:
        return self._storage.load()

    def cached_key(self) -> str | None:
        return self._storage.cached()

    def has_stored_key(self) -> bool:
        return self._storage.has_stored_key()

    def clear_storage(self) -> SaveResult:
        return self._storage.clear()

    # Injected signer

    def is_signer_available(self) -> bool:
        return self._checker.is_available()

    def detect_signer(self) -> ExternalSigner | None:
        return self._checker.detect()

    async def get_public_key_from_signer(self) -> PublicKeyResult:
        return await self._checker.get_public_key()
