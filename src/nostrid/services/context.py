"""Explicitly constructed identity context.

[IdentityContext][nostrid.services.context.IdentityContext] owns exactly one
of each component and is passed to whatever needs identity access. Startup
has two phases:

1. **Construct** -- build the store, key storage, signer probe, key
   manager, identity state and both services. No callbacks are bound yet;
   login notifications raised now are queued by the identity state.
2. **Wire** -- [wire()][nostrid.services.context.IdentityContext.wire]
   binds the login callback and clear hook and delivers queued
   notifications in order.

[reset()][nostrid.services.context.IdentityContext.reset] returns the
identity to empty without touching the durable store.

Examples:
    ```python
    context = IdentityContext.from_yaml("config/nostrid.yaml", host=SignerHost())
    context.auth.initialize()
    context.wire(on_login=print)
    header = await context.nostr_auth.build_auth_header("https://example.com/upload")
    ```
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from nostrid.core.config import IdentityConfig
from nostrid.core.logger import Logger
from nostrid.core.storage import KeyStorage, open_store
from nostrid.utils.signer import ExternalAuthChecker

from .auth_service import AuthService
from .identity_state import ClearHook, IdentityState, LoginCallback
from .key_manager import KeyManager
from .nostr_auth import NostrAuthService


if TYPE_CHECKING:
    from nostrid.core.storage import KeyValueStore


class IdentityContext:
    """Dependency container for one identity.

    Args:
        config: Storage and auth settings (defaults apply when omitted).
        host: Object whose ``nostr`` attribute holds the injected signer.
        store: Store to use instead of the one described by ``config``.
    """

    def __init__(
        self,
        config: IdentityConfig | None = None,
        host: object | None = None,
        *,
        store: KeyValueStore | None = None,
    ) -> None:
        self._config = config or IdentityConfig()
        storage_config = self._config.storage
        json_output = self._config.log_json

        self._store = store if store is not None else open_store(storage_config)
        self._storage = KeyStorage(
            self._store, slot=storage_config.secret_key_slot, json_output=json_output
        )
        self._checker = ExternalAuthChecker(host)
        self._key_manager = KeyManager(self._storage, self._checker)
        self._identity = IdentityState(
            self._store, accounts_slot=storage_config.accounts_slot, json_output=json_output
        )
        self._auth = AuthService(
            self._key_manager, self._identity, self._store, storage_config, json_output=json_output
        )
        self._nostr_auth = NostrAuthService(
            self._key_manager, self._config.auth, json_output=json_output
        )
        self._wired = False
        self._logger = Logger("identity_context", json_output=json_output)

    @classmethod
    def from_yaml(
        cls, config_path: str | Path, host: object | None = None
    ) -> IdentityContext:
        """Build a context from a YAML configuration file."""
        return cls(IdentityConfig.from_yaml(config_path), host)

    @property
    def config(self) -> IdentityConfig:
        return self._config

    @property
    def store(self) -> KeyValueStore:
        return self._store

    @property
    def key_manager(self) -> KeyManager:
        return self._key_manager

    @property
    def identity(self) -> IdentityState:
        return self._identity

    @property
    def auth(self) -> AuthService:
        return self._auth

    @property
    def nostr_auth(self) -> NostrAuthService:
        return self._nostr_auth

    @property
    def is_wired(self) -> bool:
        return self._wired

    def wire(
        self,
        *,
        on_login: LoginCallback | None = None,
        on_clear: ClearHook | None = None,
    ) -> None:
        """Bind collaborator callbacks; queued login notifications are delivered now."""
        self._identity.bind_clear_hook(on_clear)
        self._identity.bind_login_callback(on_login)
        self._wired = True
        self._logger.debug("context_wired", login=on_login is not None, clear=on_clear is not None)

    def reset(self) -> None:
        """Return the identity to empty and drop the in-memory key copy."""
        self._storage.forget_cached()
        self._identity.clear()
