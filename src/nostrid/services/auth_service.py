"""Login, logout and startup restore flows.

[AuthService][nostrid.services.auth_service.AuthService] drives
[IdentityState][nostrid.services.identity_state.IdentityState] and the
[KeyManager][nostrid.services.key_manager.KeyManager] for the three user
journeys:

* **Secret key login** -- validate, persist, derive, then publish the
  identity. Failures are reported as short codes in
  [AuthResult][nostrid.models.results.AuthResult]:
  ``invalid_secret``, ``error_saving``, ``derivation_failed``.
* **Login widget** -- forward ``login``/``signup`` notifications
  (``missing_pubkey`` when the pubkey is absent) and route ``logout``.
* **Startup** -- restore a stored secret key first, then the widget's
  persisted session.

Logout clears the whole durable store except a configurable set of
preference slots.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from nostrid.core.config import StorageConfig
from nostrid.core.logger import Logger
from nostrid.models.constants import LoginEventType
from nostrid.models.identity import LoginAuthEvent
from nostrid.models.results import AuthResult, InitResult


if TYPE_CHECKING:
    from nostrid.core.storage import KeyValueStore

    from .identity_state import IdentityState
    from .key_manager import KeyManager


class AuthService:
    """User-facing authentication flows.

    Args:
        key_manager: Key validation, storage and signer probe.
        identity: The identity aggregate to update.
        store: Durable store shared with the login widget.
        config: Slot names and the slots preserved on logout.
        json_output: Emit JSON log lines instead of key=value pairs.
    """

    def __init__(
        self,
        key_manager: KeyManager,
        identity: IdentityState,
        store: KeyValueStore,
        config: StorageConfig | None = None,
        *,
        json_output: bool = False,
    ) -> None:
        self._key_manager = key_manager
        self._identity = identity
        self._store = store
        self._config = config or StorageConfig()
        self._logger = Logger("auth_service", json_output=json_output)

    def authenticate_with_nsec(self, nsec: str) -> AuthResult:
        """Log in with a secret key and persist it.

        A key that is saved but then fails derivation is removed again so it
        is not restored on the next start.
        """
        secret = nsec.strip() if isinstance(nsec, str) else ""
        if not self._key_manager.is_valid_secret_key(secret):
            return AuthResult(success=False, error="invalid_secret")

        if not self._key_manager.save_to_storage(secret).success:
            return AuthResult(success=False, error="error_saving")

        data = self._key_manager.derive_public_key(secret)
        if data.is_empty:
            self._key_manager.clear_storage()
            return AuthResult(success=False, error="derivation_failed")

        self._identity.set_nsec(secret)
        self._logger.info("nsec_login", pubkey=data.hex)
        return AuthResult(success=True, pubkey_hex=data.hex)

    def authenticate_with_login(self, event: LoginAuthEvent | Mapping[str, Any]) -> AuthResult:
        """Apply a login widget notification.

        Raises:
            ValueError: If a raw mapping carries an unknown event type.
        """
        if not isinstance(event, LoginAuthEvent):
            event = LoginAuthEvent.from_dict(event)

        if event.is_logout:
            return self.logout()

        if not event.pubkey:
            self._logger.warning("login_rejected", reason="missing_pubkey", type=event.type)
            return AuthResult(success=False, error="missing_pubkey")

        self._identity.set_external_auth(event)
        if not self._identity.is_externally_authenticated:
            return AuthResult(success=False, error="invalid_pubkey")
        return AuthResult(success=True, pubkey_hex=self._identity.hex)

    def initialize(self) -> InitResult:
        """Restore the identity from durable storage.

        A stored secret key wins over a persisted widget session. A stored
        key that no longer derives is deleted.
        """
        stored = self._key_manager.load_from_storage()
        if stored:
            self._identity.set_nsec(stored)
            if self._identity.is_valid:
                self._logger.info("identity_restored", source="stored_key")
                return InitResult(has_auth=True, pubkey_hex=self._identity.hex)
            self._logger.warning("stored_key_invalid")
            self._key_manager.clear_storage()
            self._identity.clear()

        session = self._read_login_session()
        if session is not None:
            self._identity.set_external_auth(session)
            if self._identity.is_externally_authenticated:
                self._logger.info("identity_restored", source="login_session")
                return InitResult(has_auth=True, pubkey_hex=self._identity.hex, is_external=True)

        return InitResult(has_auth=False)

    def logout(self) -> AuthResult:
        """Clear the durable store (keeping preserved slots) and the identity.

        The identity is cleared even when the store cannot be fully cleared.
        """
        result = AuthResult(success=True)
        preserved = set(self._config.preserve_on_logout)
        try:
            for key in self._store.keys():
                if key not in preserved:
                    self._store.remove_item(key)
        except (OSError, ValueError) as e:
            self._logger.error("logout_store_clear_failed", error=str(e))
            result = AuthResult(success=False, error="error_clearing")

        self._key_manager.storage.forget_cached()
        self._identity.clear()
        self._logger.info("logout")
        return result

    def _read_login_session(self) -> LoginAuthEvent | None:
        try:
            raw = self._store.get_item(self._config.session_slot)
            if not raw:
                return None
            session = json.loads(raw)
        except (OSError, ValueError) as e:
            self._logger.warning("login_session_unreadable", error=str(e))
            return None
        if not isinstance(session, dict) or not session.get("pubkey"):
            return None
        npub = session.get("npub")
        return LoginAuthEvent(
            type=LoginEventType.LOGIN,
            pubkey=str(session["pubkey"]),
            npub=npub if isinstance(npub, str) and npub else None,
        )
