"""Observable identity aggregate.

[IdentityState][nostrid.services.identity_state.IdentityState] reconciles the
two identity sources that can change at any time, the secret key typed by
the user and the login widget's announcements, into one
[CurrentIdentity][nostrid.models.identity.CurrentIdentity] snapshot.

Every transition builds a complete new snapshot and swaps it in before any
observer runs, so observers never see a half-applied identity. At every
observation point exactly one of these holds:

* empty -- no identity;
* local secret -- ``secret_input`` set, ``is_externally_authenticated`` false;
* external -- ``is_externally_authenticated`` true, ``secret_input`` empty.

Login notifications go to a callback bound during the second phase of
startup. Notifications raised before the callback is bound are queued and
delivered, in order, by
[bind_login_callback()][nostrid.services.identity_state.IdentityState.bind_login_callback].

Examples:
    ```python
    state = IdentityState(store)
    unsubscribe = state.subscribe(lambda identity: print(identity.source))
    state.set_nsec("nsec1...")
    state.set_external_auth({"type": "login", "pubkey": "aa" * 32})
    unsubscribe()
    ```
"""

from __future__ import annotations

import json
from collections import deque
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from nostrid.core.logger import Logger
from nostrid.models.constants import IdentitySource, LoginMethod, StorageKey
from nostrid.models.identity import CurrentIdentity, LoginAuthEvent, PublicKeyData
from nostrid.nips.nip19 import decode_npub
from nostrid.utils.keys import derive_public_key, is_valid_secret_key, public_key_data_from_hex


if TYPE_CHECKING:
    from nostrid.core.storage import KeyValueStore


IdentityObserver = Callable[[CurrentIdentity], None]
LoginCallback = Callable[[str, str, str], None]
ClearHook = Callable[[], None]


class IdentityState:
    """Single writer of the current identity snapshot.

    Args:
        store: Store holding the login widget's account list, used only to
            read the login method hint. ``None`` disables the hint.
        accounts_slot: Slot name of the account list.
        json_output: Emit JSON log lines instead of key=value pairs.
    """

    def __init__(
        self,
        store: KeyValueStore | None = None,
        *,
        accounts_slot: str = StorageKey.LOGIN_ACCOUNTS.value,
        json_output: bool = False,
    ) -> None:
        self._store = store
        self._accounts_slot = accounts_slot
        self._current = CurrentIdentity()
        self._observers: list[IdentityObserver] = []
        self._login_callback: LoginCallback | None = None
        self._clear_hook: ClearHook | None = None
        self._pending_logins: deque[tuple[str, str, str]] = deque()
        self._logger = Logger("identity_state", json_output=json_output)

    # -- Read access ---------------------------------------------------------

    @property
    def current(self) -> CurrentIdentity:
        return self._current

    @property
    def source(self) -> IdentitySource:
        return self._current.source

    @property
    def is_valid(self) -> bool:
        return self._current.is_valid

    @property
    def is_externally_authenticated(self) -> bool:
        return self._current.is_externally_authenticated

    @property
    def hex(self) -> str:
        return self._current.data.hex

    @property
    def npub(self) -> str:
        return self._current.data.npub

    @property
    def nprofile(self) -> str:
        return self._current.data.nprofile

    @property
    def pending_login_count(self) -> int:
        """Number of login notifications waiting for a bound callback."""
        return len(self._pending_logins)

    # -- Observers and collaborators -----------------------------------------

    def subscribe(self, callback: IdentityObserver) -> Callable[[], None]:
        """Register *callback* for every new snapshot.

        Returns:
            A function that removes the subscription. Calling it more than
            once is harmless.
        """
        self._observers.append(callback)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def bind_login_callback(self, callback: LoginCallback | None) -> None:
        """Bind the login integration callback and flush queued notifications.

        The callback receives ``(pubkey_hex, npub, nprofile)``. Queued
        notifications are delivered once each, oldest first.
        """
        self._login_callback = callback
        if callback is None:
            return
        while self._pending_logins:
            callback(*self._pending_logins.popleft())

    def bind_clear_hook(self, hook: ClearHook | None) -> None:
        """Bind the hook that [clear()][nostrid.services.identity_state.IdentityState.clear] invokes."""
        self._clear_hook = hook

    # -- Transitions ---------------------------------------------------------

    def set_nsec(self, raw: str) -> None:
        """Record typed secret key input and derive the public key from it.

        The trimmed input is always kept as ``secret_input`` so partially
        typed keys stay visible. Derivation failures leave ``data`` empty.
        Any external identity is dropped. Nothing is persisted.
        """
        secret = raw.strip() if isinstance(raw, str) else ""
        data = PublicKeyData.empty()
        if secret and is_valid_secret_key(secret):
            data = derive_public_key(secret)
        self._replace(CurrentIdentity(secret_input=secret, data=data, is_valid=not data.is_empty))

    def set_external_auth(self, event: LoginAuthEvent | Mapping[str, Any]) -> None:
        """Apply a login widget notification.

        ``logout`` always clears. A ``login``/``signup`` without a pubkey is
        ignored with a warning. A pubkey that cannot be encoded clears the
        identity. A supplied ``npub`` is kept only when it decodes to the
        pubkey; otherwise the ``npub`` encoded from the pubkey is used.

        Raises:
            ValueError: If a raw mapping carries an unknown event type.
            KeyError: If a raw mapping has no ``type``.
        """
        if not isinstance(event, LoginAuthEvent):
            event = LoginAuthEvent.from_dict(event)

        if event.is_logout:
            self.clear()
            return

        if not event.pubkey:
            self._logger.warning("external_auth_ignored", reason="missing_pubkey", type=event.type)
            return

        try:
            data = public_key_data_from_hex(event.pubkey)
        except ValueError as e:
            self._logger.error("external_auth_rejected", error=str(e))
            self.clear()
            return
        if event.npub and event.npub != data.npub:
            if self._npub_matches(event.npub, data.hex):
                data = PublicKeyData(hex=data.hex, npub=event.npub, nprofile=data.nprofile)
            else:
                self._logger.warning("external_npub_mismatch", pubkey=data.hex)

        self._replace(
            CurrentIdentity(
                data=data,
                is_valid=True,
                is_externally_authenticated=True,
                login_method=self._read_login_method(data.hex),
            )
        )
        self._logger.info("external_auth_applied", pubkey=data.hex)
        self._notify_login(data)

    def clear(self) -> None:
        """Reset to the empty identity and run the bound clear hook.

        Login notifications still queued for an unbound callback are
        discarded; they describe an identity that no longer exists.
        """
        self._pending_logins.clear()
        self._replace(CurrentIdentity())
        if self._clear_hook is not None:
            self._clear_hook()

    # -- Internals -----------------------------------------------------------

    def _replace(self, identity: CurrentIdentity) -> None:
        if identity == self._current:
            return
        self._current = identity
        for observer in list(self._observers):
            observer(identity)

    @staticmethod
    def _npub_matches(npub: str, pubkey_hex: str) -> bool:
        try:
            return decode_npub(npub) == pubkey_hex
        except ValueError:
            return False

    def _notify_login(self, data: PublicKeyData) -> None:
        notification = (data.hex, data.npub, data.nprofile)
        if self._login_callback is None:
            self._pending_logins.append(notification)
            self._logger.debug("login_notification_queued", pending=len(self._pending_logins))
            return
        self._login_callback(*notification)

    def _read_login_method(self, pubkey_hex: str) -> LoginMethod | None:
        """Look up the widget's ``authMethod`` hint for *pubkey_hex*."""
        if self._store is None:
            return None
        try:
            raw = self._store.get_item(self._accounts_slot)
            if not raw:
                return None
            for account in json.loads(raw):
                if not isinstance(account, dict):
                    continue
                if str(account.get("pubkey", "")).lower() != pubkey_hex:
                    continue
                method = account.get("authMethod")
                return LoginMethod(method) if method else None
        except (OSError, ValueError, TypeError) as e:
            self._logger.warning("login_method_unreadable", error=str(e))
        return None
