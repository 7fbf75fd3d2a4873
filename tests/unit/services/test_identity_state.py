"""
Unit tests for services.identity_state module.

Tests:
- set_nsec() typed input handling and derivation
- set_external_auth() login/signup/logout handling and login method hint
- clear() reset and clear hook
- subscribe() atomic snapshots and unsubscribe
- Login notification queue drained by bind_login_callback()
- Mutual exclusion of local secret and external identity
"""

import json
import logging
from typing import Any
from unittest.mock import MagicMock

import pytest
from nostr_sdk import Keys

from nostrid.core.storage import MemoryStore
from nostrid.models.constants import IdentitySource, LoginMethod, StorageKey
from nostrid.models.identity import CurrentIdentity, LoginAuthEvent
from nostrid.nips.nip19 import decode_npub, encode_npub
from nostrid.services.identity_state import IdentityState


EXTERNAL_HEX = "aa" * 32
MALFORMED_NSEC = "nsec1" + "q" * 58


@pytest.fixture
def state(store: MemoryStore) -> IdentityState:
    return IdentityState(store)


def _accounts(store: MemoryStore, *accounts: dict[str, Any]) -> None:
    store.set_item(StorageKey.LOGIN_ACCOUNTS, json.dumps(list(accounts)))


# =============================================================================
# set_nsec()
# =============================================================================


class TestSetNsec:
    """Typed secret key input."""

    def test_fresh_state_is_empty(self, state: IdentityState) -> None:
        assert state.current == CurrentIdentity()
        assert state.source is IdentitySource.NONE

    def test_valid_key(self, state: IdentityState, nsec: str, pubkey_hex: str) -> None:
        state.set_nsec(nsec)

        assert state.is_valid
        assert state.hex == pubkey_hex
        assert state.npub.startswith("npub1")
        assert state.nprofile.startswith("nprofile1")
        assert state.current.secret_input == nsec
        assert state.source is IdentitySource.LOCAL_SECRET

    def test_well_formed_but_underivable(self, state: IdentityState) -> None:
        state.set_nsec(MALFORMED_NSEC)

        assert not state.is_valid
        assert state.hex == ""
        assert state.current.secret_input == MALFORMED_NSEC

    def test_partial_input_kept(self, state: IdentityState, nsec: str) -> None:
        state.set_nsec(nsec[:20])

        assert state.current.secret_input == nsec[:20]
        assert not state.is_valid
        assert state.current.data.is_empty

    def test_input_trimmed(self, state: IdentityState, nsec: str) -> None:
        state.set_nsec(f"  {nsec}\n")

        assert state.current.secret_input == nsec
        assert state.is_valid

    def test_idempotent(self, state: IdentityState, nsec: str) -> None:
        state.set_nsec(nsec)
        first = state.current
        state.set_nsec(nsec)

        assert state.current == first

    def test_valid_then_invalid_resets_data(self, state: IdentityState, nsec: str) -> None:
        state.set_nsec(nsec)
        state.set_nsec(nsec[:-1])

        assert not state.is_valid
        assert state.hex == ""

    def test_overrides_external_identity(self, state: IdentityState, nsec: str) -> None:
        state.set_external_auth({"type": "login", "pubkey": EXTERNAL_HEX})
        state.set_nsec(nsec)

        assert not state.is_externally_authenticated
        assert state.current.login_method is None
        assert state.source is IdentitySource.LOCAL_SECRET

    def test_empty_input_drops_external_identity(self, state: IdentityState) -> None:
        state.set_external_auth({"type": "login", "pubkey": EXTERNAL_HEX})
        state.set_nsec("")

        assert state.current == CurrentIdentity()

    def test_never_persists(self, nsec: str) -> None:
        spy = MagicMock(wraps=MemoryStore())
        IdentityState(spy).set_nsec(nsec)

        spy.set_item.assert_not_called()


# =============================================================================
# set_external_auth()
# =============================================================================


class TestSetExternalAuth:
    """Login widget notifications."""

    def test_login(self, state: IdentityState) -> None:
        state.set_external_auth({"type": "login", "pubkey": EXTERNAL_HEX})

        assert state.is_externally_authenticated
        assert state.current.secret_input == ""
        assert state.hex == EXTERNAL_HEX
        assert state.npub.startswith("npub1")
        assert state.source is IdentitySource.EXTERNAL_LOGIN

    def test_signup_event_object(self, state: IdentityState) -> None:
        state.set_external_auth(LoginAuthEvent("signup", pubkey=EXTERNAL_HEX))
        assert state.is_externally_authenticated

    def test_clears_secret_input(self, state: IdentityState, nsec: str) -> None:
        state.set_nsec(nsec)
        state.set_external_auth({"type": "login", "pubkey": EXTERNAL_HEX})

        assert state.current.secret_input == ""
        assert state.hex == EXTERNAL_HEX

    def test_matching_npub_accepted(self, state: IdentityState) -> None:
        keys = Keys.generate()
        npub = keys.public_key().to_bech32()
        state.set_external_auth(
            {"type": "login", "pubkey": keys.public_key().to_hex(), "npub": npub}
        )
        assert state.npub == npub

    @pytest.mark.parametrize(
        "npub",
        ["garbage", Keys.generate().public_key().to_bech32()],
        ids=["malformed", "other_key"],
    )
    def test_mismatched_npub_replaced(
        self, state: IdentityState, npub: str, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="identity_state"):
            state.set_external_auth({"type": "login", "pubkey": EXTERNAL_HEX, "npub": npub})

        assert state.npub == encode_npub(EXTERNAL_HEX)
        assert decode_npub(state.npub) == state.hex
        assert state.is_externally_authenticated
        assert "external_npub_mismatch" in caplog.text

    def test_uppercase_pubkey_normalised(self, state: IdentityState) -> None:
        state.set_external_auth({"type": "login", "pubkey": EXTERNAL_HEX.upper()})
        assert state.hex == EXTERNAL_HEX

    def test_missing_pubkey_is_noop(self, state: IdentityState, nsec: str) -> None:
        state.set_nsec(nsec)
        before = state.current

        state.set_external_auth({"type": "login"})

        assert state.current == before

    def test_malformed_pubkey_clears(self, state: IdentityState, nsec: str) -> None:
        state.set_nsec(nsec)
        state.set_external_auth({"type": "login", "pubkey": "not-hex"})

        assert state.current == CurrentIdentity()

    @pytest.mark.parametrize("prior", ["none", "local", "external"])
    def test_logout_always_empty(self, state: IdentityState, nsec: str, prior: str) -> None:
        if prior == "local":
            state.set_nsec(nsec)
        elif prior == "external":
            state.set_external_auth({"type": "login", "pubkey": EXTERNAL_HEX})

        state.set_external_auth({"type": "logout"})

        assert state.current == CurrentIdentity()

    def test_unknown_type_raises(self, state: IdentityState) -> None:
        with pytest.raises(ValueError):
            state.set_external_auth({"type": "register", "pubkey": EXTERNAL_HEX})


class TestLoginMethodHint:
    """Best-effort authMethod lookup in the widget's account list."""

    def test_method_read(self, store: MemoryStore, state: IdentityState) -> None:
        _accounts(
            store,
            {"pubkey": "bb" * 32, "authMethod": "local"},
            {"pubkey": EXTERNAL_HEX, "authMethod": "extension"},
        )
        state.set_external_auth({"type": "login", "pubkey": EXTERNAL_HEX})

        assert state.current.login_method is LoginMethod.EXTENSION

    def test_no_matching_account(self, store: MemoryStore, state: IdentityState) -> None:
        _accounts(store, {"pubkey": "bb" * 32, "authMethod": "connect"})
        state.set_external_auth({"type": "login", "pubkey": EXTERNAL_HEX})

        assert state.current.login_method is None
        assert state.is_externally_authenticated

    @pytest.mark.parametrize("raw", ["{broken", "42", '[{"pubkey": "aa", "authMethod": 1}]'])
    def test_unreadable_hint_ignored(
        self, store: MemoryStore, state: IdentityState, raw: str
    ) -> None:
        store.set_item(StorageKey.LOGIN_ACCOUNTS, raw)
        state.set_external_auth({"type": "login", "pubkey": EXTERNAL_HEX})

        assert state.is_externally_authenticated
        assert state.current.login_method is None

    def test_unknown_method_ignored(self, store: MemoryStore, state: IdentityState) -> None:
        _accounts(store, {"pubkey": EXTERNAL_HEX, "authMethod": "carrier-pigeon"})
        state.set_external_auth({"type": "login", "pubkey": EXTERNAL_HEX})

        assert state.is_externally_authenticated
        assert state.current.login_method is None

    def test_without_store(self) -> None:
        state = IdentityState()
        state.set_external_auth({"type": "login", "pubkey": EXTERNAL_HEX})
        assert state.current.login_method is None


# =============================================================================
# clear() and observers
# =============================================================================


class TestClear:
    def test_resets_everything(self, state: IdentityState, nsec: str) -> None:
        state.set_nsec(nsec)
        state.clear()
        assert state.current == CurrentIdentity()

    def test_invokes_clear_hook(self, state: IdentityState) -> None:
        hook = MagicMock()
        state.bind_clear_hook(hook)

        state.clear()

        hook.assert_called_once_with()

    def test_logout_invokes_clear_hook(self, state: IdentityState) -> None:
        hook = MagicMock()
        state.bind_clear_hook(hook)

        state.set_external_auth({"type": "logout"})

        hook.assert_called_once_with()


class TestSubscribe:
    """Observer notification."""

    def test_receives_complete_snapshots(self, state: IdentityState, nsec: str) -> None:
        seen: list[CurrentIdentity] = []

        def observer(identity: CurrentIdentity) -> None:
            assert identity is state.current
            seen.append(identity)

        state.subscribe(observer)
        state.set_nsec(nsec)
        state.set_external_auth({"type": "login", "pubkey": EXTERNAL_HEX})
        state.clear()

        assert [s.source for s in seen] == [
            IdentitySource.LOCAL_SECRET,
            IdentitySource.EXTERNAL_LOGIN,
            IdentitySource.NONE,
        ]

    def test_unchanged_snapshot_not_renotified(self, state: IdentityState, nsec: str) -> None:
        observer = MagicMock()
        state.subscribe(observer)

        state.set_nsec(nsec)
        state.set_nsec(nsec)

        assert observer.call_count == 1

    def test_unsubscribe(self, state: IdentityState, nsec: str) -> None:
        observer = MagicMock()
        unsubscribe = state.subscribe(observer)
        unsubscribe()
        unsubscribe()

        state.set_nsec(nsec)

        observer.assert_not_called()


# =============================================================================
# Login notification queue
# =============================================================================


class TestLoginCallback:
    """Two-phase startup for the login integration callback."""

    def test_bound_callback_called(self, state: IdentityState) -> None:
        callback = MagicMock()
        state.bind_login_callback(callback)

        state.set_external_auth({"type": "login", "pubkey": EXTERNAL_HEX})

        callback.assert_called_once_with(EXTERNAL_HEX, state.npub, state.nprofile)

    def test_queued_until_bound(self, state: IdentityState) -> None:
        other_hex = "bb" * 32
        state.set_external_auth({"type": "login", "pubkey": EXTERNAL_HEX})
        state.set_external_auth({"type": "login", "pubkey": other_hex})
        assert state.pending_login_count == 2

        callback = MagicMock()
        state.bind_login_callback(callback)

        assert [c.args[0] for c in callback.call_args_list] == [EXTERNAL_HEX, other_hex]
        assert state.pending_login_count == 0

    def test_queue_delivered_once(self, state: IdentityState) -> None:
        state.set_external_auth({"type": "login", "pubkey": EXTERNAL_HEX})
        first = MagicMock()
        second = MagicMock()

        state.bind_login_callback(first)
        state.bind_login_callback(second)

        first.assert_called_once()
        second.assert_not_called()

    def test_clear_discards_queue(self, state: IdentityState) -> None:
        state.set_external_auth({"type": "login", "pubkey": EXTERNAL_HEX})
        state.clear()

        callback = MagicMock()
        state.bind_login_callback(callback)

        callback.assert_not_called()

    def test_local_secret_not_announced(self, state: IdentityState, nsec: str) -> None:
        callback = MagicMock()
        state.bind_login_callback(callback)

        state.set_nsec(nsec)

        callback.assert_not_called()


# =============================================================================
# End-to-end scenarios and invariants
# =============================================================================


class TestScenarios:
    def test_scenario_well_formed_non_key(self, state: IdentityState) -> None:
        state.set_nsec(MALFORMED_NSEC)
        assert state.current.is_valid is False
        assert state.current.data.hex == ""

    def test_scenario_valid_nsec(self, state: IdentityState, nsec: str) -> None:
        state.set_nsec(nsec)
        assert state.current.is_valid is True
        assert state.current.data.npub.startswith("npub1")

    def test_scenario_external_login(self, state: IdentityState) -> None:
        state.set_external_auth({"type": "login", "pubkey": EXTERNAL_HEX})
        assert state.current.is_externally_authenticated is True
        assert state.current.secret_input == ""
        assert state.current.data.hex == EXTERNAL_HEX

    def test_mutual_exclusion_over_mixed_sequence(self, state: IdentityState, nsec: str) -> None:
        steps: list[Any] = [
            lambda: state.set_nsec(nsec),
            lambda: state.set_external_auth({"type": "login", "pubkey": EXTERNAL_HEX}),
            lambda: state.set_nsec(nsec[:30]),
            lambda: state.set_external_auth({"type": "signup", "pubkey": "cc" * 32}),
            lambda: state.set_external_auth({"type": "login"}),
            lambda: state.set_nsec(MALFORMED_NSEC),
            lambda: state.set_external_auth({"type": "logout"}),
            lambda: state.set_nsec(nsec),
        ]
        for step in steps:
            step()
            current = state.current
            assert not (current.secret_input and current.is_externally_authenticated)
            assert current.is_valid == bool(current.data.hex)
