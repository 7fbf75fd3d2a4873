"""Shared constants for the models layer.

Defines the enumerations and fixed values used across the identity models,
the NIP helpers and the services. Placing them here avoids circular
dependencies between the models and utils layers.

See Also:
    [nostrid.models.identity][]: Identity dataclasses built on these enums.
    [nostrid.nips.nip98][]: Uses [EventKind][nostrid.models.constants.EventKind]
        for the HTTP authentication event.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


# Bech32 alphabet (BIP-173); ``b``, ``i``, ``o`` and ``1`` never appear in data.
BECH32_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"

NSEC_PREFIX = "nsec1"
NPUB_PREFIX = "npub1"
NPROFILE_PREFIX = "nprofile1"

# 32-byte payload + 6-char checksum in 5-bit groups, plus the ``nsec1`` prefix.
NSEC_PAYLOAD_LENGTH = 58
NSEC_LENGTH = len(NSEC_PREFIX) + NSEC_PAYLOAD_LENGTH

PUBLIC_KEY_HEX_LENGTH = 64

HTTP_AUTH_SCHEME = "Nostr"


class EventKind(IntEnum):
    """Nostr event kinds produced by this package.

    Attributes:
        HTTP_AUTH: NIP-98 HTTP authentication event (kind 27235).
    """

    HTTP_AUTH = 27235


class ErrorType(StrEnum):
    """Error categories shared by result objects and exceptions.

    Attributes:
        VALIDATION: Malformed input (e.g. an empty key before save).
        STORAGE: Durable storage read/write failure.
        NETWORK: The injected signer rejected a call.
        AUTH_REQUIRED: No signer could be obtained within the allotted time.
    """

    VALIDATION = "validation"
    STORAGE = "storage"
    NETWORK = "network"
    AUTH_REQUIRED = "auth-required"


class StorageKey(StrEnum):
    """Slot names in the durable key/value store.

    Attributes:
        SECRET_KEY: Raw ``nsec`` written by
            [KeyStorage][nostrid.core.storage.KeyStorage].
        LOGIN_ACCOUNTS: JSON array of ``{pubkey, authMethod}`` records written
            by the login widget. Read-only for this package.
        LOGIN_SESSION: JSON object ``{pubkey, npub}`` persisted by the login
            widget for remote-signer sessions. Read-only for this package.
    """

    SECRET_KEY = "nostr-secret-key"  # pragma: allowlist secret
    LOGIN_ACCOUNTS = "__nostrlogin_accounts"
    LOGIN_SESSION = "__nostrlogin_nip46"


class LoginEventType(StrEnum):
    """Notification types emitted by the login widget."""

    LOGIN = "login"
    SIGNUP = "signup"
    LOGOUT = "logout"


class LoginMethod(StrEnum):
    """Login method reported by the widget's account list (a display hint only)."""

    CONNECT = "connect"
    EXTENSION = "extension"
    LOCAL = "local"


class IdentitySource(StrEnum):
    """Which source currently owns the identity.

    Exactly one member is authoritative at any observation point.

    Attributes:
        NONE: No identity.
        LOCAL_SECRET: Derived from a secret key typed or restored locally.
        EXTERNAL_LOGIN: Announced by the login widget or injected signer.
    """

    NONE = "none"
    LOCAL_SECRET = "local_secret"
    EXTERNAL_LOGIN = "external_login"
