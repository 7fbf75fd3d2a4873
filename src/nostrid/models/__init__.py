"""Pure data models for nostrid.

Frozen dataclasses with zero I/O. This is the bottom layer of the package:
it imports nothing from ``core``, ``nips``, ``utils`` or ``services``.

All models validate in ``__post_init__`` and use ``object.__setattr__`` to
normalise fields on frozen instances (e.g. coercing strings to enums).

See Also:
    [nostrid.models.identity][]: Public key data, identity snapshot, login events.
    [nostrid.models.results][]: Result containers for non-raising operations.
    [nostrid.models.constants][]: Enumerations and fixed protocol values.
"""

from .constants import (
    NSEC_LENGTH,
    NSEC_PREFIX,
    ErrorType,
    EventKind,
    IdentitySource,
    LoginEventType,
    LoginMethod,
    StorageKey,
)
from .identity import CurrentIdentity, LoginAuthEvent, PublicKeyData
from .results import AuthResult, InitResult, KeyManagerError, PublicKeyResult, SaveResult


__all__ = [
    "NSEC_LENGTH",
    "NSEC_PREFIX",
    "AuthResult",
    "CurrentIdentity",
    "ErrorType",
    "EventKind",
    "IdentitySource",
    "InitResult",
    "KeyManagerError",
    "LoginAuthEvent",
    "LoginEventType",
    "LoginMethod",
    "PublicKeyData",
    "PublicKeyResult",
    "SaveResult",
    "StorageKey",
]
