r"""nostrid -- Nostr identity management and NIP-98 HTTP authentication.

Reconciles a typed secret key, an injected signer and login widget
announcements into one observable current identity, and signs short-lived
NIP-98 ``Authorization`` headers with whichever source is authoritative.

Architecture follows a **diamond DAG** dependency structure where imports
flow strictly downward:

```text
              services         Identity state, auth flows, header builder
             /   |   \
          core  nips  utils    Config/storage/logging, NIP-19/98, key helpers
             \   |   /
              models           Pure frozen dataclasses (zero I/O)
```

Attributes:
    models: Pure frozen dataclasses. Zero I/O, depends only on stdlib.
    core: Configuration, durable key storage, exceptions, logging.
    nips: NIP-19 public key encodings and the NIP-98 header codec.
    utils: Secret key validation and derivation, local and injected signers.
    services: IdentityState, KeyManager, NostrAuthService, AuthService and
        the IdentityContext that wires them.

Note:
    For lightweight usage, import directly from subpackages::

        from nostrid.utils.keys import derive_public_key
        from nostrid.services import IdentityContext

    Top-level imports (``from nostrid import IdentityContext``) use lazy
    loading and resolve on first access.
"""

import importlib
from importlib.metadata import version as _get_version


__version__ = _get_version("nostrid")

__all__ = [
    "AuthRequiredError",
    "AuthService",
    "CurrentIdentity",
    "IdentityConfig",
    "IdentityContext",
    "IdentityState",
    "KeyManager",
    "KeyStorage",
    "LoginAuthEvent",
    "NostrAuthService",
    "NostridError",
    "PublicKeyData",
    "SignerError",
    "SignerHost",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "AuthRequiredError": ("nostrid.core", "AuthRequiredError"),
    "IdentityConfig": ("nostrid.core", "IdentityConfig"),
    "KeyStorage": ("nostrid.core", "KeyStorage"),
    "NostridError": ("nostrid.core", "NostridError"),
    "SignerError": ("nostrid.core", "SignerError"),
    "CurrentIdentity": ("nostrid.models", "CurrentIdentity"),
    "LoginAuthEvent": ("nostrid.models", "LoginAuthEvent"),
    "PublicKeyData": ("nostrid.models", "PublicKeyData"),
    "SignerHost": ("nostrid.utils", "SignerHost"),
    "AuthService": ("nostrid.services", "AuthService"),
    "IdentityContext": ("nostrid.services", "IdentityContext"),
    "IdentityState": ("nostrid.services", "IdentityState"),
    "KeyManager": ("nostrid.services", "KeyManager"),
    "NostrAuthService": ("nostrid.services", "NostrAuthService"),
}


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(module_path)
        value = getattr(module, attr_name)
        globals()[name] = value  # Cache for subsequent access
        return value
    raise AttributeError(f"module 'nostrid' has no attribute {name!r}")


def __dir__() -> list[str]:
    return __all__
