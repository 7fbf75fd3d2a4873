"""nostrid services package.

Top of the dependency graph: builds on ``core``, ``nips``, ``utils`` and
``models``.

- **IdentityState**: Observable aggregate for the current identity.
- **KeyManager**: Facade over key validation, key storage and the signer probe.
- **NostrAuthService**: NIP-98 header builder with a bounded signer poll.
- **AuthService**: Login, logout and startup restore flows.
- **IdentityContext**: Explicit container wiring all of the above.

Example::

    from nostrid.services import IdentityContext

    context = IdentityContext.from_yaml("config/nostrid.yaml")
    context.auth.initialize()
    context.wire(on_login=lambda pubkey, npub, nprofile: print(npub))
"""

from .auth_service import AuthService
from .context import IdentityContext
from .identity_state import IdentityState
from .key_manager import KeyManager
from .nostr_auth import NostrAuthService


__all__ = [
    "AuthService",
    "IdentityContext",
    "IdentityState",
    "KeyManager",
    "NostrAuthService",
]
