"""Identity models: public key encodings, the current identity snapshot and
login widget notifications.

All three are frozen dataclasses so that an identity can only ever be
replaced as a whole. Validation happens in ``__post_init__`` so invalid
instances never escape the constructor.

See Also:
    [nostrid.services.identity_state.IdentityState][]: The only writer of
        [CurrentIdentity][nostrid.models.identity.CurrentIdentity] snapshots.
    [nostrid.utils.keys][]: Produces
        [PublicKeyData][nostrid.models.identity.PublicKeyData] from secret keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ._validation import (
    validate_hex32_or_empty,
    validate_instance,
    validate_optional_str,
    validate_str_no_null,
)
from .constants import IdentitySource, LoginEventType, LoginMethod


if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True, slots=True)
class PublicKeyData:
    """A public key in its three display forms.

    Either every field is empty (no identity) or every field is populated and
    the encodings were derived from ``hex``. The empty instance doubles as the
    failure sentinel returned by
    [derive_public_key][nostrid.utils.keys.derive_public_key].

    Attributes:
        hex: 32-byte x-only public key, lowercase hex.
        npub: NIP-19 ``npub1...`` encoding.
        nprofile: NIP-19 ``nprofile1...`` encoding without relay hints.

    Examples:
        ```python
        PublicKeyData.empty().is_empty  # True
        ```
    """

    hex: str = ""
    npub: str = ""
    nprofile: str = ""

    def __post_init__(self) -> None:
        validate_hex32_or_empty(self.hex, "hex")
        validate_str_no_null(self.npub, "npub")
        validate_str_no_null(self.nprofile, "nprofile")
        filled = [bool(self.hex), bool(self.npub), bool(self.nprofile)]
        if any(filled) and not all(filled):
            raise ValueError("hex, npub and nprofile must be all empty or all set")

    @classmethod
    def empty(cls) -> PublicKeyData:
        """Return the all-empty instance."""
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.hex


@dataclass(frozen=True, slots=True)
class CurrentIdentity:
    """Immutable snapshot of the identity observed by the UI.

    Attributes:
        secret_input: Trimmed secret key text as typed (possibly not yet valid).
        data: Public key encodings; empty when there is no usable identity.
        is_valid: ``True`` exactly when ``data.hex`` is set.
        is_externally_authenticated: ``True`` when the login widget owns the
            identity. Implies ``secret_input == ""``.
        login_method: Best-effort hint of the widget login method.

    Raises:
        ValueError: If ``is_valid`` disagrees with ``data`` or an external
            identity carries secret input.
    """

    secret_input: str = ""
    data: PublicKeyData = field(default_factory=PublicKeyData)
    is_valid: bool = False
    is_externally_authenticated: bool = False
    login_method: LoginMethod | None = None

    def __post_init__(self) -> None:
        validate_str_no_null(self.secret_input, "secret_input")
        validate_instance(self.data, PublicKeyData, "data")
        if self.is_valid != (not self.data.is_empty):
            raise ValueError("is_valid must match whether data.hex is set")
        if self.is_externally_authenticated and self.secret_input:
            raise ValueError("external identity cannot carry secret input")
        if self.login_method is not None and not self.is_externally_authenticated:
            raise ValueError("login_method only applies to external identities")

    @property
    def source(self) -> IdentitySource:
        """The source that is currently authoritative."""
        if self.is_externally_authenticated:
            return IdentitySource.EXTERNAL_LOGIN
        if self.is_valid:
            return IdentitySource.LOCAL_SECRET
        return IdentitySource.NONE

    @property
    def is_empty(self) -> bool:
        return self == _EMPTY_IDENTITY


_EMPTY_IDENTITY = CurrentIdentity()


@dataclass(frozen=True, slots=True)
class LoginAuthEvent:
    """A notification pushed by the login widget.

    Attributes:
        type: ``login``, ``signup`` or ``logout`` (strings are coerced).
        pubkey: Hex public key; required for ``login``/``signup`` to take effect.
        npub: Optional pre-encoded ``npub`` supplied by the widget.
    """

    type: LoginEventType
    pubkey: str | None = None
    npub: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", LoginEventType(self.type))
        validate_optional_str(self.pubkey, "pubkey")
        validate_optional_str(self.npub, "npub")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LoginAuthEvent:
        """Build an event from the widget's raw payload, ignoring unknown keys."""
        return cls(
            type=data["type"],
            pubkey=data.get("pubkey") or None,
            npub=data.get("npub") or None,
        )

    @property
    def is_logout(self) -> bool:
        return self.type is LoginEventType.LOGOUT
