"""Structured result objects returned instead of raising.

KeyStorage and ExternalAuthChecker sit on synchronous, UI-driven paths where
the caller must tell "definitely absent" apart from "failed to check", so
they report through these containers rather than exceptions.

See Also:
    [nostrid.core.exceptions][]: Exception counterparts used on the explicit
        async path (auth header building).
"""

from __future__ import annotations

from dataclasses import dataclass

from .constants import ErrorType


@dataclass(frozen=True, slots=True)
class KeyManagerError:
    """Description of a failed key operation.

    Attributes:
        type: Error category.
        message: Human-readable summary, safe to show or log.
        original_error: Underlying exception, kept for logging only.
    """

    type: ErrorType
    message: str
    original_error: BaseException | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", ErrorType(self.type))


@dataclass(frozen=True, slots=True)
class SaveResult:
    """Outcome of a storage write."""

    success: bool
    error: KeyManagerError | None = None

    @classmethod
    def ok(cls) -> SaveResult:
        return cls(success=True)

    @classmethod
    def fail(
        cls, error_type: ErrorType, message: str, original_error: BaseException | None = None
    ) -> SaveResult:
        return cls(success=False, error=KeyManagerError(error_type, message, original_error))


@dataclass(frozen=True, slots=True)
class PublicKeyResult:
    """Outcome of asking the injected signer for its public key."""

    success: bool
    pubkey: str | None = None
    error: KeyManagerError | None = None


@dataclass(frozen=True, slots=True)
class AuthResult:
    """Outcome of a login flow in [AuthService][nostrid.services.auth_service.AuthService].

    Attributes:
        success: Whether the identity was established (or logged out).
        error: Short machine-readable code such as ``invalid_secret``.
        pubkey_hex: The authenticated public key on success.
    """

    success: bool
    error: str | None = None
    pubkey_hex: str | None = None


@dataclass(frozen=True, slots=True)
class InitResult:
    """Outcome of restoring an identity at startup."""

    has_auth: bool
    pubkey_hex: str | None = None
    is_external: bool = False
