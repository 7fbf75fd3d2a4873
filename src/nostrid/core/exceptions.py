"""nostrid exception hierarchy.

Exceptions are reserved for explicit, already-asynchronous call paths
(building an auth header, loading configuration). The synchronous UI paths
report through result objects in [nostrid.models.results][] instead.

Exception hierarchy:

```text
NostridError (base -- never raised directly)
├── ConfigurationError   -- config validation, bad YAML
├── KeyValidationError   -- malformed key material       (validation)
├── StorageError         -- durable store read/write      (storage)
├── SignerError          -- injected signer rejected      (network)
└── AuthRequiredError    -- no signer within the deadline (auth-required)
```

Each subclass carries the matching
[ErrorType][nostrid.models.constants.ErrorType] in ``error_type`` so callers
can map exceptions and result objects onto the same taxonomy.
"""

from __future__ import annotations

from typing import ClassVar

from nostrid.models.constants import ErrorType


class NostridError(Exception):
    """Base exception for all nostrid errors.

    Never raised directly -- always use a specific subclass.
    """

    error_type: ClassVar[ErrorType | None] = None


class ConfigurationError(NostridError):
    """Invalid or missing configuration (YAML file, CLI flags)."""


class KeyValidationError(NostridError):
    """Malformed key material, e.g. an empty or non-nsec secret key."""

    error_type = ErrorType.VALIDATION


class StorageError(NostridError):
    """The durable key store could not be read or written."""

    error_type = ErrorType.STORAGE


class SignerError(NostridError):
    """The injected signer rejected or timed out on a call.

    The original exception is chained as ``__cause__``.
    """

    error_type = ErrorType.NETWORK


class AuthRequiredError(NostridError):
    """No signer (stored key or injected signer) became available in time.

    Callers surface this as "please install or unlock your signer"; all
    previously entered state is left untouched so the action can be retried.
    """

    error_type = ErrorType.AUTH_REQUIRED
