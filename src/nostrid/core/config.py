"""Pydantic configuration models.

One [IdentityConfig][nostrid.core.config.IdentityConfig] describes a whole
[IdentityContext][nostrid.services.context.IdentityContext]: where the
durable key store lives and how long the auth header builder waits for an
injected signer.

Examples:
    ```yaml
    # config/nostrid.yaml
    storage:
      path: ~/.nostrid/store.json
    auth:
      max_wait: 3.0
      poll_interval: 0.1
    ```

    ```python
    config = IdentityConfig.from_yaml("config/nostrid.yaml")
    ```
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Self

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from nostrid.models.constants import StorageKey

from .exceptions import ConfigurationError
from .yaml import load_yaml


DEFAULT_PRESERVED_KEYS = ("locale", "uploadEndpoint", "firstVisit")


class StorageConfig(BaseModel):
    """Durable key/value store settings.

    Slot names default to the ones shared with the login widget; change them
    only when the widget is configured to use different names.
    """

    path: Path | None = Field(
        default=None,
        description="JSON file backing the durable store (None = in-memory only)",
    )
    secret_key_slot: str = Field(
        default=StorageKey.SECRET_KEY.value,
        min_length=1,
        description="Slot holding the raw nsec",
    )
    accounts_slot: str = Field(
        default=StorageKey.LOGIN_ACCOUNTS.value,
        min_length=1,
        description="Slot holding the widget's account list (read-only)",
    )
    session_slot: str = Field(
        default=StorageKey.LOGIN_SESSION.value,
        min_length=1,
        description="Slot holding the widget's persisted session (read-only)",
    )
    preserve_on_logout: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PRESERVED_KEYS),
        description="Slots kept when logout clears the store",
    )

    @field_validator("path")
    @classmethod
    def _expand_user(cls, value: Path | None) -> Path | None:
        return value.expanduser() if value is not None else None


class NostrAuthConfig(BaseModel):
    """Timing for [NostrAuthService][nostrid.services.nostr_auth.NostrAuthService].

    Tests shrink these values to keep the poll-deadline tests fast.
    """

    max_wait: float = Field(
        default=3.0,
        ge=0.0,
        le=60.0,
        description="Seconds to wait for an injected signer before failing",
    )
    poll_interval: float = Field(
        default=0.1,
        gt=0.0,
        le=5.0,
        description="Seconds between signer readiness checks",
    )
    sign_timeout: float = Field(
        default=30.0,
        gt=0.0,
        description="Seconds allowed for the injected signer to sign one event",
    )

    @model_validator(mode="after")
    def _interval_within_wait(self) -> Self:
        if self.max_wait and self.poll_interval > self.max_wait:
            raise ValueError("poll_interval must not exceed max_wait")
        return self


class IdentityConfig(BaseModel):
    """Top-level configuration for an identity context."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    auth: NostrAuthConfig = Field(default_factory=NostrAuthConfig)
    log_json: bool = Field(default=False, description="Emit JSON log lines")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IdentityConfig:
        """Validate a plain dict.

        Raises:
            ConfigurationError: If validation fails.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(str(e)) from e

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> IdentityConfig:
        """Load and validate a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigurationError: If the YAML or its contents are invalid.
        """
        return cls.from_dict(load_yaml(config_path))
