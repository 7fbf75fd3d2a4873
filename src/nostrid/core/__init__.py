"""Core layer: configuration, storage, logging and exceptions.

Sits in the middle of the dependency graph -- depends only on
``nostrid.models`` and is depended upon by ``nostrid.services``.

Attributes:
    IdentityConfig: Top-level pydantic configuration.
        See [IdentityConfig][nostrid.core.config.IdentityConfig].
    KeyStorage: Owner of the secret key slot and its in-memory copy.
        See [KeyStorage][nostrid.core.storage.KeyStorage].
    Logger: Structured logger with secret redaction.
        See [Logger][nostrid.core.logger.Logger].
    load_yaml: Safe YAML loading.

Examples:
    ```python
    from nostrid.core import IdentityConfig, KeyStorage, open_store

    config = IdentityConfig.from_yaml("config/nostrid.yaml")
    storage = KeyStorage(open_store(config.storage))
    ```
"""

from .config import IdentityConfig, NostrAuthConfig, StorageConfig
from .exceptions import (
    AuthRequiredError,
    ConfigurationError,
    KeyValidationError,
    NostridError,
    SignerError,
    StorageError,
)
from .logger import Logger, StructuredFormatter, format_kv_pairs, redact
from .storage import JsonFileStore, KeyStorage, KeyValueStore, MemoryStore, open_store
from .yaml import load_yaml


__all__ = [
    "AuthRequiredError",
    "ConfigurationError",
    "IdentityConfig",
    "JsonFileStore",
    "KeyStorage",
    "KeyValidationError",
    "KeyValueStore",
    "Logger",
    "MemoryStore",
    "NostrAuthConfig",
    "NostridError",
    "SignerError",
    "StorageConfig",
    "StorageError",
    "StructuredFormatter",
    "format_kv_pairs",
    "load_yaml",
    "open_store",
    "redact",
]
