"""Utilities: key validation/derivation and event signers.

Attributes:
    keys: ``nsec`` syntax checks, public key derivation and re-encoding.
        Never raises on the UI input path.
    signer: Local key signer, the injected signer protocol and the
        capability probe used to find it.

Note:
    The utils layer has **zero** imports from ``nostrid.core`` or
    ``nostrid.services``.

Examples:
    ```python
    from nostrid.utils.keys import derive_public_key
    from nostrid.utils.signer import ExternalAuthChecker, SignerHost
    ```
"""

from .keys import (
    derive_public_key,
    encode_public_key_hex,
    is_valid_secret_key,
    parse_keys,
    public_key_data_from_hex,
)
from .signer import ExternalAuthChecker, ExternalSigner, LocalKeySigner, SignerHost


__all__ = [
    "ExternalAuthChecker",
    "ExternalSigner",
    "LocalKeySigner",
    "SignerHost",
    "derive_public_key",
    "encode_public_key_hex",
    "is_valid_secret_key",
    "parse_keys",
    "public_key_data_from_hex",
]
