"""Nostr secret key validation and public key derivation.

The helpers here sit on the synchronous, per-keystroke input path, so
everything except [parse_keys][nostrid.utils.keys.parse_keys] reports
failure through an empty sentinel rather than raising.

Warning:
    Secret keys must **never** be logged. Failures are logged without the
    offending value.

Examples:
    ```python
    is_valid_secret_key("nsec1...")          # syntax check only
    data = derive_public_key("nsec1...")     # PublicKeyData, empty on failure
    encode_public_key_hex(data.hex)          # "npub1..."
    ```
"""

from __future__ import annotations

import logging
import re

from nostr_sdk import Keys

from nostrid.models.constants import BECH32_CHARSET, NSEC_PAYLOAD_LENGTH, NSEC_PREFIX
from nostrid.models.identity import PublicKeyData
from nostrid.nips.nip19 import encode_nprofile, encode_npub


logger = logging.getLogger(__name__)

_NSEC_RE = re.compile(rf"^{NSEC_PREFIX}[{BECH32_CHARSET}]{{{NSEC_PAYLOAD_LENGTH}}}$")


def is_valid_secret_key(key: str) -> bool:
    """Return True if *key* has the ``nsec1`` prefix and the fixed nsec length.

    This is a syntactic check only. A key that passes can still fail at
    derivation time (bad checksum, out-of-range scalar).
    """
    return isinstance(key, str) and bool(_NSEC_RE.match(key))


def parse_keys(nsec: str) -> Keys:
    """Parse an ``nsec`` into a signing key pair.

    Raises:
        ValueError: If *nsec* does not carry the ``nsec1`` prefix.
        nostr_sdk.NostrSdkError: If the payload does not decode to a valid scalar.
    """
    if not nsec.startswith(NSEC_PREFIX):
        raise ValueError("secret key must be nsec-encoded")
    return Keys.parse(nsec)


def public_key_data_from_hex(pubkey_hex: str) -> PublicKeyData:
    """Build all three encodings for a hex public key.

    Raises:
        ValueError: If *pubkey_hex* is not 64 hex characters.
    """
    normalized = pubkey_hex.lower()
    return PublicKeyData(
        hex=normalized,
        npub=encode_npub(normalized),
        nprofile=encode_nprofile(normalized),
    )


def derive_public_key(nsec: str) -> PublicKeyData:
    """Derive the public key encodings for an ``nsec``.

    Returns:
        The populated [PublicKeyData][nostrid.models.identity.PublicKeyData],
        or the empty instance if decoding or derivation fails for any reason.
        Callers treat "all fields empty" as the failure indicator.
    """
    try:
        keys = parse_keys(nsec)
        return public_key_data_from_hex(keys.public_key().to_hex())
    except Exception as e:  # nostr_sdk raises its own error types
        logger.debug("public key derivation failed: %s", type(e).__name__)
        return PublicKeyData.empty()


def encode_public_key_hex(pubkey_hex: str) -> str:
    """Re-encode a hex public key as ``npub``; returns ``""`` on malformed input."""
    if not pubkey_hex:
        return ""
    try:
        return encode_npub(pubkey_hex)
    except ValueError:
        logger.warning("cannot encode malformed public key hex")
        return ""
