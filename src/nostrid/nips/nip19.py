"""NIP-19 bech32 encodings for public keys.

Encodes raw 32-byte public keys as ``npub`` and ``nprofile`` strings and
decodes ``npub`` back to hex. Encoding works on the bytes alone and does
not check that the key is a point on the curve; keys announced by an
external login are displayed as-is.

The ``nprofile`` payload is a TLV stream: type ``0`` carries the 32-byte
public key and each type ``1`` entry carries one relay URL.

Examples:
    ```python
    npub = encode_npub("7e7e9c42a91bfef19fa929e5fda1b72e0ebc1a4c1141673e2794234d86addf4e")
    decode_npub(npub)  # back to the hex string
    ```
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from bech32 import bech32_decode, bech32_encode, convertbits

from nostrid.models._validation import is_hex32


if TYPE_CHECKING:
    from collections.abc import Iterable


_TLV_SPECIAL = 0
_TLV_RELAY = 1
_MAX_TLV_VALUE = 255


def _encode(hrp: str, payload: bytes) -> str:
    data = convertbits(payload, 8, 5, True)
    if data is None:
        raise ValueError(f"cannot convert {hrp} payload to 5-bit groups")
    return bech32_encode(hrp, data)


def _public_key_bytes(pubkey_hex: str) -> bytes:
    if not isinstance(pubkey_hex, str) or not is_hex32(pubkey_hex.lower()):
        raise ValueError("public key must be 64 hex characters")
    return bytes.fromhex(pubkey_hex)


def encode_npub(pubkey_hex: str) -> str:
    """Encode a hex public key as ``npub1...``.

    Raises:
        ValueError: If *pubkey_hex* is not 64 hex characters.
    """
    return _encode("npub", _public_key_bytes(pubkey_hex))


def encode_nprofile(pubkey_hex: str, relays: Iterable[str] = ()) -> str:
    """Encode a hex public key and optional relay hints as ``nprofile1...``.

    Raises:
        ValueError: If *pubkey_hex* is malformed or a relay URL is longer
            than 255 bytes.
    """
    tlv = bytearray([_TLV_SPECIAL, 32])
    tlv += _public_key_bytes(pubkey_hex)
    for relay in relays:
        raw = relay.encode("utf-8")
        if len(raw) > _MAX_TLV_VALUE:
            raise ValueError(f"relay url too long for nprofile: {relay}")
        tlv += bytes([_TLV_RELAY, len(raw)]) + raw
    return _encode("nprofile", bytes(tlv))


def decode_npub(npub: str) -> str:
    """Decode an ``npub1...`` string to lowercase hex.

    Raises:
        ValueError: If the string is not a well-formed ``npub`` with a
            32-byte payload.
    """
    hrp, data = bech32_decode(npub)
    if hrp != "npub" or data is None:
        raise ValueError("invalid npub")
    decoded = convertbits(data, 5, 8, False)
    if decoded is None or len(decoded) != 32:  # noqa: PLR2004
        raise ValueError("invalid npub payload")
    return bytes(decoded).hex()
