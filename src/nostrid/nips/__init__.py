"""Nostr protocol helpers (NIP-19 encodings, NIP-98 HTTP auth).

Depends only on ``nostrid.models`` plus ``nostr-sdk`` and ``bech32``.

See Also:
    [nostrid.nips.nip19][]: ``npub`` / ``nprofile`` encode and ``npub`` decode.
    [nostrid.nips.nip98][]: HTTP auth event template, header codec and
        server-side verification.
"""

from .nip19 import decode_npub, encode_nprofile, encode_npub
from .nip98 import (
    build_http_auth_template,
    decode_auth_header,
    encode_auth_header,
    get_tag_value,
    verify_auth_header,
)


__all__ = [
    "build_http_auth_template",
    "decode_auth_header",
    "decode_npub",
    "encode_auth_header",
    "encode_nprofile",
    "encode_npub",
    "get_tag_value",
    "verify_auth_header",
]
