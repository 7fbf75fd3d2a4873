"""NIP-98 HTTP authentication events.

Builds the unsigned kind 27235 template bound to a request URL and method,
encodes a signed event into an ``Authorization`` header value, and performs
the server-side checks a receiving endpoint applies to such a header.

Header format::

    Nostr <base64(compact JSON of the signed event)>

The template is a plain ``dict`` with the NIP-07 ``signEvent`` input shape
(``kind``, ``created_at``, ``tags``, ``content``) so that both the local key
signer and an injected signer consume the same value.

See Also:
    [nostrid.services.nostr_auth.NostrAuthService][]: Chooses the signer and
        calls these helpers.
"""

from __future__ import annotations

import base64
import binascii
import json
import time
from typing import Any

from nostr_sdk import Event

from nostrid.models.constants import HTTP_AUTH_SCHEME, EventKind


DEFAULT_TIME_WINDOW = 60  # seconds a server accepts around ``created_at``

_REQUIRED_FIELDS = ("id", "pubkey", "created_at", "kind", "tags", "content", "sig")


def build_http_auth_template(url: str, method: str, created_at: int | None = None) -> dict[str, Any]:
    """Build the unsigned kind 27235 event for one request.

    Args:
        url: Absolute request URL, copied verbatim into the ``u`` tag.
        method: HTTP method; stored upper-case in the ``method`` tag.
        created_at: Unix timestamp (defaults to now).

    Raises:
        ValueError: If *url* or *method* is empty.
    """
    if not url:
        raise ValueError("url must not be empty")
    if not method:
        raise ValueError("method must not be empty")
    return {
        "kind": int(EventKind.HTTP_AUTH),
        "created_at": int(time.time()) if created_at is None else created_at,
        "tags": [["u", url], ["method", method.upper()]],
        "content": "",
    }


def encode_auth_header(event: dict[str, Any], *, include_scheme: bool = True) -> str:
    """Encode a signed event as a header value.

    Serialization is compact and key-order stable so the same event always
    yields the same header.
    """
    payload = json.dumps(event, separators=(",", ":"), ensure_ascii=False)
    token = base64.b64encode(payload.encode("utf-8")).decode("ascii")
    return f"{HTTP_AUTH_SCHEME} {token}" if include_scheme else token


def decode_auth_header(header: str) -> dict[str, Any]:
    """Decode a header value (with or without the ``Nostr`` scheme) to the event dict.

    Raises:
        ValueError: If the value is not base64-encoded JSON of an event object.
    """
    token = header.strip()
    scheme, _, rest = token.partition(" ")
    if rest and scheme.lower() == HTTP_AUTH_SCHEME.lower():
        token = rest.strip()
    try:
        event = json.loads(base64.b64decode(token, validate=True).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValueError(f"malformed auth header: {e}") from e
    if not isinstance(event, dict) or any(f not in event for f in _REQUIRED_FIELDS):
        raise ValueError("auth header does not contain a signed event")
    return event


def get_tag_value(event: dict[str, Any], name: str) -> str | None:
    """Return the first value of tag *name*, or ``None``."""
    for tag in event.get("tags", []):
        if isinstance(tag, list) and len(tag) >= 2 and tag[0] == name:  # noqa: PLR2004
            return str(tag[1])
    return None


def verify_auth_header(
    header: str,
    url: str,
    method: str,
    *,
    now: int | None = None,
    window: int = DEFAULT_TIME_WINDOW,
) -> dict[str, Any]:
    """Validate a header the way a receiving server does.

    Checks, in order: decoding, kind, ``u`` and ``method`` binding,
    timestamp freshness, and the event id/signature.

    Returns:
        The decoded event on success.

    Raises:
        ValueError: Naming the first check that failed.
    """
    event = decode_auth_header(header)
    if event["kind"] != EventKind.HTTP_AUTH:
        raise ValueError(f"unexpected kind {event['kind']}")
    if get_tag_value(event, "u") != url:
        raise ValueError("url tag does not match request")
    if (get_tag_value(event, "method") or "").upper() != method.upper():
        raise ValueError("method tag does not match request")
    current = int(time.time()) if now is None else now
    if abs(current - int(event["created_at"])) > window:
        raise ValueError("event timestamp outside accepted window")
    try:
        signed = Event.from_json(json.dumps(event))
    except Exception as e:  # nostr_sdk raises its own error types
        raise ValueError(f"event rejected by parser: {e}") from e
    if not signed.verify():
        raise ValueError("invalid event signature")
    return event
