"""NIP-98 HTTP auth header builder.

[NostrAuthService][nostrid.services.nostr_auth.NostrAuthService] turns "the
user is about to upload" into an ``Authorization`` header value. Signer
resolution order:

1. A stored secret key (in-memory copy, then the durable slot) signs
   locally without waiting.
2. Otherwise the injected signer is probed once.
3. Otherwise the probe is repeated every ``poll_interval`` seconds until
   ``max_wait`` seconds have passed on the monotonic clock. The injected
   signer and this process may finish starting up in either order.

The resolved signer signs a kind 27235 event bound to the request URL and
method, and the signed event is returned as ``Nostr <base64 json>``.

Note:
    The deadline only stops the waiting. An injected signer call already in
    flight cannot be cancelled; signing is bounded separately by
    ``sign_timeout``.

See Also:
    [nostrid.nips.nip98.verify_auth_header][]: Server-side counterpart.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Any

from nostrid.core.config import NostrAuthConfig
from nostrid.core.exceptions import AuthRequiredError, KeyValidationError, SignerError
from nostrid.core.logger import Logger
from nostrid.nips.nip98 import build_http_auth_template, encode_auth_header
from nostrid.utils.signer import LocalKeySigner


if TYPE_CHECKING:
    from nostrid.utils.signer import ExternalSigner

    from .key_manager import KeyManager


class NostrAuthService:
    """Builds per-request NIP-98 authorization headers.

    Holds no key material between calls: a stored key is read and wrapped in
    a throwaway [LocalKeySigner][nostrid.utils.signer.LocalKeySigner] on
    every call.

    Args:
        key_manager: Source of the stored key and the injected signer probe.
        config: Poll and signing timeouts.
        json_output: Emit JSON log lines instead of key=value pairs.
    """

    def __init__(
        self,
        key_manager: KeyManager,
        config: NostrAuthConfig | None = None,
        *,
        json_output: bool = False,
    ) -> None:
        self._key_manager = key_manager
        self._config = config or NostrAuthConfig()
        self._logger = Logger("nostr_auth", json_output=json_output)

    @property
    def config(self) -> NostrAuthConfig:
        return self._config

    async def build_auth_header(self, url: str, method: str = "POST") -> str:
        """Sign a NIP-98 event for *url*/*method* and return the header value.

        The ``method`` tag always carries the uppercased method (``"put"``
        is signed as ``"PUT"``).

        Args:
            url: Absolute URL of the request being authenticated.
            method: HTTP method, case-insensitive.

        Returns:
            ``"Nostr " + base64(compact JSON of the signed event)``.

        Raises:
            AuthRequiredError: No stored key and no injected signer appeared
                within ``max_wait`` seconds.
            KeyValidationError: The stored key cannot be decoded.
            SignerError: The stored key failed to sign, or the injected signer
                rejected the event or did not answer within ``sign_timeout``
                seconds.
        """
        nsec = self._key_manager.load_from_storage()
        if nsec:
            try:
                signer = LocalKeySigner.from_nsec(nsec)
            except Exception as e:  # nostr_sdk raises its own error types
                raise KeyValidationError("stored secret key cannot be decoded") from e
            template = build_http_auth_template(url, method)
            try:
                signed = await signer.sign_event(template)
            except Exception as e:  # nostr_sdk raises its own error types
                self._logger.error("local_sign_failed", error_type=type(e).__name__)
                raise SignerError("stored secret key could not sign the auth event") from e
            self._logger.debug("auth_header_signed", source="stored_key", method=method.upper())
            return encode_auth_header(signed)

        external = await self.wait_for_signer()
        if external is None:
            self._logger.warning("auth_required", waited=self._config.max_wait)
            raise AuthRequiredError("authentication required: no signer available")

        template = build_http_auth_template(url, method)
        signed = await self._sign_external(external, template)
        self._logger.debug("auth_header_signed", source="external_signer", method=method.upper())
        return encode_auth_header(signed)

    async def wait_for_signer(self) -> ExternalSigner | None:
        """Return the injected signer as soon as it is ready, or ``None`` at the deadline.

        The first probe happens immediately. After that the loop sleeps
        ``poll_interval`` seconds (never past the deadline) between probes.
        """
        signer = self._key_manager.detect_signer()
        if signer is not None:
            return signer

        deadline = time.monotonic() + self._config.max_wait
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return None
            await asyncio.sleep(min(self._config.poll_interval, remaining))
            signer = self._key_manager.detect_signer()
            if signer is not None:
                return signer

    async def _sign_external(self, signer: ExternalSigner, template: dict[str, Any]) -> dict[str, Any]:
        try:
            return await asyncio.wait_for(signer.sign_event(template), self._config.sign_timeout)
        except TimeoutError as e:
            raise SignerError(
                f"injected signer did not sign within {self._config.sign_timeout}s"
            ) from e
        except Exception as e:  # any rejection from the injected signer
            self._logger.error("external_sign_failed", error=str(e))
            raise SignerError("injected signer rejected the auth event") from e
