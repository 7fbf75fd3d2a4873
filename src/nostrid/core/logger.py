"""
Structured logging with key=value and JSON output support.

Wraps the standard library ``logging`` module so services emit
``event_name key=value ...`` lines (or JSON objects) instead of prose.
Any value that looks like an ``nsec`` secret key is masked before it
reaches a handler, so a stray ``logger.info("saved", key=key)`` cannot leak
key material.

The ``StructuredFormatter`` reads structured data from the ``structured_kv``
extra field attached by ``Logger``; installed on the root handler by the
CLI, it also formats plain ``logging.getLogger()`` records from the models,
nips and utils layers.

Examples:
    ```python
    from nostrid.core.logger import Logger

    logger = Logger("nostr_auth")
    logger.info("signer_resolved", source="stored_key")
    # Output: signer_resolved source=stored_key

    logger.info("key_saved", key="nsec1abc...")
    # Output: key_saved key=nsec1***
    ```
"""

from __future__ import annotations

import datetime
import json
import logging
import re
from typing import Any, ClassVar


_NSEC_RE = re.compile(r"nsec1[0-9a-z]+")
_REDACTED = "nsec1***"


def redact(value: str) -> str:
    """Mask every ``nsec1...`` token in *value*."""
    return _NSEC_RE.sub(_REDACTED, value)


def format_kv_pairs(
    kwargs: dict[str, Any],
    max_value_length: int | None = 1000,
    prefix: str = " ",
) -> str:
    """Format a dictionary as space-separated key=value pairs.

    Values are redacted, truncated to ``max_value_length`` characters, and
    quoted when they contain whitespace, equals signs or quotes.

    Args:
        kwargs: Key-value pairs to format.
        max_value_length: Maximum characters per value before truncation.
            Pass None to disable truncation.
        prefix: String prepended to the output (default: single space).

    Returns:
        Formatted string, e.g. ' key1=value1 key2="value with spaces"'.
        Returns empty string if kwargs is empty.
    """
    if not kwargs:
        return ""

    parts = []
    for k, v in kwargs.items():
        s = redact(str(v))
        if max_value_length and len(s) > max_value_length:
            s = s[:max_value_length] + f"...<truncated {len(s) - max_value_length} chars>"
        if not s or " " in s or "=" in s or '"' in s or "'" in s:
            escaped = s.replace("\\", "\\\\").replace('"', '\\"')
            parts.append(f'{k}="{escaped}"')
        else:
            parts.append(f"{k}={s}")

    return prefix + " ".join(parts)


class StructuredFormatter(logging.Formatter):
    """Formats log records as ``level name message key=value ...``."""

    def format(self, record: logging.LogRecord) -> str:
        base = f"{record.levelname.lower()} {record.name} {redact(record.getMessage())}"
        extra: dict[str, Any] = getattr(record, "structured_kv", {})
        if extra:
            base += format_kv_pairs(extra)
        if record.exc_info:
            base += "\n" + self.formatException(record.exc_info)
        return base


class Logger:
    """Structured logger that appends keyword arguments as extra fields.

    All public methods mirror the standard logging API with an added
    ``**kwargs`` parameter.

    Args:
        name: Logger name, typically the component name
            (``identity_state``, ``nostr_auth``...).
        json_output: If True, emit JSON objects instead of key=value pairs.
        max_value_length: Truncation limit for individual values.
    """

    _DEFAULT_MAX_VALUE_LENGTH: ClassVar[int] = 1000

    def __init__(
        self,
        name: str,
        *,
        json_output: bool = False,
        max_value_length: int | None = None,
    ) -> None:
        if max_value_length is None:
            max_value_length = self._DEFAULT_MAX_VALUE_LENGTH
        self._logger = logging.getLogger(name)
        self._json_output = json_output
        self._max_value_length = max_value_length

    @property
    def name(self) -> str:
        return self._logger.name

    def _clean(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        """Redact and pre-truncate values so handlers receive safe data."""
        cleaned: dict[str, Any] = {}
        for k, v in kwargs.items():
            if isinstance(v, bool | int | float) or v is None:
                cleaned[k] = v
                continue
            s = redact(str(v))
            if self._max_value_length and len(s) > self._max_value_length:
                s = (
                    s[: self._max_value_length]
                    + f"...<truncated {len(s) - self._max_value_length} chars>"
                )
            cleaned[k] = s
        return cleaned

    def _format_json(self, msg: str, level: str, kwargs: dict[str, Any]) -> str:
        record = {
            "timestamp": datetime.datetime.now(datetime.UTC).isoformat(),
            "level": level,
            "logger": self._logger.name,
            "message": msg,
            **kwargs,
        }
        return json.dumps(record, default=str)

    def _log(self, level: int, msg: str, kwargs: dict[str, Any], *, exc_info: bool = False) -> None:
        if not self._logger.isEnabledFor(level):
            return
        cleaned = self._clean(kwargs)
        if self._json_output:
            name = logging.getLevelName(level).lower()
            self._logger.log(level, self._format_json(msg, name, cleaned), exc_info=exc_info)
        else:
            extra = {"structured_kv": cleaned} if cleaned else {}
            self._logger.log(level, msg, extra=extra, exc_info=exc_info)

    def debug(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, kwargs)

    def exception(self, msg: str, **kwargs: Any) -> None:
        """Log at ERROR level with the active exception's traceback."""
        self._log(logging.ERROR, msg, kwargs, exc_info=True)
