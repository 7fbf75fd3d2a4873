"""
Unit tests for core.logger module.

Tests:
- Logger initialization and JSON mode
- Structured key=value formatting and escaping
- Secret key redaction in values and messages
- StructuredFormatter output
"""

import json
import logging

import pytest

from nostrid.core import Logger
from nostrid.core.logger import StructuredFormatter, format_kv_pairs, redact


NSEC = "nsec1vl029mgpspedva04g90vltkh6fvh240zqtv9k0t9af8935ke9laqsnlfe5"  # pragma: allowlist secret


class TestInit:
    """Logger initialization."""

    def test_name(self) -> None:
        logger = Logger("nostr_auth")
        assert logger.name == "nostr_auth"

    def test_default_not_json(self) -> None:
        assert Logger("test")._json_output is False

    def test_json_mode(self) -> None:
        assert Logger("test", json_output=True)._json_output is True


class TestRedact:
    """nsec masking."""

    def test_masks_nsec(self) -> None:
        assert redact(f"key={NSEC}") == "key=nsec1***"

    def test_leaves_npub(self) -> None:
        assert redact("npub1abc") == "npub1abc"


class TestFormatKvPairs:
    """Key-value pairs formatting and escaping."""

    def test_simple(self) -> None:
        assert format_kv_pairs({"key": "hello"}) == " key=hello"
        assert format_kv_pairs({"key": 123}) == " key=123"

    def test_with_spaces(self) -> None:
        assert format_kv_pairs({"key": "hello world"}) == ' key="hello world"'

    def test_with_double_quotes(self) -> None:
        assert format_kv_pairs({"key": 'say "hello"'}) == ' key="say \\"hello\\""'

    def test_empty_value(self) -> None:
        assert format_kv_pairs({"key": ""}) == ' key=""'

    def test_empty_dict(self) -> None:
        assert format_kv_pairs({}) == ""

    def test_truncation(self) -> None:
        result = format_kv_pairs({"key": "x" * 1500}, max_value_length=1000)
        assert "truncated" in result

    def test_no_truncation(self) -> None:
        result = format_kv_pairs({"key": "x" * 1500}, max_value_length=None)
        assert "truncated" not in result

    def test_custom_prefix(self) -> None:
        assert format_kv_pairs({"key": "val"}, prefix="") == "key=val"

    def test_redacts_values(self) -> None:
        assert NSEC not in format_kv_pairs({"key": NSEC})


class TestLogging:
    """Emitted records."""

    def test_structured_kv_attached(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = Logger("test_kv")
        with caplog.at_level(logging.INFO, logger="test_kv"):
            logger.info("key_saved", slot="nostr-secret-key", count=1)
        record = caplog.records[-1]
        assert record.getMessage() == "key_saved"
        assert record.structured_kv == {"slot": "nostr-secret-key", "count": 1}  # type: ignore[attr-defined]

    def test_secret_redacted_before_handler(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = Logger("test_redact")
        with caplog.at_level(logging.INFO, logger="test_redact"):
            logger.info("key_saved", key=NSEC)
        assert caplog.records[-1].structured_kv["key"] == "nsec1***"  # type: ignore[attr-defined]

    def test_json_output(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = Logger("test_json", json_output=True)
        with caplog.at_level(logging.WARNING, logger="test_json"):
            logger.warning("auth_required", waited=3.0)
        parsed = json.loads(caplog.records[-1].getMessage())
        assert parsed["message"] == "auth_required"
        assert parsed["level"] == "warning"
        assert parsed["waited"] == 3.0

    def test_disabled_level_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = Logger("test_skip")
        with caplog.at_level(logging.ERROR, logger="test_skip"):
            logger.debug("hidden")
        assert not [r for r in caplog.records if r.name == "test_skip"]

    def test_exception_includes_traceback(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = Logger("test_exc")
        with caplog.at_level(logging.ERROR, logger="test_exc"):
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                logger.exception("failed")
        assert caplog.records[-1].exc_info is not None


class TestStructuredFormatter:
    def test_format_with_kv(self) -> None:
        record = logging.LogRecord("cli", logging.INFO, __file__, 1, "logout", None, None)
        record.structured_kv = {"source": "stored_key"}
        assert StructuredFormatter().format(record) == "info cli logout source=stored_key"

    def test_plain_record_redacted(self) -> None:
        record = logging.LogRecord("x", logging.WARNING, __file__, 1, "bad %s", (NSEC,), None)
        assert StructuredFormatter().format(record) == "warning x bad nsec1***"
