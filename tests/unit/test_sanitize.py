"""Tests for utils/sanitize.py."""

from __future__ import annotations

from evvl.utils.sanitize import sanitize_error, sanitize_payload


class TestSanitizeError:
    def test_redacts_provider_keys(self):
        message = "bad key sk-ant-api03-abcdef and sk-or-v1-123456 and AIzaSyA1234567890abcdefghijk"
        sanitized = sanitize_error(message)
        assert "sk-ant-api03" not in sanitized
        assert "sk-or-v1" not in sanitized
        assert "AIza" not in sanitized
        assert sanitized.count("[REDACTED_KEY]") == 3

    def test_redacts_headers_and_query_keys(self):
        sanitized = sanitize_error("Authorization: Bearer abc123 url=https://x/y?key=secret&alt=json")
        assert "abc123" not in sanitized
        assert "secret" not in sanitized
        assert "alt=json" in sanitized

    def test_empty(self):
        assert sanitize_error("") == ""


class TestSanitizePayload:
    def test_redacts_key_without_mutating(self):
        payload = {"provider": "openai", "apiKey": "sk-live"}
        redacted = sanitize_payload(payload)
        assert redacted["apiKey"] == "[REDACTED]"
        assert payload["apiKey"] == "sk-live"
