"""Unit tests for scopeguard.core.security module."""

from scopeguard.core.security import (
    is_sensitive_field,
    is_sensitive_value,
    mask_api_key,
    truncate_input,
)


class TestMaskApiKey:
    def test_masks_prefixed_key(self) -> None:
        assert mask_api_key("sk-1234567890abcdef") == "sk-...cdef"

    def test_masks_unprefixed_key(self) -> None:
        assert mask_api_key("AIzaSyA1234567890XYZ") == "...0XYZ"

    def test_short_key_fully_masked(self) -> None:
        assert mask_api_key("abc") == "***"

    def test_empty_key(self) -> None:
        assert mask_api_key("") == "<empty>"


class TestSensitiveDetection:
    def test_sensitive_field_names(self) -> None:
        assert is_sensitive_field("api_key")
        assert is_sensitive_field("GEMINI_API_KEY")
        assert is_sensitive_field("authorization")
        assert not is_sensitive_field("session_id")
        assert not is_sensitive_field("")

    def test_sensitive_values(self) -> None:
        assert is_sensitive_value("sk-abc")
        assert is_sensitive_value("AIzaSyExample")
        assert is_sensitive_value("Bearer xyz")
        assert not is_sensitive_value("Build a mobile app")
        assert not is_sensitive_value(42)


class TestTruncateInput:
    def test_short_text_unchanged(self) -> None:
        assert truncate_input("hello", 10) == "hello"

    def test_long_text_truncated_with_suffix(self) -> None:
        assert truncate_input("abcdefghij", 6) == "abc..."
