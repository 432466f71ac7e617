"""
Unit Tests for Input Validation
"""

import pytest

from gubaye.core.validation import (
    ValidationError,
    normalize_text,
    validate_batch_label,
    validate_email,
    validate_phone_number,
)


class TestNormalizeText:
    def test_collapses_whitespace(self):
        assert normalize_text("  Blue   Family ") == "Blue Family"

    def test_none_becomes_empty(self):
        assert normalize_text(None) == ""


class TestBatchLabel:
    @pytest.mark.parametrize("raw", ["2023/2024", "2023-2024", " 2023 / 2024 "])
    def test_accepted_formats(self, raw):
        assert validate_batch_label(raw) == "2023/2024"

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_empty_is_unset(self, raw):
        assert validate_batch_label(raw) == ""

    @pytest.mark.parametrize("raw", ["2023", "23/24", "batch one"])
    def test_malformed(self, raw):
        with pytest.raises(ValidationError, match="Invalid batch format"):
            validate_batch_label(raw)

    def test_years_must_be_consecutive(self):
        with pytest.raises(ValidationError, match="Invalid batch range"):
            validate_batch_label("2023/2025")


class TestPhoneNumber:
    def test_strips_separators(self):
        assert validate_phone_number("+251 (91) 123-4567") == "+251911234567"

    def test_empty_is_none(self):
        assert validate_phone_number("  ") is None

    def test_letters_rejected(self):
        with pytest.raises(ValidationError):
            validate_phone_number("09ABC12345")

    def test_too_short(self):
        with pytest.raises(ValidationError, match="length"):
            validate_phone_number("12345")


class TestEmail:
    def test_lowercased(self):
        assert validate_email(" Sara@Example.ORG ") == "sara@example.org"

    def test_invalid(self):
        with pytest.raises(ValidationError):
            validate_email("not-an-email")

    def test_empty_is_none(self):
        assert validate_email("") is None
