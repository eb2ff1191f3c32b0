"""
Unit Tests for InputValidator
=============================

Test Coverage
-------------
- Integer parsing, bounds and rejection of booleans / fractional floats
- Required and optional strings (trimming, blank handling, length)
- Case-insensitive choice validation
"""

import pytest

from sparkwell.core.validation.input_validator import InputValidator
from sparkwell.modules.shared.exceptions import ValidationError


@pytest.mark.unit
class TestIntegerValidation:
    """Test integer validators."""

    def test_numeric_string_converted(self):
        assert InputValidator.validate_integer("42", "amount") == 42

    def test_integral_float_converted(self):
        assert InputValidator.validate_integer(7.0, "amount") == 7

    @pytest.mark.parametrize("value", [None, True, 2.5, "abc"])
    def test_rejects_non_integers(self, value):
        with pytest.raises(ValidationError):
            InputValidator.validate_integer(value, "amount")

    def test_bounds(self):
        with pytest.raises(ValidationError) as exc_info:
            InputValidator.validate_integer(0, "amount", min_value=1)

        assert exc_info.value.field == "amount"
        assert "at least 1" in exc_info.value.validation_message

        with pytest.raises(ValidationError):
            InputValidator.validate_integer(11, "amount", max_value=10)

    def test_user_id_must_be_positive(self):
        assert InputValidator.validate_user_id(5) == 5
        with pytest.raises(ValidationError):
            InputValidator.validate_user_id(0)

    def test_limit_capped(self):
        with pytest.raises(ValidationError):
            InputValidator.validate_limit(1000)


@pytest.mark.unit
class TestStringValidation:
    """Test string validators."""

    def test_required_string_trimmed(self):
        assert InputValidator.validate_string("  mood_boost ", "reward_id") == "mood_boost"

    @pytest.mark.parametrize("value", [None, "", "   ", 12])
    def test_required_string_rejects_missing(self, value):
        with pytest.raises(ValidationError):
            InputValidator.validate_string(value, "reward_id")

    def test_required_string_max_length(self):
        with pytest.raises(ValidationError):
            InputValidator.validate_string("x" * 11, "reward_id", max_length=10)

    def test_optional_string_blank_is_none(self):
        assert InputValidator.validate_optional_string(None, "text") is None
        assert InputValidator.validate_optional_string("  ", "text") is None
        assert InputValidator.validate_optional_string("hello", "text") == "hello"

    def test_optional_string_max_length(self):
        with pytest.raises(ValidationError):
            InputValidator.validate_optional_string("x" * 5, "text", max_length=4)


@pytest.mark.unit
class TestChoiceValidation:
    """Test choice validation."""

    def test_case_insensitive(self):
        assert InputValidator.validate_choice("WEEKLY", "quest_type", ["daily", "weekly"]) == "weekly"

    def test_unknown_choice(self):
        with pytest.raises(ValidationError) as exc_info:
            InputValidator.validate_choice("monthly", "quest_type", ["daily", "weekly"])

        assert "daily, weekly" in exc_info.value.validation_message
