"""Tests for local answer checking"""

import pytest

from bamboozled.services.answer_validator import AnswerValidator


class TestAnswerValidator:
    """Test cases for AnswerValidator"""

    @pytest.fixture
    def validator(self):
        return AnswerValidator()

    def test_normalize(self, validator):
        assert validator.normalize("  Falling   TEMPERATURE!  ") == "falling temperature"
        assert validator.normalize("Mind-Over-Matter") == "mind over matter"
        assert validator.normalize("Don't stop") == "dont stop"
        assert validator.normalize("?!.") == ""

    @pytest.mark.parametrize("guess", [
        "Falling Temperature",
        "falling temperature",
        "FALLING TEMPERATURE!!",
        "  falling    temperature ",
        "falling-temperature",
        "fallingtemperature",
    ])
    def test_correct_guesses(self, validator, guess):
        assert validator.is_correct(guess, "Falling Temperature") is True

    @pytest.mark.parametrize("guess", [
        "rising temperature",
        "falling",
        "temperature falling",
        "",
        "   ",
        "!!!",
    ])
    def test_incorrect_guesses(self, validator, guess):
        assert validator.is_correct(guess, "Falling Temperature") is False

    def test_spacing_differences_match(self, validator):
        assert validator.is_correct("sun flower", "Sunflower") is True
        assert validator.is_correct("sunflower", "Sun Flower") is True
