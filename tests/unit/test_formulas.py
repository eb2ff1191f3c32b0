"""
Unit Tests for Reflection Formulas
==================================

Test Coverage
-------------
- Spark points by quest type and attached media
- Long-text bonus threshold
- Quality score components, cap and range
- Half-up rounding to one decimal

Testing Strategy
----------------
- Pure functions, no fixtures
- One behavior per test
"""

import pytest

from sparkwell.database.models.enums import QuestType
from sparkwell.modules.shared.formulas import calculate_points, calculate_quality_score


# ============================================================================
# POINTS
# ============================================================================


@pytest.mark.unit
class TestCalculatePoints:
    """Test spark points awarded for a reflection."""

    def test_weekly_long_text_with_image(self):
        """Weekly base 25 + long text 5 + image 5."""
        assert calculate_points("weekly", text="x" * 150, image_url="https://img/1.png") == 35

    def test_daily_short_text(self):
        assert calculate_points("daily", text="x" * 50) == 10

    def test_accepts_enum_quest_type(self):
        assert calculate_points(QuestType.WEEKLY) == 25
        assert calculate_points(QuestType.DAILY) == 10

    def test_unknown_or_missing_type_uses_daily_base(self):
        assert calculate_points(None) == 10
        assert calculate_points("monthly") == 10

    def test_text_at_threshold_earns_no_bonus(self):
        """Bonus needs strictly more than 100 characters."""
        assert calculate_points("daily", text="x" * 100) == 10
        assert calculate_points("daily", text="x" * 101) == 15

    def test_all_media_daily(self):
        points = calculate_points(
            "daily",
            text="x" * 120,
            image_url="https://img/1.png",
            audio_url="https://audio/1.mp3",
        )
        assert points == 25

    def test_empty_strings_count_as_absent(self):
        assert calculate_points("daily", text="", image_url="", audio_url="") == 10


# ============================================================================
# QUALITY SCORE
# ============================================================================


@pytest.mark.unit
class TestCalculateQualityScore:
    """Test reflection quality score."""

    def test_text_and_image(self):
        """100 chars -> 5.0, image -> +2.0."""
        assert calculate_quality_score(text="x" * 100, image_url="https://img/1.png") == 7.0

    def test_nothing_scores_zero(self):
        assert calculate_quality_score() == 0.0
        assert calculate_quality_score(text="", image_url="", audio_url="") == 0.0

    def test_text_contribution_is_capped(self):
        assert calculate_quality_score(text="x" * 5000) == 5.0

    def test_maximum_score(self):
        score = calculate_quality_score(
            text="x" * 500, image_url="https://img", audio_url="https://audio"
        )
        assert score == 9.0

    def test_audio_only(self):
        assert calculate_quality_score(audio_url="https://audio/1.mp3") == 2.0

    @pytest.mark.parametrize(
        "length, expected",
        [
            (5, 0.3),  # 0.25 rounds up
            (15, 0.8),  # 0.75 rounds up
            (40, 2.0),
        ],
    )
    def test_rounds_half_up_to_one_decimal(self, length, expected):
        assert calculate_quality_score(text="x" * length) == expected

    @pytest.mark.parametrize("length", [0, 1, 19, 20, 99, 100, 101, 10_000])
    def test_score_stays_in_range(self, length):
        score = calculate_quality_score(
            text="x" * length, image_url="https://img", audio_url="https://audio"
        )
        assert 0.0 <= score <= 9.0
