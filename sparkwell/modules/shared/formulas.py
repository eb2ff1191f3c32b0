"""
Sparkwell Reflection Formulas

Purpose
-------
Pure calculation functions that value a submitted reflection: the spark
points it earns and its quality score.

Design Notes
------------
All formulas:
- Are pure and total (never raise)
- Treat absent inputs (None or empty string) as contributing zero
- Take every parameter explicitly

Usage
-----
    from sparkwell.modules.shared.formulas import calculate_points

    points = calculate_points("weekly", text=entry, image_url=url)
"""

from __future__ import annotations

import math
from typing import Optional, Union

from sparkwell.database.models.enums import QuestType
from sparkwell.modules.shared.constants import (
    AUDIO_BONUS,
    AUDIO_QUALITY,
    CHARS_PER_TEXT_POINT,
    DAILY_BASE_POINTS,
    IMAGE_BONUS,
    IMAGE_QUALITY,
    LONG_TEXT_BONUS,
    LONG_TEXT_THRESHOLD,
    MAX_TEXT_QUALITY,
    WEEKLY_BASE_POINTS,
)


def _present(value: Optional[str]) -> bool:
    return bool(value)


def calculate_points(
    quest_type: Union[QuestType, str, None],
    text: Optional[str] = None,
    image_url: Optional[str] = None,
    audio_url: Optional[str] = None,
) -> int:
    """
    Spark points earned by a reflection.

    Base 25 for weekly quests, 10 otherwise; +5 for text longer than 100
    characters; +5 with an image; +5 with audio.

    Example:
        >>> calculate_points("weekly", text="x" * 150, image_url="https://img")
        35
        >>> calculate_points("daily", text="x" * 50)
        10
    """
    kind = quest_type.value if isinstance(quest_type, QuestType) else quest_type
    points = WEEKLY_BASE_POINTS if kind == QuestType.WEEKLY.value else DAILY_BASE_POINTS

    if text and len(text) > LONG_TEXT_THRESHOLD:
        points += LONG_TEXT_BONUS
    if _present(image_url):
        points += IMAGE_BONUS
    if _present(audio_url):
        points += AUDIO_BONUS

    return points


def calculate_quality_score(
    text: Optional[str] = None,
    image_url: Optional[str] = None,
    audio_url: Optional[str] = None,
) -> float:
    """
    Quality score in [0.0, 9.0], rounded half-up to one decimal.

    Text contributes len/20 capped at 5; image and audio add 2 each.

    Example:
        >>> calculate_quality_score(text="x" * 100, image_url="https://img")
        7.0
        >>> calculate_quality_score()
        0.0
    """
    score = 0.0
    if text:
        score += min(len(text) / CHARS_PER_TEXT_POINT, MAX_TEXT_QUALITY)
    if _present(image_url):
        score += IMAGE_QUALITY
    if _present(audio_url):
        score += AUDIO_QUALITY

    # half-up to one decimal (0.25 -> 0.3)
    return math.floor(score * 10 + 0.5) / 10
