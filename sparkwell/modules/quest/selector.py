"""
Quest recommendation rules.

`select_quest` is pure: the same profile, date and catalog always produce
the same quest. Rules are evaluated in order and the first match wins:

1. no profile                          -> first catalog quest
2. stressed mood, "often" frequency or
   fewer than two coping mechanisms     -> Mindful Walk
3. "Connection" among primary needs     -> Reach Out
4. "Gratitude" among growth areas       -> Gratitude Journal
5. otherwise                            -> catalog[day of month % size]

A rule whose target title is missing from the catalog falls back to the
first quest.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional, Tuple

from sparkwell.database.models.enums import MoodFrequency
from sparkwell.domain.models.profile import ProfileSnapshot
from sparkwell.domain.models.quest import Quest
from sparkwell.modules.quest.catalog import QuestCatalog
from sparkwell.modules.shared.constants import (
    CONNECTION_NEED,
    GRATITUDE_GROWTH_AREA,
    GRATITUDE_JOURNAL,
    MIN_COPING_MECHANISMS,
    MINDFUL_WALK,
    REACH_OUT,
    STRESSED_MOOD,
)


@dataclass(frozen=True)
class QuestRule:
    name: str
    matches: Callable[[ProfileSnapshot], bool]
    quest_title: str


def _needs_calming(profile: ProfileSnapshot) -> bool:
    mood = profile.mood
    return (
        mood.general == STRESSED_MOOD
        or mood.frequency is MoodFrequency.OFTEN
        or len(mood.coping_mechanisms) < MIN_COPING_MECHANISMS
    )


def _needs_connection(profile: ProfileSnapshot) -> bool:
    return CONNECTION_NEED in profile.emotional_needs.primary


def _growing_gratitude(profile: ProfileSnapshot) -> bool:
    return GRATITUDE_GROWTH_AREA in profile.self_perception.growth_areas


RULES: Tuple[QuestRule, ...] = (
    QuestRule("calming", _needs_calming, MINDFUL_WALK),
    QuestRule("connection", _needs_connection, REACH_OUT),
    QuestRule("gratitude", _growing_gratitude, GRATITUDE_JOURNAL),
)


def matching_rule(profile: Optional[ProfileSnapshot]) -> Optional[QuestRule]:
    """First rule that matches `profile`, or None (rotation applies)."""
    if profile is None:
        return None
    for rule in RULES:
        if rule.matches(profile):
            return rule
    return None


def select_quest(
    profile: Optional[ProfileSnapshot],
    today: date,
    catalog: QuestCatalog,
) -> Quest:
    """
    Recommend today's quest.

    Example:
        >>> select_quest(None, date(2024, 6, 3), catalog).title
        'Gratitude Journal'
    """
    if profile is None:
        return catalog.first

    rule = matching_rule(profile)
    if rule is not None:
        return catalog.by_title(rule.quest_title) or catalog.first

    return catalog.at(today.day % len(catalog))
