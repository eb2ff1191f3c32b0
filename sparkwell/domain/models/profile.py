"""
Profile domain model for Sparkwell.

Purpose
-------
A closed, explicitly-typed snapshot of the onboarding self-profile. The
quest selector reads it, so every field the rules touch has a defined type
and a defined "absent" value (empty set / None) instead of optional nested
lookups.

Sections are persisted as camelCase JSON documents (the questionnaire's
wire shape); `from_dict` accepts camelCase or snake_case keys and
`to_dict` writes camelCase.

Usage Example
-------------
>>> snapshot = ProfileSnapshot.from_db(profile_row, mood_rows)
>>> snapshot.mood.frequency
<MoodFrequency.OFTEN: 'often'>
>>> snapshot.is_onboarding_complete
False
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from sparkwell.core.database.base import ensure_utc
from sparkwell.database.models.enums import MoodFrequency, ProfileStep
from sparkwell.domain.models.base import (
    DomainValidationError,
    optional_str,
    ordered_unique,
    pick,
    string_set,
    string_tuple,
)

if TYPE_CHECKING:
    from sparkwell.database.models.profile.mood_log_entry import (
        MoodLogEntry as MoodLogEntryDB,
    )
    from sparkwell.database.models.profile.user_profile import UserProfile

REQUIRED_STEPS: Tuple[str, ...] = tuple(step.value for step in ProfileStep)


def parse_frequency(value: Any, strict: bool = False) -> Optional[MoodFrequency]:
    """
    Parse a mood frequency label.

    Unknown values become None when reading stored data; with `strict=True`
    (incoming step updates) they raise DomainValidationError.
    """
    text = optional_str(value)
    if text is None:
        return None
    try:
        return MoodFrequency(text.lower())
    except ValueError:
        if strict:
            raise DomainValidationError(
                f"frequency must be one of "
                f"{', '.join(f.value for f in MoodFrequency)}, got {value!r}",
                field="frequency",
            )
        return None


# ============================================================================
# SECTIONS
# ============================================================================


@dataclass(frozen=True)
class MoodProfile:
    general: Optional[str] = None
    frequency: Optional[MoodFrequency] = None
    triggers: FrozenSet[str] = frozenset()
    coping_mechanisms: FrozenSet[str] = frozenset()

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]], strict: bool = False) -> "MoodProfile":
        data = dict(data or {})
        return cls(
            general=optional_str(data.get("general")),
            frequency=parse_frequency(data.get("frequency"), strict=strict),
            triggers=string_set(data.get("triggers")),
            coping_mechanisms=string_set(
                pick(data, "copingMechanisms", "coping_mechanisms")
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "general": self.general,
            "frequency": self.frequency.value if self.frequency else None,
            "triggers": sorted(self.triggers),
            "copingMechanisms": sorted(self.coping_mechanisms),
        }


@dataclass(frozen=True)
class PersonalityTraits:
    mbti: Optional[str] = None
    enneagram: Optional[str] = None
    big_five: Mapping[str, float] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]], strict: bool = False) -> "PersonalityTraits":
        data = dict(data or {})
        raw_big_five = pick(data, "bigFive", "big_five", default={}) or {}
        big_five: Dict[str, float] = {}
        for trait, score in dict(raw_big_five).items():
            if score is None:
                continue
            try:
                big_five[str(trait)] = float(score)
            except (TypeError, ValueError):
                if strict:
                    raise DomainValidationError(
                        f"bigFive.{trait} must be a number, got {score!r}",
                        field="bigFive",
                    )
        return cls(
            mbti=optional_str(data.get("mbti")),
            enneagram=optional_str(data.get("enneagram")),
            big_five=big_five,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mbti": self.mbti,
            "enneagram": self.enneagram,
            "bigFive": dict(self.big_five),
        }


@dataclass(frozen=True)
class EmotionalNeeds:
    primary: FrozenSet[str] = frozenset()
    secondary: FrozenSet[str] = frozenset()
    unmet_needs: FrozenSet[str] = frozenset()
    support_preferences: FrozenSet[str] = frozenset()

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]], strict: bool = False) -> "EmotionalNeeds":
        data = dict(data or {})
        return cls(
            primary=string_set(data.get("primary")),
            secondary=string_set(data.get("secondary")),
            unmet_needs=string_set(pick(data, "unmetNeeds", "unmet_needs")),
            support_preferences=string_set(
                pick(data, "supportPreferences", "support_preferences")
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primary": sorted(self.primary),
            "secondary": sorted(self.secondary),
            "unmetNeeds": sorted(self.unmet_needs),
            "supportPreferences": sorted(self.support_preferences),
        }


@dataclass(frozen=True)
class SelfPerception:
    strengths: FrozenSet[str] = frozenset()
    weaknesses: FrozenSet[str] = frozenset()
    growth_areas: FrozenSet[str] = frozenset()
    values: FrozenSet[str] = frozenset()

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]], strict: bool = False) -> "SelfPerception":
        data = dict(data or {})
        return cls(
            strengths=string_set(data.get("strengths")),
            weaknesses=string_set(data.get("weaknesses")),
            growth_areas=string_set(pick(data, "growthAreas", "growth_areas")),
            values=string_set(data.get("values")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strengths": sorted(self.strengths),
            "weaknesses": sorted(self.weaknesses),
            "growthAreas": sorted(self.growth_areas),
            "values": sorted(self.values),
        }


@dataclass(frozen=True)
class QuestResponses:
    past_challenges: Tuple[str, ...] = ()
    coping_strategies: Tuple[str, ...] = ()
    future_goals: Tuple[str, ...] = ()
    support_system: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]], strict: bool = False) -> "QuestResponses":
        data = dict(data or {})
        return cls(
            past_challenges=string_tuple(pick(data, "pastChallenges", "past_challenges")),
            coping_strategies=string_tuple(
                pick(data, "copingStrategies", "coping_strategies")
            ),
            future_goals=string_tuple(pick(data, "futureGoals", "future_goals")),
            support_system=string_tuple(pick(data, "supportSystem", "support_system")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pastChallenges": list(self.past_challenges),
            "copingStrategies": list(self.coping_strategies),
            "futureGoals": list(self.future_goals),
            "supportSystem": list(self.support_system),
        }


# Step name -> (section class, attribute name on both snapshot and ORM row)
SECTION_TYPES: Dict[str, Tuple[type, str]] = {
    ProfileStep.MOOD.value: (MoodProfile, "mood"),
    ProfileStep.PERSONALITY_TRAITS.value: (PersonalityTraits, "personality_traits"),
    ProfileStep.EMOTIONAL_NEEDS.value: (EmotionalNeeds, "emotional_needs"),
    ProfileStep.SELF_PERCEPTION.value: (SelfPerception, "self_perception"),
    ProfileStep.QUEST_RESPONSES.value: (QuestResponses, "quest_responses"),
}


@dataclass(frozen=True)
class MoodLogEntry:
    """One entry of the append-only mood history."""

    date: datetime
    general: Optional[str] = None
    frequency: Optional[MoodFrequency] = None
    triggers: FrozenSet[str] = frozenset()
    coping_mechanisms: FrozenSet[str] = frozenset()

    @classmethod
    def from_db(cls, row: "MoodLogEntryDB") -> "MoodLogEntry":
        return cls(
            date=ensure_utc(row.logged_at),
            general=row.general,
            frequency=parse_frequency(row.frequency),
            triggers=string_set(row.triggers),
            coping_mechanisms=string_set(row.coping_mechanisms),
        )


# ============================================================================
# SNAPSHOT
# ============================================================================


def onboarding_complete(completed_steps: Iterable[str]) -> bool:
    """True once every required questionnaire step is done or skipped."""
    done = set(completed_steps)
    return all(step in done for step in REQUIRED_STEPS)


@dataclass(frozen=True)
class ProfileSnapshot:
    """Immutable view of a user's profile at read time."""

    user_id: int
    mood: MoodProfile = field(default_factory=MoodProfile)
    personality_traits: PersonalityTraits = field(default_factory=PersonalityTraits)
    emotional_needs: EmotionalNeeds = field(default_factory=EmotionalNeeds)
    self_perception: SelfPerception = field(default_factory=SelfPerception)
    quest_responses: QuestResponses = field(default_factory=QuestResponses)
    completed_steps: Tuple[str, ...] = ()
    is_onboarding_complete: bool = False
    mood_log: Tuple[MoodLogEntry, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "completed_steps", ordered_unique(self.completed_steps))

    @classmethod
    def from_db(
        cls,
        row: "UserProfile",
        mood_rows: Iterable["MoodLogEntryDB"] = (),
    ) -> "ProfileSnapshot":
        return cls(
            user_id=row.user_id,
            mood=MoodProfile.from_dict(row.mood),
            personality_traits=PersonalityTraits.from_dict(row.personality_traits),
            emotional_needs=EmotionalNeeds.from_dict(row.emotional_needs),
            self_perception=SelfPerception.from_dict(row.self_perception),
            quest_responses=QuestResponses.from_dict(row.quest_responses),
            completed_steps=tuple(row.completed_steps or ()),
            is_onboarding_complete=bool(row.is_onboarding_complete),
            mood_log=tuple(MoodLogEntry.from_db(r) for r in mood_rows),
        )

    @property
    def remaining_steps(self) -> Tuple[str, ...]:
        return tuple(s for s in REQUIRED_STEPS if s not in self.completed_steps)
