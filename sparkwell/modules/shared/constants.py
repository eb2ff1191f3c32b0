"""
Sparkwell Domain Constants

Purpose
-------
Scoring and economy constants that define how reflections are valued.
Infrastructure limits (pool sizes, timeouts) live in Config; tunable
economy values that operators may change at deploy time (quest completion
bonus, catalogs) live in YAML under config/.

Design Notes
------------
- Values are annotated with typing.Final to signal immutability
- Grouped by subsystem
"""

from __future__ import annotations

from typing import Final

# ============================================================================
# REFLECTION POINTS
# ============================================================================

DAILY_BASE_POINTS: Final[int] = 10
WEEKLY_BASE_POINTS: Final[int] = 25

LONG_TEXT_THRESHOLD: Final[int] = 100  # characters; strictly greater earns the bonus
LONG_TEXT_BONUS: Final[int] = 5
IMAGE_BONUS: Final[int] = 5
AUDIO_BONUS: Final[int] = 5

# ============================================================================
# REFLECTION QUALITY SCORE
# ============================================================================

CHARS_PER_TEXT_POINT: Final[int] = 20
MAX_TEXT_QUALITY: Final[float] = 5.0
IMAGE_QUALITY: Final[float] = 2.0
AUDIO_QUALITY: Final[float] = 2.0
MAX_QUALITY_SCORE: Final[float] = MAX_TEXT_QUALITY + IMAGE_QUALITY + AUDIO_QUALITY

# ============================================================================
# QUESTS
# ============================================================================

DEFAULT_QUEST_COMPLETION_BONUS: Final[int] = 50
STARTED_QUEST_PREFIX: Final[str] = "Started quest: "
COMPLETED_QUEST_PREFIX: Final[str] = "Completed quest: "

# Quest titles the recommendation rules refer to
MINDFUL_WALK: Final[str] = "Mindful Walk"
REACH_OUT: Final[str] = "Reach Out"
GRATITUDE_JOURNAL: Final[str] = "Gratitude Journal"

STRESSED_MOOD: Final[str] = "Stressed"
CONNECTION_NEED: Final[str] = "Connection"
GRATITUDE_GROWTH_AREA: Final[str] = "Gratitude"
MIN_COPING_MECHANISMS: Final[int] = 2

# ============================================================================
# QUERY LIMITS
# ============================================================================

DEFAULT_QUEST_HISTORY_LIMIT: Final[int] = 50
DEFAULT_REDEMPTION_HISTORY_LIMIT: Final[int] = 20
DEFAULT_TRANSACTION_LIMIT: Final[int] = 50

MAX_REFLECTION_TEXT_LENGTH: Final[int] = 10_000
MAX_URL_LENGTH: Final[int] = 2048
