"""
Reflection Service
==================

Purpose
-------
Accepts a user's reflection on a quest, values it and awards spark points.

Domain
------
- Validate reflection fields (text and media URLs are all optional)
- Score quality and points with the pure formulas
- Persist the reflection, credit the points, increment `quests_completed`
  and append the optional mood entry in ONE transaction
- List and delete a user's own reflections

Media files are uploaded elsewhere; this service only stores the URLs the
media store returned.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

from sparkwell.core.database.base import ensure_utc
from sparkwell.core.database.service import DatabaseService
from sparkwell.core.validation.input_validator import InputValidator
from sparkwell.database.models.enums import QuestType, TransactionType
from sparkwell.database.models.progression.reflection import Reflection
from sparkwell.modules.shared.base_repository import BaseRepository
from sparkwell.modules.shared.base_service import BaseService
from sparkwell.modules.shared.constants import (
    DEFAULT_QUEST_HISTORY_LIMIT,
    MAX_REFLECTION_TEXT_LENGTH,
    MAX_URL_LENGTH,
)
from sparkwell.modules.shared.exceptions import NotFoundError
from sparkwell.modules.shared.formulas import calculate_points, calculate_quality_score

if TYPE_CHECKING:
    from logging import Logger

    from sparkwell.core.config.manager import ConfigManager
    from sparkwell.core.event.bus import EventBus
    from sparkwell.modules.ledger.service import PointsLedgerService
    from sparkwell.modules.profile.service import ProfileService


@dataclass(frozen=True)
class ReflectionResult:
    reflection_id: int
    points_awarded: int
    quality_score: float
    new_balance: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reflection_id": self.reflection_id,
            "points_awarded": self.points_awarded,
            "quality_score": self.quality_score,
            "new_balance": self.new_balance,
        }


def _reflection_to_dict(row: Reflection) -> Dict[str, Any]:
    created_at: Optional[datetime] = ensure_utc(row.created_at)
    return {
        "id": row.id,
        "user_id": row.user_id,
        "quest_title": row.quest_title,
        "quest_type": row.quest_type,
        "text": row.text,
        "image_url": row.image_url,
        "audio_url": row.audio_url,
        "quality_score": row.quality_score,
        "created_at": created_at.isoformat() if created_at else None,
    }


class ReflectionService(BaseService):
    """
    Reflection submission and retrieval.

    Public Methods
    --------------
    - submit_reflection() -> ReflectionResult
    - list_reflections() -> newest first
    - delete_reflection() -> owner only
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
        ledger: PointsLedgerService,
        profile_service: ProfileService,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)
        self._ledger = ledger
        self._profiles = profile_service
        self._reflection_repo = BaseRepository[Reflection](Reflection, self.log)

    async def submit_reflection(
        self,
        user_id: int,
        quest_title: str,
        quest_type: str,
        text: Optional[str] = None,
        image_url: Optional[str] = None,
        audio_url: Optional[str] = None,
        mood: Optional[Mapping[str, Any]] = None,
    ) -> ReflectionResult:
        """
        Store a reflection and award its spark points.

        Raises:
            ValidationError: invalid user id, title, quest type or field sizes
            NotFoundError: user does not exist (nothing is persisted)
        """
        user_id = InputValidator.validate_user_id(user_id)
        quest_title = InputValidator.validate_string(quest_title, "quest_title", max_length=200)
        quest_type = InputValidator.validate_choice(
            quest_type, "quest_type", [t.value for t in QuestType]
        )
        text = InputValidator.validate_optional_string(
            text, "text", max_length=MAX_REFLECTION_TEXT_LENGTH
        )
        image_url = InputValidator.validate_optional_string(
            image_url, "image_url", max_length=MAX_URL_LENGTH
        )
        audio_url = InputValidator.validate_optional_string(
            audio_url, "audio_url", max_length=MAX_URL_LENGTH
        )

        quality_score = calculate_quality_score(text, image_url, audio_url)
        points = calculate_points(quest_type, text, image_url, audio_url)

        self.log_operation(
            "submit_reflection",
            user_id=user_id,
            quest_title=quest_title,
            quest_type=quest_type,
            points=points,
            quality_score=quality_score,
        )

        mood_entry = None
        reason = f"reflection:{quest_title}"

        async with DatabaseService.get_transaction() as session:
            new_balance = await self._ledger.credit(
                user_id,
                points,
                reason=reason,
                session=session,
                details={"quest_type": quest_type, "quality_score": quality_score},
            )
            await self._ledger.increment_completed(user_id, session=session)

            reflection = await self._reflection_repo.add(
                session,
                Reflection(
                    user_id=user_id,
                    quest_title=quest_title,
                    quest_type=quest_type,
                    text=text,
                    image_url=image_url,
                    audio_url=audio_url,
                    quality_score=quality_score,
                ),
            )

            if mood:
                mood_entry = await self._profiles.append_mood_entry(
                    user_id, mood, session=session
                )

        await self._ledger.announce(
            TransactionType.CREDIT, user_id, points, new_balance, reason
        )
        if mood_entry is not None:
            await self._profiles.announce_mood(user_id, mood_entry)
        await self.emit_event(
            "reflection.submitted",
            {
                "user_id": user_id,
                "reflection_id": reflection.id,
                "quest_title": quest_title,
                "quest_type": quest_type,
                "points_awarded": points,
                "quality_score": quality_score,
            },
        )

        return ReflectionResult(
            reflection_id=reflection.id,
            points_awarded=points,
            quality_score=quality_score,
            new_balance=new_balance,
        )

    async def list_reflections(
        self, user_id: int, limit: int = DEFAULT_QUEST_HISTORY_LIMIT
    ) -> List[Dict[str, Any]]:
        user_id = InputValidator.validate_user_id(user_id)
        limit = InputValidator.validate_limit(limit)

        async with DatabaseService.get_session() as session:
            rows = await self._reflection_repo.find_many_where(
                session,
                Reflection.user_id == user_id,
                order_by=[Reflection.created_at.desc(), Reflection.id.desc()],
                limit=limit,
            )
            return [_reflection_to_dict(row) for row in rows]

    async def delete_reflection(self, user_id: int, reflection_id: int) -> None:
        """
        Delete one of the user's reflections.

        Points already awarded are kept.

        Raises:
            NotFoundError: no such reflection owned by this user
        """
        user_id = InputValidator.validate_user_id(user_id)
        reflection_id = InputValidator.validate_positive_integer(
            reflection_id, "reflection_id"
        )

        async with DatabaseService.get_transaction() as session:
            reflection = await self._reflection_repo.find_one_where(
                session,
                Reflection.id == reflection_id,
                Reflection.user_id == user_id,
            )
            if reflection is None:
                raise NotFoundError("Reflection", reflection_id)

            await self._reflection_repo.delete(session, reflection)

        self.log.info(
            "Reflection deleted",
            extra={"user_id": user_id, "reflection_id": reflection_id},
        )
