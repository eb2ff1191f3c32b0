"""
Quest Service
=============

Purpose
-------
Turns the pure recommendation rules into user-facing quest operations:
today's quest, recording the day's assignment, starting and completing a
quest, the active list and the quest history.

Domain
------
- Recommend today's quest (read only, no counters touched)
- Record at most one assignment per user per UTC day
- Start a quest once per day with a zero-score "Started quest" reflection
- Complete a quest: scored reflection, completion bonus, completed counter
- Active quests: today's quest until a reflection for it exists today
- History: latest reflection per quest title, newest first

Idempotency
-----------
`record_assignment` inserts into `quest_assignments` with ON CONFLICT DO
NOTHING on (user_id, assignment_date); `quests_assigned` is incremented in
the same transaction only when the insert created a row.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy.dialects import postgresql, sqlite

from sparkwell.core.database.base import ensure_utc, utc_now
from sparkwell.core.database.service import DatabaseService
from sparkwell.core.validation.input_validator import InputValidator
from sparkwell.database.models.enums import TransactionType
from sparkwell.database.models.progression.quest_assignment import QuestAssignment
from sparkwell.database.models.progression.reflection import Reflection
from sparkwell.domain.models.quest import Quest
from sparkwell.modules.quest.selector import select_quest
from sparkwell.modules.shared.base_repository import BaseRepository
from sparkwell.modules.shared.base_service import BaseService
from sparkwell.modules.shared.constants import (
    COMPLETED_QUEST_PREFIX,
    DEFAULT_QUEST_COMPLETION_BONUS,
    DEFAULT_QUEST_HISTORY_LIMIT,
    MAX_REFLECTION_TEXT_LENGTH,
    STARTED_QUEST_PREFIX,
)
from sparkwell.modules.shared.exceptions import (
    InvalidOperationError,
    NotFoundError,
)
from sparkwell.modules.shared.formulas import calculate_quality_score

if TYPE_CHECKING:
    from logging import Logger

    from sqlalchemy.ext.asyncio import AsyncSession

    from sparkwell.core.config.manager import ConfigManager
    from sparkwell.core.event.bus import EventBus
    from sparkwell.modules.ledger.service import PointsLedgerService
    from sparkwell.modules.profile.service import ProfileService
    from sparkwell.modules.quest.catalog import QuestCatalog


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """[start, end) of a UTC calendar day."""
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


@dataclass(frozen=True)
class QuestProgress:
    """A quest as seen by one user: active today, or completed at a time."""

    quest: Quest
    status: str
    reflection_id: Optional[int] = None
    completed_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.quest.to_dict(),
            "status": self.status,
            "reflection_id": self.reflection_id,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


@dataclass(frozen=True)
class CompletedQuest:
    quest: Quest
    reflection_id: int
    quality_score: float
    bonus: int
    new_balance: int


class QuestService(BaseService):
    """
    Quest recommendation, assignment and completion.

    Public Methods
    --------------
    - get_today_quest() -> Quest
    - record_assignment() -> bool (True if newly recorded)
    - start_quest() -> QuestProgress
    - complete_quest() -> CompletedQuest
    - get_active_quests() -> list of QuestProgress
    - get_quest_history() -> list of QuestProgress
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
        catalog: QuestCatalog,
        profile_service: ProfileService,
        ledger: PointsLedgerService,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)
        self._catalog = catalog
        self._profiles = profile_service
        self._ledger = ledger
        self._reflection_repo = BaseRepository[Reflection](Reflection, self.log)

    @property
    def catalog(self) -> QuestCatalog:
        return self._catalog

    @property
    def completion_bonus(self) -> int:
        bonus = self.get_config(
            "quests.completion_bonus", default=DEFAULT_QUEST_COMPLETION_BONUS
        )
        return InputValidator.validate_positive_integer(bonus, "quests.completion_bonus")

    # ========================================================================
    # PUBLIC API - Read Operations
    # ========================================================================

    async def get_today_quest(self, user_id: int, today: Optional[date] = None) -> Quest:
        """
        Recommend today's quest from the user's profile.

        This is a **read-only** operation; no counters change.
        """
        user_id = InputValidator.validate_user_id(user_id)
        today = today or utc_today()

        profile = await self._profiles.find_profile(user_id)
        quest = select_quest(profile, today, self._catalog)

        self.log.debug(
            "Quest selected",
            extra={
                "user_id": user_id,
                "quest_title": quest.title,
                "has_profile": profile is not None,
                "day": today.isoformat(),
            },
        )
        return quest

    async def get_active_quests(
        self, user_id: int, today: Optional[date] = None
    ) -> List[QuestProgress]:
        """Today's quest, unless the user already reflected on it today."""
        user_id = InputValidator.validate_user_id(user_id)
        today = today or utc_today()

        quest = await self.get_today_quest(user_id, today)

        async with DatabaseService.get_session() as session:
            existing = await self._find_today_reflection(session, user_id, quest.title, today)

        if existing is not None:
            return []
        return [QuestProgress(quest=quest, status="active")]

    async def get_quest_history(
        self, user_id: int, limit: int = DEFAULT_QUEST_HISTORY_LIMIT
    ) -> List[QuestProgress]:
        """
        Quests the user reflected on, one entry per title.

        Considers the `limit` most recent reflections; the newest reflection
        of each title wins and entries are ordered newest first.
        """
        user_id = InputValidator.validate_user_id(user_id)
        limit = InputValidator.validate_limit(limit)

        async with DatabaseService.get_session() as session:
            reflections = await self._reflection_repo.find_many_where(
                session,
                Reflection.user_id == user_id,
                order_by=[Reflection.created_at.desc(), Reflection.id.desc()],
                limit=limit,
            )

        history: Dict[str, QuestProgress] = {}
        for reflection in reflections:
            if reflection.quest_title in history:
                continue
            history[reflection.quest_title] = QuestProgress(
                quest=self._quest_for(reflection),
                status="completed",
                reflection_id=reflection.id,
                completed_at=ensure_utc(reflection.created_at),
            )

        return list(history.values())

    # ========================================================================
    # PUBLIC API - Write Operations
    # ========================================================================

    async def record_assignment(
        self,
        user_id: int,
        today: Optional[date] = None,
        session: Optional[AsyncSession] = None,
    ) -> bool:
        """
        Record today's recommended quest as assigned.

        Returns True when the assignment was created, False when one already
        existed for (user, day). `quests_assigned` moves only in the first
        case.
        """
        user_id = InputValidator.validate_user_id(user_id)
        today = today or utc_today()

        quest = await self.get_today_quest(user_id, today)

        async with self.transaction(session) as tx:
            created = await self._insert_assignment(tx, user_id, quest, today)
            if created:
                await self._ledger.increment_assigned(user_id, session=tx)

        if created:
            self.log.info(
                "Quest assignment recorded",
                extra={
                    "user_id": user_id,
                    "quest_title": quest.title,
                    "day": today.isoformat(),
                },
            )
            if session is None:
                await self.emit_event(
                    "quest.assigned",
                    {
                        "user_id": user_id,
                        "quest_title": quest.title,
                        "quest_type": quest.type.value,
                        "day": today.isoformat(),
                    },
                )

        return created

    async def start_quest(
        self, user_id: int, today: Optional[date] = None
    ) -> QuestProgress:
        """
        Start today's quest.

        Records the day's assignment and creates a "Started quest: <title>"
        reflection with quality score 0.

        Raises:
            InvalidOperationError: the quest was already started today
        """
        user_id = InputValidator.validate_user_id(user_id)
        today = today or utc_today()

        quest = await self.get_today_quest(user_id, today)

        self.log_operation("start_quest", user_id=user_id, quest_title=quest.title)

        async with DatabaseService.get_transaction() as session:
            # First statement must be the write (SQLite lock ordering)
            if await self._insert_assignment(session, user_id, quest, today):
                await self._ledger.increment_assigned(user_id, session=session)

            existing = await self._find_today_reflection(
                session, user_id, quest.title, today
            )
            if existing is not None:
                raise InvalidOperationError(
                    "start_quest", f"'{quest.title}' was already started today"
                )

            reflection = await self._reflection_repo.add(
                session,
                Reflection(
                    user_id=user_id,
                    quest_title=quest.title,
                    quest_type=quest.type.value,
                    text=f"{STARTED_QUEST_PREFIX}{quest.title}",
                    quality_score=0.0,
                    created_at=self._now_on(today),
                ),
            )

        await self.emit_event(
            "quest.started",
            {
                "user_id": user_id,
                "quest_title": quest.title,
                "reflection_id": reflection.id,
            },
        )

        return QuestProgress(quest=quest, status="active", reflection_id=reflection.id)

    async def complete_quest(
        self,
        user_id: int,
        quest_title: str,
        reflection_text: Optional[str] = None,
        today: Optional[date] = None,
    ) -> CompletedQuest:
        """
        Complete a catalog quest.

        Creates a reflection scored with the quality formula, credits the
        configured completion bonus and increments `quests_completed`, all in
        one transaction.

        Raises:
            ValidationError: blank title or oversized text
            NotFoundError: unknown quest title or user
        """
        user_id = InputValidator.validate_user_id(user_id)
        quest_title = InputValidator.validate_string(quest_title, "quest_title", max_length=200)
        reflection_text = InputValidator.validate_optional_string(
            reflection_text, "reflection_text", max_length=MAX_REFLECTION_TEXT_LENGTH
        )
        today = today or utc_today()

        quest = self._catalog.by_title(quest_title)
        if quest is None:
            raise NotFoundError("Quest", quest_title)

        text = reflection_text or f"{COMPLETED_QUEST_PREFIX}{quest.title}"
        quality_score = calculate_quality_score(text=text)
        bonus = self.completion_bonus

        self.log_operation("complete_quest", user_id=user_id, quest_title=quest.title)

        async with DatabaseService.get_transaction() as session:
            new_balance = await self._ledger.credit(
                user_id,
                bonus,
                reason=f"quest_completion:{quest.title}",
                session=session,
            )
            await self._ledger.increment_completed(user_id, session=session)

            reflection = await self._reflection_repo.add(
                session,
                Reflection(
                    user_id=user_id,
                    quest_title=quest.title,
                    quest_type=quest.type.value,
                    text=text,
                    quality_score=quality_score,
                    created_at=self._now_on(today),
                ),
            )

        await self._ledger.announce(
            TransactionType.CREDIT,
            user_id,
            bonus,
            new_balance,
            f"quest_completion:{quest.title}",
        )
        await self.emit_event(
            "quest.completed",
            {
                "user_id": user_id,
                "quest_title": quest.title,
                "reflection_id": reflection.id,
                "bonus": bonus,
                "quality_score": quality_score,
            },
        )

        return CompletedQuest(
            quest=quest,
            reflection_id=reflection.id,
            quality_score=quality_score,
            bonus=bonus,
            new_balance=new_balance,
        )

    # ========================================================================
    # INTERNAL
    # ========================================================================

    def _quest_for(self, reflection: Reflection) -> Quest:
        quest = self._catalog.by_title(reflection.quest_title)
        if quest is not None:
            return quest
        # Free-form titles from submitted reflections are not in the catalog
        return Quest.from_config(
            {
                "title": reflection.quest_title,
                "description": f"Completed: {reflection.quest_title}",
                "type": reflection.quest_type,
            }
        )

    @staticmethod
    def _now_on(today: date) -> datetime:
        """Current instant, or noon UTC of `today` when acting on another day."""
        now = utc_now()
        if now.date() == today:
            return now
        return datetime.combine(today, time(12, 0), tzinfo=timezone.utc)

    async def _find_today_reflection(
        self, session: AsyncSession, user_id: int, quest_title: str, today: date
    ) -> Optional[Reflection]:
        start, end = day_bounds(today)
        return await self._reflection_repo.find_one_where(
            session,
            Reflection.user_id == user_id,
            Reflection.quest_title == quest_title,
            Reflection.created_at >= start,
            Reflection.created_at < end,
        )

    async def _insert_assignment(
        self, session: AsyncSession, user_id: int, quest: Quest, today: date
    ) -> bool:
        dialect = session.get_bind().dialect.name
        insert = postgresql.insert if dialect == "postgresql" else sqlite.insert

        stmt = (
            insert(QuestAssignment)
            .values(
                user_id=user_id,
                assignment_date=today,
                quest_title=quest.title,
                quest_type=quest.type.value,
                assigned_at=utc_now(),
            )
            .on_conflict_do_nothing(index_elements=["user_id", "assignment_date"])
        )
        result = await session.execute(stmt)
        return result.rowcount == 1  # type: ignore[attr-defined]
