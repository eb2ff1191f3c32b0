"""
Profile Service
===============

Purpose
-------
Owns the onboarding self-profile: section updates, skipped steps, onboarding
completion and the append-only mood log.

Domain
------
- Lazily create the profile row on first access
- Update one questionnaire section at a time (strictly validated)
- Mark steps done or skipped (ordered, de-duplicated)
- Derive `is_onboarding_complete` from the required steps
- Append mood-log entries (standalone or inside a reflection transaction)

Reads return `ProfileSnapshot` value objects; the ORM row never leaves the
service.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError

from sparkwell.core.database.base import utc_now
from sparkwell.core.database.service import DatabaseService
from sparkwell.core.validation.input_validator import InputValidator
from sparkwell.database.models.identity.user import User
from sparkwell.database.models.profile.mood_log_entry import MoodLogEntry as MoodLogRow
from sparkwell.database.models.profile.user_profile import UserProfile
from sparkwell.domain.models.base import DomainValidationError, ordered_unique
from sparkwell.domain.models.profile import (
    REQUIRED_STEPS,
    SECTION_TYPES,
    MoodLogEntry,
    MoodProfile,
    ProfileSnapshot,
    onboarding_complete,
)
from sparkwell.modules.shared.base_repository import BaseRepository
from sparkwell.modules.shared.base_service import BaseService
from sparkwell.modules.shared.exceptions import NotFoundError, ValidationError

if TYPE_CHECKING:
    from logging import Logger

    from sqlalchemy.ext.asyncio import AsyncSession

    from sparkwell.core.config.manager import ConfigManager
    from sparkwell.core.event.bus import EventBus

_STEP_BY_LOWER = {step.lower(): step for step in REQUIRED_STEPS}


class ProfileService(BaseService):
    """
    Onboarding profile and mood history.

    Public Methods
    --------------
    - get_profile() -> ProfileSnapshot (NotFoundError when absent)
    - find_profile() -> Optional[ProfileSnapshot]
    - get_or_create() -> ProfileSnapshot
    - update_step() -> ProfileSnapshot
    - skip_step() -> ProfileSnapshot
    - append_mood_entry() -> MoodLogEntry
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)
        self._profile_repo = BaseRepository[UserProfile](UserProfile, self.log)
        self._mood_repo = BaseRepository[MoodLogRow](MoodLogRow, self.log)
        self._user_repo = BaseRepository[User](User, self.log)

    # ========================================================================
    # PUBLIC API - Read Operations
    # ========================================================================

    async def find_profile(
        self, user_id: int, session: Optional[AsyncSession] = None
    ) -> Optional[ProfileSnapshot]:
        """Profile snapshot including mood history, or None if never created."""
        user_id = InputValidator.validate_user_id(user_id)

        if session is not None:
            return await self._load_snapshot(session, user_id)

        async with DatabaseService.get_session() as owned:
            return await self._load_snapshot(owned, user_id)

    async def get_profile(self, user_id: int) -> ProfileSnapshot:
        """
        Raises:
            NotFoundError: the user has no profile yet
        """
        snapshot = await self.find_profile(user_id)
        if snapshot is None:
            raise NotFoundError("Profile", user_id)
        return snapshot

    # ========================================================================
    # PUBLIC API - Write Operations
    # ========================================================================

    async def get_or_create(self, user_id: int) -> ProfileSnapshot:
        """Return the profile, creating an empty one on first access."""
        user_id = InputValidator.validate_user_id(user_id)

        async with DatabaseService.get_transaction() as session:
            row = await self._claim_row(session, user_id)
            return await self._snapshot(session, row)

    async def update_step(
        self, user_id: int, step: str, data: Mapping[str, Any]
    ) -> ProfileSnapshot:
        """
        Replace one questionnaire section and mark the step completed.

        Raises:
            ValidationError: unknown step or malformed section data
            NotFoundError: user does not exist
        """
        user_id = InputValidator.validate_user_id(user_id)
        step = self._validate_step(step)
        if not isinstance(data, Mapping):
            raise ValidationError(step, "Section data must be an object")

        section_class, attribute = SECTION_TYPES[step]
        try:
            section = section_class.from_dict(data, strict=True)
        except DomainValidationError as exc:
            raise ValidationError(exc.field or step, str(exc)) from exc

        self.log_operation("update_step", user_id=user_id, step=step)

        async with DatabaseService.get_transaction() as session:
            row = await self._claim_row(session, user_id)
            setattr(row, attribute, section.to_dict())
            self._mark_step(row, step)
            await session.flush()
            snapshot = await self._snapshot(session, row)

        await self.emit_event(
            "profile.step_updated",
            {
                "user_id": user_id,
                "step": step,
                "skipped": False,
                "is_onboarding_complete": snapshot.is_onboarding_complete,
            },
        )
        return snapshot

    async def skip_step(self, user_id: int, step: str) -> ProfileSnapshot:
        """Mark a step as done without touching its data."""
        user_id = InputValidator.validate_user_id(user_id)
        step = self._validate_step(step)

        self.log_operation("skip_step", user_id=user_id, step=step)

        async with DatabaseService.get_transaction() as session:
            row = await self._claim_row(session, user_id)
            self._mark_step(row, step)
            await session.flush()
            snapshot = await self._snapshot(session, row)

        await self.emit_event(
            "profile.step_updated",
            {
                "user_id": user_id,
                "step": step,
                "skipped": True,
                "is_onboarding_complete": snapshot.is_onboarding_complete,
            },
        )
        return snapshot

    async def append_mood_entry(
        self,
        user_id: int,
        mood: Mapping[str, Any],
        session: Optional[AsyncSession] = None,
        logged_at: Optional[datetime] = None,
    ) -> MoodLogEntry:
        """
        Append one entry to the mood log.

        With `session` the entry joins the caller's transaction and the
        caller is responsible for publishing `profile.mood_logged`.

        Raises:
            ValidationError: malformed mood data
            NotFoundError: user does not exist
        """
        user_id = InputValidator.validate_user_id(user_id)
        if not isinstance(mood, Mapping):
            raise ValidationError("mood", "Mood data must be an object")
        try:
            parsed = MoodProfile.from_dict(mood, strict=True)
        except DomainValidationError as exc:
            raise ValidationError(exc.field or "mood", str(exc)) from exc

        async with self.transaction(session) as tx:
            try:
                row = await self._mood_repo.add(
                    tx,
                    MoodLogRow(
                        user_id=user_id,
                        logged_at=logged_at or utc_now(),
                        general=parsed.general,
                        frequency=parsed.frequency.value if parsed.frequency else None,
                        triggers=sorted(parsed.triggers),
                        coping_mechanisms=sorted(parsed.coping_mechanisms),
                    ),
                )
            except IntegrityError as exc:
                raise NotFoundError("User", user_id) from exc

            if await self._user_repo.get(tx, user_id) is None:
                raise NotFoundError("User", user_id)
            entry = MoodLogEntry.from_db(row)

        if session is None:
            await self.announce_mood(user_id, entry)

        return entry

    async def announce_mood(self, user_id: int, entry: MoodLogEntry) -> None:
        await self.emit_event(
            "profile.mood_logged",
            {
                "user_id": user_id,
                "general": entry.general,
                "frequency": entry.frequency.value if entry.frequency else None,
                "logged_at": entry.date.isoformat(),
            },
        )

    # ========================================================================
    # INTERNAL
    # ========================================================================

    @staticmethod
    def _validate_step(step: Any) -> str:
        lowered = InputValidator.validate_choice(step, "step", REQUIRED_STEPS)
        return _STEP_BY_LOWER[lowered]

    @staticmethod
    def _mark_step(row: UserProfile, step: str) -> None:
        # Reassign rather than mutate so the JSON column is flagged dirty
        row.completed_steps = list(ordered_unique([*(row.completed_steps or []), step]))
        row.is_onboarding_complete = onboarding_complete(row.completed_steps)

    async def _claim_row(self, session: AsyncSession, user_id: int) -> UserProfile:
        """
        Create the profile row if missing and hold it until commit.

        The insert runs first so SQLite takes its write lock before any
        read, and the row is re-read FOR UPDATE so PostgreSQL serializes
        concurrent step updates on the same profile.
        """
        dialect = session.get_bind().dialect.name
        insert = postgresql.insert if dialect == "postgresql" else sqlite.insert

        stmt = (
            insert(UserProfile)
            .values(user_id=user_id, completed_steps=[])
            .on_conflict_do_nothing(index_elements=["user_id"])
        )
        try:
            result = await session.execute(stmt)
        except IntegrityError as exc:
            raise NotFoundError("User", user_id) from exc
        created = result.rowcount == 1  # type: ignore[attr-defined]

        row = (
            await session.execute(
                select(UserProfile)
                .where(UserProfile.user_id == user_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
        ).scalar_one()

        if created:
            if await self._user_repo.get(session, user_id) is None:
                raise NotFoundError("User", user_id)
            self.log.info("Profile created", extra={"user_id": user_id})

        return row

    async def _load_snapshot(
        self, session: AsyncSession, user_id: int
    ) -> Optional[ProfileSnapshot]:
        row = await self._profile_repo.find_one_where(
            session, UserProfile.user_id == user_id
        )
        if row is None:
            return None
        return await self._snapshot(session, row)

    async def _snapshot(self, session: AsyncSession, row: UserProfile) -> ProfileSnapshot:
        mood_rows = await self._mood_repo.find_many_where(
            session,
            MoodLogRow.user_id == row.user_id,
            order_by=[MoodLogRow.logged_at.asc(), MoodLogRow.id.asc()],
        )
        return ProfileSnapshot.from_db(row, mood_rows)

