"""
Points Ledger Service
=====================

Purpose
-------
Owns every movement of a user's spark-point balance and the monotonic
quest counters stored on the `users` row.

Domain
------
- Credit points (reflection awards, quest completion bonus)
- Debit points (reward redemption) without ever going negative
- Increment quests_assigned / quests_completed
- Read the economy summary and the audit trail

Concurrency
-----------
No read-modify-write: every change is one SQL statement.

- credit:  UPDATE users SET spark_points = spark_points + :amount
- debit:   UPDATE users SET spark_points = spark_points - :amount
           WHERE id = :id AND spark_points >= :amount RETURNING spark_points
- counters: UPDATE users SET col = col + 1

If the debit matches no row the balance is left untouched and a follow-up
read distinguishes a missing user from an insufficient balance.

Composition
-----------
Every write method takes an optional `session`. When given, the write joins
the caller's transaction and no event is published; the caller publishes
via `announce()` after its own commit. Without a session the ledger opens
and commits its own transaction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import select, update

from sparkwell.core.database.service import DatabaseService
from sparkwell.core.validation.input_validator import InputValidator
from sparkwell.database.models.economy.transaction_log import TransactionLog
from sparkwell.database.models.enums import TransactionType
from sparkwell.database.models.identity.user import User
from sparkwell.modules.shared.base_repository import BaseRepository
from sparkwell.modules.shared.base_service import BaseService
from sparkwell.modules.shared.constants import DEFAULT_TRANSACTION_LIMIT
from sparkwell.modules.shared.exceptions import (
    InsufficientBalanceError,
    NotFoundError,
)

if TYPE_CHECKING:
    from logging import Logger

    from sqlalchemy.ext.asyncio import AsyncSession

    from sparkwell.core.config.manager import ConfigManager
    from sparkwell.core.event.bus import EventBus


@dataclass(frozen=True)
class UserEconomy:
    user_id: int
    spark_points: int
    quests_assigned: int
    quests_completed: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "spark_points": self.spark_points,
            "quests_assigned": self.quests_assigned,
            "quests_completed": self.quests_completed,
        }


class PointsLedgerService(BaseService):
    """
    Spark-point balance and counter mutations.

    Public Methods
    --------------
    - credit() / debit() -> new balance
    - increment_assigned() / increment_completed()
    - get_economy() -> UserEconomy
    - get_transactions() -> audit rows, newest first
    - announce() -> publish points.credited / points.debited
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)
        self._user_repo = BaseRepository[User](User, self.log)
        self._log_repo = BaseRepository[TransactionLog](TransactionLog, self.log)

    # ========================================================================
    # PUBLIC API - Balance Writes
    # ========================================================================

    async def credit(
        self,
        user_id: int,
        amount: int,
        reason: str,
        session: Optional[AsyncSession] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> int:
        """
        Add `amount` spark points. Returns the new balance.

        Raises:
            ValidationError: amount not a positive integer, blank reason
            NotFoundError: user does not exist
        """
        user_id = InputValidator.validate_user_id(user_id)
        amount = InputValidator.validate_positive_integer(amount, "amount")
        reason = InputValidator.validate_string(reason, "reason", max_length=200)

        self.log_operation("credit", user_id=user_id, amount=amount, reason=reason)

        async with self.transaction(session) as tx:
            stmt = (
                update(User)
                .where(User.id == user_id)
                .values(spark_points=User.spark_points + amount)
                .returning(User.spark_points)
                .execution_options(synchronize_session=False)
            )
            new_balance = (await tx.execute(stmt)).scalar_one_or_none()

            if new_balance is None:
                raise NotFoundError("User", user_id)

            await self._record(
                tx, user_id, TransactionType.CREDIT, amount, new_balance, reason, details
            )

        if session is None:
            await self.announce(
                TransactionType.CREDIT, user_id, amount, new_balance, reason
            )

        return new_balance

    async def debit(
        self,
        user_id: int,
        amount: int,
        reason: str,
        session: Optional[AsyncSession] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> int:
        """
        Subtract `amount` spark points iff the balance covers it.

        Returns the new balance.

        Raises:
            ValidationError: amount not a positive integer, blank reason
            NotFoundError: user does not exist
            InsufficientBalanceError: balance < amount (balance unchanged)
        """
        user_id = InputValidator.validate_user_id(user_id)
        amount = InputValidator.validate_positive_integer(amount, "amount")
        reason = InputValidator.validate_string(reason, "reason", max_length=200)

        self.log_operation("debit", user_id=user_id, amount=amount, reason=reason)

        async with self.transaction(session) as tx:
            stmt = (
                update(User)
                .where(User.id == user_id, User.spark_points >= amount)
                .values(spark_points=User.spark_points - amount)
                .returning(User.spark_points)
                .execution_options(synchronize_session=False)
            )
            new_balance = (await tx.execute(stmt)).scalar_one_or_none()

            if new_balance is None:
                current = (
                    await tx.execute(
                        select(User.spark_points).where(User.id == user_id)
                    )
                ).scalar_one_or_none()

                if current is None:
                    raise NotFoundError("User", user_id)

                self.log.info(
                    "Debit refused: insufficient spark points",
                    extra={
                        "user_id": user_id,
                        "required": amount,
                        "current": current,
                        "reason": reason,
                    },
                )
                raise InsufficientBalanceError(required=amount, current=current)

            await self._record(
                tx, user_id, TransactionType.DEBIT, amount, new_balance, reason, details
            )

        if session is None:
            await self.announce(
                TransactionType.DEBIT, user_id, amount, new_balance, reason
            )

        return new_balance

    # ========================================================================
    # PUBLIC API - Counters
    # ========================================================================

    async def increment_assigned(
        self, user_id: int, session: Optional[AsyncSession] = None
    ) -> int:
        """Increment quests_assigned by one; returns the new count."""
        return await self._increment(user_id, User.quests_assigned, session)

    async def increment_completed(
        self, user_id: int, session: Optional[AsyncSession] = None
    ) -> int:
        """Increment quests_completed by one; returns the new count."""
        return await self._increment(user_id, User.quests_completed, session)

    async def _increment(
        self, user_id: int, column: Any, session: Optional[AsyncSession]
    ) -> int:
        user_id = InputValidator.validate_user_id(user_id)

        async with self.transaction(session) as tx:
            stmt = (
                update(User)
                .where(User.id == user_id)
                .values({column.key: column + 1})
                .returning(column)
                .execution_options(synchronize_session=False)
            )
            new_value = (await tx.execute(stmt)).scalar_one_or_none()

            if new_value is None:
                raise NotFoundError("User", user_id)

        self.log.debug(
            f"Counter incremented: {column.key}",
            extra={"user_id": user_id, "counter": column.key, "value": new_value},
        )
        return new_value

    # ========================================================================
    # PUBLIC API - Reads
    # ========================================================================

    async def get_economy(self, user_id: int) -> UserEconomy:
        """
        Current balance and quest counters.

        Raises:
            NotFoundError: user does not exist
        """
        user_id = InputValidator.validate_user_id(user_id)

        async with DatabaseService.get_session() as session:
            user = await self._user_repo.get(session, user_id)
            if user is None:
                raise NotFoundError("User", user_id)

            return UserEconomy(
                user_id=user.id,
                spark_points=user.spark_points,
                quests_assigned=user.quests_assigned,
                quests_completed=user.quests_completed,
            )

    async def get_transactions(
        self, user_id: int, limit: int = DEFAULT_TRANSACTION_LIMIT
    ) -> List[Dict[str, Any]]:
        """Audit trail for a user, newest first."""
        user_id = InputValidator.validate_user_id(user_id)
        limit = InputValidator.validate_limit(limit)

        async with DatabaseService.get_session() as session:
            rows = await self._log_repo.find_many_where(
                session,
                TransactionLog.user_id == user_id,
                order_by=[TransactionLog.timestamp.desc(), TransactionLog.id.desc()],
                limit=limit,
            )

            return [
                {
                    "id": row.id,
                    "transaction_type": row.transaction_type,
                    "amount": row.amount,
                    "balance_after": row.balance_after,
                    "reason": row.reason,
                    "details": row.details,
                    "timestamp": row.timestamp,
                }
                for row in rows
            ]

    # ========================================================================
    # EVENTS
    # ========================================================================

    async def announce(
        self,
        transaction_type: TransactionType,
        user_id: int,
        amount: int,
        balance_after: int,
        reason: str,
    ) -> None:
        """Publish the ledger event for a committed balance change."""
        event_type = (
            "points.credited"
            if transaction_type is TransactionType.CREDIT
            else "points.debited"
        )
        await self.emit_event(
            event_type,
            {
                "user_id": user_id,
                "amount": amount,
                "balance_after": balance_after,
                "reason": reason,
            },
        )

    # ========================================================================
    # INTERNAL
    # ========================================================================

    async def _record(
        self,
        session: AsyncSession,
        user_id: int,
        transaction_type: TransactionType,
        amount: int,
        balance_after: int,
        reason: str,
        details: Optional[Dict[str, Any]],
    ) -> None:
        await self._log_repo.add(
            session,
            TransactionLog(
                user_id=user_id,
                transaction_type=transaction_type.value,
                amount=amount,
                balance_after=balance_after,
                reason=reason,
                details=dict(details or {}),
            ),
        )

        self.log.info(
            f"Spark points {transaction_type.value}: {amount}",
            extra={
                "user_id": user_id,
                "transaction_type": transaction_type.value,
                "amount": amount,
                "balance_after": balance_after,
                "reason": reason,
            },
        )
