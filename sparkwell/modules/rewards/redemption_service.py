"""
Redemption Service
==================

Purpose
-------
Spends spark points on catalog rewards and reports what a user owns.

Domain
------
- Redeem a reward: conditional debit + redemption record in one transaction
- Snapshot reward name, description and cost onto the record
- Set `expires_at` for temporary rewards only
- Redemption history (optionally by status), newest first
- Active redemptions annotated with a derived `is_expired`

Expiry
------
The persisted status is never advanced by this service. Expiry of a
temporary reward is derived at read time (`now > expires_at`), so an ACTIVE
record may report `is_expired=True`; callers see both values.

Concurrency
-----------
The debit is the first statement of the transaction and is a single
conditional UPDATE, so concurrent redemptions against one balance succeed
at most floor(balance / cost) times and the balance never goes negative.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sparkwell.core.database.base import ensure_utc, utc_now
from sparkwell.core.database.service import DatabaseService
from sparkwell.core.validation.input_validator import InputValidator
from sparkwell.database.models.economy.redemption import Redemption
from sparkwell.database.models.enums import RedemptionStatus, TransactionType
from sparkwell.domain.models.redemption import ActiveRedemption, RedemptionRecord
from sparkwell.modules.shared.base_repository import BaseRepository
from sparkwell.modules.shared.base_service import BaseService
from sparkwell.modules.shared.constants import DEFAULT_REDEMPTION_HISTORY_LIMIT
from sparkwell.modules.shared.exceptions import InvalidRewardError

if TYPE_CHECKING:
    from logging import Logger

    from sparkwell.core.config.manager import ConfigManager
    from sparkwell.core.event.bus import EventBus
    from sparkwell.modules.ledger.service import PointsLedgerService
    from sparkwell.modules.rewards.catalog import RewardCatalog


@dataclass(frozen=True)
class RedemptionResult:
    record: RedemptionRecord
    remaining_balance: int

    def to_dict(self) -> Dict[str, Any]:
        return {**self.record.to_dict(), "remaining_balance": self.remaining_balance}


class RedemptionService(BaseService):
    """
    Reward redemption and redemption queries.

    Public Methods
    --------------
    - redeem() -> RedemptionResult
    - history() -> list of RedemptionRecord
    - active_redemptions() -> list of ActiveRedemption
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
        catalog: RewardCatalog,
        ledger: PointsLedgerService,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)
        self._catalog = catalog
        self._ledger = ledger
        self._redemption_repo = BaseRepository[Redemption](Redemption, self.log)

    @property
    def catalog(self) -> RewardCatalog:
        return self._catalog

    # ========================================================================
    # PUBLIC API - Write Operations
    # ========================================================================

    async def redeem(
        self, user_id: int, reward_id: str, now: Optional[datetime] = None
    ) -> RedemptionResult:
        """
        Spend spark points on a catalog reward.

        This is a **write operation**; the debit and the redemption record
        commit together or not at all.

        Raises:
            ValidationError: blank reward id or invalid user id
            InvalidRewardError: reward id not in the catalog
            NotFoundError: user does not exist
            InsufficientBalanceError: balance < cost (no record created)

        Example:
            >>> result = await service.redeem(user_id, "advanced_analytics")
            >>> result.remaining_balance
            0
        """
        user_id = InputValidator.validate_user_id(user_id)
        reward_id = InputValidator.validate_string(reward_id, "reward_id", max_length=100)

        reward = self._catalog.by_id(reward_id)
        if reward is None:
            raise InvalidRewardError(reward_id)

        redeemed_at = ensure_utc(now) if now is not None else utc_now()
        reason = f"redeem:{reward.id}"

        self.log_operation(
            "redeem", user_id=user_id, reward_id=reward.id, cost=reward.cost
        )

        async with DatabaseService.get_transaction() as session:
            remaining = await self._ledger.debit(
                user_id,
                reward.cost,
                reason=reason,
                session=session,
                details={"reward_id": reward.id, "catalog_version": self._catalog.version},
            )

            row = await self._redemption_repo.add(
                session,
                Redemption(
                    user_id=user_id,
                    reward_id=reward.id,
                    reward_name=reward.name,
                    reward_description=reward.description,
                    cost=reward.cost,
                    redeemed_at=redeemed_at,
                    status=RedemptionStatus.ACTIVE.value,
                    expires_at=reward.expires_at(redeemed_at),
                ),
            )
            record = RedemptionRecord.from_db(row)

        self.log.info(
            f"Reward redeemed: {reward.id}",
            extra={
                "user_id": user_id,
                "reward_id": reward.id,
                "redemption_id": record.id,
                "cost": reward.cost,
                "remaining_balance": remaining,
            },
        )

        await self._ledger.announce(
            TransactionType.DEBIT, user_id, reward.cost, remaining, reason
        )
        await self.emit_event(
            "reward.redeemed",
            {
                "user_id": user_id,
                "reward_id": reward.id,
                "redemption_id": record.id,
                "cost": reward.cost,
                "expires_at": record.expires_at.isoformat() if record.expires_at else None,
                "remaining_balance": remaining,
            },
        )

        return RedemptionResult(record=record, remaining_balance=remaining)

    # ========================================================================
    # PUBLIC API - Read Operations
    # ========================================================================

    async def history(
        self,
        user_id: int,
        status: Optional[str] = None,
        limit: int = DEFAULT_REDEMPTION_HISTORY_LIMIT,
    ) -> List[RedemptionRecord]:
        """Redemptions newest first, optionally filtered by persisted status."""
        user_id = InputValidator.validate_user_id(user_id)
        limit = InputValidator.validate_limit(limit)

        conditions = [Redemption.user_id == user_id]
        if status is not None:
            status = InputValidator.validate_choice(
                status, "status", [s.value for s in RedemptionStatus]
            )
            conditions.append(Redemption.status == status)

        async with DatabaseService.get_session() as session:
            rows = await self._redemption_repo.find_many_where(
                session,
                *conditions,
                order_by=[Redemption.redeemed_at.desc(), Redemption.id.desc()],
                limit=limit,
            )
            return [RedemptionRecord.from_db(row) for row in rows]

    async def active_redemptions(
        self, user_id: int, now: Optional[datetime] = None
    ) -> List[ActiveRedemption]:
        """
        ACTIVE redemptions, newest first, each with `is_expired` derived
        against `now`.
        """
        user_id = InputValidator.validate_user_id(user_id)
        now = ensure_utc(now) if now is not None else utc_now()

        async with DatabaseService.get_session() as session:
            rows = await self._redemption_repo.find_many_where(
                session,
                Redemption.user_id == user_id,
                Redemption.status == RedemptionStatus.ACTIVE.value,
                order_by=[Redemption.redeemed_at.desc(), Redemption.id.desc()],
            )

        records = [RedemptionRecord.from_db(row) for row in rows]
        return [
            ActiveRedemption(record=record, is_expired=record.is_expired_at(now))
            for record in records
        ]
