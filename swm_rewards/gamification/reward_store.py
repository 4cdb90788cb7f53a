"""
Reward Store

Owns every mutation of a reward account: point credits, claims and
multiplier boosts.

Each operation runs as one unit:
1. Take the account's own lock (accounts never share a lock)
2. Read a fresh copy from the repository
3. Apply the change to the copy
4. Persist with the version that was read

The repository only ever sees complete results, so a failure at any step
leaves the stored account exactly as it was. A version conflict (another
process wrote the account) restarts the unit from a fresh read, up to
MAX_CONFLICT_RETRIES times.
"""

import asyncio
from contextlib import asynccontextmanager
import logging
from datetime import datetime, timedelta
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from swm_rewards import config
from swm_rewards.db.account_repository import AccountRepository
from swm_rewards.exceptions import (
    AccountNotFoundError,
    ConcurrencyConflictError,
    InsufficientPointsError,
    InvalidAmountError,
)
from swm_rewards.gamification import badge_system
from swm_rewards.gamification.achievement_system import refresh_achievements
from swm_rewards.gamification.levels import level_for
from swm_rewards.gamification.points_ledger import apply_credit, validate_amount
from swm_rewards.gamification.streak_system import record_activity
from swm_rewards.models.reward import (
    ClaimRecord,
    ClaimResult,
    CreditResult,
    RewardAccount,
    RewardStatistics,
    StatisticsDelta,
)
from swm_rewards.monitoring.prometheus_metrics import track_concurrency_conflict
from swm_rewards.utils.datetime_helpers import now_utc, to_utc

logger = logging.getLogger(__name__)

CodeIssuer = Callable[[datetime], Awaitable[str]]
Mutation = Callable[[RewardAccount], Awaitable[Any]]


class AccountLockRegistry:
    """
    One asyncio.Lock per user id while anything holds or waits on it

    A lock is created on first use and dropped when its last user releases
    it, so ids that never become accounts do not accumulate.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._locks

    @asynccontextmanager
    async def hold(self, user_id: str) -> AsyncIterator[None]:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = self._locks[user_id] = asyncio.Lock()
        self._users[user_id] = self._users.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[user_id] -= 1
            if self._users[user_id] == 0:
                del self._users[user_id]
                del self._locks[user_id]


def _apply_statistics(statistics: RewardStatistics, delta: StatisticsDelta) -> None:
    if delta.reports:
        statistics.total_reports += delta.reports
    if delta.resolved_reports:
        statistics.resolved_reports += delta.resolved_reports
    if delta.recycled_kg:
        statistics.total_recycled += delta.recycled_kg


class RewardStore:
    """
    Per-user reward aggregate store.

    Responsibilities:
    - Point credits (ledger, statistics, streak, level, achievements, badges)
    - Reward claims against the spendable balance
    - Temporary point multipliers
    """

    def __init__(
        self,
        repository: AccountRepository,
        max_conflict_retries: Optional[int] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._repository = repository
        self._locks = AccountLockRegistry()
        self._max_conflict_retries = (
            config.MAX_CONFLICT_RETRIES if max_conflict_retries is None else max_conflict_retries
        )
        self._clock = clock

    @property
    def locks(self) -> AccountLockRegistry:
        return self._locks

    # ==========================================
    # Reads
    # ==========================================

    async def get(self, user_id: str) -> RewardAccount:
        """Return the account or raise AccountNotFoundError"""
        account = await self._repository.get(user_id)
        if account is None:
            raise AccountNotFoundError(user_id, operation="get")
        return account

    async def find(self, user_id: str) -> Optional[RewardAccount]:
        """Return the account or None"""
        return await self._repository.get(user_id)

    async def list_accounts(self) -> List[RewardAccount]:
        return await self._repository.list_all()

    async def get_or_create(self, user_id: str, display_name: Optional[str] = None) -> RewardAccount:
        """Fetch the account, creating an empty one (points=0, level=1) on first use"""

        async def _noop(account: RewardAccount) -> None:
            return None

        existing = await self._repository.get(user_id)
        if existing is not None:
            return existing

        account, _ = await self._mutate(
            user_id, "get_or_create", _noop, create=True, display_name=display_name
        )
        logger.info(f"Created reward account for user {user_id}")
        return account

    # ==========================================
    # Mutations
    # ==========================================

    async def add_points(
        self,
        user_id: str,
        raw_amount: Union[int, float],
        reason: str,
        *,
        activity: Optional[Union[StatisticsDelta, Dict[str, Any]]] = None,
        at: Optional[datetime] = None,
        display_name: Optional[str] = None,
    ) -> CreditResult:
        """
        Credit points for an activity

        Args:
            user_id: Account owner
            raw_amount: Non-negative points before any multiplier
            reason: Human-readable description (logged)
            activity: Statistic increments applied in the same unit
            at: Activity instant (defaults to now, UTC)
            display_name: Stored on the account if it has none yet

        Returns:
            CreditResult with the persisted account and newly awarded badges

        Raises:
            InvalidAmountError: negative or non-numeric amount or activity
            ConcurrencyConflictError: retries exhausted
        """
        validate_amount(raw_amount, user_id=user_id)
        delta = self._coerce_delta(activity, user_id)
        at = to_utc(at) if at else self._clock()

        async def _credit(account: RewardAccount) -> Dict[str, Any]:
            old_level = account.level
            effective = apply_credit(account, raw_amount, at)
            _apply_statistics(account.statistics, delta)
            record_activity(account.statistics, at)
            account.level = level_for(account.total_points)
            completed = refresh_achievements(account, at)
            awarded = badge_system.evaluate(account, at)
            if display_name and not account.display_name:
                account.display_name = display_name
            return {
                "old_level": old_level,
                "effective": effective,
                "completed": completed,
                "awarded": awarded,
            }

        account, outcome = await self._mutate(
            user_id, "add_points", _credit, create=True, display_name=display_name
        )

        logger.info(
            f"Awarded {outcome['effective']} points to user {user_id} for {reason!r}. "
            f"Total: {account.total_points}, Balance: {account.points}, Level: {account.level}"
        )
        if account.level > outcome["old_level"]:
            logger.info(f"User {user_id} leveled up from {outcome['old_level']} to {account.level}!")

        return CreditResult(
            account=account,
            effective_amount=outcome["effective"],
            reason=reason,
            awarded_badges=outcome["awarded"],
            completed_achievements=outcome["completed"],
            old_level=outcome["old_level"],
            new_level=account.level,
        )

    async def claim_reward(
        self,
        user_id: str,
        reward_name: str,
        points_cost: int,
        *,
        code_issuer: CodeIssuer,
        at: Optional[datetime] = None,
        on_claim: Optional[Callable[[RewardAccount, datetime], None]] = None,
    ) -> ClaimResult:
        """
        Spend points on a reward

        Args:
            user_id: Account owner
            reward_name: Reward being redeemed
            points_cost: Whole, non-negative number of points
            code_issuer: Returns a claim code guaranteed unique
            at: Claim instant (defaults to now, UTC)
            on_claim: Extra change applied to the account in the same unit

        Raises:
            AccountNotFoundError: no account for user_id
            InvalidAmountError: cost is not a non-negative integer
            InsufficientPointsError: balance below cost (nothing changes)
        """
        if isinstance(points_cost, bool) or not isinstance(points_cost, int):
            raise InvalidAmountError(
                message="Points cost must be a whole number",
                field="points_cost",
                value=points_cost,
                user_id=user_id,
            )
        validate_amount(points_cost, field="points_cost", user_id=user_id)
        at = to_utc(at) if at else self._clock()

        async def _claim(account: RewardAccount) -> ClaimRecord:
            if account.points < points_cost:
                raise InsufficientPointsError(
                    balance=account.points,
                    required=points_cost,
                    user_id=user_id,
                    operation="claim_reward",
                )

            code = await code_issuer(at)
            record = ClaimRecord(
                reward_name=reward_name,
                points_cost=points_cost,
                claimed_at=at,
                code=code,
            )
            account.points -= points_cost
            account.claims.append(record)
            if on_claim is not None:
                on_claim(account, at)
            return record

        account, record = await self._mutate(user_id, "claim_reward", _claim)

        logger.info(
            f"User {user_id} claimed {reward_name!r} for {points_cost} points. "
            f"Remaining: {account.points}"
        )

        return ClaimResult(
            claim_code=record.code,
            remaining_points=account.points,
            claim=record,
        )

    async def activate_multiplier(
        self,
        user_id: str,
        factor: float,
        duration: timedelta,
        *,
        at: Optional[datetime] = None,
    ) -> RewardAccount:
        """Boost future credits by factor until at + duration"""
        validate_amount(factor, field="multiplier", user_id=user_id)
        if factor < 1:
            raise InvalidAmountError(
                message="Multiplier must be at least 1.0",
                field="multiplier",
                value=factor,
                user_id=user_id,
            )
        at = to_utc(at) if at else self._clock()

        async def _boost(account: RewardAccount) -> None:
            apply_multiplier(account, factor, duration, at)

        account, _ = await self._mutate(user_id, "activate_multiplier", _boost)
        logger.info(f"Activated {factor}x multiplier for user {user_id} until {account.multiplier_expiry}")
        return account

    # ==========================================
    # Unit of work
    # ==========================================

    async def _mutate(
        self,
        user_id: str,
        operation: str,
        mutation: Mutation,
        *,
        create: bool = False,
        display_name: Optional[str] = None,
    ) -> Tuple[RewardAccount, Any]:
        """Run mutation on a fresh copy under the account lock and persist it"""
        async with self._locks.hold(user_id):
            conflicts = 0
            while True:
                stored = await self._repository.get(user_id)
                if stored is None:
                    if not create:
                        raise AccountNotFoundError(user_id, operation=operation)
                    working = RewardAccount(user_id=user_id, display_name=display_name)
                    expected_version = None
                else:
                    working = stored.model_copy(deep=True)
                    expected_version = stored.version

                outcome = await mutation(working)
                working.updated_at = self._clock()

                try:
                    saved = await self._repository.put(working, expected_version)
                except ConcurrencyConflictError:
                    track_concurrency_conflict()
                    conflicts += 1
                    if conflicts > self._max_conflict_retries:
                        raise
                    logger.warning(
                        f"Retrying {operation} for user {user_id} after version conflict "
                        f"({conflicts}/{self._max_conflict_retries})"
                    )
                    continue

                return saved, outcome

    @staticmethod
    def _coerce_delta(
        activity: Optional[Union[StatisticsDelta, Dict[str, Any]]],
        user_id: str,
    ) -> StatisticsDelta:
        if activity is None:
            return StatisticsDelta()
        if isinstance(activity, StatisticsDelta):
            return activity
        try:
            return StatisticsDelta.model_validate(activity)
        except PydanticValidationError as e:
            raise InvalidAmountError(
                message="Activity statistics must be non-negative numbers",
                field="activity",
                value=activity,
                user_id=user_id,
                cause=e,
            )


def apply_multiplier(account: RewardAccount, factor: float, duration: timedelta, at: datetime) -> None:
    """Replace the account's boost with factor until at + duration"""
    account.multiplier = float(factor)
    account.multiplier_expiry = to_utc(at) + duration
