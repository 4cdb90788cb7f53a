"""
RewardsService - Rewards Business Logic

Entry point for the collaborators of the rewards engine:
- Report, recycling, review and account handlers credit points here
- The HTTP layer reads rewards, leaderboards, achievements and the shop
- Badge, level-up and achievement events go to the notification dispatcher
  once the account update is persisted
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from swm_rewards.gamification import leaderboard
from swm_rewards.gamification.achievement_system import get_achievement_progress
from swm_rewards.gamification.levels import next_level_info
from swm_rewards.gamification.points_ledger import points_for_activity
from swm_rewards.gamification.redemption import RedemptionService
from swm_rewards.gamification.reward_store import RewardStore
from swm_rewards.models.reward import (
    ClaimResult,
    CreditResult,
    RewardAccount,
    StatisticsDelta,
    Timeframe,
)
from swm_rewards.monitoring.prometheus_metrics import track_badge_awarded, track_points_awarded
from swm_rewards.services.notifications import (
    LoggingNotificationDispatcher,
    NotificationDispatcher,
    events_for_credit,
)

logger = logging.getLogger(__name__)


class RewardsService:
    """
    Service for rewards features.

    Responsibilities:
    - Crediting points for platform activity
    - Dispatching reward notifications
    - Reward summaries, leaderboards and achievement progress
    - Reward claims and the reward shop
    """

    def __init__(
        self,
        store: RewardStore,
        redemption: RedemptionService,
        dispatcher: Optional[NotificationDispatcher] = None,
    ):
        """
        Initialize RewardsService.

        Args:
            store: Reward account store
            redemption: Claim and shop service
            dispatcher: Notification dispatcher (defaults to logging only)
        """
        self.store = store
        self.redemption = redemption
        self.dispatcher = dispatcher or LoggingNotificationDispatcher()
        logger.debug("RewardsService initialized")

    # ==========================================
    # Crediting
    # ==========================================

    async def award_points(
        self,
        user_id: str,
        amount: Union[int, float],
        reason: str,
        *,
        activity: Optional[Union[StatisticsDelta, Dict[str, Any]]] = None,
        source: str = "manual",
        at: Optional[datetime] = None,
        display_name: Optional[str] = None,
    ) -> CreditResult:
        """
        Credit points and notify the user of badges and level ups

        Returns:
            CreditResult from the reward store
        """
        result = await self.store.add_points(
            user_id,
            amount,
            reason,
            activity=activity,
            at=at,
            display_name=display_name,
        )

        track_points_awarded(source, result.effective_amount)
        for badge in result.awarded_badges:
            track_badge_awarded(badge.value)

        await self._dispatch(result)
        return result

    async def record_report_submitted(self, user_id: str, *, at: Optional[datetime] = None) -> CreditResult:
        """Citizen filed a waste report"""
        return await self.award_points(
            user_id,
            points_for_activity("report"),
            "Report submitted",
            activity=StatisticsDelta(reports=1),
            source="report",
            at=at,
        )

    async def record_report_resolved(self, user_id: str, *, at: Optional[datetime] = None) -> CreditResult:
        """A report filed by the citizen was resolved"""
        return await self.award_points(
            user_id,
            points_for_activity("report_resolved"),
            "Report resolved",
            activity=StatisticsDelta(resolved_reports=1),
            source="report_resolved",
            at=at,
        )

    async def record_recycling(
        self,
        user_id: str,
        recycled_kg: float,
        *,
        at: Optional[datetime] = None,
    ) -> CreditResult:
        """Citizen logged recycled material"""
        return await self.award_points(
            user_id,
            points_for_activity("recycling", recycled_kg=recycled_kg),
            f"Recycled {recycled_kg}kg",
            activity={"recycled_kg": recycled_kg},
            source="recycling",
            at=at,
        )

    async def record_review(self, user_id: str, *, at: Optional[datetime] = None) -> CreditResult:
        """Citizen reviewed a recycling center"""
        return await self.award_points(
            user_id, points_for_activity("review"), "Review posted", source="review", at=at
        )

    async def record_email_verified(self, user_id: str, *, at: Optional[datetime] = None) -> CreditResult:
        """Citizen verified their email address"""
        return await self.award_points(
            user_id, points_for_activity("email_verified"), "Email verified", source="email_verified", at=at
        )

    async def register_user(self, user_id: str, display_name: Optional[str] = None) -> RewardAccount:
        """Create the reward account at registration"""
        return await self.store.get_or_create(user_id, display_name=display_name)

    # ==========================================
    # Reads
    # ==========================================

    async def get_my_rewards(self, user_id: str) -> Dict[str, Any]:
        """
        Reward summary for a user (account is created on first access)

        Returns:
            Account fields plus 'next_level' progress
        """
        account = await self.store.get_or_create(user_id)
        summary = account.model_dump(mode="json", exclude={"version"})
        summary["next_level"] = next_level_info(account.total_points).model_dump()
        return summary

    async def get_leaderboard(
        self,
        timeframe: Union[Timeframe, str] = Timeframe.ALL,
        limit: int = 100,
        user_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Leaderboard plus the caller's overall rank

        Returns:
            {
                'leaderboard': [LeaderboardEntry dicts],
                'user_rank': int | None,
                'timeframe': str
            }
        """
        timeframe = Timeframe(timeframe)
        accounts = await self.store.list_accounts()
        entries = leaderboard.rank(accounts, timeframe, limit=limit)

        user_rank = None
        if user_id and any(account.user_id == user_id for account in accounts):
            user_rank = leaderboard.rank_of(accounts, user_id)

        return {
            "leaderboard": [entry.model_dump() for entry in entries],
            "user_rank": user_rank,
            "timeframe": timeframe.value,
        }

    async def get_achievements(self, user_id: str) -> List[Dict[str, Any]]:
        """Achievement progress (zero progress when the user has no account yet)"""
        account = await self.store.find(user_id) or RewardAccount(user_id=user_id)
        return get_achievement_progress(account)

    async def get_reward_shop(self, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        return await self.redemption.shop(user_id)

    # ==========================================
    # Claims
    # ==========================================

    async def claim_reward(self, user_id: str, reward_name: str, points_cost: int) -> ClaimResult:
        return await self.redemption.claim(user_id, reward_name, points_cost)

    async def claim_shop_item(self, user_id: str, item_id: int) -> ClaimResult:
        return await self.redemption.claim_catalog_item(user_id, item_id)

    async def _dispatch(self, result: CreditResult) -> None:
        """Deliver events; a failing channel never undoes a persisted credit"""
        for event in events_for_credit(result):
            try:
                await self.dispatcher.dispatch(event)
            except Exception as e:
                logger.error(
                    f"Failed to dispatch {event.type} for user {event.user_id}: {e}",
                    exc_info=True,
                )
