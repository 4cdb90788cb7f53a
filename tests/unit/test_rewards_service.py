"""Unit tests for RewardsService (swm_rewards/services/rewards_service.py)"""
import pytest
from datetime import datetime, timedelta
from unittest.mock import AsyncMock

from swm_rewards.models.events import AchievementCompletedEvent, BadgeAwardedEvent, LevelUpEvent
from swm_rewards.models.reward import AchievementId, BadgeName, RewardStatistics
from swm_rewards.services.container import ServiceContainer
from swm_rewards.services.rewards_service import RewardsService
from swm_rewards.utils.datetime_helpers import UTC


DAY = datetime(2024, 6, 10, 9, 0, 0, tzinfo=UTC)


# ============================================================================
# Activity Credits
# ============================================================================

class TestActivityCredits:

    @pytest.mark.asyncio
    async def test_report_submission(self, service):
        result = await service.record_report_submitted("citizen-1", at=DAY)

        assert result.effective_amount == 10
        assert result.account.statistics.total_reports == 1
        assert result.awarded_badges == [BadgeName.FIRST_REPORT]

    @pytest.mark.asyncio
    async def test_report_resolution(self, service):
        result = await service.record_report_resolved("citizen-1", at=DAY)

        assert result.effective_amount == 25
        assert result.account.statistics.resolved_reports == 1

    @pytest.mark.asyncio
    async def test_recycling_updates_weight_and_points(self, service):
        result = await service.record_recycling("citizen-1", 2.5, at=DAY)

        assert result.effective_amount == 25
        assert result.account.statistics.total_recycled == 2.5

    @pytest.mark.asyncio
    async def test_recycling_99_to_100_awards_recycling_master_once(self, service, seed_account):
        await seed_account("citizen-1", statistics=RewardStatistics(total_recycled=99))

        first = await service.record_recycling("citizen-1", 1, at=DAY)
        second = await service.record_recycling("citizen-1", 1, at=DAY)

        assert first.awarded_badges == [BadgeName.RECYCLING_MASTER]
        assert AchievementId.RECYCLE_100 in first.completed_achievements
        assert second.awarded_badges == []

    @pytest.mark.asyncio
    async def test_review_and_email_verification(self, service):
        review = await service.record_review("citizen-1", at=DAY)
        email = await service.record_email_verified("citizen-1", at=DAY)

        assert review.effective_amount == 5
        assert email.effective_amount == 20
        assert email.account.points == 25

    @pytest.mark.asyncio
    async def test_register_user(self, service, store):
        account = await service.register_user("citizen-1", display_name="Asha")

        assert account.display_name == "Asha"
        assert (await store.get("citizen-1")).points == 0


# ============================================================================
# Notifications
# ============================================================================

class TestNotifications:

    @pytest.mark.asyncio
    async def test_badge_event_dispatched(self, service, dispatcher):
        await service.record_report_submitted("citizen-1", at=DAY)

        assert len(dispatcher.events) == 1
        event = dispatcher.events[0]
        assert isinstance(event, BadgeAwardedEvent)
        assert event.badge == BadgeName.FIRST_REPORT
        assert event.user_id == "citizen-1"

    @pytest.mark.asyncio
    async def test_events_ordered_level_badges_achievements(self, service, dispatcher, seed_account):
        await seed_account(
            "citizen-1",
            points=95,
            total_points=95,
            statistics=RewardStatistics(total_reports=9),
        )

        await service.record_report_submitted("citizen-1", at=DAY)

        assert [type(event) for event in dispatcher.events] == [
            LevelUpEvent,
            BadgeAwardedEvent,
            AchievementCompletedEvent,
        ]
        assert dispatcher.events[0].new_level == 2
        assert dispatcher.events[2].achievement_id == AchievementId.REPORT_10

    @pytest.mark.asyncio
    async def test_no_events_for_plain_credit(self, service, dispatcher):
        await service.award_points("citizen-1", 5, "Review", at=DAY)

        assert dispatcher.events == []

    @pytest.mark.asyncio
    async def test_dispatch_failure_keeps_credit(self, store, redemption):
        failing = AsyncMock()
        failing.dispatch.side_effect = RuntimeError("socket closed")
        service = RewardsService(store, redemption, failing)

        result = await service.record_report_submitted("citizen-1", at=DAY)

        assert result.account.points == 10
        assert (await store.get("citizen-1")).points == 10
        failing.dispatch.assert_awaited_once()


# ============================================================================
# Reads
# ============================================================================

class TestReads:

    @pytest.mark.asyncio
    async def test_my_rewards_creates_account(self, service, store):
        summary = await service.get_my_rewards("citizen-1")

        assert summary["points"] == 0
        assert summary["level"] == 1
        assert summary["next_level"]["next_level"] == 2
        assert summary["next_level"]["points_needed"] == 100
        assert "version" not in summary
        assert await store.find("citizen-1") is not None

    @pytest.mark.asyncio
    async def test_leaderboard_with_user_rank(self, service, seed_account):
        recent = datetime.now(UTC) - timedelta(days=1)
        await seed_account("a", points=300, statistics=RewardStatistics(last_active_at=recent))
        await seed_account("b", points=300, statistics=RewardStatistics(last_active_at=recent - timedelta(days=20)))
        await seed_account("c", points=500, statistics=RewardStatistics(last_active_at=recent))

        board = await service.get_leaderboard("weekly", limit=10, user_id="b")

        assert board["timeframe"] == "weekly"
        assert [entry["user_id"] for entry in board["leaderboard"]] == ["c", "a"]
        assert board["user_rank"] == 2

    @pytest.mark.asyncio
    async def test_leaderboard_unknown_user_has_no_rank(self, service, seed_account):
        await seed_account("a", points=10)

        board = await service.get_leaderboard(user_id="ghost")

        assert board["user_rank"] is None
        assert board["timeframe"] == "all"

    @pytest.mark.asyncio
    async def test_achievements_for_new_user_do_not_create_account(self, service, store):
        achievements = await service.get_achievements("citizen-1")

        assert len(achievements) == 6
        assert await store.find("citizen-1") is None

    @pytest.mark.asyncio
    async def test_shop_and_claim(self, service, seed_account):
        await seed_account("citizen-1", points=250, total_points=250)

        shop = await service.get_reward_shop("citizen-1")
        result = await service.claim_shop_item("citizen-1", 2)

        assert any(item["name"] == "Plant a Tree" and item["can_afford"] for item in shop)
        assert result.remaining_points == 50


# ============================================================================
# Container
# ============================================================================

def test_container_wires_shared_store():
    container = ServiceContainer()

    assert container.rewards_service.store is container.reward_store
    assert container.rewards_service.redemption is container.redemption_service
    assert container.rewards_service is container.rewards_service
