"""Unit tests for reward redemption (swm_rewards/gamification/redemption.py)"""
import re
import pytest
from datetime import datetime, timedelta

from swm_rewards.exceptions import (
    AccountNotFoundError,
    InsufficientPointsError,
    InvalidAmountError,
    RewardsEngineError,
)
from swm_rewards.gamification import redemption as redemption_module
from swm_rewards.gamification.redemption import REWARD_SHOP, _to_base36, generate_claim_code
from swm_rewards.utils.datetime_helpers import UTC


NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=UTC)
CODE_PATTERN = re.compile(r"^SWM-[0-9A-Z]+-[0-9A-F]{16}$")


# ============================================================================
# Claim Codes
# ============================================================================

class TestClaimCodes:

    def test_base36(self):
        assert _to_base36(0) == "0"
        assert _to_base36(35) == "z"
        assert _to_base36(36) == "10"
        assert _to_base36(36 ** 3) == "1000"

    def test_code_format(self):
        code = generate_claim_code(NOW)

        assert CODE_PATTERN.match(code)
        millis = int(NOW.timestamp() * 1000)
        assert code.split("-")[1] == _to_base36(millis).upper()

    def test_custom_prefix(self):
        assert generate_claim_code(NOW, prefix="ECO").startswith("ECO-")

    def test_codes_differ_at_same_instant(self):
        codes = {generate_claim_code(NOW) for _ in range(100)}

        assert len(codes) == 100

    @pytest.mark.asyncio
    async def test_collision_is_regenerated(self, redemption, monkeypatch):
        candidates = iter(["SWM-A-1", "SWM-A-1", "SWM-A-2"])
        monkeypatch.setattr(redemption_module, "generate_claim_code", lambda at: next(candidates))

        first = await redemption.issue_code(NOW)
        second = await redemption.issue_code(NOW)

        assert first == "SWM-A-1"
        assert second == "SWM-A-2"

    @pytest.mark.asyncio
    async def test_gives_up_after_repeated_collisions(self, redemption, repository, monkeypatch):
        await repository.reserve_claim_code("SWM-TAKEN")
        monkeypatch.setattr(redemption_module, "generate_claim_code", lambda at: "SWM-TAKEN")

        with pytest.raises(RewardsEngineError):
            await redemption.issue_code(NOW)


# ============================================================================
# Claims
# ============================================================================

class TestClaim:

    @pytest.mark.asyncio
    async def test_successful_claim(self, redemption, store, seed_account):
        await seed_account("citizen-1", points=700, total_points=700)

        result = await redemption.claim("citizen-1", "Plant a Tree", 200, at=NOW)

        assert CODE_PATTERN.match(result.claim_code)
        assert result.remaining_points == 500
        assert result.claim.reward_name == "Plant a Tree"
        assert (await store.get("citizen-1")).points == 500

    @pytest.mark.asyncio
    async def test_claim_codes_unique_across_claims(self, redemption, seed_account):
        await seed_account("citizen-1", points=1000, total_points=1000)

        codes = [
            (await redemption.claim("citizen-1", "Sticker", 10, at=NOW)).claim_code
            for _ in range(20)
        ]

        assert len(set(codes)) == 20

    @pytest.mark.asyncio
    async def test_reward_name_is_trimmed(self, redemption, seed_account):
        await seed_account("citizen-1", points=100, total_points=100)

        result = await redemption.claim("citizen-1", "  Plant a Tree ", 50, at=NOW)

        assert result.claim.reward_name == "Plant a Tree"

    @pytest.mark.asyncio
    async def test_insufficient_points(self, redemption, store, seed_account):
        before = await seed_account("citizen-1", points=100, total_points=900)

        with pytest.raises(InsufficientPointsError) as exc_info:
            await redemption.claim("citizen-1", "Gift Card", 500, at=NOW)

        assert "100" in exc_info.value.user_message
        assert "500" in exc_info.value.user_message
        assert await store.get("citizen-1") == before

    @pytest.mark.asyncio
    async def test_unknown_account(self, redemption):
        with pytest.raises(AccountNotFoundError):
            await redemption.claim("ghost", "Gift Card", 500, at=NOW)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["", "   ", None])
    async def test_blank_reward_name_rejected(self, redemption, seed_account, name):
        await seed_account("citizen-1", points=100, total_points=100)

        with pytest.raises(InvalidAmountError):
            await redemption.claim("citizen-1", name, 10, at=NOW)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("cost", [0, -5, 10.5, True])
    async def test_invalid_cost_rejected(self, redemption, seed_account, cost):
        await seed_account("citizen-1", points=100, total_points=100)

        with pytest.raises(InvalidAmountError):
            await redemption.claim("citizen-1", "Gift", cost, at=NOW)


# ============================================================================
# Reward Shop
# ============================================================================

class TestRewardShop:

    def test_catalogue(self):
        assert sorted(REWARD_SHOP) == [1, 2, 3, 4, 5, 6]
        assert REWARD_SHOP[4].name == "2x Points Multiplier"
        assert REWARD_SHOP[4].boost is True

    @pytest.mark.asyncio
    async def test_shop_affordability(self, redemption, seed_account):
        await seed_account("citizen-1", points=500, total_points=500)

        shop = await redemption.shop("citizen-1")
        affordable = {item["id"] for item in shop if item["can_afford"]}

        assert affordable == {1, 2, 6}
        assert all(item["user_points"] == 500 for item in shop)
        assert all("boost" not in item for item in shop)

    @pytest.mark.asyncio
    async def test_shop_without_user(self, redemption):
        shop = await redemption.shop()

        assert len(shop) == 6
        assert not any(item["can_afford"] for item in shop)

    @pytest.mark.asyncio
    async def test_catalog_claim_charges_listed_price(self, redemption, seed_account):
        await seed_account("citizen-1", points=400, total_points=400)

        result = await redemption.claim_catalog_item("citizen-1", 6, at=NOW)

        assert result.claim.reward_name == "Recycling Kit"
        assert result.remaining_points == 100

    @pytest.mark.asyncio
    async def test_boost_item_doubles_credits_for_a_week(self, redemption, store, seed_account):
        await seed_account("citizen-1", points=1000, total_points=1000)

        await redemption.claim_catalog_item("citizen-1", 4, at=NOW)
        account = await store.get("citizen-1")

        assert account.points == 200
        assert account.multiplier == 2.0
        assert account.multiplier_expiry == NOW + timedelta(days=7)

        boosted = await store.add_points("citizen-1", 15, "Report", at=NOW + timedelta(days=1))
        expired = await store.add_points("citizen-1", 15, "Report", at=NOW + timedelta(days=8))

        assert boosted.effective_amount == 30
        assert expired.effective_amount == 15

    @pytest.mark.asyncio
    async def test_unknown_item(self, redemption, seed_account):
        await seed_account("citizen-1", points=5000, total_points=5000)

        with pytest.raises(InvalidAmountError):
            await redemption.claim_catalog_item("citizen-1", 99, at=NOW)
