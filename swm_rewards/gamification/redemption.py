"""
Reward Redemption

Exchanges spendable points for rewards and issues claim codes.

Claim codes look like SWM-<base36 millis>-<16 hex chars>. Every code is
reserved in the repository's issued-code registry before it is handed out
and regenerated on collision, so uniqueness is guaranteed rather than
merely likely.

Reward Shop:
- ₹50 Gift Card: 500 points
- Plant a Tree: 200 points
- Premium Badge: 1000 points
- 2x Points Multiplier: 800 points (doubles credits for 7 days)
- Community Hero Title: 1500 points
- Recycling Kit: 300 points
"""

from dataclasses import dataclass, asdict
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
import logging
import secrets

from swm_rewards import config
from swm_rewards.db.account_repository import AccountRepository
from swm_rewards.exceptions import InsufficientPointsError, InvalidAmountError, RewardsEngineError
from swm_rewards.gamification.reward_store import RewardStore, apply_multiplier
from swm_rewards.models.reward import ClaimResult
from swm_rewards.monitoring.prometheus_metrics import track_claim
from swm_rewards.utils.datetime_helpers import to_utc

logger = logging.getLogger(__name__)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"
MAX_CODE_ATTEMPTS = 10


@dataclass(frozen=True)
class ShopItem:
    """Reward available in the shop"""
    id: int
    name: str
    description: str
    points_cost: int
    icon: str
    category: str
    boost: bool = False


REWARD_SHOP: Dict[int, ShopItem] = {
    item.id: item
    for item in (
        ShopItem(1, "₹50 Gift Card", "Amazon/Flipkart voucher", 500, "🎁", "Shopping"),
        ShopItem(2, "Plant a Tree", "We will plant a tree in your name", 200, "🌳", "Environment"),
        ShopItem(3, "Premium Badge", "Exclusive profile badge", 1000, "⭐", "Profile"),
        ShopItem(4, "2x Points Multiplier", "Double points for 7 days", 800, "⚡", "Boost", boost=True),
        ShopItem(5, "Community Hero Title", "Special title on profile", 1500, "👑", "Profile"),
        ShopItem(6, "Recycling Kit", "Free recycling starter kit", 300, "♻️", "Physical"),
    )
}


def _to_base36(value: int) -> str:
    digits = []
    while True:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
        if value == 0:
            break
    return "".join(reversed(digits))


def generate_claim_code(at: datetime, prefix: Optional[str] = None) -> str:
    """Opaque claim code from a timestamp and 64 random bits"""
    millis = int(to_utc(at).timestamp() * 1000)
    token = secrets.token_hex(8)
    return f"{prefix or config.CLAIM_CODE_PREFIX}-{_to_base36(millis)}-{token}".upper()


class RedemptionService:
    """
    Validates and executes point-for-reward exchanges.

    Responsibilities:
    - Claim validation (reward name, whole positive cost)
    - Unique claim code issuance
    - Reward shop catalogue and boost activation
    """

    def __init__(self, store: RewardStore, repository: AccountRepository):
        self._store = store
        self._repository = repository

    async def issue_code(self, at: datetime) -> str:
        """Generate and reserve a claim code that was never issued before"""
        for _ in range(MAX_CODE_ATTEMPTS):
            code = generate_claim_code(at)
            if await self._repository.reserve_claim_code(code):
                return code
            logger.warning(f"Claim code collision on {code}, regenerating")

        raise RewardsEngineError(
            message=f"Could not issue a unique claim code after {MAX_CODE_ATTEMPTS} attempts",
            operation="issue_code",
            user_message="We couldn't issue your reward code. Please try again.",
        )

    async def claim(
        self,
        user_id: str,
        reward_name: str,
        points_cost: int,
        *,
        at: Optional[datetime] = None,
    ) -> ClaimResult:
        """
        Redeem points for a named reward

        Raises:
            InvalidAmountError: blank name or cost that is not a positive integer
            AccountNotFoundError: user has no reward account
            InsufficientPointsError: balance below cost
        """
        return await self._claim(user_id, reward_name, points_cost, at=at)

    async def claim_catalog_item(
        self,
        user_id: str,
        item_id: int,
        *,
        at: Optional[datetime] = None,
    ) -> ClaimResult:
        """Redeem a shop item at its catalogue price"""
        item = REWARD_SHOP.get(item_id)
        if item is None:
            track_claim("invalid")
            raise InvalidAmountError(
                message=f"Unknown reward {item_id}",
                field="item_id",
                value=item_id,
                user_id=user_id,
            )

        on_claim = None
        if item.boost:

            def on_claim(account, claimed_at):
                apply_multiplier(
                    account,
                    config.BOOST_MULTIPLIER,
                    timedelta(days=config.BOOST_DURATION_DAYS),
                    claimed_at,
                )

        return await self._claim(user_id, item.name, item.points_cost, at=at, on_claim=on_claim)

    async def shop(self, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Shop catalogue with affordability for a user

        Returns:
            [{'id', 'name', 'description', 'points_cost', 'icon', 'category',
              'can_afford', 'user_points'}]
        """
        account = await self._store.find(user_id) if user_id else None
        user_points = account.points if account else 0

        catalogue = []
        for item in REWARD_SHOP.values():
            entry = asdict(item)
            entry.pop("boost")
            entry["can_afford"] = user_points >= item.points_cost
            entry["user_points"] = user_points
            catalogue.append(entry)
        return catalogue

    async def _claim(self, user_id, reward_name, points_cost, *, at=None, on_claim=None) -> ClaimResult:
        if not isinstance(reward_name, str) or not reward_name.strip():
            track_claim("invalid")
            raise InvalidAmountError(
                message="Reward name is required",
                field="reward_name",
                value=reward_name,
                user_id=user_id,
            )
        if isinstance(points_cost, bool) or not isinstance(points_cost, int) or points_cost <= 0:
            track_claim("invalid")
            raise InvalidAmountError(
                message="Points cost must be a positive whole number",
                field="points_cost",
                value=points_cost,
                user_id=user_id,
            )

        try:
            result = await self._store.claim_reward(
                user_id,
                reward_name.strip(),
                points_cost,
                code_issuer=self.issue_code,
                at=at,
                on_claim=on_claim,
            )
        except InsufficientPointsError:
            track_claim("insufficient_points")
            raise

        track_claim("success")
        return result
