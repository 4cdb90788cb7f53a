"""Global test fixtures and utilities for rewards engine tests"""
import pytest
from datetime import datetime

from swm_rewards.db.account_repository import InMemoryAccountRepository
from swm_rewards.gamification.redemption import RedemptionService
from swm_rewards.gamification.reward_store import RewardStore
from swm_rewards.models.reward import RewardAccount
from swm_rewards.services.rewards_service import RewardsService
from swm_rewards.utils.datetime_helpers import UTC


FIXED_NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=UTC)


class RecordingNotificationDispatcher:
    """Collects dispatched events instead of delivering them"""

    def __init__(self):
        self.events = []

    async def dispatch(self, event) -> None:
        self.events.append(event)


# ============================================================================
# Time Fixtures
# ============================================================================

@pytest.fixture
def fixed_now():
    """Deterministic 'now' used by the store clock"""
    return FIXED_NOW


# ============================================================================
# Engine Fixtures
# ============================================================================

@pytest.fixture
def repository():
    """Fresh in-memory account repository"""
    return InMemoryAccountRepository()


@pytest.fixture
def store(repository):
    """Reward store with a frozen clock"""
    return RewardStore(repository, clock=lambda: FIXED_NOW)


@pytest.fixture
def redemption(store, repository):
    return RedemptionService(store, repository)


@pytest.fixture
def dispatcher():
    return RecordingNotificationDispatcher()


@pytest.fixture
def service(store, redemption, dispatcher):
    """Rewards service wired to a recording dispatcher"""
    return RewardsService(store, redemption, dispatcher)


@pytest.fixture
def seed_account(repository):
    """Persist an account with the given fields and return the stored copy"""

    async def _seed(user_id: str = "citizen-1", **fields) -> RewardAccount:
        return await repository.put(RewardAccount(user_id=user_id, **fields), None)

    return _seed


# ============================================================================
# User & Auth Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "citizen-1"


@pytest.fixture
def test_api_key():
    """Standard test API key"""
    return "test_api_key_12345"
