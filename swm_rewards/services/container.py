"""
Service Container - Dependency Injection Container

Simple DI container for managing service instances and their dependencies.
Uses lazy loading to only instantiate services when first accessed.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging

from swm_rewards.db.account_repository import AccountRepository, InMemoryAccountRepository
from swm_rewards.services.notifications import NotificationDispatcher

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """
    Simple dependency injection container for services.

    Services are lazy-loaded on first access via properties.
    Infrastructure dependencies (repository, dispatcher) are injected.
    """

    # Infrastructure dependencies (injected)
    repository: AccountRepository = field(default_factory=InMemoryAccountRepository)
    dispatcher: Optional[NotificationDispatcher] = None

    # Services (lazy-loaded via properties)
    _reward_store: Optional[object] = field(default=None, init=False, repr=False)
    _redemption_service: Optional[object] = field(default=None, init=False, repr=False)
    _rewards_service: Optional[object] = field(default=None, init=False, repr=False)

    @property
    def reward_store(self):
        """Get RewardStore instance (lazy-loaded)"""
        if self._reward_store is None:
            from swm_rewards.gamification.reward_store import RewardStore
            self._reward_store = RewardStore(self.repository)
            logger.debug("RewardStore instantiated")
        return self._reward_store

    @property
    def redemption_service(self):
        """Get RedemptionService instance (lazy-loaded)"""
        if self._redemption_service is None:
            from swm_rewards.gamification.redemption import RedemptionService
            self._redemption_service = RedemptionService(self.reward_store, self.repository)
            logger.debug("RedemptionService instantiated")
        return self._redemption_service

    @property
    def rewards_service(self):
        """Get RewardsService instance (lazy-loaded)"""
        if self._rewards_service is None:
            from swm_rewards.services.rewards_service import RewardsService
            self._rewards_service = RewardsService(
                self.reward_store,
                self.redemption_service,
                self.dispatcher,
            )
            logger.debug("RewardsService instantiated")
        return self._rewards_service


# Global container instance (initialized in main.py)
_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """
    Get the global service container

    Raises:
        RuntimeError: If container not initialized
    """
    if _container is None:
        raise RuntimeError("Service container not initialized. Call init_container() first.")
    return _container


def init_container(
    repository: Optional[AccountRepository] = None,
    dispatcher: Optional[NotificationDispatcher] = None,
) -> ServiceContainer:
    """Initialize the global service container"""
    global _container
    _container = ServiceContainer(
        repository=repository or InMemoryAccountRepository(),
        dispatcher=dispatcher,
    )
    logger.info("Service container initialized")
    return _container
