"""
Service Layer Package

Business logic services that sit between the HTTP layer / submission
handlers and the rewards engine.

Core Services:
- RewardsService: point credits, summaries, leaderboards, achievements, claims
- Notification dispatch: badge, level-up and achievement events
"""

from swm_rewards.services.container import ServiceContainer, get_container, init_container
from swm_rewards.services.notifications import LoggingNotificationDispatcher, NotificationDispatcher
from swm_rewards.services.rewards_service import RewardsService

__all__ = [
    "ServiceContainer",
    "get_container",
    "init_container",
    "LoggingNotificationDispatcher",
    "NotificationDispatcher",
    "RewardsService",
]
