"""
Notification dispatch for reward events

The engine never talks to a delivery channel (socket, push, email). It hands
events to a dispatcher after the account update has been persisted and the
account lock released.
"""

import logging
from typing import List, Protocol

from swm_rewards.gamification.achievement_system import ACHIEVEMENTS
from swm_rewards.gamification.badge_system import BADGE_RULES
from swm_rewards.models.events import (
    AchievementCompletedEvent,
    BadgeAwardedEvent,
    LevelUpEvent,
    RewardEvent,
)
from swm_rewards.models.reward import CreditResult

logger = logging.getLogger(__name__)


class NotificationDispatcher(Protocol):
    """Delivers reward events to users"""

    async def dispatch(self, event: RewardEvent) -> None:
        ...


class LoggingNotificationDispatcher:
    """Dispatcher that only logs events (default when no channel is wired)"""

    async def dispatch(self, event: RewardEvent) -> None:
        logger.info(f"Reward event for user {event.user_id}: {event.model_dump(mode='json')}")


def events_for_credit(result: CreditResult) -> List[RewardEvent]:
    """
    Build notification events from a credit result

    Order: level up first, then badges, then achievements.
    """
    user_id = result.account.user_id
    events: List[RewardEvent] = []

    if result.leveled_up:
        events.append(LevelUpEvent(
            user_id=user_id,
            old_level=result.old_level,
            new_level=result.new_level,
        ))

    for badge in result.awarded_badges:
        rule = BADGE_RULES[badge]
        events.append(BadgeAwardedEvent(
            user_id=user_id,
            badge=badge,
            icon=rule.icon,
            description=rule.description,
        ))

    for achievement_id in result.completed_achievements:
        events.append(AchievementCompletedEvent(
            user_id=user_id,
            achievement_id=achievement_id,
            title=ACHIEVEMENTS[achievement_id].title,
        ))

    return events
