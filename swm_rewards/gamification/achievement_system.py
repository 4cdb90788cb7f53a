"""
Achievement System

Tracks progress toward fixed achievement goals:
- Reporting (10 and 50 reports)
- Recycling (100kg and 1 ton)
- Consistency (7 and 30 day streaks)

Progress entries live on the reward account and are refreshed by the
reward store after every credit. completed_at is stamped once, the first
time the target is reached, and never cleared.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List
from datetime import datetime
import logging

from swm_rewards.models.reward import (
    AchievementId,
    AchievementProgress,
    RewardAccount,
    RewardStatistics,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AchievementDefinition:
    """Static definition of an achievement"""
    achievement_id: AchievementId
    title: str
    description: str
    target: float
    icon: str
    points: int
    metric: Callable[[RewardStatistics], float]


ACHIEVEMENTS: Dict[AchievementId, AchievementDefinition] = {
    definition.achievement_id: definition
    for definition in (
        AchievementDefinition(
            AchievementId.REPORT_10, "Active Citizen", "Submit 10 reports",
            10, "📋", 100, lambda s: s.total_reports,
        ),
        AchievementDefinition(
            AchievementId.REPORT_50, "Community Hero", "Submit 50 reports",
            50, "🦸", 500, lambda s: s.total_reports,
        ),
        AchievementDefinition(
            AchievementId.RECYCLE_100, "Recycling Master", "Recycle 100kg of waste",
            100, "♻️", 200, lambda s: float(s.total_recycled),
        ),
        AchievementDefinition(
            AchievementId.RECYCLE_1000, "Environment Savior", "Recycle 1 ton of waste",
            1000, "🌍", 1000, lambda s: float(s.total_recycled),
        ),
        AchievementDefinition(
            AchievementId.STREAK_7, "Perfect Week", "Active for 7 consecutive days",
            7, "📅", 150, lambda s: s.current_streak,
        ),
        AchievementDefinition(
            AchievementId.STREAK_30, "Dedicated Citizen", "Active for 30 consecutive days",
            30, "🔥", 500, lambda s: s.current_streak,
        ),
    )
}


def refresh_achievements(account: RewardAccount, now: datetime) -> List[AchievementId]:
    """
    Bring achievement progress in line with current statistics

    Args:
        account: Reward account (achievements updated in place)
        now: Completion timestamp for newly completed achievements

    Returns:
        Achievements completed by this refresh
    """
    existing = {progress.achievement_id: progress for progress in account.achievements}
    completed: List[AchievementId] = []

    for achievement_id, definition in ACHIEVEMENTS.items():
        progress = existing.get(achievement_id)
        if progress is None:
            progress = AchievementProgress(
                achievement_id=achievement_id,
                title=definition.title,
                target=definition.target,
            )
            account.achievements.append(progress)

        progress.current = definition.metric(account.statistics)

        if progress.completed_at is None and progress.current >= progress.target:
            progress.completed_at = now
            completed.append(achievement_id)
            logger.info(
                f"User {account.user_id} completed achievement {achievement_id.value} "
                f"({definition.title})"
            )

    return completed


def get_achievement_progress(account: RewardAccount) -> List[Dict[str, Any]]:
    """
    Achievements with progress for display

    Completion is sticky: a streak achievement stays completed after the
    streak breaks, while `current` keeps showing the live value.

    Returns:
        [
            {
                'id': str,
                'title': str,
                'description': str,
                'icon': str,
                'points': int,
                'target': float,
                'current': float,
                'progress': float (0-100),
                'completed': bool,
                'completed_at': datetime | None
            }
        ]
    """
    stored = {progress.achievement_id: progress for progress in account.achievements}
    result = []

    for achievement_id, definition in ACHIEVEMENTS.items():
        current = definition.metric(account.statistics)
        progress = stored.get(achievement_id)
        completed_at = progress.completed_at if progress else None

        result.append({
            "id": achievement_id.value,
            "title": definition.title,
            "description": definition.description,
            "icon": definition.icon,
            "points": definition.points,
            "target": definition.target,
            "current": current,
            "progress": min(100.0, round(current / definition.target * 100, 2)),
            "completed": completed_at is not None or current >= definition.target,
            "completed_at": completed_at,
        })

    return result
