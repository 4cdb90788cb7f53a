"""Data models for the rewards engine"""
from swm_rewards.models.reward import (
    AchievementId,
    AchievementProgress,
    BadgeName,
    ClaimRecord,
    ClaimResult,
    CreditResult,
    EarnedBadge,
    LeaderboardEntry,
    NextLevelInfo,
    RewardAccount,
    RewardStatistics,
    StatisticsDelta,
    Timeframe,
)
from swm_rewards.models.events import (
    AchievementCompletedEvent,
    BadgeAwardedEvent,
    LevelUpEvent,
    RewardEvent,
)

__all__ = [
    "AchievementId",
    "AchievementProgress",
    "BadgeName",
    "ClaimRecord",
    "ClaimResult",
    "CreditResult",
    "EarnedBadge",
    "LeaderboardEntry",
    "NextLevelInfo",
    "RewardAccount",
    "RewardStatistics",
    "StatisticsDelta",
    "Timeframe",
    "AchievementCompletedEvent",
    "BadgeAwardedEvent",
    "LevelUpEvent",
    "RewardEvent",
]
