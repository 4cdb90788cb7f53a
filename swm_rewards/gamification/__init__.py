"""
Gamification & Rewards Engine

Turns citizen activity into:
- Points (spendable balance + lifetime total) with temporary multipliers
- Levels 1-7 from lifetime points
- Daily activity streaks
- One-time badges and achievement progress
- Leaderboards
- Reward claims with unique codes
"""

from swm_rewards.gamification.points_ledger import apply_credit, effective_amount, points_for_activity
from swm_rewards.gamification.levels import level_for, next_level_info
from swm_rewards.gamification.streak_system import record_activity
from swm_rewards.gamification.badge_system import evaluate as evaluate_badges
from swm_rewards.gamification.achievement_system import refresh_achievements, get_achievement_progress
from swm_rewards.gamification.reward_store import RewardStore
from swm_rewards.gamification.leaderboard import rank, rank_of
from swm_rewards.gamification.redemption import RedemptionService, REWARD_SHOP

__all__ = [
    "apply_credit",
    "effective_amount",
    "points_for_activity",
    "level_for",
    "next_level_info",
    "record_activity",
    "evaluate_badges",
    "refresh_achievements",
    "get_achievement_progress",
    "RewardStore",
    "rank",
    "rank_of",
    "RedemptionService",
    "REWARD_SHOP",
]
