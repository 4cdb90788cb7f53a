"""
Activity Streak Tracking

Counts consecutive UTC calendar days with at least one point-earning
activity.

Logic:
- First activity ever: streak starts at 1
- Activity on the day after the last active day: streak + 1
- Activity on the same day: no change
- Gap of more than one day: streak resets to 1
- Activity dated before the last active day (late event): no change
- Best streak is kept as max(longest, current)
"""

from typing import Dict
from datetime import datetime
import logging

from swm_rewards.models.reward import RewardStatistics
from swm_rewards.utils.datetime_helpers import days_between, to_utc

logger = logging.getLogger(__name__)


def record_activity(statistics: RewardStatistics, activity_instant: datetime) -> Dict[str, int]:
    """
    Update streak counters for an activity

    Args:
        statistics: Account statistics (mutated in place)
        activity_instant: When the activity happened

    Returns:
        {
            'old_streak': int,
            'current_streak': int,
            'longest_streak': int,
            'day_gap': int  # -1 when this is the first activity
        }
    """
    activity_instant = to_utc(activity_instant)
    old_streak = statistics.current_streak
    last_active = statistics.last_active_at

    if last_active is None:
        statistics.current_streak = 1
        day_gap = -1
    else:
        day_gap = days_between(last_active, activity_instant)

        if day_gap == 1:
            statistics.current_streak += 1
        elif day_gap > 1:
            statistics.current_streak = 1
            logger.info(
                f"Streak broken after {day_gap} days (was {old_streak} days)"
            )

    statistics.longest_streak = max(statistics.longest_streak, statistics.current_streak)

    if last_active is None or activity_instant > last_active:
        statistics.last_active_at = activity_instant

    return {
        "old_streak": old_streak,
        "current_streak": statistics.current_streak,
        "longest_streak": statistics.longest_streak,
        "day_gap": day_gap,
    }
