"""
Level Calculator

Maps lifetime points to one of seven levels.

Level thresholds (lifetime points):
- Level 1: 0
- Level 2: 100
- Level 3: 500
- Level 4: 1,000
- Level 5: 5,000
- Level 6: 10,000
- Level 7: 50,000 (top level)
"""

from swm_rewards.models.reward import NextLevelInfo

LEVEL_THRESHOLDS: dict[int, int] = {
    1: 0,
    2: 100,
    3: 500,
    4: 1000,
    5: 5000,
    6: 10000,
    7: 50000,
}

MAX_LEVEL = max(LEVEL_THRESHOLDS)


def level_for(total_points: int) -> int:
    """Highest level whose threshold is at or below total_points"""
    level = 1
    for candidate, threshold in sorted(LEVEL_THRESHOLDS.items()):
        if total_points >= threshold:
            level = candidate
    return level


def next_level_info(total_points: int) -> NextLevelInfo:
    """
    Progress toward the next level

    progress_percent is total_points / next threshold * 100, and 100 once
    the top level is reached.
    """
    current_level = level_for(total_points)

    if current_level >= MAX_LEVEL:
        return NextLevelInfo(
            current_level=current_level,
            next_level=None,
            points_needed=0,
            progress_percent=100.0,
        )

    next_level = current_level + 1
    required = LEVEL_THRESHOLDS[next_level]

    return NextLevelInfo(
        current_level=current_level,
        next_level=next_level,
        points_needed=max(0, required - total_points),
        progress_percent=round(max(0, total_points) / required * 100, 2),
    )
