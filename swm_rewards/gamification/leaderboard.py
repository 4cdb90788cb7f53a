"""
Leaderboard Ranking

Two deliberately separate rank definitions:

- rank(): window-filtered leaderboard. Accounts are sorted by spendable
  points (descending), ties go to the account that was active earlier
  (never-active accounts last), then to the lower user id. Ranks are
  assigned 1..N in that order, so equal points never share a rank.
- rank_of(): 1 + number of accounts with strictly more points, over the
  whole unfiltered population. Equal points share a rank here.
"""

from typing import Iterable, List, Optional, Union
from datetime import datetime
import logging

from swm_rewards.exceptions import AccountNotFoundError
from swm_rewards.models.reward import LeaderboardEntry, RewardAccount, Timeframe
from swm_rewards.utils.datetime_helpers import UTC, now_utc, one_month_before, one_week_before, to_utc

logger = logging.getLogger(__name__)

_NEVER_ACTIVE = datetime.max.replace(tzinfo=UTC)


def window_start(timeframe: Timeframe, now: datetime) -> Optional[datetime]:
    """Earliest last_active_at included in a timeframe (None = no filter)"""
    if timeframe == Timeframe.WEEKLY:
        return one_week_before(now)
    if timeframe == Timeframe.MONTHLY:
        return one_month_before(now)
    return None


def _sort_key(account: RewardAccount):
    last_active = account.statistics.last_active_at or _NEVER_ACTIVE
    return (-account.points, last_active, account.user_id)


def rank(
    accounts: Iterable[RewardAccount],
    timeframe: Union[Timeframe, str] = Timeframe.ALL,
    *,
    now: Optional[datetime] = None,
    limit: Optional[int] = None,
) -> List[LeaderboardEntry]:
    """
    Build the leaderboard for a timeframe

    Args:
        accounts: All reward accounts
        timeframe: all, weekly (last 7 days) or monthly (last calendar month)
        now: Window anchor (defaults to now, UTC)
        limit: Keep only the top N entries

    Returns:
        Entries ordered by rank (1 = top)
    """
    timeframe = Timeframe(timeframe)
    now = to_utc(now) if now else now_utc()
    start = window_start(timeframe, now)

    if start is None:
        candidates = list(accounts)
    else:
        candidates = [
            account for account in accounts
            if account.statistics.last_active_at is not None
            and account.statistics.last_active_at >= start
        ]

    ordered = sorted(candidates, key=_sort_key)
    if limit is not None:
        ordered = ordered[:max(0, limit)]

    return [
        LeaderboardEntry(
            user_id=account.user_id,
            name=account.display_name,
            points=account.points,
            level=account.level,
            rank=position,
        )
        for position, account in enumerate(ordered, start=1)
    ]


def rank_of(accounts: Iterable[RewardAccount], user_id: str) -> int:
    """
    Position of one user in the full population

    Raises:
        AccountNotFoundError: user has no reward account
    """
    accounts = list(accounts)
    target = next((account for account in accounts if account.user_id == user_id), None)
    if target is None:
        raise AccountNotFoundError(user_id, operation="rank_of")

    return 1 + sum(1 for account in accounts if account.points > target.points)
