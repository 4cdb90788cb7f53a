"""
Badge Engine

Evaluates one-time badges against account statistics.

Every BadgeName has exactly one rule below. Evaluation is a plain function
called by the reward store; it only appends badges the account does not
hold yet, so calling it twice with unchanged statistics awards nothing the
second time.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List
from datetime import datetime
import logging

from swm_rewards.models.reward import BadgeName, EarnedBadge, RewardAccount, RewardStatistics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BadgeRule:
    """Unlock condition and display data for one badge"""
    name: BadgeName
    icon: str
    description: str
    predicate: Callable[[RewardStatistics], bool]


BADGE_RULES: Dict[BadgeName, BadgeRule] = {
    rule.name: rule
    for rule in (
        BadgeRule(
            BadgeName.FIRST_REPORT, "📝", "Submitted your first report",
            lambda s: s.total_reports >= 1,
        ),
        BadgeRule(
            BadgeName.RECYCLING_MASTER, "♻️", "Recycled 100kg of waste",
            lambda s: s.total_recycled >= 100,
        ),
        BadgeRule(
            BadgeName.PERFECT_WEEK, "📅", "Active for 7 consecutive days",
            lambda s: s.current_streak >= 7,
        ),
        BadgeRule(
            BadgeName.COMMUNITY_HERO, "🦸", "Submitted 50 reports",
            lambda s: s.total_reports >= 50,
        ),
        BadgeRule(
            BadgeName.ENVIRONMENT_SAVIOR, "🌍", "Recycled 1 ton of waste",
            lambda s: s.total_recycled >= 1000,
        ),
        BadgeRule(
            BadgeName.REPORTING_PRO, "🔧", "10 of your reports were resolved",
            lambda s: s.resolved_reports >= 10,
        ),
        BadgeRule(
            BadgeName.ZERO_WASTE_HERO, "🌱", "Recycled 500kg of waste",
            lambda s: s.total_recycled >= 500,
        ),
        BadgeRule(
            BadgeName.ECO_WARRIOR, "🔥", "Kept a 30-day activity streak",
            lambda s: s.longest_streak >= 30,
        ),
    )
}

# Import-time guard: the rule table must cover the whole enum
_missing = set(BadgeName) - set(BADGE_RULES)
if _missing:
    raise RuntimeError(f"Badges without a rule: {sorted(b.value for b in _missing)}")


def evaluate(account: RewardAccount, awarded_at: datetime) -> List[BadgeName]:
    """
    Award every badge whose rule holds and that the account does not have

    Args:
        account: Reward account (badges appended in place)
        awarded_at: Timestamp recorded on new badges

    Returns:
        Newly awarded badge names, in rule-table order
    """
    newly_awarded: List[BadgeName] = []
    held = account.badge_names

    for name, rule in BADGE_RULES.items():
        if name in held:
            continue
        if not rule.predicate(account.statistics):
            continue

        account.badges.append(EarnedBadge(name=name, earned_at=awarded_at))
        held.add(name)
        newly_awarded.append(name)

        logger.info(f"User {account.user_id} earned badge {name.value}")

    return newly_awarded


def badge_catalogue() -> List[Dict[str, str]]:
    """Display data for every badge"""
    return [
        {"name": rule.name.value, "icon": rule.icon, "description": rule.description}
        for rule in BADGE_RULES.values()
    ]
