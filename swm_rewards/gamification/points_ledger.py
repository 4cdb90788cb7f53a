"""
Point Ledger

Calculates point deltas, applies temporary multipliers and keeps the
running totals of a reward account.

Rounding:
- Every credit is rounded half up to a whole point (7.5 -> 8, 2.4 -> 2)

Point Award Rules (defaults, overridable through the environment):
- Report submitted: 10 points
- Report resolved: 25 points
- Recycling: 10 points per kg
- Review posted: 5 points
- Email verified: 20 points
"""

from typing import Optional
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from numbers import Real
import logging
import math

from swm_rewards import config
from swm_rewards.exceptions import InvalidAmountError
from swm_rewards.models.reward import RewardAccount
from swm_rewards.utils.datetime_helpers import to_utc

logger = logging.getLogger(__name__)


def validate_amount(raw_amount, field: str = "amount", user_id: Optional[str] = None) -> None:
    """
    Reject anything that is not a finite, non-negative real number

    Raises:
        InvalidAmountError
    """
    if isinstance(raw_amount, bool) or not isinstance(raw_amount, (Real, Decimal)):
        raise InvalidAmountError(
            message="Point amount must be a number",
            field=field,
            value=raw_amount,
            user_id=user_id,
        )
    if not math.isfinite(float(raw_amount)):
        raise InvalidAmountError(
            message="Point amount must be finite",
            field=field,
            value=raw_amount,
            user_id=user_id,
        )
    if raw_amount < 0:
        raise InvalidAmountError(
            message="Point amount must be non-negative",
            field=field,
            value=raw_amount,
            user_id=user_id,
        )


def round_half_up(value) -> int:
    """Round to the nearest whole point, halves away from zero"""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def multiplier_active(multiplier: float, multiplier_expiry: Optional[datetime], now: datetime) -> bool:
    """A boost counts only while it is above 1x and not yet expired"""
    if multiplier <= 1 or multiplier_expiry is None:
        return False
    return to_utc(now) < to_utc(multiplier_expiry)


def effective_amount(
    raw_amount,
    multiplier: float,
    multiplier_expiry: Optional[datetime],
    now: datetime
) -> int:
    """
    Points actually credited for a raw amount

    Args:
        raw_amount: Non-negative number of points requested by the caller
        multiplier: Account's current boost factor
        multiplier_expiry: When the boost stops applying
        now: Instant of the credit

    Returns:
        Whole number of points after the boost and half-up rounding
    """
    validate_amount(raw_amount)

    amount = Decimal(str(raw_amount))
    if multiplier_active(multiplier, multiplier_expiry, now):
        amount *= Decimal(str(multiplier))

    return round_half_up(amount)


def apply_credit(account: RewardAccount, raw_amount, now: datetime) -> int:
    """
    Credit an account's spendable balance and lifetime total

    Returns:
        The effective amount that was credited
    """
    validate_amount(raw_amount, user_id=account.user_id)

    amount = effective_amount(raw_amount, account.multiplier, account.multiplier_expiry, now)
    account.points += amount
    account.total_points += amount

    if amount != raw_amount:
        logger.debug(
            f"Credit for {account.user_id}: raw {raw_amount} -> {amount} "
            f"(multiplier {account.multiplier})"
        )

    return amount


def points_for_activity(activity_type: str, **kwargs) -> int:
    """
    Calculate points for a collaborator activity

    Args:
        activity_type: report, report_resolved, recycling, review, email_verified
        **kwargs: recycled_kg for recycling

    Returns:
        Raw point amount (before any multiplier)
    """
    if activity_type == "recycling":
        recycled_kg = kwargs.get("recycled_kg", 0)
        validate_amount(recycled_kg, field="recycled_kg")
        return round_half_up(Decimal(str(recycled_kg)) * config.POINTS_PER_KG_RECYCLED)

    base_points = {
        "report": config.POINTS_REPORT_SUBMITTED,
        "report_resolved": config.POINTS_REPORT_RESOLVED,
        "review": config.POINTS_REVIEW,
        "email_verified": config.POINTS_EMAIL_VERIFIED,
    }

    if activity_type not in base_points:
        raise InvalidAmountError(
            message=f"Unknown activity type {activity_type!r}",
            field="activity_type",
            value=activity_type,
        )

    return base_points[activity_type]
