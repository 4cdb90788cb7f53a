"""Unit tests for the point ledger (swm_rewards/gamification/points_ledger.py)"""
import pytest
from datetime import datetime, timedelta
from decimal import Decimal

from swm_rewards.exceptions import InvalidAmountError
from swm_rewards.gamification.points_ledger import (
    apply_credit,
    effective_amount,
    multiplier_active,
    points_for_activity,
    round_half_up,
    validate_amount,
)
from swm_rewards.models.reward import RewardAccount
from swm_rewards.utils.datetime_helpers import UTC


NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=UTC)
LATER = NOW + timedelta(days=3)


# ============================================================================
# Rounding
# ============================================================================

class TestRoundHalfUp:
    """Half-up rounding of credited points"""

    def test_halves_round_up(self):
        assert round_half_up(7.5) == 8
        assert round_half_up(2.5) == 3
        assert round_half_up(0.5) == 1

    def test_below_half_rounds_down(self):
        assert round_half_up(2.4) == 2
        assert round_half_up(2.49) == 2

    def test_whole_numbers_unchanged(self):
        assert round_half_up(10) == 10
        assert round_half_up(Decimal("42")) == 42


# ============================================================================
# Amount Validation
# ============================================================================

class TestValidateAmount:
    """Rejection of invalid point deltas"""

    @pytest.mark.parametrize("amount", [0, 10, 2.5, Decimal("3.5")])
    def test_accepts_non_negative_numbers(self, amount):
        validate_amount(amount)

    @pytest.mark.parametrize("amount", [-1, -0.5])
    def test_rejects_negative(self, amount):
        with pytest.raises(InvalidAmountError):
            validate_amount(amount)

    @pytest.mark.parametrize("amount", ["10", None, True, [5]])
    def test_rejects_non_numeric(self, amount):
        with pytest.raises(InvalidAmountError):
            validate_amount(amount)

    @pytest.mark.parametrize("amount", [float("nan"), float("inf")])
    def test_rejects_non_finite(self, amount):
        with pytest.raises(InvalidAmountError):
            validate_amount(amount)

    def test_error_names_the_field(self):
        with pytest.raises(InvalidAmountError) as exc_info:
            validate_amount(-3, field="recycled_kg")

        assert exc_info.value.field == "recycled_kg"
        assert exc_info.value.value == -3


# ============================================================================
# Multiplier
# ============================================================================

class TestEffectiveAmount:
    """Multiplier application"""

    def test_no_multiplier_returns_raw(self):
        assert effective_amount(10, 1.0, None, NOW) == 10

    def test_active_multiplier_applies(self):
        assert effective_amount(10, 2.0, LATER, NOW) == 20

    def test_fractional_result_rounds_half_up(self):
        assert effective_amount(5, 1.5, LATER, NOW) == 8  # 7.5
        assert effective_amount(3, 1.5, LATER, NOW) == 5  # 4.5

    def test_expired_multiplier_ignored(self):
        assert effective_amount(10, 2.0, NOW - timedelta(seconds=1), NOW) == 10

    def test_multiplier_expiring_now_ignored(self):
        assert effective_amount(10, 2.0, NOW, NOW) == 10

    def test_multiplier_without_expiry_ignored(self):
        assert multiplier_active(2.0, None, NOW) is False

    def test_fractional_raw_amount_rounds(self):
        assert effective_amount(2.4, 1.0, None, NOW) == 2
        assert effective_amount(1.5, 1.0, None, NOW) == 2

    def test_negative_amount_rejected(self):
        with pytest.raises(InvalidAmountError):
            effective_amount(-10, 2.0, LATER, NOW)


class TestApplyCredit:
    """Balance and lifetime total updates"""

    def test_increments_points_and_total(self):
        account = RewardAccount(user_id="citizen-1", points=40, total_points=90)

        credited = apply_credit(account, 15, NOW)

        assert credited == 15
        assert account.points == 55
        assert account.total_points == 105

    def test_credit_uses_active_multiplier(self):
        account = RewardAccount(
            user_id="citizen-1",
            multiplier=2.0,
            multiplier_expiry=LATER,
        )

        credited = apply_credit(account, 15, NOW)

        assert credited == 30
        assert account.points == 30
        assert account.total_points == 30

    def test_invalid_amount_leaves_account_untouched(self):
        account = RewardAccount(user_id="citizen-1", points=40, total_points=90)

        with pytest.raises(InvalidAmountError):
            apply_credit(account, -1, NOW)

        assert account.points == 40
        assert account.total_points == 90


# ============================================================================
# Activity Point Rules
# ============================================================================

class TestPointsForActivity:
    """Default point rules used by submission handlers"""

    def test_fixed_activities(self):
        assert points_for_activity("report") == 10
        assert points_for_activity("report_resolved") == 25
        assert points_for_activity("review") == 5
        assert points_for_activity("email_verified") == 20

    def test_recycling_is_per_kg(self):
        assert points_for_activity("recycling", recycled_kg=3) == 30
        assert points_for_activity("recycling", recycled_kg=2.5) == 25

    def test_recycling_rounds_half_up(self):
        assert points_for_activity("recycling", recycled_kg=0.25) == 3

    def test_negative_weight_rejected(self):
        with pytest.raises(InvalidAmountError):
            points_for_activity("recycling", recycled_kg=-1)

    def test_unknown_activity_rejected(self):
        with pytest.raises(InvalidAmountError) as exc_info:
            points_for_activity("teleport")

        assert exc_info.value.field == "activity_type"
