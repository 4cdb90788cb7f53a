"""Unit tests for custom exception hierarchy"""
import logging
import pytest
from datetime import datetime

from swm_rewards.exceptions import (
    AccountNotFoundError,
    ConcurrencyConflictError,
    ConfigurationError,
    InsufficientPointsError,
    InvalidAmountError,
    RewardsEngineError,
    StorageError,
)


class TestRewardsEngineError:
    """Test base exception class"""

    def test_basic_exception(self):
        """Test basic exception creation"""
        error = RewardsEngineError("Test error")
        assert error.message == "Test error"
        assert error.user_message == "An error occurred. Please try again."
        assert error.request_id is not None
        assert isinstance(error.timestamp, datetime)
        assert error.timestamp.tzinfo is not None

    def test_exception_with_context(self):
        """Test exception with full context"""
        error = RewardsEngineError(
            message="Failed to persist reward account",
            user_id="citizen-42",
            operation="add_points",
            context={"reason": "Recycled 3kg"},
            user_message="Could not save your points"
        )
        assert error.user_id == "citizen-42"
        assert error.operation == "add_points"
        assert error.context["reason"] == "Recycled 3kg"
        assert error.user_message == "Could not save your points"

    def test_to_dict(self):
        """Test serialization for API responses"""
        error = RewardsEngineError("Test error", user_message="Friendly")
        data = error.to_dict()

        assert data["error"] == "RewardsEngineError"
        assert data["message"] == "Test error"
        assert data["user_message"] == "Friendly"
        assert data["request_id"] == error.request_id
        assert "timestamp" in data

    def test_logged_on_creation(self, caplog):
        with caplog.at_level(logging.ERROR, logger="swm_rewards.exceptions"):
            RewardsEngineError("Something broke", operation="claim_reward")

        assert "Something broke" in caplog.text


class TestCallerErrors:

    def test_invalid_amount(self):
        error = InvalidAmountError("Point amount must be non-negative", field="amount", value=-5)

        assert error.field == "amount"
        assert error.value == -5
        assert error.context["value"] == "-5"
        assert error.user_message == "Invalid amount: Point amount must be non-negative"

    def test_insufficient_points_exposes_only_balance_and_cost(self):
        error = InsufficientPointsError(balance=120, required=500, user_id="citizen-1")

        assert error.balance == 120
        assert error.required == 500
        assert error.context == {"balance": 120, "required": 500}
        assert error.user_message == "Insufficient points. You have 120 points but this reward costs 500."

    def test_caller_errors_log_at_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="swm_rewards.exceptions"):
            InsufficientPointsError(balance=1, required=2)

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING


class TestStorageErrors:

    def test_hierarchy(self):
        assert issubclass(AccountNotFoundError, StorageError)
        assert issubclass(ConcurrencyConflictError, StorageError)
        assert issubclass(StorageError, RewardsEngineError)
        assert issubclass(ConfigurationError, RewardsEngineError)

    def test_account_not_found(self):
        error = AccountNotFoundError("citizen-1", operation="get")

        assert error.user_id == "citizen-1"
        assert "citizen-1" in error.message
        assert error.user_message == "Reward record not found."

    def test_concurrency_conflict(self):
        error = ConcurrencyConflictError("citizen-1", expected_version=3, actual_version=4)

        assert error.expected_version == 3
        assert error.actual_version == 4
        assert "expected 3, found 4" in error.message

    def test_can_be_caught_as_base(self):
        with pytest.raises(RewardsEngineError):
            raise ConcurrencyConflictError("citizen-1", expected_version=None, actual_version=1)


def test_configuration_error():
    error = ConfigurationError("SENTRY_DSN is required", config_key="SENTRY_DSN")

    assert error.config_key == "SENTRY_DSN"
    assert error.context["config_key"] == "SENTRY_DSN"
