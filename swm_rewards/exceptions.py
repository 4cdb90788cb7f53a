"""
Standardized exception hierarchy for the rewards engine
Provides rich context, consistent logging, and user-friendly error messages

Every error raised by the engine is local and recoverable by the caller.
No engine operation partially applies: when one of these is raised the
stored account is exactly as it was before the call.
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


class RewardsEngineError(Exception):
    """
    Base exception for all rewards engine errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise RewardsEngineError(
            message="Failed to persist reward account",
            user_id="citizen-42",
            operation="add_points",
            context={"reason": "Recycled 3kg"}
        )
    """

    log_level: int = logging.ERROR

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # Avoid conflict with logging's 'message' field
            "request_id": self.request_id,
            "user_id": self.user_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.log(self.log_level, f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.log(self.log_level, f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for API responses"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Caller Errors
# ==========================================

class InvalidAmountError(RewardsEngineError):
    """
    Raised when a point delta, claim cost or statistic delta is not a
    non-negative number

    Example:
        raise InvalidAmountError(
            message="Point amount must be non-negative",
            field="amount",
            value=-5,
            user_id="citizen-42"
        )
    """

    log_level = logging.WARNING

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=message,
            user_message=f"Invalid {field}: {message}" if field else message,
            context={"field": field, "value": repr(value)},
            **kwargs
        )


class InsufficientPointsError(RewardsEngineError):
    """
    Raised when a claim costs more than the spendable balance.

    Only the current balance and the required cost are exposed.
    """

    log_level = logging.WARNING

    def __init__(self, balance: int, required: int, **kwargs):
        self.balance = balance
        self.required = required
        super().__init__(
            message=f"Insufficient points: balance {balance}, required {required}",
            user_message=f"Insufficient points. You have {balance} points but this reward costs {required}.",
            context={"balance": balance, "required": required},
            **kwargs
        )


# ==========================================
# Storage Errors
# ==========================================

class StorageError(RewardsEngineError):
    """
    Base class for account storage errors
    """
    pass


class AccountNotFoundError(StorageError):
    """Requested reward account does not exist"""

    log_level = logging.WARNING

    def __init__(self, user_id: str, message: Optional[str] = None, **kwargs):
        super().__init__(
            message=message or f"Reward account for user {user_id} not found",
            user_id=user_id,
            user_message="Reward record not found.",
            context={"record_type": "RewardAccount"},
            **kwargs
        )


class ConcurrencyConflictError(StorageError):
    """Optimistic version check failed; retry the whole operation from a fresh read"""

    log_level = logging.WARNING

    def __init__(
        self,
        user_id: str,
        expected_version: Optional[int] = None,
        actual_version: Optional[int] = None,
        **kwargs
    ):
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            message=(
                f"Version conflict on reward account {user_id}: "
                f"expected {expected_version}, found {actual_version}"
            ),
            user_id=user_id,
            user_message="Your rewards were updated at the same time by another request. Please try again.",
            context={"expected_version": expected_version, "actual_version": actual_version},
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(RewardsEngineError):
    """System configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The system is not properly configured. Please contact support.",
            context={"config_key": config_key},
            **kwargs
        )
