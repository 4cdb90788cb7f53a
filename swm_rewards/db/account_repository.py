"""
Reward account storage

The engine treats storage as a keyed get/put abstraction. Every put carries
the version the caller read; a mismatch raises ConcurrencyConflictError so
writers outside this process are detected instead of silently overwritten.
"""

import asyncio
import logging
from typing import List, Optional, Protocol

from swm_rewards.exceptions import ConcurrencyConflictError
from swm_rewards.models.reward import RewardAccount
from swm_rewards.monitoring.prometheus_metrics import track_store_operation

logger = logging.getLogger(__name__)


class AccountRepository(Protocol):
    """Persistence collaborator for reward accounts"""

    async def get(self, user_id: str) -> Optional[RewardAccount]:
        """Return a copy of the stored account, or None"""
        ...

    async def put(self, account: RewardAccount, expected_version: Optional[int]) -> RewardAccount:
        """
        Store account if the stored version equals expected_version

        expected_version=None means the account must not exist yet.
        Returns the stored copy with its new version.
        """
        ...

    async def list_all(self) -> List[RewardAccount]:
        """Copies of every stored account"""
        ...

    async def reserve_claim_code(self, code: str) -> bool:
        """Record a claim code; False if it was already issued"""
        ...


class InMemoryAccountRepository:
    """
    Process-local account storage

    Stores deep copies so callers can never mutate persisted state without
    going through put().
    """

    def __init__(self):
        self._accounts: dict[str, RewardAccount] = {}
        self._claim_codes: set[str] = set()
        # Guards the check-and-set in put(); held only for dict operations
        self._write_lock = asyncio.Lock()

    async def get(self, user_id: str) -> Optional[RewardAccount]:
        with track_store_operation("get"):
            account = self._accounts.get(user_id)
            return account.model_copy(deep=True) if account else None

    async def put(self, account: RewardAccount, expected_version: Optional[int]) -> RewardAccount:
        with track_store_operation("put"):
            async with self._write_lock:
                current = self._accounts.get(account.user_id)
                actual_version = current.version if current else None

                if actual_version != expected_version:
                    raise ConcurrencyConflictError(
                        user_id=account.user_id,
                        expected_version=expected_version,
                        actual_version=actual_version,
                        operation="put",
                    )

                stored = account.model_copy(deep=True)
                stored.version = 1 if expected_version is None else expected_version + 1
                self._accounts[account.user_id] = stored

                logger.debug(f"Stored reward account {account.user_id} v{stored.version}")
                return stored.model_copy(deep=True)

    async def list_all(self) -> List[RewardAccount]:
        with track_store_operation("list"):
            return [account.model_copy(deep=True) for account in self._accounts.values()]

    async def reserve_claim_code(self, code: str) -> bool:
        with track_store_operation("reserve_code"):
            if code in self._claim_codes:
                return False
            self._claim_codes.add(code)
            return True
