"""Reward account persistence"""
from swm_rewards.db.account_repository import AccountRepository, InMemoryAccountRepository

__all__ = ["AccountRepository", "InMemoryAccountRepository"]
