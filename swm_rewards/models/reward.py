"""Reward account models for gamification"""
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal

from swm_rewards.utils.datetime_helpers import now_utc, to_utc


class BadgeName(str, Enum):
    """One-time badges unlocked by crossing a statistic threshold"""
    FIRST_REPORT = "FIRST_REPORT"
    RECYCLING_MASTER = "RECYCLING_MASTER"
    PERFECT_WEEK = "PERFECT_WEEK"
    COMMUNITY_HERO = "COMMUNITY_HERO"
    ENVIRONMENT_SAVIOR = "ENVIRONMENT_SAVIOR"
    REPORTING_PRO = "REPORTING_PRO"
    ZERO_WASTE_HERO = "ZERO_WASTE_HERO"
    ECO_WARRIOR = "ECO_WARRIOR"


class AchievementId(str, Enum):
    """Tracked achievement goals"""
    REPORT_10 = "report_10"
    REPORT_50 = "report_50"
    RECYCLE_100 = "recycle_100"
    RECYCLE_1000 = "recycle_1000"
    STREAK_7 = "streak_7"
    STREAK_30 = "streak_30"


class Timeframe(str, Enum):
    """Leaderboard windows"""
    ALL = "all"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def _to_decimal(value):
    # Floats go through their shortest repr so 0.1 stays 0.1
    if isinstance(value, float):
        return Decimal(str(value))
    return value


class RewardStatistics(BaseModel):
    """Activity counters that drive streaks, badges and achievements"""
    model_config = ConfigDict(validate_assignment=True)

    total_reports: int = Field(default=0, ge=0)
    resolved_reports: int = Field(default=0, ge=0)
    total_recycled: Decimal = Field(default=Decimal("0"), ge=0, description="Kilograms recycled")
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    last_active_at: Optional[datetime] = None

    @field_validator("last_active_at")
    @classmethod
    def _utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_utc(value)

    @field_validator("total_recycled", mode="before")
    @classmethod
    def _exact_kg(cls, value):
        return _to_decimal(value)

    @field_serializer("total_recycled", when_used="json")
    def _kg_number(self, value: Decimal) -> float:
        return float(value)


class StatisticsDelta(BaseModel):
    """Statistic increments applied atomically with a point credit"""
    reports: int = Field(default=0, ge=0)
    resolved_reports: int = Field(default=0, ge=0)
    recycled_kg: Decimal = Field(default=Decimal("0"), ge=0, allow_inf_nan=False)

    @field_validator("recycled_kg", mode="before")
    @classmethod
    def _exact_kg(cls, value):
        return _to_decimal(value)


class EarnedBadge(BaseModel):
    """A badge held by an account"""
    name: BadgeName
    earned_at: datetime

    @field_validator("earned_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return to_utc(value)


class AchievementProgress(BaseModel):
    """Progress toward one achievement"""
    achievement_id: AchievementId
    title: str
    target: float
    current: float = 0
    completed_at: Optional[datetime] = None


class ClaimRecord(BaseModel):
    """Audit-trail entry for a redeemed reward"""
    reward_name: str
    points_cost: int = Field(ge=0)
    claimed_at: datetime
    code: str


class RewardAccount(BaseModel):
    """
    Per-user reward aggregate

    `level` is derived from `total_points` and is only ever written by the
    reward store. `version` increments on every successful persist.
    """
    model_config = ConfigDict(validate_assignment=True)

    user_id: str = Field(..., min_length=1)
    display_name: Optional[str] = None
    points: int = Field(default=0, ge=0)
    total_points: int = Field(default=0, ge=0)
    level: int = Field(default=1, ge=1, le=7)
    multiplier: float = Field(default=1.0, ge=1.0)
    multiplier_expiry: Optional[datetime] = None
    badges: list[EarnedBadge] = Field(default_factory=list)
    achievements: list[AchievementProgress] = Field(default_factory=list)
    statistics: RewardStatistics = Field(default_factory=RewardStatistics)
    claims: list[ClaimRecord] = Field(default_factory=list)
    version: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=now_utc)
    updated_at: datetime = Field(default_factory=now_utc)

    @field_validator("multiplier_expiry", "created_at", "updated_at")
    @classmethod
    def _utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_utc(value)

    @model_validator(mode="after")
    def _unique_badges(self) -> "RewardAccount":
        names = [badge.name for badge in self.badges]
        if len(names) != len(set(names)):
            raise ValueError("badges must not contain duplicates")
        return self

    @property
    def badge_names(self) -> set[BadgeName]:
        return {badge.name for badge in self.badges}

    def has_badge(self, name: BadgeName) -> bool:
        return any(badge.name == name for badge in self.badges)


class LeaderboardEntry(BaseModel):
    """Ranked leaderboard row (derived, never persisted)"""
    user_id: str
    name: Optional[str] = None
    points: int
    level: int
    rank: int = Field(ge=1)


class NextLevelInfo(BaseModel):
    """Progress toward the next level"""
    current_level: int
    next_level: Optional[int] = None
    points_needed: int
    progress_percent: float


class CreditResult(BaseModel):
    """Outcome of RewardStore.add_points"""
    account: RewardAccount
    effective_amount: int
    reason: str
    awarded_badges: list[BadgeName] = Field(default_factory=list)
    completed_achievements: list[AchievementId] = Field(default_factory=list)
    old_level: int
    new_level: int

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.old_level


class ClaimResult(BaseModel):
    """Outcome of a successful claim"""
    claim_code: str
    remaining_points: int
    claim: ClaimRecord
