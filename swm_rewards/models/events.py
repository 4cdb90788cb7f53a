"""Events handed to the notification dispatcher"""
from pydantic import BaseModel, Field
from typing import Literal, Union
from datetime import datetime

from swm_rewards.models.reward import AchievementId, BadgeName
from swm_rewards.utils.datetime_helpers import now_utc


class BadgeAwardedEvent(BaseModel):
    """A badge was unlocked"""
    type: Literal["badge_awarded"] = "badge_awarded"
    user_id: str
    badge: BadgeName
    icon: str
    description: str
    occurred_at: datetime = Field(default_factory=now_utc)


class LevelUpEvent(BaseModel):
    """Level increased after a credit"""
    type: Literal["level_up"] = "level_up"
    user_id: str
    old_level: int
    new_level: int
    occurred_at: datetime = Field(default_factory=now_utc)


class AchievementCompletedEvent(BaseModel):
    """An achievement reached its target"""
    type: Literal["achievement_completed"] = "achievement_completed"
    user_id: str
    achievement_id: AchievementId
    title: str
    occurred_at: datetime = Field(default_factory=now_utc)


RewardEvent = Union[BadgeAwardedEvent, LevelUpEvent, AchievementCompletedEvent]
