"""API request/response models"""
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from swm_rewards.models.reward import StatisticsDelta


class ClaimRequest(BaseModel):
    """Request to claim a reward"""
    model_config = ConfigDict(populate_by_name=True)

    reward_name: str = Field(..., alias="rewardName", description="Name of the reward being claimed")
    points_cost: int = Field(..., alias="pointsCost", description="Points deducted for the reward")


class CreditRequest(BaseModel):
    """Request to credit points to the caller"""
    amount: float = Field(..., description="Raw point amount before any multiplier")
    reason: str = Field(..., min_length=1, max_length=200)
    activity: Optional[StatisticsDelta] = Field(None, description="Statistics change caused by the activity")


class CreditResponse(BaseModel):
    """Outcome of a point credit"""
    points_awarded: int
    points: int
    total_points: int
    level: int
    leveled_up: bool
    awarded_badges: List[str]
    completed_achievements: List[str]


class ClaimResponse(BaseModel):
    """Outcome of a reward claim"""
    claim_code: str
    remaining_points: int
    reward_name: str
    points_cost: int


class HealthCheckResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    accounts: int
    timestamp: str
