"""API routes for the rewards engine"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from swm_rewards import __version__
from swm_rewards.api.auth import optional_user_id, require_user_id, verify_api_key
from swm_rewards.api.middleware import limiter
from swm_rewards.api.models import (
    ClaimRequest, ClaimResponse,
    CreditRequest, CreditResponse,
    HealthCheckResponse,
)
from swm_rewards.config import RATE_LIMIT
from swm_rewards.models.reward import ClaimResult, Timeframe
from swm_rewards.monitoring.sentry_config import set_user_context
from swm_rewards.services.rewards_service import RewardsService
from swm_rewards.utils.datetime_helpers import now_utc

logger = logging.getLogger(__name__)

router = APIRouter()


def get_rewards_service(request: Request) -> RewardsService:
    """Resolve the rewards service from the application container"""
    return request.app.state.container.rewards_service


def ok(data) -> dict:
    return {"success": True, "data": data}


def _claim_payload(result: ClaimResult) -> dict:
    return ClaimResponse(
        claim_code=result.claim_code,
        remaining_points=result.remaining_points,
        reward_name=result.claim.reward_name,
        points_cost=result.claim.points_cost,
    ).model_dump()


@router.get("/api/rewards/my-rewards")
@limiter.limit(RATE_LIMIT)
async def get_my_rewards(
    request: Request,
    user_id: str = Depends(require_user_id),
    api_key: str = Depends(verify_api_key),
    service: RewardsService = Depends(get_rewards_service),
):
    """Reward summary for the caller, created on first access"""
    set_user_context(user_id)
    return ok(await service.get_my_rewards(user_id))


@router.get("/api/rewards/leaderboard")
@limiter.limit(RATE_LIMIT)
async def get_leaderboard(
    request: Request,
    timeframe: Timeframe = Query(Timeframe.ALL),
    limit: int = Query(100, ge=1, le=500),
    user_id: Optional[str] = Depends(optional_user_id),
    api_key: str = Depends(verify_api_key),
    service: RewardsService = Depends(get_rewards_service),
):
    """
    Ranked leaderboard

    Weekly and monthly boards only include accounts active in the window.
    user_rank is the caller's position on the overall board.
    """
    return ok(await service.get_leaderboard(timeframe, limit=limit, user_id=user_id))


@router.post("/api/rewards/claim")
@limiter.limit("20/minute")
async def claim_reward(
    request: Request,
    body: ClaimRequest,
    user_id: str = Depends(require_user_id),
    api_key: str = Depends(verify_api_key),
    service: RewardsService = Depends(get_rewards_service),
):
    """Spend points on a named reward and receive a claim code"""
    set_user_context(user_id)
    result = await service.claim_reward(user_id, body.reward_name, body.points_cost)
    logger.info(f"User {user_id} claimed '{body.reward_name}' via API")
    return ok(_claim_payload(result))


@router.get("/api/rewards/achievements")
@limiter.limit(RATE_LIMIT)
async def get_achievements(
    request: Request,
    user_id: str = Depends(require_user_id),
    api_key: str = Depends(verify_api_key),
    service: RewardsService = Depends(get_rewards_service),
):
    """Achievement progress for the caller"""
    return ok(await service.get_achievements(user_id))


@router.get("/api/rewards/shop")
@limiter.limit(RATE_LIMIT)
async def get_shop(
    request: Request,
    user_id: Optional[str] = Depends(optional_user_id),
    api_key: str = Depends(verify_api_key),
    service: RewardsService = Depends(get_rewards_service),
):
    """Reward catalogue, with affordability when the caller is known"""
    return ok(await service.get_reward_shop(user_id))


@router.post("/api/rewards/shop/{item_id}/claim")
@limiter.limit("20/minute")
async def claim_shop_item(
    request: Request,
    item_id: int,
    user_id: str = Depends(require_user_id),
    api_key: str = Depends(verify_api_key),
    service: RewardsService = Depends(get_rewards_service),
):
    """Claim an item from the reward catalogue"""
    set_user_context(user_id)
    result = await service.claim_shop_item(user_id, item_id)
    return ok(_claim_payload(result))


@router.post("/api/rewards/points")
@limiter.limit("30/minute")
async def credit_points(
    request: Request,
    body: CreditRequest,
    user_id: str = Depends(require_user_id),
    api_key: str = Depends(verify_api_key),
    service: RewardsService = Depends(get_rewards_service),
):
    """
    Credit points to the caller

    Used by internal services that do not call the engine in-process.
    """
    result = await service.award_points(
        user_id,
        body.amount,
        body.reason,
        activity=body.activity,
        source="api",
    )
    account = result.account
    return ok(CreditResponse(
        points_awarded=result.effective_amount,
        points=account.points,
        total_points=account.total_points,
        level=account.level,
        leveled_up=result.leveled_up,
        awarded_badges=[badge.value for badge in result.awarded_badges],
        completed_achievements=[achievement.value for achievement in result.completed_achievements],
    ).model_dump())


@router.get("/api/health", response_model=HealthCheckResponse)
@limiter.limit(RATE_LIMIT)
async def health_check(request: Request, service: RewardsService = Depends(get_rewards_service)):
    """Health check endpoint (Rate limit: RATE_LIMIT, default 60/minute)"""
    accounts = await service.store.list_accounts()
    return HealthCheckResponse(
        status="healthy",
        version=__version__,
        accounts=len(accounts),
        timestamp=now_utc().isoformat(),
    )


@router.get("/metrics")
async def metrics():
    """
    Prometheus metrics endpoint.

    Exposes all application metrics in Prometheus text format.
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
