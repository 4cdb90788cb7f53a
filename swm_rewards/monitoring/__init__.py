"""Monitoring infrastructure for the rewards engine"""
from swm_rewards.monitoring.sentry_config import init_sentry, capture_exception, set_user_context
from swm_rewards.monitoring.prometheus_metrics import (
    metrics,
    record_request,
    track_store_operation,
    track_points_awarded,
    track_badge_awarded,
    track_claim,
    track_concurrency_conflict,
)

__all__ = [
    "init_sentry",
    "capture_exception",
    "set_user_context",
    "metrics",
    "record_request",
    "track_store_operation",
    "track_points_awarded",
    "track_badge_awarded",
    "track_claim",
    "track_concurrency_conflict",
]
