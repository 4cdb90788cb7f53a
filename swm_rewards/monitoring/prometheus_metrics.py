"""Prometheus metrics definitions and helpers"""
import logging
import time
from contextlib import contextmanager

from prometheus_client import Counter, Histogram

from swm_rewards.config import ENABLE_PROMETHEUS

logger = logging.getLogger(__name__)


class PrometheusMetrics:
    """Container for all Prometheus metrics"""

    def __init__(self):
        if not ENABLE_PROMETHEUS:
            logger.info("Prometheus metrics disabled")
            self._enabled = False
            return

        # HTTP Request Metrics
        self.http_requests_total = Counter(
            'http_requests_total',
            'Total HTTP requests',
            ['method', 'endpoint', 'status']
        )

        self.http_request_duration_seconds = Histogram(
            'http_request_duration_seconds',
            'HTTP request latency',
            ['method', 'endpoint'],
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0]
        )

        # Storage Metrics
        self.store_operations_total = Counter(
            'reward_store_operations_total',
            'Total reward account storage operations',
            ['operation']
        )

        self.store_operation_duration_seconds = Histogram(
            'reward_store_operation_duration_seconds',
            'Reward account storage latency',
            ['operation'],
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0]
        )

        self.concurrency_conflicts_total = Counter(
            'reward_concurrency_conflicts_total',
            'Optimistic version conflicts on reward accounts'
        )

        # Gamification Metrics
        self.points_awarded_total = Counter(
            'reward_points_awarded_total',
            'Total points credited to accounts',
            ['source']
        )

        self.badges_awarded_total = Counter(
            'reward_badges_awarded_total',
            'Total badges awarded',
            ['badge']
        )

        self.claims_total = Counter(
            'reward_claims_total',
            'Reward claim attempts',
            ['result']
        )

        self._enabled = True
        logger.info("Prometheus metrics initialized")

    @property
    def enabled(self) -> bool:
        """Check if metrics are enabled"""
        return self._enabled


# Global metrics instance
metrics = PrometheusMetrics()


def record_request(method: str, endpoint: str, status_code: int, duration: float) -> None:
    """Record a finished HTTP request"""
    if not metrics.enabled:
        return

    metrics.http_request_duration_seconds.labels(
        method=method,
        endpoint=endpoint
    ).observe(duration)

    metrics.http_requests_total.labels(
        method=method,
        endpoint=endpoint,
        status=status_code
    ).inc()


@contextmanager
def track_store_operation(operation: str):
    """Track reward account storage metrics"""
    if not metrics.enabled:
        yield
        return

    start_time = time.time()

    try:
        yield
    finally:
        duration = time.time() - start_time
        metrics.store_operation_duration_seconds.labels(
            operation=operation
        ).observe(duration)

        metrics.store_operations_total.labels(
            operation=operation
        ).inc()


def track_points_awarded(source: str, amount: int) -> None:
    """Count credited points"""
    if not metrics.enabled:
        return
    metrics.points_awarded_total.labels(source=source).inc(amount)


def track_badge_awarded(badge: str) -> None:
    """Count an awarded badge"""
    if not metrics.enabled:
        return
    metrics.badges_awarded_total.labels(badge=badge).inc()


def track_claim(result: str) -> None:
    """Count a claim attempt (success, insufficient_points, invalid)"""
    if not metrics.enabled:
        return
    metrics.claims_total.labels(result=result).inc()


def track_concurrency_conflict() -> None:
    """Count an optimistic version conflict"""
    if not metrics.enabled:
        return
    metrics.concurrency_conflicts_total.inc()
