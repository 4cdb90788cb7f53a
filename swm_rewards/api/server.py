"""FastAPI application setup"""
import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from swm_rewards import __version__
from swm_rewards.api.middleware import PrometheusMiddleware, setup_cors, setup_rate_limiting
from swm_rewards.api.routes import router
from swm_rewards.config import validate_config
from swm_rewards.exceptions import (
    AccountNotFoundError,
    ConcurrencyConflictError,
    InsufficientPointsError,
    InvalidAmountError,
    RewardsEngineError,
)
from swm_rewards.monitoring.sentry_config import capture_exception, init_sentry
from swm_rewards.services.container import ServiceContainer, init_container

logger = logging.getLogger(__name__)

# Engine errors the client can act on; anything else is a 500
ERROR_STATUS_CODES = {
    InvalidAmountError: 400,
    InsufficientPointsError: 400,
    AccountNotFoundError: 404,
    ConcurrencyConflictError: 409,
}


def status_for(exc: RewardsEngineError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES.items():
        if isinstance(exc, error_type):
            return status_code
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for FastAPI application"""
    # Startup
    logger.info("Starting rewards API server...")
    validate_config()
    init_sentry()

    yield

    # Shutdown
    logger.info("Shutting down rewards API server...")


def create_api_application(container: Optional[ServiceContainer] = None) -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Smart Waste Management Rewards API",
        description="Points, badges, leaderboards and reward claims",
        version=__version__,
        lifespan=lifespan
    )
    app.state.container = container or init_container()

    # Setup middleware
    setup_cors(app)
    setup_rate_limiting(app)
    app.add_middleware(PrometheusMiddleware)

    # Include routes
    app.include_router(router)

    @app.exception_handler(RewardsEngineError)
    async def rewards_error_handler(request: Request, exc: RewardsEngineError):
        status_code = status_for(exc)
        if status_code == 500:
            capture_exception(exc, operation=exc.operation or "unknown")
        return JSONResponse(
            status_code=status_code,
            content={"success": False, "message": exc.user_message}
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.detail},
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        return JSONResponse(
            status_code=422,
            content={"success": False, "message": f"Invalid request: {location} {first.get('msg', '')}".strip()}
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        capture_exception(exc, path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Internal server error"}
        )

    logger.info("FastAPI application created")

    return app
