"""Configuration management"""
import os
from dotenv import load_dotenv

load_dotenv()

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# API
API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8080"))
RATE_LIMIT: str = os.getenv("RATE_LIMIT", "60/minute")
RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"

# Point rules (points credited by submission handlers)
POINTS_REPORT_SUBMITTED: int = int(os.getenv("POINTS_REPORT_SUBMITTED", "10"))
POINTS_REPORT_RESOLVED: int = int(os.getenv("POINTS_REPORT_RESOLVED", "25"))
POINTS_PER_KG_RECYCLED: int = int(os.getenv("POINTS_PER_KG_RECYCLED", "10"))
POINTS_REVIEW: int = int(os.getenv("POINTS_REVIEW", "5"))
POINTS_EMAIL_VERIFIED: int = int(os.getenv("POINTS_EMAIL_VERIFIED", "20"))

# Redemption
CLAIM_CODE_PREFIX: str = os.getenv("CLAIM_CODE_PREFIX", "SWM")
BOOST_MULTIPLIER: float = float(os.getenv("BOOST_MULTIPLIER", "2.0"))
BOOST_DURATION_DAYS: int = int(os.getenv("BOOST_DURATION_DAYS", "7"))

# Concurrency
MAX_CONFLICT_RETRIES: int = int(os.getenv("MAX_CONFLICT_RETRIES", "3"))

# Monitoring
ENABLE_PROMETHEUS: bool = os.getenv("ENABLE_PROMETHEUS", "true").lower() == "true"
ENABLE_SENTRY: bool = os.getenv("ENABLE_SENTRY", "false").lower() == "true"
SENTRY_DSN: str = os.getenv("SENTRY_DSN", "")
SENTRY_ENVIRONMENT: str = os.getenv("SENTRY_ENVIRONMENT", "development")
SENTRY_TRACES_SAMPLE_RATE: float = float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1"))


# Validation
def validate_config() -> None:
    """Validate required configuration"""
    from swm_rewards.exceptions import ConfigurationError

    if LOG_LEVEL.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigurationError(f"Unknown LOG_LEVEL {LOG_LEVEL!r}", config_key="LOG_LEVEL")
    if MAX_CONFLICT_RETRIES < 0:
        raise ConfigurationError("MAX_CONFLICT_RETRIES must be >= 0", config_key="MAX_CONFLICT_RETRIES")
    if BOOST_MULTIPLIER < 1.0:
        raise ConfigurationError("BOOST_MULTIPLIER must be >= 1.0", config_key="BOOST_MULTIPLIER")
    if ENABLE_SENTRY and not SENTRY_DSN:
        raise ConfigurationError("SENTRY_DSN is required when ENABLE_SENTRY is set", config_key="SENTRY_DSN")
