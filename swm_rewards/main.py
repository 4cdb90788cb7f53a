"""Main entry point for the rewards API server"""
import logging

import uvicorn

from swm_rewards.api.server import create_api_application
from swm_rewards.config import API_HOST, API_PORT, LOG_LEVEL

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL.upper())
)

logger = logging.getLogger(__name__)

app = create_api_application()


def main() -> None:
    """Main application entry point"""
    logger.info(f"Starting rewards API on {API_HOST}:{API_PORT}")
    uvicorn.run(app, host=API_HOST, port=API_PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
