"""REST API for the rewards engine"""
from swm_rewards.api.server import create_api_application

__all__ = ["create_api_application"]
