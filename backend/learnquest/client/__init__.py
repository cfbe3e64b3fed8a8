"""Clients for the learning sessions backend."""

from .api_client import LearningApiClient
from .base import SessionGateway

__all__ = [
    "LearningApiClient",
    "SessionGateway",
]
