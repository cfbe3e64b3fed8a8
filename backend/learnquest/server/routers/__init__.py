"""API routers for the sandbox backend."""

from .decks import router as decks_router
from .learning_sessions import router as learning_sessions_router

__all__ = [
    "decks_router",
    "learning_sessions_router",
]
