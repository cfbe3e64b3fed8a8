"""Business logic services for the sandbox backend."""

from .content import ContentService
from .sessions import LearningSessionService, SessionConflictError

__all__ = [
    "ContentService",
    "LearningSessionService",
    "SessionConflictError",
]
