"""Database layer for the sandbox backend."""

from .database import async_session, get_db, init_db
from .models import Base, DeckDB, LearningSessionDB, QuestionDB, SessionAnswerDB, SkillNodeDB

__all__ = [
    "get_db",
    "init_db",
    "async_session",
    "Base",
    "DeckDB",
    "LearningSessionDB",
    "QuestionDB",
    "SessionAnswerDB",
    "SkillNodeDB",
]
