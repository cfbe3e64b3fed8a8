"""Pydantic models for the LearnQuest session engine."""

from .question import AnswerResponse, Question, QuestionType
from .session import (
    CreatedSession,
    LearningSession,
    LoadedSession,
    SessionStatus,
    SessionTarget,
    SubmissionResult,
)

__all__ = [
    "AnswerResponse",
    "Question",
    "QuestionType",
    "CreatedSession",
    "LearningSession",
    "LoadedSession",
    "SessionStatus",
    "SessionTarget",
    "SubmissionResult",
]
