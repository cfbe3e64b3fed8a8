"""Learning session models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .question import Question


class SessionStatus(str, Enum):
    """Lifecycle of a learning session. Only ``IN_PROGRESS`` is non-terminal."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not SessionStatus.IN_PROGRESS


class LearningSession(BaseModel):
    """One bounded attempt at a question sequence."""

    model_config = ConfigDict(frozen=True)

    id: str
    status: SessionStatus = SessionStatus.IN_PROGRESS
    lives_remaining: int = Field(ge=0)
    correct_count: int = Field(default=0, ge=0)
    total_questions: int = Field(default=0, ge=0)
    stars_earned: int = Field(default=0, ge=0)
    total_xp_earned: int = Field(default=0, ge=0)
    completed_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


class SubmissionResult(BaseModel):
    """Authoritative grading of one answer, as returned by the server."""

    model_config = ConfigDict(frozen=True)

    is_correct: bool
    xp_earned: int = Field(default=0, ge=0)
    lives_remaining: int = Field(ge=0)
    session_status: SessionStatus
    correct_answer_index: int | None = None
    correct_answer: str | None = None
    explanation: str | None = None


class SessionTarget(BaseModel):
    """What a new session is built from: a deck or a skill node, not both."""

    model_config = ConfigDict(frozen=True)

    deck_id: str | None = None
    skill_node_id: str | None = None

    @model_validator(mode="after")
    def _exactly_one(self) -> "SessionTarget":
        if bool(self.deck_id) == bool(self.skill_node_id):
            raise ValueError("Provide exactly one of deck_id or skill_node_id")
        return self

    @classmethod
    def for_deck(cls, deck_id: str) -> "SessionTarget":
        return cls(deck_id=deck_id)

    @classmethod
    def for_skill_node(cls, skill_node_id: str) -> "SessionTarget":
        return cls(skill_node_id=skill_node_id)

    def to_payload(self) -> dict:
        if self.deck_id:
            return {"deck_id": self.deck_id}
        return {"skill_node_id": self.skill_node_id}


class CreatedSession(BaseModel):
    """A freshly created session and its question sequence."""

    session: LearningSession
    questions: tuple[Question, ...]


class LoadedSession(BaseModel):
    """An existing session, its sequence and the ids already answered."""

    session: LearningSession
    questions: tuple[Question, ...]
    answered_question_ids: frozenset[str] = frozenset()
