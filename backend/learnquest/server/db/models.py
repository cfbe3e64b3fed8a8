"""SQLAlchemy database models."""

import json
from datetime import datetime
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


def generate_uuid() -> str:
    """Generate a UUID string."""
    return str(uuid4())


class DeckDB(Base):
    """Deck database model."""

    __tablename__ = "decks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    deck_type: Mapped[str] = mapped_column(String(20), default="quiz")  # flashcards, quiz, exam
    difficulty: Mapped[str] = mapped_column(String(20), default="easy")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class SkillNodeDB(Base):
    """Skill tree node; lesson nodes point at the deck they are played with."""

    __tablename__ = "skill_nodes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    deck_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("decks.id"), nullable=True)
    node_type: Mapped[str] = mapped_column(String(20), default="lesson")
    xp_reward: Mapped[int] = mapped_column(Integer, default=0)


class QuestionDB(Base):
    """Question database model."""

    __tablename__ = "questions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    deck_id: Mapped[str] = mapped_column(String(36), ForeignKey("decks.id"), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, default=0)
    question_type: Mapped[str] = mapped_column(String(20), default="mcq")
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[str] = mapped_column(Text, default="[]")  # JSON array
    correct_answer_index: Mapped[int | None] = mapped_column(Integer, nullable=True)
    correct_answer: Mapped[str | None] = mapped_column(Text, nullable=True)  # fill_blank
    explanation: Mapped[str | None] = mapped_column(Text, nullable=True)
    xp_value: Mapped[int] = mapped_column(Integer, default=10)

    def get_options(self) -> list[str]:
        return json.loads(self.options)

    def set_options(self, options: list[str]) -> None:
        self.options = json.dumps(options)


class LearningSessionDB(Base):
    """Learning session database model."""

    __tablename__ = "learning_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    deck_id: Mapped[str] = mapped_column(String(36), ForeignKey("decks.id"), nullable=False)
    skill_node_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("skill_nodes.id"), nullable=True
    )
    status: Mapped[str] = mapped_column(String(20), default="in_progress")
    lives_remaining: Mapped[int] = mapped_column(Integer, default=3)
    correct_count: Mapped[int] = mapped_column(Integer, default=0)
    total_questions: Mapped[int] = mapped_column(Integer, default=0)
    total_xp_earned: Mapped[int] = mapped_column(Integer, default=0)
    stars_earned: Mapped[int] = mapped_column(Integer, default=0)
    question_ids: Mapped[str] = mapped_column(Text, default="[]")  # JSON array, play order
    started_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    def get_question_ids(self) -> list[str]:
        return json.loads(self.question_ids)

    def set_question_ids(self, ids: list[str]) -> None:
        self.question_ids = json.dumps(ids)


class SessionAnswerDB(Base):
    """One graded answer inside a learning session."""

    __tablename__ = "session_answers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    session_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("learning_sessions.id"), nullable=False, index=True
    )
    question_id: Mapped[str] = mapped_column(String(36), ForeignKey("questions.id"), nullable=False)
    selected_option_index: Mapped[int | None] = mapped_column(Integer, nullable=True)
    answer_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False)
    xp_earned: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
