"""Learning session service: grading, lives, XP and stars."""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from learnquest.config import Settings, settings as default_settings
from learnquest.models import QuestionType, SessionStatus
from learnquest.server.db.models import (
    DeckDB,
    LearningSessionDB,
    QuestionDB,
    SessionAnswerDB,
    SkillNodeDB,
)

logger = logging.getLogger(__name__)


class SessionConflictError(Exception):
    """The session can no longer accept the requested change."""


@dataclass
class SessionBundle:
    """A session row with its questions (in play order) and answers."""

    session: LearningSessionDB
    questions: list[QuestionDB]
    answers: list[SessionAnswerDB]


@dataclass
class GradedAnswer:
    """Outcome of one submitted answer."""

    answer: SessionAnswerDB
    session: LearningSessionDB
    question: QuestionDB


class LearningSessionService:
    """Service for managing learning sessions."""

    def __init__(self, db: AsyncSession, config: Settings | None = None):
        self.db = db
        self.config = config or default_settings

    async def create_session(
        self,
        deck_id: str | None = None,
        skill_node_id: str | None = None,
    ) -> SessionBundle:
        """Start a new session for a deck or a skill node."""
        if bool(deck_id) == bool(skill_node_id):
            raise ValueError("Provide exactly one of deck_id or skill_node_id")

        if skill_node_id:
            node = await self.db.get(SkillNodeDB, skill_node_id)
            if node is None:
                raise LookupError(f"Skill node {skill_node_id} not found")
            if not node.deck_id:
                raise ValueError(f"Skill node {skill_node_id} has no deck to play")
            deck_id = node.deck_id

        deck = await self.db.get(DeckDB, deck_id)
        if deck is None:
            raise LookupError(f"Deck {deck_id} not found")

        result = await self.db.execute(
            select(QuestionDB)
            .where(QuestionDB.deck_id == deck_id)
            .order_by(QuestionDB.position, QuestionDB.id)
        )
        questions = list(result.scalars().all())
        if not questions:
            raise ValueError(f"Deck {deck_id} has no questions")

        db_session = LearningSessionDB(
            deck_id=deck_id,
            skill_node_id=skill_node_id,
            status=SessionStatus.IN_PROGRESS.value,
            lives_remaining=self.config.starting_lives,
            correct_count=0,
            total_questions=len(questions),
            total_xp_earned=0,
            stars_earned=0,
        )
        db_session.set_question_ids([q.id for q in questions])
        self.db.add(db_session)
        await self.db.flush()

        logger.info(f"Created session {db_session.id} on deck {deck_id} ({len(questions)} questions)")
        return SessionBundle(session=db_session, questions=questions, answers=[])

    async def _get_row(self, session_id: str) -> LearningSessionDB:
        db_session = await self.db.get(LearningSessionDB, session_id)
        if db_session is None:
            raise LookupError(f"Session {session_id} not found")
        return db_session

    async def get_session(self, session_id: str) -> SessionBundle:
        """Get a session with its questions and answers."""
        db_session = await self._get_row(session_id)
        question_ids = db_session.get_question_ids()

        result = await self.db.execute(select(QuestionDB).where(QuestionDB.id.in_(question_ids)))
        by_id = {q.id: q for q in result.scalars().all()}
        questions = [by_id[qid] for qid in question_ids if qid in by_id]

        answers_result = await self.db.execute(
            select(SessionAnswerDB)
            .where(SessionAnswerDB.session_id == session_id)
            .order_by(SessionAnswerDB.created_at)
        )
        answers = list(answers_result.scalars().all())

        return SessionBundle(session=db_session, questions=questions, answers=answers)

    async def submit_answer(
        self,
        session_id: str,
        question_id: str,
        selected_option_index: int | None = None,
        answer_text: str | None = None,
    ) -> GradedAnswer:
        """Grade one answer and update lives, XP and status."""
        if (selected_option_index is None) == (answer_text is None):
            raise ValueError("Provide exactly one of selected_option_index or answer_text")

        db_session = await self._get_row(session_id)
        if db_session.status != SessionStatus.IN_PROGRESS.value:
            raise SessionConflictError(f"Session {session_id} is {db_session.status}")

        if question_id not in db_session.get_question_ids():
            raise ValueError("Question not in this session")

        existing = await self.db.execute(
            select(SessionAnswerDB).where(
                SessionAnswerDB.session_id == session_id,
                SessionAnswerDB.question_id == question_id,
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise ValueError("Question already answered")

        question = await self.db.get(QuestionDB, question_id)
        if question is None:
            raise LookupError(f"Question {question_id} not found")

        is_correct = self._grade(question, selected_option_index, answer_text)
        xp_earned = question.xp_value if is_correct else 0

        if is_correct:
            db_session.correct_count += 1
            db_session.total_xp_earned += xp_earned
        else:
            db_session.lives_remaining = max(0, db_session.lives_remaining - 1)
            if db_session.lives_remaining == 0:
                db_session.status = SessionStatus.FAILED.value

        db_answer = SessionAnswerDB(
            session_id=session_id,
            question_id=question_id,
            selected_option_index=selected_option_index,
            answer_text=answer_text,
            is_correct=is_correct,
            xp_earned=xp_earned,
        )
        self.db.add(db_answer)
        await self.db.flush()

        return GradedAnswer(answer=db_answer, session=db_session, question=question)

    async def complete_session(self, session_id: str) -> LearningSessionDB:
        """Finish a session and award stars. Already-finished sessions are returned as-is."""
        db_session = await self._get_row(session_id)
        if db_session.completed_at is not None:
            return db_session

        failed = db_session.lives_remaining <= 0
        db_session.status = (SessionStatus.FAILED if failed else SessionStatus.COMPLETED).value
        db_session.stars_earned = self._stars(
            db_session.correct_count, db_session.total_questions, failed
        )
        db_session.completed_at = datetime.utcnow()
        await self.db.flush()

        logger.info(
            f"Session {session_id} {db_session.status}: "
            f"{db_session.correct_count}/{db_session.total_questions}, "
            f"{db_session.stars_earned} star(s)"
        )
        return db_session

    def _grade(
        self,
        question: QuestionDB,
        selected_option_index: int | None,
        answer_text: str | None,
    ) -> bool:
        if QuestionType(question.question_type) is QuestionType.FILL_BLANK:
            if answer_text is None or question.correct_answer is None:
                return False
            return self._compare_answers(answer_text, question.correct_answer)
        if selected_option_index is None:
            return False
        return selected_option_index == question.correct_answer_index

    def _compare_answers(self, user_answer: str, correct: str) -> bool:
        """Compare typed answers, ignoring case and surrounding whitespace."""
        return user_answer.strip().lower() == correct.strip().lower()

    def _stars(self, correct: int, total: int, failed: bool) -> int:
        if failed or total == 0:
            return 0
        if correct >= total:
            return self.config.max_stars
        if correct * 3 >= total * 2:
            return min(2, self.config.max_stars)
        return 1
