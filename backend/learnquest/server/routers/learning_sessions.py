"""Learning session API endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from learnquest.models import SubmissionResult
from learnquest.server.db import get_db
from learnquest.server.services.serializers import (
    answer_resource,
    question_resource,
    session_resource,
)
from learnquest.server.services.sessions import LearningSessionService, SessionConflictError

router = APIRouter(prefix="/api/v1/learning_sessions", tags=["learning_sessions"])


class CreateSessionRequest(BaseModel):
    """Request body for starting a learning session."""

    deck_id: str | None = None
    skill_node_id: str | None = None


class SubmitAnswerRequest(BaseModel):
    """Request body for submitting an answer."""

    question_id: str
    selected_option_index: int | None = None
    answer_text: str | None = None


def _http_error(e: Exception) -> HTTPException:
    if isinstance(e, LookupError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, SessionConflictError):
        return HTTPException(status_code=409, detail=str(e))
    return HTTPException(status_code=422, detail=str(e))


@router.post("", status_code=201)
async def create_session(
    request: CreateSessionRequest,
    db: AsyncSession = Depends(get_db),
):
    """Start a new learning session for a deck or skill node."""
    service = LearningSessionService(db)
    try:
        bundle = await service.create_session(request.deck_id, request.skill_node_id)
    except (LookupError, ValueError) as e:
        raise _http_error(e)
    return {
        "session": session_resource(bundle.session),
        "questions": [question_resource(q) for q in bundle.questions],
    }


@router.get("/{session_id}")
async def get_session(
    session_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Get a session with its questions and answers included."""
    service = LearningSessionService(db)
    try:
        bundle = await service.get_session(session_id)
    except LookupError as e:
        raise _http_error(e)
    return {
        "data": session_resource(bundle.session, answers=bundle.answers),
        "included": [question_resource(q) for q in bundle.questions]
        + [answer_resource(a) for a in bundle.answers],
    }


@router.post("/{session_id}/submit_answer", response_model=SubmissionResult)
async def submit_answer(
    session_id: str,
    request: SubmitAnswerRequest,
    db: AsyncSession = Depends(get_db),
):
    """Grade an answer for a question in a session."""
    service = LearningSessionService(db)
    try:
        graded = await service.submit_answer(
            session_id=session_id,
            question_id=request.question_id,
            selected_option_index=request.selected_option_index,
            answer_text=request.answer_text,
        )
    except (LookupError, ValueError, SessionConflictError) as e:
        raise _http_error(e)

    question = graded.question
    return SubmissionResult(
        is_correct=graded.answer.is_correct,
        xp_earned=graded.answer.xp_earned,
        lives_remaining=graded.session.lives_remaining,
        session_status=graded.session.status,
        correct_answer_index=question.correct_answer_index,
        correct_answer=question.correct_answer,
        explanation=question.explanation,
    )


@router.post("/{session_id}/complete")
async def complete_session(
    session_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Finish a session and award stars."""
    service = LearningSessionService(db)
    try:
        db_session = await service.complete_session(session_id)
    except LookupError as e:
        raise _http_error(e)
    return {"session": session_resource(db_session)}
