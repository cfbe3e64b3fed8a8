"""JSON:API-style rendering of sandbox records."""

from learnquest.models.payloads import ANSWER_TYPE, DECK_TYPE, QUESTION_TYPE, SESSION_TYPE
from learnquest.server.db.models import (
    DeckDB,
    LearningSessionDB,
    QuestionDB,
    SessionAnswerDB,
)


def _identifier(resource_type: str, resource_id: str) -> dict:
    return {"id": resource_id, "type": resource_type}


def session_resource(
    db_session: LearningSessionDB,
    answers: list[SessionAnswerDB] | None = None,
) -> dict:
    resource = {
        "id": db_session.id,
        "type": SESSION_TYPE,
        "attributes": {
            "status": db_session.status,
            "lives_remaining": db_session.lives_remaining,
            "correct_count": db_session.correct_count,
            "total_questions": db_session.total_questions,
            "total_xp_earned": db_session.total_xp_earned,
            "stars_earned": db_session.stars_earned,
            "completed_at": db_session.completed_at.isoformat() if db_session.completed_at else None,
        },
    }
    if answers is not None:
        resource["relationships"] = {
            "questions": {
                "data": [_identifier(QUESTION_TYPE, qid) for qid in db_session.get_question_ids()]
            },
            "session_answers": {"data": [_identifier(ANSWER_TYPE, a.id) for a in answers]},
        }
    return resource


def question_resource(question: QuestionDB) -> dict:
    return {
        "id": question.id,
        "type": QUESTION_TYPE,
        "attributes": {
            "question_text": question.question_text,
            "question_type": question.question_type,
            "options": question.get_options(),
            "correct_answer_index": question.correct_answer_index,
            "explanation": question.explanation,
            "xp_value": question.xp_value,
            "position": question.position,
        },
    }


def answer_resource(answer: SessionAnswerDB) -> dict:
    return {
        "id": answer.id,
        "type": ANSWER_TYPE,
        "attributes": {
            "is_correct": answer.is_correct,
            "xp_earned": answer.xp_earned,
        },
        "relationships": {
            "question": {"data": _identifier(QUESTION_TYPE, answer.question_id)},
        },
    }


def deck_resource(deck: DeckDB, questions_count: int) -> dict:
    return {
        "id": deck.id,
        "type": DECK_TYPE,
        "attributes": {
            "name": deck.name,
            "deck_type": deck.deck_type,
            "difficulty": deck.difficulty,
            "questions_count": questions_count,
        },
    }
