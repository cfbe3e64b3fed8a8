"""Wire-level documents for the learning sessions API.

The backend renders JSON:API-style resources (``{id, type, attributes,
relationships}``). Every endpoint gets its own document model; the
``parse_*`` helpers validate a raw JSON body and turn it into the domain
models the engine works with. Anything that does not fit raises
:class:`~learnquest.exceptions.InvalidPayloadError`.
"""

from typing import Any

from pydantic import BaseModel, Field, ValidationError

from learnquest.exceptions import InvalidPayloadError

from .question import Question
from .session import CreatedSession, LearningSession, LoadedSession, SubmissionResult

SESSION_TYPE = "learning_session"
QUESTION_TYPE = "question"
ANSWER_TYPE = "session_answer"
DECK_TYPE = "deck"


class ResourceIdentifier(BaseModel):
    """Reference to a resource: ``{"id": ..., "type": ...}``."""

    id: str
    type: str


class Relationship(BaseModel):
    """To-one or to-many linkage."""

    data: ResourceIdentifier | list[ResourceIdentifier] | None = None

    def identifiers(self) -> list[ResourceIdentifier]:
        if self.data is None:
            return []
        if isinstance(self.data, list):
            return self.data
        return [self.data]


class Resource(BaseModel):
    """A full resource object."""

    id: str
    type: str
    attributes: dict[str, Any] = Field(default_factory=dict)
    relationships: dict[str, Relationship] = Field(default_factory=dict)

    def related_ids(self, name: str) -> list[str]:
        relationship = self.relationships.get(name)
        if relationship is None:
            return []
        return [ident.id for ident in relationship.identifiers()]


class CreateSessionDocument(BaseModel):
    """Body of ``POST /learning_sessions``."""

    session: Resource
    questions: list[Resource]


class SessionDocument(BaseModel):
    """Body of ``GET /learning_sessions/{id}``."""

    data: Resource
    included: list[Resource] = Field(default_factory=list)


class CompleteSessionDocument(BaseModel):
    """Body of ``POST /learning_sessions/{id}/complete``."""

    session: Resource


class DeckListDocument(BaseModel):
    """Body of ``GET /decks``."""

    data: list[Resource]


def _validate(model: type[BaseModel], raw: Any, what: str):
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        raise InvalidPayloadError(f"Malformed {what} payload: {e}") from e


def _expect_type(resource: Resource, expected: str) -> None:
    if resource.type != expected:
        raise InvalidPayloadError(
            f"Expected a '{expected}' resource, got '{resource.type}' (id={resource.id})"
        )


def session_from_resource(resource: Resource) -> LearningSession:
    """Build a LearningSession from a ``learning_session`` resource."""
    _expect_type(resource, SESSION_TYPE)
    # The resource id is canonical; attributes may or may not repeat it.
    attributes = {**resource.attributes, "id": resource.id}
    return _validate(LearningSession, attributes, SESSION_TYPE)


def question_from_resource(resource: Resource) -> Question:
    """Build a Question from a ``question`` resource."""
    _expect_type(resource, QUESTION_TYPE)
    attributes = {**resource.attributes, "id": resource.id}
    return _validate(Question, attributes, QUESTION_TYPE)


def parse_created_session(raw: Any) -> CreatedSession:
    document = _validate(CreateSessionDocument, raw, "create session")
    session = session_from_resource(document.session)
    questions = tuple(question_from_resource(q) for q in document.questions)
    return CreatedSession(session=session, questions=questions)


def parse_loaded_session(raw: Any) -> LoadedSession:
    """Parse a session document with its included questions and answers.

    Question order follows ``relationships.questions``; the answered set is
    derived from the included ``session_answer`` resources, each of which
    points at its question through ``relationships.question``.
    """
    document = _validate(SessionDocument, raw, "session")
    session = session_from_resource(document.data)

    questions_by_id: dict[str, Question] = {}
    answered: set[str] = set()
    for resource in document.included:
        if resource.type == QUESTION_TYPE:
            question = question_from_resource(resource)
            questions_by_id[question.id] = question
        elif resource.type == ANSWER_TYPE:
            question_ids = resource.related_ids("question")
            if not question_ids:
                raise InvalidPayloadError(
                    f"Answer {resource.id} does not reference a question"
                )
            answered.update(question_ids)

    ordered_ids = document.data.related_ids("questions")
    if not ordered_ids:
        # No explicit ordering; fall back to the position attribute.
        ordered = sorted(questions_by_id.values(), key=lambda q: q.position)
    else:
        missing = [qid for qid in ordered_ids if qid not in questions_by_id]
        if missing:
            raise InvalidPayloadError(f"Questions not included in payload: {missing}")
        ordered = [questions_by_id[qid] for qid in ordered_ids]

    return LoadedSession(
        session=session,
        questions=tuple(ordered),
        answered_question_ids=frozenset(answered),
    )


def parse_submission_result(raw: Any) -> SubmissionResult:
    return _validate(SubmissionResult, raw, "submission result")


def parse_completed_session(raw: Any) -> LearningSession:
    document = _validate(CompleteSessionDocument, raw, "complete session")
    return session_from_resource(document.session)


def parse_deck_list(raw: Any) -> list[Resource]:
    document = _validate(DeckListDocument, raw, "deck list")
    for resource in document.data:
        _expect_type(resource, DECK_TYPE)
    return document.data
