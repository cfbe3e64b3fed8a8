"""Abstract gateway to the learning sessions backend."""

from abc import ABC, abstractmethod

from learnquest.models import (
    AnswerResponse,
    CreatedSession,
    LearningSession,
    LoadedSession,
    SessionTarget,
    SubmissionResult,
)


class SessionGateway(ABC):
    """The four backend operations the session engine depends on.

    Every call is asynchronous and fallible. Implementations raise
    :class:`~learnquest.exceptions.ApiError` for transport/HTTP failures and
    :class:`~learnquest.exceptions.InvalidPayloadError` for bodies that do not
    parse.
    """

    @abstractmethod
    async def create_session(self, target: SessionTarget) -> CreatedSession:
        """Create a session for a deck or skill node."""
        pass

    @abstractmethod
    async def get_session(self, session_id: str) -> LoadedSession:
        """Load a session, its questions and the ids already answered."""
        pass

    @abstractmethod
    async def submit_answer(
        self,
        session_id: str,
        question_id: str,
        response: AnswerResponse,
    ) -> SubmissionResult:
        """Submit one answer and return the server's grading."""
        pass

    @abstractmethod
    async def complete_session(self, session_id: str) -> LearningSession:
        """Finalize a session and return its authoritative final state."""
        pass
