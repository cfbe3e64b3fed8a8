"""Answer submission: one request in flight, one result per question."""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum

from learnquest.client.base import SessionGateway
from learnquest.exceptions import LearnQuestError, SubmissionError
from learnquest.models import AnswerResponse, LearningSession, SubmissionResult

from .state import SessionState

logger = logging.getLogger(__name__)


class QuestionPhase(str, Enum):
    """Where a single question is in its answer lifecycle."""

    UNANSWERED = "unanswered"
    SUBMITTING = "submitting"
    ANSWERED = "answered"


class SubmitOutcome(str, Enum):
    """What happened to a submit request.

    Only ``APPLIED`` means a result was merged. The ``REJECTED_*`` values
    are local refusals made before any network call; ``DISCARDED`` means
    the response arrived after its session was torn down or finalized.
    """

    APPLIED = "applied"
    REJECTED_EMPTY = "rejected_empty"
    REJECTED_INVALID = "rejected_invalid"
    REJECTED_UNKNOWN_QUESTION = "rejected_unknown_question"
    REJECTED_SESSION_OVER = "rejected_session_over"
    REJECTED_IN_FLIGHT = "rejected_in_flight"
    REJECTED_ALREADY_ANSWERED = "rejected_already_answered"
    DISCARDED = "discarded"

    @property
    def rejected(self) -> bool:
        return self.value.startswith("rejected_")


@dataclass(frozen=True)
class XpEarned:
    """Transient signal for a correct answer; the UI shows and dismisses it."""

    session_id: str
    question_id: str
    xp_earned: int


XpListener = Callable[[XpEarned], None]


def apply_submission_result(
    session: LearningSession,
    result: SubmissionResult,
) -> LearningSession:
    """Merge one graded answer into the session.

    ``lives_remaining`` and ``status`` are taken from the server as-is.
    ``correct_count`` is the one value tracked locally: it moves by exactly
    one for a correct answer and is never read back from the server here.
    A terminal status is never replaced by ``in_progress``.
    """
    if result.lives_remaining > session.lives_remaining:
        logger.warning(
            f"Session {session.id}: server raised lives from "
            f"{session.lives_remaining} to {result.lives_remaining}"
        )

    status = result.session_status
    if session.status.is_terminal and not status.is_terminal:
        logger.warning(
            f"Session {session.id}: ignoring status {status.value} after {session.status.value}"
        )
        status = session.status

    correct_count = session.correct_count + 1 if result.is_correct else session.correct_count
    return session.model_copy(
        update={
            "lives_remaining": result.lives_remaining,
            "status": status,
            "correct_count": correct_count,
        }
    )


class SubmissionCoordinator:
    """Submits answers for one session and merges the results.

    Args:
        gateway: Backend to submit through
        state: The session state results are merged into
        answered_ids: Questions the server already holds answers for
            (resumed sessions); they cannot be submitted again
    """

    def __init__(
        self,
        gateway: SessionGateway,
        state: SessionState,
        answered_ids: Iterable[str] = (),
    ):
        self.gateway = gateway
        self.state = state
        self._results: dict[str, SubmissionResult] = {}
        self._previously_answered = set(answered_ids)
        self._in_flight: str | None = None
        self._xp_listeners: list[XpListener] = []

    def add_xp_listener(self, listener: XpListener) -> None:
        self._xp_listeners.append(listener)

    @property
    def in_flight(self) -> bool:
        return self._in_flight is not None

    def phase(self, question_id: str) -> QuestionPhase:
        if question_id in self._results or question_id in self._previously_answered:
            return QuestionPhase.ANSWERED
        if question_id == self._in_flight:
            return QuestionPhase.SUBMITTING
        return QuestionPhase.UNANSWERED

    def result_for(self, question_id: str) -> SubmissionResult | None:
        return self._results.get(question_id)

    def check(self, question_id: str, response: AnswerResponse | None) -> SubmitOutcome | None:
        """Return the reason a submit would be refused, or None if it may go ahead."""
        question = self.state.question_by_id(question_id)
        if question is None:
            return SubmitOutcome.REJECTED_UNKNOWN_QUESTION
        if self.state.session.is_terminal or self.state.finalized:
            return SubmitOutcome.REJECTED_SESSION_OVER
        if self.in_flight:
            return SubmitOutcome.REJECTED_IN_FLIGHT
        if self.phase(question_id) is QuestionPhase.ANSWERED:
            return SubmitOutcome.REJECTED_ALREADY_ANSWERED
        if response is None or response.is_empty:
            return SubmitOutcome.REJECTED_EMPTY
        if not response.matches(question):
            return SubmitOutcome.REJECTED_INVALID
        return None

    async def submit(self, question_id: str, response: AnswerResponse | None) -> SubmitOutcome:
        """Submit ``response`` for ``question_id``.

        Raises:
            SubmissionError: The request failed. Nothing was merged and the
                question can be submitted again.
        """
        refusal = self.check(question_id, response)
        if refusal is not None:
            logger.debug(f"Submit for question {question_id} refused: {refusal.value}")
            return refusal

        scope = self.state.scope
        session_id = scope.session_id
        self._in_flight = question_id
        try:
            result = await self.gateway.submit_answer(session_id, question_id, response)
        except LearnQuestError as e:
            logger.warning(f"Submitting question {question_id} in session {session_id} failed: {e}")
            raise SubmissionError(f"Could not submit answer for question {question_id}") from e
        finally:
            self._in_flight = None

        if not scope.owns(session_id):
            logger.info(f"Discarding late result for question {question_id} of closed session {session_id}")
            return SubmitOutcome.DISCARDED
        if self.state.finalized:
            logger.warning(f"Discarding result for question {question_id}: session {session_id} already finalized")
            return SubmitOutcome.DISCARDED

        self.merge_result(question_id, result)
        return SubmitOutcome.APPLIED

    def merge_result(self, question_id: str, result: SubmissionResult) -> bool:
        """Record ``result`` and fold it into the session, once per question.

        Returns False (and changes nothing) when the question already has a
        result, so a duplicated delivery never double-counts.
        """
        if question_id in self._results:
            logger.warning(f"Duplicate result for question {question_id} ignored")
            return False

        self._results[question_id] = result
        self.state.session = apply_submission_result(self.state.session, result)
        self.state.feedback = result

        if result.is_correct:
            self.state.xp_earned += result.xp_earned
            signal = XpEarned(
                session_id=self.state.session.id,
                question_id=question_id,
                xp_earned=result.xp_earned,
            )
            for listener in self._xp_listeners:
                listener(signal)

        logger.info(
            f"Question {question_id}: {'correct' if result.is_correct else 'wrong'}, "
            f"lives={self.state.session.lives_remaining}, "
            f"correct={self.state.session.correct_count}"
        )
        return True
