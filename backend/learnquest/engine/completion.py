"""Deciding when a session ends, and finalizing it."""

import logging
from collections.abc import Callable
from enum import Enum

from learnquest.client.base import SessionGateway
from learnquest.exceptions import CompletionError, LearnQuestError
from learnquest.models import LearningSession

from .state import SessionState

logger = logging.getLogger(__name__)


class NextStep(str, Enum):
    ADVANCE = "advance"
    FINALIZE = "finalize"


def decide_next_step(session: LearningSession, index: int, total_questions: int) -> NextStep:
    """Finalize when lives are gone or the question at ``index`` is the last one."""
    if session.lives_remaining <= 0 or index >= total_questions - 1:
        return NextStep.FINALIZE
    return NextStep.ADVANCE


class CompletionDecider:
    """Advances through the sequence and runs the single completion call."""

    def __init__(
        self,
        gateway: SessionGateway,
        state: SessionState,
        submission_in_flight: Callable[[], bool] | None = None,
    ):
        self.gateway = gateway
        self.state = state
        self._submission_in_flight = submission_in_flight or (lambda: False)
        self._pending = False

    @property
    def pending(self) -> bool:
        return self._pending

    def decide(self) -> NextStep:
        return decide_next_step(
            self.state.session,
            self.state.current_index,
            self.state.total_questions,
        )

    async def proceed(self) -> NextStep:
        """Advance to the next question, or finalize if the session is over."""
        step = self.decide()
        if step is NextStep.ADVANCE:
            self.state.advance()
            logger.debug(
                f"Session {self.state.session.id}: advanced to question "
                f"{self.state.current_index + 1}/{self.state.total_questions}"
            )
        else:
            await self.finalize()
        return step

    async def finalize(self) -> LearningSession | None:
        """Complete the session on the server and adopt its final snapshot.

        The returned session replaces local state wholesale. Returns None if
        a completion call is already pending, an answer is still being
        submitted, or the response arrived for a session that has since been
        torn down.

        Raises:
            CompletionError: The call failed or the server did not finish the
                session. Local state is left untouched.
        """
        if self.state.finalized:
            return self.state.session
        if self._pending:
            logger.debug(f"Completion for session {self.state.session.id} already pending")
            return None
        if self._submission_in_flight():
            logger.debug(f"Session {self.state.session.id}: answer still submitting, not completing yet")
            return None

        scope = self.state.scope
        session_id = scope.session_id
        self._pending = True
        try:
            final = await self.gateway.complete_session(session_id)
        except LearnQuestError as e:
            if not scope.owns(session_id):
                logger.info(f"Ignoring failed completion of closed session {session_id}: {e}")
                return None
            logger.error(f"Completing session {session_id} failed: {e}")
            raise CompletionError(f"Could not complete session {session_id}") from e
        finally:
            self._pending = False

        if not scope.owns(session_id):
            logger.info(f"Discarding completion of closed session {session_id}")
            return None
        if final.id != session_id:
            raise CompletionError(f"Completion for {session_id} returned session {final.id}")
        if not final.is_terminal:
            raise CompletionError(
                f"Session {session_id} still {final.status.value} after completion"
            )

        self.state.session = final
        self.state.finalized = True
        logger.info(
            f"Session {session_id} finished: {final.status.value}, "
            f"{final.correct_count}/{final.total_questions} correct, "
            f"{final.stars_earned} star(s)"
        )
        return final
