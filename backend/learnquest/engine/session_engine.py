"""The learning session engine: everything a session page drives."""

import logging
from collections.abc import Iterable

from learnquest.client.base import SessionGateway
from learnquest.config import Settings, settings as default_settings
from learnquest.models import (
    AnswerResponse,
    LearningSession,
    Question,
    SessionStatus,
    SessionTarget,
    SubmissionResult,
)

from .bootstrap import Navigate, SessionBootstrap
from .completion import CompletionDecider, NextStep
from .resume import resolve_resume_point
from .skip import skip_response
from .state import SessionState
from .submission import QuestionPhase, SubmissionCoordinator, SubmitOutcome, XpListener

logger = logging.getLogger(__name__)


class EngineNotReadyError(RuntimeError):
    """An operation needs a session, but none has been started or resumed."""


class LearningSessionEngine:
    """Runs one learning session at a time.

    Start a new session with :meth:`start` or pick up an existing one with
    :meth:`resume`, then loop: choose an answer (:meth:`select_option` /
    :meth:`enter_text`), :meth:`submit` or :meth:`skip`, and :meth:`next`
    until :attr:`is_finished`.

    All methods run on a single event loop. Starting or resuming another
    session, or calling :meth:`teardown`, closes the previous session's
    scope so its late responses are dropped.
    """

    def __init__(
        self,
        gateway: SessionGateway,
        navigate: Navigate | None = None,
        config: Settings | None = None,
    ):
        self.gateway = gateway
        self.config = config or default_settings
        self._navigate = navigate or _log_navigation
        self.bootstrap = SessionBootstrap(gateway, self._navigate, self.config)
        self._xp_listeners: list[XpListener] = []
        self._state: SessionState | None = None
        self._submissions: SubmissionCoordinator | None = None
        self._completion: CompletionDecider | None = None

    # Setup

    async def start(self, target: SessionTarget) -> bool:
        """Create a new session. Returns False if creation already ran."""
        created = await self.bootstrap.create(target)
        if created is None:
            return False
        self._attach(created.session, created.questions, index=0)
        return True

    async def resume(self, session_id: str) -> None:
        """Load ``session_id`` and position it at the first unanswered question.

        The current session is dropped first, so a failed load leaves the
        engine with no session attached.
        """
        self.teardown()
        loaded = await self.bootstrap.load(session_id)
        point = resolve_resume_point(loaded)
        self._attach(
            loaded.session,
            loaded.questions,
            index=point.index,
            answered_ids=loaded.answered_question_ids,
        )
        if loaded.session.is_terminal:
            self._state.finalized = True
        logger.info(
            f"Resuming session {session_id} at question {point.index + 1}/{len(loaded.questions)}"
            + (" (finished)" if point.finished else "")
        )

    def on_xp_earned(self, listener: XpListener) -> None:
        """Register a callback for the transient "XP earned" signal."""
        self._xp_listeners.append(listener)
        if self._submissions is not None:
            self._submissions.add_xp_listener(listener)

    def teardown(self) -> None:
        """Drop the current session; responses still in flight are ignored."""
        if self._state is not None:
            logger.debug(f"Tearing down session {self._state.session.id}")
            self._state.scope.close()
        self._state = None
        self._submissions = None
        self._completion = None

    def _attach(
        self,
        session: LearningSession,
        questions: tuple[Question, ...],
        index: int,
        answered_ids: Iterable[str] = (),
    ) -> None:
        self.teardown()
        self._state = SessionState(session=session, questions=questions, current_index=index)
        self._submissions = SubmissionCoordinator(self.gateway, self._state, answered_ids)
        for listener in self._xp_listeners:
            self._submissions.add_xp_listener(listener)
        submissions = self._submissions
        self._completion = CompletionDecider(
            self.gateway,
            self._state,
            submission_in_flight=lambda: submissions.in_flight,
        )

    def _require_state(self) -> SessionState:
        if self._state is None:
            raise EngineNotReadyError("No session has been started or resumed")
        return self._state

    # Read-only view

    @property
    def state(self) -> SessionState:
        return self._require_state()

    @property
    def session(self) -> LearningSession:
        return self._require_state().session

    @property
    def questions(self) -> tuple[Question, ...]:
        return self._require_state().questions

    @property
    def current_index(self) -> int:
        return self._require_state().current_index

    @property
    def current_question(self) -> Question | None:
        return self._require_state().current_question

    @property
    def feedback(self) -> SubmissionResult | None:
        return self._require_state().feedback

    @property
    def xp_earned(self) -> int:
        return self._require_state().xp_earned

    @property
    def is_submitting(self) -> bool:
        return self._submissions is not None and self._submissions.in_flight

    @property
    def is_finished(self) -> bool:
        return self._state is not None and self._state.finalized

    @property
    def outcome(self) -> SessionStatus | None:
        """``completed`` or ``failed`` once finished, otherwise None."""
        if not self.is_finished:
            return None
        return self._state.session.status

    def phase(self, question_id: str) -> QuestionPhase:
        self._require_state()
        return self._submissions.phase(question_id)

    # Answering

    def _current_unanswered(self) -> Question | None:
        state = self._require_state()
        question = state.current_question
        if question is None or self._submissions.phase(question.id) is not QuestionPhase.UNANSWERED:
            return None
        return question

    def select_option(self, index: int) -> bool:
        """Select an option of the current choice question."""
        question = self._current_unanswered()
        if question is None or not question.question_type.is_choice:
            return False
        if index < 0 or (question.options and index >= len(question.options)):
            return False
        self._state.selected_response = AnswerResponse.choice(index)
        return True

    def enter_text(self, text: str) -> bool:
        """Set the free-text answer of the current fill-in-the-blank question."""
        question = self._current_unanswered()
        if question is None or question.question_type.is_choice:
            return False
        self._state.selected_response = AnswerResponse.text(text)
        return True

    @property
    def can_submit(self) -> bool:
        state = self._require_state()
        question = state.current_question
        if question is None:
            return False
        return self._submissions.check(question.id, state.selected_response) is None

    async def submit(self) -> SubmitOutcome:
        """Submit the selected answer for the current question."""
        state = self._require_state()
        question = state.current_question
        if question is None:
            return SubmitOutcome.REJECTED_SESSION_OVER
        return await self._submissions.submit(question.id, state.selected_response)

    async def skip(self) -> SubmitOutcome:
        """Skip the current question by submitting a deliberately wrong answer."""
        question = self._current_unanswered()
        if question is None:
            return await self.submit()
        if self._submissions.in_flight:
            return SubmitOutcome.REJECTED_IN_FLIGHT
        response = skip_response(question)
        self._state.selected_response = response
        logger.info(f"Skipping question {question.id}")
        return await self._submissions.submit(question.id, response)

    # Hints

    def toggle_hint(self) -> bool:
        """Show or hide the current question's explanation. Returns visibility."""
        state = self._require_state()
        question = state.current_question
        if question is None or not question.explanation:
            state.hint_visible = False
        else:
            state.hint_visible = not state.hint_visible
        return state.hint_visible

    @property
    def hint(self) -> str | None:
        state = self._require_state()
        if not state.hint_visible or state.current_question is None:
            return None
        return state.current_question.explanation

    # Progression

    async def next(self) -> NextStep | None:
        """Move on after the current question has its result.

        Returns the step taken, or None when there is nothing to do yet
        (current question unanswered, or already finished).
        """
        state = self._require_state()
        if state.finalized:
            return None
        question = state.current_question
        if question is not None and self._submissions.phase(question.id) is not QuestionPhase.ANSWERED:
            return None
        return await self._completion.proceed()

    async def finalize(self) -> LearningSession | None:
        """Run (or retry) the completion call directly."""
        self._require_state()
        return await self._completion.finalize()


def _log_navigation(path: str) -> None:
    logger.info(f"Navigate to {path}")
