"""Mutable state owned by one running learning session."""

from dataclasses import dataclass, field

from learnquest.models import AnswerResponse, LearningSession, Question, SubmissionResult


class SessionScope:
    """Lifetime token for one session instance.

    Requests capture the scope's session id before they are sent; when the
    response arrives it is applied only if :meth:`owns` still holds. Closing
    the scope (teardown, navigation away, switching sessions) turns every
    late response for it into a no-op.
    """

    def __init__(self, session_id: str):
        self.session_id = session_id
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def close(self) -> None:
        self._active = False

    def owns(self, session_id: str) -> bool:
        return self._active and session_id == self.session_id

    def __repr__(self) -> str:
        state = "active" if self._active else "closed"
        return f"<SessionScope {self.session_id} {state}>"


@dataclass
class SessionState:
    """Everything the engine tracks for the session it is running."""

    session: LearningSession
    questions: tuple[Question, ...]
    current_index: int = 0

    # Per-question transient state, cleared on advance
    selected_response: AnswerResponse | None = None
    hint_visible: bool = False
    feedback: SubmissionResult | None = None

    xp_earned: int = 0  # running total shown during play
    finalized: bool = False
    scope: SessionScope = field(init=False)

    def __post_init__(self) -> None:
        self.scope = SessionScope(self.session.id)

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> Question | None:
        if self.current_index >= len(self.questions):
            return None
        return self.questions[self.current_index]

    @property
    def is_past_end(self) -> bool:
        return self.current_index >= len(self.questions)

    @property
    def is_last_question(self) -> bool:
        return self.current_index >= len(self.questions) - 1

    def question_by_id(self, question_id: str) -> Question | None:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    def clear_transient(self) -> None:
        self.selected_response = None
        self.hint_visible = False
        self.feedback = None

    def advance(self) -> None:
        """Move to the next question. The index never moves backwards."""
        if self.is_past_end:
            raise ValueError("Cannot advance past the end of the question sequence")
        self.current_index += 1
        self.clear_transient()
