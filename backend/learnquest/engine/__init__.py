"""Learning session engine."""

from .bootstrap import CreationState, SessionBootstrap
from .completion import CompletionDecider, NextStep, decide_next_step
from .resume import ResumePoint, resolve_resume_index, resolve_resume_point
from .session_engine import EngineNotReadyError, LearningSessionEngine
from .skip import SKIP_ANSWER_TEXT, skip_response
from .state import SessionScope, SessionState
from .submission import (
    QuestionPhase,
    SubmissionCoordinator,
    SubmitOutcome,
    XpEarned,
    apply_submission_result,
)

__all__ = [
    "CreationState",
    "SessionBootstrap",
    "CompletionDecider",
    "NextStep",
    "decide_next_step",
    "ResumePoint",
    "resolve_resume_index",
    "resolve_resume_point",
    "EngineNotReadyError",
    "LearningSessionEngine",
    "SKIP_ANSWER_TEXT",
    "skip_response",
    "SessionScope",
    "SessionState",
    "QuestionPhase",
    "SubmissionCoordinator",
    "SubmitOutcome",
    "XpEarned",
    "apply_submission_result",
]
