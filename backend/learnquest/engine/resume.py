"""Resume resolution for previously started sessions."""

from collections.abc import Sequence, Set
from dataclasses import dataclass

from learnquest.models import LoadedSession, Question


def resolve_resume_index(questions: Sequence[Question], answered_ids: Set[str]) -> int:
    """Position of the first question not yet answered.

    Scans in sequence order, so an answer recorded out of order (e.g. a
    retried submission landing on a later question) never lets the child
    skip an earlier unanswered one. Returns ``len(questions)`` when
    everything has been answered.
    """
    for index, question in enumerate(questions):
        if question.id not in answered_ids:
            return index
    return len(questions)


@dataclass(frozen=True)
class ResumePoint:
    """Where a loaded session picks up."""

    index: int
    finished: bool  # nothing left to answer, or the server says it's over
    needs_completion: bool  # all answered but the server still has it in progress


def resolve_resume_point(loaded: LoadedSession) -> ResumePoint:
    index = resolve_resume_index(loaded.questions, loaded.answered_question_ids)
    if loaded.session.is_terminal:
        return ResumePoint(index=index, finished=True, needs_completion=False)
    all_answered = index >= len(loaded.questions)
    return ResumePoint(index=index, finished=all_answered, needs_completion=all_answered)
