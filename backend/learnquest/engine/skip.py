"""Skip policy: a skip is a deliberately wrong answer."""

import logging

from learnquest.models import AnswerResponse, Question, QuestionType

logger = logging.getLogger(__name__)

# Submitted for skipped fill-in-the-blank questions; never a real answer.
SKIP_ANSWER_TEXT = "__learnquest_skip__"

TRUE_FALSE_OPTION_COUNT = 2


def skip_response(question: Question) -> AnswerResponse:
    """Build the answer submitted when the child skips ``question``.

    Choice questions get the first option that is not the known correct
    one. When no such option exists (single-option question) index 0 is
    used even though it may be the correct answer.
    """
    if not question.question_type.is_choice:
        return AnswerResponse.text(SKIP_ANSWER_TEXT)

    option_count = len(question.options)
    if option_count == 0 and question.question_type is QuestionType.TRUE_FALSE:
        option_count = TRUE_FALSE_OPTION_COUNT

    for index in range(option_count):
        if index != question.correct_answer_index:
            return AnswerResponse.choice(index)

    logger.warning(
        f"No wrong option available to skip question {question.id}; "
        f"falling back to index 0 (may be the correct answer)"
    )
    return AnswerResponse.choice(0)
