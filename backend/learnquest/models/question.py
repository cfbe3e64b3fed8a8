"""Question-related Pydantic models."""

from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class QuestionType(str, Enum):
    """How a question is answered."""

    MCQ = "mcq"
    TRUE_FALSE = "true_false"
    FILL_BLANK = "fill_blank"

    @property
    def is_choice(self) -> bool:
        return self is not QuestionType.FILL_BLANK


class Question(BaseModel):
    """A question as served inside a learning session.

    Frozen: the sequence fetched at session start is never edited.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    question_type: QuestionType = Field(
        validation_alias=AliasChoices("question_type", "type"),
    )
    question_text: str = ""
    options: tuple[str, ...] = ()
    correct_answer_index: int | None = Field(default=None, ge=0)
    explanation: str | None = None
    xp_reward: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("xp_reward", "xp_value"),
    )
    position: int = 0


class AnswerResponse(BaseModel):
    """What the child answered: an option index or free text, never both."""

    model_config = ConfigDict(frozen=True)

    selected_option_index: int | None = Field(default=None, ge=0)
    answer_text: str | None = None

    @model_validator(mode="after")
    def _exactly_one(self) -> "AnswerResponse":
        if (self.selected_option_index is None) == (self.answer_text is None):
            raise ValueError("Provide exactly one of selected_option_index or answer_text")
        return self

    @classmethod
    def choice(cls, index: int) -> "AnswerResponse":
        return cls(selected_option_index=index)

    @classmethod
    def text(cls, answer: str) -> "AnswerResponse":
        return cls(answer_text=answer)

    @property
    def is_empty(self) -> bool:
        return self.answer_text is not None and not self.answer_text.strip()

    def matches(self, question: Question) -> bool:
        """Whether this kind of response fits the question's type."""
        if question.question_type.is_choice:
            if self.selected_option_index is None:
                return False
            return not question.options or self.selected_option_index < len(question.options)
        return self.answer_text is not None

    def to_payload(self) -> dict:
        if self.selected_option_index is not None:
            return {"selected_option_index": self.selected_option_index}
        return {"answer_text": self.answer_text}
