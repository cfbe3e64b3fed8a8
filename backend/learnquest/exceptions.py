"""Error types raised by the learning session engine."""


class LearnQuestError(Exception):
    """Base class for all engine errors."""


class ApiError(LearnQuestError):
    """A learning sessions API call failed.

    ``status_code`` is None when the request never got a response
    (timeout, connection refused, ...).
    """

    def __init__(self, message: str, status_code: int | None = None, detail: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class InvalidPayloadError(LearnQuestError):
    """The server answered with a body that does not match the expected shape."""


class SessionCreationError(LearnQuestError):
    """A new learning session could not be created."""


class SubmissionError(LearnQuestError):
    """Submitting an answer failed; nothing was committed."""


class CompletionError(LearnQuestError):
    """Finalizing a session failed; the local session is unchanged."""
