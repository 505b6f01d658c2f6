"""
Exception hierarchy for the commit analysis pipeline.

Model failures are split by class so callers can decide what is a hard
failure (analysis) and what is retried (suggestions). Malformed model text
never escapes the pipeline as an exception.
"""


class RefactorScoreError(Exception):
    """Base class for every error raised by refactor_score."""


class DomainError(RefactorScoreError):
    """A domain invariant was violated (duplicate file, unknown file, bad aggregate)."""


class LLMError(RefactorScoreError):
    """Raised when a call to the model endpoint fails."""


class LLMTimeoutError(LLMError):
    """The call exceeded its configured timeout and was cancelled."""

    def __init__(self, timeout_seconds: float):
        super().__init__(f"LLM request timed out after {timeout_seconds} seconds")
        self.timeout_seconds = timeout_seconds


class LLMTransportError(LLMError):
    """Connection failure or non-2xx status from the model endpoint."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class LLMProtocolError(LLMError):
    """The HTTP call succeeded but the envelope has no usable `response` field."""


class ResponseParseError(RefactorScoreError):
    """Model text is not valid JSON or has the wrong root shape."""


class CommitNotFoundError(DomainError):
    """The git collaborator has no commit with the requested id."""

    def __init__(self, commit_id: str):
        super().__init__(f"Commit with id {commit_id} not found")
        self.commit_id = commit_id
