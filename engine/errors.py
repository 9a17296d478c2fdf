"""
Engine exceptions.

Only SessionExpiredOrNotFound, UnknownQuestionError, SessionStateError,
SessionConflictError and InvalidFeedbackError reach callers. The
*Unavailable / *Failure classes are raised and caught inside the component
that issued the I/O so the failure can be logged with a stable name.
"""

from typing import Optional


class EngineError(Exception):
    """Base class for engine errors."""

    def __init__(self, message: str, session_id: Optional[str] = None):
        super().__init__(message)
        self.session_id = session_id


class SessionExpiredOrNotFound(EngineError):
    """Terminal for the request; the caller must start a new session."""


class SessionExpiredError(SessionExpiredOrNotFound):
    pass


class SessionNotFoundError(SessionExpiredOrNotFound):
    pass


class UnknownQuestionError(EngineError):
    """Answer references a question id that is not in the session's flow."""


class UnknownOptionError(UnknownQuestionError):
    """Answer references an option id the question does not offer."""


class SessionStateError(EngineError):
    """Operation not allowed in the session's current state."""


class SessionConflictError(EngineError):
    """Compare-and-swap write lost against a concurrent writer."""


class InvalidFeedbackError(EngineError):
    """Unknown quick adjustment, refine action, reaction or score."""


class UpstreamSearchUnavailable(EngineError):
    pass


class EnrichmentUnavailable(EngineError):
    pass


class ValidationStorageFailure(EngineError):
    pass
