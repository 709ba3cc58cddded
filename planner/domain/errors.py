from __future__ import annotations


class PlannerError(Exception):
    """Base class for errors surfaced by the planner core."""


class ValidationError(PlannerError):
    """Malformed or missing identifiers in an incoming request."""


class NotFoundError(PlannerError):
    pass


class TransientExternalError(PlannerError):
    """The text-generation provider could not produce a usable response.

    Never escapes the subtask generator; it selects the offline fallback.
    """


class PersistenceError(PlannerError):
    """A transaction failed and was rolled back; nothing was committed."""


class RollbackFailureError(PlannerError):
    """Rolling back after a failure failed as well.

    Carries both errors so neither is lost.
    """

    def __init__(self, original: BaseException, rollback_error: BaseException) -> None:
        super().__init__(f"tx err: {original}, rollback err: {rollback_error}")
        self.original = original
        self.rollback_error = rollback_error
