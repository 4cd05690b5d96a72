"""Error taxonomy for chain execution and chain binding.

- :class:`DomainError`: expected, user-facing failure. Passes through every
  error boundary unchanged.
- :class:`ChainIntegrityError`: misuse of the chain handle (continuation
  invoked twice, after termination, or outside a running interceptor).
  Fatal to the run; never wrapped.
- Anything else is an unexpected failure and is wrapped into a DomainError
  carrying :data:`UNEXPECTED_ERROR_MESSAGE` and the original as cause.
- :class:`BindingError`: configuration-time failure while resolving
  interceptor identifiers. Raised before any interceptor runs.
"""

from __future__ import annotations

from pydantic import BaseModel

UNEXPECTED_ERROR_MESSAGE = "Interceptor chain execution error"


class DomainError(Exception):
    """Structured, expected failure with an optional wrapped cause."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def describe(self) -> str:
        """Message followed by the cause's description, when there is one."""
        if self.cause is None:
            return self.message
        return f"{self.message}: {type(self.cause).__name__}: {self.cause}"

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, cause={self.cause!r})"


class ChainIntegrityError(Exception):
    """The chain handle was used in a way the state machine forbids."""


class BindingIssue(BaseModel):
    """One problem found while resolving interceptor bindings."""

    model_config = {"frozen": True}

    code: str
    message: str
    handler_id: str | None = None
    interceptor: str | None = None


class BindingError(Exception):
    """Interceptor bindings could not be resolved in full."""

    def __init__(self, issues: list[BindingIssue]) -> None:
        self.issues = list(issues)
        lines = [issue.message for issue in self.issues]
        summary = f"{len(lines)} binding issue(s)"
        super().__init__(summary + ("\n  " + "\n  ".join(lines) if lines else ""))
