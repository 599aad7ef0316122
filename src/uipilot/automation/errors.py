"""Failure taxonomy shared by the engines, the executor and the login flow.

Every failure carries a ``kind`` tag. The executor decides whether to retry by
checking that tag against the retryable set of the command, so adding a new
failure only means picking the right kind.
"""
from enum import Enum
from typing import Any, Optional


class FailureKind(str, Enum):
    NOT_FOUND = "not-found"
    STALE_REFERENCE = "stale-reference"
    TIMEOUT = "timeout"
    APPLICATION_ERROR = "application-error"
    PRECONDITION = "precondition"
    LOGIN_FAILED = "login-failed"
    UNEXPECTED = "unexpected"


# Symptoms of the UI re-rendering between locate and act
TRANSIENT_KINDS = frozenset({FailureKind.NOT_FOUND, FailureKind.STALE_REFERENCE})


class AutomationError(Exception):
    """Base exception for failures raised inside automation commands."""
    kind = FailureKind.UNEXPECTED


class ElementNotFoundError(AutomationError):
    kind = FailureKind.NOT_FOUND

    def __init__(self, locator: Any, message: Optional[str] = None):
        self.locator = locator
        super().__init__(message or f"Element not found: {locator}")


class StaleElementError(AutomationError):
    kind = FailureKind.STALE_REFERENCE


class WaitTimeoutError(AutomationError):
    kind = FailureKind.TIMEOUT


class ApplicationError(AutomationError):
    """The application reported an error; retrying will not change the result."""
    kind = FailureKind.APPLICATION_ERROR


class PreconditionError(AutomationError, ValueError):
    """A required input is missing or malformed."""
    kind = FailureKind.PRECONDITION


class LoginError(AutomationError):
    kind = FailureKind.LOGIN_FAILED

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class CommandFailedError(AutomationError):
    """Raised when a caller unwraps a failed command outcome."""

    def __init__(self, name: str, failure):
        self.name = name
        self.failure = failure
        self.kind = failure.kind
        super().__init__(
            f"{name} failed after {failure.attempts_made} attempt(s) "
            f"[{failure.kind.value}]: {failure.message}"
        )


def classify(exc: BaseException) -> FailureKind:
    """Map an exception raised by an operation to its failure kind."""
    if isinstance(exc, AutomationError):
        return exc.kind
    if isinstance(exc, TimeoutError):
        return FailureKind.TIMEOUT
    return FailureKind.UNEXPECTED
