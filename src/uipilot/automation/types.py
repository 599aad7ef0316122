import hashlib
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, FrozenSet, Generic, Optional, TypeVar

from .errors import (
    CommandFailedError,
    FailureKind,
    LoginError,
    PreconditionError,
    TRANSIENT_KINDS,
)

T = TypeVar("T")


@dataclass(frozen=True)
class CommandSpec:
    """Retry policy for one logical command."""
    name: str
    max_attempts: int = 0
    retry_delay: float = 0.0
    retryable_kinds: FrozenSet[FailureKind] = TRANSIENT_KINDS
    source: str = ""

    def __post_init__(self):
        if self.max_attempts < 0:
            raise PreconditionError(f"max_attempts must be >= 0, got {self.max_attempts}")
        if self.retry_delay < 0:
            raise PreconditionError(f"retry_delay must be >= 0, got {self.retry_delay}")

    @property
    def total_attempts(self) -> int:
        return self.max_attempts + 1


@dataclass(frozen=True)
class FailureInfo:
    kind: FailureKind
    message: str
    attempts_made: int


@dataclass(frozen=True)
class CommandOutcome(Generic[T]):
    """Value or failure of one executor call; exactly one is populated."""
    name: str
    value: Optional[T] = None
    failure: Optional[FailureInfo] = None

    @classmethod
    def ok(cls, name: str, value: T) -> "CommandOutcome[T]":
        return cls(name=name, value=value)

    @classmethod
    def failed(cls, name: str, failure: FailureInfo) -> "CommandOutcome[T]":
        return cls(name=name, failure=failure)

    @property
    def succeeded(self) -> bool:
        return self.failure is None

    def unwrap(self) -> T:
        if self.failure is not None:
            raise CommandFailedError(self.name, self.failure)
        return self.value


@dataclass(frozen=True)
class WaitSpec:
    timeout: float
    poll_interval: Optional[float] = None
    on_satisfied: Optional[Callable[[Any], None]] = None
    on_timeout: Optional[Callable[[], None]] = None


@dataclass(frozen=True)
class Credentials:
    """Login secrets. None of the fields show up in repr or logs."""
    username: str = field(repr=False)
    password: str = field(repr=False, default="")
    mfa_secret: Optional[str] = field(repr=False, default=None)

    @property
    def handle(self) -> str:
        digest = hashlib.sha256(self.username.encode("utf-8")).hexdigest()
        return f"user-{digest[:8]}"


@dataclass(frozen=True)
class LoginRedirect:
    """Handed to a redirect handler; the handler completes federation."""
    credentials: Credentials
    engine: Any
    session_id: str


@dataclass(frozen=True)
class LoginContext:
    target_url: str
    credentials: Optional[Credentials] = None
    redirect_handler: Optional[Callable[[LoginRedirect], None]] = field(default=None, repr=False)
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)


class LoginStatus(str, Enum):
    SUCCESS = "success"
    REDIRECT = "redirect"
    FAILURE = "failure"


@dataclass(frozen=True)
class LoginOutcome:
    status: LoginStatus
    reason: str = ""

    @classmethod
    def success(cls) -> "LoginOutcome":
        return cls(LoginStatus.SUCCESS)

    @classmethod
    def redirect(cls) -> "LoginOutcome":
        return cls(LoginStatus.REDIRECT)

    @classmethod
    def failure(cls, reason: str) -> "LoginOutcome":
        return cls(LoginStatus.FAILURE, reason)

    def raise_for_status(self) -> "LoginOutcome":
        if self.status == LoginStatus.FAILURE:
            raise LoginError(self.reason)
        return self
