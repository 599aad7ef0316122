"""Single retrying choke point for every UI operation.

An operation is any callable taking the engine. The executor runs it, tags
any failure with a ``FailureKind`` and retries only the kinds the command's
spec lists as retryable. Operations must be safe to run again: the executor
guarantees that it retries, not that retrying is harmless.
"""
import inspect
import threading
import time
from typing import Callable, FrozenSet, Optional, TypeVar

from ..config import AutomationConfig
from ..tracing import get_logger
from .engine import AutomationEngine
from .errors import FailureKind, TRANSIENT_KINDS, classify
from .types import CommandOutcome, CommandSpec, FailureInfo

T = TypeVar("T")

Operation = Callable[[AutomationEngine], T]


def _caller(depth: int = 2) -> str:
    frame = inspect.currentframe()
    for _ in range(depth):
        if frame is None:
            return ""
        frame = frame.f_back
    if frame is None:
        return ""
    return f"{frame.f_code.co_name}:{frame.f_lineno}"


class CommandExecutor:
    def __init__(
        self,
        engine: AutomationEngine,
        config: Optional[AutomationConfig] = None,
        stop_event: Optional[threading.Event] = None,
        session_id: Optional[str] = None,
    ):
        self.engine = engine
        self.config = config or AutomationConfig()
        self.stop_event = stop_event or threading.Event()
        self.log = get_logger("executor", session_id)

    def options(
        self,
        name: str,
        max_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
        retryable: Optional[FrozenSet[FailureKind]] = None,
        source: Optional[str] = None,
    ) -> CommandSpec:
        """Build a command spec from the configured defaults."""
        return CommandSpec(
            name=name,
            max_attempts=self.config.retry_attempts if max_attempts is None else max_attempts,
            retry_delay=self.config.retry_delay if retry_delay is None else retry_delay,
            retryable_kinds=TRANSIENT_KINDS if retryable is None else frozenset(retryable),
            source=source or _caller(),
        )

    def execute(self, spec: CommandSpec, operation: Operation) -> CommandOutcome[T]:
        attempts = 0
        started = time.monotonic()
        while True:
            attempt_started = time.monotonic()
            try:
                value = operation(self.engine)
            except Exception as e:
                kind = classify(e)
                attempts += 1
                self._trace(spec, attempts, attempt_started, kind.value, e)
                retry = kind in spec.retryable_kinds and attempts <= spec.max_attempts
                if retry and not self._sleep(spec.retry_delay):
                    continue
                failure = FailureInfo(kind=kind, message=str(e) or type(e).__name__, attempts_made=attempts)
                self.log.warning(
                    f"{spec.name} gave up after {attempts} attempt(s) in "
                    f"{(time.monotonic() - started) * 1000:.0f} ms: {failure.message}"
                )
                return CommandOutcome.failed(spec.name, failure)
            attempts += 1
            self._trace(spec, attempts, attempt_started, "success")
            return CommandOutcome.ok(spec.name, value)

    def run(self, name: str, operation: Operation, **options) -> T:
        """Execute with default options and return the value, raising on failure."""
        options.setdefault("source", _caller())
        return self.execute(self.options(name, **options), operation).unwrap()

    def think(self, seconds: Optional[float] = None) -> bool:
        """Pause like a human would between UI steps."""
        return self._sleep(self.config.scaled_think_time(seconds))

    def pause(self, seconds: float) -> bool:
        """Sleep unless the session is being stopped; True when interrupted."""
        return self._sleep(seconds)

    def _sleep(self, seconds: float) -> bool:
        """Interruptible sleep; True when the stop event cut it short."""
        if seconds <= 0:
            return self.stop_event.is_set()
        return self.stop_event.wait(seconds)

    def _trace(self, spec: CommandSpec, attempt: int, started: float, outcome: str, error: Optional[Exception] = None) -> None:
        elapsed = (time.monotonic() - started) * 1000
        message = f"{spec.name}: attempt {attempt} of {spec.total_attempts} -> {outcome} ({elapsed:.0f} ms)"
        if spec.source:
            message += f" [{spec.source}]"
        if error is None:
            self.log.debug(message)
        else:
            self.log.info(f"{message}: {error}")
