"""Tests for the retrying command executor."""

from __future__ import annotations

import logging
import threading
import time

import pytest

from uipilot.automation.errors import (
    ApplicationError,
    CommandFailedError,
    ElementNotFoundError,
    FailureKind,
    PreconditionError,
    StaleElementError,
)
from uipilot.automation.executor import CommandExecutor
from uipilot.automation.types import CommandSpec
from uipilot.tracing import TraceAdapter


class Flaky:
    """Operation failing ``failures`` times with ``error`` before returning ``value``."""

    def __init__(self, failures: int, error=ElementNotFoundError, value="done"):
        self.failures = failures
        self.error = error
        self.value = value
        self.calls = 0

    def __call__(self, engine):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error("flaky")
        return self.value


@pytest.mark.parametrize("max_attempts", [0, 1, 3])
def test_retryable_failure_uses_every_attempt(executor, max_attempts):
    op = Flaky(failures=100)
    outcome = executor.execute(CommandSpec("Always Missing", max_attempts=max_attempts), op)

    assert not outcome.succeeded
    assert op.calls == max_attempts + 1
    assert outcome.failure.attempts_made == max_attempts + 1
    assert outcome.failure.kind == FailureKind.NOT_FOUND


@pytest.mark.parametrize("error", [ApplicationError, PreconditionError, ValueError])
def test_non_retryable_failure_runs_once(executor, error):
    op = Flaky(failures=100, error=error)
    outcome = executor.execute(CommandSpec("Rejected", max_attempts=5), op)

    assert op.calls == 1
    assert outcome.failure.attempts_made == 1


def test_unknown_exception_is_unexpected(executor):
    outcome = executor.execute(CommandSpec("Broken", max_attempts=3), Flaky(failures=1, error=KeyError))
    assert outcome.failure.kind == FailureKind.UNEXPECTED


def test_builtin_timeout_is_classified(executor):
    outcome = executor.execute(CommandSpec("Slow", max_attempts=3), Flaky(failures=1, error=TimeoutError))
    assert outcome.failure.kind == FailureKind.TIMEOUT
    assert outcome.failure.attempts_made == 1


@pytest.mark.parametrize("k", [1, 2, 4])
def test_success_short_circuits_retry(executor, k):
    op = Flaky(failures=k - 1, error=StaleElementError, value=k)
    outcome = executor.execute(CommandSpec("Eventually", max_attempts=3), op)

    assert outcome.succeeded
    assert outcome.value == k
    assert op.calls == k


def test_custom_retryable_kinds(executor):
    spec = CommandSpec("Retry Timeouts", max_attempts=2, retryable_kinds=frozenset({FailureKind.TIMEOUT}))
    op = Flaky(failures=100, error=TimeoutError)
    executor.execute(spec, op)
    assert op.calls == 3

    op = Flaky(failures=100)
    executor.execute(spec, op)
    assert op.calls == 1


def test_operation_receives_engine(executor, engine):
    seen = []
    executor.execute(CommandSpec("Engine"), seen.append)
    assert seen == [engine]


def test_negative_attempts_rejected():
    with pytest.raises(PreconditionError):
        CommandSpec("Bad", max_attempts=-1)
    with pytest.raises(PreconditionError):
        CommandSpec("Bad", retry_delay=-0.5)


def test_retry_delay_is_applied(engine, make_config):
    executor = CommandExecutor(engine, make_config(retry_delay=0.05))
    started = time.monotonic()
    executor.execute(executor.options("Delayed", max_attempts=2), Flaky(failures=100))
    assert time.monotonic() - started >= 0.1


def test_stop_event_cancels_retries(engine, make_config):
    stop = threading.Event()
    stop.set()
    executor = CommandExecutor(engine, make_config(retry_delay=10), stop)
    op = Flaky(failures=100)

    started = time.monotonic()
    outcome = executor.execute(executor.options("Stopped", max_attempts=5), op)

    assert time.monotonic() - started < 1
    assert op.calls == 1
    assert not outcome.succeeded


def test_options_use_config_defaults(engine, make_config):
    executor = CommandExecutor(engine, make_config(retry_attempts=4, retry_delay=0.25))
    spec = executor.options("Open App")

    assert spec.name == "Open App"
    assert spec.max_attempts == 4
    assert spec.retry_delay == 0.25
    assert spec.retryable_kinds == frozenset({FailureKind.NOT_FOUND, FailureKind.STALE_REFERENCE})
    assert spec.source.startswith("test_options_use_config_defaults:")


def test_run_unwraps_value_and_raises_failure(executor):
    assert executor.run("Value", lambda engine: 42) == 42

    with pytest.raises(CommandFailedError) as info:
        executor.run("Dialog", Flaky(failures=1, error=ApplicationError))
    assert info.value.kind == FailureKind.APPLICATION_ERROR
    assert info.value.failure.attempts_made == 1
    assert "Dialog" in str(info.value)


def test_one_record_per_attempt(executor, caplog):
    with caplog.at_level(logging.DEBUG, logger="uipilot"):
        executor.execute(CommandSpec("Open Menu", max_attempts=2), Flaky(failures=2))

    attempts = [r.getMessage() for r in caplog.records if "attempt" in r.getMessage() and "Open Menu:" in r.getMessage()]
    assert len(attempts) == 3
    assert "attempt 1 of 3 -> not-found" in attempts[0]
    assert "attempt 3 of 3 -> success" in attempts[2]
    assert all(r.component == "executor" for r in caplog.records)


class BrokenLogger:
    def isEnabledFor(self, level):
        return True

    def log(self, *args, **kwargs):
        raise RuntimeError("log sink unavailable")


def test_logging_failures_do_not_affect_control_flow(executor):
    executor.log = TraceAdapter(BrokenLogger(), "executor")
    op = Flaky(failures=1)

    outcome = executor.execute(CommandSpec("Quiet", max_attempts=1), op)

    assert outcome.succeeded
    assert op.calls == 2
