"""Polling waits: block until the UI reaches a state, or give up at a deadline.

Unlike the executor these helpers do not retry actions; they only observe.
A timeout is reported as ``False`` unless the caller's ``on_timeout`` callback
chooses to raise.
"""
import dataclasses
import threading
import time
from typing import Any, Callable, Optional, Union

from ..config import AutomationConfig
from ..tracing import get_logger
from .engine import AutomationEngine
from .errors import AutomationError, TRANSIENT_KINDS
from .locators import Locator, Target
from .types import WaitSpec

Condition = Union[Target, Callable[[AutomationEngine], Any]]


def visible(target: Target) -> Callable[[AutomationEngine], Any]:
    """Condition satisfied by a present and displayed element."""
    def check(engine: AutomationEngine) -> Any:
        element = engine.find(target)
        if element is not None and engine.is_visible(element):
            return element
        return None
    check.__name__ = f"visible({target})"
    return check


def _describe(condition: Condition) -> str:
    if isinstance(condition, (Locator, str)):
        return str(condition)
    return getattr(condition, "__name__", repr(condition))


class Waiter:
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
        self.log = get_logger("wait", session_id)

    def wait_until(
        self,
        condition: Condition,
        spec: Optional[WaitSpec] = None,
        *,
        timeout: Optional[float] = None,
        on_satisfied: Optional[Callable[[Any], None]] = None,
        on_timeout: Optional[Callable[[], None]] = None,
    ) -> bool:
        """Poll ``condition`` until it holds or the timeout elapses.

        ``condition`` is either a locator (satisfied once the element exists)
        or a callable taking the engine (satisfied once it returns a truthy
        value). The condition is checked before the first sleep. Keyword
        arguments override the matching fields of ``spec``.
        """
        if spec is None:
            spec = WaitSpec(timeout=self.config.default_timeout if timeout is None else timeout)
        overrides = {
            name: value
            for name, value in (("timeout", timeout), ("on_satisfied", on_satisfied), ("on_timeout", on_timeout))
            if value is not None
        }
        if overrides:
            spec = dataclasses.replace(spec, **overrides)
        poll = spec.poll_interval or self.config.poll_interval
        started = time.monotonic()
        deadline = started + spec.timeout

        while True:
            state = self._check(condition)
            if state:
                self.log.debug(f"{_describe(condition)} satisfied after {time.monotonic() - started:.2f}s")
                if spec.on_satisfied is not None:
                    spec.on_satisfied(state)
                return True
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            if self.stop_event.wait(min(poll, remaining)):
                self.log.info(f"wait for {_describe(condition)} stopped")
                return False

        self.log.debug(f"{_describe(condition)} not satisfied within {spec.timeout:.2f}s")
        if spec.on_timeout is not None:
            spec.on_timeout()
        return False

    def wait_until_visible(self, target: Target, timeout: Optional[float] = None) -> bool:
        return self.wait_until(visible(target), timeout=timeout)

    def find_when_available(self, target: Target, timeout: Optional[float] = None) -> Optional[Any]:
        """Wait for an element and return it, or None on timeout."""
        found = []
        self.wait_until(target, timeout=timeout, on_satisfied=found.append)
        return found[0] if found else None

    def wait_for_page_settled(self, timeout: Optional[float] = None) -> None:
        self.engine.wait_for_page_settled(self.config.page_settle_timeout if timeout is None else timeout)

    def _check(self, condition: Condition) -> Any:
        try:
            if isinstance(condition, (Locator, str)):
                return self.engine.find(condition)
            return condition(self.engine)
        except AutomationError as e:
            if e.kind in TRANSIENT_KINDS:
                return None
            raise
