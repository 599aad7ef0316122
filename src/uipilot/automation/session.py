import threading
import uuid
from typing import Optional

from ..config import AutomationConfig
from ..tracing import get_logger
from .engine import AutomationEngine
from .executor import CommandExecutor
from .form_script import FormScript
from .login import LoginLocators, OnlineLogin
from .wait import Waiter


def create_engine(name: str) -> AutomationEngine:
    """Instantiate the named engine; drivers are imported lazily."""
    if name == "playwright":
        from .playwright_engine import PlaywrightEngine
        return PlaywrightEngine()
    if name == "selenium":
        from .selenium_engine import SeleniumEngine
        return SeleniumEngine()
    raise ValueError(f"Unknown engine: {name}")


class BrowserSession:
    """One browser, and the executor, waiter and page helpers bound to it.

    Sessions share nothing, so several can run in parallel threads as long as
    each thread owns its own session.
    """

    def __init__(
        self,
        engine: AutomationEngine,
        config: Optional[AutomationConfig] = None,
        headless: bool = True,
        user_data_dir: Optional[str] = None,
        locators: Optional[LoginLocators] = None,
    ):
        self.engine = engine
        self.config = config or AutomationConfig()
        self.headless = headless
        self.user_data_dir = user_data_dir
        self.session_id = uuid.uuid4().hex
        self.stop_event = threading.Event()
        self.log = get_logger("session", self.session_id)

        self.executor = CommandExecutor(engine, self.config, self.stop_event, self.session_id)
        self.waiter = Waiter(engine, self.config, self.stop_event, self.session_id)
        self.login = OnlineLogin(self.executor, self.waiter, self.config, locators)
        self.form = FormScript(self.executor, self.waiter)
        self._started = False

    def start(self) -> "BrowserSession":
        self.log.debug(f"starting browser (headless={self.headless})")
        self.engine.start(headless=self.headless, user_data_dir=self.user_data_dir)
        self._started = True
        return self

    def stop(self) -> None:
        """Abort pending waits and close the browser."""
        self.stop_event.set()
        if self._started:
            self.engine.stop()
            self._started = False
            self.log.debug("browser stopped")

    def __enter__(self) -> "BrowserSession":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
