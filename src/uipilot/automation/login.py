"""Sign-in to the application through the online identity platform.

The flow is an explicit state machine. Each state handler performs one step
against the engine and returns the next state; the walk runs inside a single
executor command, so a transient driver failure at any step restarts the
whole sequence from navigation, while a definite failure (a missing field
after waiting, a landing page that never shows) ends it with a reason naming
the step.

Supported topologies:

* pass-through: no credentials, the browser already carries an identity
* direct: username, password, optional TOTP code, optional "stay signed in"
* redirect: after the username step a caller-supplied handler takes over
  (ADFS or another federated provider)
* already signed in: the username field never shows because the landing page
  is already there
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional
from urllib.parse import urlparse

from ..config import AutomationConfig
from ..tracing import TraceAdapter, get_logger
from .engine import AutomationEngine, require
from .errors import AutomationError, FailureKind, LoginError
from .executor import CommandExecutor
from .locators import Locator
from .totp import generate_code
from .types import LoginContext, LoginOutcome, LoginRedirect, LoginStatus
from .wait import Waiter, visible


@dataclass(frozen=True)
class LoginLocators:
    username: Locator = Locator.xpath("//input[@type='email']")
    password: Locator = Locator.xpath("//input[@type='password']")
    one_time_code: Locator = Locator.xpath("//input[@name='otc']")
    stay_signed_in: Locator = Locator.id("idSIButton9")
    use_another_account: Locator = Locator.id("use_another_account_link")
    federation_tile: Locator = Locator.id("aadTile")
    landing: Locator = Locator.xpath("//*[contains(@id,'crmTopBar') or contains(@data-id,'topBar')]")


class LoginState(Enum):
    START = "start"
    DETECT_TOPOLOGY = "detect-topology"
    ENTER_USERNAME = "enter-username"
    POST_USERNAME = "post-username"
    ENTER_PASSWORD = "enter-password"
    MFA_CHALLENGE = "mfa-challenge"
    STAY_SIGNED_IN = "stay-signed-in"
    AWAIT_LANDING = "await-landing"
    AUTHENTICATED = "authenticated"
    REDIRECT = "redirect"
    FAILED = "failed"


TERMINAL_STATES = frozenset({LoginState.AUTHENTICATED, LoginState.REDIRECT, LoginState.FAILED})


@dataclass
class _LoginRun:
    """Per-call state of one walk through the login states."""
    context: LoginContext
    engine: AutomationEngine
    log: TraceAdapter
    reason: str = ""


class OnlineLogin:
    def __init__(
        self,
        executor: CommandExecutor,
        waiter: Waiter,
        config: Optional[AutomationConfig] = None,
        locators: Optional[LoginLocators] = None,
    ):
        self.executor = executor
        self.waiter = waiter
        self.config = config or executor.config
        self.locators = locators or LoginLocators()
        self._handlers: Dict[LoginState, Callable[[_LoginRun], LoginState]] = {
            LoginState.START: self._start,
            LoginState.DETECT_TOPOLOGY: self._detect_topology,
            LoginState.ENTER_USERNAME: self._enter_username,
            LoginState.POST_USERNAME: self._post_username,
            LoginState.ENTER_PASSWORD: self._enter_password,
            LoginState.MFA_CHALLENGE: self._mfa_challenge,
            LoginState.STAY_SIGNED_IN: self._stay_signed_in,
            LoginState.AWAIT_LANDING: self._await_landing,
        }

    def login(self, context: LoginContext) -> LoginOutcome:
        """Reach an authenticated session for ``context.target_url``.

        Returns a SUCCESS or REDIRECT outcome, or a FAILURE outcome whose reason
        names the step that failed. Call ``raise_for_status()`` on the result to
        turn a failure into ``LoginError``.
        """
        log = get_logger("login", context.session_id)
        name = "Login" if context.credentials else "Pass Through Login"
        who = context.credentials.handle if context.credentials else "ambient identity"
        log.info(f"{name}: {context.target_url} as {who}")

        outcome = self.executor.execute(
            self.executor.options(name),
            lambda engine: self._walk(_LoginRun(context=context, engine=engine, log=log)),
        )
        if not outcome.succeeded:
            failure = outcome.failure
            if failure.kind == FailureKind.LOGIN_FAILED:
                reason = failure.message
            else:
                reason = f"{failure.kind.value}: {failure.message}"
            log.error(f"{name} failed: {reason}")
            return LoginOutcome.failure(reason)

        result = outcome.value
        log.info(f"{name} finished: {result.status.value}")
        if result.status == LoginStatus.SUCCESS:
            modes = self.executor.execute(self.executor.options("Initialize Client Modes"), self._apply_modes)
            if not modes.succeeded:
                reason = f"client modes failed: {modes.failure.kind.value}: {modes.failure.message}"
                log.error(f"{name} failed: {reason}")
                return LoginOutcome.failure(reason)
        return result

    def initialize_modes(self) -> bool:
        """Reload the application with the configured client mode flags."""
        return self.executor.run("Initialize Client Modes", self._apply_modes)

    def _mode_query(self) -> str:
        flags = []
        if self.config.test_mode:
            flags.append("flags=testmode=true")
        if self.config.performance_mode:
            flags.append("perf=true")
        return "&".join(flags)

    def _apply_modes(self, engine: AutomationEngine) -> bool:
        query = self._mode_query()
        if not query:
            return False
        url = engine.current_url()
        if query not in url:
            engine.goto(url + ("&" if "?" in url else "?") + query)
            self.waiter.wait_for_page_settled()
        return True

    def _walk(self, run: _LoginRun) -> LoginOutcome:
        state = LoginState.START
        while state not in TERMINAL_STATES:
            next_state = self._handlers[state](run)
            run.log.debug(f"{state.value} -> {next_state.value}")
            state = next_state
        if state == LoginState.FAILED:
            raise LoginError(run.reason)
        if state == LoginState.REDIRECT:
            return LoginOutcome.redirect()
        return LoginOutcome.success()

    def _is_online(self, url: str) -> bool:
        domains = self.config.online_domains
        if not domains:
            return True
        host = urlparse(url).hostname or ""
        return any(host.endswith(d) for d in domains)

    def _normalize_focus(self, engine: AutomationEngine) -> None:
        """Let the shell finish loading, then return to the top-level document."""
        self.waiter.wait_for_page_settled()
        if engine.switch_to_first_frame():
            self.waiter.wait_for_page_settled()
        engine.switch_to_default_content()

    def _start(self, run: _LoginRun) -> LoginState:
        run.engine.goto(run.context.target_url)
        self.waiter.wait_for_page_settled()
        if not self._is_online(run.context.target_url):
            run.log.info("on-premises host, no online sign-in")
            return LoginState.AUTHENTICATED
        return LoginState.DETECT_TOPOLOGY

    def _detect_topology(self, run: _LoginRun) -> LoginState:
        engine = run.engine
        if run.context.credentials is None:
            landed = self.waiter.wait_until(
                self.locators.landing,
                timeout=self.config.landing_timeout,
                on_satisfied=lambda _: self._normalize_focus(engine),
            )
            if landed:
                return LoginState.AUTHENTICATED
            run.reason = "pass-through login failed"
            return LoginState.FAILED

        link = engine.find(self.locators.use_another_account)
        if link is not None and engine.is_visible(link):
            run.log.debug("choosing a different account")
            engine.click(link)
        return LoginState.ENTER_USERNAME

    def _enter_username(self, run: _LoginRun) -> LoginState:
        engine = run.engine
        field = self.waiter.find_when_available(self.locators.username, timeout=self.config.username_timeout)
        if field is not None:
            engine.type(field, run.context.credentials.username)
            engine.submit(field)
            return LoginState.POST_USERNAME

        if engine.find(self.locators.landing) is not None:
            run.log.info("already signed in")
            self._normalize_focus(engine)
            return LoginState.AUTHENTICATED
        if engine.find(self.locators.one_time_code) is not None:
            run.log.info("trusted device skipped the password, one-time code requested")
            return LoginState.MFA_CHALLENGE
        run.reason = "login page failed: username field not found"
        return LoginState.FAILED

    def _post_username(self, run: _LoginRun) -> LoginState:
        engine = run.engine
        self.executor.think()
        tile = engine.find(self.locators.federation_tile)
        if tile is not None and engine.is_visible(tile):
            engine.click(tile)
        self.executor.think()

        handler = run.context.redirect_handler
        if handler is None:
            return LoginState.ENTER_PASSWORD
        self.executor.pause(self.config.redirect_pause)
        run.log.info("handing sign-in over to the redirect handler")
        handler(LoginRedirect(
            credentials=run.context.credentials,
            engine=engine,
            session_id=run.context.session_id,
        ))
        return LoginState.REDIRECT

    def _enter_password(self, run: _LoginRun) -> LoginState:
        field = require(run.engine, self.locators.password)
        run.engine.type(field, run.context.credentials.password)
        run.engine.submit(field)
        self.executor.think()
        return LoginState.MFA_CHALLENGE

    def _mfa_challenge(self, run: _LoginRun) -> LoginState:
        credentials = run.context.credentials
        if credentials is not None and credentials.mfa_secret:
            self._enter_one_time_code(run, credentials.mfa_secret)
        return LoginState.STAY_SIGNED_IN

    def _enter_one_time_code(self, run: _LoginRun, secret: str) -> None:
        attempts = 0
        while True:
            try:
                field = require(run.engine, self.locators.one_time_code)
                run.engine.type(field, generate_code(secret))
                run.engine.submit(field)
                return
            except AutomationError as e:
                if e.kind == FailureKind.PRECONDITION:
                    raise
                run.log.warning(f"entering one-time code failed (attempt {attempts + 1}): {e}")
                if attempts >= self.config.mfa_retry_attempts:
                    raise
                if self.executor.pause(self.config.retry_delay):
                    raise
                attempts += 1

    def _stay_signed_in(self, run: _LoginRun) -> LoginState:
        self.waiter.wait_until(
            visible(self.locators.stay_signed_in),
            timeout=self.config.stay_signed_in_timeout,
            on_satisfied=run.engine.click,
        )
        return LoginState.AWAIT_LANDING

    def _await_landing(self, run: _LoginRun) -> LoginState:
        engine = run.engine
        self.executor.think()
        landed = self.waiter.wait_until(
            self.locators.landing,
            timeout=self.config.landing_timeout,
            on_satisfied=lambda _: self._normalize_focus(engine),
        )
        if landed:
            return LoginState.AUTHENTICATED
        run.reason = "login page failed: landing marker not found"
        return LoginState.FAILED
