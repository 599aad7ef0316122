"""Resilient command execution for browser-driven UI automation.

This package provides the engine abstraction (Playwright/Selenium), the
retrying command executor every UI operation goes through, polling waits, and
the online sign-in flow built on them.
"""

from .types import (
    CommandOutcome,
    CommandSpec,
    Credentials,
    FailureInfo,
    LoginContext,
    LoginOutcome,
    LoginRedirect,
    LoginStatus,
    WaitSpec,
)
from .errors import AutomationError, FailureKind
from .engine import AutomationEngine
from .locators import Locator
from .executor import CommandExecutor
from .wait import Waiter
from .login import LoginLocators, OnlineLogin
from .totp import generate_code

__all__ = [
    'AutomationEngine',
    'AutomationError',
    'CommandExecutor',
    'CommandOutcome',
    'CommandSpec',
    'Credentials',
    'FailureInfo',
    'FailureKind',
    'Locator',
    'LoginContext',
    'LoginLocators',
    'LoginOutcome',
    'LoginRedirect',
    'LoginStatus',
    'OnlineLogin',
    'WaitSpec',
    'Waiter',
    'generate_code',
]
