# Avoid importing browser drivers at top-level to prevent side effects
__all__ = ["BrowserSession", "AutomationConfig", "LoginContext", "Credentials"]

__version__ = "0.3.0"


def __getattr__(name):
    if name == "BrowserSession":
        from .automation.session import BrowserSession
        return BrowserSession
    if name == "AutomationConfig":
        from .config import AutomationConfig
        return AutomationConfig
    if name == "LoginContext":
        from .automation.types import LoginContext
        return LoginContext
    if name == "Credentials":
        from .automation.types import Credentials
        return Credentials
    raise AttributeError(name)
