from typing import Any, List, Optional, Protocol

from .errors import ElementNotFoundError
from .locators import Target


class AutomationEngine(Protocol):
    """What the automation core needs from a browser driver.

    Element handles are opaque to the core; they are whatever the engine's
    ``find`` returns. Engines raise the exceptions from ``errors`` instead of
    their driver's native ones.
    """

    def start(self, headless: bool = True, user_data_dir: Optional[str] = None) -> None:
        ...

    def stop(self) -> None:
        ...

    def goto(self, url: str) -> None:
        ...

    def current_url(self) -> str:
        ...

    def find(self, target: Target) -> Optional[Any]:
        ...

    def find_all(self, target: Target) -> List[Any]:
        ...

    def click(self, element: Any) -> None:
        ...

    def type(self, element: Any, text: str, clear: bool = True) -> None:
        ...

    def submit(self, element: Any) -> None:
        ...

    def get_attribute(self, element: Any, name: str) -> Optional[str]:
        ...

    def is_visible(self, element: Any) -> bool:
        ...

    def evaluate(self, script: str, *args: Any) -> Any:
        ...

    def wait_for_page_settled(self, timeout: float) -> None:
        ...

    def switch_to_first_frame(self) -> bool:
        ...

    def switch_to_default_content(self) -> None:
        ...


def require(engine: AutomationEngine, target: Target) -> Any:
    """Find an element or raise ``ElementNotFoundError``."""
    element = engine.find(target)
    if element is None:
        raise ElementNotFoundError(target)
    return element
