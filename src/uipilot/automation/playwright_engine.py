from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Union

from playwright.sync_api import Browser, BrowserContext, Error, Frame, Page, sync_playwright
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from .errors import AutomationError, StaleElementError, WaitTimeoutError
from .locators import Target, as_locator


def to_selector(target: Target) -> str:
    locator = as_locator(target)
    if locator.strategy == "xpath":
        return f"xpath={locator.value}"
    if locator.strategy == "id":
        return f'[id="{locator.value}"]'
    return locator.value


@contextmanager
def _translate_errors() -> Iterator[None]:
    try:
        yield
    except PlaywrightTimeoutError as e:
        raise WaitTimeoutError(e.message) from e
    except Error as e:
        if "not attached" in e.message:
            raise StaleElementError(e.message) from e
        raise AutomationError(e.message) from e


class PlaywrightEngine:
    def __init__(self):
        self._pw = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._frame: Optional[Frame] = None

    def start(self, headless: bool = True, user_data_dir: Optional[str] = None) -> None:
        self._pw = sync_playwright().start()
        launch_args = {"headless": headless}
        if user_data_dir:
            self._context = self._pw.chromium.launch_persistent_context(user_data_dir, **launch_args)
            pages = self._context.pages
            self._page = pages[0] if pages else self._context.new_page()
        else:
            self._browser = self._pw.chromium.launch(**launch_args)
            self._context = self._browser.new_context()
            self._page = self._context.new_page()

    def stop(self) -> None:
        if self._context:
            self._context.close()
        if self._browser:
            self._browser.close()
        if self._pw:
            self._pw.stop()
        self._page = None
        self._frame = None
        self._context = None
        self._browser = None
        self._pw = None

    @property
    def _scope(self) -> Union[Page, Frame]:
        assert self._page is not None
        return self._frame or self._page

    def goto(self, url: str, wait_until: str = "load") -> None:
        assert self._page is not None
        self._frame = None
        with _translate_errors():
            self._page.goto(url, wait_until=wait_until)

    def current_url(self) -> str:
        assert self._page is not None
        return self._page.url

    def find(self, target: Target) -> Optional[Any]:
        with _translate_errors():
            return self._scope.query_selector(to_selector(target))

    def find_all(self, target: Target) -> List[Any]:
        with _translate_errors():
            return self._scope.query_selector_all(to_selector(target))

    def click(self, element: Any) -> None:
        with _translate_errors():
            element.click()

    def type(self, element: Any, text: str, clear: bool = True) -> None:
        with _translate_errors():
            if clear:
                element.fill("")
            element.type(text)

    def submit(self, element: Any) -> None:
        with _translate_errors():
            element.press("Enter")

    def get_attribute(self, element: Any, name: str) -> Optional[str]:
        with _translate_errors():
            return element.get_attribute(name)

    def is_visible(self, element: Any) -> bool:
        with _translate_errors():
            return element.is_visible()

    def evaluate(self, script: str, *args: Any) -> Any:
        # Scripts are function bodies using `return` and `arguments`, as in WebDriver
        wrapped = "(args) => (function () { " + script + " }).apply(null, args)"
        with _translate_errors():
            return self._scope.evaluate(wrapped, list(args))

    def wait_for_page_settled(self, timeout: float) -> None:
        assert self._page is not None
        with _translate_errors():
            self._page.wait_for_load_state("networkidle", timeout=timeout * 1000)

    def switch_to_first_frame(self) -> bool:
        assert self._page is not None
        children = self._page.main_frame.child_frames
        if not children:
            return False
        self._frame = children[0]
        return True

    def switch_to_default_content(self) -> None:
        self._frame = None
