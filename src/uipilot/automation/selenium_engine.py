from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

try:
    from selenium import webdriver
    from selenium.common.exceptions import (
        NoSuchElementException,
        NoSuchFrameException,
        StaleElementReferenceException,
        TimeoutException,
    )
    from selenium.webdriver.common.by import By
    from selenium.webdriver.common.keys import Keys
    from selenium.webdriver.chrome.options import Options as ChromeOptions
    from selenium.webdriver.support.ui import WebDriverWait
    SELENIUM_AVAILABLE = True
except Exception:  # pragma: no cover - optional dependency
    SELENIUM_AVAILABLE = False

from .errors import ElementNotFoundError, StaleElementError, WaitTimeoutError
from .locators import Target, as_locator

if SELENIUM_AVAILABLE:
    _BY: Dict[str, str] = {"css": By.CSS_SELECTOR, "xpath": By.XPATH, "id": By.ID}


@contextmanager
def _translate_errors(target: Optional[Target] = None) -> Iterator[None]:
    try:
        yield
    except NoSuchElementException as e:
        raise ElementNotFoundError(target, e.msg or None) from e
    except StaleElementReferenceException as e:
        raise StaleElementError(e.msg or "stale element reference") from e
    except TimeoutException as e:
        raise WaitTimeoutError(e.msg or "selenium wait timed out") from e


class SeleniumEngine:
    def __init__(self, driver: Optional[Any] = None):
        if not SELENIUM_AVAILABLE:
            raise RuntimeError("Selenium is not installed. Install with: pip install uipilot[automation-selenium]")
        self._driver = driver

    @property
    def driver(self):
        assert self._driver is not None
        return self._driver

    def start(self, headless: bool = True, user_data_dir: Optional[str] = None) -> None:
        options = ChromeOptions()
        if headless:
            options.add_argument("--headless=new")
        if user_data_dir:
            options.add_argument(f"--user-data-dir={user_data_dir}")
        self._driver = webdriver.Chrome(options=options)

    def stop(self) -> None:
        if self._driver:
            self._driver.quit()
            self._driver = None

    def goto(self, url: str) -> None:
        self.driver.get(url)

    def current_url(self) -> str:
        return self.driver.current_url

    def find(self, target: Target) -> Optional[Any]:
        elements = self.find_all(target)
        return elements[0] if elements else None

    def find_all(self, target: Target) -> List[Any]:
        locator = as_locator(target)
        with _translate_errors(target):
            return self.driver.find_elements(_BY[locator.strategy], locator.value)

    def click(self, element: Any) -> None:
        with _translate_errors():
            element.click()

    def type(self, element: Any, text: str, clear: bool = True) -> None:
        with _translate_errors():
            if clear:
                element.clear()
            element.send_keys(text)

    def submit(self, element: Any) -> None:
        with _translate_errors():
            element.send_keys(Keys.ENTER)

    def get_attribute(self, element: Any, name: str) -> Optional[str]:
        with _translate_errors():
            return element.get_attribute(name)

    def is_visible(self, element: Any) -> bool:
        with _translate_errors():
            return element.is_displayed()

    def evaluate(self, script: str, *args: Any) -> Any:
        with _translate_errors():
            return self.driver.execute_script(script, *args)

    def wait_for_page_settled(self, timeout: float) -> None:
        with _translate_errors():
            WebDriverWait(self.driver, timeout).until(
                lambda d: d.execute_script("return document.readyState") == "complete",
                message="page did not finish loading",
            )

    def switch_to_first_frame(self) -> bool:
        if not self.driver.find_elements(By.TAG_NAME, "iframe"):
            return False
        try:
            self.driver.switch_to.frame(0)
        except NoSuchFrameException:
            return False
        return True

    def switch_to_default_content(self) -> None:
        self.driver.switch_to.default_content()
