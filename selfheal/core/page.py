from __future__ import annotations

from time import monotonic, sleep
from typing import Any, Protocol

from selenium.common.exceptions import (
    InvalidSelectorException,
    NoSuchElementException,
    StaleElementReferenceException,
    TimeoutException,
)
from selenium.webdriver.common.by import By

from selfheal.core.selectors import infer_selector_type

POLL_INTERVAL_SECONDS = 0.1


class Locator(Protocol):
    selector: str

    def wait_for(self, timeout: int | None = None) -> None: ...

    def click(self) -> None: ...

    def fill(self, value: str) -> None: ...

    def text_content(self) -> str | None: ...


class AutomationPage(Protocol):
    """Host surface the healer drives: selector lookup plus read-only scripts."""

    def locator(self, selector: str, timeout: int | None = None) -> Locator: ...

    def evaluate(self, script: str, *args: Any) -> Any: ...


class SeleniumLocator:
    """Live handle that re-resolves its selector on every interaction."""

    def __init__(self, driver, selector: str, timeout: int = 5000) -> None:
        self.driver = driver
        self.selector = selector
        self.timeout = timeout
        self.by = By.XPATH if infer_selector_type(selector) == "xpath" else By.CSS_SELECTOR

    def wait_for(self, timeout: int | None = None) -> None:
        self.resolve(timeout)

    def resolve(self, timeout: int | None = None):
        duration = (timeout if timeout is not None else self.timeout) / 1000
        deadline = monotonic() + duration
        while True:
            try:
                matches = self.driver.find_elements(self.by, self.selector)
            except InvalidSelectorException as exc:
                raise NoSuchElementException(f"Invalid selector {self.selector!r}") from exc
            if matches:
                return matches[0]
            if monotonic() >= deadline:
                raise TimeoutException(f"Timed out waiting for {self.selector!r}")
            sleep(POLL_INTERVAL_SECONDS)

    def click(self) -> None:
        self._with_fresh_element(lambda element: element.click())

    def fill(self, value: str) -> None:
        def _fill(element) -> None:
            element.clear()
            element.send_keys(value)

        self._with_fresh_element(_fill)

    def text_content(self) -> str | None:
        return self._with_fresh_element(lambda element: element.get_attribute("textContent"))

    def _with_fresh_element(self, action):
        try:
            return action(self.resolve())
        except StaleElementReferenceException:
            return action(self.resolve())

    def __repr__(self) -> str:
        return f"SeleniumLocator({self.selector!r})"


class SeleniumPage:
    """Adapts a Selenium ``WebDriver`` to the ``AutomationPage`` protocol."""

    def __init__(self, driver) -> None:
        self.driver = driver

    def locator(self, selector: str, timeout: int | None = None) -> SeleniumLocator:
        if timeout is None:
            return SeleniumLocator(self.driver, selector)
        return SeleniumLocator(self.driver, selector, timeout=timeout)

    def evaluate(self, script: str, *args: Any) -> Any:
        return self.driver.execute_script(script, *args)


def as_page(target) -> AutomationPage:
    """Wraps a raw ``WebDriver`` so callers may pass either one."""

    if hasattr(target, "locator") and hasattr(target, "evaluate"):
        return target
    return SeleniumPage(target)


def page_identity(page) -> Any:
    """Object whose lifetime defines the page for snapshot caching."""

    return getattr(page, "driver", page)
