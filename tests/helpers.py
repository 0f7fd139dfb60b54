from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

import pytest
from selenium import webdriver
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver import ChromeOptions

from selfheal.core.selectors import attribute_literal
from selfheal.utils.dom_extract import COLLECT_CONTEXT_SCRIPT, COLLECT_SNAPSHOTS_SCRIPT

ATTRIBUTE_KEYS = {
    "id": "id",
    "class": "className",
    "name": "name",
    "type": "type",
    "placeholder": "placeholder",
    "role": "role",
    "aria-label": "ariaLabel",
    "title": "title",
}


def element(tag: str, text: str = "", visible: bool = True, **attributes: str) -> dict[str, Any]:
    """Builds an extraction payload item the way the browser-side script would."""

    payload: dict[str, Any] = {
        "tagName": tag,
        "id": "",
        "className": "",
        "textContent": text,
        "placeholder": "",
        "name": "",
        "type": "",
        "role": "",
        "ariaLabel": "",
        "title": "",
        "value": "",
        "href": "",
        "src": "",
        "alt": "",
        "visible": visible,
    }
    for key, value in attributes.items():
        payload[_payload_key(key)] = value
    return payload


class FakeClock:
    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeLocator:
    def __init__(self, page: FakePage, selector: str, timeout: int | None = None) -> None:
        self.page = page
        self.selector = selector
        self.timeout = timeout
        self.filled: list[str] = []
        self.clicks = 0

    def wait_for(self, timeout: int | None = None) -> None:
        self.page.waits.append((self.selector, timeout))
        if not self.page.query(self.selector):
            raise TimeoutException(f"Timed out waiting for {self.selector!r}")

    def click(self) -> None:
        self.wait_for()
        self.clicks += 1
        self.page.clicked.append(self.page.query(self.selector)[0])

    def fill(self, value: str) -> None:
        self.wait_for()
        self.page.query(self.selector)[0]["value"] = value

    def text_content(self) -> str | None:
        self.wait_for()
        return self.page.query(self.selector)[0]["textContent"]


class FakePage:
    """In-memory stand-in for the automation page with call counters."""

    def __init__(self, elements: list[dict[str, Any]], fail_extraction: bool = False) -> None:
        self.elements = elements
        self.fail_extraction = fail_extraction
        self.extract_calls = 0
        self.context_calls = 0
        self.waits: list[tuple[str, int | None]] = []
        self.clicked: list[dict[str, Any]] = []

    def locator(self, selector: str, timeout: int | None = None) -> FakeLocator:
        return FakeLocator(self, selector, timeout)

    def evaluate(self, script: str, *args: Any) -> Any:
        if self.fail_extraction:
            raise WebDriverException("javascript error: document is not defined")
        if script == COLLECT_SNAPSHOTS_SCRIPT:
            self.extract_calls += 1
            return [dict(item, element=item) for item in self.elements if item["visible"]]
        if script == COLLECT_CONTEXT_SCRIPT:
            self.context_calls += 1
            prefix, limit = args
            matched = []
            for item in self.elements:
                text = item["textContent"] or item["placeholder"] or item["id"] or item["className"]
                if text and prefix.lower() in text.lower():
                    matched.append(dict(item, element=None))
            return matched[:limit]
        raise AssertionError("unexpected script")

    def query(self, selector: str) -> list[dict[str, Any]]:
        return [item for item in self.elements if matches(item, selector)]


def matches(item: dict[str, Any], selector: str) -> bool:
    """Understands the selector shapes the synthesizer emits plus ``#id``."""

    if selector.startswith("#"):
        return item["id"] == selector[1:]
    if selector.startswith("//a[normalize-space(.)="):
        literal = selector[len("//a[normalize-space(.)=") : -1]
        return item["tagName"] == "a" and " ".join(item["textContent"].split()) == literal[1:-1]
    if "[" in selector:
        tag, _, rest = selector.partition("[")
        if tag and item["tagName"] != tag:
            return False
        attribute = rest.split("=", 1)[0]
        if attribute == "class~":
            return attribute_literal(rest, "class~") in item["className"].split()
        if attribute not in ATTRIBUTE_KEYS:
            return False
        expected = attribute_literal(rest, attribute)
        return expected is not None and item[ATTRIBUTE_KEYS[attribute]] == expected
    if "." in selector:
        tag, _, class_name = selector.partition(".")
        return item["tagName"] == tag and class_name in item["className"].split()
    return item["tagName"] == selector


@contextmanager
def managed_driver(headless: bool = True) -> Iterator[Any]:
    options = ChromeOptions()
    if headless:
        options.add_argument("--headless=new")
    options.add_argument("--window-size=1280,900")
    try:
        driver = webdriver.Chrome(options=options)
    except WebDriverException as exc:
        pytest.skip(f"WebDriver could not start for chrome: {exc}")
    driver.implicitly_wait(0)
    try:
        yield driver
    finally:
        driver.quit()


def _payload_key(key: str) -> str:
    aliases = {"class_name": "className", "aria_label": "ariaLabel", "element_id": "id"}
    return aliases.get(key, key)
