from __future__ import annotations

from typing import Iterable

from selenium.common.exceptions import (
    ElementNotInteractableException,
    StaleElementReferenceException,
)

from selfheal.core.exceptions import HealingError
from selfheal.core.healer import STRATEGIES, SelfHealingLocator
from selfheal.core.page import as_page


class SafeActions:
    """Browser actions whose selectors are healed before use."""

    def __init__(self, page, healer: SelfHealingLocator, strategies: Iterable[str] = STRATEGIES) -> None:
        self.page = as_page(page)
        self.healer = healer
        self.strategies = tuple(strategies)

    def locate(self, selector: str):
        locator = self.healer.find_element(self.page, selector, strategies=self.strategies)
        if locator is None:
            raise HealingError(f"No element matched {selector!r}")
        return locator

    def click(self, selector: str) -> None:
        locator = self.locate(selector)
        try:
            locator.click()
        except (ElementNotInteractableException, StaleElementReferenceException):
            self.healer.dispose(self.page)
            self.locate(selector).click()

    def fill(self, selector: str, value: str) -> None:
        locator = self.locate(selector)
        try:
            locator.fill(value)
        except (ElementNotInteractableException, StaleElementReferenceException):
            self.healer.dispose(self.page)
            self.locate(selector).fill(value)

    def text(self, selector: str) -> str:
        return (self.locate(selector).text_content() or "").strip()
