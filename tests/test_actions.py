from __future__ import annotations

import pytest

from selfheal.core.actions import SafeActions
from selfheal.core.exceptions import HealingError
from selfheal.core.healer import SelfHealingLocator
from tests.helpers import FakeClock, FakePage, element


def test_click_uses_original_selector_when_present(healer, login_page):
    SafeActions(login_page, healer).click("#login-button")
    assert login_page.clicked[0]["id"] == "login-button"
    assert login_page.extract_calls == 0


def test_fill_heals_broken_selector(healer, login_page):
    SafeActions(login_page, healer).fill('input[name="usrname"]', "ada")
    assert login_page.query("#user")[0]["value"] == "ada"


def test_text_reads_healed_element(healer):
    page = FakePage([element("a", text="  Forgot password? ", href="/reset")])
    assert SafeActions(page, healer, strategies=("simple",)).text("a[text:Forgot password]") == "Forgot password?"


def test_unresolvable_selector_raises_healing_error():
    healer = SelfHealingLocator({"minSimilarityThreshold": 0.95}, clock=FakeClock())
    page = FakePage([element("div", text="Welcome")])
    with pytest.raises(HealingError, match="No element matched"):
        SafeActions(page, healer).click("input#email")
