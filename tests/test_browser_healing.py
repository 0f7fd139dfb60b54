from __future__ import annotations

import pytest

from selfheal.core.actions import SafeActions
from selfheal.core.healer import SelfHealingLocator
from tests.helpers import managed_driver

LOGIN_HTML = """
<html>
  <body>
    <form>
      <input id="email" name="email" type="email" placeholder="Email">
      <input id="password" name="password" type="password" placeholder="Password">
      <button id="login-button" class="btn btn-primary" type="submit" onclick="return false;">Log in</button>
    </form>
    <a href="#help">Need help?</a>
  </body>
</html>
"""


@pytest.mark.integration
def test_dynamic_id_recovery(tmp_path):
    page_path = tmp_path / "login.html"
    page_path.write_text(LOGIN_HTML, encoding="utf-8")

    with managed_driver() as driver:
        driver.get(page_path.as_uri())
        driver.execute_script("document.querySelector('#login-button').id = 'login-button-v2';")

        healer = SelfHealingLocator({"findTimeout": 2000})
        locator = healer.find_element_universal(driver, "button#login-button")
        assert locator is not None
        assert locator.selector == "#login-button-v2"
        assert locator.text_content().strip() == "Log in"


@pytest.mark.integration
def test_link_text_selector_round_trip(tmp_path):
    page_path = tmp_path / "login.html"
    page_path.write_text(LOGIN_HTML, encoding="utf-8")

    with managed_driver() as driver:
        driver.get(page_path.as_uri())
        healer = SelfHealingLocator()
        match = healer.heal(driver, "a[text:Need help?]")
        assert match.selector == '//a[normalize-space(.)="Need help?"]'
        SafeActions(driver, healer).click(match.selector)
