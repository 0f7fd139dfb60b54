from __future__ import annotations

import pytest

from selfheal.core.healer import SelfHealingLocator
from tests.helpers import FakeClock, FakePage, element


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def healer(clock):
    return SelfHealingLocator(clock=clock)


@pytest.fixture()
def login_page():
    return FakePage(
        [
            element("html", text="Sign in Username Password Log in"),
            element("body", text="Sign in Username Password Log in"),
            element("h1", text="Sign in", class_name="title"),
            element("input", id="user", name="username", type="text", placeholder="Username"),
            element("input", name="password", type="password", placeholder="Enter your password here"),
            element("button", id="login-button", type="submit", text="Log in", class_name="btn btn-primary"),
            element("a", text="Forgot password?", href="/reset"),
            element("div", text="hidden banner", visible=False),
        ]
    )
