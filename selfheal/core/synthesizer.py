from __future__ import annotations

import logging

from selfheal.core.metadata import ElementSnapshot
from selfheal.core.selectors import xpath_literal

logger = logging.getLogger(__name__)

FALLBACK_TAG = "div"
MAX_LINK_TEXT_LENGTH = 50


class SelectorSynthesizer:
    """Turns a winning snapshot into a fresh selector string."""

    def synthesize(self, snapshot: ElementSnapshot) -> str:
        try:
            return self._synthesize(snapshot)
        except (AttributeError, TypeError, ValueError) as exc:
            logger.warning("Selector synthesis failed, using %r: %s", FALLBACK_TAG, exc)
            return FALLBACK_TAG

    def _synthesize(self, snapshot: ElementSnapshot) -> str:
        if snapshot.id:
            return _id_selector(snapshot.id)

        if snapshot.tag == "a" and snapshot.text:
            text = " ".join(snapshot.text.split())
            if 0 < len(text) < MAX_LINK_TEXT_LENGTH:
                return f"//a[normalize-space(.)={xpath_literal(text)}]"

        if snapshot.name:
            return f'[name="{_escape(snapshot.name)}"]'
        if snapshot.type and snapshot.tag == "input":
            return f'input[type="{_escape(snapshot.type)}"]'
        if snapshot.placeholder:
            return f'[placeholder="{_escape(snapshot.placeholder)}"]'
        if snapshot.role:
            return f'[role="{_escape(snapshot.role)}"]'
        if snapshot.first_class:
            if _is_plain_identifier(snapshot.first_class):
                return f"{snapshot.tag}.{snapshot.first_class}"
            return f'{snapshot.tag}[class~="{_escape(snapshot.first_class)}"]'
        return snapshot.tag or FALLBACK_TAG


def _id_selector(element_id: str) -> str:
    if _is_plain_identifier(element_id):
        return f"#{element_id}"
    return f'[id="{_escape(element_id)}"]'


def _is_plain_identifier(value: str) -> bool:
    if not value or value[0].isdigit() or value.startswith("--"):
        return False
    if value[0] == "-" and len(value) > 1 and value[1].isdigit():
        return False
    return all(char.isalnum() or char in "-_" for char in value)


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')
