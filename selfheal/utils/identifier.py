from __future__ import annotations

import logging

from selfheal.core.metadata import ElementSnapshot

logger = logging.getLogger(__name__)

DEBUG_DETAIL_LIMIT = 3


class IdentifierBuilder:
    """Derives the canonical fingerprint used to compare a snapshot with a selector."""

    def __init__(self, debug: bool = False) -> None:
        self.debug = debug
        self._calls = 0

    def build(self, snapshot: ElementSnapshot, debug: bool | None = None) -> str:
        if debug is None:
            debug = self.debug
        show_detail = debug and self._calls < DEBUG_DETAIL_LIMIT
        self._calls += 1

        tag = (snapshot.tag or "div").lower()
        parts: list[str] = []
        if snapshot.id:
            parts.append(f"id:{snapshot.id}")
        if snapshot.class_name:
            parts.append(f"class:{snapshot.class_name.split(' ')[0]}")
        if snapshot.name:
            parts.append(f"name:{snapshot.name}")
        if snapshot.type:
            parts.append(f"type:{snapshot.type}")
        if snapshot.placeholder:
            parts.append(f"placeholder:{snapshot.placeholder}")
        if snapshot.role:
            parts.append(f"role:{snapshot.role}")
        if snapshot.aria_label:
            parts.append(f"aria:{snapshot.aria_label}")
        text = snapshot.text.strip()[:50]
        if text:
            parts.append(f"text:{text}")

        identifier = f"{tag}[{','.join(parts)}]" if parts else tag
        if show_detail:
            logger.debug(
                "Identifier for tag=%s id=%s name=%s type=%s placeholder=%s: %s",
                tag,
                snapshot.id,
                snapshot.name,
                snapshot.type,
                snapshot.placeholder,
                identifier,
            )
        return identifier
