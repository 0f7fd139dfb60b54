from __future__ import annotations

from selfheal.core.exceptions import InvalidSelectorError

MAX_SELECTOR_LENGTH = 1000
DENIED_PATTERNS = ("javascript:", "data:", "vbscript:", "<script", "eval(")
QUOTES = "\"'"


def infer_selector_type(selector: str) -> str:
    stripped = selector.strip()
    if stripped.startswith("/") or stripped.startswith("("):
        return "xpath"
    return "css"


def is_valid_selector(selector: object) -> bool:
    if not selector or not isinstance(selector, str) or len(selector) > MAX_SELECTOR_LENGTH:
        return False
    lowered = selector.lower()
    return not any(pattern in lowered for pattern in DENIED_PATTERNS)


def validate_selector(selector: object) -> str:
    if not is_valid_selector(selector):
        raise InvalidSelectorError("Invalid selector provided")
    return selector


def attribute_literal(selector: str, attribute: str) -> str | None:
    """Returns the quoted value of the first ``attribute="..."`` fragment.

    Either quote character opens or closes the value, and an empty value does
    not count as a match, so scanning moves on to the next occurrence.
    """

    marker = f"{attribute}="
    start = selector.find(marker)
    while start != -1:
        cursor = start + len(marker)
        if cursor < len(selector) and selector[cursor] in QUOTES:
            end = cursor + 1
            while end < len(selector) and selector[end] not in QUOTES:
                end += 1
            if end < len(selector) and end > cursor + 1:
                return selector[cursor + 1 : end]
        start = selector.find(marker, start + 1)
    return None


def xpath_literal(value: str) -> str:
    if '"' not in value:
        return f'"{value}"'
    if "'" not in value:
        return f"'{value}'"
    pieces = value.split('"')
    return "concat(" + ", '\"', ".join(f'"{piece}"' for piece in pieces) + ")"
