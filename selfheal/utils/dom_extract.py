from __future__ import annotations

from typing import Any, Iterable

from selenium.webdriver.remote.webelement import WebElement

from selfheal.core.metadata import ElementSnapshot

PROJECT_ELEMENT_JS = r"""
const project = (el, keepHandle) => ({
  tagName: el.tagName ? el.tagName.toLowerCase() : "div",
  id: el.id || "",
  className: el.getAttribute("class") || "",
  textContent: (el.textContent || "").trim().substring(0, 50),
  placeholder: el.getAttribute("placeholder") || "",
  name: el.getAttribute("name") || "",
  type: el.getAttribute("type") || "",
  role: el.getAttribute("role") || "",
  ariaLabel: el.getAttribute("aria-label") || "",
  title: el.getAttribute("title") || "",
  value: typeof el.value === "string" ? el.value : "",
  href: el.getAttribute("href") || "",
  src: el.getAttribute("src") || "",
  alt: el.getAttribute("alt") || "",
  element: keepHandle ? el : null,
});
"""

COLLECT_SNAPSHOTS_SCRIPT = PROJECT_ELEMENT_JS + r"""
return Array.from(document.querySelectorAll("*"))
  .filter((el) => {
    const rect = el.getBoundingClientRect();
    return rect.width > 0 && rect.height > 0;
  })
  .map((el) => project(el, true));
"""

COLLECT_CONTEXT_SCRIPT = PROJECT_ELEMENT_JS + r"""
const prefix = arguments[0].toLowerCase();
const limit = arguments[1];
return Array.from(document.querySelectorAll("*"))
  .filter((el) => {
    const text = el.textContent || el.getAttribute("placeholder") || el.id || el.getAttribute("class");
    return Boolean(text) && text.toLowerCase().includes(prefix);
  })
  .slice(0, limit)
  .map((el) => project(el, false));
"""

_FIELDS = {
    "id": "id",
    "className": "class_name",
    "placeholder": "placeholder",
    "name": "name",
    "type": "type",
    "role": "role",
    "ariaLabel": "aria_label",
    "title": "title",
    "value": "value",
    "href": "href",
    "src": "src",
    "alt": "alt",
}


def snapshot_from_payload(item: dict[str, Any]) -> ElementSnapshot:
    values = {field: _text(item.get(key)) for key, field in _FIELDS.items()}
    return ElementSnapshot(
        tag=_text(item.get("tagName")).lower() or "div",
        text=_text(item.get("textContent")).strip()[:50],
        handle=_reference(item.get("element")),
        **values,
    )


def snapshots_from_payload(raw_items: Iterable[dict[str, Any]] | None) -> tuple[ElementSnapshot, ...]:
    return tuple(snapshot_from_payload(item) for item in raw_items or [])


def _reference(element: Any) -> Any:
    # A WebElement holds its driver; keep only the remote reference id.
    if isinstance(element, WebElement):
        return element.id
    return element


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
