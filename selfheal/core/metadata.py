from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class ElementSnapshot:
    tag: str
    id: str = ""
    class_name: str = ""
    text: str = ""
    placeholder: str = ""
    name: str = ""
    type: str = ""
    role: str = ""
    aria_label: str = ""
    title: str = ""
    value: str = ""
    href: str = ""
    src: str = ""
    alt: str = ""
    handle: Any = field(default=None, compare=False, repr=False)

    @property
    def first_class(self) -> str:
        tokens = self.class_name.split()
        return tokens[0] if tokens else ""


@dataclass(frozen=True, slots=True)
class PageSnapshotCacheEntry:
    snapshots: tuple[ElementSnapshot, ...]
    timestamp: float


@dataclass(slots=True)
class MatchCandidate:
    snapshot: ElementSnapshot
    score: float


@dataclass(frozen=True, slots=True)
class ElementMatch:
    snapshot: ElementSnapshot
    score: float
    selector: str
    strategy: str
