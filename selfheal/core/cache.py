from __future__ import annotations


class SimilarityCache:
    """Memoizes composite scores by ``(original_selector, identifier)``.

    Entries live until ``clear()``; the number of identifiers seen per scan is
    bounded by ``max_elements_to_analyze``.
    """

    def __init__(self) -> None:
        self._scores: dict[tuple[str, str], float] = {}

    def get(self, selector: str, identifier: str) -> float | None:
        return self._scores.get((selector, identifier))

    def set(self, selector: str, identifier: str, score: float) -> None:
        self._scores[(selector, identifier)] = score

    def clear(self) -> None:
        self._scores.clear()

    def __contains__(self, key: tuple[str, str]) -> bool:
        return key in self._scores

    def __len__(self) -> int:
        return len(self._scores)
