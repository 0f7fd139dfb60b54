from __future__ import annotations

import logging
import re

from selfheal.config.schema import HealingConfig
from selfheal.core.cache import SimilarityCache
from selfheal.core.metadata import ElementSnapshot
from selfheal.core.selectors import attribute_literal
from selfheal.utils.identifier import IdentifierBuilder

logger = logging.getLogger(__name__)

PREFIX_BONUS = 0.8
SUBSTRING_BONUS = 0.6

STRUCTURAL_TAG_WEIGHT = 0.3
STRUCTURAL_ID_WEIGHT = 0.4
STRUCTURAL_CLASS_WEIGHT = 0.3

TYPE_MATCH_BONUS = 0.4
CONTAINER_PENALTY = -0.3
CONTAINER_TAGS = frozenset({"html", "body", "div", "span", "a"})

NAME_EXACT_BONUS = 0.5
NAME_PARTIAL_MIN_SIMILARITY = 0.5
NAME_PARTIAL_SCALE = 0.3
PLACEHOLDER_EXACT_BONUS = 0.3
TYPE_EXACT_BONUS = 0.3

SEARCH_FIELD_NAMES = frozenset({"q", "search", "query"})
SEARCH_FIELD_BONUS = 0.3
SEARCH_BUTTON_NAMES = frozenset({"btnK", "btnG"})
SEARCH_BUTTON_BONUS = 0.4
LINK_TEXT_BONUSES = (("Gmail", "gmail", 0.4), ("Images", "images", 0.4))

COMPLEX_SEMANTIC_WEIGHT = 0.6
COMPLEX_STRUCTURAL_WEIGHT = 0.4

_TOKEN_SPLIT = re.compile(r"[-_\s]+")


def levenshtein_distance(left: str, right: str) -> int:
    previous = list(range(len(right) + 1))
    for i, left_char in enumerate(left, start=1):
        current = [i]
        for j, right_char in enumerate(right, start=1):
            cost = 0 if left_char == right_char else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def levenshtein_similarity(original: str, candidate: str) -> float:
    """Edit-distance similarity with a bonus when ``candidate`` contains ``original``.

    The bonus makes the score directional: ``("pass", "pass-input")`` scores
    higher than ``("pass-input", "pass")``.
    """

    if not original:
        return 1.0 if not candidate else 0.0
    if not candidate:
        return 0.0
    distance = levenshtein_distance(original, candidate)
    similarity = 1 - distance / max(len(original), len(candidate))
    if candidate.startswith(original):
        similarity += PREFIX_BONUS
    elif original in candidate:
        similarity += SUBSTRING_BONUS
    return min(similarity, 1.0)


def tokenize(value: str) -> list[str]:
    return _TOKEN_SPLIT.split(value.lower())


def semantic_similarity(selector: str, identifier: str) -> float:
    selector_tokens = tokenize(selector)
    identifier_tokens = tokenize(identifier)
    matches = 0
    for token in selector_tokens:
        if any(other in token or token in other for other in identifier_tokens):
            matches += 1
    return matches / len(selector_tokens) if selector_tokens else 0.0


def structural_similarity(selector: str, snapshot: ElementSnapshot) -> float:
    tag = snapshot.tag.lower()
    score = 0.0
    if tag and tag in selector:
        score += STRUCTURAL_TAG_WEIGHT
    if snapshot.id and snapshot.id in selector:
        score += STRUCTURAL_ID_WEIGHT
    if snapshot.class_name and snapshot.class_name in selector:
        score += STRUCTURAL_CLASS_WEIGHT
    return min(score, 1.0)


def type_bonus(selector: str, snapshot: ElementSnapshot) -> float:
    tag = snapshot.tag
    if "input" in selector and tag in ("input", "textarea"):
        return TYPE_MATCH_BONUS
    if "button" in selector and tag in ("button", "input"):
        return TYPE_MATCH_BONUS
    if "select" in selector and tag == "select":
        return TYPE_MATCH_BONUS
    if "textarea" in selector and tag == "textarea":
        return TYPE_MATCH_BONUS
    if ("input" in selector or "button" in selector) and tag in CONTAINER_TAGS:
        return CONTAINER_PENALTY
    return 0.0


def attribute_bonus(selector: str, snapshot: ElementSnapshot) -> float:
    bonus = 0.0
    if "name=" in selector and snapshot.name:
        expected_name = attribute_literal(selector, "name")
        if expected_name is not None:
            if expected_name == snapshot.name:
                bonus += NAME_EXACT_BONUS
            else:
                similarity = levenshtein_similarity(expected_name, snapshot.name)
                if similarity > NAME_PARTIAL_MIN_SIMILARITY:
                    bonus += similarity * NAME_PARTIAL_SCALE

    if "input" in selector and snapshot.name in SEARCH_FIELD_NAMES:
        bonus += SEARCH_FIELD_BONUS
    if "button" in selector and (snapshot.name in SEARCH_BUTTON_NAMES or snapshot.type == "submit"):
        bonus += SEARCH_BUTTON_BONUS
    for marker, text, value in LINK_TEXT_BONUSES:
        if marker in selector and text in snapshot.text.lower():
            bonus += value

    if "placeholder=" in selector and snapshot.placeholder:
        if attribute_literal(selector, "placeholder") == snapshot.placeholder:
            bonus += PLACEHOLDER_EXACT_BONUS
    if "type=" in selector and snapshot.type:
        if attribute_literal(selector, "type") == snapshot.type:
            bonus += TYPE_EXACT_BONUS
    return bonus


def clamp(score: float) -> float:
    return max(0.0, min(score, 1.0))


class SimilarityEngine:
    """Scores snapshots against an original selector."""

    def __init__(
        self,
        config: HealingConfig,
        identifiers: IdentifierBuilder | None = None,
        cache: SimilarityCache | None = None,
    ) -> None:
        self.config = config
        self.identifiers = identifiers or IdentifierBuilder(debug=config.debug)
        self.cache = cache if cache is not None else SimilarityCache()

    def identifier(self, snapshot: ElementSnapshot, debug: bool | None = None) -> str:
        return self.identifiers.build(snapshot, debug)

    def composite_score(self, selector: str, snapshot: ElementSnapshot, debug: bool | None = None) -> float:
        """Weighted similarity of ``snapshot`` to ``selector``, memoized per identifier.

        ``debug`` overrides ``config.debug`` for this call.
        """

        if debug is None:
            debug = self.config.debug
        identifier = self.identifier(snapshot, debug)
        cached = self.cache.get(selector, identifier)
        if cached is not None:
            return cached
        score = self._compute_composite(selector, identifier, snapshot, debug)
        self.cache.set(selector, identifier, score)
        return score

    def lexical_score(self, selector: str, snapshot: ElementSnapshot, debug: bool | None = None) -> float:
        return levenshtein_similarity(selector, self.identifier(snapshot, debug))

    def complex_score(self, selector: str, snapshot: ElementSnapshot, debug: bool | None = None) -> float:
        semantic = semantic_similarity(selector, self.identifier(snapshot, debug))
        structural = structural_similarity(selector, snapshot)
        return semantic * COMPLEX_SEMANTIC_WEIGHT + structural * COMPLEX_STRUCTURAL_WEIGHT

    def _compute_composite(
        self, selector: str, identifier: str, snapshot: ElementSnapshot, debug: bool = False
    ) -> float:
        lexical = levenshtein_similarity(selector, identifier)
        semantic = semantic_similarity(selector, identifier)
        structural = structural_similarity(selector, snapshot)
        type_score = type_bonus(selector, snapshot)
        attribute_score = attribute_bonus(selector, snapshot)
        total = (
            lexical * self.config.levenshtein_weight
            + semantic * self.config.semantic_weight
            + structural * self.config.structural_weight
            + type_score
            + attribute_score
        )
        if debug:
            logger.debug(
                "Scored %r: L=%.3f S=%.3f St=%.3f type=%.3f attr=%.3f total=%.3f",
                identifier,
                lexical,
                semantic,
                structural,
                type_score,
                attribute_score,
                total,
            )
        return clamp(total)
