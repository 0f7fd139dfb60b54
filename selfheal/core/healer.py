from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterable

from selenium.common.exceptions import WebDriverException

from selfheal.config.schema import DEFAULT_CONFIG, FindOptions, HealingConfig, merge_config, validate_config
from selfheal.core.cache import SimilarityCache
from selfheal.core.exceptions import HealingError
from selfheal.core.metadata import ElementMatch, ElementSnapshot, MatchCandidate
from selfheal.core.page import AutomationPage, Locator, as_page
from selfheal.core.selectors import validate_selector
from selfheal.core.snapshots import SnapshotProvider
from selfheal.core.synthesizer import SelectorSynthesizer
from selfheal.utils.identifier import IdentifierBuilder
from selfheal.utils.scoring import SimilarityEngine, levenshtein_similarity

logger = logging.getLogger(__name__)

FAST_PATH_TIMEOUT_MS = 1000

PATTERN_CONTEXT_BONUS = 0.2
PATTERN_WEIGHT = 0.7
CONTEXT_WEIGHT = 0.3
CONTEXT_NEUTRAL_SCORE = 0.5
CONTEXT_TAG_BONUS = 0.2
CONTEXT_CLASS_BONUS = 0.1

STRATEGIES = ("universal", "simple", "complex", "advanced")


class SelfHealingLocator:
    """Resolves a failing selector to the most similar element on the page.

    Every find operation first tries the original selector. Only when it does
    not resolve within ``FAST_PATH_TIMEOUT_MS`` are the page's visible elements
    snapshotted and scored. The winner is turned into a new selector and
    returned as a live locator; ``None`` means nothing cleared
    ``min_similarity_threshold``.
    """

    def __init__(
        self,
        config: HealingConfig | dict[str, Any] | None = None,
        *,
        clock: Callable[[], float] | None = None,
    ) -> None:
        if isinstance(config, HealingConfig):
            self.config = validate_config(config)
        else:
            self.config = merge_config(DEFAULT_CONFIG, config)
        self.similarity_cache = SimilarityCache()
        self.identifiers = IdentifierBuilder(debug=self.config.debug)
        self.engine = SimilarityEngine(self.config, self.identifiers, self.similarity_cache)
        self.snapshots = SnapshotProvider(self.config.dom_cache_ttl, clock=clock or time.monotonic)
        self.synthesizer = SelectorSynthesizer()

    def find_element_universal(self, page, original_selector: str, options: FindOptions | dict | None = None):
        return self._find(page, original_selector, "universal", options)

    def find_element_simple(self, page, original_selector: str, options: FindOptions | dict | None = None):
        return self._find(page, original_selector, "simple", options)

    def find_element_complex(self, page, original_selector: str, options: FindOptions | dict | None = None):
        return self._find(page, original_selector, "complex", options)

    def find_element_advanced(self, page, original_selector: str, options: FindOptions | dict | None = None):
        return self._find(page, original_selector, "advanced", options)

    def find_element(
        self,
        page,
        original_selector: str,
        strategies: Iterable[str] = STRATEGIES,
        options: FindOptions | dict | None = None,
    ):
        """Tries each strategy in order and returns the first locator found."""

        validate_selector(original_selector)
        page = as_page(page)
        options = _options(options)
        strategies = [_strategy(name) for name in strategies]
        original = self._try_original(page, original_selector, options)
        if original is not None:
            return original
        for strategy in strategies:
            match = self._heal(page, original_selector, strategy, options)
            if match is not None:
                return self._bind(page, match, options)
        return None

    def heal(
        self,
        page,
        original_selector: str,
        strategy: str = "universal",
        options: FindOptions | dict | None = None,
    ) -> ElementMatch | None:
        """Scores the page without trying the original selector first."""

        validate_selector(original_selector)
        return self._heal(as_page(page), original_selector, _strategy(strategy), _options(options))

    def update_config(self, partial: dict[str, Any]) -> HealingConfig:
        config = merge_config(self.config, partial)
        self.config = config
        self.engine.config = config
        self.identifiers.debug = config.debug
        self.snapshots.ttl = config.dom_cache_ttl
        return config

    def clear_cache(self) -> None:
        self.similarity_cache.clear()

    def dispose(self, page) -> None:
        """Drops the snapshot cache entry for ``page`` ahead of its TTL."""

        self.snapshots.dispose(as_page(page))

    def _find(self, page, original_selector: str, strategy: str, options):
        validate_selector(original_selector)
        page = as_page(page)
        options = _options(options)
        original = self._try_original(page, original_selector, options)
        if original is not None:
            return original
        match = self._heal(page, original_selector, strategy, options)
        if match is None:
            return None
        return self._bind(page, match, options)

    def _try_original(self, page: AutomationPage, original_selector: str, options: FindOptions) -> Locator | None:
        locator = page.locator(original_selector, timeout=self._locator_timeout(options))
        try:
            locator.wait_for(FAST_PATH_TIMEOUT_MS)
        except WebDriverException:
            return None
        return locator

    def _heal(self, page: AutomationPage, original_selector: str, strategy: str, options: FindOptions):
        debug = self.config.debug if options.debug is None else options.debug
        snapshots = self.snapshots.list(page)
        if debug:
            logger.debug("Found %d elements on page for analysis", len(snapshots))
        scope = snapshots[: self.config.max_elements_to_analyze]

        if strategy == "universal":
            candidate = self._best(
                scope, lambda snapshot: self.engine.composite_score(original_selector, snapshot, debug), debug
            )
        elif strategy == "simple":
            candidate = self._first(
                scope, lambda snapshot: self.engine.lexical_score(original_selector, snapshot, debug)
            )
        elif strategy == "complex":
            candidate = self._ranked(
                scope, lambda snapshot: self.engine.complex_score(original_selector, snapshot, debug)
            )
        elif strategy == "advanced":
            context = self.snapshots.contextual(page, original_selector, self.config.context_prefix_length)
            candidate = self._best(
                scope, lambda snapshot: self._advanced_score(original_selector, snapshot, context, debug), debug
            )
        else:
            raise HealingError(f"Unknown strategy: {strategy}")

        if candidate is None:
            logger.info(
                "No element cleared threshold %.3f for %r (%s)",
                self.config.min_similarity_threshold,
                original_selector,
                strategy,
            )
            return None
        selector = self.synthesizer.synthesize(candidate.snapshot)
        logger.info(
            "Healed %r -> %r with %s strategy (score: %.3f)",
            original_selector,
            selector,
            strategy,
            candidate.score,
        )
        return ElementMatch(snapshot=candidate.snapshot, score=candidate.score, selector=selector, strategy=strategy)

    def _bind(self, page: AutomationPage, match: ElementMatch, options: FindOptions) -> Locator:
        return page.locator(match.selector, timeout=self._locator_timeout(options))

    def _locator_timeout(self, options: FindOptions) -> int:
        return options.timeout if options.timeout is not None else self.config.find_timeout

    def _best(self, scope, score_of, debug: bool = False) -> MatchCandidate | None:
        best: MatchCandidate | None = None
        best_score = 0.0
        for index, snapshot in enumerate(scope):
            score = score_of(snapshot)
            if debug and index < 5:
                logger.debug("Element %d %r scored %.3f", index + 1, self.engine.identifier(snapshot, debug), score)
            if score > best_score and score >= self.config.min_similarity_threshold:
                best_score = score
                best = MatchCandidate(snapshot=snapshot, score=score)
        return best

    def _first(self, scope, score_of) -> MatchCandidate | None:
        for snapshot in scope:
            score = score_of(snapshot)
            if score >= self.config.min_similarity_threshold:
                return MatchCandidate(snapshot=snapshot, score=score)
        return None

    def _ranked(self, scope, score_of) -> MatchCandidate | None:
        candidates = []
        for snapshot in scope:
            score = score_of(snapshot)
            if score >= self.config.min_similarity_threshold:
                candidates.append(MatchCandidate(snapshot=snapshot, score=score))
        candidates.sort(key=lambda item: item.score, reverse=True)
        return candidates[0] if candidates else None

    def _advanced_score(
        self,
        original_selector: str,
        snapshot: ElementSnapshot,
        context: tuple[ElementSnapshot, ...],
        debug: bool = False,
    ) -> float:
        lexical = levenshtein_similarity(original_selector, self.engine.identifier(snapshot, debug))
        pattern = min(lexical + (PATTERN_CONTEXT_BONUS if context else 0.0), 1.0)
        return pattern * PATTERN_WEIGHT + contextual_relevance(snapshot, context) * CONTEXT_WEIGHT


def contextual_relevance(snapshot: ElementSnapshot, context: tuple[ElementSnapshot, ...]) -> float:
    if not context:
        return CONTEXT_NEUTRAL_SCORE
    relevance = 0.0
    for other in context:
        if snapshot.tag == other.tag:
            relevance += CONTEXT_TAG_BONUS
        if snapshot.class_name and other.class_name and snapshot.class_name == other.class_name:
            relevance += CONTEXT_CLASS_BONUS
    return min(relevance, 1.0)


def create_self_healing(config: HealingConfig | dict[str, Any] | None = None) -> SelfHealingLocator:
    return SelfHealingLocator(config)


def _options(options: FindOptions | dict | None) -> FindOptions:
    if options is None:
        return FindOptions()
    if isinstance(options, FindOptions):
        return options
    return FindOptions.model_validate(options)


def _strategy(name: str) -> str:
    normalized = name.lower()
    if normalized not in STRATEGIES:
        raise HealingError(f"Unknown strategy: {name}")
    return normalized
