from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from selfheal.core.exceptions import ConfigurationError


class HealingConfig(BaseModel):
    """Tunable parameters for element resolution.

    Constructing the model directly raises pydantic's ``ValidationError`` on
    bad values. ``validate_config``, ``merge_config``, ``ConfigLoader`` and
    ``SelfHealingLocator`` translate that into ``ConfigurationError``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    min_similarity_threshold: float = Field(default=0.1, alias="minSimilarityThreshold")
    levenshtein_weight: float = Field(default=0.7, alias="levenshteinWeight")
    semantic_weight: float = Field(default=0.2, alias="semanticWeight")
    structural_weight: float = Field(default=0.1, alias="structuralWeight")
    dom_cache_ttl: int = Field(default=30000, alias="domCacheTTL")
    max_elements_to_analyze: int = Field(default=50, alias="maxElementsToAnalyze")
    find_timeout: int = Field(default=5000, alias="findTimeout")
    debug: bool = False
    context_prefix_length: int = Field(default=3, alias="contextPrefixLength")

    @field_validator("min_similarity_threshold")
    @classmethod
    def validate_threshold(cls, value: float) -> float:
        if not 0 <= value <= 1:
            raise ValueError("minSimilarityThreshold must be between 0 and 1")
        return value

    @field_validator("max_elements_to_analyze")
    @classmethod
    def validate_max_elements(cls, value: int) -> int:
        if not 1 <= value <= 1000:
            raise ValueError("maxElementsToAnalyze must be between 1 and 1000")
        return value

    @field_validator("find_timeout")
    @classmethod
    def validate_find_timeout(cls, value: int) -> int:
        if not 100 <= value <= 60000:
            raise ValueError("findTimeout must be between 100ms and 60000ms")
        return value

    @field_validator("context_prefix_length")
    @classmethod
    def validate_prefix_length(cls, value: int) -> int:
        if value < 1:
            raise ValueError("contextPrefixLength must be at least 1")
        return value


class FindOptions(BaseModel):
    """Per-call options accepted by the find operations."""

    model_config = ConfigDict(extra="forbid")

    timeout: int | None = None
    debug: bool | None = None


DEFAULT_CONFIG = HealingConfig()


def validate_config(payload: HealingConfig | dict[str, Any]) -> HealingConfig:
    """Returns a validated configuration or raises ``ConfigurationError``."""

    if isinstance(payload, HealingConfig):
        payload = payload.model_dump()
    try:
        return HealingConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigurationError(_describe(exc)) from exc


def merge_config(defaults: HealingConfig, partial: dict[str, Any] | None = None) -> HealingConfig:
    """Overlays ``partial`` on ``defaults`` and revalidates the result.

    Keys may use either the snake_case field names or the camelCase aliases.
    """

    merged = defaults.model_dump()
    for key, value in (partial or {}).items():
        merged[_field_name(key)] = value
    return validate_config(merged)


def _field_name(key: str) -> str:
    if key in HealingConfig.model_fields:
        return key
    for name, field in HealingConfig.model_fields.items():
        if field.alias == key:
            return name
    raise ConfigurationError(f"Unknown configuration option: {key}")


def _describe(exc: ValidationError) -> str:
    messages = []
    for error in exc.errors():
        message = error.get("msg", "")
        messages.append(message.removeprefix("Value error, "))
    return "; ".join(messages)
