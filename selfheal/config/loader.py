from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from selfheal.config.schema import DEFAULT_CONFIG, HealingConfig, merge_config
from selfheal.core.exceptions import ConfigurationError

SECTION_KEY = "selfHealing"


class ConfigLoader:
    """Reads healing options from a JSON file.

    The file is either a flat object of options (``minSimilarityThreshold``,
    ``domCacheTTL`` and so on, or their snake_case names) or a larger suite
    config with the options under a ``selfHealing`` key. Missing options keep
    their defaults and ``overrides`` win over the file.
    """

    @staticmethod
    def load(path: str | Path, overrides: dict[str, Any] | None = None) -> HealingConfig:
        config_path = Path(path)
        with config_path.open("r", encoding="utf-8") as handle:
            try:
                payload = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ConfigurationError(f"{config_path} is not valid JSON: {exc.msg}") from exc

        if isinstance(payload, dict) and SECTION_KEY in payload:
            payload = payload[SECTION_KEY]
        if not isinstance(payload, dict):
            raise ConfigurationError(f"{config_path} must contain a JSON object of healing options")

        config = merge_config(DEFAULT_CONFIG, payload)
        if overrides:
            config = merge_config(config, overrides)
        return config
