class HealingError(RuntimeError):
    """Raised when selector healing cannot proceed."""


class ConfigurationError(HealingError):
    """Raised when a tuning option is outside its allowed range."""


class InvalidSelectorError(HealingError):
    """Raised when a selector is rejected before touching the page."""
