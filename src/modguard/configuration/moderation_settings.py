import math
from datetime import timedelta
from typing import Any, Dict


class ModerationSettings:
    """Typed accessors for the ``moderation`` section of the app config.

    Missing or malformed values fall back to the documented defaults so a
    partially filled YAML file never stops the bot from moderating.
    """

    def __init__(self, data: Dict[str, Any] | None = None) -> None:
        self.data: Dict[str, Any] = data or {}

    def _number(self, key: str, default: float) -> float:
        try:
            value = float(self.data.get(key, default))
        except (TypeError, ValueError):
            return default
        return value if math.isfinite(value) and value >= 0 else default

    @property
    def spam_threshold(self) -> float:
        """Displayed threshold; the classifier itself always uses 0.6."""
        return self._number("spam_threshold", 0.6)

    @property
    def warning_delete_delay(self) -> float:
        return self._number("warning_delete_delay_seconds", 10.0)

    @property
    def timeout_duration(self) -> timedelta:
        try:
            return timedelta(minutes=self._number("timeout_minutes", 5.0))
        except OverflowError:
            return timedelta(minutes=5)

    @property
    def action_timeout(self) -> float:
        return self._number("action_timeout_seconds", 10.0)

    @property
    def audit_content_limit(self) -> int:
        return int(self._number("audit_content_limit", 500))
