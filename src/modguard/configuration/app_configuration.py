from __future__ import annotations
from pathlib import Path
import fcntl
import os
from typing import Any, Dict
import yaml

from modguard.configuration.moderation_settings import ModerationSettings
from modguard.util.logger import get_logger

logger = get_logger("app_configuration")


def _resolve_home() -> Path:
    return Path(os.getenv("MODGUARD_HOME", ".")).resolve()


CONFIG_PATH = _resolve_home() / "config" / "app_config.yml"
DEFAULT_DATABASE_PATH = "./data/app.db"


class AppConfig:
    """File-lock based accessor around the YAML application configuration.

    The class caches the contents of ``config/app_config.yml``, exposes
    dictionary-like access helpers and resolves the moderation tuning through
    :class:`ModerationSettings`. Reads take an fcntl shared lock.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                try:
                    data = yaml.safe_load(f)
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found, using defaults.", self.config_path)
            return {}
        except (OSError, yaml.YAMLError) as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
            return {}

        if not isinstance(data, dict):
            if data is not None:
                logger.error("[APP CONFIGURATION] Config %s is not a mapping, using defaults.", self.config_path)
            return {}
        return data

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Re-read the YAML file, replace the cache and return the new mapping."""
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Safe lookup for top-level configuration keys."""
        return self._data.get(key, default)

    @property
    def moderation(self) -> ModerationSettings:
        """Return the ``moderation`` section wrapped in a ModerationSettings helper."""
        section = self._data.get("moderation", {})
        if not isinstance(section, dict):
            section = {}
        return ModerationSettings(section)

    @property
    def database_path(self) -> Path:
        """Path of the SQLite database, relative paths resolved against the home dir."""
        section = self._data.get("database", {})
        raw = DEFAULT_DATABASE_PATH
        if isinstance(section, dict) and section.get("path"):
            raw = str(section["path"])
        path = Path(raw)
        if not path.is_absolute():
            path = _resolve_home() / path
        return path


# Shared application-wide configuration instance
app_config = AppConfig(CONFIG_PATH)
