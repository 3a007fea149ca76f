import json
import logging
from pathlib import Path
from typing import Dict, Any

import runjob.settings as default_settings

log = logging.getLogger(__name__)


class MergedSettings:
    """
    Merges default settings with JSON and keyword overrides.

    This class provides a unified, attribute-based access point for all
    supervisor configuration. It follows a clear precedence:
    1. Base values from `settings.py` (including `.env` values).
    2. Overrides from `overrides.json` for settings in `MODIFIABLE_SETTINGS`.
    3. Keyword overrides passed to the constructor.
    """

    def __init__(self, **overrides: Any) -> None:
        """
        Initializes the settings object by loading defaults and overrides.

        :param overrides: Explicit values that take precedence over everything else.
        """
        self.OVERRIDES_JSON_PATH: Path = Path(
            overrides.pop("OVERRIDES_JSON_PATH", default_settings.OVERRIDES_JSON_PATH)
        )

        self._load_defaults()
        self._load_overrides()

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown setting '{key}'.")
            setattr(self, key, self._coerce(key, value))

        # The signature follows a replaced worker command unless given explicitly.
        if "WORKER_COMMAND" in overrides and "WORKER_SIGNATURE" not in overrides:
            self.WORKER_SIGNATURE = " ".join(self.WORKER_COMMAND)

    def get(self, item: str, default: Any = None) -> Any:
        """Provides dictionary-like access to settings with a default value."""
        return getattr(self, item, default)

    def _coerce(self, key: str, value: Any) -> Any:
        """Converts path strings back to Path objects where the default is a Path."""
        if isinstance(getattr(default_settings, key, None), Path) and isinstance(value, str):
            return Path(value)
        return value

    def _load_defaults(self) -> None:
        """
        Loads all uppercase attributes from the settings.py module as defaults.
        """
        for key in dir(default_settings):
            if key.isupper() and key != "OVERRIDES_JSON_PATH":
                setattr(self, key, getattr(default_settings, key))

    def _load_overrides(self) -> None:
        """
        Loads and applies settings from the overrides file.

        Only keys listed in `MODIFIABLE_SETTINGS` are applied.
        """
        if not self.OVERRIDES_JSON_PATH.exists():
            return

        try:
            with self.OVERRIDES_JSON_PATH.open('r') as f:
                overrides = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            log.error(f"Failed to load or parse overrides file '{self.OVERRIDES_JSON_PATH}': {e}")
            return

        if not isinstance(overrides, dict):
            log.error(f"Overrides file '{self.OVERRIDES_JSON_PATH}' is malformed. Ignoring.")
            return

        log.debug(f"Loading configuration overrides from {self.OVERRIDES_JSON_PATH}")
        for key, value in overrides.items():
            if not hasattr(self, key):
                log.warning(f"Override setting '{key}' not found in default settings. Ignoring.")
                continue
            if key not in self.MODIFIABLE_SETTINGS:
                log.warning(f"Attempted to override non-modifiable setting '{key}'. Ignoring.")
                continue
            setattr(self, key, self._coerce(key, value))
            log.debug(f"Overridden setting: {key} = {value}")


# Create a singleton instance to be imported by other modules
effective_settings = MergedSettings()
