"""
Settings for gsdcraft.

Settings are plain Pydantic models loaded from a YAML file::

    safety:
      watchdogMin: 10
      watchdogMax: 5000
    gsdml:
      language: de
      cacheDocuments: true

``get_settings()`` returns a process-wide instance. When the
``GSDCRAFT_SETTINGS`` environment variable names a file it is loaded from
there, otherwise defaults apply.
"""

import os
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import Field, ValidationError, model_validator

from gsdcraft.model.base import StrictModel

SETTINGS_ENV_VAR = "GSDCRAFT_SETTINGS"


class SafetySettings(StrictModel):
    """Limits applied by the safety parameter adapter before forwarding writes."""

    watchdog_min: int = Field(default=0, ge=0, description="Minimum F_WD_Time in ms")
    watchdog_max: int = Field(default=10000, ge=0, description="Maximum F_WD_Time in ms")

    @model_validator(mode="after")
    def check_watchdog_range(self) -> "SafetySettings":
        if self.watchdog_min > self.watchdog_max:
            raise ValueError(
                f"watchdogMin ({self.watchdog_min}) must not exceed watchdogMax ({self.watchdog_max})"
            )
        return self


class GsdmlSettings(StrictModel):
    """Options for loading GSDML documents."""

    language: Optional[str] = Field(
        default=None, description="Preferred xml:lang for external texts (primary language if unset)"
    )
    cache_documents: bool = Field(
        default=True, description="Keep one parsed document per path in memory"
    )


class Settings(StrictModel):
    """Top-level settings document."""

    safety: SafetySettings = Field(default_factory=SafetySettings)
    gsdml: GsdmlSettings = Field(default_factory=GsdmlSettings)


def load_settings(path: Union[str, Path]) -> Settings:
    """
    Load settings from a YAML file.

    Args:
        path: Path to the settings YAML file

    Returns:
        Validated Settings instance

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the YAML is malformed or fails validation
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw_data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"YAML syntax error in settings file {path}: {e}")

    try:
        return Settings.model_validate(raw_data)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            loc = " -> ".join(str(x) for x in error["loc"])
            errors.append(f"{loc}: {error['msg']}")
        raise ValueError(f"Invalid settings in {path}:\n  " + "\n  ".join(errors))


# Singleton instance for convenience
_settings_instance: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the global Settings instance."""
    global _settings_instance
    if _settings_instance is None:
        env_path = os.environ.get(SETTINGS_ENV_VAR)
        _settings_instance = load_settings(env_path) if env_path else Settings()
    return _settings_instance


def reset_settings() -> None:
    """Drop the cached settings so the next ``get_settings()`` reloads them."""
    global _settings_instance
    _settings_instance = None
