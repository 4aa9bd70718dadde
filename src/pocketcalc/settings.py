"""User preferences: precision, history size and theme."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, replace
from pathlib import Path

from pocketcalc.core import DEFAULT_HISTORY_LIMIT, DEFAULT_PRECISION
from pocketcalc.exceptions import OutOfRangeError
from pocketcalc.validators import validate_history_limit, validate_precision

logger = logging.getLogger(__name__)

THEMES = ("light", "dark", "high-contrast")
DEFAULT_THEME = "light"

ENV_PREFIX = "POCKETCALC_"


def next_theme(theme: str) -> str:
    """Theme that follows theme in the toggle cycle; unknown themes restart it."""
    if theme not in THEMES:
        return DEFAULT_THEME
    return THEMES[(THEMES.index(theme) + 1) % len(THEMES)]


def validate_theme(theme: str) -> str:
    if theme not in THEMES:
        raise OutOfRangeError("theme", theme, THEMES)
    return theme


@dataclass(frozen=True)
class Settings:
    """Validated preferences; construction fails on values outside the presets."""

    precision: int = DEFAULT_PRECISION
    history_limit: int = DEFAULT_HISTORY_LIMIT
    theme: str = DEFAULT_THEME

    def __post_init__(self) -> None:
        validate_precision(self.precision)
        validate_history_limit(self.history_limit)
        validate_theme(self.theme)

    @classmethod
    def from_mapping(cls, data: dict, base: Settings | None = None) -> Settings:
        """
        Build settings from loosely typed data, e.g. a JSON document.

        Fields that are missing or invalid keep their value from base,
        or the default when no base is given.
        """
        settings = cls() if base is None else base
        for name, convert in (("precision", int), ("history_limit", int), ("theme", str)):
            if name not in data:
                continue
            try:
                settings = replace(settings, **{name: convert(data[name])})
            except (OutOfRangeError, TypeError, ValueError) as e:
                logger.warning("Ignoring invalid %s setting: %s", name, e)
        return settings

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None, base: Settings | None = None) -> Settings:
        """
        Read ``POCKETCALC_PRECISION``, ``POCKETCALC_HISTORY_LIMIT`` and
        ``POCKETCALC_THEME``.
        """
        environ = os.environ if environ is None else environ
        data = {}
        for name in ("precision", "history_limit", "theme"):
            value = environ.get(ENV_PREFIX + name.upper())
            if value is not None:
                data[name] = value
        return cls.from_mapping(data, base)

    def with_next_theme(self) -> Settings:
        return replace(self, theme=next_theme(self.theme))

    def to_dict(self) -> dict:
        return asdict(self)


class SettingsStore:
    """
    Best-effort JSON persistence for :class:`Settings`.

    Nothing here raises on I/O problems: a missing or unreadable file loads
    as the defaults and a failed write is logged and dropped.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> Settings:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return Settings()
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to load settings from %s: %s", self.path, e)
            return Settings()

        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: expected an object", self.path)
            return Settings()
        return Settings.from_mapping(data)

    def save(self, settings: Settings) -> bool:
        """Write settings; returns False if the file could not be written."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(settings.to_dict(), f, indent=4)
        except OSError as e:
            logger.warning("Failed to save settings to %s: %s", self.path, e)
            return False
        return True
