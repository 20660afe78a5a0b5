"""Configuration loading utilities for the parrot bot."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

import yaml

from .text import MAX_MESSAGE_LENGTH, TRUNCATION_LIMIT


DEFAULT_SETTINGS_PATH = Path(__file__).parent / "data" / "settings.yaml"

_DEFAULT_DESCRIPTIONS = {
    "say": "Mindlessly parrots whatever you want",
    "sayf": "Same as say with printf-style formatting, separate format string and args with / slashes",
    "reply": "Same as say except it replies to the invoking message",
    "replyf": "Same as sayf except it replies to the invoking message",
}


@dataclass(frozen=True)
class Settings:
    """Typed view over the settings YAML file."""

    truncation_limit: int
    max_message_length: int
    member_query_limit: int
    command_descriptions: Dict[str, str]

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Settings":
        formatting = data.get("formatting", {})
        messages = data.get("messages", {})
        resolver = data.get("resolver", {})
        commands = data.get("commands", {})
        descriptions = dict(_DEFAULT_DESCRIPTIONS)
        for name, payload in commands.items():
            description = (payload or {}).get("description")
            if description:
                descriptions[str(name)] = str(description)
        return Settings(
            truncation_limit=int(formatting.get("truncation_limit", TRUNCATION_LIMIT)),
            max_message_length=int(messages.get("max_length", MAX_MESSAGE_LENGTH)),
            member_query_limit=int(resolver.get("member_query_limit", 5)),
            command_descriptions=descriptions,
        )


class SettingsLoader:
    """Loads and caches settings from YAML configuration files."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or DEFAULT_SETTINGS_PATH
        self._cache: Settings | None = None

    @property
    def path(self) -> Path:
        return self._path

    def load(self, force: bool = False) -> Settings:
        if self._cache is not None and not force:
            return self._cache
        with self._path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        self._cache = Settings.from_dict(data)
        return self._cache


def get_settings() -> Settings:
    """Convenience accessor for default settings."""

    return SettingsLoader().load()


__all__ = ["Settings", "SettingsLoader", "get_settings"]
