"""
Static JSON translation catalogues.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, Optional

MESSAGES_DIR = Path(__file__).parent / "messages"
SUPPORTED_LOCALES = ("en", "de", "fr", "es", "ar", "tr")
DEFAULT_LOCALE = "en"


class UnsupportedLocaleError(ValueError):
    pass


def available_locales() -> tuple[str, ...]:
    return tuple(
        locale for locale in SUPPORTED_LOCALES if (MESSAGES_DIR / f"{locale}.json").exists()
    )


def resolve_locale(locale: Optional[str], default: str = DEFAULT_LOCALE) -> str:
    """
    Pick the catalogue to serve, falling back to ``default`` for anything
    unknown, and to ``DEFAULT_LOCALE`` when ``default`` has no catalogue.
    """
    shipped = available_locales()
    candidate = (locale or "").strip().lower().replace("_", "-").split("-")[0]
    if candidate in shipped:
        return candidate
    if default in shipped:
        return default
    return DEFAULT_LOCALE


@lru_cache(maxsize=None)
def load_messages(locale: str) -> dict:
    if locale not in available_locales():
        raise UnsupportedLocaleError(f"Unsupported locale: {locale}")
    with open(MESSAGES_DIR / f"{locale}.json", encoding="utf-8") as f:
        return json.load(f)


class Translator:
    def __init__(self, messages: Mapping[str, Any]):
        self.messages = messages

    @classmethod
    def for_locale(cls, locale: Optional[str]) -> "Translator":
        return cls(load_messages(resolve_locale(locale)))

    def t(self, key: str, variables: Optional[Mapping[str, Any]] = None) -> str:
        """Dotted-key lookup; the key itself is returned when nothing matches."""
        value: Any = self.messages
        for part in key.split("."):
            if not isinstance(value, Mapping) or part not in value:
                return key
            value = value[part]
        if not isinstance(value, str):
            return key
        for name, replacement in (variables or {}).items():
            value = value.replace("{" + name + "}", str(replacement))
        return value
