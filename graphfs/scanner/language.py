"""Language classification by file extension.

The registry is an explicit instance owned by (or passed to) the Scanner.
Built-in languages come from config/patterns/languages.yaml.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path

from graphfs.config import get_scan_config

UNKNOWN_LANGUAGE = "unknown"


@dataclass(frozen=True)
class Language:
    """A programming language and the extensions that identify it."""

    name: str
    extensions: tuple[str, ...]


class LanguageRegistry:
    """Extension → language lookup with thread-safe registration."""

    def __init__(self, languages: dict[str, Language] | None = None) -> None:
        self._lock = threading.Lock()
        self._languages: dict[str, Language] = dict(languages or {})
        self._extension_map: dict[str, str] = {}
        self._rebuild()

    @classmethod
    def with_defaults(cls) -> LanguageRegistry:
        """Create a registry seeded with the built-in language table."""
        return cls(
            {
                entry.key: Language(name=entry.name, extensions=entry.extensions)
                for entry in get_scan_config().languages
            }
        )

    def _rebuild(self) -> None:
        extension_map = {}
        for key, language in self._languages.items():
            for ext in language.extensions:
                extension_map[ext.lower()] = key
        self._extension_map = extension_map

    def detect(self, path: str | Path) -> str:
        """Return the language name for *path*, or ``"unknown"``."""
        ext = Path(path).suffix.lower()
        if not ext:
            return UNKNOWN_LANGUAGE
        key = self._extension_map.get(ext)
        if key is None:
            return UNKNOWN_LANGUAGE
        return self._languages[key].name

    def register(self, key: str, name: str, extensions: list[str]) -> None:
        """Register a new language or replace an existing one."""
        with self._lock:
            self._languages[key] = Language(name=name, extensions=tuple(extensions))
            self._rebuild()

    def supported_languages(self) -> list[str]:
        """Return the display names of all registered languages."""
        return sorted(language.name for language in self._languages.values())

    def get(self, key: str) -> Language | None:
        return self._languages.get(key)

    def is_supported(self, path: str | Path) -> bool:
        return self.detect(path) != UNKNOWN_LANGUAGE


_default_registry: LanguageRegistry | None = None
_default_lock = threading.Lock()


def default_registry() -> LanguageRegistry:
    """Return the shared registry seeded with the built-in languages."""
    global _default_registry
    with _default_lock:
        if _default_registry is None:
            _default_registry = LanguageRegistry.with_defaults()
        return _default_registry
