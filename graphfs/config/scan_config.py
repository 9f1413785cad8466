"""
Scan configuration loader.

Loads the built-in ignore patterns and language table from YAML files in
config/patterns/. Provides a cached view used by the ignore matcher and the
language registry.

Configuration structure:
    config/patterns/
    ├── exclude.yaml      # Default ignore patterns, grouped by category
    └── languages.yaml    # Registry key -> display name + extensions
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

# Category order in exclude.yaml is preserved when flattening
EXCLUDE_CATEGORIES = (
    "version_control",
    "dependencies",
    "ide",
    "os",
    "artifacts",
    "graphfs",
)


@dataclass(frozen=True)
class LanguageSpec:
    """A language entry from languages.yaml."""

    key: str
    name: str
    extensions: tuple[str, ...]


@dataclass
class ScanConfig:
    """Complete packaged scan configuration."""

    ignore_patterns: list[str] = field(default_factory=list)
    """Default ignore patterns, in category order"""

    languages: list[LanguageSpec] = field(default_factory=list)
    """Built-in languages"""

    @classmethod
    def load(cls, patterns_dir: Path | None = None) -> ScanConfig:
        """Load configuration from YAML files.

        Args:
            patterns_dir: Override patterns directory (default: config/patterns/)

        Returns:
            Loaded ScanConfig
        """
        if patterns_dir is None:
            patterns_dir = Path(__file__).parent / "patterns"

        return cls(
            ignore_patterns=cls._load_ignore_patterns(patterns_dir / "exclude.yaml"),
            languages=cls._load_languages(patterns_dir / "languages.yaml"),
        )

    @classmethod
    def _load_ignore_patterns(cls, path: Path) -> list[str]:
        if not path.exists():
            logger.warning("Exclusion config not found: %s", path)
            return []

        with path.open() as f:
            data = yaml.safe_load(f) or {}

        patterns: list[str] = []
        for category in EXCLUDE_CATEGORIES:
            patterns.extend(str(p) for p in data.get(category, []) or [])
        # Unknown categories are appended after the known ones
        for category, values in data.items():
            if category == "version" or category in EXCLUDE_CATEGORIES:
                continue
            patterns.extend(str(p) for p in values or [])
        return patterns

    @classmethod
    def _load_languages(cls, path: Path) -> list[LanguageSpec]:
        if not path.exists():
            logger.warning("Language config not found: %s", path)
            return []

        with path.open() as f:
            data = yaml.safe_load(f) or {}

        languages = []
        for key, entry in data.items():
            if key == "version":
                continue
            languages.append(
                LanguageSpec(
                    key=key,
                    name=entry.get("name", key),
                    extensions=tuple(entry.get("extensions", [])),
                )
            )
        return languages


@lru_cache(maxsize=1)
def get_scan_config() -> ScanConfig:
    """Get cached scan configuration."""
    return ScanConfig.load()


def clear_config_cache() -> None:
    """Clear the configuration cache (for testing/reloading)."""
    get_scan_config.cache_clear()
