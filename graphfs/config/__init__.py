"""Packaged scan configuration (default ignore patterns, language table)."""

from .scan_config import (
    LanguageSpec,
    ScanConfig,
    clear_config_cache,
    get_scan_config,
)

__all__ = [
    "LanguageSpec",
    "ScanConfig",
    "clear_config_cache",
    "get_scan_config",
]
