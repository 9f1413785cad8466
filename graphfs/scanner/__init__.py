"""Filesystem scanning: ignore rules, language detection, sampling and filters.

Pipeline position:
    scanner → parser → graph builder

The Scanner walks a tree and returns a ScanResult inventory; GitFilter,
FocusFilter and Sampler narrow file lists for incremental or exploratory
runs.
"""

from .errors import (
    ErrorCollector,
    MaxErrorsExceededError,
    ScanAbortedError,
    ScanError,
)
from .focus_filter import FilterStats, FocusFilter
from .git_filter import GitError, GitFilter
from .ignore import IgnoreMatcher, default_ignore_patterns, parse_ignore_file
from .language import UNKNOWN_LANGUAGE, Language, LanguageRegistry, default_registry
from .sampling import Sampler, SampleStats, SamplingStrategy
from .scanner import FileRecord, Scanner, ScanOptions, ScanResult, scan

__all__ = [
    "ErrorCollector",
    "FileRecord",
    "FilterStats",
    "FocusFilter",
    "GitError",
    "GitFilter",
    "IgnoreMatcher",
    "Language",
    "LanguageRegistry",
    "MaxErrorsExceededError",
    "SampleStats",
    "Sampler",
    "SamplingStrategy",
    "ScanAbortedError",
    "ScanError",
    "ScanOptions",
    "ScanResult",
    "Scanner",
    "UNKNOWN_LANGUAGE",
    "default_ignore_patterns",
    "default_registry",
    "parse_ignore_file",
    "scan",
]
