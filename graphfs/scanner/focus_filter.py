"""Focus pattern filtering for targeted analysis.

Patterns use gitignore glob syntax (matched with ``pathspec``): ``*`` and
``?`` stay within one path component, ``**`` crosses directories, and a
pattern without ``/`` matches the file name at any depth. A file is kept
when it matches ANY pattern, tried against its path relative to the base
path and its full path.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from graphfs.scanner.ignore import glob_match


@dataclass
class FilterStats:
    """Statistics about a focus filtering operation."""

    total_files: int = 0
    matched_files: int = 0
    by_pattern: dict[str, int] = field(default_factory=dict)


class FocusFilter:
    """Keeps files matching any of a set of glob patterns."""

    def __init__(self, patterns: list[str], base_path: str | Path | None = None) -> None:
        self.patterns = list(patterns)
        self.base_path = Path(base_path) if base_path else None

    @property
    def has_patterns(self) -> bool:
        return bool(self.patterns)

    def add_pattern(self, pattern: str) -> None:
        self.patterns.append(pattern)

    def _candidates(self, file: str) -> tuple[str, ...]:
        full = Path(file).as_posix()
        if self.base_path is not None:
            try:
                rel = Path(file).relative_to(self.base_path).as_posix()
                return (rel, full)
            except ValueError:
                pass
        return (full,)

    def matching_pattern(self, file: str) -> str | None:
        """Return the first pattern *file* matches, or None."""
        for pattern in self.patterns:
            if any(glob_match(pattern, c) for c in self._candidates(file)):
                return pattern
        return None

    def match(self, files: list[str]) -> list[str]:
        if not self.patterns:
            return list(files)
        return [f for f in files if self.matching_pattern(f) is not None]

    def match_with_reason(self, files: list[str]) -> dict[str, str]:
        """Map each matched file to the pattern that matched it."""
        reasons = {}
        for file in files:
            if (pattern := self.matching_pattern(file)) is not None:
                reasons[file] = pattern
        return reasons

    def match_with_stats(self, files: list[str]) -> tuple[list[str], FilterStats]:
        stats = FilterStats(total_files=len(files))
        if not self.patterns:
            stats.matched_files = len(files)
            return list(files), stats

        matched = []
        for file in files:
            pattern = self.matching_pattern(file)
            if pattern is None:
                continue
            matched.append(file)
            stats.by_pattern[pattern] = stats.by_pattern.get(pattern, 0) + 1
        stats.matched_files = len(matched)
        return matched, stats
