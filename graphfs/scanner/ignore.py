"""Ignore pattern handling for filesystem scanning.

Rules are evaluated in order and OR-combined. A rule can be an exact
relative path, a bare directory/file name (matched against every path
component), an extension wildcard (``*.pyc``), a directory prefix ending
in ``/``, a gitignore-style glob matched with ``pathspec``, or, for patterns
that contain a ``/``, a plain substring of the relative path.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

import pathspec

from graphfs.config import get_scan_config

logger = logging.getLogger(__name__)


def default_ignore_patterns() -> list[str]:
    """Return the built-in ignore patterns (VCS, deps, build output, IDE, OS)."""
    return list(get_scan_config().ignore_patterns)


@lru_cache(maxsize=512)
def _compile_glob(pattern: str) -> pathspec.PathSpec | None:
    """Compile one gitwildmatch pattern; None when it is malformed."""
    try:
        return pathspec.PathSpec.from_lines("gitwildmatch", [pattern])
    except ValueError as e:
        logger.warning("Ignoring malformed glob %r: %s", pattern, e)
        return None


def glob_match(pattern: str, path: str) -> bool:
    """Match a slash-separated *path* against a gitignore-style glob.

    A pattern without ``/`` matches the name at any depth, ``**`` spans
    directories and a leading ``/`` anchors at the start of *path*.
    """
    spec = _compile_glob(pattern)
    return spec is not None and spec.match_file(path.lstrip("/"))


class IgnoreMatcher:
    """Matches relative paths against an ordered list of ignore rules."""

    def __init__(self, patterns: list[str] | None = None) -> None:
        self.patterns: list[str] = list(patterns or [])

    def add_pattern(self, pattern: str) -> None:
        self.patterns.append(pattern)

    def add_patterns(self, patterns: list[str]) -> None:
        self.patterns.extend(patterns)

    def should_ignore(self, path: str | Path) -> bool:
        """Check whether *path* (relative to the scan root) is ignored."""
        rel = str(path).replace("\\", "/")
        if rel in ("", "."):
            return False
        return any(self._match(rel, pattern) for pattern in self.patterns)

    def _match(self, path: str, pattern: str) -> bool:
        pattern = pattern.replace("\\", "/")
        if not pattern:
            return False

        if path == pattern:
            return True

        parts = path.split("/")

        # Bare name: match any component (directory or file), never a
        # fragment of one, so "build" does not swallow "builder.go"
        if "/" not in pattern and not any(ch in pattern for ch in "*?["):
            return pattern in parts

        if pattern.startswith("*.") and path.endswith(pattern[1:]):
            return True

        if pattern.endswith("/"):
            name = pattern.rstrip("/")
            if path.startswith(pattern) or path == name:
                return True
            # "dist/" in an ignore file names a directory at any depth
            return "/" not in name and name in parts

        if any(ch in pattern for ch in "*?["):
            return glob_match(pattern, path)

        return pattern in path


def parse_ignore_file(content: str) -> list[str]:
    """Parse gitignore-style content into patterns.

    Blank lines and ``#`` comments are skipped. Negation lines (``!pattern``)
    are read but dropped; un-ignore semantics are not implemented.
    """
    patterns = []
    for raw in content.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("!"):
            logger.debug("Dropping unsupported negation rule: %s", line)
            continue
        patterns.append(line)
    return patterns


def load_ignore_files(root: Path, names: list[str]) -> list[str]:
    """Read and parse every ignore file in *names* that exists under *root*."""
    patterns: list[str] = []
    for name in names:
        ignore_path = root / name
        try:
            content = ignore_path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.warning("Could not read ignore file %s: %s", ignore_path, e)
            continue
        file_patterns = parse_ignore_file(content)
        logger.debug("Loaded %d patterns from %s", len(file_patterns), ignore_path)
        patterns.extend(file_patterns)
    return patterns


def relative_posix(path: Path, root: Path) -> str:
    """Return *path* relative to *root* as a forward-slash string."""
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()
