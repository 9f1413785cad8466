"""Git-based file filtering for incremental re-indexing.

Lists files changed since a ref, in a commit, staged, or uncommitted, so a
scan can be scoped to what recently changed. Paths are returned absolute.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from graphfs.scanner.language import LanguageRegistry, default_registry

logger = logging.getLogger(__name__)


class GitError(RuntimeError):
    """A git command failed."""


class GitFilter:
    """Filters files based on git history of one repository."""

    def __init__(
        self, repo_path: str | Path, registry: LanguageRegistry | None = None
    ) -> None:
        self.repo_path = Path(repo_path).resolve()
        self.registry = registry or default_registry()

    def _git(self, *args: str) -> subprocess.CompletedProcess[str]:
        if not shutil.which("git"):
            msg = "git not found in PATH"
            raise GitError(msg)
        return subprocess.run(
            ["git", *args],
            cwd=self.repo_path,
            capture_output=True,
            text=True,
        )

    def _run(self, *args: str) -> str:
        result = self._git(*args)
        if result.returncode != 0:
            msg = f"git {args[0]} failed: {result.stderr.strip()}"
            raise GitError(msg)
        return result.stdout

    def is_git_repository(self) -> bool:
        try:
            return self._git("rev-parse", "--git-dir").returncode == 0
        except GitError:
            return False

    def changed_since(self, ref: str) -> list[str]:
        """Files changed between *ref* (branch, tag or commit) and HEAD."""
        result = self._git("diff", "--name-only", f"{ref}...HEAD")
        if result.returncode != 0:
            # Fall back to a direct diff against ref
            logger.debug("git diff %s...HEAD failed, retrying against %s", ref, ref)
            return self._parse_file_list(self._run("diff", "--name-only", ref))
        return self._parse_file_list(result.stdout)

    def changed_in_commit(self, commit: str) -> list[str]:
        return self._parse_file_list(
            self._run("show", "--name-only", "--format=", commit)
        )

    def staged_changes(self) -> list[str]:
        return self._parse_file_list(self._run("diff", "--name-only", "--cached"))

    def uncommitted_changes(self) -> list[str]:
        """Staged, unstaged and untracked files from ``git status``."""
        output = self._run("status", "--porcelain")
        files = []
        for line in output.splitlines():
            if len(line) < 4:
                continue
            # Porcelain format: "XY path" or "XY old -> new" for renames
            name = line[3:].strip()
            if " -> " in name:
                name = name.split(" -> ", 1)[1]
            name = name.strip('"')
            if name:
                files.append(str(self.repo_path / name))
        return files

    def _parse_file_list(self, output: str) -> list[str]:
        return [
            str(self.repo_path / line.strip())
            for line in output.splitlines()
            if line.strip()
        ]

    def filter_to_existing(self, files: list[str]) -> list[str]:
        return [f for f in files if Path(f).is_file()]

    def filter_supported(self, files: list[str]) -> list[str]:
        return [f for f in files if self.registry.is_supported(f)]

    def current_branch(self) -> str:
        return self._run("rev-parse", "--abbrev-ref", "HEAD").strip()

    def default_branch(self) -> str:
        """Return ``main`` or ``master``, whichever exists (``main`` if neither)."""
        for candidate in ("main", "master"):
            if self._git("rev-parse", "--verify", "--quiet", candidate).returncode == 0:
                return candidate
        return "main"
