"""Shared fixtures for graphfs tests.

Fixtures:
- make_tree: write a dict of relative path -> content under tmp_path
- linked_doc: wrap a LinkedDoc body in markers inside a Go block comment
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from graphfs import settings
from graphfs.config import clear_config_cache


def linked_doc_source(body: str, package: str = "main") -> str:
    """Return Go source text carrying *body* as its LinkedDoc block."""
    return (
        "/*\n"
        "<!-- LinkedDoc RDF -->\n"
        "@prefix code: <https://schema.codedoc.org/> .\n"
        f"{body}\n"
        "<!-- End LinkedDoc RDF -->\n"
        "*/\n\n"
        f"package {package}\n"
    )


@pytest.fixture
def linked_doc() -> Callable[..., str]:
    return linked_doc_source


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Create files under tmp_path and return the tree root."""

    def _make(files: dict[str, str]) -> Path:
        for rel, content in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return tmp_path

    return _make


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Drop cached settings and GRAPHFS_* overrides between tests."""
    for name in (
        "GRAPHFS_MAX_FILE_SIZE",
        "GRAPHFS_WORKERS",
        "GRAPHFS_IGNORE_FILES",
        "GRAPHFS_CONCURRENT",
    ):
        monkeypatch.delenv(name, raising=False)
    # Bound before the test runs: tests may monkeypatch the loader itself
    clear_settings_cache = settings._load_pyproject_settings.cache_clear
    clear_settings_cache()
    clear_config_cache()
    yield
    clear_settings_cache()
    clear_config_cache()


@pytest.fixture(autouse=True)
def _reset_graphfs_logger():
    """Drop handlers the CLI attaches to the graphfs logger."""
    pkg_logger = logging.getLogger("graphfs")
    level = pkg_logger.level
    yield
    for handler in pkg_logger.handlers[:]:
        pkg_logger.removeHandler(handler)
    pkg_logger.setLevel(level)
