"""Project settings loaded from pyproject.toml [tool.graphfs] section.

Configuration keys:
  [tool.graphfs]
  max-file-size - largest file (bytes) the scanner will include
  workers       - scanner worker count (0 = all available CPUs)
  ignore-files  - ignore-file names read from the scan root
  concurrent    - use the worker-pool scanner by default

All settings support environment variable overrides (GRAPHFS_* prefix).
"""

import os
import tomllib
from functools import cache
from pathlib import Path

DEFAULT_MAX_FILE_SIZE = 1024 * 1024
DEFAULT_IGNORE_FILES = (".gitignore", ".graphfsignore")


@cache
def _load_pyproject_settings() -> dict:
    """Load settings from pyproject.toml [tool.graphfs] section.

    Returns:
        Dictionary of settings from pyproject.toml, empty dict if not found.
    """
    # Walk up to find pyproject.toml (for development installs)
    current = Path(__file__).resolve().parent
    while current != current.parent:
        candidate = current / "pyproject.toml"
        if candidate.exists():
            break
        current = current.parent
    else:
        return {}

    try:
        data = tomllib.loads(candidate.read_text())
    except (OSError, tomllib.TOMLDecodeError):
        return {}
    return data.get("tool", {}).get("graphfs", {})


def get_max_file_size() -> int:
    """Get the scanner file size limit in bytes.

    Priority: GRAPHFS_MAX_FILE_SIZE env → [tool.graphfs].max-file-size → 1 MiB.
    """
    if env := os.getenv("GRAPHFS_MAX_FILE_SIZE"):
        return int(env)
    if (val := _load_pyproject_settings().get("max-file-size")) is not None:
        return int(val)
    return DEFAULT_MAX_FILE_SIZE


def get_workers() -> int:
    """Get the scanner worker count.

    Priority: GRAPHFS_WORKERS env → [tool.graphfs].workers → 0 (all CPUs).
    """
    if env := os.getenv("GRAPHFS_WORKERS"):
        return int(env)
    if (val := _load_pyproject_settings().get("workers")) is not None:
        return int(val)
    return 0


def get_ignore_files() -> list[str]:
    """Get the ignore-file names honoured at the scan root.

    Priority: GRAPHFS_IGNORE_FILES env (comma separated)
              → [tool.graphfs].ignore-files → .gitignore, .graphfsignore.
    """
    if env := os.getenv("GRAPHFS_IGNORE_FILES"):
        return [name.strip() for name in env.split(",") if name.strip()]
    if (val := _load_pyproject_settings().get("ignore-files")) is not None:
        return list(val)
    return list(DEFAULT_IGNORE_FILES)


def get_concurrent() -> bool:
    """Get whether scans use the worker pool by default.

    Priority: GRAPHFS_CONCURRENT env → [tool.graphfs].concurrent → True.
    """
    if env := os.getenv("GRAPHFS_CONCURRENT"):
        return _parse_bool(env)
    if (val := _load_pyproject_settings().get("concurrent")) is not None:
        return _parse_bool(val)
    return True


def _parse_bool(value: str | bool) -> bool:
    """Parse a boolean value from string or bool."""
    if isinstance(value, bool):
        return value
    return value.lower() in ("true", "1", "yes")
