"""CLI logging configuration.

Library modules only create loggers; the command-line entry point attaches
a single rich console handler to the ``graphfs`` logger.

Usage from a CLI command::

    from graphfs.cli_logging import configure_cli_logging

    configure_cli_logging(verbose=verbose)
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_cli_logging(
    *,
    verbose: bool = False,
    console_level: int | None = None,
    console: Console | None = None,
) -> logging.Logger:
    """Attach a RichHandler to the ``graphfs`` logger.

    Args:
        verbose: If True, log at INFO instead of WARNING.
        console_level: Explicit level, takes precedence over verbose.
        console: Console to render to (defaults to stderr).

    Returns:
        The configured ``graphfs`` logger.
    """
    if console_level is None:
        console_level = logging.INFO if verbose else logging.WARNING

    pkg_logger = logging.getLogger("graphfs")

    # Repeated calls (tests, nested commands) must not stack handlers
    for handler in pkg_logger.handlers[:]:
        if isinstance(handler, RichHandler):
            pkg_logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
        markup=False,
    )
    handler.setLevel(console_level)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    pkg_logger.addHandler(handler)

    if pkg_logger.level == logging.NOTSET or pkg_logger.level > console_level:
        pkg_logger.setLevel(console_level)

    return pkg_logger
