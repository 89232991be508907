"""Logging setup for aggregate-codegen.

Every module obtains its logger through :func:`get_logger`. The console
handler is installed once by :func:`setup_logging`, normally from the CLI.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "aggregate_codegen"

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a logger living under the package logger hierarchy.

    Args:
        name: Usually ``__name__`` of the calling module.

    Returns:
        Logger instance.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def setup_logging(
    level: int | str = logging.WARNING,
    use_rich: bool = True,
    console: Console | None = None,
) -> logging.Logger:
    """Configure the package logger.

    Args:
        level: Logging level (name or number).
        use_rich: Use a rich console handler instead of a plain stream handler.
        console: Console for the rich handler (defaults to stderr).

    Returns:
        The configured package logger.
    """
    global _configured

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    if _configured:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    if use_rich:
        handler: logging.Handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )

    handler.setLevel(level)
    logger.addHandler(handler)
    logger.propagate = False
    _configured = True

    return logger
