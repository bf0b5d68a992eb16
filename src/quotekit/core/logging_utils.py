"""Central logging utilities for QuoteKit.

Every module obtains its logger through :func:`get_logger`, which makes sure
the root logger has been configured exactly once.
"""

from __future__ import annotations

import logging
from typing import Final

from beartype import beartype

__all__: Final = [
    "configure_logging",
    "get_logger",
]

_DEFAULT_LOG_FORMAT: Final = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_ROOT_LOGGER_NAME: Final = "quotekit"
_is_configured: bool = False


@beartype
def configure_logging(
    *, level: int = logging.INFO, fmt: str = _DEFAULT_LOG_FORMAT
) -> None:
    """Configure the root logger exactly once.

    Calling this function multiple times is safe – configuration will only
    be applied on the first invocation.
    """
    global _is_configured
    if _is_configured:
        return

    logging.basicConfig(level=level, format=fmt)
    _is_configured = True


@beartype
def get_logger(name: str | None = None, *, level: int | None = None) -> logging.Logger:
    """Return a module-scoped logger that is guaranteed to be configured."""
    configure_logging()
    logger = logging.getLogger(name or _ROOT_LOGGER_NAME)
    if level is not None:
        logger.setLevel(level)
    return logger
