#  -*- coding: utf-8 -*-
"""
Console logging for the ``beanxml`` package.

The package only installs a ``NullHandler``; applications that want to see
what readers and writers do call ``configure_logging``.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: int | str = logging.INFO, console: Console | None = None) -> logging.Logger:
    """
    Send the package logs to a rich console handler.

    Calling it again only changes the level.

    Parameters
    ----------
    level : int or str, default logging.INFO
        Level of the ``beanxml`` logger.
    console : rich.console.Console, optional
        Destination console. Defaults to a console writing to stderr.

    Returns
    -------
    logging.Logger
        The package logger.
    """
    logger = logging.getLogger('beanxml')
    logger.setLevel(level)

    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        logger.addHandler(RichHandler(console=console or Console(stderr=True), show_path=False))
        logger.propagate = False

    return logger


__all__ = [
    'configure_logging',
]
