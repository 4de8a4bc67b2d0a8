"""Logging setup for the command line front end."""

import logging

from rich.console import Console
from rich.logging import RichHandler

from pokebattle.utils.config import config


def setup_logging(level: int = logging.WARNING, console: Console | None = None) -> None:
    """Route the root logger through a rich handler.

    Library modules only call ``logging.getLogger(__name__)``; the handler is
    installed by the CLI so embedding applications keep control of logging.
    """
    handler = RichHandler(
        level=level,
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter(config.log_format, datefmt=config.log_datefmt))
    logging.basicConfig(level=level, handlers=[handler], force=True)
