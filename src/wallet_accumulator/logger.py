"""Logging setup for the command line."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(debug: bool = False, console: Console | None = None) -> None:
    """
    Route all log records through a rich handler.

    Parameters
    ----------
    debug : bool
        Log at DEBUG when True, INFO otherwise
    console : Console | None
        Console to write to (stderr by default)

    """
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=debug,
        rich_tracebacks=True,
        markup=False,
    )
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    # Third-party clients are noisy at DEBUG
    for name in ("httpx", "httpcore", "ccxt", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)
