from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: str = "DEBUG", console: Optional[Console] = None) -> None:
    """Route all log records to stderr through a RichHandler."""

    if not isinstance(logging.getLevelName(level), int):
        level = "DEBUG"

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
