from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_LEVEL_ALIASES: dict[str, int] = {
    "WARN": logging.WARNING,
    "TRACE": logging.DEBUG,
}


def resolve_log_level(value: str | int | None, default: int = logging.WARNING) -> int:
    if isinstance(value, int):
        return value
    if value is None or not str(value).strip():
        return default
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    upper = text.upper()
    if upper in _LEVEL_ALIASES:
        return _LEVEL_ALIASES[upper]
    level = logging.getLevelName(upper)
    return level if isinstance(level, int) else default


def setup_logging(
    level: str | int | None = None,
    verbose: bool = False,
    quiet: bool = False,
) -> int:
    """Route all log records through a Rich handler on stderr."""
    if verbose:
        resolved = logging.DEBUG
    elif quiet:
        resolved = logging.ERROR
    else:
        resolved = resolve_log_level(level)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=verbose,
        markup=False,
    )
    logging.basicConfig(level=resolved, format="%(message)s", handlers=[handler], force=True)
    return resolved
