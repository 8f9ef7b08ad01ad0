from __future__ import annotations
import logging
from rich.logging import RichHandler
from rich.console import Console

_LOGGER = logging.getLogger("webref")
_HANDLER = RichHandler(rich_tracebacks=True, markup=True)
_FORMAT = "%(message)s"
_CONSOLE = Console(soft_wrap=True)

def setup_logger(name: str = "webref", verbose: bool = False) -> logging.Logger:
    """Setup logger with Rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=_FORMAT, datefmt="[%X]", handlers=[_HANDLER])
    logger = logging.getLogger(name)
    logger.setLevel(level)
    return logger

def log() -> logging.Logger:
    """Get the default webref logger."""
    return _LOGGER

def console() -> Console:
    """Get the Rich console for styled output."""
    return _CONSOLE
