import logging
from typing import TYPE_CHECKING, Optional, Set

if TYPE_CHECKING:
    from rich.console import Console

LOG_FORMAT = "%(asctime)s %(name)s: %(message)s"

_debug: bool = False
_loggers: Set[str] = set()


def _level() -> int:
    return logging.DEBUG if _debug else logging.WARNING


def get_logger(name: str, override_level: Optional[int] = None) -> logging.Logger:
    """
    Return a module logger. Loggers without `override_level` follow [set_debug][abigen.core.logging.set_debug].
    """
    logger = logging.getLogger(name)

    if override_level is None:
        _loggers.add(name)
        logger.setLevel(_level())
    else:
        logger.setLevel(override_level)
    return logger


def set_debug(debug: bool) -> None:
    global _debug
    _debug = debug
    for name in _loggers:
        logging.getLogger(name).setLevel(_level())


def is_debug() -> bool:
    return _debug


def setup_logging(console: "Console", debug: bool = False) -> None:
    """
    Route all log records through a rich handler printing to `console`.

    Args:
        console: Console shared with the CLI output.
        debug: Lower the level of all abigen loggers to `DEBUG`.
    """
    from rich.logging import RichHandler

    logging.basicConfig(
        format=LOG_FORMAT,
        handlers=[RichHandler(show_time=False, console=console, markup=True)],
        force=True,
    )
    set_debug(debug)
