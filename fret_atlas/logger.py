"""Module loggers for Fret Atlas, always inside the 'fret_atlas' namespace.

``logging_config.MODULE_LOG_LEVELS`` only reaches loggers under the package
name, so anything else (a module run as ``__main__``, a helper script) is
re-homed there instead of logging through the root logger.
"""
import logging
from typing import Dict

PACKAGE = "fret_atlas"

_loggers: Dict[str, logging.Logger] = {}


def logger_name(name: str) -> str:
    """Map a module name to the logger name used for it.

    Examples:
        >>> logger_name('fret_atlas.fretboard')  # Returns 'fret_atlas.fretboard'
        >>> logger_name('__main__')  # Returns 'fret_atlas'
        >>> logger_name('tools.dump_grid')  # Returns 'fret_atlas.tools.dump_grid'
    """
    if name == PACKAGE or name.startswith(PACKAGE + "."):
        return name
    if name in ("", "__main__"):
        return PACKAGE
    return f"{PACKAGE}.{name}"


def get_logger(name: str) -> logging.Logger:
    """Get the cached logger for a module.

    Args:
        name: Usually ``__name__`` of the calling module

    Returns:
        The logger for ``logger_name(name)``
    """
    full_name = logger_name(name)
    if full_name not in _loggers:
        _loggers[full_name] = logging.getLogger(full_name)
    return _loggers[full_name]
