import logging
from typing import Dict, Optional

_debug: bool = False
_managed_loggers: Dict[str, logging.Logger] = {}


def _default_level() -> int:
    return logging.DEBUG if _debug else logging.WARNING


def get_logger(name: str, override_level: Optional[int] = None) -> logging.Logger:
    """
    Return the logger `name`. Unless `override_level` is given, its level follows `set_debug`.
    """
    logger = logging.getLogger(name)

    if override_level is None:
        _managed_loggers[name] = logger
        logger.setLevel(_default_level())
    else:
        _managed_loggers.pop(name, None)
        logger.setLevel(override_level)
    return logger


def set_debug(debug: bool) -> None:
    global _debug
    _debug = debug
    level = _default_level()
    for logger in _managed_loggers.values():
        logger.setLevel(level)


def is_debug() -> bool:
    return _debug
