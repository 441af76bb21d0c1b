import logging
import os
from pprint import pformat
from typing import Any

from pydantic import BaseModel

LOG_LEVEL_ENV_VAR = "GAZETTEER_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s - %(pathname)s:%(lineno)d - %(levelname)s - %(message)s"


class PprintLogger:
    """A logger wrapper that pretty-prints queries, hits and candidates.

    Strings pass through untouched, so ``%``-style arguments keep working.
    Pydantic models are rendered with model_dump_json(); other objects
    go through pformat.
    """

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    def _format_message(self, msg: Any, pprint: bool = True) -> Any:
        if isinstance(msg, str) or not pprint:
            return msg
        if isinstance(msg, BaseModel):
            return msg.model_dump_json(indent=2)
        return pformat(msg, width=120, depth=None)

    def debug(self, msg: Any, *args, pprint: bool = True, **kwargs) -> None:
        self._logger.debug(self._format_message(msg, pprint), *args, stacklevel=2, **kwargs)

    def info(self, msg: Any, *args, pprint: bool = True, **kwargs) -> None:
        self._logger.info(self._format_message(msg, pprint), *args, stacklevel=2, **kwargs)

    def warning(self, msg: Any, *args, pprint: bool = True, **kwargs) -> None:
        self._logger.warning(self._format_message(msg, pprint), *args, stacklevel=2, **kwargs)

    def error(self, msg: Any, *args, pprint: bool = True, **kwargs) -> None:
        self._logger.error(self._format_message(msg, pprint), *args, stacklevel=2, **kwargs)

    def exception(self, msg: Any, *args, pprint: bool = True, **kwargs) -> None:
        self._logger.exception(self._format_message(msg, pprint), *args, stacklevel=2, **kwargs)

    def __getattr__(self, name: str) -> Any:
        """Delegate any other attributes to the underlying logger."""
        return getattr(self._logger, name)


def _level_from_env(default: int) -> int:
    value = os.environ.get(LOG_LEVEL_ENV_VAR)
    if not value:
        return default
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.upper())
    # getLevelName returns "Level X" for unknown names
    return level if isinstance(level, int) else default


def setup_logging(name: str, level: int | None = None) -> PprintLogger:
    """Return a PprintLogger for ``name``, attaching a stream handler once.

    The level is taken from ``level`` when given, otherwise from the
    GAZETTEER_LOG_LEVEL environment variable, falling back to WARNING.
    """
    if level is None:
        level = _level_from_env(logging.WARNING)
    logger = logging.getLogger(name)
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return PprintLogger(logger)
