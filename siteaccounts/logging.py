"""JSON structured logging for the site accounts panel."""

import logging
import os
import sys
from typing import Any, Dict, Optional

from pythonjsonlogger.json import JsonFormatter

FORMAT = '%(asctime)s %(levelname)s %(name)s %(message)s'

_loggers: Dict[str, logging.Logger] = {}


def _make_handler(logfile: Optional[str]) -> logging.Handler:
    handler: logging.Handler
    if logfile:
        handler = logging.FileHandler(logfile)
    else:
        handler = logging.StreamHandler(sys.stderr)
    formatter = JsonFormatter(
        FORMAT,
        rename_fields={'levelname': 'level', 'asctime': 'timestamp'}
    )
    handler.setFormatter(formatter)
    return handler


def _configure(logger: logging.Logger, level: int,
               logfile: Optional[str]) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.addHandler(_make_handler(logfile))
    logger.setLevel(level)
    logger.propagate = False


def getLogger(name: str) -> logging.Logger:
    """
    Get a logger that emits JSON records.

    Until :func:`init_app` is called, the level is taken from the
    ``LOGLEVEL`` environment variable, and records go to ``LOGFILE`` if that
    is set.

    Parameters
    ----------
    name : str
        Usually ``__name__`` of the calling module.

    Returns
    -------
    :class:`logging.Logger`

    """
    if name not in _loggers:
        logger = logging.getLogger(name)
        _configure(logger, int(os.environ.get('LOGLEVEL', 20)),
                   os.environ.get('LOGFILE'))
        _loggers[name] = logger
    return _loggers[name]


def init_app(app: Any) -> None:
    """Apply ``LOGLEVEL`` and ``LOGFILE`` of the app to all our loggers."""
    app.config.setdefault('LOGLEVEL', 20)
    app.config.setdefault('LOGFILE', None)
    for logger in _loggers.values():
        _configure(logger, int(app.config['LOGLEVEL']),
                   app.config['LOGFILE'])
