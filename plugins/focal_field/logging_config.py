"""
Logging Configuration

Console and optional file logging for the `focal_field` namespace.

Per-frame statistics from the CLI go to stdout, so log records go to stderr
by default. The file log always records DEBUG (LUT rebuilds, reseeds) no
matter how quiet the console is.

Handlers added by a host application to the `focal_field` logger are left
in place; calling setup_logging() again only replaces the handlers it
installed itself.
"""
import logging
import sys
from typing import Optional, TextIO, Union

LOGGER_NAME = "focal_field"
CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s.%(msecs)03d %(levelname)-7s [%(name)s] %(message)s'
DATE_FORMAT = '%H:%M:%S'

_OWNED = "_focal_field_owned"


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        return resolved
    return int(level)


def _owned(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _OWNED, True)
    return handler


def setup_logging(level: Union[int, str] = logging.INFO,
                  log_file: Optional[str] = None,
                  stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Configures the 'focal_field' logger.

    Args:
        level: Console level, as a number or a name ("debug", "WARNING")
        log_file: Optional path for a DEBUG-level log file (overwritten)
        stream: Console stream (default: sys.stderr)

    Returns:
        The configured package logger.
    """
    console_level = _resolve_level(level)
    logger = logging.getLogger(LOGGER_NAME)

    for handler in [h for h in logger.handlers if getattr(h, _OWNED, False)]:
        logger.removeHandler(handler)
        handler.close()

    console = _owned(logging.StreamHandler(stream if stream is not None else sys.stderr))
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console)

    logger_level = console_level
    if log_file:
        file_handler = _owned(logging.FileHandler(log_file, mode='w', encoding='utf-8'))
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)
        logger_level = logging.DEBUG

    logger.setLevel(logger_level)
    logger.debug("Logging initialized (console=%s, file=%s)",
                 logging.getLevelName(console_level), log_file or "-")
    return logger
