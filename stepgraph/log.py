"""
Logging setup shared by the backend and the CLI.

Modules log through `logging.getLogger(__name__)`; this installs one colored
console handler on the package logger.
"""

import copy
import logging
import sys

COLORS = {
    'RESET':   '\033[0m',
    'RED':     '\033[91m',
    'GREEN':   '\033[92m',
    'YELLOW':  '\033[93m',
    'MAGENTA': '\033[95m',
    'CYAN':    '\033[96m',
    'WHITE':   '\033[97m',
}

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class ColorFormatter(logging.Formatter):
    """Formatter that adds color codes based on log level."""
    LEVEL_COLORS = {
        logging.DEBUG:    COLORS['CYAN'],
        logging.INFO:     COLORS['GREEN'],
        logging.WARNING:  COLORS['YELLOW'],
        logging.ERROR:    COLORS['RED'],
        logging.CRITICAL: COLORS['MAGENTA'],
    }

    def format(self, record):
        rec = copy.copy(record)
        color = self.LEVEL_COLORS.get(rec.levelno, COLORS['WHITE'])
        rec.msg = f"{color}{rec.msg}{COLORS['RESET']}"
        return super().format(rec)


def setup_logging(level: str | int = "INFO", color: bool | None = None) -> logging.Logger:
    """
    Configure the `stepgraph` logger.

    Args:
        level: Log level name or number
        color: Force colors on/off (default: only when stderr is a terminal)

    Returns:
        The configured package logger
    """
    logger = logging.getLogger("stepgraph")
    logger.setLevel(level if isinstance(level, int) else level.upper())

    if color is None:
        color = sys.stderr.isatty()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ColorFormatter(LOG_FORMAT) if color else logging.Formatter(LOG_FORMAT))

    # Replace handlers from an earlier call
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.propagate = False
    return logger
