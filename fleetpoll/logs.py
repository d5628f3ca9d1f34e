"""
Fleet Poller - Logging.

One stderr handler on the `fleetpoll` logger tree; stdout carries the JSON
records. Used by the CLI and by spawned workers, which start with a fresh
interpreter and no handlers.
"""

import logging
import os
import sys


def setup_logging(level: str = "INFO"):
    """Configure the fleetpoll logger tree, with colors on capable terminals."""

    use_color = sys.stderr.isatty() and (sys.platform != 'win32' or 'WT_SESSION' in os.environ)

    class ColorFormatter(logging.Formatter):
        COLORS = {
            'DEBUG': '\033[36m',    # Cyan
            'INFO': '\033[32m',     # Green
            'WARNING': '\033[33m',  # Yellow
            'ERROR': '\033[31m',    # Red
            'CRITICAL': '\033[35m', # Magenta
        }
        RESET = '\033[0m'

        def format(self, record):
            if use_color:
                color = self.COLORS.get(record.levelname, self.RESET)
                record.levelname = f"{color}{record.levelname:8}{self.RESET}"
            else:
                record.levelname = f"{record.levelname:8}"
            return super().format(record)

    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ColorFormatter(
        '%(asctime)s | %(levelname)s | %(name)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    logger = logging.getLogger('fleetpoll')
    logger.setLevel(log_level)
    logger.handlers = [handler]
    logger.propagate = False
