"""Logging setup shared by the propfile library modules and the command-line tool."""
import logging
import os
import sys
from typing import Optional

from tqdm import tqdm

LOGGER_NAME = "propfile"
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
# At DEBUG the parser, layout and store all log; the module name tells them apart.
DEBUG_LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'


class TqdmLoggingHandler(logging.Handler):
    """
    Writes records with ``tqdm.write`` so that messages logged while
    ``propfile lint`` walks many files do not break its progress bar.
    """

    def emit(self, record):
        try:
            tqdm.write(self.format(record), file=sys.stderr)
            self.flush()
        except (KeyboardInterrupt, SystemExit):
            raise
        except Exception:
            self.handleError(record)


def _file_handler(log_file_path: str, formatter: logging.Formatter) -> logging.Handler:
    log_dir = os.path.dirname(log_file_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    handler = logging.FileHandler(log_file_path, encoding='utf-8')
    handler.setFormatter(formatter)
    return handler


def _console_handler(formatter: logging.Formatter) -> logging.Handler:
    handler = TqdmLoggingHandler()
    handler.setFormatter(formatter)
    return handler


def setup_logger(log_level_str: str, log_file_path: Optional[str], log_to_console: bool) -> logging.Logger:
    """
    Configure the ``propfile`` logger.

    Library modules log through ``logging.getLogger(__name__)``, which makes
    them children of this logger, so a single call routes the parser, the
    layout, the store, the validator and the CLI to the same handlers.
    Calling it again replaces the previous handlers.

    Args:
        log_level_str: Level name such as 'INFO' or 'DEBUG'. Unknown names mean INFO.
        log_file_path: File to append records to, or None for no log file.
        log_to_console: Whether records also go to stderr.

    Returns:
        The configured ``propfile`` logger.
    """
    level = getattr(logging, log_level_str.upper(), logging.INFO)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = False

    formatter = logging.Formatter(DEBUG_LOG_FORMAT if level <= logging.DEBUG else LOG_FORMAT)
    if log_file_path:
        logger.addHandler(_file_handler(log_file_path, formatter))
    if log_to_console:
        logger.addHandler(_console_handler(formatter))

    return logger
