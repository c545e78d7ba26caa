# src/common/logger_config.py
"""Root logger setup shared by the Lambda entry points and the table bootstrap script."""

import logging

from rich.logging import RichHandler

from src.common.config.settings import settings

# Client libraries that log every request at INFO/DEBUG
QUIET_LOGGERS = ("mysql.connector", "boto3", "botocore", "urllib3")


def setup_logging() -> None:
    """
    Routes all records through a single RichHandler at settings.LOG_LEVEL.

    Safe to call more than once: handlers already on the root logger (including
    the one the Lambda runtime installs) are replaced, not stacked.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    rich_handler = RichHandler(
        show_time=True,
        show_level=True,
        show_path=False,
        markup=False,  # messages are rendered verbatim
        tracebacks_word_wrap=True,
        tracebacks_suppress=[logging],
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [rich_handler]

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
