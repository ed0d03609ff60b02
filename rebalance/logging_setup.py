"""Logging setup for the command-line tool.

Log events go to stderr so the report printed on stdout stays clean enough
to pipe into a file or a ledger journal.
"""

import logging
import os
import sys

import structlog


def configure_logging(verbose=False):
    """Configure structlog on top of the standard library's logging.

    The level comes from ``LOG_LEVEL`` (default ``INFO``); ``verbose``
    forces ``DEBUG`` so every water-filling step is shown.
    """
    level = "DEBUG" if verbose else os.getenv("LOG_LEVEL", "INFO").upper()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level, logging.INFO),
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger("rebalance")
