"""
Logging configuration for the application.

One line per record: timestamp, level, logger, message.
Logging must not change program behavior.
Balances and identities are logged as plain integers and ids only;
request bodies and identity headers are never logged.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that flood the output at INFO.
_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.pool")


def configure_logging(level: str = "INFO", sql_echo: bool = False) -> None:
    """Configure logging for the application.

    Args:
        level: The log level string (DEBUG, INFO, WARNING, ERROR).
        sql_echo: Emit every SQL statement through the
            ``sqlalchemy.engine`` logger. Meant for debug runs.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if sql_echo else logging.WARNING
    )
