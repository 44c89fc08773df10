"""Routes records of a third-party library's logger to the service's logger."""

from __future__ import annotations

import logging
from typing import Protocol

OPENZITI_LOG_FORMAT = "openziti: %s"
OPENZITI_DEFAULT_LOG_FORMAT = "default openziti: %s"
DEFAULT_LOGGER_NAME = "openziti"


class _LoggingClient(Protocol):
    def debug(self, msg: str, *args: object) -> None: ...

    def info(self, msg: str, *args: object) -> None: ...

    def warning(self, msg: str, *args: object) -> None: ...

    def error(self, msg: str, *args: object) -> None: ...


class LoggingAdapter(logging.Handler):
    """A handler that forwards every record to a logging client."""

    def __init__(self, client: _LoggingClient) -> None:
        super().__init__(logging.NOTSET)
        self.client = client

    def format(self, record: logging.LogRecord) -> str:
        return f"[{record.levelname.lower()}] {record.getMessage()}\n"

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = record.getMessage()
            level = record.levelno
            if level == logging.DEBUG:
                self.client.debug(OPENZITI_LOG_FORMAT, message)
            elif level == logging.INFO:
                self.client.info(OPENZITI_LOG_FORMAT, message)
            elif level == logging.WARNING:
                self.client.warning(OPENZITI_LOG_FORMAT, message)
            elif level in (logging.ERROR, logging.CRITICAL):
                self.client.error(OPENZITI_LOG_FORMAT, message)
            else:
                self.client.error(OPENZITI_DEFAULT_LOG_FORMAT, message)
        except Exception:
            self.handleError(record)


def adapt_logging(
    client: _LoggingClient, logger_name: str = DEFAULT_LOGGER_NAME
) -> LoggingAdapter:
    """Send the named logger's records only to ``client`` and return the handler."""
    handler = LoggingAdapter(client)
    logger = logging.getLogger(logger_name)
    logger.addHandler(handler)
    logger.propagate = False
    return handler