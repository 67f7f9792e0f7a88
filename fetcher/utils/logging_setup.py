"""
Process-wide logger construction.

The service logger is built once at startup by :func:`configure_logging` and
handed to the components that log, instead of each module creating its own.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(service)s] %(message)s"


class ServiceNameFilter(logging.Filter):
    """Stamp every record with the service name."""

    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "service"):
            record.service = self.service_name
        return True


def configure_logging(service_name: str, level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger(service_name)
    logger.setLevel(level)
    logger.propagate = False

    # Calling twice (reloads, tests) must not duplicate output.
    if not any(getattr(h, "_fetcher_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(ServiceNameFilter(service_name))
        handler._fetcher_handler = True
        logger.addHandler(handler)

    return logger
