"""
Logging configuration for the application.

``setup_logging`` attaches one console handler to the root logger.
Modules log through ``logging.getLogger(__name__)``; nothing else in the
codebase touches handlers.
"""

import logging

from derra.middleware.request_context import get_request_context


class RequestIdFilter(logging.Filter):
    """Stamp each record with the id of the request being served ("-" if none)."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = get_request_context()
        record.request_id = context.request_id if context else "-"
        return True


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once.

    Repeated calls (tests, several ``create_app`` calls) are no-ops once a
    handler is attached.

    Args:
        level: Logging level name (e.g. "DEBUG", "INFO"), case insensitive
    """
    root = logging.getLogger()
    if root.handlers:
        return

    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler()
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(handler)
