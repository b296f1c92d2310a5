"""
Logging setup.

Configures the root logger once at application startup.
"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure stdlib logging for the application.

    Safe to call more than once; handlers are only installed on the first call.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    # SQLAlchemy echo is controlled by settings.db_echo
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
