"""Logging configuration for the basebase client.

Library modules only create loggers (logging.getLogger(__name__)); handlers
are installed by the application, or by setup_logging() for scripts.
"""

import logging
import sys

LOGGER_NAME = "basebase"


def setup_logging(debug: bool = False) -> None:
    """Configure logging for the basebase logger hierarchy.

    Level is DEBUG when debug is True, otherwise INFO.
    Output goes to stdout.
    """
    log_level = logging.DEBUG if debug else logging.INFO
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)
    if not any(getattr(h, "_basebase_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        handler._basebase_handler = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

