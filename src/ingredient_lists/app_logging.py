"""Logging setup for the ingredient lists service."""

import logging

LOGGER_NAME = "ingredient_lists"


def configure_logging(level: str | int = logging.INFO) -> None:
    """Attach one stream handler to the package logger.

    Repeated calls only adjust the level, so building several apps in one
    process (as the tests do) never duplicates output.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s: %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
