"""Logging setup shared by the CLI and the GUI."""

import logging
import os
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(module)s - %(funcName)s: %(message)s"
DATE_FORMAT = "%m/%d/%Y %I:%M:%S %p"


def configure_logging(level: Union[int, str] = logging.INFO,
                      log_file: Optional[str] = None) -> logging.Logger:
    """Attach console (and optionally file) handlers to the ``gridq`` logger."""
    logger = logging.getLogger("gridq")
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    # Reconfiguring replaces earlier handlers instead of stacking them
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(fmt)
    logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setFormatter(fmt)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
