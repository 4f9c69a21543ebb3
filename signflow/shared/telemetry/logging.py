"""Logging setup shared by the API process and scripts/run_sweepers.py."""

import logging
import sys

from signflow.core.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# pypdf warns once per malformed xref entry; uploaded PDFs trigger it often.
QUIET_LOGGERS = ("pypdf", "reportlab", "python_multipart")


def setup_logging(level: int | None = None) -> None:
    """Configure the root logger on stdout.

    Level defaults to DEBUG when settings.debug is set, otherwise INFO.
    Third-party PDF and multipart loggers never go below WARNING.
    """
    if level is None:
        level = logging.DEBUG if get_settings().debug else logging.INFO
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """Module logger; call with __name__."""
    return logging.getLogger(name)
