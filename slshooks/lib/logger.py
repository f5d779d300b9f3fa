"""
Logging setup for the sls-hooks CLI.

Library code only creates module loggers; handlers are installed here, and
only by the command-line entry point. Log output goes to stderr so it never
mixes with the stdout of hook scripts.
"""

import logging
import sys
from typing import Optional

from slshooks.config import get_settings


def setup_logging(
    level: Optional[str] = None,
    format_string: Optional[str] = None,
) -> None:
    """Set up logging configuration."""
    settings = get_settings()

    log_level = getattr(logging, (level or settings.log_level).upper())
    log_format = format_string or settings.log_format

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear existing handlers
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(log_format))
    root_logger.addHandler(console_handler)

