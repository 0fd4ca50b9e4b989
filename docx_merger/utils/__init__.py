"""
Utility helpers - logging configuration and rich console output.
"""

from .logger import configure_logging, get_logger, set_log_level
from .rich_logger import print_table, setup_logging

__all__ = [
    "get_logger",
    "configure_logging",
    "set_log_level",
    "setup_logging",
    "print_table",
]
