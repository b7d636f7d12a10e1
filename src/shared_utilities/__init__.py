"""
Common utilities shared across tools
"""

from .base_output_formatter import BaseOutputFormatter, OutputFormat, TableFormatter
from .logging_config import configure_logging, get_logger, get_logging_manager
from .output_manager import OutputManager, release_logo_dirname

__all__ = [
    "configure_logging",
    "get_logger",
    "get_logging_manager",
    "BaseOutputFormatter",
    "OutputFormat",
    "TableFormatter",
    "OutputManager",
    "release_logo_dirname",
]
