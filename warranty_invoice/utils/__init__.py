"""
Utility Module for the Warranty Invoice Extraction Pipeline.

This module provides common utilities used across all other modules:
    - Logging configuration
    - Exception hierarchy
    - File helpers
"""

from .logger import setup_logger, setup_logger_from_config, get_logger, set_level
from .helpers import (
    ensure_directory,
    format_file_size,
    get_file_extension,
    safe_filename,
)

__all__ = [
    'setup_logger',
    'setup_logger_from_config',
    'get_logger',
    'set_level',
    'ensure_directory',
    'format_file_size',
    'get_file_extension',
    'safe_filename',
]
