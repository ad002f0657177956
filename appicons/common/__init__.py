"""
Shared helpers for the icon extractor

Provides:
- Unified colored logging (logger)
- Command execution and formatting utilities (utils)
"""

from .logger import get_logger, setup_logging, set_log_level
from .utils import run_command, command_exists, ensure_directory, format_size, format_duration

__all__ = [
    'get_logger',
    'setup_logging',
    'set_log_level',
    'run_command',
    'command_exists',
    'ensure_directory',
    'format_size',
    'format_duration',
]
