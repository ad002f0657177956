"""
Unified Logging System

Provides centralized logging for the icon extractor with:
- Colorized console output
- Optional rotating log file
- Configurable levels and formats driven by EnvConfig

Every module logs through a child of the ``appicons`` package logger, so
handlers are attached once and shared.
"""

import sys
import logging
import logging.handlers
from pathlib import Path
from typing import Optional

import colorama
from colorama import Fore, Style

from ..env import env

colorama.init()


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for console output"""

    COLORS = {
        'DEBUG': Fore.CYAN,
        'INFO': '',  # No color for INFO logs (default terminal color)
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.RED + Style.BRIGHT,
    }

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None,
                 use_color: bool = True):
        super().__init__(fmt, datefmt)
        self.use_color = use_color

    def format(self, record):
        formatted = super().format(record)

        if not self.use_color:
            return formatted

        color = self.COLORS.get(record.levelname, '')
        if not color:
            return formatted
        return f"{color}{formatted}{Style.RESET_ALL}"


class AppIconsLogger:
    """Configures the package logger that every module logs through"""

    ROOT_NAME = 'appicons'

    _initialized: bool = False
    _log_dir: Optional[Path] = None
    _console_level: int = logging.INFO
    _file_level: int = logging.DEBUG
    _console_simple_format: bool = True
    _file_enabled: bool = False

    @classmethod
    def _parse_size(cls, size_str: str) -> int:
        """Parse size string like '10MB' to bytes"""
        size_str = size_str.upper().strip()
        multipliers = {
            'GB': 1024 * 1024 * 1024,
            'MB': 1024 * 1024,
            'KB': 1024,
            'B': 1,
        }

        for suffix, multiplier in multipliers.items():
            if size_str.endswith(suffix):
                number_str = size_str[:-len(suffix)].strip()
                try:
                    return int(float(number_str) * multiplier)
                except ValueError:
                    break

        # Default to 10MB if parsing fails
        return 10 * 1024 * 1024

    @classmethod
    def initialize(cls, log_dir: Optional[str] = None,
                   console_level: Optional[str] = None,
                   file_level: Optional[str] = None,
                   console_simple_format: Optional[bool] = None,
                   file_enabled: Optional[bool] = None) -> None:
        """Initialize the logging system, falling back to EnvConfig values"""
        if cls._initialized:
            return

        cls._log_dir = Path(log_dir) if log_dir else Path(env.logs_dir)
        cls._console_level = getattr(logging, (console_level or env.log_level).upper())
        cls._file_level = getattr(logging, (file_level or env.log_file_level).upper())
        cls._console_simple_format = (console_simple_format
            if console_simple_format is not None else env.log_simple_format)
        cls._file_enabled = (file_enabled
            if file_enabled is not None else env.log_file_enabled)

        root = logging.getLogger(cls.ROOT_NAME)
        # Handlers do the actual filtering
        root.setLevel(logging.DEBUG)
        root.handlers.clear()
        root.addHandler(cls._console_handler())
        if cls._file_enabled:
            cls._log_dir.mkdir(parents=True, exist_ok=True)
            root.addHandler(cls._file_handler())
        root.propagate = False

        cls._initialized = True

    @classmethod
    def _console_handler(cls) -> logging.Handler:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(cls._console_level)
        use_color = sys.stdout.isatty()
        if cls._console_simple_format:
            formatter = ColoredFormatter('%(message)s', use_color=use_color)
        else:
            formatter = ColoredFormatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%H:%M:%S',
                use_color=use_color
            )
        handler.setFormatter(formatter)
        return handler

    @classmethod
    def _file_handler(cls) -> logging.Handler:
        handler = logging.handlers.RotatingFileHandler(
            cls._log_dir / 'appicons.log',
            maxBytes=cls._parse_size(env.log_max_size),
            backupCount=env.log_max_files,
            encoding='utf-8'
        )
        handler.setLevel(cls._file_level)
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
        ))
        return handler

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """
        Get a logger below the package logger

        Args:
            name: Logger name (usually module name)

        Returns:
            Logger whose records reach the package handlers
        """
        if not cls._initialized:
            cls.initialize()

        if name != cls.ROOT_NAME and not name.startswith(cls.ROOT_NAME + '.'):
            name = f"{cls.ROOT_NAME}.{name}"
        return logging.getLogger(name)

    @classmethod
    def set_level(cls, level: str, target: str = 'both') -> None:
        """
        Change logging level of the configured handlers

        Args:
            level: New log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            target: Target to update ('console', 'file', 'both')
        """
        new_level = getattr(logging, level.upper())

        if target in ('console', 'both'):
            cls._console_level = new_level
        if target in ('file', 'both'):
            cls._file_level = new_level

        for handler in logging.getLogger(cls.ROOT_NAME).handlers:
            # RotatingFileHandler is itself a StreamHandler subclass
            is_file = isinstance(handler, logging.handlers.RotatingFileHandler)
            if target == 'both':
                handler.setLevel(new_level)
            elif target == 'console' and not is_file:
                handler.setLevel(new_level)
            elif target == 'file' and is_file:
                handler.setLevel(new_level)

    @classmethod
    def reset(cls) -> None:
        """Remove the package handlers so the next call re-reads configuration"""
        root = logging.getLogger(cls.ROOT_NAME)
        for handler in list(root.handlers):
            handler.close()
            root.removeHandler(handler)
        cls._initialized = False
        cls._log_dir = None


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance

    Example:
        logger = get_logger(__name__)
    """
    return AppIconsLogger.get_logger(name)


def setup_logging(log_dir: Optional[str] = None,
                  console_level: Optional[str] = None,
                  file_level: Optional[str] = None,
                  console_simple_format: Optional[bool] = None,
                  file_enabled: Optional[bool] = None) -> None:
    """
    Initialize the logging system

    Args:
        log_dir: Directory for log files (uses env.logs_dir if None)
        console_level: Console logging level (uses env.log_level if None)
        file_level: File logging level (uses env.log_file_level if None)
        console_simple_format: Message-only console output (uses env.log_simple_format if None)
        file_enabled: Enable file logging (uses env.log_file_enabled if None)
    """
    AppIconsLogger.initialize(log_dir, console_level, file_level,
                              console_simple_format, file_enabled)


def set_log_level(level: str, target: str = 'both') -> None:
    """Change logging level of the package handlers"""
    AppIconsLogger.set_level(level, target)
