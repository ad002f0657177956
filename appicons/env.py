"""
Environment Management Module

Uses python-dotenv for environment variable management.

Usage:
    from appicons.env import env

    print(env.converter)
    print(env.logs_dir)
    print(env.tool_timeout)
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError


APPICONS_VERSION = '1.0.0'

CONVERTERS = ('pillow', 'sips')


def load_env_file(env_file: Optional[str] = None) -> Optional[Path]:
    """
    Load variables from a .env file without overriding the real environment

    Args:
        env_file: Explicit file; defaults to APPICONS_ENV_FILE, then ./.env

    Returns:
        Path of the loaded file, or None if there was nothing to load
    """
    candidate = env_file or os.getenv('APPICONS_ENV_FILE')
    path = Path(candidate) if candidate else Path.cwd() / '.env'
    if not path.is_file():
        return None
    load_dotenv(path)
    return path


def _positive_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value


class EnvConfig:
    """Environment configuration object"""

    @property
    def logs_dir(self) -> str:
        logs_dir = os.getenv('APPICONS_PATHS_LOGS_DIR', '~/.appicons/logs')
        return str(Path(logs_dir).expanduser())

    @property
    def log_level(self) -> str:
        return os.getenv('APPICONS_LOGGING_CONSOLE_LEVEL', 'INFO')

    @property
    def log_file_enabled(self) -> bool:
        return os.getenv('APPICONS_LOGGING_FILE_ENABLED', 'false').lower() == 'true'

    @property
    def log_file_level(self) -> str:
        return os.getenv('APPICONS_LOGGING_FILE_LEVEL', 'DEBUG')

    @property
    def log_simple_format(self) -> bool:
        return os.getenv('APPICONS_LOGGING_CONSOLE_SIMPLE_FORMAT', 'true').lower() == 'true'

    @property
    def log_max_files(self) -> int:
        return int(os.getenv('APPICONS_LOGGING_MAX_FILES', '5'))

    @property
    def log_max_size(self) -> str:
        return os.getenv('APPICONS_LOGGING_MAX_SIZE', '10MB')

    @property
    def converter(self) -> str:
        """Legacy icon converter: pillow or sips"""
        name = os.getenv('APPICONS_CONVERTER', 'pillow').strip().lower()
        if name not in CONVERTERS:
            raise ConfigurationError(
                f"APPICONS_CONVERTER must be one of {', '.join(CONVERTERS)}, got {name!r}"
            )
        return name

    @property
    def render_helper(self) -> Optional[str]:
        helper = os.getenv('APPICONS_RENDER_HELPER', '').strip()
        return helper or None

    @property
    def render_size(self) -> int:
        return _positive_int('APPICONS_RENDER_SIZE', '1024')

    @property
    def tool_timeout(self) -> int:
        """Seconds allowed for one external tool call"""
        return _positive_int('APPICONS_TOOL_TIMEOUT', '60')

    @property
    def report_file(self) -> Optional[str]:
        report = os.getenv('APPICONS_REPORT_FILE', '').strip()
        return report or None

    @property
    def version(self) -> str:
        return APPICONS_VERSION

    def validate(self) -> None:
        """Touch every checked property so bad values surface at start-up"""
        self.converter
        self.render_size
        self.tool_timeout


# Global env object
env = EnvConfig()

load_env_file()


def get_config_summary() -> dict:
    """Get configuration summary"""
    return {
        'converter': env.converter,
        'render_helper': env.render_helper,
        'render_size': env.render_size,
        'tool_timeout': env.tool_timeout,
        'report_file': env.report_file,
        'paths': {
            'logs_dir': env.logs_dir
        }
    }
