"""
Common Utility Functions

Provides helpers shared by the extractor modules:
- External command execution
- Directory handling
- Size and duration formatting
"""

import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple, Union


def run_command(command: List[str], cwd: Optional[str] = None,
                timeout: int = 30) -> Tuple[bool, str, str]:
    """
    Run a system command and return result

    Args:
        command: Command and arguments as list
        cwd: Working directory
        timeout: Timeout in seconds

    Returns:
        Tuple of (success, stdout, stderr)
    """
    try:
        result = subprocess.run(
            command,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False
        )

        return (
            result.returncode == 0,
            result.stdout,
            result.stderr
        )

    except subprocess.TimeoutExpired:
        return (False, "", f"Command timed out after {timeout} seconds")
    except FileNotFoundError:
        return (False, "", f"Command not found: {command[0]}")
    except OSError as e:
        return (False, "", str(e))


def command_exists(command: str) -> bool:
    """Check if a command exists in system PATH (or is an executable path)"""
    return shutil.which(command) is not None


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it if necessary

    Args:
        path: Directory path

    Returns:
        Path object for the directory
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def format_size(size_bytes: int) -> str:
    """
    Format byte size in human-readable format

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB")
    """
    if size_bytes == 0:
        return "0 B"

    size_names = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    size = float(size_bytes)

    while size >= 1024 and i < len(size_names) - 1:
        size /= 1024.0
        i += 1

    if i == 0:
        return f"{size_bytes} {size_names[i]}"
    return f"{size:.1f} {size_names[i]}"


def format_duration(seconds: float) -> str:
    """
    Format duration in human-readable format

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string (e.g., "2m 15s")
    """
    if seconds < 0:
        return "0s"

    parts = []

    if seconds >= 3600:
        hours = int(seconds // 3600)
        parts.append(f"{hours}h")
        seconds %= 3600

    if seconds >= 60:
        minutes = int(seconds // 60)
        parts.append(f"{minutes}m")
        seconds %= 60

    if seconds >= 1:
        parts.append(f"{int(seconds)}s")
    elif not parts:
        parts.append(f"{seconds:.1f}s")

    return " ".join(parts)
