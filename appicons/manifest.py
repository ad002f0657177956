"""
Bundle manifest (Info.plist) access
"""

import plistlib
from pathlib import Path
from typing import Any, Dict, Optional, Union
from xml.parsers.expat import ExpatError

from .common.logger import get_logger

logger = get_logger(__name__)

ICON_FILE_KEY = 'CFBundleIconFile'


class ManifestReader:
    """Reads string values from a bundle's Contents/Info.plist"""

    def load(self, bundle_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Parse the manifest of a bundle

        Returns:
            The manifest dictionary, or an empty dict when the file is
            missing, unreadable or not a dictionary plist
        """
        manifest = Path(bundle_path) / 'Contents' / 'Info.plist'
        try:
            with open(manifest, 'rb') as f:
                data = plistlib.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError, ExpatError) as e:
            logger.debug(f"Unreadable manifest {manifest}: {e}")
            return {}

        if not isinstance(data, dict):
            return {}
        return data

    def read(self, bundle_path: Union[str, Path], key: str) -> Optional[str]:
        """Return the string value of ``key``, or None if absent or not a string"""
        value = self.load(bundle_path).get(key)
        if isinstance(value, str):
            return value
        return None
